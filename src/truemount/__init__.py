"""truemount: lifecycle primitives that survive diagnostic remounts."""

from importlib.metadata import version as _version

__version__ = _version("truemount")

from truemount.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    get_scheduler,
    set_scheduler,
)
from truemount.cell import SyncedValueCell, create_synced_value_cell
from truemount.generation import GenerationTracker
from truemount._deferred import DeferredCheck, normalize_cleanup, run_if_current
from truemount.unmount import TrueUnmountCallback, on_true_unmount
from truemount.effect import EffectState, TrueEffect, run_true_effect
from truemount.component import Component, LifecycleError
# textual NOT auto-imported — opt-in only

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "get_scheduler",
    "set_scheduler",
    "SyncedValueCell",
    "create_synced_value_cell",
    "GenerationTracker",
    "DeferredCheck",
    "normalize_cleanup",
    "run_if_current",
    "TrueUnmountCallback",
    "on_true_unmount",
    "EffectState",
    "TrueEffect",
    "run_true_effect",
    "Component",
    "LifecycleError",
]
