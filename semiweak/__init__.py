"""semiweak — references that are strong while the target sits in its ownership graph.

Call `run_pending()` from the host loop so new references get their first
strength evaluation (see `semiweak.scheduling`).
"""
from .cache import RefCache, semiweak_ref
from .config import UNINITIALIZED, STRONG, WEAK
from .errors import InvalidArgument, ParentLocked
from .instance import Instance, DataModel, game, is_accessible, ancestry_changed
from .ref import SemiWeakRef, StrongSlot, WeakSlot
from .scheduling import DeferredScheduler, AsyncioScheduler, scheduler, defer, run_pending

# simulator / montecarlo / plotting pull in numpy, networkx and matplotlib;
# import them from their modules directly.
