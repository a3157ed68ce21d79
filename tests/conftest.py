import gc
from functools import partial

import pytest

from semiweak.cache import RefCache
from semiweak.events import Signal
from semiweak.instance import DataModel, is_accessible, ancestry_changed
from semiweak.scheduling import DeferredScheduler, scheduler


class Target:
    """Minimal host object: a reachability flag plus a change event."""

    def __init__(self, name, attached=True):
        self.name = name
        self.attached = attached
        self.changed = Signal(f'{name}.changed')

    def move(self, attached):
        self.attached = attached
        self.changed.fire()

    def __repr__(self):
        return f'<Target {self.name}>'


@pytest.fixture
def sched():
    return DeferredScheduler()


@pytest.fixture
def flag_cache(sched):
    """Cache over Target objects: predicate reads the flag, event is `changed`."""
    return RefCache(lambda t: t.attached, lambda t: t.changed, sched.defer)


@pytest.fixture
def root():
    return DataModel('TestGame')


@pytest.fixture
def tree_cache(root, sched):
    """Cache over Instances, reachability measured from a private root."""
    return RefCache(partial(is_accessible, root=root), ancestry_changed, sched.defer)


@pytest.fixture
def global_scheduler():
    yield scheduler
    scheduler.run_pending()
    gc.collect()
