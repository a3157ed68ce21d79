"""SemiWeakRef: a handle that is strong while its target is accessible and weak otherwise."""
import logging
import weakref
from dataclasses import dataclass

from .config import UNINITIALIZED, STRONG, WEAK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrongSlot:
    target: object

    def get(self):
        return self.target


@dataclass(frozen=True)
class WeakSlot:
    ref: weakref.ref

    def get(self):
        return self.ref()


class SemiWeakRef:
    """Stable handle to an object owned by a host ownership graph.

    The target starts in a StrongSlot with strength UNINITIALIZED. Each call to
    `update_strength()` consults the reachability predicate and keeps the
    target in a StrongSlot (predicate true) or a WeakSlot (predicate false).
    Once the target has been collected the reference is inert.
    """

    __slots__ = ('_slot', '_strength', '_is_accessible', 'evaluations', '__weakref__')

    def __init__(self, target, is_accessible):
        self._slot = StrongSlot(target)
        self._strength = UNINITIALIZED
        self._is_accessible = is_accessible
        self.evaluations = 0

    @property
    def instance(self):
        """The target, or None once it has been collected."""
        return self._slot.get()

    @property
    def strength(self):
        return self._strength

    @property
    def resolved(self):
        return self._strength != UNINITIALIZED

    def update_strength(self, *_event_args):
        """Re-evaluate reachability. Never raises."""
        target = self._slot.get()
        if target is None:
            return
        try:
            accessible = bool(self._is_accessible(target))
        except Exception:
            logger.debug('reachability check failed for %r; strength stays %s',
                         target, self._strength, exc_info=True)
            return
        self.evaluations += 1

        new_strength = STRONG if accessible else WEAK
        if new_strength == self._strength:
            return
        if accessible:
            self._slot = StrongSlot(target)
        else:
            self._slot = WeakSlot(weakref.ref(target))
        logger.debug('%r: %s -> %s', target, self._strength, new_strength)
        self._strength = new_strength

    def __repr__(self):
        return f'<SemiWeakRef {self._strength} to {self._slot.get()!r}>'
