"""Identity-keyed cache guaranteeing one SemiWeakRef per live target."""
import logging
import weakref

from . import instance as _instance
from .errors import InvalidArgument
from .ref import SemiWeakRef
from .scheduling import defer as _default_defer

logger = logging.getLogger(__name__)


def _entry_remover(refs, key):
    """Weakref callback dropping `refs[key]` once its target dies.

    Holds the dict, never the cache or the target.
    """
    def remove(wref):
        entry = refs.get(key)
        if entry is not None and entry[0] is wref:
            del refs[key]
    return remove


class RefCache:
    """Map id(target) → (weakref to target, SemiWeakRef).

    Lookups go by identity, so targets that compare equal still get their own
    ref. Refs are held strongly, so while a ref is STRONG its entry keeps the
    target alive; the entry only goes away once the ref has turned WEAK and
    nothing else references the target. The map is therefore bounded by the
    number of live, referenced targets.
    """

    def __init__(self, is_accessible, changed_event, defer):
        self._refs = {}
        self._is_accessible = is_accessible
        self._changed_event = changed_event
        self._defer = defer

    def _lookup(self, target):
        entry = self._refs.get(id(target))
        # a recycled id from a dead target reads back a different object
        if entry is not None and entry[0]() is target:
            return entry[1]
        return None

    def get_or_create(self, target):
        if target is None:
            raise InvalidArgument('cannot take a semi-weak reference to None')
        ref = self._lookup(target)
        if ref is not None:
            return ref

        key = id(target)
        try:
            wref = weakref.ref(target, _entry_remover(self._refs, key))
        except TypeError as exc:
            raise InvalidArgument(f'{type(target).__name__} object cannot be '
                                  f'weakly referenced') from exc
        # Subscribing validates the target before anything is stored.
        event = self._changed_event(target)
        ref = SemiWeakRef(target, self._is_accessible)
        event.connect(ref.update_strength)
        self._defer(ref.update_strength)
        self._refs[key] = (wref, ref)
        logger.debug('created %r (%d cached)', ref, len(self._refs))
        return ref

    def get(self, target):
        """Existing ref for `target`, or None. Never creates."""
        return self._lookup(target)

    def refs(self):
        return [ref for _, ref in list(self._refs.values())]

    def __contains__(self, target):
        return self._lookup(target) is not None

    def __len__(self):
        return len(self._refs)


# Process-wide cache over the primary ownership graph
cache = RefCache(_instance.is_accessible, _instance.ancestry_changed, _default_defer)


def semiweak_ref(target):
    """Return the unique SemiWeakRef for `target`, creating it on first request.

    The first strength evaluation runs on the process-wide scheduler; see
    `semiweak.scheduling`.
    """
    return cache.get_or_create(target)
