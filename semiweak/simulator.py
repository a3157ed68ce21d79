"""ChurnSimulator — random ownership-graph churn with semi-weak reference invariant checks."""
import gc
from functools import partial

import numpy as np

from .cache import RefCache
from .config import (
    STRONG, WEAK, CHURN_OPS, MAX_HOLDERS, COLLECT_INTERVAL, N_NODES,
)
from .graph import build_tree, strength_counts
from .instance import is_accessible, ancestry_changed
from .scheduling import DeferredScheduler

OP_NAMES = list(CHURN_OPS)


def _top(inst):
    while inst.parent is not None:
        inst = inst.parent
    return inst


class ChurnSimulator:
    """Owns a private tree, cache and scheduler.

    The simulator itself only holds the semi-weak refs plus a bounded list of
    external holders, so an instance that is detached and not held must be
    collected at the next collection pass.
    """

    def __init__(self, n_nodes=N_NODES, seed=42):
        self.seed = seed
        self.rng = np.random.RandomState(seed)
        self.scheduler = DeferredScheduler()
        self.root, instances = build_tree(n_nodes, seed=seed)
        self.cache = RefCache(partial(is_accessible, root=self.root),
                              ancestry_changed, self.scheduler.defer)
        self.refs = [self.cache.get_or_create(inst) for inst in instances]
        del instances
        self.holders = []
        self.history = []
        self.violations = []
        self.op_probs = np.array([CHURN_OPS[op] for op in OP_NAMES], dtype=float)
        self.op_probs /= self.op_probs.sum()
        self.scheduler.run_pending()
        self.check_invariants(collected=False)

    # ── Instance pools (fresh lists each call; never stored) ──
    def _live(self):
        return [r.instance for r in self.refs if r.instance is not None]

    def _attached(self):
        return [i for i in self._live() if is_accessible(i, self.root)]

    def _pick(self, pool):
        if not pool:
            return None
        return pool[self.rng.randint(len(pool))]

    # ── Operations ──
    def _apply(self, op):
        """Apply one operation. Returns True if it changed anything."""
        if op == 'detach':
            inst = self._pick(self._attached())
            if inst is None:
                return False
            inst.parent = None
        elif op == 'reattach':
            detached = [h for h in self.holders
                        if not h.destroyed and not is_accessible(h, self.root)]
            inst = self._pick(detached)
            if inst is None:
                return False
            inst.parent = self._pick([self.root] + self._attached())
        elif op == 'move':
            inst = self._pick(self._attached())
            if inst is None:
                return False
            targets = [self.root] + [c for c in self._attached()
                                     if c is not inst and not c.is_descendant_of(inst)]
            inst.parent = self._pick(targets)
        elif op == 'destroy':
            inst = self._pick(self._attached())
            if inst is None:
                return False
            inst.destroy()
        elif op == 'hold':
            if len(self.holders) >= MAX_HOLDERS:
                return False
            candidates = [i for i in self._live()
                          if not any(h is i for h in self.holders)]
            inst = self._pick(candidates)
            if inst is None:
                return False
            self.holders.append(inst)
        elif op == 'release':
            if not self.holders:
                return False
            self.holders.pop(self.rng.randint(len(self.holders)))
        else:
            raise ValueError(f'unknown churn operation {op!r}')
        return True

    def step(self, op=None):
        """One churn step: operation, scheduler flush, periodic collection, checks."""
        if op is None:
            op = OP_NAMES[self.rng.choice(len(OP_NAMES), p=self.op_probs)]
        applied = self._apply(op)
        self.scheduler.run_pending()

        t = len(self.history)
        collected = (t + 1) % COLLECT_INTERVAL == 0
        if collected:
            gc.collect()
        n_violations = self.check_invariants(collected=collected)

        counts = strength_counts(self.refs)
        self.history.append({
            'step': t,
            'op': op,
            'applied': applied,
            'strong': counts[STRONG],
            'weak': counts[WEAK],
            'collected': counts['collected'],
            'held': len(self.holders),
            'cache_size': len(self.cache),
            'gc': collected,
            'violations': n_violations,
        })

    def run(self, n_steps):
        """Run simulation for n_steps."""
        for _ in range(n_steps):
            self.step()

    # ── Invariants ──
    def _violate(self, kind, detail):
        self.violations.append((len(self.history), kind, detail))

    def check_invariants(self, collected=False):
        """Check uniqueness, strength consistency, inertness and (after a
        collection) that no unheld detached instance survived. Returns the
        number of new violations."""
        before = len(self.violations)
        held_tops = {id(_top(h)) for h in self.holders}
        for ref in self.refs:
            target = ref.instance
            if target is None:
                strength = ref.strength
                ref.update_strength()
                if strength == STRONG:
                    self._violate('collected_strong', repr(ref))
                if ref.strength != strength:
                    self._violate('not_inert', repr(ref))
                continue
            if self.cache.get(target) is not ref:
                self._violate('uniqueness', repr(target))
            if self.cache.get_or_create(target) is not ref:
                self._violate('uniqueness', repr(target))
            accessible = is_accessible(target, self.root)
            expected = STRONG if accessible else WEAK
            if ref.strength != expected:
                self._violate('strength', f'{target!r}: {ref.strength} != {expected}')
            if collected and not accessible and id(_top(target)) not in held_tops:
                self._violate('leak', repr(target))
        return len(self.violations) - before

    def summary(self):
        counts = strength_counts(self.refs)
        return {
            'seed': self.seed,
            'steps': len(self.history),
            'strong': counts[STRONG],
            'weak': counts[WEAK],
            'collected': counts['collected'],
            'cache_size': len(self.cache),
            'violations': len(self.violations),
            'ops_applied': sum(1 for h in self.history if h['applied']),
        }
