"""Ownership-tree construction and networkx snapshots."""
import numpy as np
import networkx as nx

from .config import STRONG, WEAK, UNINITIALIZED
from .instance import DataModel, Instance, is_accessible


def build_tree(n_nodes, seed=42, root=None):
    """Build a random hierarchy of `n_nodes` Instances under `root`.

    Parents are picked by preferential attachment on child count, so a few
    containers collect most children. Returns (root, instances) with
    instances in creation order.
    """
    rng = np.random.RandomState(seed)
    if root is None:
        root = DataModel()

    containers = [root]
    instances = []
    for i in range(n_nodes):
        # ── Preferential attachment: weight = children + 1 ──
        weights = np.array([len(c._children) + 1 for c in containers], dtype=float)
        probs = weights / weights.sum()
        parent = containers[rng.choice(len(containers), p=probs)]
        inst = Instance(f'Node{i}', parent=parent)
        instances.append(inst)
        containers.append(inst)
    return root, instances


def to_networkx(root, cache=None, extra=()):
    """Directed parent→child snapshot of the tree under `root`.

    `extra` adds detached instances (and their subtrees) as separate
    components. Node attributes: name, accessible, strength.
    """
    G = nx.DiGraph()
    tops = [root] + [e for e in extra if e is not None]
    for top in tops:
        for inst in [top] + top.get_descendants():
            ref = cache.get(inst) if cache is not None else None
            G.add_node(id(inst), name=inst.name,
                       accessible=is_accessible(inst, root),
                       strength=ref.strength if ref is not None else None)
            if inst.parent is not None:
                G.add_edge(id(inst.parent), id(inst))
    return G


def strength_counts(refs):
    """Counts of refs per strength, plus refs whose target was collected."""
    counts = {STRONG: 0, WEAK: 0, UNINITIALIZED: 0, 'collected': 0}
    for ref in refs:
        if ref.instance is None:
            counts['collected'] += 1
        else:
            counts[ref.strength] += 1
    return counts
