import networkx as nx

from semiweak.config import STRONG, WEAK, UNINITIALIZED
from semiweak.graph import build_tree, to_networkx, strength_counts
from semiweak.instance import Instance, is_accessible


def _shape(root):
    return [(i.name, i.parent.name) for i in root.get_descendants()]


def test_build_tree_size_and_reachability():
    root, instances = build_tree(25, seed=3)
    assert len(instances) == 25
    assert len(root.get_descendants()) == 25
    assert all(is_accessible(i, root) for i in instances)


def test_build_tree_is_deterministic_per_seed():
    r1, _ = build_tree(30, seed=7)
    r2, _ = build_tree(30, seed=7)
    r3, _ = build_tree(30, seed=8)
    assert _shape(r1) == _shape(r2)
    assert _shape(r1) != _shape(r3)


def test_build_tree_under_given_root(root):
    same, instances = build_tree(5, seed=1, root=root)
    assert same is root
    assert instances[0].parent is root


def test_to_networkx_snapshot(tree_cache, sched, root):
    _, instances = build_tree(12, seed=2, root=root)
    refs = [tree_cache.get_or_create(i) for i in instances]
    sched.run_pending()
    detached = instances[-1]
    detached.parent = None

    G = to_networkx(root, tree_cache, extra=[detached])
    assert G.number_of_nodes() == 13
    assert G.nodes[id(root)]['strength'] is None
    assert G.nodes[id(detached)]['accessible'] is False
    assert G.nodes[id(detached)]['strength'] == WEAK
    assert G.nodes[id(instances[0])]['strength'] == STRONG
    tree = G.subgraph(nx.descendants(G, id(root)) | {id(root)})
    assert nx.is_arborescence(tree)
    assert len(refs) == 12


def test_to_networkx_without_cache(root):
    a = Instance('A', parent=root)
    G = to_networkx(root)
    assert G.nodes[id(a)]['strength'] is None
    assert G.nodes[id(a)]['name'] == 'A'
    assert list(G.edges()) == [(id(root), id(a))]


def test_strength_counts(flag_cache, sched):
    from conftest import Target
    keep = [Target('a'), Target('b', attached=False), Target('c')]
    refs = [flag_cache.get_or_create(t) for t in keep]
    assert strength_counts(refs)[UNINITIALIZED] == 3
    sched.run_pending()
    counts = strength_counts(refs)
    assert counts[STRONG] == 2 and counts[WEAK] == 1 and counts['collected'] == 0
    del keep[1]
    counts = strength_counts(refs)
    assert counts['collected'] == 1
