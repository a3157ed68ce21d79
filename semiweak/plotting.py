"""Visualization of semi-weak reference state."""
import networkx as nx
import matplotlib.pyplot as plt

from .config import STRONG, WEAK
from .graph import to_networkx

STRENGTH_COLORS = {STRONG: '#2ecc71', WEAK: '#e74c3c'}
DETACHED_COLOR = '#7f8c8d'
ROOT_COLOR = '#3498db'


def setup_style():
    """Configure matplotlib dark_background style."""
    plt.style.use('dark_background')


def _tree_layout(G, roots):
    """Layered layout: depth on y, leaf order on x, one band per component."""
    pos = {}
    x = 0
    for root in roots:
        depth = {root: 0}
        for parent, child in nx.bfs_edges(G, root):
            depth[child] = depth[parent] + 1
        for node in nx.dfs_preorder_nodes(G, root):
            pos[node] = (x, -depth[node])
            x += 1
        x += 2
    return pos


def visualize_refs(sim, title='Semi-weak references', ax=None):
    """Tree under sim.root plus held detached subtrees.
    Node color: strong green, weak red; detached nodes drawn with grey edges."""
    detached = [h for h in sim.holders if h.parent is None and h is not sim.root]
    G = to_networkx(sim.root, sim.cache, extra=detached)
    roots = [id(sim.root)] + [id(h) for h in detached]
    pos = _tree_layout(G, roots)

    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 7))
    else:
        fig = ax.figure

    colors = []
    edgecolors = []
    for n in G.nodes():
        data = G.nodes[n]
        if n == id(sim.root):
            colors.append(ROOT_COLOR)
        else:
            colors.append(STRENGTH_COLORS.get(data.get('strength'), DETACHED_COLOR))
        edgecolors.append('white' if data.get('accessible') else DETACHED_COLOR)

    nx.draw_networkx_edges(G, pos, ax=ax, arrows=False, edge_color='#555555', width=0.8)
    nx.draw_networkx_nodes(G, pos, ax=ax, node_color=colors, edgecolors=edgecolors,
                           node_size=120, linewidths=1.0)
    ax.set_title(title)
    ax.axis('off')
    return fig


def plot_history(sim, title='Reference strength over time', ax=None):
    """Strong / weak / collected counts per simulation step."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    else:
        fig = ax.figure
    steps = [h['step'] for h in sim.history]
    ax.plot(steps, [h['strong'] for h in sim.history], color=STRENGTH_COLORS[STRONG], label='strong')
    ax.plot(steps, [h['weak'] for h in sim.history], color=STRENGTH_COLORS[WEAK], label='weak')
    ax.plot(steps, [h['collected'] for h in sim.history], color=DETACHED_COLOR,
            linestyle='--', label='collected')
    gc_steps = [h['step'] for h in sim.history if h['gc']]
    for t in gc_steps:
        ax.axvline(t, color='#444444', linewidth=0.5, zorder=0)
    ax.set_xlabel('step')
    ax.set_ylabel('refs')
    ax.set_title(title)
    ax.legend(loc='upper right')
    return fig
