import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from matplotlib.lines import Line2D

from .dot import fill_colour
from .._logging import _gen_logger

logger = _gen_logger(__name__)


def layered_layout(pog, include_sentinels=False, sep=1.):
    """ Node positions with the x-coordinate given by the hop distance from the start.

    Nodes at the same distance are stacked vertically, centered on zero,
    in topological order.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    include_sentinels : `bool`
        If `True`, include positions of the virtual start and end.
    sep : `float`
        Vertical separation between stacked nodes.

    Returns
    -------
    pos : `dict` [`int`, `numpy.ndarray`]
        Position of each node keyed by id.
    """
    dist = pog.min_distance(pog.start_id)
    layers = {}
    for node_id in pog.topological_sort():
        d = dist[node_id]
        # nodes not reachable from the start go after the last layer
        layer = int(d) if np.isfinite(d) else -1
        layers.setdefault(layer, []).append(node_id)

    if -1 in layers:
        unreachable = layers.pop(-1)
        layers[max(layers, default=0) + 1] = unreachable

    pos = {}
    for layer, members in layers.items():
        offset = 0.5 * sep * (len(members) - 1)
        for ix, node_id in enumerate(members):
            pos[node_id] = np.array([float(layer), offset - sep * ix])

    if include_sentinels:
        pos[pog.start_id] = np.array([0., 0.])
        pos[pog.end_id] = np.array([float(max(layers, default=0) + 1), 0.])
    return pos


def plot_pog(pog, pos=None, ax=None,
             include_sentinels=False,
             with_node_labels=True,
             with_edge_labels=False,
             node_size=600,
             node_color=None,
             edge_width_scale=4.,
             edge_color='gray',
             consensus_color='tab:red',
             show_consensus=True,
             node_font_size=12,
             edge_font_size=8,
             figsize=(10, 4),
             ):
    """ Draw a partial order graph.

    Nodes are filled with the Clustal colour of their resolved base (white
    if unresolved), edge widths are proportional to support, and consensus
    edges are highlighted.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    pos : `dict`, optional
        Node positions, computed with :func:`layered_layout` if not specified.
    ax : Matplotlib Axes object, optional
        Draw the graph in the specified Matplotlib axes.
    include_sentinels : `bool`
        If `True`, draw the virtual start and end.
    with_{node,edge}_labels : `bool`
        Set to `True` to draw labels on the nodes (characters) and edges (support percentage).
    node_size : scalar
        Size of nodes.
    node_color : {`None`, color, `list`}
        Node colors, by default the Clustal colour of each node's base.
    edge_width_scale : `float`
        Width of an edge carrying every sequence.
    edge_color : color
        Color of edges that are not on the consensus path.
    consensus_color : color
        Color of consensus edges.
    show_consensus : `bool`
        If `True`, highlight consensus edges and add a legend entry.
    {node,edge}_font_size : `int`
        Font size of labels.
    figsize : `tuple`
        Figure size, used if ``ax`` is `None`.

    Returns
    -------
    ax : Matplotlib Axes object
    """
    G = pog.to_networkx(include_sentinels=include_sentinels)

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    if pos is None:
        pos = layered_layout(pog, include_sentinels=include_sentinels)

    nodelist = list(G)
    if node_color is None:
        node_color = [fill_colour(G.nodes[n]['base']) for n in nodelist]

    edgelist = list(G.edges())
    edge_width = [max(edge_width_scale * G.edges[e]['weight'], 0.5) for e in edgelist]
    if show_consensus:
        edge_colors = [consensus_color if G.edges[e]['consensus'] else edge_color for e in edgelist]
    else:
        edge_colors = edge_color

    nx.draw_networkx_nodes(G, pos, ax=ax, nodelist=nodelist, node_size=node_size,
                           node_color=node_color, edgecolors='k', linewidths=1.)
    nx.draw_networkx_edges(G, pos, ax=ax, edgelist=edgelist, width=edge_width,
                           edge_color=edge_colors, node_size=node_size, arrows=True,
                           connectionstyle='arc3,rad=0.1')

    if with_node_labels:
        labels = {n: G.nodes[n]['label'] for n in nodelist}
        nx.draw_networkx_labels(G, pos, labels=labels, font_size=node_font_size, ax=ax)

    if with_edge_labels:
        edge_labels = {e: f"{100 * G.edges[e]['weight']:.0f}%" for e in edgelist}
        nx.draw_networkx_edge_labels(G, pos, edge_labels=edge_labels, font_size=edge_font_size, ax=ax)

    if show_consensus and any(G.edges[e]['consensus'] for e in edgelist):
        ax.legend(handles=[Line2D([0], [0], color=consensus_color, lw=2, label='consensus')],
                  loc='upper right')

    ax.set_axis_off()
    return ax


def plot_base_counts(pog, node_id, ax=None, figsize=(4, 3)):
    """ Bar plot of the characters contributed to a node.

    Returns
    -------
    ax : Matplotlib Axes object
    """
    counts = pog.view(node_id).base_counts()
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.bar(counts.index.tolist(), counts.values,
           color=[fill_colour(c) for c in counts.index], edgecolor='k')
    ax.set_xlabel('character')
    ax.set_ylabel('sequences')
    ax.set_title(f"node {node_id}")
    return ax
