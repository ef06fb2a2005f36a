"""
consensus
=========

Greedy extraction of the best-supported sequence of a partial order graph.

The walk uses the "first reciprocated" heuristic: from each node it
follows the best-supported reciprocated outgoing edge if there is one, and
otherwise the best-supported edge; ties go to the edge listed first. It is
a single greedy pass and not a globally optimal path.
"""

from collections import Counter

from .._logging import _gen_logger, set_verbose
from .._utils import _desc_config, _docstring_parameter
from ..config import get_config
from .distributions import CATEGORICAL, MIXTURE, POINT

logger = _gen_logger(__name__)


def choose_next_edge(edges, prefer_reciprocated=True):
    """ Pick the edge to follow among ``edges`` (`None` if empty). """
    candidates = edges
    if prefer_reciprocated:
        reciprocated = [e for e in edges if e.reciprocated]
        if reciprocated:
            candidates = reciprocated

    best = None
    for edge in candidates:
        if best is None or edge.support > best.support:
            best = edge
    return best


@_docstring_parameter(desc_config=_desc_config)
def consensus_path(pog, config=None):
    """\
    Walk from virtual start to virtual end and mark the chosen nodes and edges.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph. Previous consensus marks are cleared.
    {desc_config}

    Returns
    -------
    path : `list` [`int`]
        Ids of the real nodes on the consensus path.

    Raises
    ------
    ValueError
        If the walk reaches a node without a way forward.
    """
    config = get_config(config)
    if config.verbose is not None:
        set_verbose(logger, config.verbose)
    pog.clear_consensus()

    node = pog.node(pog.start_id)
    visited = {node.id}
    path = []
    while node.id != pog.end_id:
        node.consensus = True
        edges = [e for e in node.out_edges if e.target not in visited]
        edge = choose_next_edge(edges, prefer_reciprocated=config.prefer_reciprocated)
        if edge is None:
            raise ValueError(f"Consensus walk is stuck at node {node.id}, no way forward to the end.")

        edge.consensus = True
        nxt = pog.node(edge.target)
        nxt.previous_edge(node.id).consensus = True
        node = nxt
        visited.add(node.id)
        if node.id != pog.end_id:
            path.append(node.id)

    node.consensus = True
    logger.debug(f"Consensus path of {len(path)} nodes.")
    return path


def node_character(node):
    """ Character emitted for a node on the consensus path.

    The resolved base if set, otherwise the mode of the node's distribution
    (categorical or point estimate), otherwise the most frequent contributed
    character, and 'X' if the node carries no information.

    Raises
    ------
    TypeError
        If the node's distribution is a continuous mixture.
    """
    if node.base is not None:
        return node.base
    dist = node.distribution
    if dist is not None:
        if dist.kind in (CATEGORICAL, POINT):
            return str(dist.mode())
        if dist.kind == MIXTURE:
            raise TypeError(f"Node {node.id} holds a continuous distribution, it has no character.")
        raise TypeError(f"Unrecognized distribution kind {dist.kind!r}.")
    if node.seq_chars:
        return Counter(node.seq_chars.values()).most_common(1)[0][0]
    return 'X'


def _gapped(pog, path, fill, emit):
    """ Lay out ``emit(node_id)`` along the path with ``fill`` in skipped columns. """
    out = []
    previous = pog.start_id
    for node_id in path + [pog.end_id]:
        out.extend([fill] * max(0, node_id - previous - 1))
        if node_id != pog.end_id:
            out.append(emit(node_id))
        previous = node_id
    return out


@_docstring_parameter(desc_config=_desc_config)
def consensus_sequence(pog, gappy=False, config=None):
    """\
    Consensus sequence of the graph.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    gappy : `bool`
        If `True`, insert one gap character per column skipped between
        consecutive consensus nodes (leading and trailing gaps included).
    {desc_config}

    Returns
    -------
    sequence : `str`
    """
    config = get_config(config)
    path = consensus_path(pog, config=config)
    if not gappy:
        return ''.join(node_character(pog.node(node_id)) for node_id in path)
    return ''.join(_gapped(pog, path, config.gap_char, lambda k: node_character(pog.node(k))))


def consensus_indices(pog, gappy=False, config=None):
    """ Node ids along the consensus path, `None` for skipped columns if ``gappy``. """
    path = consensus_path(pog, config=config)
    if not gappy:
        return path
    return _gapped(pog, path, None, lambda k: k)


def consensus_distributions(pog, gappy=False, config=None):
    """ Distribution of each consensus node (empirical if none was supplied). """
    path = consensus_path(pog, config=config)
    if not gappy:
        return [pog.view(k).distribution for k in path]
    return _gapped(pog, path, None, lambda k: pog.view(k).distribution)


def consensus_membership(pog):
    """ `dict` of real node id to its consensus flag, as set by the last walk. """
    return {node_id: node.consensus for node_id, node in pog.nodes.items()}
