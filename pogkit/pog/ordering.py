"""
ordering
========

Topological ordering, hop distances and shortest paths on a partial
order graph.
"""

from collections import deque

import numpy as np

from .._logging import _gen_logger

logger = _gen_logger(__name__)


def _visit(pog, root, completed, order):
    """ Explicit-stack depth-first search from ``root``, prepending nodes on completion. """
    end_id = pog.end_id
    started = set()
    stack = [root]
    while stack:
        node_id = stack.pop()
        if node_id in completed:
            continue
        if node_id in started:
            started.discard(node_id)
            completed.add(node_id)
            order.appendleft(node_id)
            continue

        successors = []
        for succ in pog.node(node_id).next_ids():
            if succ == end_id or succ in completed:
                continue
            if succ in started:
                raise ValueError(f"Cycle detected through nodes {node_id} -> {succ}.")
            successors.append(succ)

        started.add(node_id)
        stack.append(node_id)
        # first successor ends up on top of the stack
        stack.extend(reversed(successors))


def topological_sort(pog, include_sentinels=False):
    """ Order the nodes so that every edge points forward.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    include_sentinels : `bool`
        If `True`, the virtual start and end are added at both ends.

    Returns
    -------
    order : `list` [`int`]
        One valid topological order of the real nodes.

    Raises
    ------
    ValueError
        If the graph contains a cycle.
    """
    completed = set()
    order = deque()
    for node_id in pog.node_ids():
        if node_id not in completed:
            _visit(pog, node_id, completed, order)

    order = list(order)
    if include_sentinels:
        order = [pog.start_id] + order + [pog.end_id]
    return order


def min_distance(pog, source):
    """ Minimum number of edges from ``source`` to every real node.

    Returns
    -------
    distances : `dict` [`int`, `float`]
        Hop count keyed by real node id (``source`` included when it is a
        real node), `numpy.inf` for nodes not reachable from ``source``.
    """
    pog.node(source)
    order = topological_sort(pog, include_sentinels=True)
    dist = {node_id: np.inf for node_id in order}
    dist[source] = 0

    for node_id in order[order.index(source):]:
        if dist[node_id] == np.inf:
            continue
        for succ in pog.node(node_id).next_ids():
            if dist[node_id] + 1 < dist[succ]:
                dist[succ] = dist[node_id] + 1

    return {node_id: dist[node_id] for node_id in pog.node_ids()}


def shortest_path(pog, source, target, exclude=(), allow_direct=True):
    """ Breadth-first search for the shortest path between two nodes.

    Candidate paths are pruned when they revisit a node, enter an excluded
    node, reach the virtual end before ``target``, or leave the window of
    topological ranks between ``source`` and ``target``.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    source, target : `int`
        Node ids (sentinels allowed).
    exclude : iterable of `int`
        Node ids the path may not enter.
    allow_direct : `bool`
        If `False`, the single edge ``source -> target`` is not accepted
        and a detour is searched for.

    Returns
    -------
    path : {`list` [`int`], `None`}
        Node ids from ``source`` to ``target``, `None` if there is no path.
    """
    pog.node(source)
    pog.node(target)
    exclude = set(exclude)
    order = topological_sort(pog, include_sentinels=True)
    rank = {node_id: ix for ix, node_id in enumerate(order)}
    low, high = rank[source], rank[target]
    adjacency = {node_id: pog.node(node_id).next_ids() for node_id in order}

    queue = deque([[source]])
    while queue:
        path = queue.popleft()
        for succ in adjacency[path[-1]]:
            if succ in path or succ in exclude:
                continue
            if succ == target:
                if len(path) == 1 and not allow_direct:
                    continue
                return path + [succ]
            if succ == pog.end_id:
                continue
            if rank[succ] < low or rank[succ] > high:
                continue
            queue.append(path + [succ])

    logger.debug(f"No path from {source} to {target}.")
    return None
