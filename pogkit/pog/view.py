"""
view
====

Focused access to a single node of a :class:`pogkit.pog.graph.POGraph`.

A :class:`NodeView` is a small value (graph plus node id), so moving the
focus never disturbs other holders of a view on the same graph.
"""

from collections import Counter

import pandas as pd

from .distributions import Categorical, Distribution
from .elements import DEFAULT_COST


class NodeView:
    """ Handle on one node of a graph.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    node_id : `int`
        Id of the node in focus (sentinels allowed).
    """

    __slots__ = ('_pog', 'node_id')

    def __init__(self, pog, node_id):
        pog.node(node_id)
        self._pog = pog
        self.node_id = node_id

    def __repr__(self):
        return f"NodeView({self.node_id}, {self.label!r})"

    def __eq__(self, other):
        if not isinstance(other, NodeView):
            return NotImplemented
        return self._pog is other._pog and self.node_id == other.node_id

    def __hash__(self):
        return hash((id(self._pog), self.node_id))

    @property
    def _node(self):
        return self._pog.node(self.node_id)

    def with_focus(self, node_id):
        """ New view on the same graph, focused on ``node_id``. """
        return NodeView(self._pog, node_id)

    @property
    def is_start(self):
        return self.node_id == self._pog.start_id

    @property
    def is_end(self):
        return self.node_id == self._pog.end_id

    # characters

    @property
    def base(self):
        return self._node.base

    def set_base(self, base):
        if base is not None and (not isinstance(base, str) or len(base) != 1):
            raise ValueError("base must be a single character or None.")
        self._node.base = base

    @property
    def label(self):
        return self._pog.node_label(self.node_id)

    @property
    def seq_chars(self):
        """ Copy of the sequence id to character map. """
        return dict(self._node.seq_chars)

    def bases(self):
        """ Distinct contributed characters. """
        return self._node.unique_chars()

    def base_counts(self):
        """ Counts of contributed characters as a `pandas.Series`, most frequent first. """
        counts = Counter(self._node.seq_chars.values())
        return pd.Series(dict(counts.most_common()), name='count', dtype=int)

    def sequence_ids(self):
        return list(self._node.seq_chars)

    # distributions

    @property
    def distribution(self):
        """ The supplied distribution, or the empirical one of the contributed characters. """
        node = self._node
        if node.distribution is not None:
            return node.distribution
        if node.seq_chars:
            return Categorical.from_counts(node.seq_chars.values())
        return None

    def set_distribution(self, distribution):
        if distribution is not None and not isinstance(distribution, Distribution):
            raise TypeError("distribution must be a Distribution or None.")
        self._node.distribution = distribution

    # neighbours

    def next_ids(self, ordered=False, reciprocated=False):
        """ Successor ids.

        Parameters
        ----------
        ordered : `bool`
            If `True`, order by decreasing support (stable on ties).
        reciprocated : `bool`
            If `True`, only successors reached by a reciprocated edge.
        """
        edges = self._node.out_edges
        if reciprocated:
            edges = [e for e in edges if e.reciprocated]
        if ordered:
            edges = sorted(edges, key=lambda e: -e.support)
        return [e.target for e in edges]

    def previous_ids(self, ordered=False):
        edges = self._node.in_edges
        if ordered:
            edges = sorted(edges, key=lambda e: -e.support)
        return [e.target for e in edges]

    def next_weights(self):
        """ `dict` of successor id to support weight. """
        return {e.target: self._pog.edge_weight(e) for e in self._node.out_edges}

    def previous_weights(self):
        return {e.target: self._pog.edge_weight(e) for e in self._node.in_edges}

    def next_mapping(self):
        """ `dict` of successor id to the labels of the sequences taking the edge. """
        return {e.target: [self._pog.sequences.get(k, k) for k in e.sequences]
                for e in self._node.out_edges}

    def previous_mapping(self):
        return {e.target: [self._pog.sequences.get(k, k) for k in e.sequences]
                for e in self._node.in_edges}

    def num_next(self):
        return len(self._node.out_edges)

    def num_previous(self):
        return len(self._node.in_edges)

    def set_reciprocated(self, next_id, flag=True):
        self._pog.set_reciprocated(self.node_id, next_id, flag=flag)

    def is_reciprocated(self, next_id):
        return self._pog.edge(self.node_id, next_id).reciprocated

    def aligned_ids(self):
        return list(self._node.aligned_to or [])

    # consensus

    @property
    def is_consensus(self):
        return self._node.consensus

    def next_consensus_id(self):
        """ Successor on the consensus path, `None` if not on it. """
        for e in self._node.out_edges:
            if e.consensus:
                return e.target
        return None

    # search costs

    @property
    def cost(self):
        return self._node.cost

    def set_cost(self, cost):
        self._node.cost = cost

    def reset_cost(self):
        self._node.cost = DEFAULT_COST

    def transition_cost(self, next_id):
        return self._node.transition_cost.get(next_id, DEFAULT_COST)

    def transition_costs(self):
        return dict(self._node.transition_cost)

    def set_transition_cost(self, next_id, cost):
        self._pog.edge(self.node_id, next_id)
        self._node.transition_cost[next_id] = cost

    def clear_transition_costs(self):
        self._node.transition_cost = {}

    # removal

    def remove(self, config=None):
        """ Remove the node in focus, see :meth:`POGraph.remove_node`. """
        return self._pog.remove_node(self.node_id, config=config)

    def remove_next_transition(self, next_id, config=None):
        return self._pog.remove_transition(self.node_id, next_id, config=config)

    def remove_previous_transition(self, previous_id, config=None):
        return self._pog.remove_transition(previous_id, self.node_id, config=config)
