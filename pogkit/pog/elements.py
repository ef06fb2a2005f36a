"""
elements
========

Node and edge records of a partial order graph and their local
mutation operations.

Edges reference the node at their far end by id, never by object, so a
graph can be copied record by record without following links.
"""

START_ID = -1
DEFAULT_COST = 10000


class Edge:
    """ Transition between two nodes, tagged with the sequences that take it.

    The same record type is used on both sides of a transition: in the
    outgoing list of ``u`` the edge ``u -> v`` has ``target == v`` and in the
    incoming list of ``v`` the matching edge has ``target == u``.

    Parameters
    ----------
    target : `int`
        Id of the node at the far end of the edge.
    sequences : iterable of `int`, optional
        Ids of sequences traversing the edge, kept in insertion order without repeats.
    reciprocated : `bool`
        `True` only if both directional scans of the transition data agree
        that the edge exists.
    weight : `float`, optional
        Cached support weight (fraction of all sequences).
    """

    __slots__ = ('target', '_sequences', 'reciprocated', 'consensus', 'weight')

    def __init__(self, target, sequences=None, reciprocated=False, weight=None):
        self.target = target
        self._sequences = dict.fromkeys(sequences) if sequences is not None else {}
        self.reciprocated = reciprocated
        self.consensus = False
        self.weight = weight

    def __repr__(self):
        return f"Edge(target={self.target}, sequences={self.sequences}, reciprocated={self.reciprocated})"

    @property
    def sequences(self):
        """ Sequence ids traversing the edge, in insertion order. """
        return list(self._sequences)

    @property
    def support(self):
        """ Number of sequences traversing the edge. """
        return len(self._sequences)

    def carries(self, seq_id):
        return seq_id in self._sequences

    def add_sequence(self, seq_id):
        self._sequences[seq_id] = None

    def remove_sequence(self, seq_id):
        self._sequences.pop(seq_id, None)

    def copy(self):
        edge = Edge(self.target, self._sequences, reciprocated=self.reciprocated,
                    weight=self.weight)
        edge.consensus = self.consensus
        return edge


class GraphNode:
    """ A candidate sequence position.

    Parameters
    ----------
    node_id : `int`
        Identity of the node. Real nodes are non-negative, the virtual start
        is ``-1`` and the virtual end is one past the last alignment column.
    base : `str`, optional
        Resolved character.

    Attributes
    ----------
    seq_chars : `dict` [`int`, `str`]
        Character contributed by each sequence passing through the node.
    out_edges : `list` [`Edge`]
        Outgoing edges, ordered by decreasing support.
    in_edges : `list` [`Edge`]
        Incoming edges in insertion order.
    aligned_to : {`None`, `list` [`int`]}
        Ids of mutually exclusive alternatives at the same rank.
    distribution : {`None`, `pogkit.pog.distributions.Distribution`}
        Character-state distribution supplied by the inference collaborator.
    consensus : `bool`
        Indicate if the node is on the consensus path.
    cost : `int`
        Auxiliary search cost used by ordering heuristics.
    transition_cost : `dict` [`int`, `int`]
        Cost of the transition to each successor id.
    """

    def __init__(self, node_id, base=None):
        self.id = node_id
        self.base = base
        self.seq_chars = {}
        self.out_edges = []
        self.in_edges = []
        self.aligned_to = None
        self.distribution = None
        self.consensus = False
        self.cost = DEFAULT_COST
        self.transition_cost = {}

    def __repr__(self):
        label = self.base if self.base is not None else ''.join(self.unique_chars())
        return f"GraphNode({self.id}, {label!r})"

    def add_sequence(self, seq_id, char):
        """ Record the character of a sequence, the first record wins. """
        if seq_id not in self.seq_chars:
            self.seq_chars[seq_id] = char

    def unique_chars(self):
        """ Distinct contributed characters in order of first appearance. """
        return list(dict.fromkeys(self.seq_chars.values()))

    def add_aligned(self, node_id):
        if self.aligned_to is None:
            self.aligned_to = []
        if node_id not in self.aligned_to:
            self.aligned_to.append(node_id)

    def next_edge(self, target):
        """ Outgoing edge to ``target`` or `None`. """
        for edge in self.out_edges:
            if edge.target == target:
                return edge
        return None

    def previous_edge(self, target):
        """ Incoming edge from ``target`` or `None`. """
        for edge in self.in_edges:
            if edge.target == target:
                return edge
        return None

    def edge_carrying(self, seq_id):
        """ The outgoing edge tagged with ``seq_id``, `None` if the sequence ends here. """
        for edge in self.out_edges:
            if edge.carries(seq_id):
                return edge
        return None

    def add_next(self, target, seq_id=None):
        """ Add (or extend) the outgoing edge to ``target``.

        The edge is re-inserted in front of the edges with equal support so
        that the list stays ordered by decreasing support.
        """
        edge = self.next_edge(target)
        if edge is not None:
            self.out_edges.remove(edge)
        else:
            edge = Edge(target)
        if seq_id is not None:
            edge.add_sequence(seq_id)

        index = 0
        for i, other in enumerate(self.out_edges):
            if edge.support < other.support:
                index = i + 1
        self.out_edges.insert(index, edge)
        return edge

    def add_previous(self, target, seq_id=None):
        """ Add (or extend) the incoming edge from ``target``. """
        edge = self.previous_edge(target)
        if edge is None:
            edge = Edge(target)
            self.in_edges.append(edge)
        if seq_id is not None:
            edge.add_sequence(seq_id)
        return edge

    def drop_next(self, target):
        """ Remove the outgoing edge to ``target`` and return it (or `None`). """
        edge = self.next_edge(target)
        if edge is not None:
            self.out_edges.remove(edge)
        return edge

    def drop_previous(self, target):
        """ Remove the incoming edge from ``target`` and return it (or `None`). """
        edge = self.previous_edge(target)
        if edge is not None:
            self.in_edges.remove(edge)
        return edge

    def next_ids(self):
        return [edge.target for edge in self.out_edges]

    def previous_ids(self):
        return [edge.target for edge in self.in_edges]

    def copy(self):
        """ Copy of the node record, edges included. """
        node = GraphNode(self.id, base=self.base)
        node.seq_chars = dict(self.seq_chars)
        node.out_edges = [edge.copy() for edge in self.out_edges]
        node.in_edges = [edge.copy() for edge in self.in_edges]
        node.aligned_to = None if self.aligned_to is None else list(self.aligned_to)
        node.distribution = self.distribution
        node.consensus = self.consensus
        node.cost = self.cost
        node.transition_cost = dict(self.transition_cost)
        return node
