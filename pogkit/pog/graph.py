"""
graph
=====

The partial order graph container.

A :class:`POGraph` owns a table of real nodes keyed by id, two sentinel
nodes bounding every path, and a registry mapping sequence ids to labels.
Edges are stored on both endpoints (see :mod:`pogkit.pog.elements`), and
every mutation in this module keeps the two sides in agreement.
"""

import networkx as nx
import pandas as pd

from .. import checks
from .._logging import _gen_logger, set_verbose
from ..config import get_config
from .elements import GraphNode, START_ID

logger = _gen_logger(__name__)


class RemovalReport:
    """ Outcome of a node or transition removal.

    Attributes
    ----------
    removed : `list` [`int`]
        Ids of removed nodes, in removal order (cascaded nodes included).
    truncated : `dict` [`int`, `int`]
        Sequence ids whose provenance could not be carried across a removal,
        mapped to the node id at which the sequence was cut. A sequence that
        legitimately ends at a removed node is carried to the virtual end and
        does not appear here.
    """

    def __init__(self):
        self.removed = []
        self.truncated = {}

    def __repr__(self):
        return f"RemovalReport(removed={self.removed}, truncated={self.truncated})"

    @property
    def num_truncated(self):
        return len(self.truncated)


class POGraph:
    """ Partial order graph over a set of aligned sequences.

    Parameters
    ----------
    sequences : `dict` [`int`, `str`], optional
        Sequence id to label registry.
    width : `int`
        Number of alignment columns. The virtual end node takes this id.
    name : `str`, optional
        Name of the graph (e.g., the ancestor label).

    Notes
    -----
    Graphs are normally built with :meth:`from_alignment`,
    :meth:`from_inferences` or :meth:`from_dot`.
    """

    def __init__(self, sequences=None, width=0, name=None):
        if width < 0:
            raise ValueError("width must be non-negative.")
        self.sequences = dict(sequences) if sequences is not None else {}
        self.name = name
        self._nodes = {}
        self._start = GraphNode(START_ID)
        self._end = GraphNode(width)

    def __repr__(self):
        return f"POGraph(name={self.name!r}, nodes={len(self)}, sequences={self.num_sequences})"

    def __len__(self):
        return len(self._nodes)

    def __contains__(self, node_id):
        return node_id in self._nodes

    def __iter__(self):
        return iter(list(self._nodes))

    # ------------------------------------------------------------------
    # constructors

    @classmethod
    def from_alignment(cls, sequences, config=None, name=None):
        """ See :func:`pogkit.pog.construction.from_alignment`. """
        from .construction import from_alignment
        return from_alignment(sequences, config=config, name=name)

    @classmethod
    def from_inferences(cls, records, label='ancestor', width=None, config=None, name=None):
        """ See :func:`pogkit.pog.construction.from_inferences`. """
        from .construction import from_inferences
        return from_inferences(records, label=label, width=width, config=config, name=name)

    @classmethod
    def from_dot(cls, text):
        """ See :func:`pogkit.probe.dot.from_dot`. """
        from ..probe.dot import from_dot
        return from_dot(text)

    # ------------------------------------------------------------------
    # node table

    @property
    def start_id(self):
        return self._start.id

    @property
    def end_id(self):
        return self._end.id

    @property
    def width(self):
        """ Number of alignment columns, the id of the virtual end. """
        return self._end.id

    @property
    def num_sequences(self):
        return len(self.sequences)

    @property
    def nodes(self):
        """ A dictionary of the real nodes keyed by id. """
        return self._nodes

    def node_ids(self):
        """ Ids of the real nodes in table order. """
        return list(self._nodes)

    def node(self, node_id):
        """ Node record for ``node_id``, sentinels included.

        Raises
        ------
        KeyError
            If no node has this id.
        """
        if node_id == self._start.id:
            return self._start
        if node_id == self._end.id:
            return self._end
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Node {node_id} is not in the graph.") from None

    def view(self, node_id):
        """ Focused handle on ``node_id`` exposing the query API. """
        from .view import NodeView
        return NodeView(self, node_id)

    def start(self):
        """ Handle focused on the virtual start. """
        return self.view(self._start.id)

    def add_node(self, node_id, base=None):
        """ Add an empty real node.

        Parameters
        ----------
        node_id : `int`
            Non-negative id smaller than :attr:`end_id`.
        base : `str`, optional
            Resolved character.

        Returns
        -------
        node : `GraphNode`
        """
        if node_id in self._nodes:
            raise KeyError(f"Duplicate node detected, {node_id} already exists in the graph.")
        if node_id < 0 or node_id >= self._end.id:
            raise ValueError(f"Node id {node_id} is outside of [0, {self._end.id}).")
        node = GraphNode(node_id, base=base)
        self._nodes[node_id] = node
        return node

    def node_label(self, node_id):
        """ Resolved character, or the distinct contributed characters, or 'X' if there are none. """
        node = self.node(node_id)
        if node.base is not None:
            return node.base
        chars = node.unique_chars()
        return ''.join(chars) if chars else 'X'

    def resolve_bases(self):
        """ Set the base of each unresolved node whose sequences all agree on one character. """
        for node in self._nodes.values():
            if node.base is not None:
                continue
            chars = node.unique_chars()
            if len(chars) == 1:
                node.base = chars[0]

    # ------------------------------------------------------------------
    # edges

    def link(self, source, target, seq_id=None):
        """ Add (or extend) the edge ``source -> target`` on both endpoints.

        Returns
        -------
        edge : `Edge`
            The outgoing edge stored on ``source``.
        """
        src = self.node(source)
        tgt = self.node(target)
        if source == target:
            raise ValueError(f"Self-loop on node {source} is not allowed.")
        edge = src.add_next(target, seq_id)
        tgt.add_previous(source, seq_id)
        return edge

    def unlink(self, source, target):
        """ Remove the edge ``source -> target`` from both endpoints.

        Returns
        -------
        edge : {`Edge`, `None`}
            The removed outgoing edge, `None` if there was no such edge.
        """
        edge = self.node(source).drop_next(target)
        self.node(target).drop_previous(source)
        return edge

    def edge(self, source, target):
        """ The outgoing edge ``source -> target``.

        Raises
        ------
        KeyError
            If the edge does not exist.
        """
        edge = self.node(source).next_edge(target)
        if edge is None:
            raise KeyError(f"No transition {source} -> {target} in the graph.")
        return edge

    def edges(self, include_sentinels=False):
        """ Iterate over ``(source, target, edge)`` for all outgoing edges. """
        sources = list(self._nodes.values())
        if include_sentinels:
            sources = [self._start] + sources
        for node in sources:
            for edge in node.out_edges:
                if not include_sentinels and edge.target == self._end.id:
                    continue
                yield node.id, edge.target, edge

    def set_reciprocated(self, source, target, flag=True):
        """ Flag the edge ``source -> target`` (both stored sides) as reciprocated. """
        self.edge(source, target).reciprocated = flag
        self.node(target).previous_edge(source).reciprocated = flag

    def edge_weight(self, edge):
        """ Fraction of all sequences traversing ``edge``. """
        if edge.weight is not None:
            return edge.weight
        if not self.sequences:
            return 0.
        return edge.support / self.num_sequences

    def cache_weights(self):
        """ Store the support weight on every edge. """
        for node in [self._start, self._end] + list(self._nodes.values()):
            for edge in node.out_edges + node.in_edges:
                edge.weight = None
                edge.weight = self.edge_weight(edge)

    def clear_consensus(self):
        for node in [self._start, self._end] + list(self._nodes.values()):
            node.consensus = False
            for edge in node.out_edges + node.in_edges:
                edge.consensus = False

    # ------------------------------------------------------------------
    # incremental construction

    def _move_end(self, new_end_id):
        """ Renumber the virtual end, updating every edge pointing at it. """
        old = self._end.id
        for edge in self._end.in_edges:
            self.node(edge.target).next_edge(old).target = new_end_id
        self._end.id = new_end_id

    def add_sequence(self, seq_id, label, chars, node_ids=None):
        """ Thread a new sequence through the graph.

        Parameters
        ----------
        seq_id : `int`
            New sequence id.
        label : `str`
            Sequence label.
        chars : `str`
            Ungapped characters of the sequence.
        node_ids : `list`, optional
            Node id receiving each character. Entries that are `None` or not
            yet in the graph create a new node (`None` takes the next unused
            id). Ids must be non-negative and distinct, and the ids already in
            the graph must follow the topological order.

        Raises
        ------
        KeyError
            If ``seq_id`` is already registered.
        ValueError
            If ``node_ids`` does not match ``chars`` or breaks the rules above.
            The graph is left unchanged.
        """
        if seq_id in self.sequences:
            raise KeyError(f"Duplicate sequence id detected, {seq_id} already exists in the graph.")
        if node_ids is None:
            node_ids = [None] * len(chars)
        if len(node_ids) != len(chars):
            raise ValueError("node_ids must provide one node id per character.")
        node_ids = self._resolve_node_ids(node_ids)

        self.sequences[seq_id] = label
        previous = self._start.id
        for char, node_id in zip(chars, node_ids):
            if node_id not in self._nodes:
                if node_id >= self._end.id:
                    self._move_end(node_id + 1)
                self.add_node(node_id)
            self._nodes[node_id].add_sequence(seq_id, char)
            self.link(previous, node_id, seq_id)
            previous = node_id
        self.link(previous, self._end.id, seq_id)
        logger.debug(f"Added sequence {label} ({len(chars)} characters).")

    def _resolve_node_ids(self, node_ids):
        """ Fill in new ids for `None` entries and check the path is acyclic. """
        fresh = max([k for k in node_ids if k is not None] + list(self._nodes), default=-1) + 1
        resolved = []
        for node_id in node_ids:
            if node_id is None:
                node_id, fresh = fresh, fresh + 1
            elif node_id < 0:
                raise ValueError(f"Node id {node_id} must be non-negative.")
            resolved.append(node_id)
        if len(set(resolved)) != len(resolved):
            raise ValueError("node_ids must not visit a node twice.")

        rank = {k: ix for ix, k in enumerate(self.topological_sort())}
        existing = [k for k in resolved if k in rank]
        for a, b in zip(existing, existing[1:]):
            if rank[a] > rank[b]:
                raise ValueError(f"Node {b} precedes node {a} in the graph, node_ids must follow the topological order.")
        return resolved

    # ------------------------------------------------------------------
    # pruning

    def _splice_out(self, node_id, report):
        """ Reroute sequences around ``node_id`` and delete it.

        Returns
        -------
        orphans : `list` [`int`]
            Successors left without any predecessor.
        """
        node = self._nodes[node_id]

        for prev in list(node.in_edges):
            pred = prev.target
            for seq_id in prev.sequences:
                onward = node.edge_carrying(seq_id)
                if onward is None:
                    report.truncated[seq_id] = node_id
                    logger.trace(f"Sequence {seq_id} ends at removed node {node_id}.")
                else:
                    self.link(pred, onward.target, seq_id)
            self.unlink(pred, node_id)

        orphans = []
        for nxt in list(node.out_edges):
            succ = nxt.target
            self.unlink(node_id, succ)
            if succ != self._end.id and not self.node(succ).in_edges:
                orphans.append(succ)

        if node.aligned_to:
            for other in node.aligned_to:
                if other in self._nodes and self._nodes[other].aligned_to:
                    self._nodes[other].aligned_to = [k for k in self._nodes[other].aligned_to if k != node_id] or None

        del self._nodes[node_id]
        report.removed.append(node_id)
        return orphans

    def _cascade(self, pending, report, config):
        while pending:
            node_id = pending.pop()
            if node_id not in self._nodes:
                continue
            orphans = self._splice_out(node_id, report)
            if config.cascade:
                pending.extend(orphans)
            elif orphans:
                logger.info(f"Nodes {orphans} left without predecessors (cascade disabled).")

    def _finish_removal(self, report, config):
        if report.truncated:
            logger.msg(f"{report.num_truncated} sequence(s) truncated while removing nodes {report.removed}.")
        if config.check_invariants:
            checks.check_edge_symmetry(self)
            checks.check_nonempty_nodes(self)
            if config.cascade:
                checks.check_no_orphans(self)
        return report

    def remove_node(self, node_id, config=None):
        """ Remove an unsupported node while preserving sequence provenance.

        Each sequence entering the node is carried directly to the successor
        the same sequence leaves to. Successors left without predecessors
        are removed in turn (unless ``config.cascade`` is `False`).

        Parameters
        ----------
        node_id : `int`
            Id of the real node to remove.
        config : `pogkit.config.POGConfig`, optional
            Settings, default settings if `None`.

        Returns
        -------
        report : `RemovalReport`
        """
        config = get_config(config)
        if config.verbose is not None:
            set_verbose(logger, config.verbose)
        if node_id in (self._start.id, self._end.id):
            raise ValueError("The virtual start and end nodes cannot be removed.")
        if node_id not in self._nodes:
            raise KeyError(f"Node {node_id} is not in the graph.")

        report = RemovalReport()
        self._cascade([node_id], report, config)
        logger.debug(f"Removed nodes {report.removed}.")
        return self._finish_removal(report, config)

    def remove_transition(self, source, target, config=None):
        """ Remove the edge ``source -> target`` outright.

        The sequences carried by the edge lose their provenance past
        ``source`` and are reported as truncated. If ``target`` is left
        without predecessors it is removed as in :meth:`remove_node`.

        Returns
        -------
        report : `RemovalReport`
        """
        config = get_config(config)
        if config.verbose is not None:
            set_verbose(logger, config.verbose)
        edge = self.edge(source, target)

        report = RemovalReport()
        for seq_id in edge.sequences:
            report.truncated[seq_id] = source
        self.unlink(source, target)

        if target != self._end.id and not self.node(target).in_edges:
            if config.cascade:
                self._cascade([target], report, config)
            else:
                logger.info(f"Node {target} left without predecessors (cascade disabled).")
        return self._finish_removal(report, config)

    def prune_orphans(self, config=None):
        """ Remove every real node without predecessors (with cascade). """
        config = get_config(config)
        report = RemovalReport()
        orphans = [node_id for node_id, node in self._nodes.items() if not node.in_edges]
        self._cascade(orphans, report, config.replace(cascade=True))
        return self._finish_removal(report, config)

    # ------------------------------------------------------------------
    # sequence provenance

    def sequence_path(self, seq_id):
        """ Ids of the real nodes visited by a sequence, following its tagged edges.

        The walk stops early if the sequence has no onward edge (truncated provenance).
        """
        if seq_id not in self.sequences:
            raise KeyError(f"Sequence {seq_id} is not in the graph.")
        path = []
        node = self._start
        while True:
            edge = node.edge_carrying(seq_id)
            if edge is None or edge.target == self._end.id:
                return path
            if len(path) > len(self._nodes):
                raise ValueError(f"Sequence {seq_id} revisits a node, the graph is not acyclic.")
            path.append(edge.target)
            node = self.node(edge.target)

    def sequence_node_mapping(self):
        """ `dict` of sequence id to the ordered node ids it traverses. """
        return {seq_id: self.sequence_path(seq_id) for seq_id in self.sequences}

    def extant_sequence(self, seq_id, gappy=False, gap_char='-', order=None):
        """ Characters of a sequence recovered from the graph.

        Parameters
        ----------
        seq_id : `int`
            Sequence id.
        gappy : `bool`
            If `True`, lay the characters out on the topological order of
            all nodes, filling the skipped positions with ``gap_char``.
        gap_char : `str`
            Gap character.
        order : `list` [`int`], optional
            Precomputed topological order (used when ``gappy`` is `True`).
        """
        path = self.sequence_path(seq_id)
        chars = [self._nodes[node_id].seq_chars.get(seq_id, gap_char) for node_id in path]
        if not gappy:
            return ''.join(chars)

        if order is None:
            order = self.topological_sort()
        row = [gap_char] * len(order)
        rank = {node_id: ix for ix, node_id in enumerate(order)}
        for node_id, char in zip(path, chars):
            row[rank[node_id]] = char
        return ''.join(row)

    def aligned_sequences(self, gappy=True, gap_char='-'):
        """ `dict` of sequence label to its (gapped) characters.

        All rows share one topological order, so gapped rows have equal length.
        """
        order = self.topological_sort() if gappy else None
        return {label: self.extant_sequence(seq_id, gappy=gappy, gap_char=gap_char, order=order)
                for seq_id, label in self.sequences.items()}

    def contains_sequence(self, chars):
        """ Check if ``chars`` can be spelled by a path from virtual start to virtual end.

        A resolved node matches its base, an unresolved node matches any
        character contributed to it.
        """
        if not chars:
            return self._start.next_edge(self._end.id) is not None

        def matches(node, char):
            if node.base is not None:
                return node.base == char
            return char in node.seq_chars.values()

        stack = [(self._start.id, 0)]
        seen = set()
        while stack:
            node_id, ix = stack.pop()
            if (node_id, ix) in seen:
                continue
            seen.add((node_id, ix))
            for succ in self.node(node_id).next_ids():
                if succ == self._end.id:
                    if ix == len(chars):
                        return True
                    continue
                if ix < len(chars) and matches(self._nodes[succ], chars[ix]):
                    stack.append((succ, ix + 1))
        return False

    # ------------------------------------------------------------------
    # ordering, consensus, export

    def topological_sort(self, include_sentinels=False):
        """ See :func:`pogkit.pog.ordering.topological_sort`. """
        from .ordering import topological_sort
        return topological_sort(self, include_sentinels=include_sentinels)

    def min_distance(self, node_id):
        """ See :func:`pogkit.pog.ordering.min_distance`. """
        from .ordering import min_distance
        return min_distance(self, node_id)

    def shortest_path(self, source, target, exclude=(), allow_direct=True):
        """ See :func:`pogkit.pog.ordering.shortest_path`. """
        from .ordering import shortest_path
        return shortest_path(self, source, target, exclude=exclude, allow_direct=allow_direct)

    def consensus(self, gappy=False, config=None):
        """ See :func:`pogkit.pog.consensus.consensus_sequence`. """
        from .consensus import consensus_sequence
        return consensus_sequence(self, gappy=gappy, config=config)

    def to_dot(self, annotate=True, with_distribution=True):
        """ See :func:`pogkit.probe.dot.to_dot`. """
        from ..probe.dot import to_dot
        return to_dot(self, annotate=annotate, with_distribution=with_distribution)

    def copy(self):
        """ Independent copy of the graph.

        Edges refer to nodes by id, so every record is copied in a single
        pass without following links.
        """
        clone = POGraph(sequences=self.sequences, width=self._end.id, name=self.name)
        clone._start = self._start.copy()
        clone._end = self._end.copy()
        clone._nodes = {node_id: node.copy() for node_id, node in self._nodes.items()}
        return clone

    def to_networkx(self, include_sentinels=False):
        """ Convert to a `networkx.DiGraph`.

        Nodes carry the attributes 'base', 'label' and 'consensus'; edges carry
        'sequences' (labels), 'support', 'weight', 'reciprocated' and 'consensus'.
        """
        G = nx.DiGraph(name=self.name)
        if include_sentinels:
            G.add_node(self._start.id, base=None, label='start', consensus=self._start.consensus)
            G.add_node(self._end.id, base=None, label='end', consensus=self._end.consensus)
        for node_id, node in self._nodes.items():
            G.add_node(node_id, base=node.base, label=self.node_label(node_id), consensus=node.consensus)
        for source, target, edge in self.edges(include_sentinels=include_sentinels):
            G.add_edge(source, target,
                       sequences=[self.sequences.get(k, k) for k in edge.sequences],
                       support=edge.support,
                       weight=self.edge_weight(edge),
                       reciprocated=edge.reciprocated,
                       consensus=edge.consensus)
        return G

    def node_frame(self):
        """ Summary of the real nodes as a `pandas.DataFrame` indexed by node id. """
        rows = [{'node': node_id,
                 'base': node.base,
                 'label': self.node_label(node_id),
                 'num_sequences': len(node.seq_chars),
                 'in_degree': len(node.in_edges),
                 'out_degree': len(node.out_edges),
                 'consensus': node.consensus,
                 'distribution': None if node.distribution is None else node.distribution.kind,
                 } for node_id, node in self._nodes.items()]
        columns = ['node', 'base', 'label', 'num_sequences', 'in_degree', 'out_degree',
                   'consensus', 'distribution']
        return pd.DataFrame(rows, columns=columns).set_index('node')

    def edge_frame(self, include_sentinels=False):
        """ Summary of the edges as a `pandas.DataFrame`, one row per edge. """
        rows = [{'source': source,
                 'target': target,
                 'support': edge.support,
                 'weight': self.edge_weight(edge),
                 'reciprocated': edge.reciprocated,
                 'consensus': edge.consensus,
                 'sequences': ','.join(str(self.sequences.get(k, k)) for k in edge.sequences),
                 } for source, target, edge in self.edges(include_sentinels=include_sentinels)]
        columns = ['source', 'target', 'support', 'weight', 'reciprocated', 'consensus', 'sequences']
        return pd.DataFrame(rows, columns=columns)

