import networkx as nx


def check_aligned_lengths(records):
    """ Raises a ValueError if the aligned sequences are not all of the same length.

    Parameters
    ----------
    records : `list` [`tuple`]
        ``(seq_id, label, sequence)`` triples.
    """
    lengths = {len(seq) for _, _, seq in records}
    if len(lengths) > 1:
        raise ValueError(f"Aligned sequences must have equal lengths, found lengths {sorted(lengths)}.")


def check_edge_symmetry(pog):
    """ Raises an AssertionError if an edge is not stored identically on both endpoints. """
    nodes = [pog.node(pog.start_id), pog.node(pog.end_id)] + list(pog.nodes.values())
    for node in nodes:
        for edge in node.out_edges:
            other = pog.node(edge.target).previous_edge(node.id)
            assert other is not None, f"Edge {node.id} -> {edge.target} has no incoming counterpart."
            assert set(other.sequences) == set(edge.sequences), \
                f"Edge {node.id} -> {edge.target} is tagged differently on its two endpoints."
        for edge in node.in_edges:
            assert pog.node(edge.target).next_edge(node.id) is not None, \
                f"Edge {edge.target} -> {node.id} has no outgoing counterpart."


def check_nonempty_nodes(pog):
    """ Raises an AssertionError if a real node carries no sequence. """
    empty = [node_id for node_id, node in pog.nodes.items() if not node.seq_chars]
    assert len(empty) == 0, f"Nodes {empty} carry no sequence."


def check_no_orphans(pog):
    """ Raises an AssertionError if a real node has no predecessor. """
    orphans = [node_id for node_id, node in pog.nodes.items() if not node.in_edges]
    assert len(orphans) == 0, f"Nodes {orphans} have no predecessor."


def check_acyclic(pog):
    """ Raises an AssertionError if the graph has a directed cycle. """
    assert nx.is_directed_acyclic_graph(pog.to_networkx(include_sentinels=True)), \
        "The graph must be acyclic."


def check_topological_order(pog, order=None):
    """ Raises an AssertionError if an edge points backwards in ``order``. """
    if order is None:
        order = pog.topological_sort(include_sentinels=True)
    rank = {node_id: ix for ix, node_id in enumerate(order)}
    for source, target, _ in pog.edges(include_sentinels=True):
        if source in rank and target in rank:
            assert rank[source] < rank[target], f"Edge {source} -> {target} points backwards."


def check_sequence_provenance(pog, records, gap_char='-'):
    """ Raises an AssertionError if following a sequence's edges does not spell it.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    records : `list` [`tuple`]
        ``(seq_id, label, sequence)`` triples of gapped sequences.
    gap_char : `str`
        Gap character.
    """
    for seq_id, label, seq in records:
        expected = seq.replace(gap_char, '')
        found = pog.extant_sequence(seq_id)
        assert found == expected, f"Sequence {label} reads {found!r} in the graph, expected {expected!r}."
        last = pog.sequence_path(seq_id)
        last = last[-1] if last else pog.start_id
        edge = pog.node(last).edge_carrying(seq_id)
        assert edge is not None and edge.target == pog.end_id, f"Sequence {label} does not reach the end."


def check_graph(pog, sequences=None, gap_char='-'):
    """ Raises an AssertionError if any graph invariant is violated.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    sequences : `list` [`tuple`], optional
        ``(seq_id, label, sequence)`` triples, if given the provenance of
        each sequence is checked.
    gap_char : `str`
        Gap character of ``sequences``.
    """
    check_edge_symmetry(pog)
    check_nonempty_nodes(pog)
    check_acyclic(pog)
    check_topological_order(pog)
    if sequences is not None:
        check_sequence_provenance(pog, sequences, gap_char=gap_char)
