import pytest

from pogkit import checks
from pogkit.config import POGConfig
from pogkit.pog.construction import GapColumnError, Inference, TransitionMap, from_alignment, from_inferences


class TestFromAlignment:
    def test_one_node_per_column(self, gapped_pog):
        assert gapped_pog.node_ids() == [0, 1, 2, 3]
        assert gapped_pog.start_id == -1
        assert gapped_pog.end_id == 4

    def test_sequences_are_reproduced(self, gapped_alignment, gapped_pog):
        for seq_id, (label, seq) in enumerate(gapped_alignment):
            assert gapped_pog.sequences[seq_id] == label
            assert gapped_pog.extant_sequence(seq_id) == seq.replace('-', '')

    def test_invariants_hold(self, gapped_alignment, gapped_pog):
        records = [(ix, label, seq) for ix, (label, seq) in enumerate(gapped_alignment)]
        checks.check_graph(gapped_pog, sequences=records)

    def test_resolved_and_unresolved_columns(self, ac_pog):
        assert ac_pog.node(0).base == 'A'
        assert ac_pog.node(1).base is None
        counts = ac_pog.view(1).base_counts()
        assert counts.to_dict() == {'C': 2, 'G': 1}
        assert ac_pog.node_label(1) == 'CG'

    def test_edges_are_tagged(self, gapped_pog):
        assert gapped_pog.edge(0, 2).sequences == [0, 2]
        assert gapped_pog.edge(0, 1).sequences == [1]
        assert gapped_pog.edge(3, gapped_pog.end_id).support == 3

    def test_support_ordered_out_edges(self, gapped_pog):
        assert gapped_pog.node(0).next_ids() == [2, 1]

    def test_dict_and_triples_input(self):
        pog = from_alignment({"x": "AC", "y": "A-"})
        assert pog.sequences == {0: "x", 1: "y"}
        pog = from_alignment([(7, "x", "AC"), (3, "y", "AG")])
        assert set(pog.sequences) == {3, 7}
        assert pog.extant_sequence(3) == "AG"

    def test_non_contiguous_ids(self):
        pog = from_alignment([(1, "s1", "AC"), (2, "s2", "AG"), (3, "s3", "AC")])
        assert pog.sequences == {1: "s1", 2: "s2", 3: "s3"}
        assert pog.edge(0, 1).sequences == [1, 2, 3]
        assert pog.node(1).seq_chars == {1: 'C', 2: 'G', 3: 'C'}
        assert pog.extant_sequence(2) == "AG"
        assert pog.aligned_sequences() == {"s1": "AC", "s2": "AG", "s3": "AC"}
        checks.check_graph(pog, sequences=[(1, "s1", "AC"), (2, "s2", "AG"), (3, "s3", "AC")])

    def test_unequal_lengths(self):
        with pytest.raises(ValueError):
            from_alignment([("a", "AC"), ("b", "A")])

    def test_gap_column(self):
        with pytest.raises(GapColumnError) as excinfo:
            from_alignment([("a", "A-C"), ("b", "A-G")])
        assert excinfo.value.column == 1
        assert isinstance(excinfo.value, ValueError)

    def test_empty_sequence_links_start_to_end(self):
        pog = from_alignment([("a", "AC"), ("b", "--")])
        assert pog.edge(pog.start_id, pog.end_id).sequences == [1]
        assert pog.extant_sequence(1) == ""

    def test_custom_gap_char(self):
        pog = from_alignment([("a", "A.C"), ("b", "ABC")], config=POGConfig(gap_char='.'))
        assert pog.extant_sequence(0) == "AC"
        assert pog.extant_sequence(1) == "ABC"

    def test_check_invariants(self, gapped_alignment):
        pog = from_alignment(gapped_alignment, config=POGConfig(check_invariants=True))
        assert len(pog) == 4

    def test_no_sequences(self):
        with pytest.raises(ValueError):
            from_alignment([])


class TestTransitionMap:
    def test_counts(self):
        tmap = TransitionMap()
        for i, j in [(1, 2), (2, 3), (1, 2), (3, 5), (2, 4), (4, 6), (6, 7), (5, 7)]:
            tmap.add(i, j)
        assert tmap.size() == 7
        assert tmap.size(reciprocated_only=True) == 1
        assert tmap.degree(2) == 3
        assert tmap.linked(2) == [1, 3, 4]

    def test_canonical_pairs(self):
        tmap = TransitionMap()
        assert tmap.add(5, 2) == (2, 5)
        tmap.add(2, 5)
        assert tmap.is_reciprocated((5, 2))
        assert tmap.is_edge(2, 5, reciprocated_only=True)
        assert (5, 2) in tmap

    def test_self_transition_ignored(self):
        tmap = TransitionMap()
        assert tmap.add(4, 4) is None
        assert len(tmap) == 0

    def test_remove(self):
        tmap = TransitionMap()
        tmap.add(1, 2)
        tmap.add(2, 3)
        tmap.remove((2, 1))
        assert tmap.edges == [(2, 3)]
        assert not tmap.is_edge(1, 2)


class TestFromInferences:
    def test_nodes_and_edges(self, ancestor_records):
        pog = from_inferences(ancestor_records, label='N1')
        assert pog.name == 'N1'
        assert pog.sequences == {0: 'N1'}
        assert pog.end_id == 3
        assert sorted(pog.node_ids()) == [0, 1, 2]
        assert [pog.node(k).base for k in sorted(pog.node_ids())] == ['M', 'K', 'L']
        edges = {(u, v) for u, v, _ in pog.edges(include_sentinels=True)}
        assert edges == {(-1, 0), (0, 1), (0, 2), (1, 2), (2, 3)}

    def test_reciprocated_and_weighted(self, ancestor_records):
        pog = from_inferences(ancestor_records)
        for _, _, edge in pog.edges(include_sentinels=True):
            assert edge.reciprocated
            assert edge.weight == 1.
            assert edge.sequences == [0]

    def test_nearest_transition_listed_first(self, ancestor_records):
        pog = from_inferences(ancestor_records)
        assert pog.node(0).next_ids() == [1, 2]

    def test_absent_position_excluded(self, ancestor_records):
        records = list(ancestor_records)
        records[2] = Inference(1, '-', [0, 2])
        pog = from_inferences(records)
        assert 1 not in pog
        assert pog.node(0).next_ids() == [2]
        assert pog.node(2).previous_ids() == [0]

    def test_unreciprocated_transition(self):
        records = [(-1, None, [0]), (0, 'M', [-1, 1, 2]), (1, 'K', [2]),
                   (2, 'L', [0, 1, 3]), (3, None, [2])]
        pog = from_inferences(records)
        assert not pog.edge(0, 1).reciprocated
        assert pog.edge(0, 2).reciprocated
        assert pog.view(0).next_ids(reciprocated=True) == [2]

    def test_transition_to_unknown_position_dropped(self, ancestor_records):
        records = list(ancestor_records)
        records[3] = Inference(2, 'L', [0, 1, 3, 7])
        pog = from_inferences(records, width=3)
        assert 7 not in pog.node(2).next_ids()
        with pytest.raises(KeyError):
            pog.node(7)

    def test_end_id_from_records(self, ancestor_records):
        records = ancestor_records[:-1] + [Inference(5, None, [2])]
        pog = from_inferences(records)
        assert pog.end_id == 5
        assert pog.node(2).next_ids() == [5]

    def test_check_invariants(self, ancestor_records):
        pog = from_inferences(ancestor_records, config=POGConfig(check_invariants=True))
        assert len(pog) == 3
