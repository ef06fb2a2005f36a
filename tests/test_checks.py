import pytest

from pogkit import checks


class TestChecks:
    def test_aligned_lengths(self):
        checks.check_aligned_lengths([(0, 'a', 'AC'), (1, 'b', 'A-')])
        with pytest.raises(ValueError):
            checks.check_aligned_lengths([(0, 'a', 'AC'), (1, 'b', 'A')])

    def test_edge_symmetry(self, gapped_pog):
        checks.check_edge_symmetry(gapped_pog)
        gapped_pog.node(0).drop_next(1)
        with pytest.raises(AssertionError):
            checks.check_edge_symmetry(gapped_pog)

    def test_nonempty_nodes(self, gapped_pog):
        gapped_pog.node(1).seq_chars = {}
        with pytest.raises(AssertionError):
            checks.check_nonempty_nodes(gapped_pog)

    def test_orphans(self, branch_pog):
        checks.check_no_orphans(branch_pog)
        branch_pog.unlink(0, 1)
        with pytest.raises(AssertionError):
            checks.check_no_orphans(branch_pog)

    def test_topological_order(self, gapped_pog):
        checks.check_topological_order(gapped_pog)
        with pytest.raises(AssertionError):
            checks.check_topological_order(gapped_pog, order=[-1, 3, 2, 1, 0, 4])

    def test_provenance(self, gapped_alignment, gapped_pog):
        records = [(ix, label, seq) for ix, (label, seq) in enumerate(gapped_alignment)]
        checks.check_sequence_provenance(gapped_pog, records)
        gapped_pog.remove_node(2)
        with pytest.raises(AssertionError):
            checks.check_sequence_provenance(gapped_pog, records)
