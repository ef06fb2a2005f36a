import pytest

from pogkit.config import POGConfig
from pogkit.pog.consensus import (choose_next_edge, consensus_distributions, consensus_indices,
                                  consensus_membership, consensus_path, consensus_sequence)
from pogkit.pog.construction import Inference, from_inferences
from pogkit.pog.distributions import Categorical, GaussianMixture, PointEstimate
from pogkit.pog.elements import Edge


class TestChooseNextEdge:
    def test_highest_support(self):
        edges = [Edge(1, [0]), Edge(2, [1, 2]), Edge(3, [3, 4])]
        assert choose_next_edge(edges).target == 2

    def test_reciprocated_preferred(self):
        edges = [Edge(1, [0, 1, 2]), Edge(2, [3], reciprocated=True)]
        assert choose_next_edge(edges).target == 2
        assert choose_next_edge(edges, prefer_reciprocated=False).target == 1

    def test_empty(self):
        assert choose_next_edge([]) is None


class TestConsensusSequence:
    def test_majority_character(self, ac_pog):
        assert consensus_sequence(ac_pog) == "AC"

    def test_gapped(self, gapped_pog):
        assert consensus_sequence(gapped_pog) == "ACD"
        assert consensus_sequence(gapped_pog, gappy=True) == "A-CD"
        assert gapped_pog.consensus(gappy=True, config=POGConfig(gap_char='.')) == "A.CD"

    def test_leading_and_trailing_gaps(self):
        pog = from_inferences([Inference(-1, None, [1]), Inference(1, 'W', [-1, 2]),
                               Inference(2, 'Y', [1, 4]), Inference(4, None, [2])])
        assert pog.consensus() == "WY"
        assert pog.consensus(gappy=True) == "-WY-"

    def test_marks(self, gapped_pog):
        consensus_path(gapped_pog)
        assert gapped_pog.view(0).is_consensus
        assert gapped_pog.view(0).next_consensus_id() == 2
        assert not gapped_pog.view(1).is_consensus
        assert consensus_membership(gapped_pog) == {0: True, 1: False, 2: True, 3: True}
        assert gapped_pog.node(2).previous_edge(0).consensus

    def test_marks_cleared(self, gapped_pog):
        consensus_path(gapped_pog)
        gapped_pog.remove_node(2)
        consensus_path(gapped_pog)
        assert consensus_membership(gapped_pog) == {0: True, 1: False, 3: True}
        assert gapped_pog.view(0).next_consensus_id() == 3

    def test_ancestor(self, ancestor_records):
        pog = from_inferences(ancestor_records)
        assert pog.consensus() == "MKL"
        assert consensus_indices(pog) == [0, 1, 2]

    def test_reciprocated_path(self):
        records = [(-1, None, [0]), (0, 'M', [-1, 1, 2]), (1, 'K', [2]),
                   (2, 'L', [0, 1, 3]), (3, None, [2])]
        pog = from_inferences(records)
        assert pog.consensus() == "ML"
        assert pog.consensus(gappy=True) == "M-L"
        assert pog.consensus(config=POGConfig(prefer_reciprocated=False)) == "MKL"

    def test_gapped_indices(self, gapped_pog):
        assert consensus_indices(gapped_pog, gappy=True) == [0, None, 2, 3]

    def test_stuck(self, ac_pog):
        ac_pog.unlink(1, ac_pog.end_id)
        with pytest.raises(ValueError):
            consensus_sequence(ac_pog)


class TestDistributions:
    def test_categorical_mode(self, ac_pog):
        ac_pog.view(1).set_distribution(Categorical({'C': 0.1, 'G': 0.9}))
        assert consensus_sequence(ac_pog) == "AG"

    def test_point_estimate(self, ac_pog):
        ac_pog.view(1).set_distribution(PointEstimate('T'))
        assert consensus_sequence(ac_pog) == "AT"

    def test_continuous_state(self, ac_pog):
        ac_pog.view(1).set_distribution(GaussianMixture([0.], [1.]))
        with pytest.raises(TypeError):
            consensus_sequence(ac_pog)

    def test_empirical_distributions(self, ac_pog):
        dists = consensus_distributions(ac_pog)
        assert dists[0]['A'] == pytest.approx(1.)
        assert dists[1]['C'] == pytest.approx(2 / 3)

    def test_gapped_distributions(self, gapped_pog):
        dists = consensus_distributions(gapped_pog, gappy=True)
        assert len(dists) == 4
        assert dists[1] is None
