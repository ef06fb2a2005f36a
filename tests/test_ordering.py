import numpy as np
import pytest

from pogkit import checks
from pogkit.pog.construction import from_alignment
from pogkit.pog.graph import POGraph


def _diamonds():
    """ Two consecutive diamonds: 0 -> {1, 2} -> 3 -> {4, 5} -> 6. """
    return from_alignment([("a", "AB-DE-G"),
                           ("b", "A-CD-FG"),
                           ("c", "AB-DE-G")])


class TestTopologicalSort:
    def test_every_edge_points_forward(self, gapped_pog):
        order = gapped_pog.topological_sort()
        assert sorted(order) == [0, 1, 2, 3]
        checks.check_topological_order(gapped_pog, gapped_pog.topological_sort(include_sentinels=True))

    def test_diamonds(self):
        pog = _diamonds()
        order = pog.topological_sort()
        rank = {k: ix for ix, k in enumerate(order)}
        for u, v, _ in pog.edges():
            assert rank[u] < rank[v]
        assert order[0] == 0
        assert order[-1] == 6

    def test_order_after_node_removal(self):
        pog = _diamonds()
        pog.remove_node(1)
        pog.remove_node(5)
        order = pog.topological_sort(include_sentinels=True)
        assert sorted(order[1:-1]) == [0, 2, 3, 4, 6]
        checks.check_topological_order(pog, order)
        assert pog.edge(0, 3).sequences == [0, 2]

    def test_order_after_cascade(self):
        pog = _diamonds()
        report = pog.remove_transition(0, 2)
        assert report.removed == [2]
        pog.remove_transition(3, 4)
        order = pog.topological_sort(include_sentinels=True)
        assert 2 not in order
        assert 4 not in order
        checks.check_topological_order(pog, order)
        checks.check_no_orphans(pog)

    def test_sentinels(self, gapped_pog):
        order = gapped_pog.topological_sort(include_sentinels=True)
        assert order[0] == -1
        assert order[-1] == gapped_pog.end_id

    def test_cycle(self):
        pog = POGraph(sequences={0: 'a'}, width=3)
        for k in range(3):
            pog.add_node(k).add_sequence(0, 'A')
        pog.link(0, 1, 0)
        pog.link(1, 2, 0)
        pog.link(2, 0, 0)
        with pytest.raises(ValueError):
            pog.topological_sort()
        with pytest.raises(AssertionError):
            checks.check_acyclic(pog)


class TestMinDistance:
    def test_from_start(self, gapped_pog):
        assert gapped_pog.min_distance(gapped_pog.start_id) == {0: 1, 1: 2, 2: 2, 3: 3}

    def test_unreachable(self, gapped_pog):
        dist = gapped_pog.min_distance(1)
        assert dist[1] == 0
        assert dist[3] == 1
        assert dist[0] == np.inf
        assert dist[2] == np.inf

    def test_shortcut(self):
        pog = _diamonds()
        dist = pog.min_distance(0)
        assert dist[3] == 2
        assert dist[6] == 4


class TestShortestPath:
    def test_path(self, gapped_pog):
        assert gapped_pog.shortest_path(0, 3) == [0, 2, 3]

    def test_excluded_node(self, gapped_pog):
        assert gapped_pog.shortest_path(0, 3, exclude=[2]) == [0, 1, 3]

    def test_no_direct_edge(self, gapped_pog):
        assert gapped_pog.shortest_path(0, 2, allow_direct=False) is None
        assert gapped_pog.shortest_path(0, 2) == [0, 2]

    def test_no_path(self, gapped_pog):
        assert gapped_pog.shortest_path(1, 2) is None

    def test_from_start_to_end(self, gapped_pog):
        path = gapped_pog.shortest_path(gapped_pog.start_id, gapped_pog.end_id)
        assert path[0] == -1 and path[-1] == 4
        assert len(path) == 5

    def test_unknown_node(self, gapped_pog):
        with pytest.raises(KeyError):
            gapped_pog.shortest_path(0, 17)
