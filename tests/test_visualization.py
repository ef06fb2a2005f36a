import matplotlib.pyplot as plt
import numpy as np

from pogkit.pog.graph import POGraph
from pogkit.probe.visualization import layered_layout, plot_base_counts, plot_pog


class TestVisualization:
    def test_layered_layout(self, gapped_pog):
        pos = layered_layout(gapped_pog)
        np.testing.assert_allclose(pos[0], [1., 0.])
        np.testing.assert_allclose(pos[1], [2., 0.5])
        np.testing.assert_allclose(pos[2], [2., -0.5])
        np.testing.assert_allclose(pos[3], [3., 0.])
        pos = layered_layout(gapped_pog, include_sentinels=True)
        np.testing.assert_allclose(pos[-1], [0., 0.])
        np.testing.assert_allclose(pos[4], [4., 0.])

    def test_layout_without_reachable_nodes(self):
        pog = POGraph(sequences={0: 'a'}, width=2)
        pog.add_node(0, 'A').add_sequence(0, 'A')
        pog.add_node(1, 'C').add_sequence(0, 'C')
        pog.link(0, 1, 0)
        pog.link(1, pog.end_id, 0)
        pos = layered_layout(pog, include_sentinels=True)
        np.testing.assert_allclose(pos[0], [1., 0.5])
        np.testing.assert_allclose(pos[1], [1., -0.5])
        np.testing.assert_allclose(pos[pog.end_id], [2., 0.])

    def test_plot_pog(self, gapped_pog):
        gapped_pog.consensus()
        ax = plot_pog(gapped_pog, with_edge_labels=True)
        assert ax.get_legend() is not None
        plt.close('all')

    def test_plot_with_sentinels(self, ac_pog):
        fig, ax = plt.subplots()
        assert plot_pog(ac_pog, ax=ax, include_sentinels=True, show_consensus=False) is ax
        plt.close(fig)

    def test_plot_base_counts(self, ac_pog):
        ax = plot_base_counts(ac_pog, 1)
        assert len(ax.patches) == 2
        plt.close('all')
