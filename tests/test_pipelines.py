import pandas as pd

from pogkit.config import POGConfig
from pogkit.pipelines import assemble_ancestors, consensus_batch, run_jobs
from pogkit.pog.construction import Inference


class TestRunJobs:
    def test_results_keyed_by_index(self):
        results = run_jobs(lambda x: x * x, [1, 2, 3], num_threads=2)
        assert results == {0: 1, 1: 4, 2: 9}

    def test_failures_excluded(self):
        results = run_jobs(lambda x: 10 // x, [1, 2, 0, 5], num_threads=3)
        assert results == {0: 10, 1: 5, 3: 2}

    def test_threads_from_config(self):
        results = run_jobs(str, range(4), config=POGConfig(num_threads=2))
        assert results == {0: '0', 1: '1', 2: '2', 3: '3'}

    def test_no_jobs(self):
        assert run_jobs(str, []) == {}


class TestAssembleAncestors:
    def test_partial_failure(self, ancestor_records):
        broken = [Inference(-1, None, [0]), Inference(9, 'W', [-1, 3])]
        pogs = assemble_ancestors([('N1', ancestor_records), ('N2', broken), ('N3', ancestor_records)],
                                  width=3, num_threads=2)
        assert sorted(pogs) == [0, 2]
        assert pogs[0].name == 'N1'
        assert pogs[2].sequences == {0: 'N3'}
        assert pogs[0] is not pogs[2]

    def test_prune(self, ancestor_records):
        records = list(ancestor_records) + [Inference(5, 'P', [6])]
        pogs = assemble_ancestors([('N1', records)], width=6, prune=True)
        assert 5 not in pogs[0]
        assert sorted(pogs[0].node_ids()) == [0, 1, 2]


class TestConsensusBatch:
    def test_labels(self, ac_pog, gapped_pog):
        seqs = consensus_batch({'ac': ac_pog, 'gapped': gapped_pog}, gappy=True)
        assert isinstance(seqs, pd.Series)
        assert seqs.to_dict() == {'ac': 'AC', 'gapped': 'A-CD'}

    def test_failure_left_out(self, ac_pog, gapped_pog):
        ac_pog.unlink(1, ac_pog.end_id)
        seqs = consensus_batch([ac_pog, gapped_pog])
        assert seqs.to_dict() == {1: 'ACD'}
