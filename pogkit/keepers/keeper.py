"""
keeper
======

Class used to store and handle multiple partial order graphs.
"""

from pathlib import Path

from .. import pipelines
from .._logging import _gen_logger
from ..config import get_config
from ..pog.construction import from_alignment, from_inferences
from ..pog.graph import POGraph
from ..probe.dot import read_dot, write_dot

logger = _gen_logger(__name__)


class POGKeeper:
    """ A class to store and handle multiple partial order graphs.

    Parameters
    ----------
    graphs : {`POGraph`, `dict` [`str`, `POGraph`]}, optional
        One or multiple graphs.

        The graph(s) may be provided in multiple ways:

        - `POGraph` : A single graph, stored with the label ``'pog'``.
        - `dict` [`str`, `POGraph`] : Graphs keyed by label.
    config : `pogkit.config.POGConfig`, optional
        Settings used by the keeper's construction and consensus methods.

    Notes
    -----
    The graph label is also set to the graph's name.
    """

    def __init__(self, graphs=None, config=None):
        self._graphs = {}
        self.config = get_config(config)

        if isinstance(graphs, POGraph):
            self.add_graph(graphs, 'pog')
        elif isinstance(graphs, dict):
            for label, pog in graphs.items():
                self.add_graph(pog, label)
        elif graphs is None:
            pass
        else:
            raise TypeError("Unrecognized type for graphs, must be one of [POGraph or dict].")

    def __getitem__(self, key):
        return self._graphs[key]

    def __contains__(self, key):
        return key in self._graphs

    def __iter__(self):
        for key, pog in self._graphs.items():
            yield pog

    def __len__(self):
        return len(self._graphs)

    @property
    def graphs(self):
        """ A dictionary of all the graphs. """
        return self._graphs

    @property
    def labels(self):
        return list(self._graphs)

    def add_graph(self, pog, label):
        """ Add a graph to the keeper.

        Parameters
        ----------
        pog : `POGraph`
            The graph.
        label : `str`
            Reference label describing the graph.
        """
        if label in self._graphs:
            raise KeyError(f"Duplicate label detected, {label} already exists in the keeper.")

        if not isinstance(pog, POGraph):
            raise TypeError("Unrecognized type, pog must be a POGraph.")

        pog.name = label
        self._graphs[label] = pog

    def remove_graph(self, label):
        """ Remove and return the graph stored under ``label``. """
        return self._graphs.pop(label)

    def add_alignment(self, sequences, label='extant'):
        """ Build a graph from aligned sequences and add it, see
        :func:`pogkit.pog.construction.from_alignment`. """
        pog = from_alignment(sequences, config=self.config)
        self.add_graph(pog, label)
        return pog

    def add_inferences(self, records, label, width=None):
        """ Build the graph of an ancestor and add it, see
        :func:`pogkit.pog.construction.from_inferences`. """
        pog = from_inferences(records, label=label, width=width, config=self.config)
        self.add_graph(pog, label)
        return pog

    def assemble_ancestors(self, inferences, width=None, prune=False, show_progress=False):
        """ Build the graphs of multiple ancestors concurrently and add them.

        Parameters
        ----------
        inferences : `dict` [`str`, `list`]
            Inference records keyed by ancestor label.
        width : `int`, optional
            Id of the virtual end shared by all ancestors.
        prune : `bool`
            If `True`, remove nodes left without predecessors.
        show_progress : `bool`
            If `True`, show a progress bar.

        Returns
        -------
        failed : `list` [`str`]
            Labels of the ancestors whose graph could not be built.
        """
        for label in inferences:
            if label in self._graphs:
                raise KeyError(f"Duplicate label detected, {label} already exists in the keeper.")

        jobs = list(inferences.items())
        pogs = pipelines.assemble_ancestors(jobs, width=width, prune=prune, config=self.config,
                                            show_progress=show_progress)
        failed = []
        for ix, (label, _) in enumerate(jobs):
            if ix in pogs:
                self.add_graph(pogs[ix], label)
            else:
                failed.append(label)
        if failed:
            logger.warning(f"Could not assemble ancestors {failed}.")
        return failed

    def consensus_sequences(self, gappy=False, labels=None, show_progress=False):
        """ Consensus sequence of the stored graphs as a `pandas.Series` indexed by label. """
        labels = self.labels if labels is None else labels
        return pipelines.consensus_batch({label: self._graphs[label] for label in labels},
                                         gappy=gappy, config=self.config,
                                         show_progress=show_progress)

    def save_dot(self, label, file_name=None, file_path=None, **kwargs):
        """ Write the graph stored under ``label`` to a DOT file ('<label>.dot' by default).

        Returns
        -------
        fp : `pathlib.Path`
            Path of the written file.
        """
        if file_name is None:
            file_name = f"{label}.dot"
        return write_dot(self._graphs[label], file_name, file_path=file_path, **kwargs)

    def load_dot(self, file_name, label=None, file_path=None):
        """ Read a graph from a DOT file and add it (labeled with the file stem by default). """
        pog = read_dot(file_name, file_path=file_path)
        if label is None:
            label = Path(file_name).stem
        self.add_graph(pog, label)
        return pog
