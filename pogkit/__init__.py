"""
The :mod:`pogkit` module builds, prunes and queries partial order graphs
(POGs) used to reconstruct ancestral sequences along a phylogenetic tree.


To do:
======
- Keep the version in _version.py and setup.py in sync automatically.
- Add option to `pogkit.keepers` to load graphs from alignment file formats (FASTA, Clustal).
"""

from ._version import __version__


from pogkit.config import POGConfig
from pogkit.keepers.keeper import POGKeeper
from pogkit.pog import GapColumnError, Inference, NodeView, POGraph, from_alignment, from_inferences
from pogkit.probe import dot, visualization
