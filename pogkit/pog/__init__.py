"""
**POG** : **P**\ artial **O**\ rder **G**\ raph

A library for representing the indel histories of aligned sequences as a
directed acyclic graph.

Each node of a partial order graph is a candidate sequence position and
each edge is tagged with the sequences that take it, so that following a
sequence's edges from the virtual start to the virtual end spells the
sequence. The graph of an ancestor is built from inferred indel
transitions, pruned of unsupported positions, ordered, and read out as a
single best-supported (consensus) sequence.
"""

from pogkit.pog.construction import GapColumnError, Inference, TransitionMap, from_alignment, from_inferences
from pogkit.pog.distributions import Categorical, GaussianMixture, PointEstimate, parse_distribution
from pogkit.pog.graph import POGraph, RemovalReport
from pogkit.pog.view import NodeView
