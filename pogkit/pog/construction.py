"""
construction
============

Constructors of partial order graphs.

Two kinds of input are supported:

  - aligned (gapped) sequences, one node per alignment column
    (:func:`from_alignment`);
  - per-position indel inference for a single ancestor, one node per
    present position with edges given by inferred transitions
    (:func:`from_inferences`).
"""

from collections import namedtuple

from .. import checks
from .._logging import _gen_logger, set_verbose
from .._utils import _desc_config, _desc_sequences, _docstring_parameter, normalize_sequences
from ..config import get_config
from .elements import START_ID
from .graph import POGraph

logger = _gen_logger(__name__)


Inference = namedtuple('Inference', ['position', 'base', 'transitions'])
Inference.__doc__ = """\
Inferred state of one position of an ancestor.

position : `int`
    Node id (``-1`` for the virtual start, the width for the virtual end).
base : {`str`, `None`}
    Inferred character, `None` (or the gap character) if the position is absent.
transitions : iterable of `int`
    Ids of the positions this position connects to.
"""


class GapColumnError(ValueError):
    """ Raised when an alignment column holds no residue at all. """

    def __init__(self, column):
        self.column = column
        super().__init__(f"Alignment column {column} contains only gaps.")


class TransitionMap:
    """ Undirected record of inferred transitions.

    Each transition is kept as the canonical pair ``(min(i, j), max(i, j))``.
    A pair added a second time (once from the scan of each endpoint) is
    reciprocated.
    """

    def __init__(self):
        self._pairs = {}

    def __len__(self):
        return len(self._pairs)

    def __contains__(self, pair):
        return self._canonical(*pair) in self._pairs

    def __repr__(self):
        return f"TransitionMap(size={len(self)}, reciprocated={self.size(reciprocated_only=True)})"

    @staticmethod
    def _canonical(i, j):
        return (i, j) if i <= j else (j, i)

    def add(self, i, j):
        """ Record the transition between ``i`` and ``j``.

        Returns
        -------
        pair : {`tuple`, `None`}
            The canonical pair, `None` for a self-transition (ignored).
        """
        if i == j:
            return None
        pair = self._canonical(i, j)
        if pair in self._pairs:
            self._pairs[pair] = True
        else:
            self._pairs[pair] = False
        return pair

    def remove(self, pair):
        self._pairs.pop(self._canonical(*pair), None)

    @property
    def edges(self):
        """ Canonical pairs in insertion order. """
        return list(self._pairs)

    def is_reciprocated(self, pair):
        return self._pairs.get(self._canonical(*pair), False)

    def is_edge(self, i, j, reciprocated_only=False):
        pair = self._canonical(i, j)
        if pair not in self._pairs:
            return False
        return self._pairs[pair] or not reciprocated_only

    def size(self, reciprocated_only=False):
        if reciprocated_only:
            return sum(self._pairs.values())
        return len(self._pairs)

    def linked(self, idx):
        """ Sorted ids sharing a transition with ``idx``. """
        return sorted({j if i == idx else i for i, j in self._pairs if idx in (i, j)})

    def degree(self, idx):
        return len(self.linked(idx))


@_docstring_parameter(desc_sequences=_desc_sequences, desc_config=_desc_config)
def from_alignment(sequences, config=None, name=None):
    """\
    Build a graph from aligned sequences, one node per column.

    Parameters
    ----------
    {desc_sequences}
    {desc_config}
    name : `str`, optional
        Name of the graph.

    Returns
    -------
    pog : `pogkit.pog.graph.POGraph`
        Graph with node ids ``0, ..., width - 1`` and the virtual end at
        ``width``. A node's base is set only when all its sequences agree.

    Raises
    ------
    ValueError
        If the sequences are not all of the same length.
    GapColumnError
        If a column holds only gaps.
    """
    config = get_config(config)
    if config.verbose is not None:
        set_verbose(logger, config.verbose)
    records = normalize_sequences(sequences)
    if not records:
        raise ValueError("At least one aligned sequence is required.")
    checks.check_aligned_lengths(records)

    gap = config.gap_char
    width = len(records[0][2])
    pog = POGraph(sequences={seq_id: label for seq_id, label, _ in records},
                  width=width, name=name)
    previous = {seq_id: START_ID for seq_id, _, _ in records}

    for column in range(width):
        node = pog.add_node(column)
        for seq_id, _, seq in records:
            char = seq[column]
            if char == gap:
                continue
            node.add_sequence(seq_id, char)
            pog.link(previous[seq_id], column, seq_id)
            previous[seq_id] = column
        if not node.seq_chars:
            raise GapColumnError(column)

    for seq_id, label, _ in records:
        if previous[seq_id] == START_ID:
            logger.warning(f"Sequence {label} has no residues, linking start to end.")
        pog.link(previous[seq_id], pog.end_id, seq_id)

    pog.resolve_bases()
    logger.info(f"Constructed graph with {len(pog)} nodes from {len(records)} aligned sequences.")

    if config.check_invariants:
        checks.check_graph(pog, sequences=records, gap_char=gap)
    return pog


def _lookup(pog, node_id):
    """ Node record for ``node_id`` or `None` if the position was excluded. """
    try:
        return pog.node(node_id)
    except KeyError:
        return None


@_docstring_parameter(desc_config=_desc_config)
def from_inferences(records, label='ancestor', width=None, config=None, name=None):
    """\
    Build the graph of one ancestor from per-position indel inference.

    Parameters
    ----------
    records : iterable of `Inference`
        One record (or ``(position, base, transitions)`` tuple) per position.
        Records of absent positions create no node and their transitions
        are dropped. Records of the sentinels (``-1`` and the end id) always
        contribute their transitions.
    label : `str`
        Label of the ancestor, registered as sequence id ``0``. Every node
        and edge carries this single provenance id.
    width : `int`, optional
        Id of the virtual end. If `None`, the largest position id referenced
        by the records is used.
    {desc_config}
    name : `str`, optional
        Name of the graph, ``label`` if `None`.

    Returns
    -------
    pog : `pogkit.pog.graph.POGraph`
        Every edge has support weight 1 and is reciprocated when both of
        its endpoints listed the transition.
    """
    config = get_config(config)
    if config.verbose is not None:
        set_verbose(logger, config.verbose)
    records = [Inference(*record) for record in records]

    if width is None:
        referenced = [r.position for r in records]
        referenced.extend(t for r in records for t in r.transitions)
        width = max(referenced, default=0)
    if width < 0:
        raise ValueError("The end id must be non-negative.")

    pog = POGraph(sequences={0: label}, width=width, name=name if name is not None else label)
    sentinels = (START_ID, width)
    tmap = TransitionMap()
    excluded = set()

    for record in records:
        if record.position not in sentinels:
            if record.base is None or record.base == config.gap_char:
                excluded.add(record.position)
                continue
            node = pog.add_node(record.position, base=record.base)
            node.add_sequence(0, record.base)
        for target in record.transitions:
            tmap.add(record.position, target)

    for pair in tmap.edges:
        if pair[0] in excluded or pair[1] in excluded:
            tmap.remove(pair)

    # equal-support edges are inserted in front, so the farthest target goes in first
    for i, j in sorted(tmap.edges, key=lambda p: (p[0], -p[1])):
        if _lookup(pog, i) is None or _lookup(pog, j) is None:
            logger.debug(f"Dropping transition {i} -> {j} to a position without a node.")
            tmap.remove((i, j))
            continue
        edge = pog.link(i, j, 0)
        edge.weight = 1.
        pog.node(j).previous_edge(i).weight = 1.
        if tmap.is_reciprocated((i, j)):
            pog.set_reciprocated(i, j)

    logger.info(f"Constructed graph of {label} with {len(pog)} nodes and "
                f"{tmap.size()} transitions ({tmap.size(reciprocated_only=True)} reciprocated).")

    if config.check_invariants:
        checks.check_edge_symmetry(pog)
        checks.check_nonempty_nodes(pog)
        checks.check_acyclic(pog)
    return pog
