"""
dot
===

Export of partial order graphs to Graphviz DOT text and re-import.

The annotated form keeps everything needed to rebuild the graph: the
sequence registry (one ``seq_<id>`` graph attribute per sequence) and the
width as graph attributes, per-node characters of every sequence, and
per-edge sequence tags, all keyed by sequence id. Edges to and from the
virtual sentinels are not written as edges: the annotated form records
them on the node as 'from_start' and 'to_end' attributes, and for text
without these they are rebuilt from each sequence's chain of tagged edges.

Text is parsed with pydot. Graphs written without a registry, where the
annotations name sequences by label, are read as well.
"""

import re

import pydot

from .._logging import _gen_logger
from .._utils import load_from_file, save_to_file
from ..pog.distributions import parse_distribution
from ..pog.graph import POGraph

logger = _gen_logger(__name__)


CLUSTAL_COLOURS = {
    'A': '#80B3E6', 'R': '#E6331A', 'N': '#1ACC1A', 'D': '#CC4DCC', 'C': '#E68080',
    'Q': '#1ACC1A', 'E': '#CC4DCC', 'G': '#E6994D', 'H': '#1AB3B3', 'I': '#80B3E6',
    'L': '#80B3E6', 'K': '#E6331A', 'M': '#80B3E6', 'F': '#80B3E6', 'P': '#CCCC00',
    'S': '#1ACC1A', 'T': '#1ACC1A', 'W': '#80B3E6', 'Y': '#1AB3B3', 'V': '#80B3E6',
}
UNRESOLVED_COLOUR = '#FFFFFF'

_PSEUDO_NODES = {'node', 'edge', 'graph'}

_REGISTRY_KEY = re.compile(r'^seq_(-?\d+)$')
# aligned groups as written by older tools, e.g. 'rank=[1 2 ];'
_LIST_RANK = re.compile(r'^[ \t]*rank[ \t]*=[ \t]*\[([^\]\n]*)\][ \t]*;?[ \t]*$', re.MULTILINE)
_ESCAPED = re.compile(r'\\(.)', re.DOTALL)


class DotParseError(ValueError):
    """ Raised when DOT text holds ill-formed identifiers or attributes. """


def fill_colour(base):
    """ Clustal colour of a resolved character, white if unresolved or unknown. """
    if base is None:
        return UNRESOLVED_COLOUR
    return CLUSTAL_COLOURS.get(base.upper(), UNRESOLVED_COLOUR)


def _quote(value):
    value = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{value}"'


def _unquote(value):
    value = str(value)
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPED.sub(r'\1', value[1:-1])
    return value


def _penwidth(support):
    return 8 if support > 20 else support // 3 + 1


def _ids(seq_ids):
    return ','.join(str(k) for k in seq_ids)


def to_dot(pog, annotate=True, with_distribution=True):
    """ Serialize a graph as DOT text.

    Parameters
    ----------
    pog : `pogkit.pog.graph.POGraph`
        The graph.
    annotate : `bool`
        If `True`, write the styled form with sequence annotations that
        :func:`from_dot` can parse. Otherwise write a compact form with the
        node labels and edge support only.
    with_distribution : `bool`
        If `True` (and ``annotate``), write the node distributions.

    Returns
    -------
    text : `str`
    """
    num_sequences = max(pog.num_sequences, 1)

    lines = ['digraph {', '\trankdir="LR";']
    if annotate:
        lines.append(f'\twidth={pog.width};')
        for seq_id, label in pog.sequences.items():
            key = f'seq_{seq_id}' if seq_id >= 0 else _quote(f'seq_{seq_id}')
            lines.append(f'\t{key}={_quote(label)};')

    grouped = set()
    for node_id, node in pog.nodes.items():
        if node.aligned_to and node_id not in grouped:
            group = [node_id] + [k for k in node.aligned_to if k in pog and k != node_id]
            grouped.update(group)
            lines.append('\t{rank=same; ' + ' '.join(f'"{k}";' for k in group) + '}')

    for node_id, node in pog.nodes.items():
        label = _quote(pog.node_label(node_id))
        if annotate:
            attrs = [f'label={label}', 'fontsize=15', 'style="filled"',
                     f'fillcolor="{fill_colour(node.base)}"']
            if with_distribution and node.distribution is not None:
                attrs.append(f'distribution="{node.distribution.describe()}"')
            seqs = ';'.join(f'{k}:{c}' for k, c in node.seq_chars.items())
            attrs.append(f'sequences={_quote(seqs)}')
            for key, edge in (('from_start', node.previous_edge(pog.start_id)),
                              ('to_end', node.next_edge(pog.end_id))):
                if edge is None:
                    continue
                attrs.append(f'{key}="{_ids(edge.sequences)}"')
                if edge.reciprocated:
                    attrs.append(f'{key}_reciprocated=true')
        else:
            attrs = [f'label={label}']
        lines.append(f'\t"{node_id}"[{",".join(attrs)}];')

        for edge in node.out_edges:
            if edge.target == pog.end_id:
                continue
            percent = 100 * edge.support / num_sequences
            if annotate:
                attrs = ['fontsize=12', 'fontcolor="darkgray"', f'penwidth={_penwidth(edge.support)}',
                         'dir="forward"', f'label="{percent:.0f}%"', f'sequences="{_ids(edge.sequences)}"']
                if edge.reciprocated:
                    attrs.append('reciprocated=true')
            else:
                attrs = ['dir="forward"', f'label="{percent:.1f}%"']
            lines.append(f'\t"{node_id}"->"{edge.target}"[{",".join(attrs)}];')

    lines.append('}')
    return '\n'.join(lines) + '\n'


def _parse_id(token, where):
    token = _unquote(token)
    try:
        node_id = int(token)
    except ValueError:
        raise DotParseError(f"{where}: node identifier {token!r} is not an integer.") from None
    if node_id < 0:
        raise DotParseError(f"{where}: node identifier {node_id} must be non-negative.")
    return node_id


def _attributes(element):
    return {_unquote(key): _unquote(value) for key, value in element.get_attributes().items()}


def _rank_groups(graph):
    """ Node ids of every 'rank=same' subgraph, nested ones included. """
    groups = []
    for subgraph in graph.get_subgraphs():
        if _attributes(subgraph).get('rank') == 'same':
            names = [node.get_name() for node in subgraph.get_nodes()]
            groups.append([_parse_id(name, "Rank group") for name in names
                           if _unquote(name) not in _PSEUDO_NODES])
        groups.extend(_rank_groups(subgraph))
    return groups


def _same_rank(match):
    return '{rank=same; ' + ' '.join(f'"{k}";' for k in match.group(1).split()) + '}'


def _load_graph(text):
    text = _LIST_RANK.sub(_same_rank, text)
    try:
        graphs = pydot.graph_from_dot_data(text)
    except Exception as e:
        raise DotParseError(f"Could not parse DOT text: {e}") from e
    if not graphs:
        raise DotParseError("Could not parse DOT text.")
    if len(graphs) > 1:
        logger.warning(f"DOT text holds {len(graphs)} graphs, only the first is read.")
    return graphs[0]


def _registry(graph_attrs, node_attrs, edges):
    """ Sequence registry and the map from annotation tokens to sequence ids.

    Without ``seq_<id>`` graph attributes the annotations name sequences by
    label, and ids are given in order of first appearance.
    """
    sequences = {}
    for key, label in graph_attrs.items():
        match = _REGISTRY_KEY.match(key)
        if match:
            sequences[int(match.group(1))] = label
    if sequences:
        return sequences, {str(seq_id): seq_id for seq_id in sequences}

    labels = []
    for attrs in node_attrs.values():
        for token in filter(None, attrs.get('sequences', '').split(';')):
            labels.append(token.rpartition(':')[0])
    for _, _, attrs in edges:
        labels.extend(filter(None, attrs.get('sequences', '').split(',')))
    labels = list(dict.fromkeys(labels))
    return dict(enumerate(labels)), {label: ix for ix, label in enumerate(labels)}


def from_dot(text):
    """ Rebuild a graph from the annotated DOT text written by :func:`to_dot`.

    Parameters
    ----------
    text : `str`
        DOT text.

    Returns
    -------
    pog : `pogkit.pog.graph.POGraph`

    Raises
    ------
    DotParseError
        If the text is not DOT, identifiers are not non-negative integers,
        an attribute is ill-formed, an edge references an undeclared node,
        or a sequence's tagged edges do not form a single chain.
    """
    graph = _load_graph(text)
    graph_attrs = _attributes(graph)

    node_attrs = {}
    for node in graph.get_nodes():
        if _unquote(node.get_name()) in _PSEUDO_NODES:
            continue
        node_id = _parse_id(node.get_name(), "Node")
        if node_id in node_attrs:
            raise DotParseError(f"Node {node_id} is declared twice.")
        node_attrs[node_id] = _attributes(node)

    edges = []
    for edge in graph.get_edges():
        where = f"Edge {_unquote(edge.get_source())} -> {_unquote(edge.get_destination())}"
        edges.append((_parse_id(edge.get_source(), where), _parse_id(edge.get_destination(), where),
                      _attributes(edge)))

    sequences, seq_ids = _registry(graph_attrs, node_attrs, edges)

    if 'width' in graph_attrs:
        try:
            width = int(graph_attrs['width'])
        except ValueError:
            raise DotParseError(f"Graph width {graph_attrs['width']!r} is not an integer.") from None
    else:
        width = max(node_attrs, default=-1) + 1

    pog = POGraph(sequences=sequences, width=width)

    for node_id, attrs in node_attrs.items():
        label = attrs.get('label', '')
        try:
            node = pog.add_node(node_id, base=label if len(label) == 1 else None)
        except ValueError as e:
            raise DotParseError(str(e)) from None
        for token in filter(None, attrs.get('sequences', '').split(';')):
            key, sep, char = token.rpartition(':')
            if not sep or key not in seq_ids or len(char) != 1:
                raise DotParseError(f"Node {node_id}: ill-formed sequence annotation {token!r}.")
            node.add_sequence(seq_ids[key], char)
        if attrs.get('distribution'):
            try:
                node.distribution = parse_distribution(attrs['distribution'])
            except ValueError as e:
                raise DotParseError(f"Node {node_id}: {e}") from None

    for source, target, attrs in edges:
        if source not in pog or target not in pog:
            raise DotParseError(f"Edge {source} -> {target} references an undeclared node.")
        tags = list(filter(None, attrs.get('sequences', '').split(',')))
        for key in tags:
            if key not in seq_ids:
                raise DotParseError(f"Edge {source} -> {target}: unknown sequence {key!r}.")
            pog.link(source, target, seq_ids[key])
        if not tags:
            pog.link(source, target)
        if attrs.get('reciprocated') == 'true':
            pog.set_reciprocated(source, target)

    # nodes without per-sequence annotations take their base for every sequence passing through
    for node_id, node in pog.nodes.items():
        if node.seq_chars:
            continue
        if node.base is None:
            raise DotParseError(f"Node {node_id} has neither a resolved base nor sequence annotations.")
        for edge in node.in_edges + node.out_edges:
            for seq_id in edge.sequences:
                node.add_sequence(seq_id, node.base)

    if any('from_start' in attrs or 'to_end' in attrs for attrs in node_attrs.values()):
        _restore_sentinels(pog, node_attrs, seq_ids)
    else:
        _link_sentinels(pog)

    for group in _rank_groups(graph):
        for node_id in group:
            if node_id not in pog:
                raise DotParseError(f"Rank group references undeclared node {node_id}.")
            for other in group:
                if other != node_id:
                    pog.node(node_id).add_aligned(other)

    logger.info(f"Parsed graph with {len(pog)} nodes and {pog.num_sequences} sequences.")
    return pog


def _restore_sentinels(pog, node_attrs, seq_ids):
    """ Rebuild the sentinel edges recorded in the 'from_start' and 'to_end' node attributes. """
    for node_id, attrs in node_attrs.items():
        for key, source, target in (('from_start', pog.start_id, node_id),
                                    ('to_end', node_id, pog.end_id)):
            if key not in attrs:
                continue
            for token in filter(None, attrs[key].split(',')):
                if token not in seq_ids:
                    raise DotParseError(f"Node {node_id}: unknown sequence {token!r} in {key}.")
                pog.link(source, target, seq_ids[token])
            if not attrs[key]:
                pog.link(source, target)
            if attrs.get(f'{key}_reciprocated') == 'true':
                pog.set_reciprocated(source, target)

    for seq_id in pog.sequences:
        if not any(seq_id in node.seq_chars for node in pog.nodes.values()):
            pog.link(pog.start_id, pog.end_id, seq_id)


def _link_sentinels(pog):
    """ Connect the first and last node of each sequence's chain to the sentinels. """
    for seq_id, label in pog.sequences.items():
        members = [node for node in pog.nodes.values() if seq_id in node.seq_chars]
        if not members:
            pog.link(pog.start_id, pog.end_id, seq_id)
            continue
        first = [node.id for node in members
                 if not any(edge.carries(seq_id) for edge in node.in_edges)]
        last = [node.id for node in members
                if not any(edge.carries(seq_id) for edge in node.out_edges)]
        if len(first) != 1 or len(last) != 1:
            raise DotParseError(f"Edges tagged with sequence {label} do not form a single chain.")
        pog.link(pog.start_id, first[0], seq_id)
        pog.link(last[0], pog.end_id, seq_id)


def write_dot(pog, file_name, file_path=None, annotate=True, with_distribution=True):
    """ Write :func:`to_dot` text to a '.dot' (or '.gv') file and return its path. """
    return save_to_file(to_dot(pog, annotate=annotate, with_distribution=with_distribution),
                        file_name, file_path=file_path)


def read_dot(file_name, file_path=None):
    """ Read a graph from a '.dot' (or '.gv') file written by :func:`write_dot`. """
    return from_dot(load_from_file(file_name, file_path=file_path))
