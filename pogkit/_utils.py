import os

from pathlib import Path
from textwrap import dedent


def _docstring_parameter(**kwds):
    """\
    Docstrings should start with "\" in the first line for proper formatting.
    """
    def dec(obj):
        obj.__orig_doc__ = obj.__doc__
        obj.__doc__ = dedent(obj.__doc__).format_map(kwds)
        return obj
    return dec


_desc_config = """\
config : `pogkit.config.POGConfig`, optional
    Settings controlling the operation, default settings if `None`.
"""

_desc_sequences = """\
sequences : {`dict`, `list`}
    Aligned (gapped) sequences of equal length, provided as a `dict` mapping
    label to sequence, a `list` of ``(label, sequence)`` pairs, or a `list`
    of ``(seq_id, label, sequence)`` triples. Sequence ids are assigned
    ``0, 1, ...`` in input order when not given.
"""


def _file_path(file_name, file_path=None, file_format=None):
    if file_path is None:
        file_path = ''

    if not isinstance(file_name, str):
        file_name = str(file_name)

    if file_format is None:
        file_format = file_name.split('.')[-1]
    else:
        file_name = '.'.join([file_name, file_format])

    return Path(os.path.join(file_path, file_name)), file_format


def load_from_file(file_name, file_path=None, file_format=None):
    """ Load graph text from file.

    Parameters
    ----------
    file_name: {`str`, `pathlib.Path`}
        Input file name.
    file_path: {`str` `pathlib.Path`}, optional (default: None)
        File path. Empty string by default.
    file_format: `str`, optional (default: None)
        File format. Currently supported file formats: 'dot', 'gv'.
        If `None`, ``file_format`` will be inferred from the file extension
        in ``file_name``.

    Returns
    -------
    text : `str`
        Content of the file.
    """
    _fp, file_format = _file_path(file_name, file_path=file_path, file_format=file_format)

    if file_format not in ['dot', 'gv']:
        raise ValueError("Unrecognized file_format.")

    return _fp.read_text()


def save_to_file(text, file_name, file_path=None, file_format=None):
    """ Write graph text to file, see :func:`load_from_file` for the arguments.

    Returns
    -------
    fp : `pathlib.Path`
        Path of the written file.
    """
    _fp, file_format = _file_path(file_name, file_path=file_path, file_format=file_format)

    if file_format not in ['dot', 'gv']:
        raise ValueError("Unrecognized file_format.")

    _fp.write_text(text)
    return _fp


def normalize_sequences(sequences):
    """ Return aligned sequences as a list of ``(seq_id, label, sequence)`` triples.

    Parameters
    ----------
    sequences : {`dict`, `list`}
        See :func:`pogkit.pog.construction.from_alignment`.
    """
    if isinstance(sequences, dict):
        records = [(ix, label, seq) for ix, (label, seq) in enumerate(sequences.items())]
    else:
        records = []
        for ix, record in enumerate(sequences):
            record = tuple(record)
            if len(record) == 2:
                records.append((ix, record[0], record[1]))
            elif len(record) == 3:
                records.append(record)
            else:
                raise ValueError("Sequences must be (label, sequence) pairs or (seq_id, label, sequence) triples.")

    ids = [r[0] for r in records]
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate sequence ids detected.")
    return [(seq_id, label, str(seq)) for seq_id, label, seq in records]
