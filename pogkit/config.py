"""
config
======

Explicit configuration passed into every entry point that changes
algorithm behavior.
"""


class POGConfig:
    """ Settings controlling construction, pruning, consensus and batch runs.

    Parameters
    ----------
    gap_char : `str`
        Single character marking a gap in aligned sequences and the character
        emitted for gap columns in gapped consensus output. (Default = '-')
    cascade : `bool`
        If `True`, removing a node (or transition) also removes every successor
        that is left without predecessors. (Default = `True`)
    prefer_reciprocated : `bool`
        If `True`, the consensus walk follows a reciprocated outgoing edge
        whenever one exists. (Default = `True`)
    num_threads : `int`
        Number of worker threads used by :mod:`pogkit.pipelines`. (Default = 1)
    check_invariants : `bool`
        If `True`, graph invariants are asserted after construction and
        removal (useful for debugging, costs a full pass). (Default = `False`)
    verbose : {`None`, "DEBUG", "TRACE", "INFO", "WARN", "MSG", "ERROR"}
        If not `None`, verbosity applied to the loggers of the entry points
        that receive this configuration.
    """

    def __init__(self, gap_char='-', cascade=True, prefer_reciprocated=True,
                 num_threads=1, check_invariants=False, verbose=None):
        if not isinstance(gap_char, str) or len(gap_char) != 1:
            raise ValueError("gap_char must be a single character.")
        if int(num_threads) < 1:
            raise ValueError("num_threads must be at least 1.")

        self.gap_char = gap_char
        self.cascade = bool(cascade)
        self.prefer_reciprocated = bool(prefer_reciprocated)
        self.num_threads = int(num_threads)
        self.check_invariants = bool(check_invariants)
        self.verbose = verbose

    def __repr__(self):
        return (f"POGConfig(gap_char={self.gap_char!r}, cascade={self.cascade}, "
                f"prefer_reciprocated={self.prefer_reciprocated}, num_threads={self.num_threads}, "
                f"check_invariants={self.check_invariants}, verbose={self.verbose!r})")

    def replace(self, **kwargs):
        """ Return a copy with the given settings changed. """
        settings = dict(gap_char=self.gap_char, cascade=self.cascade,
                        prefer_reciprocated=self.prefer_reciprocated,
                        num_threads=self.num_threads,
                        check_invariants=self.check_invariants,
                        verbose=self.verbose)
        settings.update(kwargs)
        return POGConfig(**settings)


DEFAULT_CONFIG = POGConfig()


def get_config(config=None):
    """ Return ``config`` or the default configuration if `None`. """
    if config is None:
        return DEFAULT_CONFIG
    if not isinstance(config, POGConfig):
        raise TypeError("Unrecognized type for config, must be POGConfig or None.")
    return config
