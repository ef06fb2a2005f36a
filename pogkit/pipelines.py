"""
pipelines
=========

Batch assembly of ancestor graphs on a fixed-size thread pool.

Each job builds or reads its own graph, so no graph is ever shared
between workers. Results are keyed by the job's position in the input.
A job that raises is logged and left out of the results, the rest of the
batch carries on.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed

import pandas as pd
from tqdm import tqdm

from ._logging import _gen_logger, set_verbose
from .config import get_config
from .pog.consensus import consensus_sequence
from .pog.construction import from_inferences

logger = _gen_logger(__name__)


def run_jobs(func, jobs, num_threads=None, config=None, desc=None, show_progress=False):
    """ Run ``func`` on every job on a thread pool.

    Parameters
    ----------
    func : callable
        Called as ``func(job)``.
    jobs : iterable
        Job inputs.
    num_threads : `int`, optional
        Number of worker threads, ``config.num_threads`` if `None`.
    config : `pogkit.config.POGConfig`, optional
        Settings, default settings if `None`.
    desc : `str`, optional
        Progress bar description.
    show_progress : `bool`
        If `True`, show a ``tqdm`` progress bar.

    Returns
    -------
    results : `dict`
        Result of each successful job keyed by its index in ``jobs``.
    """
    config = get_config(config)
    if config.verbose is not None:
        set_verbose(logger, config.verbose)
    num_threads = config.num_threads if num_threads is None else num_threads
    if num_threads < 1:
        raise ValueError("num_threads must be at least 1.")

    jobs = list(jobs)
    results = {}
    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        futures = {executor.submit(func, job): ix for ix, job in enumerate(jobs)}
        for future in tqdm(as_completed(futures), total=len(futures), desc=desc,
                           colour='green', leave=False, disable=not show_progress):
            ix = futures[future]
            try:
                results[ix] = future.result()
            except Exception as e:
                logger.error(f"Job {ix} failed and is excluded from the results: {e!r}")

    num_failed = len(jobs) - len(results)
    if num_failed > 0:
        logger.msg(f"{num_failed} of {len(jobs)} jobs failed.")
    logger.info(f"Completed {len(results)} of {len(jobs)} jobs.")
    return dict(sorted(results.items()))


def assemble_ancestors(jobs, width=None, prune=False, config=None, num_threads=None,
                       show_progress=False):
    """ Build one inference graph per ancestor.

    Parameters
    ----------
    jobs : iterable of `tuple`
        ``(label, records)`` per ancestor, see
        :func:`pogkit.pog.construction.from_inferences`.
    width : `int`, optional
        Id of the virtual end shared by all ancestors.
    prune : `bool`
        If `True`, remove the nodes left without predecessors.
    config : `pogkit.config.POGConfig`, optional
        Settings, default settings if `None`.
    num_threads : `int`, optional
        Number of worker threads, ``config.num_threads`` if `None`.
    show_progress : `bool`
        If `True`, show a progress bar.

    Returns
    -------
    pogs : `dict` [`int`, `pogkit.pog.graph.POGraph`]
        Graph of each successfully assembled ancestor keyed by job index.
    """
    config = get_config(config)

    def assemble(job):
        label, records = job
        pog = from_inferences(records, label=label, width=width, config=config)
        if prune:
            pog.prune_orphans(config=config)
        return pog

    return run_jobs(assemble, jobs, num_threads=num_threads, config=config,
                    desc='Assembling ancestors', show_progress=show_progress)


def consensus_batch(pogs, gappy=False, config=None, num_threads=None, show_progress=False):
    """ Consensus sequence of every graph.

    Parameters
    ----------
    pogs : {`dict`, `list`} [`pogkit.pog.graph.POGraph`]
        Graphs, keyed by label if a `dict`.
    gappy : `bool`
        If `True`, return gapped consensus sequences.

    Returns
    -------
    sequences : `pandas.Series`
        Consensus sequence indexed by label (or position in ``pogs``) for
        every graph whose consensus could be extracted.
    """
    if isinstance(pogs, dict):
        keys = list(pogs)
        graphs = list(pogs.values())
    else:
        graphs = list(pogs)
        keys = list(range(len(graphs)))

    results = run_jobs(lambda pog: consensus_sequence(pog, gappy=gappy, config=config),
                       graphs, num_threads=num_threads, config=config,
                       desc='Consensus', show_progress=show_progress)
    return pd.Series({keys[ix]: seq for ix, seq in results.items()}, name='consensus', dtype=object)
