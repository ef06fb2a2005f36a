from functools import partialmethod
import logging

# modified from MOSCOT: https://github.com/theislab/moscot/blob/main/src/moscot/_logging.py

__all__ = ["set_verbose"]

# Note: add custom level between WARNING and ERROR for messages that should
# be seen by default (e.g., truncated sequence provenance after pruning).

CUSTOM_LEVEL = logging.WARNING + 5
logging.MSG = CUSTOM_LEVEL
logging.addLevelName(logging.MSG, 'MSG')
logging.Logger.msg = partialmethod(logging.Logger.log, logging.MSG)

logging.TRACE = logging.DEBUG + 5
logging.addLevelName(logging.TRACE, 'TRACE')
logging.Logger.trace = partialmethod(logging.Logger.log, logging.TRACE)

_LEVELS = {"DEBUG": logging.DEBUG,
           "TRACE": logging.TRACE,
           "INFO": logging.INFO,
           "WARN": logging.WARNING,
           "MSG": logging.MSG,
           "ERROR": logging.ERROR,
           }


def _gen_logger(name='') -> "logging.Logger":
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger(name)

    # worker threads and repeated imports call this for the same name
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return logger

    logging.captureWarnings(True)

    logger.setLevel(logging.WARN)
    console = Console(stderr=True)
    ch = RichHandler(console=console,
                     show_level=False,
                     show_path=False,
                     show_time=False,
                     keywords=RichHandler.KEYWORDS + ['TRACE', 'MSG'],
                     )

    log_formatter = logging.Formatter(fmt="%(name)s: %(asctime)s | %(levelname)s | %(module)s:%(funcName)s:%(lineno)s | >>> %(message)s",
                                      datefmt='%m/%d/%Y %I:%M:%S  %p')
    ch.setFormatter(log_formatter)
    logger.addHandler(ch)

    # this prevents double outputs
    logger.propagate = False
    return logger


def set_verbose(logger, verbose="ERROR"):
    """ Set logger verbosity.

    Parameters
    ----------
    logger : `logging.Logger`
        The logger to update, typically the module-level logger.
    verbose: {"DEBUG", "TRACE", "INFO", "WARN", "MSG", "ERROR"}
        Verbose level. (Default = "ERROR")

        Options :

            - "DEBUG": show all output logs.
            - "TRACE": show detailed process logs (e.g., every rerouted sequence).
            - "INFO": show only process logs to confirm things are working as expected.
            - "WARN": show unexpected behavior, potential problem, critical message, or error logs.
            - "MSG": show critical message and error logs.
            - "ERROR": only show log if error happened.
    """
    level = _LEVELS.get(verbose)
    if level is None:
        logger.error("Unrecognized verbose level, options: ['DEBUG', 'TRACE', 'INFO','WARN', 'MSG', 'ERROR'], use 'ERROR' instead")
        level = logging.ERROR

    if logger.level != level:
        logger.setLevel(level)
    for handler in logger.handlers:
        if handler.level != level:
            handler.setLevel(level)
            logger.debug(f"Logging verbosity set to {level}.")
