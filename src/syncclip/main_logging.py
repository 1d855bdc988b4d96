"""Logging setup for the syncclip CLI."""
import logging

# Third-party loggers that log every HTTP request at INFO/DEBUG.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr.

    Args:
        verbose: DEBUG for syncclip (including every engine call) when True,
            WARNING otherwise. Failed engine calls log at WARNING, so they
            show either way.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(levelname)s %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s"
    logging.basicConfig(level=level, format=fmt, handlers=[logging.StreamHandler()])
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
