"""Named loggers shared by the HoopSync modules."""
import logging
from typing import Dict

_LOGGERS: Dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Create or retrieve a named logger under the ``hoopsync`` namespace.

    A single console handler is attached to the package root logger the
    first time any logger is requested; module loggers propagate to it.
    """
    if name in _LOGGERS:
        return _LOGGERS[name]

    root = logging.getLogger("hoopsync")
    if not root.handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console)
        root.setLevel(level)

    logger = root if name == "hoopsync" else logging.getLogger(
        name if name.startswith("hoopsync") else f"hoopsync.{name}"
    )
    _LOGGERS[name] = logger
    return logger
