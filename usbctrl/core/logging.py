"""
Central logger configuration for usbctrl.

Only records emitted by the ``usbctrl`` package reach the sink, so an
embedding application keeps control of its own loguru output.
"""

import sys
from typing import Any, Optional

from loguru import logger

from .config import ManagerConfig

_PACKAGE = "usbctrl"
_FALLBACK_LEVEL = "INFO"
_STDOUT_FORMAT = (
    "<cyan>{time:MM-DD at HH:mm:ss}</cyan> | <level>{level:7}</level> | "
    "{thread.name:{width}} | {name}:{line} - <level>{message}</level>"
)


def init_logger(
    config: Optional[ManagerConfig] = None,
    log_level: Optional[str] = None,
    sink: Any = None,
) -> int:
    """
    Route usbctrl log records to a single sink.

    The level is ``log_level`` when given, else ``config.log_level``. An
    unknown level name falls back to ``INFO`` with a warning rather than
    failing start-up. The thread column is sized to the configured monitor
    thread name so hotplug lines stay aligned.

    Parameters
    ----------
    config : ManagerConfig | None, optional
        Settings supplying the level and monitor thread name, by default
        ``ManagerConfig()``.
    log_level : str | None, optional
        Level overriding ``config.log_level``, case-insensitive.
    sink : Any, optional
        Loguru sink, by default colorized ``sys.stdout``.

    Returns
    -------
    int
        Loguru handler id, usable with ``logger.remove``.
    """
    config = config or ManagerConfig()
    level = (log_level or config.log_level).upper()
    width = max(len(config.thread_name), len("MainThread"))
    fmt = _STDOUT_FORMAT.replace("{width}", str(width))
    colorize = sink is None
    sink = sys.stdout if sink is None else sink

    logger.remove()
    try:
        handler_id = logger.add(
            sink,
            colorize=colorize,
            format=fmt,
            level=level,
            filter=_PACKAGE,
            diagnose=False,
        )
    except ValueError:
        handler_id = logger.add(
            sink,
            colorize=colorize,
            format=fmt,
            level=_FALLBACK_LEVEL,
            filter=_PACKAGE,
            diagnose=False,
        )
        logger.warning("Unknown log level {!r}; using {}.", level, _FALLBACK_LEVEL)
        level = _FALLBACK_LEVEL
    logger.success('Logger initialized with LOG_LEVEL = "{}".', level)
    return handler_id
