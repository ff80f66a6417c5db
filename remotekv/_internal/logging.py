"""
A request trail for remotekv: when switched on, APIClient records the method, url
and status of every call to LOGS_DIR/internal.log. The records use their own loguru
level and never reach the console sinks.
"""

import os

from loguru import logger

from ..config import LOGS_DIR, _to_bool

ENABLE_ENV = "REMOTEKV_ENABLE_INTERNAL_LOG"

_LEVEL = "REMOTEKV_INTERNAL"
_LOGFILE_BASE = LOGS_DIR / "internal.log"
_sink_id = None

# Just below DEBUG (10), so default console sinks at DEBUG and above skip it.
try:
    logger.level(_LEVEL)
except ValueError:
    logger.level(name=_LEVEL, no=9)


def _only_trail(record) -> bool:
    return record["level"].name == _LEVEL


def enable() -> None:
    """
    Starts writing the request trail, if REMOTEKV_ENABLE_INTERNAL_LOG is true.
    Calling it again while enabled does nothing.
    """
    global _sink_id
    if _sink_id is not None:
        return
    if not _to_bool(os.environ.get(ENABLE_ENV, "0")):
        return
    _sink_id = logger.add(
        _LOGFILE_BASE,
        level=_LEVEL,
        filter=_only_trail,
        colorize=False,
        rotation="10 MB",
        retention=3,
        compression="zip",
    )


def disable() -> None:
    global _sink_id
    if _sink_id is not None:
        logger.remove(_sink_id)
        _sink_id = None


def is_enabled() -> bool:
    return _sink_id is not None


def log(message: str, *args, **kwargs) -> None:
    if _sink_id is None:
        return
    logger.opt(depth=1).log(_LEVEL, message, *args, **kwargs)
