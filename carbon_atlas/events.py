"""
Logging and event helpers shared by the atlas modules.

Two channels are used everywhere:
  - module loggers (``logging.getLogger(__name__)``) for humans
  - the structured ``emit(kind, payload)`` callback for hosts that want
    machine-readable progress (the CLI, the HTTP layer, notebooks)
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, Callable, Dict, Optional


# Event emitter signature
EmitFn = Callable[[str, Dict[str, Any]], None]

DEFAULT_EMIT: EmitFn = lambda *_: None

logger = logging.getLogger("carbon_atlas")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def safe_emit(emit: Optional[EmitFn], kind: str, payload: Dict[str, Any]) -> None:
    """Call an emitter, never letting a broken host callback escape."""
    if emit is None:
        return
    try:
        emit(kind, payload)
    except Exception:
        logger.debug("emit(%s) failed", kind, exc_info=True)


def log_event(
    msg: str,
    emit: Optional[EmitFn] = None,
    *,
    level: str = "info",
    log: Optional[logging.Logger] = None,
    **fields: Any,
) -> None:
    """
    Log a message and mirror it as a ``"log"`` event.

    Parameters
    ----------
    msg : str
        Human-readable message.
    emit : callable, optional
        Structured event emitter: ``emit(kind: str, payload: dict)``.
    level : str
        One of "debug", "info", "warn", "error".
    log : logging.Logger, optional
        Logger to write to; defaults to the package logger.
    fields : dict
        Extra context merged into the event payload.
    """
    (log or logger).log(_LEVELS.get(level, logging.INFO), msg)

    payload = {"level": level, "msg": msg, "ts": time.time()}
    payload.update(fields)
    safe_emit(emit, "log", payload)


def configure_logging(verbosity: int = 0) -> None:
    """Attach a stderr handler to the package logger (0=INFO, 1+=DEBUG)."""
    handler = logging.StreamHandler(sys.stderr)
    if verbosity >= 1:
        handler.setFormatter(logging.Formatter(
            "%(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
        ))
        logger.setLevel(logging.DEBUG)
    else:
        handler.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
        logger.setLevel(logging.INFO)

    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
