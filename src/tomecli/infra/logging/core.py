from __future__ import annotations

"""
Logging Core Orchestrator.

Owns the logging lifecycle of one dispatcher run. configure_logging() is
called once after the configuration is resolved and shutdown_logging() once
before the process exits; a second configure call in between is a no-op.
Records travel through a QueueHandler on the root logger to a
QueueListener that owns the stderr and file handlers. Nothing is ever
written to stdout, which carries the completion protocol.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from tomecli.infra.logging.config import _LEVEL_MAP, LoggingConfig
from tomecli.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Markers stored on the root logger between configure and shutdown
_CONFIGURED_FLAG_ATTR: str = "_tomecli_configured"
_QUEUE_LISTENER_ATTR: str = "_tomecli_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig) -> logging.Logger:
    """
    Attach the dispatcher's handlers to the root logger.

    The level is DEBUG under --debug and WARNING otherwise, so a normal run
    only reports configuration warnings and failures on stderr. Call
    shutdown_logging() before configuring again with different settings.

    Args:
        cfg: Level, stderr toggle and optional log file.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False):
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    handlers_list = _build_handlers(cfg, level_int)
    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    # The listener thread performs the actual writes
    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()
    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Covers exits that bypass main()'s finally block
    atexit.register(_safe_stop_listener, listener)

    return root


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a tomecli module (usually __name__)."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Stop the listener so every queued record is written before exit."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _build_handlers(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    handlers_list: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level_int)
        sh.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(sh)
        handlers_list.append(sh)

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    return handlers_list


def _parse_level(level: str) -> int:
    """Unknown or empty level names fall back to WARNING."""
    if not level:
        return logging.WARNING
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.WARNING)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating double-stop calls.

    QueueListener.stop() fails once its thread has been joined and reset,
    which happens when atexit runs after an explicit shutdown.
    """
    if not listener:
        return

    if getattr(listener, "_thread", None) is not None:
        listener.stop()
