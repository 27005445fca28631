"""
Logging helpers.

The CLI keeps stdout for results and sends diagnostics to a log file, whose
path is shown next to any error so a failed loft can be looked into later.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Optional

ENV_LOG_LEVEL = "LAPSTRAKE_LOG_LEVEL"
ENV_LOG_DIR = "LAPSTRAKE_LOG_DIR"

LOG_FILENAME = "lapstrake-lofter.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_seen_keys: set[str] = set()
_seen_lock = threading.Lock()


def default_log_dir() -> Path:
    """`$LAPSTRAKE_LOG_DIR`, else the per-user state directory."""
    override = os.environ.get(ENV_LOG_DIR)
    if override:
        return Path(override)
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home())
        return Path(base) / "LapstrakeLofter" / "logs"
    state = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state) / "lapstrake-lofter" / "logs"


def resolve_log_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    value = getattr(logging, name, None) if name else None
    return value if isinstance(value, int) else logging.INFO


def current_log_path() -> Optional[Path]:
    """Path of the log file attached to the root logger, if any."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(
    *,
    log_level: str | int = "INFO",
    log_dir: Optional[str | Path] = None,
) -> Optional[Path]:
    """
    Attach a UTF-8 file handler to the root logger.

    Calling it again reuses the existing handler. `$LAPSTRAKE_LOG_LEVEL` wins
    over `log_level`. Returns the log path, or None if the file can't be opened.
    """
    existing = current_log_path()
    if existing is not None:
        return existing

    level = resolve_log_level(os.environ.get(ENV_LOG_LEVEL) or log_level)
    directory = Path(log_dir) if log_dir is not None else default_log_dir()
    log_path = directory / LOG_FILENAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_path), encoding="utf-8")
    except OSError:
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    logging.captureWarnings(True)
    root.info("Logging to %s (level=%s)", log_path, logging.getLevelName(level))
    return log_path


def format_exception_message(prefix: str, message: str, *, log_path: Optional[Path]) -> str:
    text = f"{prefix}: {message}"
    if log_path is not None:
        text += f"\n(log file: {log_path})"
    return text


def log_once(logger: logging.Logger, key: str, level: int, msg: str, *args) -> bool:
    """
    Log `msg` the first time `key` is seen in this process; returns whether it
    was logged.
    """
    with _seen_lock:
        if key in _seen_keys:
            return False
        _seen_keys.add(key)
    logger.log(level, msg, *args)
    return True
