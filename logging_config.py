"""
RBN Overlay log setup.

Everything goes through the root logger. A rotating file under the
per-user config dir keeps a record of feed polls and failures, and the
console mirrors it while running from a terminal. The Overlay menu's
"Debug Logging" item switches both handlers to DEBUG at runtime.

Copyright (C) 2025 Peter Hirst (WU2C)
"""

import logging
import logging.handlers
import sys
import platform
from pathlib import Path
from typing import Optional

APP_DIR_NAME = 'RBN Overlay'
LOG_FILE_NAME = 'rbn_overlay.log'

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-25s | %(message)s'
LOG_FORMAT_DEBUG = '%(asctime)s | %(levelname)-8s | %(name)-25s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MAX_BYTES = 5 * 1024 * 1024  # 5 MB per file
BACKUP_COUNT = 3

# Libraries that are chatty at INFO
QUIET_LOGGERS = ('urllib3', 'PyQt6')

_debug_mode = False
_log_dir: Optional[Path] = None
_log_file_path: Optional[Path] = None
_handlers: dict = {}  # 'file' / 'console' -> Handler


def get_log_directory() -> Path:
    """Directory holding rbn_overlay.log (created on first use)."""
    if _log_dir is not None:
        log_dir = _log_dir
    else:
        system = platform.system()
        if system == 'Windows':
            root = Path.home() / 'AppData' / 'Roaming'
        elif system == 'Darwin':
            root = Path.home() / 'Library' / 'Application Support'
        else:
            root = Path.home() / '.config'
        log_dir = root / APP_DIR_NAME / 'logs'

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_log_file_path() -> Path:
    global _log_file_path
    if _log_file_path is None:
        _log_file_path = get_log_directory() / LOG_FILE_NAME
    return _log_file_path


def _formatter(debug: bool) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if debug else LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(console: bool = True, file: bool = True, log_dir: Optional[Path] = None) -> None:
    """
    Attach the overlay's handlers to the root logger.

    Safe to call again: handlers from an earlier call are closed first.

    Args:
        console: Mirror records to stdout
        file: Write records to the rotating log file
        log_dir: Put the log file here instead of the per-user dir
    """
    global _log_dir, _log_file_path

    if log_dir is not None:
        _log_dir = Path(log_dir)
        _log_file_path = None

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    if file:
        _handlers['file'] = logging.handlers.RotatingFileHandler(
            get_log_file_path(),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )
    if console:
        _handlers['console'] = logging.StreamHandler(sys.stdout)

    level = logging.DEBUG if _debug_mode else logging.INFO
    for handler in _handlers.values():
        handler.setLevel(level)
        handler.setFormatter(_formatter(_debug_mode))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger('logging_config')
    logger.info(f"RBN Overlay started on {platform.system()} {platform.release()}")
    if file:
        logger.info(f"Writing log to {get_log_file_path()}")


def set_debug_mode(enabled: bool) -> None:
    """Switch every overlay handler between INFO and DEBUG."""
    global _debug_mode

    _debug_mode = bool(enabled)
    level = logging.DEBUG if _debug_mode else logging.INFO
    for handler in _handlers.values():
        handler.setLevel(level)
        handler.setFormatter(_formatter(_debug_mode))

    logging.getLogger('logging_config').info(
        f"Debug logging {'on' if _debug_mode else 'off'}")


def is_debug_mode() -> bool:
    return _debug_mode
