from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from logging.handlers import RotatingFileHandler


ROOT_DIR = os.path.normpath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
_LOG_DIR = os.getenv("OURGROCERIES_LOG_DIR") or os.path.normpath(os.path.join(ROOT_DIR, "debug", "logs"))
_LOG_NAME = "app.log"
LOGGER_NAME = "ourgroceries"


def ensure_log_dir() -> str:
    os.makedirs(_LOG_DIR, exist_ok=True)
    return _LOG_DIR


def log_file_path() -> str:
    return os.path.join(ensure_log_dir(), _LOG_NAME)


def setup_logging(level: int = logging.DEBUG, console_level: int = logging.INFO) -> logging.Logger:
    """Configure a rotating file logger under debug/logs/app.log.

    Returns the configured top-level logger ("ourgroceries").
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate handlers if called twice
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        fhandler = RotatingFileHandler(log_file_path(), maxBytes=512_000, backupCount=3, encoding="utf-8")
        fhandler.setLevel(logging.DEBUG)
        fhandler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(fhandler)

    # RotatingFileHandler is itself a StreamHandler subclass
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(console_level)
        ch.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(ch)

    logger.debug("Logging initialized at %s", log_file_path())
    return logger


def install_excepthook(logger: logging.Logger | None = None) -> None:
    """Install a sys.excepthook that logs uncaught exceptions with traceback."""
    lg = logger or logging.getLogger(LOGGER_NAME)

    def _hook(exc_type, exc, tb):
        lg.error("Uncaught exception:")
        for line in traceback.format_exception(exc_type, exc, tb):
            lg.error(line.rstrip())
        # Chain to default hook for console visibility
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook


def log_exception_context(msg: str, logger: logging.Logger | None = None) -> None:
    """Log `msg` with the traceback of the exception being handled, as one record."""
    lg = logger or logging.getLogger(LOGGER_NAME)
    lg.error("%s\n%s", msg, traceback.format_exc().rstrip())


def crash_hint() -> str:
    """Return a short hint with the log file location to show users."""
    lf = log_file_path()
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return f"[{ts}] See log for details: {lf}"
