"""
RanchHand — Logging

Named loggers with a console handler and, unless RANCHHAND_LOG_TO_FILE
is "false", a rotating file per component:

    logs/ingestion.log   (RANCHHAND_INGESTION_LOG_FILE)
    logs/retrieval.log   (RANCHHAND_RETRIEVAL_LOG_FILE)
    logs/answering.log   (RANCHHAND_ANSWERING_LOG_FILE)
    logs/api.log         (RANCHHAND_API_LOG_FILE)

Anything else goes to RANCHHAND_LOG_FILE or logs/ranchhand.log.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_DIR = Path(os.getenv("RANCHHAND_LOG_DIR", "logs"))
COMPONENTS = ("ingestion", "retrieval", "answering", "api")

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 5


def _level_from_env() -> int:
    name = os.getenv("RANCHHAND_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def _file_logging_enabled() -> bool:
    return os.getenv("RANCHHAND_LOG_TO_FILE", "true").strip().lower() != "false"


def resolve_log_path(component: Optional[str] = None, log_file: Optional[str] = None) -> Path:
    """Explicit file > per-component env var > per-component file > shared file."""

    if log_file:
        return Path(log_file)

    if component in COMPONENTS:
        override = os.getenv(f"RANCHHAND_{component.upper()}_LOG_FILE")
        return Path(override) if override else LOG_DIR / f"{component}.log"

    shared = os.getenv("RANCHHAND_LOG_FILE")
    return Path(shared) if shared else LOG_DIR / "ranchhand.log"


def get_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[str] = None
) -> logging.Logger:

    logger = logging.getLogger(f"ranchhand.{name}")
    level = _level_from_env() if level is None else level
    logger.setLevel(level)

    if getattr(logger, "_ranchhand_configured", False):
        return logger

    logger.propagate = False
    formatter = logging.Formatter(_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if _file_logging_enabled():
        path = resolve_log_path(log_file=log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        except OSError:
            logger.exception("Failed to initialize file logging at %s", path)
        else:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

    logger._ranchhand_configured = True
    return logger


def get_component_logger(
    name: str,
    component: Optional[str] = None,
    level: Optional[int] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    path = resolve_log_path(component, log_file)
    return get_logger(name, level=level, log_file=str(path))
