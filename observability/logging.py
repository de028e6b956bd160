from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Optional

_LOGGER_NAME = "adminops"
_level = logging.INFO


def set_log_level(level: str) -> None:
    """Apply settings.ADMINOPS_LOG_LEVEL; unknown names fall back to INFO."""
    global _level
    _level = getattr(logging, (level or "info").strip().upper(), logging.INFO)
    logging.getLogger(_LOGGER_NAME).setLevel(_level)


def _configure() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_level)
    return logger


def build_log_context(**fields: Any) -> Dict[str, Any]:
    """
    Static fields attached to every event of one component (e.g. tool="safe_wrapper").
    """
    ctx = {"service": os.getenv("ADMINOPS_SERVICE_NAME", "adminops").strip() or "adminops"}
    ctx.update({k: v for k, v in fields.items() if v is not None})
    return ctx


def log_event(
    event: str,
    *,
    ctx: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    level: str = "info",
) -> None:
    """
    Emit one JSON line. Never pass key material in `data`.
    """
    logger = _configure()
    payload: Dict[str, Any] = {"event": event}
    payload.update(ctx or {})
    if data:
        payload["data"] = data
    logger.log(getattr(logging, level.upper(), logging.INFO), json.dumps(payload, sort_keys=True, default=str))
