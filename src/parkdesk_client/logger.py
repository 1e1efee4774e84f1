from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

_FORBIDDEN_CONTEXT_KEYS = {"password", "oldpassword", "token", "authorization"}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    illegal = sorted(key for key in context if key.lower() in _FORBIDDEN_CONTEXT_KEYS)
    if illegal:
        raise ValueError(f"Sensitive keys are forbidden in log context: {illegal}")
    logger.log(
        level,
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level),
                "module": module,
                "action": action,
                "actor_role": actor_role or None,
                "outcome": outcome,
                **context,
            },
            default=str,
        ),
    )
