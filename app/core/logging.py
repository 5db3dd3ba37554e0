"""Logging configuration.

Development gets a readable single-line format; every other environment
gets ``key=value`` lines that log collectors can split without a parser.
"""

import logging
import sys
from typing import Any

from app.core.config import settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
}


class KeyValueFormatter(logging.Formatter):
    """Render a record as space separated ``key=value`` pairs."""

    EXTRA_FIELDS = ("request_id", "actor_id", "action", "booking_id")

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields.update(
            (name, getattr(record, name)) for name in self.EXTRA_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        return " ".join(f"{key}={value}" for key, value in fields.items())


def setup_logging(level: str | None = None, readable: bool | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Level name, defaults to ``settings.log_level``
        readable: Human format instead of key=value, defaults to dev mode
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if readable is None:
        readable = settings.is_dev

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        if readable
        else KeyValueFormatter()
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


class AuditLogger:
    """Mirrors persisted audit events to the ``audit`` logger."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("audit")

    def log(
        self,
        action: str,
        actor_id: int | None,
        entity_type: str,
        entity_id: int | None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        actor = f"admin:{actor_id}" if actor_id is not None else "anonymous"
        entity = f"{entity_type}:{entity_id if entity_id is not None else 'none'}"
        self.logger.info(
            f"AUDIT: action={action} actor={actor} entity={entity} metadata={metadata or {}}",
            extra={"action": action},
        )


audit_logger = AuditLogger()
