"""Logging configuration for ACMEPA.

``configure_logging`` attaches one console handler to the ``acmepa``
logger and, when an audit file is configured, a rotating JSON-lines
handler to ``acmepa.audit``.  Audit records always propagate to the
console handler as well, so turning the audit file off never hides a
failed policy reload.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acmepa.config.settings import AuditLogSettings, LoggingSettings

log = logging.getLogger(__name__)

AUDIT_LOGGER = "acmepa.audit"

# Whatever a bare LogRecord carries is bookkeeping; anything else on a
# record came from ``extra=`` and belongs in the structured output.
_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)),
) | {"message", "asctime"}

_QUIET_LIBRARIES = ("filelock", "tldextract", "urllib3")


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, extras as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _extra_fields(record).items():
            payload.setdefault(key, value)
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Single-line console format."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def _reset(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _attach_audit_file(audit: logging.Logger, settings: AuditLogSettings) -> None:
    try:
        handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_file_size_bytes,
            backupCount=settings.backup_count,
        )
    except OSError as exc:
        log.warning("Could not open audit log file %s: %s", settings.file, exc)
        return
    handler.setFormatter(StructuredFormatter())
    audit.addHandler(handler)


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """Configure the ``acmepa`` logger tree and return its root."""
    root = logging.getLogger("acmepa")
    _reset(root)
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    root.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(StructuredFormatter() if settings.format == "json" else TextFormatter())
    root.addHandler(console)

    audit = logging.getLogger(AUDIT_LOGGER)
    _reset(audit)
    audit.disabled = False
    audit.setLevel(logging.INFO)
    if settings.audit.enabled and settings.audit.file:
        _attach_audit_file(audit, settings.audit)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
