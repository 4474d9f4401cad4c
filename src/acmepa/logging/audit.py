"""Structured audit event logger.

Emits policy reload and refusal events on the ``acmepa.audit`` logger
with a consistent ``event_id`` field for filtering and alerting.
"""

from __future__ import annotations

import logging
from typing import Any

audit_log = logging.getLogger("acmepa.audit")


def _emit(
    event_id: str,
    message: str,
    *args: Any,  # noqa: ANN401
    severity: str = "INFO",
    **extra: Any,  # noqa: ANN401
) -> None:
    """Emit a structured audit event."""
    data: dict[str, object] = {
        "event_id": event_id,
        "severity": severity,
    }
    data.update(extra)
    level = getattr(logging, severity.upper(), logging.INFO)
    audit_log.log(level, message, *args, extra=data)


def hostname_policy_loaded(
    sha256: str,
    blacklist_entries: int,
    exact_entries: int,
) -> None:
    """Log a successful hostname policy (re)load."""
    _emit(
        "acmepa.audit.hostname_policy_loaded",
        "Hostname policy loaded: sha256=%s",
        sha256,
        sha256=sha256,
        blacklist_entries=blacklist_entries,
        exact_entries=exact_entries,
    )


def challenges_whitelist_loaded(sha256: str, challenge_types: list[str]) -> None:
    """Log a successful challenge allow-list (re)load."""
    _emit(
        "acmepa.audit.challenges_whitelist_loaded",
        "Challenges whitelist loaded: sha256=%s",
        sha256,
        sha256=sha256,
        challenge_types=challenge_types,
    )


def policy_load_failed(source: str, error: Exception) -> None:
    """Log a failed load; the previous snapshot stays in force."""
    _emit(
        "acmepa.audit.policy_load_failed",
        "Error loading %s: %s",
        source,
        error,
        source=source,
        error_class=type(error).__name__,
        severity="ERROR",
    )


def identifier_rejected(identifier: str, reason: str) -> None:
    """Log an identifier refused by policy (blacklist or reserved label)."""
    _emit(
        "acmepa.audit.identifier_rejected",
        "Identifier rejected by policy: %s (%s)",
        identifier,
        reason,
        identifier=identifier,
        reason=reason,
        severity="WARNING",
    )
