"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the application actually reads.

Access pattern::

    from acmepa.config import get_config

    policy = get_config().settings.policy
    print(policy.hostname_policy_file, policy.max_labels)
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PublicSuffixSettings:
    """Public suffix lookup options."""

    include_private: bool
    extra_suffixes: tuple[str, ...]


@dataclass(frozen=True)
class PolicySettings:
    """Hostname policy files and identifier limits."""

    hostname_policy_file: str | None
    challenges_whitelist_file: str | None
    max_dns_identifier_length: int
    max_labels: int
    rng_seed: int
    public_suffix: PublicSuffixSettings


def _build_policy(data: dict | None) -> PolicySettings:
    d = data or {}
    ps = d.get("public_suffix") or {}
    return PolicySettings(
        hostname_policy_file=d.get("hostname_policy_file"),
        challenges_whitelist_file=d.get("challenges_whitelist_file"),
        # Storage-schema limit, not a DNS rule (DNS allows 253).
        max_dns_identifier_length=d.get("max_dns_identifier_length", 230),
        max_labels=d.get("max_labels", 10),
        rng_seed=d.get("rng_seed", 99),
        public_suffix=PublicSuffixSettings(
            include_private=ps.get("include_private", False),
            extra_suffixes=tuple(ps.get("extra_suffixes", [])),
        ),
    )


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChallengeSettings:
    """Globally enabled challenge types and selection flags.

    ``tls_sni_revalidation`` offers TLS-SNI-01 to revalidation requests
    even when the type is not enabled.  ``single_token`` makes all
    challenges of one authorization share a token.
    """

    enabled: Mapping[str, bool]
    single_token: bool
    tls_sni_revalidation: bool


def _build_challenges(data: dict | None) -> ChallengeSettings:
    d = data or {}
    enabled = d.get("enabled", {"http-01": True, "dns-01": True, "tls-alpn-01": True})
    return ChallengeSettings(
        enabled=MappingProxyType({str(k): bool(v) for k, v in enabled.items()}),
        single_token=d.get("single_token", False),
        tls_sni_revalidation=d.get("tls_sni_revalidation", False),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuditLogSettings:
    """Audit log output settings (file, rotation)."""

    enabled: bool
    file: str | None
    max_file_size_bytes: int
    backup_count: int


@dataclass(frozen=True)
class LoggingSettings:
    """Application logging configuration (level, format, audit)."""

    level: str
    format: str
    audit: AuditLogSettings


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    a = d.get("audit") or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "json"),
        audit=AuditLogSettings(
            enabled=a.get("enabled", True),
            file=a.get("file"),
            max_file_size_bytes=a.get("max_file_size_bytes", 104857600),
            backup_count=a.get("backup_count", 10),
        ),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PASettings:
    """Root settings tree."""

    policy: PolicySettings
    challenges: ChallengeSettings
    logging: LoggingSettings


def build_settings(data: dict | None) -> PASettings:
    """Build the typed settings tree from a raw config dict."""
    d = data or {}
    return PASettings(
        policy=_build_policy(d.get("policy")),
        challenges=_build_challenges(d.get("challenges")),
        logging=_build_logging(d.get("logging")),
    )
