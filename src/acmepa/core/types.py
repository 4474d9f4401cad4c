"""Enumerated types shared across the policy authority.

All enums inherit from ``StrEnum`` so their ``.value`` is a plain
string that compares equal to the strings found in configuration and
policy files.
"""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class IdentifierType(StrEnum):
    DNS = "dns"
    IP = "ip"


# ---------------------------------------------------------------------------
# Challenge types
# ---------------------------------------------------------------------------


class ChallengeType(StrEnum):
    HTTP_01 = "http-01"
    DNS_01 = "dns-01"
    TLS_ALPN_01 = "tls-alpn-01"
    TLS_SNI_01 = "tls-sni-01"


class ChallengeStatus(StrEnum):
    PENDING = "pending"
