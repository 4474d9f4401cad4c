"""Policy error taxonomy and RFC 7807 rendering.

Every refusal the policy authority can produce is a member of
:class:`Reason`.  Each reason belongs to exactly one exception class,
and the class (not the message) decides how an API layer reports it:

* :class:`MalformedError`: the identifier is syntactically invalid.
  The detail is safe to show to the requester verbatim.
* :class:`RejectedIdentifierError`: the identifier is well formed but
  policy forbids it.  The public detail is deliberately generic so the
  response does not confirm blacklist contents.
* :class:`PolicyNotLoadedError`: the hostname policy has never been
  loaded; the service is not ready.
* :class:`ChallengeConfigurationError`: no usable challenge could be
  offered because of server configuration.

Reload failures are a separate, operational class
(:class:`PolicyLoadError`) that never reaches issuance callers.

Usage::

    raise policy_error(Reason.NAME_TOO_LONG)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from flask import Flask

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# RFC 8555 §6.7: ACME error-type URNs used by the policy authority
# ---------------------------------------------------------------------------
_P = "urn:ietf:params:acme:error:"

MALFORMED = _P + "malformed"
REJECTED_IDENTIFIER = _P + "rejectedIdentifier"
SERVER_INTERNAL = _P + "serverInternal"

PROBLEM_CONTENT_TYPE = "application/problem+json"

_GENERIC_REJECTION = "Policy forbids issuing for name"


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------


class Reason(Enum):
    """Named policy failures; the value is the internal detail message."""

    INVALID_IDENTIFIER = "Invalid identifier type"
    EMPTY_NAME = "DNS name was empty"
    WILDCARD_NOT_SUPPORTED = "Wildcard names not supported"
    INVALID_DNS_CHARACTER = "Invalid character in DNS name"
    NAME_TOO_LONG = "DNS name too long"
    IP_ADDRESS = "Issuance for IP addresses not supported"
    NAME_ENDS_IN_DOT = "DNS name ends in a period"
    TOO_MANY_LABELS = "DNS name has too many labels"
    TOO_FEW_LABELS = "DNS name does not have enough labels"
    LABEL_TOO_SHORT = "DNS label is too short"
    LABEL_TOO_LONG = "DNS label is too long"
    MALFORMED_IDN = "DNS label contains malformed punycode"
    INVALID_RLDH = "DNS name contains a R-LDH label"
    NON_PUBLIC = "Name does not end in a public suffix"
    ICANN_TLD = "Name is an ICANN TLD"
    BLACKLISTED = "Policy forbids issuing for name"
    TOO_MANY_WILDCARDS = "DNS name had more than one wildcard"
    MALFORMED_WILDCARD = "DNS name had a malformed wildcard label"
    ICANN_TLD_WILDCARD = "DNS name was a wildcard for an ICANN TLD"
    NOT_LOADED = "Hostname policy not yet loaded"
    WILDCARD_REQUIRES_DNS01 = (
        "Challenges requested for wildcard identifier but DNS-01 challenge type is not enabled"
    )


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------


class PolicyError(Exception):
    """Base class for every decision-path refusal.

    Parameters
    ----------
    reason:
        The named failure.
    detail:
        Optional override for the internal detail message.

    """

    error_type: ClassVar[str] = SERVER_INTERNAL
    status: ClassVar[int] = 500

    def __init__(self, reason: Reason, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail or reason.value
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        """Detail suitable for the requester."""
        return self.detail

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the RFC 7807 JSON structure."""
        return {
            "type": self.error_type,
            "detail": self.public_detail,
            "status": self.status,
        }


class MalformedError(PolicyError):
    """The identifier is syntactically or structurally invalid."""

    error_type = MALFORMED
    status = 400


class RejectedIdentifierError(PolicyError):
    """The identifier is well formed but policy forbids it."""

    error_type = REJECTED_IDENTIFIER
    status = 400

    @property
    def public_detail(self) -> str:
        return _GENERIC_REJECTION


class PolicyNotLoadedError(MalformedError):
    """No hostname policy has been loaded yet; refuse everything."""

    error_type = SERVER_INTERNAL
    status = 503


class ChallengeConfigurationError(PolicyError):
    """No acceptable challenge can be offered with the current config."""

    error_type = SERVER_INTERNAL
    status = 500


class PolicyLoadError(Exception):
    """A policy or allow-list document could not be loaded.

    Operational only: the previously loaded snapshot stays in force.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


_REJECTED = frozenset({Reason.BLACKLISTED, Reason.INVALID_RLDH})


def policy_error(reason: Reason) -> PolicyError:
    """Return a fresh exception of the class *reason* belongs to."""
    if reason is Reason.NOT_LOADED:
        return PolicyNotLoadedError(reason)
    if reason is Reason.WILDCARD_REQUIRES_DNS01:
        return ChallengeConfigurationError(reason)
    if reason in _REJECTED:
        return RejectedIdentifierError(reason)
    return MalformedError(reason)


# ---------------------------------------------------------------------------
# Flask error handler registration
# ---------------------------------------------------------------------------


def register_error_handlers(app: Flask) -> None:
    """Render :class:`PolicyError` as RFC 7807 responses on *app*."""
    from flask import jsonify  # noqa: PLC0415

    @app.errorhandler(PolicyError)
    def _handle_policy_error(exc: PolicyError):
        if isinstance(exc, RejectedIdentifierError):
            log.info("Identifier rejected by policy: %s", exc.detail)
        resp = jsonify(exc.to_dict())
        resp.status_code = exc.status
        resp.headers["Content-Type"] = PROBLEM_CONTENT_TYPE
        resp.headers["Cache-Control"] = "no-store"
        return resp
