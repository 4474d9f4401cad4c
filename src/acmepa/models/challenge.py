"""Challenge value object and constructors."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from acmepa.core.types import ChallengeStatus, ChallengeType

_TOKEN_BYTES = 32


def new_token() -> str:
    """Return a fresh URL-safe challenge token (256 bits of entropy)."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


@dataclass(frozen=True)
class Challenge:
    type: ChallengeType
    token: str
    status: ChallengeStatus = ChallengeStatus.PENDING


def new_challenge(challenge_type: ChallengeType, token: str | None = None) -> Challenge:
    """Build a pending challenge, generating a token when none is given."""
    return Challenge(type=challenge_type, token=token or new_token())
