"""Per-challenge-type account allow-list snapshot.

The document maps a challenge type to the accounts allowed to use it
even when the type is not globally enabled::

    tls-sni-01: [1001, 1002]
    dns-01: [7]
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

import yaml
from jsonschema import Draft7Validator

from acmepa.errors import PolicyLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping

_SCHEMA = {
    "type": "object",
    "propertyNames": {"type": "string"},
    "additionalProperties": {
        "type": ["array", "null"],
        "items": {"type": "integer"},
    },
}

_validator = Draft7Validator(_SCHEMA)


@dataclass(frozen=True)
class ChallengeAllowlist:
    """One loaded generation of the challenge allow-list."""

    accounts: Mapping[str, frozenset[int]] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    sha256: str = ""

    def allows(self, challenge_type: str, account_id: int) -> bool:
        return account_id in self.accounts.get(str(challenge_type), ())


def parse_challenges_whitelist(raw: bytes) -> ChallengeAllowlist:
    """Parse and validate a challenge allow-list document.

    Raises :class:`PolicyLoadError` on any malformed input.
    """
    digest = hashlib.sha256(raw).hexdigest()
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        msg = f"Challenges whitelist is not valid JSON/YAML: {exc}"
        raise PolicyLoadError(msg) from exc

    error = next(iter(_validator.iter_errors(doc)), None)
    if error is not None:
        msg = f"Challenges whitelist does not match schema: {error.message}"
        raise PolicyLoadError(msg)

    accounts = {ctype: frozenset(ids or ()) for ctype, ids in doc.items()}
    return ChallengeAllowlist(accounts=MappingProxyType(accounts), sha256=digest)
