"""Value objects handed across the policy authority boundary."""

from acmepa.models.challenge import Challenge, new_challenge, new_token
from acmepa.models.identifier import Identifier

__all__ = ["Challenge", "Identifier", "new_challenge", "new_token"]
