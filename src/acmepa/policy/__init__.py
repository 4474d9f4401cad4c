"""Policy decisions: identifier admission and challenge selection.

Exports the authority facade and the collaborators it is built from.
"""

from acmepa.policy.allowlist import ChallengeAllowlist
from acmepa.policy.authority import PolicyAuthority
from acmepa.policy.blacklist import HostnamePolicy
from acmepa.policy.suffix import NoPublicSuffixError, SuffixLookup, TldextractSuffixLookup

__all__ = [
    "ChallengeAllowlist",
    "HostnamePolicy",
    "NoPublicSuffixError",
    "PolicyAuthority",
    "SuffixLookup",
    "TldextractSuffixLookup",
]
