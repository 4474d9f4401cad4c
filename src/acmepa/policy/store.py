"""Hot-swappable store for the hostname policy and challenge allow-list.

Both snapshots sit behind a single :class:`ReadWriteLock`.  Loading
parses outside the lock and swaps the reference inside it, so a reader
sees either the old snapshot or the new one, never a mix, and a failed
load leaves the previous snapshot in force.
"""

from __future__ import annotations

import logging

from acmepa.errors import Reason, policy_error
from acmepa.policy.allowlist import ChallengeAllowlist, parse_challenges_whitelist
from acmepa.policy.blacklist import HostnamePolicy, parse_hostname_policy
from acmepa.policy.locking import ReadWriteLock

log = logging.getLogger(__name__)


class PolicyStore:
    """Owner of the current policy snapshots."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._hostnames: HostnamePolicy | None = None
        self._allowlist: ChallengeAllowlist | None = None

    # -- loading ------------------------------------------------------------

    def load_hostname_policy(self, raw: bytes) -> HostnamePolicy:
        """Parse *raw* and make it the current hostname policy."""
        policy = parse_hostname_policy(raw)
        log.info("Loading hostname policy, sha256: %s", policy.sha256)
        with self._lock.write():
            self._hostnames = policy
        return policy

    def load_challenges_whitelist(self, raw: bytes) -> ChallengeAllowlist:
        """Parse *raw* and make it the current challenge allow-list."""
        allowlist = parse_challenges_whitelist(raw)
        log.info("Loading challenges whitelist, sha256: %s", allowlist.sha256)
        with self._lock.write():
            self._allowlist = allowlist
        return allowlist

    # -- snapshots ----------------------------------------------------------

    @property
    def hostname_policy(self) -> HostnamePolicy | None:
        with self._lock.read():
            return self._hostnames

    @property
    def challenges_whitelist(self) -> ChallengeAllowlist | None:
        with self._lock.read():
            return self._allowlist

    # -- checks -------------------------------------------------------------

    def check_host_lists(self, domain: str) -> None:
        """Raise if *domain* is blacklisted or no policy is loaded."""
        with self._lock.read():
            if self._hostnames is None:
                raise policy_error(Reason.NOT_LOADED)
            self._hostnames.check_host_lists(domain)

    def check_wildcard_host_list(self, base_domain: str) -> None:
        """Raise if ``*.`` + *base_domain* would cover an exact entry."""
        with self._lock.read():
            if self._hostnames is None:
                raise policy_error(Reason.NOT_LOADED)
            self._hostnames.check_wildcard_host_list(base_domain)

    def account_allowed(self, challenge_type: str, account_id: int) -> bool:
        """True if *account_id* is allow-listed for *challenge_type*."""
        with self._lock.read():
            if self._allowlist is None:
                return False
            return self._allowlist.allows(challenge_type, account_id)
