"""Policy authority facade.

Owns the policy snapshots and exposes the four decision entry points
used by the registration authority:

* :meth:`PolicyAuthority.willing_to_issue`
* :meth:`PolicyAuthority.willing_to_issue_wildcard`
* :meth:`PolicyAuthority.challenges_for`
* :meth:`PolicyAuthority.challenge_type_enabled`

Usage::

    pa = PolicyAuthority({"http-01": True, "dns-01": True})
    pa.set_hostname_policy_file("/etc/acmepa/hostname-policy.yaml")
    pa.willing_to_issue_wildcard(Identifier(IdentifierType.DNS, "*.example.com"))
    challenges, combinations = pa.challenges_for(ident, account_id=42)
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from acmepa.errors import RejectedIdentifierError
from acmepa.logging import audit
from acmepa.policy.challenges import DEFAULT_SEED, ChallengeSelector
from acmepa.policy.reloader import load_once
from acmepa.policy.store import PolicyStore
from acmepa.policy.suffix import TldextractSuffixLookup
from acmepa.policy.validation import (
    MAX_DNS_IDENTIFIER_LENGTH,
    MAX_LABELS,
    IdentifierValidator,
)
from acmepa.policy.wildcard import WildcardValidator

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from acmepa.models.challenge import Challenge
    from acmepa.models.identifier import Identifier
    from acmepa.policy.allowlist import ChallengeAllowlist
    from acmepa.policy.blacklist import HostnamePolicy
    from acmepa.policy.reloader import Reloader
    from acmepa.policy.suffix import SuffixLookup

log = logging.getLogger(__name__)


class PolicyAuthority:
    """Enforces CA policy decisions.

    Parameters
    ----------
    challenge_types:
        Globally enabled challenge types, e.g. ``{"http-01": True}``.
        Fixed for the lifetime of the authority.
    suffixes:
        Public suffix lookup; defaults to the bundled ICANN list.
    max_name_length:
        Maximum DNS identifier length in octets.
    max_labels:
        Maximum number of labels in a DNS identifier.
    single_token:
        Share one token between the challenges of an authorization.
    tls_sni_revalidation:
        Offer TLS-SNI-01 on revalidation even when it is not enabled.
    seed:
        Seed for challenge ordering.

    """

    def __init__(  # noqa: PLR0913
        self,
        challenge_types: Mapping[str, bool],
        *,
        suffixes: SuffixLookup | None = None,
        max_name_length: int = MAX_DNS_IDENTIFIER_LENGTH,
        max_labels: int = MAX_LABELS,
        single_token: bool = False,
        tls_sni_revalidation: bool = False,
        seed: int = DEFAULT_SEED,
    ) -> None:
        self._enabled_challenges = MappingProxyType(
            {str(ctype): bool(on) for ctype, on in challenge_types.items()},
        )
        self._store = PolicyStore()
        self._suffixes = suffixes if suffixes is not None else TldextractSuffixLookup()
        self._identifiers = IdentifierValidator(
            self._store,
            self._suffixes,
            max_name_length=max_name_length,
            max_labels=max_labels,
        )
        self._wildcards = WildcardValidator(self._identifiers, self._store, self._suffixes)
        self._selector = ChallengeSelector(
            self.challenge_type_enabled,
            single_token=single_token,
            tls_sni_revalidation=tls_sni_revalidation,
            seed=seed,
        )
        self._sources: list[Any] = []

    # -- policy files -------------------------------------------------------

    def set_hostname_policy_file(
        self,
        path: str | Path,
        reloader: Reloader = load_once,
    ) -> None:
        """Load the hostname policy from *path* and keep it for reloads.

        Raises if the initial load fails.
        """
        source = reloader(path, self.load_hostname_policy, self._hostname_policy_load_error)
        self._sources.append(source)

    def set_challenges_whitelist_file(
        self,
        path: str | Path,
        reloader: Reloader = load_once,
    ) -> None:
        """Load the challenge allow-list from *path* and keep it for reloads."""
        source = reloader(
            path,
            self.load_challenges_whitelist,
            self._challenges_whitelist_load_error,
        )
        self._sources.append(source)

    def load_hostname_policy(self, raw: bytes) -> HostnamePolicy:
        """Replace the hostname policy with the document in *raw*.

        Raises :class:`~acmepa.errors.PolicyLoadError` and keeps the
        current policy if *raw* is invalid.
        """
        policy = self._store.load_hostname_policy(raw)
        audit.hostname_policy_loaded(
            policy.sha256,
            len(policy.blacklist),
            len(policy.exact_blacklist),
        )
        return policy

    def load_challenges_whitelist(self, raw: bytes) -> ChallengeAllowlist:
        """Replace the challenge allow-list with the document in *raw*."""
        allowlist = self._store.load_challenges_whitelist(raw)
        audit.challenges_whitelist_loaded(allowlist.sha256, sorted(allowlist.accounts))
        return allowlist

    def _hostname_policy_load_error(self, exc: Exception) -> None:
        audit.policy_load_failed("hostname policy", exc)

    def _challenges_whitelist_load_error(self, exc: Exception) -> None:
        audit.policy_load_failed("challenges whitelist", exc)

    def reload(self) -> bool:
        """Deliver every registered policy file again.

        Failures are audited and leave the previous snapshot in force.
        Returns ``True`` if every file was accepted.
        """
        log.info("Reloading %d policy file(s)", len(self._sources))
        ok = True
        for source in self._sources:
            reload = getattr(source, "reload", None)
            if reload is not None and not reload():
                ok = False
        return ok

    # -- read-only views ----------------------------------------------------

    @property
    def hostname_policy(self) -> HostnamePolicy | None:
        return self._store.hostname_policy

    @property
    def challenges_whitelist(self) -> ChallengeAllowlist | None:
        return self._store.challenges_whitelist

    @property
    def enabled_challenges(self) -> Mapping[str, bool]:
        return self._enabled_challenges

    # -- decisions ----------------------------------------------------------

    def willing_to_issue(self, identifier: Identifier) -> None:
        """Raise unless the CA will issue for the non-wildcard *identifier*.

        Expects ``identifier.value`` to be lowercase.
        """
        try:
            self._identifiers.willing_to_issue(identifier)
        except RejectedIdentifierError as exc:
            audit.identifier_rejected(identifier.value, exc.detail)
            raise

    def willing_to_issue_wildcard(self, identifier: Identifier) -> None:
        """Like :meth:`willing_to_issue` but also accepts ``*.`` names."""
        try:
            self._wildcards.willing_to_issue_wildcard(identifier)
        except RejectedIdentifierError as exc:
            audit.identifier_rejected(identifier.value, exc.detail)
            raise

    def challenges_for(
        self,
        identifier: Identifier,
        account_id: int,
        is_revalidation: bool = False,  # noqa: FBT001, FBT002
    ) -> tuple[list[Challenge], list[list[int]]]:
        """Return the shuffled challenges and combinations for *identifier*."""
        return self._selector.challenges_for(identifier, account_id, is_revalidation)

    def challenge_type_enabled(self, challenge_type: str, account_id: int) -> bool:
        """True if *challenge_type* is enabled globally or for *account_id*."""
        return self._enabled_challenges.get(
            str(challenge_type), False
        ) or self._store.account_allowed(challenge_type, account_id)
