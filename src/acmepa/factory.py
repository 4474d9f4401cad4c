"""Build a ready-to-use :class:`PolicyAuthority` from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from acmepa.policy.authority import PolicyAuthority
from acmepa.policy.suffix import TldextractSuffixLookup

if TYPE_CHECKING:
    from acmepa.config.settings import PASettings
    from acmepa.policy.suffix import SuffixLookup

log = logging.getLogger(__name__)


def create_authority(
    settings: PASettings,
    *,
    suffixes: SuffixLookup | None = None,
) -> PolicyAuthority:
    """Construct the authority and load the configured policy files.

    Raises whatever the initial load raises (``OSError``,
    :class:`~acmepa.errors.PolicyLoadError`): the authority must not
    start without its hostname policy.
    """
    policy = settings.policy
    challenges = settings.challenges

    if suffixes is None:
        suffixes = TldextractSuffixLookup(
            include_private=policy.public_suffix.include_private,
            extra_suffixes=policy.public_suffix.extra_suffixes,
        )

    pa = PolicyAuthority(
        challenges.enabled,
        suffixes=suffixes,
        max_name_length=policy.max_dns_identifier_length,
        max_labels=policy.max_labels,
        single_token=challenges.single_token,
        tls_sni_revalidation=challenges.tls_sni_revalidation,
        seed=policy.rng_seed,
    )

    if policy.hostname_policy_file:
        pa.set_hostname_policy_file(policy.hostname_policy_file)
    else:
        log.warning("No hostname policy configured; all identifiers will be refused")

    if policy.challenges_whitelist_file:
        pa.set_challenges_whitelist_file(policy.challenges_whitelist_file)

    enabled = sorted(t for t, on in challenges.enabled.items() if on)
    log.info("Policy authority ready, enabled challenges: %s", ", ".join(enabled) or "none")
    return pa
