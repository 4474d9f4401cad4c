"""Wildcard identifier validation.

Accepts ``*.example.com`` style identifiers.  It enforces that:

* the identifier is a DNS identifier
* there is at most one ``*``, and it is the whole leftmost label
* the base domain is not itself a public suffix (no ``*.com``)
* the wildcard would not cover an exact-blacklisted name

The base domain is then run through :class:`IdentifierValidator` to
catch everything else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from acmepa.core.types import IdentifierType
from acmepa.errors import Reason, policy_error
from acmepa.models.identifier import Identifier
from acmepa.policy.suffix import NoPublicSuffixError
from acmepa.policy.validation import WILDCARD_PREFIX

if TYPE_CHECKING:
    from acmepa.policy.suffix import SuffixLookup
    from acmepa.policy.validation import HostLists, IdentifierValidator

# Stands in for the wildcard label when the base domain is re-checked,
# so the exact blacklist can tell "*.example.com" from "example.com".
_WILDCARD_STAND_IN = "x."


class WildcardValidator:
    """Admission decision for identifiers that may carry a wildcard."""

    def __init__(
        self,
        identifiers: IdentifierValidator,
        host_lists: HostLists,
        suffixes: SuffixLookup,
    ) -> None:
        self._identifiers = identifiers
        self._host_lists = host_lists
        self._suffixes = suffixes

    def willing_to_issue_wildcard(self, identifier: Identifier) -> None:
        """Raise a :class:`~acmepa.errors.PolicyError` unless issuance is allowed."""
        if identifier.type != IdentifierType.DNS:
            raise policy_error(Reason.INVALID_IDENTIFIER)
        raw_domain = identifier.value

        wildcards = raw_domain.count("*")
        if wildcards > 1:
            raise policy_error(Reason.TOO_MANY_WILDCARDS)
        if wildcards == 0:
            self._identifiers.willing_to_issue(identifier)
            return

        if not raw_domain.startswith(WILDCARD_PREFIX):
            raise policy_error(Reason.MALFORMED_WILDCARD)
        base_domain = raw_domain.removeprefix(WILDCARD_PREFIX)

        try:
            icann_tld = self._suffixes.extract_suffix(base_domain)
        except NoPublicSuffixError as exc:
            raise policy_error(Reason.NON_PUBLIC) from exc
        if base_domain == icann_tld:
            raise policy_error(Reason.ICANN_TLD_WILDCARD)

        self._host_lists.check_wildcard_host_list(base_domain)

        self._identifiers.willing_to_issue(
            Identifier(type=IdentifierType.DNS, value=_WILDCARD_STAND_IN + base_domain),
        )
