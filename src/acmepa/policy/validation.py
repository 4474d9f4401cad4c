"""Identifier validation: is the CA willing to issue for a DNS name?

We place several criteria on identifiers we are willing to issue for:

* MUST self-identify as DNS identifiers
* MUST contain only bytes in the DNS hostname character set
* MUST NOT be longer than the configured maximum (230 octets by
  default; the storage layer cannot hold the full 253)
* MUST NOT have more than ``max_labels`` labels
* MUST follow the DNS hostname syntax rules in RFC 1035 and RFC 2181,
  in particular MUST NOT contain underscores
* MUST NOT match the syntax of an IP address
* MUST end in a public suffix and have at least one label in addition
  to it
* MUST NOT be a label-wise suffix match for a blacklisted name, or an
  exact match for an exact-blacklisted name

Names are expected to be lowercased by the caller.
"""

from __future__ import annotations

import ipaddress
import re
import string
import unicodedata
from typing import TYPE_CHECKING, Protocol

from acmepa.core.types import IdentifierType
from acmepa.errors import Reason, policy_error
from acmepa.policy.suffix import NoPublicSuffixError

if TYPE_CHECKING:
    from acmepa.models.identifier import Identifier
    from acmepa.policy.suffix import SuffixLookup

MAX_LABELS = 10
MAX_LABEL_LENGTH = 63
# RFC 1035 allows 253 octets; identifiers are stored in a 255-character
# column that also holds ~25 characters of JSON wrapping.
MAX_DNS_IDENTIFIER_LENGTH = 230

WILDCARD_PREFIX = "*."

_DNS_CHARACTERS = frozenset(string.ascii_letters + string.digits + ".-")
_DNS_LABEL_RE = re.compile(r"[a-z0-9][a-z0-9-]*", re.IGNORECASE)
_IDN_RESERVED_RE = re.compile(r"[a-z0-9]{2}--", re.IGNORECASE)
_PUNYCODE_PREFIX = "xn--"


class HostLists(Protocol):
    def check_host_lists(self, domain: str) -> None: ...

    def check_wildcard_host_list(self, base_domain: str) -> None: ...


def _is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _check_label(label: str) -> None:
    if not label:
        raise policy_error(Reason.LABEL_TOO_SHORT)
    if len(label) > MAX_LABEL_LENGTH:
        raise policy_error(Reason.LABEL_TOO_LONG)
    if not _DNS_LABEL_RE.fullmatch(label) or label.endswith("-"):
        raise policy_error(Reason.INVALID_DNS_CHARACTER)

    lowered = label.lower()
    if lowered.startswith(_PUNYCODE_PREFIX):
        # Plain punycode, not the "idna" codec: IDNA2003 nameprep maps
        # valid IDNA2008 labels such as "straße" and fails the round-trip.
        try:
            ulabel = lowered.removeprefix(_PUNYCODE_PREFIX).encode("ascii").decode("punycode")
        except UnicodeError as exc:
            raise policy_error(Reason.MALFORMED_IDN) from exc
        if not unicodedata.is_normalized("NFC", ulabel):
            raise policy_error(Reason.MALFORMED_IDN)
    elif _IDN_RESERVED_RE.match(lowered):
        raise policy_error(Reason.INVALID_RLDH)


class IdentifierValidator:
    """Admission decision for non-wildcard DNS identifiers.

    Parameters
    ----------
    host_lists:
        Blacklist checks (normally the :class:`PolicyStore`).
    suffixes:
        Public suffix lookup.
    max_name_length:
        Maximum identifier length in octets.
    max_labels:
        Maximum number of labels.

    """

    def __init__(
        self,
        host_lists: HostLists,
        suffixes: SuffixLookup,
        *,
        max_name_length: int = MAX_DNS_IDENTIFIER_LENGTH,
        max_labels: int = MAX_LABELS,
    ) -> None:
        self._host_lists = host_lists
        self._suffixes = suffixes
        self._max_name_length = max_name_length
        self._max_labels = max_labels

    def willing_to_issue(self, identifier: Identifier) -> None:  # noqa: C901
        """Raise a :class:`~acmepa.errors.PolicyError` unless issuance is allowed.

        Checks run cheapest first and stop at the first failure, so the
        reported reason is deterministic.
        """
        if identifier.type != IdentifierType.DNS:
            raise policy_error(Reason.INVALID_IDENTIFIER)
        domain = identifier.value

        if not domain:
            raise policy_error(Reason.EMPTY_NAME)

        if domain.startswith(WILDCARD_PREFIX):
            raise policy_error(Reason.WILDCARD_NOT_SUPPORTED)

        if any(ch not in _DNS_CHARACTERS for ch in domain):
            raise policy_error(Reason.INVALID_DNS_CHARACTER)

        if len(domain) > self._max_name_length:
            raise policy_error(Reason.NAME_TOO_LONG)

        if _is_ip_address(domain):
            raise policy_error(Reason.IP_ADDRESS)

        if domain.endswith("."):
            raise policy_error(Reason.NAME_ENDS_IN_DOT)

        labels = domain.split(".")
        if len(labels) > self._max_labels:
            raise policy_error(Reason.TOO_MANY_LABELS)
        if len(labels) < 2:  # noqa: PLR2004
            raise policy_error(Reason.TOO_FEW_LABELS)
        for label in labels:
            _check_label(label)

        # Names must end in an ICANN TLD, but must not be one.
        try:
            icann_tld = self._suffixes.extract_suffix(domain)
        except NoPublicSuffixError as exc:
            raise policy_error(Reason.NON_PUBLIC) from exc
        if icann_tld == domain:
            raise policy_error(Reason.ICANN_TLD)

        self._host_lists.check_host_lists(domain)
