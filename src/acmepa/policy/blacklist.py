"""Hostname policy (blacklist) snapshot.

A hostname policy document has two lists::

    Blacklist:          # label-wise suffix matches
      - example.com
    ExactBlacklist:     # whole-name matches only
      - highvalue.example.net

The parsed form is an immutable :class:`HostnamePolicy`.  Besides the
two lists it carries ``wildcard_exact_blacklist``: each exact entry
minus its leftmost label, so that ``*.example.net`` is refused when
``highvalue.example.net`` is exact-blacklisted.

Documents may be JSON or YAML; both are read with ``yaml.safe_load``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

import yaml
from jsonschema import Draft7Validator

from acmepa.errors import PolicyLoadError, Reason, policy_error

_SCHEMA = {
    "type": "object",
    "properties": {
        "Blacklist": {"type": ["array", "null"], "items": {"type": "string"}},
        "ExactBlacklist": {"type": ["array", "null"], "items": {"type": "string"}},
    },
}

_validator = Draft7Validator(_SCHEMA)


@dataclass(frozen=True)
class HostnamePolicy:
    """One loaded generation of the hostname policy."""

    blacklist: frozenset[str]
    exact_blacklist: frozenset[str]
    wildcard_exact_blacklist: frozenset[str]
    sha256: str = ""

    def check_host_lists(self, domain: str) -> None:
        """Raise if *domain* or any of its label-wise suffixes is listed.

        ``example.com`` on the blacklist blocks ``example.com`` and
        ``a.b.example.com`` but not ``myexample.com``.
        """
        labels = domain.split(".")
        for i in range(len(labels)):
            if ".".join(labels[i:]) in self.blacklist:
                raise policy_error(Reason.BLACKLISTED)
        if domain in self.exact_blacklist:
            raise policy_error(Reason.BLACKLISTED)

    def check_wildcard_host_list(self, base_domain: str) -> None:
        """Raise if ``*.`` + *base_domain* would cover an exact entry."""
        if base_domain in self.wildcard_exact_blacklist:
            raise policy_error(Reason.BLACKLISTED)


def parse_hostname_policy(raw: bytes) -> HostnamePolicy:
    """Parse and validate a hostname policy document.

    Raises
    ------
    PolicyLoadError
        If the document is unparseable, has no ``Blacklist`` entries,
        or has an ``ExactBlacklist`` entry with a single label.

    """
    digest = hashlib.sha256(raw).hexdigest()
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        msg = f"Hostname policy is not valid JSON/YAML: {exc}"
        raise PolicyLoadError(msg) from exc

    error = next(iter(_validator.iter_errors(doc)), None)
    if error is not None:
        msg = f"Hostname policy does not match schema: {error.message}"
        raise PolicyLoadError(msg)

    names = doc.get("Blacklist") or []
    if not names:
        msg = "No entries in blacklist"
        raise PolicyLoadError(msg)

    exact: set[str] = set()
    wildcard: set[str] = set()
    for entry in doc.get("ExactBlacklist") or []:
        # "highvalue.example.com" -> "example.com" so "*.example.com" is refused
        _, sep, parent = entry.partition(".")
        if not sep:
            msg = f"Malformed exact blacklist entry, only one label: {entry!r}"
            raise PolicyLoadError(msg)
        exact.add(entry)
        wildcard.add(parent)

    return HostnamePolicy(
        blacklist=frozenset(names),
        exact_blacklist=frozenset(exact),
        wildcard_exact_blacklist=frozenset(wildcard),
        sha256=digest,
    )
