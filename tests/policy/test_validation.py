"""Tests for acmepa.policy.validation: non-wildcard identifier admission."""

from __future__ import annotations

import pytest

from acmepa.core.types import IdentifierType
from acmepa.errors import (
    MalformedError,
    PolicyNotLoadedError,
    Reason,
    RejectedIdentifierError,
)
from acmepa.models.identifier import Identifier
from acmepa.policy.store import PolicyStore
from acmepa.policy.validation import IdentifierValidator

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dns(value: str) -> Identifier:
    return Identifier(type=IdentifierType.DNS, value=value)


@pytest.fixture()
def store(policy_bytes) -> PolicyStore:
    s = PolicyStore()
    s.load_hostname_policy(policy_bytes)
    return s


@pytest.fixture()
def validator(store, suffixes) -> IdentifierValidator:
    return IdentifierValidator(store, suffixes)


# ---------------------------------------------------------------------------
# Syntactic refusals
# ---------------------------------------------------------------------------


class TestMalformedNames:
    @pytest.mark.parametrize(
        ("name", "reason"),
        [
            ("", Reason.EMPTY_NAME),
            ("*.example.com", Reason.WILDCARD_NOT_SUPPORTED),
            ("under_score.example.com", Reason.INVALID_DNS_CHARACTER),
            ("ex*ample.com", Reason.INVALID_DNS_CHARACTER),
            ("exa mple.com", Reason.INVALID_DNS_CHARACTER),
            ("bücher.com", Reason.INVALID_DNS_CHARACTER),
            (("a" * 60 + ".") * 4 + "com", Reason.NAME_TOO_LONG),
            ("192.0.2.1", Reason.IP_ADDRESS),
            ("example.com.", Reason.NAME_ENDS_IN_DOT),
            (".".join(["a"] * 10 + ["com"]), Reason.TOO_MANY_LABELS),
            ("localhost", Reason.TOO_FEW_LABELS),
            ("a..com", Reason.LABEL_TOO_SHORT),
            (".example.com", Reason.LABEL_TOO_SHORT),
            ("a" * 64 + ".com", Reason.LABEL_TOO_LONG),
            ("-foo.com", Reason.INVALID_DNS_CHARACTER),
            ("foo-.com", Reason.INVALID_DNS_CHARACTER),
            ("xn--b.com", Reason.MALFORMED_IDN),
            ("example.notatld", Reason.NON_PUBLIC),
            ("co.uk", Reason.ICANN_TLD),
            ("com", Reason.TOO_FEW_LABELS),
        ],
    )
    def test_reason(self, validator, name, reason):
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns(name))
        assert exc_info.value.reason is reason
        assert exc_info.value.detail == reason.value

    def test_decomposed_punycode_label(self, validator):
        """A label that decodes cleanly but is not NFC is still malformed."""
        label = "xn--" + "cafe\u0301".encode("punycode").decode("ascii")
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns(label + ".com"))
        assert exc_info.value.reason is Reason.MALFORMED_IDN

    def test_ip_identifier_type_is_refused(self, validator):
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(Identifier(type=IdentifierType.IP, value="192.0.2.1"))
        assert exc_info.value.reason is Reason.INVALID_IDENTIFIER

    def test_bad_character_reported_before_length(self, validator):
        name = "a_" + "b" * 300 + ".com"
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns(name))
        assert exc_info.value.reason is Reason.INVALID_DNS_CHARACTER

    def test_length_limit_is_inclusive(self, store, suffixes):
        validator = IdentifierValidator(store, suffixes, max_name_length=15)
        validator.willing_to_issue(_dns("a" * 11 + ".com"))
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns("a" * 12 + ".com"))
        assert exc_info.value.reason is Reason.NAME_TOO_LONG

    def test_label_limit_is_configurable(self, store, suffixes):
        validator = IdentifierValidator(store, suffixes, max_labels=3)
        validator.willing_to_issue(_dns("a.b.com"))
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns("a.b.c.com"))
        assert exc_info.value.reason is Reason.TOO_MANY_LABELS

    def test_suffix_not_consulted_for_syntax_errors(self, validator, suffixes):
        with pytest.raises(MalformedError):
            validator.willing_to_issue(_dns("foo-.com"))
        assert suffixes.calls == []


# ---------------------------------------------------------------------------
# Accepted names
# ---------------------------------------------------------------------------


class TestAcceptedNames:
    @pytest.mark.parametrize(
        "name",
        [
            "example.com",
            "www.example.com",
            "a.b.c.d.e.f.g.h.example.com",
            "1password.com",
            "foo-bar.example.net",
            "xn--bcher-kva.com",
            "xn--strae-oqa.com",
            "xn--fa-hia.com",
            "xn--mxac2c.com",
            "example.co.uk",
            "xn--d1acufc.xn--p1ai",
            "a" * 63 + ".com",
            "myblocked.com",
        ],
    )
    def test_accepted(self, validator, name):
        validator.willing_to_issue(_dns(name))

    def test_nfc_punycode_label_accepted(self, validator):
        label = "xn--" + "caf\u00e9".encode("punycode").decode("ascii")
        validator.willing_to_issue(_dns(label + ".com"))

    def test_exact_limits_accepted(self, validator):
        name = ".".join(["a" * 56] * 4) + ".com"
        assert len(name) == 231
        with pytest.raises(MalformedError):
            validator.willing_to_issue(_dns(name))
        validator.willing_to_issue(_dns(name[1:]))


# ---------------------------------------------------------------------------
# Policy refusals
# ---------------------------------------------------------------------------


class TestRejectedNames:
    def test_reserved_ldh_label(self, validator):
        with pytest.raises(RejectedIdentifierError) as exc_info:
            validator.willing_to_issue(_dns("bq--abwhky3f6fxq.jp"))
        assert exc_info.value.reason is Reason.INVALID_RLDH

    @pytest.mark.parametrize(
        "name",
        [
            "blocked.com",
            "www.blocked.com",
            "a.b.blocked.com",
            "bad.example.net",
            "x.bad.example.net",
            "highvalue.example.org",
            "a.b.example.co.uk",
        ],
    )
    def test_blacklisted(self, validator, name):
        with pytest.raises(RejectedIdentifierError) as exc_info:
            validator.willing_to_issue(_dns(name))
        assert exc_info.value.reason is Reason.BLACKLISTED
        assert exc_info.value.public_detail == "Policy forbids issuing for name"

    @pytest.mark.parametrize(
        "name",
        ["example.net", "www.highvalue.example.org", "b.example.co.uk", "example.org"],
    )
    def test_neighbours_of_listed_names_pass(self, validator, name):
        validator.willing_to_issue(_dns(name))


# ---------------------------------------------------------------------------
# Not loaded
# ---------------------------------------------------------------------------


class TestNotLoaded:
    def test_valid_name_refused(self, suffixes):
        validator = IdentifierValidator(PolicyStore(), suffixes)
        with pytest.raises(PolicyNotLoadedError) as exc_info:
            validator.willing_to_issue(_dns("example.com"))
        assert exc_info.value.reason is Reason.NOT_LOADED
        assert exc_info.value.status == 503

    def test_syntax_errors_still_reported(self, suffixes):
        validator = IdentifierValidator(PolicyStore(), suffixes)
        with pytest.raises(MalformedError) as exc_info:
            validator.willing_to_issue(_dns("localhost"))
        assert exc_info.value.reason is Reason.TOO_FEW_LABELS
