"""Tests for acmepa.policy.challenges: challenge selection and ordering."""

from __future__ import annotations

import pytest

from acmepa.core.types import ChallengeStatus, ChallengeType, IdentifierType
from acmepa.errors import ChallengeConfigurationError, Reason
from acmepa.models.identifier import Identifier
from acmepa.policy.challenges import ChallengeSelector

ALL_TYPES = {t.value: True for t in ChallengeType}


def _dns(value: str) -> Identifier:
    return Identifier(type=IdentifierType.DNS, value=value)


def _enabled(mapping: dict[str, bool]):
    def enabled(challenge_type: str, account_id: int) -> bool:
        return mapping.get(challenge_type, False)

    return enabled


def _types(challenges) -> list[ChallengeType]:
    return [c.type for c in challenges]


class TestSelection:
    def test_all_types_offered_once(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES))
        challenges, combinations = selector.challenges_for(_dns("example.com"), 1)

        assert sorted(_types(challenges)) == sorted(ChallengeType)
        assert sorted(combinations) == [[0], [1], [2], [3]]

    def test_only_enabled_types(self):
        selector = ChallengeSelector(_enabled({"http-01": True, "dns-01": False}))
        challenges, combinations = selector.challenges_for(_dns("example.com"), 1)
        assert _types(challenges) == [ChallengeType.HTTP_01]
        assert combinations == [[0]]

    def test_nothing_enabled(self):
        selector = ChallengeSelector(_enabled({}))
        assert selector.challenges_for(_dns("example.com"), 1) == ([], [])

    def test_challenges_are_pending(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES))
        challenges, _ = selector.challenges_for(_dns("example.com"), 1)
        assert {c.status for c in challenges} == {ChallengeStatus.PENDING}

    def test_account_passed_to_enabled(self):
        seen = []

        def enabled(challenge_type, account_id):
            seen.append((str(challenge_type), account_id))
            return True

        ChallengeSelector(enabled).challenges_for(_dns("example.com"), 42)
        assert {account for _, account in seen} == {42}
        assert {ctype for ctype, _ in seen} == set(ALL_TYPES)


class TestWildcard:
    def test_only_dns01(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES))
        challenges, combinations = selector.challenges_for(_dns("*.example.com"), 1)
        assert _types(challenges) == [ChallengeType.DNS_01]
        assert combinations == [[0]]

    def test_dns01_disabled(self):
        selector = ChallengeSelector(_enabled({"http-01": True}))
        with pytest.raises(ChallengeConfigurationError) as exc_info:
            selector.challenges_for(_dns("*.example.com"), 1)
        assert exc_info.value.reason is Reason.WILDCARD_REQUIRES_DNS01
        assert exc_info.value.status == 500


class TestTlsSniRevalidation:
    @pytest.mark.parametrize(
        ("flag", "revalidation", "offered"),
        [
            (False, False, False),
            (False, True, False),
            (True, False, False),
            (True, True, True),
        ],
    )
    def test_offered(self, flag, revalidation, offered):
        selector = ChallengeSelector(
            _enabled({"http-01": True}),
            tls_sni_revalidation=flag,
        )
        challenges, _ = selector.challenges_for(_dns("example.com"), 1, revalidation)
        assert (ChallengeType.TLS_SNI_01 in _types(challenges)) is offered

    def test_enabled_type_offered_without_revalidation(self):
        selector = ChallengeSelector(_enabled({"tls-sni-01": True}))
        challenges, _ = selector.challenges_for(_dns("example.com"), 1)
        assert _types(challenges) == [ChallengeType.TLS_SNI_01]


class TestTokens:
    def test_distinct_tokens_by_default(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES))
        challenges, _ = selector.challenges_for(_dns("example.com"), 1)
        assert len({c.token for c in challenges}) == 4

    def test_single_token_shared(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES), single_token=True)
        challenges, _ = selector.challenges_for(_dns("example.com"), 1)
        assert len({c.token for c in challenges}) == 1

    def test_single_token_differs_between_calls(self):
        selector = ChallengeSelector(_enabled(ALL_TYPES), single_token=True)
        first, _ = selector.challenges_for(_dns("example.com"), 1)
        second, _ = selector.challenges_for(_dns("example.com"), 1)
        assert first[0].token != second[0].token


class TestOrdering:
    @staticmethod
    def _orders(selector: ChallengeSelector, n: int = 20):
        result = []
        for _ in range(n):
            challenges, combinations = selector.challenges_for(_dns("example.com"), 1)
            result.append((tuple(_types(challenges)), tuple(map(tuple, combinations))))
        return result

    def test_same_seed_same_sequence(self):
        first = self._orders(ChallengeSelector(_enabled(ALL_TYPES), seed=99))
        second = self._orders(ChallengeSelector(_enabled(ALL_TYPES), seed=99))
        assert first == second

    def test_different_seed_different_sequence(self):
        first = self._orders(ChallengeSelector(_enabled(ALL_TYPES), seed=99))
        second = self._orders(ChallengeSelector(_enabled(ALL_TYPES), seed=100))
        assert first != second

    def test_order_varies_between_calls(self):
        orders = self._orders(ChallengeSelector(_enabled(ALL_TYPES)))
        assert len({types for types, _ in orders}) > 1
        assert len({combos for _, combos in orders}) > 1
