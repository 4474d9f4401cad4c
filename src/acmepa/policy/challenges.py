"""Challenge selection.

Decides which challenge types an identifier is offered and in what
order.  Order is shuffled so ACME clients cannot rely on it; the
shuffle uses a fixed-seed :class:`random.Random`, which is not meant to
be secret, only unpredictable enough to stop clients hard-coding an
index.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import TYPE_CHECKING

from acmepa.core.types import ChallengeType
from acmepa.errors import Reason, policy_error
from acmepa.models.challenge import new_challenge, new_token
from acmepa.policy.validation import WILDCARD_PREFIX

if TYPE_CHECKING:
    from collections.abc import Callable

    from acmepa.models.challenge import Challenge
    from acmepa.models.identifier import Identifier

log = logging.getLogger(__name__)

DEFAULT_SEED = 99


class ChallengeSelector:
    """Build the challenge set and combinations for an identifier.

    Parameters
    ----------
    enabled:
        ``enabled(challenge_type, account_id) -> bool``, normally
        :meth:`PolicyAuthority.challenge_type_enabled`.
    single_token:
        Share one token between all challenges built in one call.
    tls_sni_revalidation:
        Offer TLS-SNI-01 for revalidation requests even when it is not
        enabled for the account.
    seed:
        Seed of the shuffling sequencer.

    """

    def __init__(
        self,
        enabled: Callable[[str, int], bool],
        *,
        single_token: bool = False,
        tls_sni_revalidation: bool = False,
        seed: int = DEFAULT_SEED,
    ) -> None:
        self._enabled = enabled
        self._single_token = single_token
        self._tls_sni_revalidation = tls_sni_revalidation
        self._rng = random.Random(seed)  # noqa: S311
        self._rng_lock = threading.Lock()

    def challenges_for(
        self,
        identifier: Identifier,
        account_id: int,
        is_revalidation: bool = False,  # noqa: FBT001, FBT002
    ) -> tuple[list[Challenge], list[list[int]]]:
        """Return ``(challenges, combinations)`` for *identifier*.

        Each combination is a single index into *challenges*: any one
        challenge is sufficient.

        Raises
        ------
        ChallengeConfigurationError
            If a wildcard is requested but DNS-01 is not enabled for
            the account.

        """
        token = new_token() if self._single_token else None

        if identifier.value.startswith(WILDCARD_PREFIX):
            if not self._enabled(ChallengeType.DNS_01, account_id):
                raise policy_error(Reason.WILDCARD_REQUIRES_DNS01)
            challenges = [new_challenge(ChallengeType.DNS_01, token)]
        else:
            challenges = []
            if self._enabled(ChallengeType.HTTP_01, account_id):
                challenges.append(new_challenge(ChallengeType.HTTP_01, token))
            if self._enabled(ChallengeType.TLS_SNI_01, account_id) or (
                self._tls_sni_revalidation and is_revalidation
            ):
                challenges.append(new_challenge(ChallengeType.TLS_SNI_01, token))
            if self._enabled(ChallengeType.TLS_ALPN_01, account_id):
                challenges.append(new_challenge(ChallengeType.TLS_ALPN_01, token))
            if self._enabled(ChallengeType.DNS_01, account_id):
                challenges.append(new_challenge(ChallengeType.DNS_01, token))

        count = len(challenges)
        with self._rng_lock:
            order = self._rng.sample(range(count), count)
            combo_order = self._rng.sample(range(count), count)

        shuffled = [challenges[i] for i in order]
        combinations = [[i] for i in range(count)]
        shuffled_combos = [combinations[i] for i in combo_order]

        log.debug(
            "Offering %s for %s",
            [c.type.value for c in shuffled],
            identifier.value,
        )
        return shuffled, shuffled_combos
