from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple

from whosolder.core.errors import AuthenticityError, ValidationError
from whosolder.features.challenges.signing import ChallengeSigner, answer_payload
from whosolder.features.matchups.generator import DEFAULT_MATCHUP_COUNT, generate_matchups
from whosolder.models.challenge import Challenge
from whosolder.models.matchup import Matchup
from whosolder.models.person import Person


class ChallengeService:
    """Deterministic daily challenge issuance and submission verification.

    Nothing is persisted: the challenge for any date is recomputed from the
    dataset and the date, and the signature proves the answer key is ours.
    """

    def __init__(
        self,
        people: Sequence[Person],
        signer: ChallengeSigner,
        count: int = DEFAULT_MATCHUP_COUNT,
    ):
        self._people = tuple(people)
        self._signer = signer
        self._count = count
        self._matchups_cached = lru_cache(maxsize=32)(self._build_matchups)

    def _build_matchups(self, date: str) -> Tuple[Matchup, ...]:
        try:
            return tuple(generate_matchups(self._people, date, self._count))
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def matchups_for(self, date: str) -> Tuple[Matchup, ...]:
        return self._matchups_cached(date)

    def older_ids_for(self, date: str) -> List[str]:
        return [m.older_id for m in self.matchups_for(date)]

    def issue(self, date: str) -> Challenge:
        matchups = self.matchups_for(date)
        older_ids = tuple(m.older_id for m in matchups)
        return Challenge(
            date=date,
            matchups=matchups,
            signature=self._signer.sign(answer_payload(date, older_ids)),
            older_ids=older_ids,
        )

    def verify_submission(self, date: str, signature: object) -> List[str]:
        """
        Recompute the answer key for ``date`` and check ``signature`` against it.

        Returns:
            The answer key (older person id per matchup, in order)

        Raises:
            AuthenticityError: signature does not match
        """
        older_ids = self.older_ids_for(date)
        if not self._signer.verify(answer_payload(date, older_ids), signature):
            raise AuthenticityError("Challenge signature is invalid")
        return older_ids
