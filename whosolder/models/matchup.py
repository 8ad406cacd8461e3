from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from whosolder.models.person import Person

Difficulty = Literal["easy", "medium", "hard"]


@dataclass(frozen=True)
class Matchup:
    """Two people shown together and the id of whichever was born first. Never stored."""

    person_a: Person
    person_b: Person
    older_id: str
    difficulty: Difficulty
    age_gap: int

    def swapped(self) -> Matchup:
        return Matchup(
            person_a=self.person_b,
            person_b=self.person_a,
            older_id=self.older_id,
            difficulty=self.difficulty,
            age_gap=self.age_gap,
        )

    def public_dict(self) -> dict:
        return {
            "personA": self.person_a.public_dict(),
            "personB": self.person_b.public_dict(),
            "difficulty": self.difficulty,
        }
