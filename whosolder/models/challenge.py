from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from whosolder.models.matchup import Matchup


@dataclass(frozen=True)
class Challenge:
    """One day's matchups plus the signature clients echo back on submission."""

    date: str
    matchups: Tuple[Matchup, ...]
    signature: str
    older_ids: Tuple[str, ...] = field(default=())

    def public_dict(self) -> dict:
        # olderIds stays server-side; clients only see the pairs and the signature
        return {
            "date": self.date,
            "matchups": [m.public_dict() for m in self.matchups],
            "sig": self.signature,
        }

    def answer_key(self) -> List[str]:
        return list(self.older_ids)
