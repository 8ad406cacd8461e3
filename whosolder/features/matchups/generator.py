"""
Deterministic daily matchup generation.

generate_matchups(people, "YYYY-MM-DD", count) is a pure function: the same
dataset and date always produce the same ordered list. It is safe to call
concurrently and holds no state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Set

from whosolder.features.matchups.prng import Mulberry32, seed_from_date
from whosolder.models.matchup import Difficulty, Matchup
from whosolder.models.person import Person

DEFAULT_MATCHUP_COUNT = 10


@dataclass(frozen=True)
class DifficultyBucket:
    difficulty: Difficulty
    min_gap: int  # inclusive, in birth years
    max_gap: int  # exclusive
    weight: int


# Filled in this order; weights give the 3/4/3 mix for a 10-matchup day
DIFFICULTY_BUCKETS = (
    DifficultyBucket("hard", 0, 4, 3),
    DifficultyBucket("medium", 4, 12, 4),
    DifficultyBucket("easy", 12, 80, 3),
)

# Labels for leftover pairs that did not fit a bucket
FALLBACK_HARD_BELOW = 5
FALLBACK_EASY_ABOVE = 20


def bucket_targets(count: int) -> List[int]:
    """
    Split ``count`` across DIFFICULTY_BUCKETS proportionally to their weights.

    Remainders go to the buckets with the largest fractional share, earlier
    buckets first on ties: 10 -> [3, 4, 3], 5 -> [2, 2, 1], 12 -> [4, 5, 3].
    """
    if count <= 0:
        return [0 for _ in DIFFICULTY_BUCKETS]
    total_weight = sum(bucket.weight for bucket in DIFFICULTY_BUCKETS)
    targets = [count * bucket.weight // total_weight for bucket in DIFFICULTY_BUCKETS]
    remaining = count - sum(targets)
    by_fraction = sorted(
        range(len(DIFFICULTY_BUCKETS)),
        key=lambda i: (-((count * DIFFICULTY_BUCKETS[i].weight) % total_weight), i),
    )
    for index in by_fraction[:remaining]:
        targets[index] += 1
    return targets


def older_person_id(a: Person, b: Person) -> str:
    """Earlier birth date wins; identical birth dates go to the lexically smaller id."""
    if a.birth_date != b.birth_date:
        return a.id if a.birth_date < b.birth_date else b.id
    return min(a.id, b.id)


def shuffle_people(people: Sequence[Person], rng: Mulberry32) -> List[Person]:
    """Fisher-Yates over a copy, driven only by generator draws."""
    shuffled = list(people)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def fallback_difficulty(age_gap: int) -> Difficulty:
    if age_gap < FALLBACK_HARD_BELOW:
        return "hard"
    if age_gap > FALLBACK_EASY_ABOVE:
        return "easy"
    return "medium"


def _pair(a: Person, b: Person, difficulty: Difficulty) -> Matchup:
    return Matchup(
        person_a=a,
        person_b=b,
        older_id=older_person_id(a, b),
        difficulty=difficulty,
        age_gap=abs(a.birth_year - b.birth_year),
    )


def _fill_bucket(
    shuffled: Sequence[Person],
    used: Set[str],
    bucket: DifficultyBucket,
    target: int,
) -> List[Matchup]:
    found: List[Matchup] = []
    for i, first in enumerate(shuffled):
        if len(found) >= target:
            break
        if first.id in used:
            continue
        for second in shuffled[i + 1:]:
            if second.id in used:
                continue
            gap = abs(first.birth_year - second.birth_year)
            if bucket.min_gap <= gap < bucket.max_gap:
                found.append(_pair(first, second, bucket.difficulty))
                used.add(first.id)
                used.add(second.id)
                break
    return found


def generate_matchups(
    people: Sequence[Person],
    date_seed: str,
    count: int = DEFAULT_MATCHUP_COUNT,
) -> List[Matchup]:
    """
    Build the ordered matchups for one calendar day.

    Args:
        people: Candidate dataset; its order is part of the input
        date_seed: Day in YYYY-MM-DD form
        count: Desired number of matchups

    Returns:
        Up to ``count`` matchups. Small datasets yield fewer; callers must not
        assume a fixed length.

    Raises:
        ValueError: date_seed is not YYYY-MM-DD
    """
    rng = Mulberry32(seed_from_date(date_seed))
    if count <= 0:
        return []

    shuffled = shuffle_people(people, rng)
    used: Set[str] = set()
    matchups: List[Matchup] = []

    for bucket, target in zip(DIFFICULTY_BUCKETS, bucket_targets(count)):
        matchups.extend(_fill_bucket(shuffled, used, bucket, target))

    while len(matchups) < count:
        remaining = [person for person in shuffled if person.id not in used]
        if len(remaining) < 2:
            break
        first, second = remaining[0], remaining[1]
        age_gap = abs(first.birth_year - second.birth_year)
        matchups.append(_pair(first, second, fallback_difficulty(age_gap)))
        used.add(first.id)
        used.add(second.id)

    # One draw per pair so the older person is not always on the same side
    return [matchup.swapped() if rng.random() > 0.5 else matchup for matchup in matchups]
