"""
whosolder/features/people/dataset.py

Loads the static person dataset built offline from Wikidata.
The file is a JSON array of Person objects (camelCase keys).
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from whosolder.core.errors import DatasetError
from whosolder.models.person import Person

DEFAULT_DATASET_PATH = Path(__file__).resolve().parents[2] / "data" / "people.json"


def parse_people(raw: object) -> Tuple[Person, ...]:
    """
    Validate decoded JSON into an ordered tuple of people.

    Raises:
        DatasetError: not a list, invalid entries, or duplicate ids
    """
    if not isinstance(raw, list):
        raise DatasetError("Person dataset must be a JSON array")

    people = []
    seen = set()
    for index, entry in enumerate(raw):
        try:
            person = Person.model_validate(entry)
        except PydanticValidationError as e:
            raise DatasetError(f"Invalid person at index {index}: {e.errors()[0].get('msg')}") from e
        if person.id in seen:
            raise DatasetError(f"Duplicate person id: {person.id}")
        seen.add(person.id)
        people.append(person)
    return tuple(people)


@lru_cache(maxsize=8)
def load_people(path: Optional[str] = None) -> Tuple[Person, ...]:
    """
    Load and validate the dataset once per path.

    Args:
        path: Dataset file; defaults to the bundled data/people.json

    Returns:
        Ordered tuple of Person (order is part of the daily challenge input)
    """
    dataset_path = Path(path) if path else DEFAULT_DATASET_PATH
    try:
        with dataset_path.open(encoding="utf-8") as handle:
            raw = json.load(handle)
    except FileNotFoundError as e:
        raise DatasetError(f"Person dataset not found: {dataset_path}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Person dataset is not valid JSON: {e}") from e
    return parse_people(raw)
