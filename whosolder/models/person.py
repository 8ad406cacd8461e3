"""
whosolder/models/person.py

Person entries from the static dataset. Immutable once loaded.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Person(BaseModel):
    """A public figure that can appear in a matchup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Opaque, unique identifier")
    name: str = Field(min_length=1)
    birth_date: date = Field(alias="birthDate")
    birth_year: int = Field(alias="birthYear")
    image: str = Field(description="Image URI")
    occupation: Optional[str] = None
    fun_fact: Optional[str] = Field(default=None, alias="funFact")
    popularity: int = Field(default=0, ge=0, description="Popularity score (e.g. Wikipedia sitelinks)")

    @field_validator("birth_date", mode="before")
    @classmethod
    def _strip_time(cls, value):
        # Wikidata exports dates as 1986-07-01T00:00:00Z
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @model_validator(mode="after")
    def _year_matches_date(self):
        if self.birth_year != self.birth_date.year:
            raise ValueError(
                f"birthYear {self.birth_year} does not match birthDate {self.birth_date.isoformat()} for {self.id}"
            )
        return self

    def public_dict(self) -> dict:
        """Shape sent with a challenge: everything except the exact birth date."""
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "occupation": self.occupation,
            "funFact": self.fun_fact,
            "popularity": self.popularity,
            "birthYear": self.birth_year,
        }

    def full_dict(self) -> dict:
        """Shape revealed after scoring."""
        payload = self.public_dict()
        payload["birthDate"] = self.birth_date.isoformat()
        return payload
