import json

import pytest

from whosolder.core.errors import DatasetError
from whosolder.features.people.dataset import load_people, parse_people


def _entry(pid="ada", birth="1815-12-10", year=1815, **extra):
    entry = {
        "id": pid,
        "name": pid.title(),
        "birthDate": birth,
        "birthYear": year,
        "image": f"https://example.org/{pid}.jpg",
        "popularity": 10,
    }
    entry.update(extra)
    return entry


def test_bundled_dataset_loads(people):
    assert len(people) == 100
    assert len({p.id for p in people}) == len(people)
    assert all(p.birth_year == p.birth_date.year for p in people)


def test_load_is_cached():
    assert load_people() is load_people()


def test_wikidata_timestamp_normalized():
    (person,) = parse_people([_entry(birth="1815-12-10T00:00:00Z")])
    assert person.birth_date.isoformat() == "1815-12-10"


def test_duplicate_ids_rejected():
    with pytest.raises(DatasetError):
        parse_people([_entry(), _entry()])


def test_year_mismatch_rejected():
    with pytest.raises(DatasetError):
        parse_people([_entry(year=1816)])


def test_negative_popularity_rejected():
    with pytest.raises(DatasetError):
        parse_people([_entry(popularity=-1)])


def test_non_list_rejected():
    with pytest.raises(DatasetError):
        parse_people({"people": []})


def test_missing_and_invalid_files(tmp_path):
    with pytest.raises(DatasetError):
        load_people(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(DatasetError):
        load_people(str(broken))


def test_custom_file(tmp_path):
    path = tmp_path / "people.json"
    path.write_text(json.dumps([_entry(), _entry("grace", "1906-12-09", 1906)]), encoding="utf-8")
    people = load_people(str(path))
    assert [p.id for p in people] == ["ada", "grace"]


def test_public_and_full_shapes(people):
    person = people[0]
    public = person.public_dict()
    assert "birthDate" not in public
    assert public["birthYear"] == person.birth_year
    assert person.full_dict()["birthDate"] == person.birth_date.isoformat()
