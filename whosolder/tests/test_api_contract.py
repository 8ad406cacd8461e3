"""End-to-end HTTP contract for the daily challenge and scoring endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from whosolder.api.deps import get_challenge_service, get_people
from whosolder.core.errors import DatasetError
from whosolder.features.matchups.generator import generate_matchups
from whosolder.features.people.dataset import load_people

FIXED_NOW = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


def answer_key(day):
    return [m.older_id for m in generate_matchups(load_people(), day)]


def play(client, answers=None, client_id="player-1", **overrides):
    today = client.get("/api/today").json()
    body = {
        "date": today["date"],
        "answers": answer_key(today["date"]) if answers is None else answers,
        "sig": today["sig"],
        "clientId": client_id,
    }
    body.update(overrides)
    return client.post("/api/score", json=body)


def test_today_contract(client):
    resp = client.get("/api/today")
    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "public, max-age=300, s-maxage=300"

    body = resp.json()
    assert body["date"] == "2025-11-20"
    assert len(body["matchups"]) == 10
    assert len(body["sig"]) == 44
    person = body["matchups"][0]["personA"]
    assert set(person) == {"id", "name", "image", "occupation", "funFact", "popularity", "birthYear"}
    assert "olderIds" not in body


def test_perfect_round(client):
    resp = play(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == 10
    assert body["total"] == 10
    assert all(r["correct"] for r in body["results"])
    assert body["results"][0]["correctId"] == "tom-holland"
    assert "birthDate" in body["results"][0]["personA"]
    assert body["streak"] == {"streak": 1, "best": 1, "lastDate": "2025-11-20"}


def test_partial_score_resets_streak(client):
    answers = answer_key("2025-11-20")
    answers[0] = "kylian-mbappe"
    resp = play(client, answers=answers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == 9
    assert body["results"][0]["correct"] is False
    assert body["results"][0]["correctId"] == "tom-holland"
    assert body["streak"]["streak"] == 0


def test_streak_across_days(make_client, memory_store):
    days = [(0, True, 1, 1), (1, True, 2, 2), (3, True, 1, 2), (4, False, 0, 2)]
    for offset, perfect, streak, best in days:
        client = make_client(now=FIXED_NOW + timedelta(days=offset))
        today = client.get("/api/today").json()["date"]
        answers = answer_key(today)
        if not perfect:
            answers = list(reversed(answers))
        resp = play(client, answers=answers)
        assert resp.status_code == 200
        assert resp.json()["streak"]["streak"] == streak
        assert resp.json()["streak"]["best"] == best

    resp = client.get("/api/streak", params={"clientId": "player-1"})
    assert resp.json() == {"streak": 0, "best": 2, "lastDate": "2025-11-24"}


def test_tampered_signature_forbidden(client):
    resp = play(client, sig="A" * 43 + "=")
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "invalid_signature"
    assert client.get("/api/streak", params={"clientId": "player-1"}).json()["streak"] == 0


def test_signature_for_other_date_forbidden(client):
    resp = play(client, date="2025-11-19")
    assert resp.status_code == 403


def test_answer_count_mismatch(client):
    resp = play(client, answers=answer_key("2025-11-20")[:9])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


@pytest.mark.parametrize(
    "overrides",
    [
        {"date": "2025-13-40"},
        {"date": "yesterday"},
        {"answers": []},
        {"answers": "tom-holland"},
        {"sig": "short"},
    ],
)
def test_malformed_body(client, overrides):
    resp = play(client, **overrides)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_missing_fields(client):
    resp = client.post("/api/score", json={"date": "2025-11-20"})
    assert resp.status_code == 400


def test_replay_rejected_without_streak_change(client):
    assert play(client).status_code == 200

    resp = play(client, answers=list(reversed(answer_key("2025-11-20"))))
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"]["code"] == "already_played"
    assert body["error"]["message"] == "You already played today. Come back tomorrow."

    streak = client.get("/api/streak", params={"clientId": "player-1"}).json()
    assert streak == {"streak": 1, "best": 1, "lastDate": "2025-11-20"}


def test_rate_limited_after_twenty(client):
    statuses = [play(client).status_code for _ in range(20)]
    assert statuses[0] == 200
    assert set(statuses[1:]) == {409}

    resp = play(client)
    assert resp.status_code == 429
    # FIXED_NOW sits on a window boundary
    assert resp.headers["retry-after"] == "60"
    assert resp.json()["error"]["retry_after"] == 60


def test_fingerprint_identity_when_no_client_id(client):
    resp = play(client, client_id=None)
    assert resp.status_code == 200
    assert client.get("/api/streak").json()["streak"] == 1
    assert client.get("/api/streak", params={"clientId": "someone-else"}).json()["streak"] == 0


def test_no_store_degrades(make_client):
    client = make_client(store=None)
    first = play(client)
    assert first.status_code == 200
    assert "streak" not in first.json()

    # Nothing persisted, so no replay detection either
    assert play(client).status_code == 200
    assert client.get("/api/streak", params={"clientId": "player-1"}).json() == {
        "streak": 0,
        "best": 0,
        "lastDate": None,
    }


def test_error_envelope_carries_request_id(client):
    resp = play(client, sig="A" * 43 + "=")
    rid = resp.headers.get("x-request-id")
    body = resp.json()
    assert rid
    assert body["error"]["request_id"] == rid
    assert body["detail"] == body["error"]["message"]


def test_dataset_error_hides_detail(make_client):
    from whosolder.main import app

    def _broken():
        raise DatasetError("people.json missing at /secret/path")

    client = make_client()
    app.dependency_overrides[get_people] = _broken
    resp = client.get("/api/today")
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "dataset_error"
    assert resp.json()["error"]["message"] == "Unexpected error"


def test_unexpected_error_is_500(make_client):
    from whosolder.main import app

    def _boom():
        raise RuntimeError("kaboom")

    client = make_client(raise_server_exceptions=False)
    app.dependency_overrides[get_challenge_service] = _boom
    resp = client.get("/api/today")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"]["code"] == "internal_error"
    assert "kaboom" not in resp.text
    assert body["error"]["request_id"] == resp.headers["x-request-id"]


def test_unknown_route_is_normalized(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"
