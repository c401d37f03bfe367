from datetime import datetime

import pytest

from judging.crud import reviews as reviews_crud
from judging.models.category import Category

JUDGE = {"X-Judge-Id": "judge-1"}
PREFIX = "/api/v1"


@pytest.fixture
def scored(db, category):
    reviews_crud.upsert_review(db, "sub-9", "judge-1", 9, "excellent")
    reviews_crud.upsert_review(db, "sub-7", "judge-1", 7, "good")
    reviews_crud.upsert_review(db, "sub-5", "judge-1", 5, "ok")
    return category


def rankings_body(*submission_ids):
    return {"rankings": [{"rank": i, "submission_id": s} for i, s in enumerate(submission_ids, start=1)]}


def test_missing_judge_header_is_rejected(client, category):
    response = client.get(f"{PREFIX}/categories/cat-1/submissions")
    assert response.status_code == 401


def test_list_submissions_with_progress(client, category, db):
    reviews_crud.upsert_review(db, "sub-9", "judge-1", 9, "excellent")

    response = client.get(f"{PREFIX}/categories/cat-1/submissions", params={"filter": "pending"}, headers=JUDGE)

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == ["sub-7", "sub-5", "sub-dq"]
    assert body["progress"] == {"total": 4, "reviewed": 1, "pending": 3, "percentage": 25}
    assert "participant_code" in body["items"][0]


def test_list_submissions_unknown_category(client, category):
    response = client.get(f"{PREFIX}/categories/nope/submissions", headers=JUDGE)
    assert response.status_code == 404


def test_upsert_review(client, category):
    response = client.put(f"{PREFIX}/submissions/sub-7/review", json={"rating": 7, "feedback": "tight edit"}, headers=JUDGE)
    assert response.status_code == 200
    assert response.json()["rating"] == 7

    response = client.put(f"{PREFIX}/submissions/sub-7/review", json={"rating": 8, "feedback": ""}, headers=JUDGE)
    assert response.json()["rating"] == 8
    assert response.json()["feedback"] == ""


def test_upsert_review_validation(client, category):
    response = client.put(f"{PREFIX}/submissions/sub-7/review", json={"rating": 11}, headers=JUDGE)
    assert response.status_code == 422

    response = client.put(f"{PREFIX}/submissions/missing/review", json={"rating": 3}, headers=JUDGE)
    assert response.status_code == 404


def test_save_and_load_rankings(client, scored):
    response = client.put(f"{PREFIX}/categories/cat-1/rankings", json=rankings_body("sub-9", "sub-7", "sub-5"), headers=JUDGE)

    assert response.status_code == 200
    assert response.json() == [
        {"rank": 1, "submission_id": "sub-9"},
        {"rank": 2, "submission_id": "sub-7"},
        {"rank": 3, "submission_id": "sub-5"},
    ]
    assert client.get(f"{PREFIX}/categories/cat-1/rankings", headers=JUDGE).json() == response.json()
    assert client.get(f"{PREFIX}/categories/cat-1/rankings", headers={"X-Judge-Id": "judge-2"}).json() == []


def test_rankings_must_respect_ratings(client, scored):
    response = client.put(f"{PREFIX}/categories/cat-1/rankings", json=rankings_body("sub-5", "sub-9", "sub-7"), headers=JUDGE)

    assert response.status_code == 400
    assert response.json()["error"] == "RankingOrderError"


@pytest.mark.parametrize("body", [
    rankings_body("sub-9", "sub-7"),
    {"rankings": [
        {"rank": 1, "submission_id": "sub-9"},
        {"rank": 1, "submission_id": "sub-7"},
        {"rank": 3, "submission_id": "sub-5"},
    ]},
    rankings_body("sub-9", "sub-9", "sub-5"),
    rankings_body("sub-9", "sub-7", "elsewhere"),
    rankings_body("sub-9", "sub-7", "sub-dq"),
])
def test_invalid_rankings_rejected(client, scored, body):
    response = client.put(f"{PREFIX}/categories/cat-1/rankings", json=body, headers=JUDGE)
    assert response.status_code == 400


def test_completed_category_rankings_are_read_only(client, scored, db):
    category = db.query(Category).filter(Category.id == "cat-1").first()
    category.judging_completed_at = datetime(2025, 4, 1)
    db.commit()

    response = client.put(f"{PREFIX}/categories/cat-1/rankings", json=rankings_body("sub-9", "sub-7", "sub-5"), headers=JUDGE)

    assert response.status_code == 409


def test_completion_status(client, scored, db):
    response = client.get(f"{PREFIX}/categories/cat-1/completion", headers=JUDGE)
    assert response.json()["can_complete"] is False

    reviews_crud.upsert_review(db, "sub-dq", "judge-1", 1, "")
    client.put(f"{PREFIX}/categories/cat-1/rankings", json=rankings_body("sub-9", "sub-7", "sub-5"), headers=JUDGE)

    body = client.get(f"{PREFIX}/categories/cat-1/completion", headers=JUDGE).json()
    assert body["all_reviewed"] is True
    assert body["has_rankings"] is True
    assert body["can_complete"] is True
