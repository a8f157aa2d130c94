import re
from collections import defaultdict
from unittest.mock import MagicMock

import pytest

from backend.config import Config
from backend.core.mongodb_client import MongoDBClient


@pytest.fixture
def db():
    """One MagicMock collection per name, shared with the client under test"""
    return defaultdict(MagicMock)


@pytest.fixture
def store(db):
    client = MagicMock()
    client.__getitem__.return_value = db
    return MongoDBClient(client=client)


def _main_categories(db, *ids):
    db[Config.CATEGORIES_COLLECTION].find.return_value.sort.return_value = [
        {"id": category_id, "name": category_id.title(), "slug": category_id} for category_id in ids
    ]


def test_with_rating_averages_and_orders_questions():
    quiz = MongoDBClient._with_rating({
        "rating_sum": 9,
        "rating_count": 2,
        "questions": [{"id": "b", "order_index": 2}, {"id": "a", "order_index": 1}],
    })

    assert quiz["average_rating"] == 4.5
    assert [q["id"] for q in quiz["questions"]] == ["a", "b"]


def test_with_rating_is_zero_when_unrated():
    quiz = MongoDBClient._with_rating({"rating_sum": 0, "rating_count": 0})

    assert quiz["average_rating"] == 0
    assert quiz["questions"] == []


def test_submit_community_quiz_stores_pending_quiz_with_numbered_questions(store, db):
    quiz_id = store.submit_community_quiz({
        "author_id": "user-1",
        "title": "Capitals",
        "questions": [
            {"question": "Capital of France?", "answer": "Paris"},
            {"question": "Capital of Spain?", "answer": "Madrid"},
        ],
    })

    assert quiz_id is not None
    quiz = db[Config.USER_QUIZZES_COLLECTION].insert_one.call_args[0][0]
    assert quiz["id"] == quiz_id
    assert quiz["status"] == "pending"
    assert quiz["is_draft"] is False
    assert quiz["is_public"] is True
    assert quiz["play_count"] == 0

    questions = db[Config.QUIZ_QUESTIONS_COLLECTION].insert_many.call_args[0][0]
    assert [q["order_index"] for q in questions] == [1, 2]
    assert {q["quiz_id"] for q in questions} == {quiz_id}
    assert questions[1]["answer"] == "Madrid"


def test_submit_community_quiz_removes_quiz_when_questions_fail(store, db):
    db[Config.QUIZ_QUESTIONS_COLLECTION].insert_many.side_effect = RuntimeError("write concern error")

    quiz_id = store.submit_community_quiz({
        "author_id": "user-1",
        "title": "Capitals",
        "questions": [{"question": "Capital of France?", "answer": "Paris"}],
    })

    assert quiz_id is None
    inserted = db[Config.USER_QUIZZES_COLLECTION].insert_one.call_args[0][0]
    db[Config.USER_QUIZZES_COLLECTION].delete_one.assert_called_once_with({"id": inserted["id"]})
    db[Config.QUIZ_QUESTIONS_COLLECTION].delete_many.assert_called_once_with({"quiz_id": inserted["id"]})


def test_submit_community_quiz_reports_failed_quiz_insert(store, db):
    db[Config.USER_QUIZZES_COLLECTION].insert_one.side_effect = RuntimeError("connection refused")

    quiz_id = store.submit_community_quiz({"author_id": "user-1", "title": "Capitals", "questions": []})

    assert quiz_id is None
    db[Config.QUIZ_QUESTIONS_COLLECTION].insert_many.assert_not_called()


def test_legacy_rows_are_reshaped_like_main_questions(store, db):
    _main_categories(db)
    db["wcquizz"].find.return_value = [
        {"_id": "abc123", "question": "Who won in 2014?", "answer": "Germany", "level": "hard"},
        {"_id": "def456", "id": 7, "question": "Host in 2010?", "answer": "South Africa"},
        {"_id": "ghi789", "question": "", "answer": "Brazil"},
    ]

    questions = store.get_random_questions_from_categories(["worldcup"], 10)

    by_id = {q["id"]: q for q in questions}
    assert set(by_id) == {"abc123", "7"}
    assert by_id["abc123"]["difficulty_level"] == "hard"
    assert by_id["7"]["difficulty_level"] == "medium"
    assert by_id["7"]["category"] == {"id": "worldcup", "name": "World Cup Quiz", "icon": "🏆", "slug": "worldcup"}


def test_random_draw_is_limited_to_count(store, db):
    _main_categories(db, "history")
    db[Config.QUESTIONS_COLLECTION].aggregate.return_value = [
        {"id": f"q{i}", "question": f"Q{i}", "answer": f"A{i}"} for i in range(6)
    ]

    questions = store.get_random_questions_from_categories(["history", "unknown"], 4)

    assert len(questions) == 4
    assert {q["id"] for q in questions} <= {f"q{i}" for i in range(6)}
    db[Config.QUESTIONS_COLLECTION].aggregate.assert_called_once()


def test_search_escapes_regex_characters(store, db):
    db[Config.QUESTIONS_COLLECTION].aggregate.return_value = []

    store.search_approved_questions("what is 2+2?", category_id="math")

    pipeline = db[Config.QUESTIONS_COLLECTION].aggregate.call_args[0][0]
    match = pipeline[0]["$match"]
    pattern = {"$regex": re.escape("what is 2+2?"), "$options": "i"}
    assert match["status"] == "approved"
    assert match["category_id"] == "math"
    assert match["$or"] == [{"question": pattern}, {"answer": pattern}]


def test_search_failure_returns_empty_list(store, db):
    db[Config.QUESTIONS_COLLECTION].aggregate.side_effect = RuntimeError("connection refused")

    assert store.search_approved_questions("paris") == []


def test_review_reports_whether_a_document_matched(store, db):
    questions = db[Config.QUESTIONS_COLLECTION]
    questions.update_one.return_value.matched_count = 1

    assert store.review_question("q1", "approved", "admin-1", "looks good") is True
    query, update = questions.update_one.call_args[0]
    assert query == {"id": "q1"}
    assert update["$set"]["status"] == "approved"
    assert update["$set"]["reviewed_by"] == "admin-1"
    assert update["$set"]["review_notes"] == "looks good"

    questions.update_one.return_value.matched_count = 0
    assert store.review_question("missing", "rejected", "admin-1") is False


def test_review_quiz_failure_returns_false(store, db):
    db[Config.USER_QUIZZES_COLLECTION].update_one.side_effect = RuntimeError("connection refused")

    assert store.review_quiz("quiz-1", "approved", "admin-1") is False
