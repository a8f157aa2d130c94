import copy

import pytest
from fastapi.testclient import TestClient

from backend.api import admin, community, quiz
from backend.core.ai_settings import AISettingsStore
from backend.core.quiz_evaluator import QuizEvaluator
from backend.main import app


class FakeMongoDBClient:
    """In-memory stand-in for MongoDBClient covering what the routers call"""

    def __init__(self):
        self.settings_documents = {}
        self.categories = []
        self.questions = []
        self.pending_questions = []
        self.pending_quizzes = []
        self.quizzes = {}
        self.play_counts = {}
        self.reviews = []
        self.submitted_quizzes = []
        self.fail_settings_reads = False

    def get_settings_document(self, key):
        if self.fail_settings_reads:
            raise RuntimeError("connection refused")
        return copy.deepcopy(self.settings_documents.get(key))

    def save_settings_document(self, key, document):
        self.settings_documents[key] = copy.deepcopy(document)
        return True

    def get_main_categories_with_stats(self):
        return copy.deepcopy(self.categories)

    def get_category_by_slug(self, slug):
        return next((c for c in self.categories if c["slug"] == slug), None)

    def get_approved_questions_by_category(self, category_id):
        return [q for q in self.questions if q["category_id"] == category_id]

    def search_approved_questions(self, query, category_id=None):
        query = query.lower()
        return [
            q for q in self.questions
            if (category_id is None or q["category_id"] == category_id)
            and (query in q["question"].lower() or query in q["answer"].lower())
        ]

    def get_random_questions_from_categories(self, category_ids, count):
        return [q for q in self.questions if q["category_id"] in category_ids][:count]

    def get_community_quiz(self, quiz_id):
        return copy.deepcopy(self.quizzes.get(quiz_id))

    def increment_play_count(self, quiz_id):
        self.play_counts[quiz_id] = self.play_counts.get(quiz_id, 0) + 1
        return True

    def submit_community_quiz(self, quiz_data):
        self.submitted_quizzes.append(quiz_data)
        return "quiz-new"

    def get_pending_questions(self):
        return self.pending_questions

    def get_pending_quizzes(self):
        return self.pending_quizzes

    def review_question(self, question_id, status, reviewer_id, notes=None):
        if question_id not in {q["id"] for q in self.pending_questions}:
            return False
        self.reviews.append(("question", question_id, status, reviewer_id, notes))
        return True

    def review_quiz(self, quiz_id, status, reviewer_id, notes=None):
        if quiz_id not in {q["id"] for q in self.pending_quizzes}:
            return False
        self.reviews.append(("quiz", quiz_id, status, reviewer_id, notes))
        return True


class FakeTextGenerationClient:
    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, prompt, service=None, model=None):
        self.calls.append((prompt, service, model))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def fake_mongo():
    return FakeMongoDBClient()


@pytest.fixture
def fake_llm():
    return FakeTextGenerationClient()


@pytest.fixture
def settings_store(fake_mongo):
    return AISettingsStore(fake_mongo)


@pytest.fixture
def api(fake_mongo, fake_llm, settings_store):
    quiz.set_dependencies(fake_mongo, fake_llm, QuizEvaluator(fake_llm, settings_store))
    community.set_dependencies(fake_mongo)
    admin.set_dependencies(fake_mongo, settings_store, fake_llm)
    return TestClient(app)
