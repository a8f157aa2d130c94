import asyncio

import pytest

from backend.core.ai_settings import SETTINGS_KEY
from backend.core.llm import LLMServiceError
from backend.core.quiz_evaluator import QuizEvaluator
from backend.models.schemas import EvaluationTriple

ANSWERS = [
    EvaluationTriple(question="What is the capital of France?", correct_answer="Paris", user_answer="paris"),
    EvaluationTriple(question="What color is the sky?", correct_answer="Blue", user_answer="t"),
]

GRADED = (
    "Question: What is the capital of France?\nCorrect Answer: Paris\nUser Answer: paris\n"
    "Result: Correct\nJustification: Case does not matter.\n\n"
    "Question: What color is the sky?\nCorrect Answer: Blue\nUser Answer: t\n"
    "Result: Incorrect\nJustification: Not a color."
)


def test_evaluate_uses_current_service_settings(fake_mongo, fake_llm, settings_store):
    fake_mongo.settings_documents[SETTINGS_KEY] = {
        "current_service": "gemini",
        "prompts": {"gemini": "Grade:\n{QUESTIONS_PLACEHOLDER}"},
        "models": {"gemini": "gemini-2.5-flash"},
    }
    fake_llm.response = GRADED

    result = asyncio.run(QuizEvaluator(fake_llm, settings_store).evaluate(ANSWERS))

    prompt, service, model = fake_llm.calls[0]
    assert prompt.startswith("Grade:\n1. Question: What is the capital of France?")
    assert "2. Question: What color is the sky?" in prompt
    assert (service, model) == ("gemini", "gemini-2.5-flash")
    assert result.service == "gemini"
    assert result.model == "gemini-2.5-flash"


def test_evaluate_scores_parsed_verdicts(fake_llm, settings_store):
    fake_llm.response = GRADED

    result = asyncio.run(QuizEvaluator(fake_llm, settings_store).evaluate(ANSWERS))

    assert [v.result for v in result.results] == ["Correct", "Incorrect"]
    assert result.correct_count == 1
    assert result.total == 2
    assert result.score_percentage == 50.0
    assert result.raw_response == GRADED


def test_evaluate_unparseable_reply_marks_all_incorrect(fake_llm, settings_store):
    fake_llm.response = "I cannot grade these."

    result = asyncio.run(QuizEvaluator(fake_llm, settings_store).evaluate(ANSWERS))

    assert result.correct_count == 0
    assert [v.justification for v in result.results] == [
        "Parsing failed - Question 1",
        "Parsing failed - Question 2",
    ]


def test_evaluate_propagates_service_errors(fake_llm, settings_store):
    fake_llm.error = LLMServiceError("openai", "gpt-4o-mini", "rate limited")

    with pytest.raises(LLMServiceError):
        asyncio.run(QuizEvaluator(fake_llm, settings_store).evaluate(ANSWERS))
