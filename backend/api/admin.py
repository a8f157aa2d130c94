from fastapi import APIRouter, HTTPException
from backend.models.schemas import (
    AISettings, AISettingsTestResult, EvaluationTriple, PendingSubmissionsResponse,
    ReviewRequest, User, UserPrivilegesUpdate
)
from backend.core.ai_settings import AISettingsStore
from backend.core.evaluation import format_prompt
from backend.core.llm import LLMServiceError, TextGenerationClient
from backend.core.mongodb_client import MongoDBClient
from backend.prompts.evaluation_prompts import SAMPLE_EVALUATION_QUESTIONS
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

mongodb_client: MongoDBClient = None
settings_store: AISettingsStore = None
llm_client: TextGenerationClient = None

def set_dependencies(mc: MongoDBClient, ss: AISettingsStore, lc: TextGenerationClient):
    global mongodb_client, settings_store, llm_client
    mongodb_client = mc
    settings_store = ss
    llm_client = lc

@router.get("/pending", response_model=PendingSubmissionsResponse)
async def get_pending_submissions():
    """Questions and community quizzes waiting for review."""
    return PendingSubmissionsResponse(
        questions=mongodb_client.get_pending_questions(),
        quizzes=mongodb_client.get_pending_quizzes(),
    )

@router.post("/questions/{question_id}/review")
async def review_question(question_id: str, request: ReviewRequest):
    """
    Approve or reject a contributed question.

    Raises:
        HTTPException: 404 status code if no such question exists
    """
    if not mongodb_client.review_question(question_id, request.status, request.reviewer_id, request.notes):
        raise HTTPException(status_code=404, detail="Question not found")
    return {"id": question_id, "status": request.status}

@router.post("/quizzes/{quiz_id}/review")
async def review_quiz(quiz_id: str, request: ReviewRequest):
    if not mongodb_client.review_quiz(quiz_id, request.status, request.reviewer_id, request.notes):
        raise HTTPException(status_code=404, detail="Quiz not found")
    return {"id": quiz_id, "status": request.status}

@router.get("/users", response_model=List[User])
async def get_users():
    return mongodb_client.get_all_users()

@router.put("/users/{user_id}/privileges")
async def update_user_privileges(user_id: str, request: UserPrivilegesUpdate):
    if not mongodb_client.update_user_privileges(user_id, request.is_privileged, request.role):
        raise HTTPException(status_code=404, detail="User not found")
    return {"id": user_id, "is_privileged": request.is_privileged, "role": request.role}

@router.get("/ai-settings", response_model=AISettings)
async def get_ai_settings():
    return settings_store.load()

@router.put("/ai-settings", response_model=AISettings)
async def save_ai_settings(settings: AISettings):
    """
    Replace the grading configuration.

    Raises:
        HTTPException: 500 status code if the settings could not be stored
    """
    if not settings_store.save(settings):
        raise HTTPException(status_code=500, detail="Failed to save AI settings")
    return settings

@router.post("/ai-settings/reset", response_model=AISettings)
async def reset_ai_settings():
    return settings_store.reset()

@router.post("/ai-settings/test", response_model=AISettingsTestResult)
async def test_current_service():
    """
    Run the built-in sample answers through the current service.

    The failure of the service is reported in the result rather than as an
    HTTP error, so the settings panel can show what went wrong.
    """
    settings = settings_store.load()
    triples = [EvaluationTriple(**sample) for sample in SAMPLE_EVALUATION_QUESTIONS]
    prompt = format_prompt(settings.current_prompt(), triples)

    try:
        text = await llm_client.generate(prompt, settings.current_service, settings.current_model())
    except LLMServiceError as e:
        logger.error(f"AI service test failed: {e}")
        return AISettingsTestResult(success=False, status="ERROR", data={"error": str(e)})

    return AISettingsTestResult(
        success=True,
        status="OK",
        data={
            "evaluation": text,
            "service": settings.current_service,
            "model": settings.current_model(),
        },
    )
