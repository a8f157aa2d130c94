from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from backend.models.schemas import (
    AnswerCheckRequest, AnswerCheckResponse, Category, CategoryResponse, EvaluateQuizRequest,
    EvaluateQuizResponse, QuestionListResponse, QuizCategory, QuizEvaluationRequest,
    QuizEvaluationResult, QuizMakerRequest, QuizMakerResponse
)
from backend.core.answer_matching import check_answer_similarity
from backend.core.llm import LLMServiceError, TextGenerationClient
from backend.core.mongodb_client import MongoDBClient
from backend.core.quiz_evaluator import QuizEvaluator
from datetime import datetime
from typing import List, Optional
import logging
import time

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies - set on startup
mongodb_client: MongoDBClient = None
llm_client: TextGenerationClient = None
quiz_evaluator: QuizEvaluator = None

def set_dependencies(mc: MongoDBClient, lc: TextGenerationClient, qe: QuizEvaluator):
    global mongodb_client, llm_client, quiz_evaluator
    mongodb_client = mc
    llm_client = lc
    quiz_evaluator = qe

@router.get("/categories", response_model=CategoryResponse)
async def get_categories():
    """
    Get active categories with their approved question counts.

    Returns:
        CategoryResponse: Categories ordered by name
    """
    return CategoryResponse(categories=mongodb_client.get_main_categories_with_stats())

@router.get("/categories/{slug}", response_model=Category)
async def get_category(slug: str):
    category = mongodb_client.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category

@router.get("/categories/{slug}/questions", response_model=QuestionListResponse)
async def get_category_questions(slug: str, search: Optional[str] = None):
    """
    Approved questions of one category, newest first.

    An optional ``search`` filters by question or answer text, ignoring case.
    """
    category = mongodb_client.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    if search:
        questions = mongodb_client.search_approved_questions(search, category["id"])
    else:
        questions = mongodb_client.get_approved_questions_by_category(category["id"])
    return QuestionListResponse(questions=questions)

@router.get("/questions", response_model=QuestionListResponse)
async def get_approved_questions(search: Optional[str] = None):
    if search:
        return QuestionListResponse(questions=mongodb_client.search_approved_questions(search))
    return QuestionListResponse(questions=mongodb_client.get_all_approved_questions())

@router.get("/quiz-maker/categories", response_model=List[QuizCategory])
async def get_quiz_maker_categories():
    return mongodb_client.get_all_categories_for_quiz_maker()

@router.post("/quiz-maker/questions", response_model=QuizMakerResponse)
async def build_quiz(request: QuizMakerRequest):
    """
    Draw random questions for a quiz from the selected categories.

    Raises:
        HTTPException: 400 when no category is selected, 404 when none of them
                       has questions
    """
    if not request.category_ids:
        raise HTTPException(status_code=400, detail="Please select at least one category")

    questions = mongodb_client.get_random_questions_from_categories(request.category_ids, request.count)
    if not questions:
        raise HTTPException(status_code=404, detail="No questions found for selected categories")

    return QuizMakerResponse(questions=questions, requested=request.count, available=len(questions))

@router.post("/evaluate-quiz", response_model=EvaluateQuizResponse)
async def evaluate_quiz(request: EvaluateQuizRequest):
    """
    Forward a finished evaluation prompt to the selected service.

    Returns the model's raw text together with timing and the service and model
    that produced it.

    A failed service call is answered with a flat 500 JSON body carrying the
    error, details, timing, service and model.

    Raises:
        HTTPException: 400 status code if the prompt is empty
    """
    if not request.prompt.strip():
        logger.error("API Error: No prompt provided")
        raise HTTPException(status_code=400, detail="Prompt is required")

    start_time = time.perf_counter()
    logger.info(f"Starting AI evaluation with {request.service} / {request.model}")
    logger.info(f"Prompt preview: {request.prompt[:200]}...")

    try:
        text = await llm_client.generate(request.prompt, request.service, request.model)
    except LLMServiceError as e:
        duration = int((time.perf_counter() - start_time) * 1000)
        logger.error(f"Error evaluating quiz after {duration} ms: {e}")
        return JSONResponse(status_code=500, content={
            "error": "Failed to evaluate quiz answers",
            "details": str(e),
            "success": False,
            "duration": duration,
            "timestamp": datetime.now().isoformat(),
            "service": request.service,
            "model": request.model,
        })

    duration = int((time.perf_counter() - start_time) * 1000)
    logger.info(f"AI evaluation completed in {duration} ms")
    logger.info(f"Response preview: {text[:300]}...")

    return EvaluateQuizResponse(
        evaluation=text,
        duration=duration,
        timestamp=datetime.now(),
        service=request.service,
        model=request.model,
    )

@router.post("/quiz/evaluate", response_model=QuizEvaluationResult)
async def grade_quiz(request: QuizEvaluationRequest):
    """
    Grade a finished quiz with the configured AI service.

    Args:
        request (QuizEvaluationRequest): Answers in the order they were asked

    Returns:
        QuizEvaluationResult: One verdict per answer plus the score

    Raises:
        HTTPException: 400 for an empty answer list, 502 if the AI service fails
    """
    if not request.answers:
        raise HTTPException(status_code=400, detail="At least one answer is required")

    try:
        return await quiz_evaluator.evaluate(request.answers)
    except LLMServiceError as e:
        logger.error(f"AI evaluation failed: {e}")
        raise HTTPException(
            status_code=502,
            detail=f"AI evaluation failed using {e.service}. Please try again or contact support."
        )

@router.post("/quiz/check-answer", response_model=AnswerCheckResponse)
async def check_answer(request: AnswerCheckRequest):
    return AnswerCheckResponse(is_correct=check_answer_similarity(request.user_answer, request.correct_answer))
