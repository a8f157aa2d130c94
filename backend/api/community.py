from fastapi import APIRouter, HTTPException
from backend.models.schemas import (
    CommunityAnswerResult, CommunityQuizAnswers, CommunityQuizListResponse, CommunityQuizResult,
    RatingRequest, SubmissionResponse, SubmitCommunityQuizRequest, SubmitQuestionRequest, UserQuiz
)
from backend.core.answer_matching import check_answer_similarity
from backend.core.mongodb_client import MongoDBClient
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

mongodb_client: MongoDBClient = None

def set_dependencies(mc: MongoDBClient):
    global mongodb_client
    mongodb_client = mc

@router.get("/community-quizzes", response_model=CommunityQuizListResponse)
async def get_community_quizzes():
    """Approved public community quizzes, newest first, with average ratings."""
    return CommunityQuizListResponse(quizzes=mongodb_client.get_approved_community_quizzes())

@router.get("/community-quizzes/{quiz_id}", response_model=UserQuiz)
async def get_community_quiz(quiz_id: str):
    quiz = mongodb_client.get_community_quiz(quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found or not approved")
    return quiz

@router.post("/community-quizzes/{quiz_id}/results", response_model=CommunityQuizResult)
async def submit_community_quiz_answers(quiz_id: str, request: CommunityQuizAnswers):
    """
    Score a played community quiz and count the play.

    Answers are matched to questions by position and graded locally with the
    fuzzy answer matcher; missing answers count as empty.

    Raises:
        HTTPException: 404 status code if the quiz is not approved or does not exist
    """
    quiz = mongodb_client.get_community_quiz(quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found or not approved")

    results = []
    for index, question in enumerate(quiz["questions"]):
        user_answer = request.answers[index] if index < len(request.answers) else ""
        results.append(CommunityAnswerResult(
            question=question["question"],
            correct_answer=question["answer"],
            user_answer=user_answer,
            is_correct=check_answer_similarity(user_answer, question["answer"]),
        ))

    mongodb_client.increment_play_count(quiz_id)

    return CommunityQuizResult(
        quiz_id=quiz_id,
        results=results,
        correct_count=sum(1 for result in results if result.is_correct),
        total=len(results),
    )

@router.post("/community-quizzes/{quiz_id}/rating")
async def rate_community_quiz(quiz_id: str, request: RatingRequest):
    if not mongodb_client.rate_community_quiz(quiz_id, request.rating):
        raise HTTPException(status_code=404, detail="Quiz not found or not approved")
    return {"quiz_id": quiz_id, "rating": request.rating}

@router.post("/community-quizzes", response_model=SubmissionResponse)
async def submit_community_quiz(request: SubmitCommunityQuizRequest):
    """
    Submit a community quiz for moderation.

    Raises:
        HTTPException: 500 status code if the quiz could not be stored
    """
    quiz_id = mongodb_client.submit_community_quiz(request.model_dump())
    if not quiz_id:
        raise HTTPException(status_code=500, detail="Failed to submit quiz")
    return SubmissionResponse(id=quiz_id)

@router.post("/questions", response_model=SubmissionResponse)
async def submit_question(request: SubmitQuestionRequest):
    question_id = mongodb_client.submit_question(request.model_dump())
    if not question_id:
        raise HTTPException(status_code=500, detail="Failed to submit question")
    return SubmissionResponse(id=question_id)
