from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime

AIService = Literal["openai", "gemini"]
EvaluationOutcome = Literal["Correct", "Incorrect"]
ReviewStatus = Literal["approved", "rejected"]


class EvaluationTriple(BaseModel):
    """One answered quiz question, as sent to the grading model"""
    model_config = ConfigDict(frozen=True)

    question: str
    correct_answer: str
    user_answer: str = ""


class EvaluationVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    correct_answer: str
    user_answer: str
    result: EvaluationOutcome
    justification: Optional[str] = None


class EvaluateQuizRequest(BaseModel):
    prompt: str = ""
    service: str = "openai"
    model: Optional[str] = None

class EvaluateQuizResponse(BaseModel):
    evaluation: str
    success: bool = True
    duration: int
    timestamp: datetime
    service: str
    model: Optional[str] = None

class QuizEvaluationRequest(BaseModel):
    answers: List[EvaluationTriple]

class QuizEvaluationResult(BaseModel):
    results: List[EvaluationVerdict]
    correct_count: int
    total: int
    score_percentage: float
    service: str
    model: str
    raw_response: str = ""


class AIServiceValues(BaseModel):
    openai: str
    gemini: str

class AISettings(BaseModel):
    current_service: AIService = "openai"
    prompts: AIServiceValues
    models: AIServiceValues

    def current_prompt(self) -> str:
        return getattr(self.prompts, self.current_service)

    def current_model(self) -> str:
        return getattr(self.models, self.current_service)

class AISettingsTestResult(BaseModel):
    success: bool
    status: str
    data: Dict[str, Any] = {}


class Category(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    slug: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_questions: Optional[int] = None

class QuizCategory(BaseModel):
    """Category as offered by the quiz maker, main or legacy"""
    id: str
    name: str
    description: str = ""
    table: str
    icon: str
    color: str
    total_questions: int = 0
    type: Literal["main", "legacy"]

class CategoryResponse(BaseModel):
    categories: List[Dict[str, Any]]

class Question(BaseModel):
    id: str
    category_id: Optional[str] = None
    author_id: Optional[str] = None
    question: str
    answer: str
    image_url: Optional[str] = None
    difficulty_level: str = "medium"
    is_anonymous: bool = False
    is_reusable: bool = True
    status: str = "approved"
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Joined fields
    category: Optional[Dict[str, Any]] = None
    author: Optional[Dict[str, Any]] = None

class QuestionListResponse(BaseModel):
    questions: List[Question]

class QuizMakerRequest(BaseModel):
    category_ids: List[str]
    count: int = Field(default=20, gt=0, le=50)

class QuizMakerResponse(BaseModel):
    questions: List[Question]
    requested: int
    available: int

class QuizQuestion(BaseModel):
    id: str
    quiz_id: str
    question: str
    answer: str
    image_url: Optional[str] = None
    order_index: int
    created_at: Optional[datetime] = None

class User(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Literal["user", "contributor", "admin"] = "user"
    is_privileged: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserQuiz(BaseModel):
    id: str
    author_id: str
    title: str
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: bool = True
    is_draft: bool = False
    status: Literal["draft", "pending", "approved", "rejected"] = "pending"
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    play_count: int = 0
    rating_sum: int = 0
    rating_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Joined fields
    author: Optional[Dict[str, Any]] = None
    questions: List[QuizQuestion] = []
    average_rating: float = 0.0

class CommunityQuizListResponse(BaseModel):
    quizzes: List[UserQuiz]

class SubmitQuestionRequest(BaseModel):
    category_id: str
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    image_url: Optional[str] = None
    difficulty_level: Literal["easy", "medium", "hard"] = "medium"
    is_anonymous: bool = False
    is_reusable: bool = True
    author_id: str

class CommunityQuestionInput(BaseModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    image_url: Optional[str] = None

class SubmitCommunityQuizRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    tags: List[str] = []
    questions: List[CommunityQuestionInput] = Field(min_length=1)
    author_id: str

class SubmissionResponse(BaseModel):
    id: str
    status: str = "pending"

class CommunityQuizAnswers(BaseModel):
    answers: List[str]

class CommunityAnswerResult(BaseModel):
    question: str
    correct_answer: str
    user_answer: str
    is_correct: bool

class CommunityQuizResult(BaseModel):
    quiz_id: str
    results: List[CommunityAnswerResult]
    correct_count: int
    total: int

class RatingRequest(BaseModel):
    rating: int = Field(ge=1, le=5)

class AnswerCheckRequest(BaseModel):
    user_answer: str
    correct_answer: str

class AnswerCheckResponse(BaseModel):
    is_correct: bool

class ReviewRequest(BaseModel):
    status: ReviewStatus
    reviewer_id: str
    notes: Optional[str] = None

class UserPrivilegesUpdate(BaseModel):
    is_privileged: bool
    role: Literal["user", "contributor", "admin"]

class PendingSubmissionsResponse(BaseModel):
    questions: List[Question]
    quizzes: List[UserQuiz]
