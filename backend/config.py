import os
from dotenv import load_dotenv
from typing import Dict

load_dotenv()

class Config:
    # API Keys
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

    # Model Settings
    DEFAULT_SERVICE: str = os.getenv("AI_SERVICE", "openai")
    OPENAI_FALLBACK_MODEL: str = "gpt-4o-mini"
    GEMINI_FALLBACK_MODEL: str = "gemini-1.5-flash"
    EVALUATION_TEMPERATURE: float = 0.1
    EVALUATION_MAX_TOKENS: int = 4000

    # MongoDB Settings
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "quizhub")
    CATEGORIES_COLLECTION: str = "main_categories"
    QUESTIONS_COLLECTION: str = "main_questions"
    USER_QUIZZES_COLLECTION: str = "user_quizzes"
    QUIZ_QUESTIONS_COLLECTION: str = "quiz_questions"
    USERS_COLLECTION: str = "users"
    SETTINGS_COLLECTION: str = "ai_settings"

    # Answer Matching
    SIMILARITY_THRESHOLD: float = 0.7

    # Server Settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    @classmethod
    def fallback_models(cls) -> Dict[str, str]:
        """Models used by the proxy when the caller names none"""
        return {
            "openai": cls.OPENAI_FALLBACK_MODEL,
            "gemini": cls.GEMINI_FALLBACK_MODEL,
        }

    @classmethod
    def api_key_for(cls, service: str) -> str:
        if service == "gemini":
            return cls.GEMINI_API_KEY
        return cls.OPENAI_API_KEY

    @classmethod
    def validate_config(cls):
        if not cls.MONGODB_URI:
            raise ValueError("MONGODB_URI is required")
        if cls.DEFAULT_SERVICE not in ("openai", "gemini"):
            raise ValueError(f"Unsupported AI_SERVICE: {cls.DEFAULT_SERVICE}")
        if not cls.api_key_for(cls.DEFAULT_SERVICE):
            raise ValueError(f"{cls.DEFAULT_SERVICE.upper()}_API_KEY is required")
