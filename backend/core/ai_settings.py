from typing import Dict, Any
import logging
from backend.config import Config
from backend.core.mongodb_client import MongoDBClient
from backend.models.schemas import AISettings, AIServiceValues
from backend.prompts.evaluation_prompts import OPENAI_EVALUATION_TEMPLATE, GEMINI_EVALUATION_TEMPLATE

logger = logging.getLogger(__name__)

SETTINGS_KEY = "ai-settings"


def default_settings() -> AISettings:
    return AISettings(
        current_service=Config.DEFAULT_SERVICE,
        prompts=AIServiceValues(
            openai=OPENAI_EVALUATION_TEMPLATE,
            gemini=GEMINI_EVALUATION_TEMPLATE,
        ),
        models=AIServiceValues(
            openai="gpt-4o-mini",
            gemini="gemini-2.0-flash-lite",
        ),
    )


def merge_with_defaults(stored: Dict[str, Any]) -> AISettings:
    """Overlay a stored settings document on the defaults, section by section"""
    defaults = default_settings().model_dump()

    merged = {**defaults, **{k: v for k, v in stored.items() if k in defaults}}
    merged["prompts"] = {**defaults["prompts"], **(stored.get("prompts") or {})}
    merged["models"] = {**defaults["models"], **(stored.get("models") or {})}

    return AISettings(**merged)


class AISettingsStore:
    """
    Persisted grading configuration: current service plus per-service prompt and model.
    Reads never fail; a missing or unreadable document yields the defaults.
    """

    def __init__(self, mongodb_client: MongoDBClient):
        self.mongodb = mongodb_client

    def load(self) -> AISettings:
        try:
            stored = self.mongodb.get_settings_document(SETTINGS_KEY)
            if stored:
                return merge_with_defaults(stored)
        except Exception as e:
            logger.error(f"Error loading AI settings: {e}")

        return default_settings()

    def save(self, settings: AISettings) -> bool:
        try:
            return self.mongodb.save_settings_document(SETTINGS_KEY, settings.model_dump())
        except Exception as e:
            logger.error(f"Error saving AI settings: {e}")
            return False

    def reset(self) -> AISettings:
        settings = default_settings()
        self.save(settings)
        return settings
