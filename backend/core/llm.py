from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import HumanMessage
from openai import AsyncOpenAI
from typing import Dict, Optional, Tuple
import logging
from backend.config import Config

logger = logging.getLogger(__name__)

SUPPORTED_SERVICES = ("openai", "gemini")


class LLMServiceError(Exception):
    """Raised when the text-generation service cannot produce a response"""

    def __init__(self, service: str, model: str, message: str):
        super().__init__(f"{service} ({model}): {message}")
        self.service = service
        self.model = model


def _message_text(content) -> str:
    """Chat message content as plain text; Gemini may return a list of parts"""
    if isinstance(content, list):
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return content or ""


class TextGenerationClient:
    """
    Forwards a finished prompt to OpenAI or Gemini and returns the raw text.
    - Unknown service names are served by OpenAI
    - Model falls back to the per-service default when none is given
    - Clients are created lazily and reused per (service, model)
    """

    def __init__(self):
        self._openai_client: Optional[AsyncOpenAI] = None
        self._gemini_clients: Dict[str, ChatGoogleGenerativeAI] = {}

    @staticmethod
    def resolve(service: Optional[str], model: Optional[str]) -> Tuple[str, str]:
        service = service if service in SUPPORTED_SERVICES else "openai"
        return service, model or Config.fallback_models()[service]

    def _openai(self) -> AsyncOpenAI:
        if self._openai_client is None:
            self._openai_client = AsyncOpenAI(api_key=Config.OPENAI_API_KEY)
        return self._openai_client

    def _gemini(self, model: str) -> ChatGoogleGenerativeAI:
        if model not in self._gemini_clients:
            self._gemini_clients[model] = ChatGoogleGenerativeAI(
                google_api_key=Config.GEMINI_API_KEY,
                model=model,
                temperature=Config.EVALUATION_TEMPERATURE,
                max_output_tokens=Config.EVALUATION_MAX_TOKENS,
            )
        return self._gemini_clients[model]

    async def generate(self, prompt: str, service: Optional[str] = None, model: Optional[str] = None) -> str:
        service, model = self.resolve(service, model)
        logger.info(f"Generating with {service}/{model}, prompt length {len(prompt)} characters")

        try:
            if service == "gemini":
                response = await self._gemini(model).ainvoke([HumanMessage(content=prompt)])
                text = _message_text(response.content)
            else:
                response = await self._openai().chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=Config.EVALUATION_TEMPERATURE,
                    max_tokens=Config.EVALUATION_MAX_TOKENS,
                )
                text = response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"LLM generation error: {e}")
            raise LLMServiceError(service, model, str(e)) from e

        logger.info(f"Response length: {len(text)} characters")
        return text
