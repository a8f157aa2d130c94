from typing import List
import logging
from backend.core.ai_settings import AISettingsStore
from backend.core.evaluation import format_prompt, parse_evaluation_response
from backend.core.llm import TextGenerationClient
from backend.models.schemas import EvaluationTriple, QuizEvaluationResult

logger = logging.getLogger(__name__)


class QuizEvaluator:
    """
    Grades a finished quiz with the configured language model.
    - Formats the current service's template with every answer
    - Sends the prompt to the configured service and model
    - Parses the reply into verdicts aligned with the answers
    """

    def __init__(self, llm_client: TextGenerationClient, settings_store: AISettingsStore):
        self.llm = llm_client
        self.settings_store = settings_store

    async def evaluate(self, answers: List[EvaluationTriple]) -> QuizEvaluationResult:
        """
        Input: answers (List[EvaluationTriple]) in quiz order
        Output: QuizEvaluationResult with verdicts, score and the raw model reply

        Raises LLMServiceError when the service call fails; parsing never raises.
        """
        settings = self.settings_store.load()
        service = settings.current_service
        model = settings.current_model()

        prompt = format_prompt(settings.current_prompt(), answers)
        raw_response = await self.llm.generate(prompt, service, model)

        results = parse_evaluation_response(raw_response, answers)
        correct_count = sum(1 for verdict in results if verdict.result == "Correct")
        total = len(results)

        logger.info(f"Evaluated {total} answers with {service}/{model}: {correct_count} correct")

        return QuizEvaluationResult(
            results=results,
            correct_count=correct_count,
            total=total,
            score_percentage=round(correct_count / total * 100, 1) if total > 0 else 0.0,
            service=service,
            model=model,
            raw_response=raw_response,
        )
