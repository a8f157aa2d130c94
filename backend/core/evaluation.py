# backend/core/evaluation.py
import re
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from backend.models.schemas import EvaluationTriple, EvaluationVerdict
from backend.prompts.evaluation_prompts import QUESTIONS_PLACEHOLDER

logger = logging.getLogger(__name__)

DELIMITED_MARKER = "===QUESTION"
DEFAULT_JUSTIFICATION = "Evaluation completed"

_FLAGS = re.IGNORECASE | re.DOTALL

_PLAIN_SPLIT = re.compile(r"(?=Question:)", re.IGNORECASE)
_DELIMITED_SPLIT = re.compile(r"===QUESTION \d+===", re.IGNORECASE)

_QUESTION = re.compile(r"Question:\s*(.+?)(?=\nCorrect Answer:|\Z)", _FLAGS)
_CORRECT_ANSWER = re.compile(r"Correct Answer:\s*(.+?)(?=\nUser Answer:|\Z)", _FLAGS)
_USER_ANSWER = re.compile(r"User Answer:\s*(.+?)(?=\nResult:|\Z)", _FLAGS)
_RESULT = re.compile(r"Result:\s*(Correct|Incorrect)", re.IGNORECASE)

# Plain blocks end a justification at a blank line, delimited ones at the next delimiter
_PLAIN_JUSTIFICATION = re.compile(r"Justification:\s*(.+?)(?=\n\n|\Z)", _FLAGS)
_DELIMITED_JUSTIFICATION = re.compile(r"Justification:\s*(.+?)(?=\n===|\Z)", _FLAGS)


class EvaluationParseError(Exception):
    """Raised inside the parser when the model output cannot be aligned to the answers"""


def format_prompt(template: str, triples: Sequence[EvaluationTriple]) -> str:
    """
    Substitute the numbered answer listing into an evaluation template.

    Each answer is rendered as a numbered entry with its question, correct answer
    and user answer (blank answers become "(empty)"), entries separated by a blank
    line. Only the first placeholder is replaced; a template without one is
    returned unchanged.
    """
    questions_list = "\n\n".join(
        f"{index}. Question: {triple.question}\n"
        f"   Correct Answer: {triple.correct_answer}\n"
        f"   User Answer: {triple.user_answer if triple.user_answer.strip() else '(empty)'}"
        for index, triple in enumerate(triples, start=1)
    )

    if QUESTIONS_PLACEHOLDER not in template:
        logger.warning("Evaluation template has no %s marker; sending it unformatted", QUESTIONS_PLACEHOLDER)
        return template

    return template.replace(QUESTIONS_PLACEHOLDER, questions_list, 1)


def _match(pattern: re.Pattern, block: str) -> Optional[str]:
    found = pattern.search(block)
    return found.group(1).strip() if found else None


def _extract_fields(block: str, justification_pattern: re.Pattern) -> Dict[str, Optional[str]]:
    return {
        "question": _match(_QUESTION, block),
        "correct_answer": _match(_CORRECT_ANSWER, block),
        "user_answer": _match(_USER_ANSWER, block),
        "result": _match(_RESULT, block),
        "justification": _match(justification_pattern, block),
    }


def _split_blocks(raw_text: str) -> Tuple[List[str], re.Pattern]:
    if DELIMITED_MARKER in raw_text:
        blocks = _DELIMITED_SPLIT.split(raw_text)
        justification_pattern = _DELIMITED_JUSTIFICATION
    else:
        blocks = _PLAIN_SPLIT.split(raw_text)
        justification_pattern = _PLAIN_JUSTIFICATION

    return [block for block in blocks if block.strip()], justification_pattern


def _fallback_verdicts(triples: Sequence[EvaluationTriple]) -> List[EvaluationVerdict]:
    return [
        EvaluationVerdict(
            question=triple.question,
            correct_answer=triple.correct_answer,
            user_answer=triple.user_answer,
            result="Incorrect",
            justification=f"Parsing failed - Question {index}",
        )
        for index, triple in enumerate(triples, start=1)
    ]


def parse_evaluation_response(raw_text: str, triples: Sequence[EvaluationTriple]) -> List[EvaluationVerdict]:
    """
    Turn the grading model's free-text reply into one verdict per answer.

    Blocks are matched to answers by position. Only the result and justification
    are taken from the text; question and answers always come from ``triples``.
    Any failure, including a reply with fewer blocks than answers, marks the whole
    batch incorrect with a "Parsing failed" justification.
    """
    try:
        blocks, justification_pattern = _split_blocks(raw_text)

        if len(blocks) < len(triples):
            raise EvaluationParseError(
                f"Expected {len(triples)} evaluation blocks, found {len(blocks)}"
            )

        verdicts = []
        for triple, block in zip(triples, blocks):
            fields = _extract_fields(block, justification_pattern)
            result_text = fields["result"] or "Incorrect"

            verdicts.append(EvaluationVerdict(
                question=triple.question,
                correct_answer=triple.correct_answer,
                user_answer=triple.user_answer,
                result="Correct" if result_text.lower() == "correct" else "Incorrect",
                justification=fields["justification"] or DEFAULT_JUSTIFICATION,
            ))

        return verdicts

    except Exception as e:
        logger.error(f"Parsing error: {e}")
        return _fallback_verdicts(triples)
