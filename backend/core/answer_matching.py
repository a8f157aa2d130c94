import re
from backend.config import Config


def normalize_answer(text: str) -> str:
    """Lowercase, trim, drop punctuation and collapse whitespace"""
    text = re.sub(r"[^\w\s]", "", text.lower().strip())
    return re.sub(r"\s+", " ", text)


def check_answer_similarity(user_answer: str, correct_answer: str) -> bool:
    """
    Local fuzzy match used where no language model grades the answer.

    The answers match when they are equal after normalisation, or when at least
    70% of the significant words (longer than two characters) of the correct
    answer appear in the user's answer, either word containing the other.
    """
    if not user_answer or not correct_answer:
        return False

    normalized_user = normalize_answer(user_answer)
    normalized_correct = normalize_answer(correct_answer)

    if normalized_user == normalized_correct:
        return True

    correct_words = [word for word in normalized_correct.split(" ") if len(word) > 2]
    user_words = [word for word in normalized_user.split(" ") if word]

    if not correct_words:
        return normalized_correct in normalized_user

    matched_words = [
        word for word in correct_words
        if any(user_word in word or word in user_word for user_word in user_words)
    ]

    return len(matched_words) / len(correct_words) >= Config.SIMILARITY_THRESHOLD
