
QUESTIONS_PLACEHOLDER = "{QUESTIONS_PLACEHOLDER}"

OPENAI_EVALUATION_TEMPLATE = """You are an intelligent assistant that helps evaluate quiz answers. A user has submitted answers to a quiz, and you are to compare them with the correct answers.

Rules:
- Accept minor spelling or grammar mistakes.
- Accept answers even if they are lowercase or uppercase.
- Accept answers if they are semantically equivalent or meaningfully close.
- If the answer is clearly incorrect, mark it as wrong.

For each question, output EXACTLY this format:

Question: <question>
Correct Answer: <system_answer>
User Answer: <user_answer>
Result: Correct / Incorrect
Justification: <short explanation>

Here is the list:

{QUESTIONS_PLACEHOLDER}"""

GEMINI_EVALUATION_TEMPLATE = """You are an intelligent assistant that helps evaluate quiz answers. A user has submitted answers to a quiz, and you are to compare them with the correct answers.

Rules:
- Accept minor spelling or grammar mistakes.
- Accept answers even if they are lowercase or uppercase.
- Accept answers if they are semantically equivalent or meaningfully close.
- If the answer is clearly incorrect, mark it as wrong.
- Write all justifications in Serbian language.

CRITICAL: You MUST follow this EXACT format for EACH question. Do NOT mix questions together:

===QUESTION 1===
Question: [copy the exact question text]
Correct Answer: [copy the exact correct answer]
User Answer: [copy the exact user answer]
Result: Correct / Incorrect
Justification: [short explanation in Serbian]

===QUESTION 2===
Question: [copy the exact question text]
Correct Answer: [copy the exact correct answer]
User Answer: [copy the exact user answer]
Result: Correct / Incorrect
Justification: [short explanation in Serbian]

Continue this pattern for ALL questions. Each question must be separated by ===QUESTION X=== where X is the question number.

Here is the list:

{QUESTIONS_PLACEHOLDER}"""

# Sample answers used by the admin "test service" action
SAMPLE_EVALUATION_QUESTIONS = [
    {
        "question": "What is the capital of France?",
        "correct_answer": "Paris",
        "user_answer": "paris",
    },
    {
        "question": "What color is the sky?",
        "correct_answer": "Blue",
        "user_answer": "t",
    },
]
