from app.schemas.quiz import ANSWER_LABELS, OPTION_COUNT
from app.services.quiz_policy import Difficulty, resolve_difficulty, resolve_language_name

DIFFICULTY_GUIDANCE: dict[Difficulty, str] = {
    Difficulty.easy: (
        "Ask straightforward recall questions about facts, definitions and terms "
        "stated literally in the document."
    ),
    Difficulty.normal: (
        "Ask questions that check understanding and application of the main ideas, "
        "not only literal recall."
    ),
    Difficulty.hard: (
        "Ask challenging questions that require synthesizing several concepts from "
        "different parts of the document. Distractors must be plausible and close "
        "to the correct answer."
    ),
}

# Gemini response_schema (문제 배열)
QUESTIONS_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "question": {"type": "STRING"},
            "options": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "minItems": OPTION_COUNT,
                "maxItems": OPTION_COUNT,
                "description": (
                    "Four possible answers to the question. Only one should be correct. "
                    "They should all be of equal lengths."
                ),
            },
            "answer": {
                "type": "STRING",
                "enum": list(ANSWER_LABELS),
                "description": "The correct answer, where A is the first option, B is the second, and so on.",
            },
        },
        "required": ["question", "options", "answer"],
        "propertyOrdering": ["question", "options", "answer"],
    },
}

TITLE_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "A max three word title for the quiz based on the file provided as context",
        },
    },
    "required": ["title"],
}


def build_system_instruction(question_count: int, language: str, difficulty: Difficulty | str) -> str:
    """퀴즈 생성 시스템 프롬프트"""
    language_name = resolve_language_name(language)
    guidance = DIFFICULTY_GUIDANCE[resolve_difficulty(difficulty)]
    return (
        "You are a teacher. Your job is to take a document and create a multiple choice test "
        f"with exactly {question_count} questions based on the content of the document.\n"
        f"Write every question and every option in {language_name}. Every word of the output "
        f"must be in {language_name}, regardless of the language of the document.\n"
        f"{guidance}\n"
        f"Each question has exactly {OPTION_COUNT} options labelled {', '.join(ANSWER_LABELS)} "
        "in order, and exactly one of them is correct. "
        "All options should be roughly equal in length. "
        "Focus on the most important concepts from the document."
    )


def build_user_prompt(question_count: int, language: str) -> str:
    language_name = resolve_language_name(language)
    return (
        f"Create a multiple choice test with {question_count} questions in {language_name} "
        "based on this document. Make sure to extract the key concepts."
    )


def build_title_prompt(file_name: str) -> str:
    return (
        "Generate a quiz title based on the following (PDF) file name. "
        "Try and extract as much info from the file name as possible. "
        "If the file name is just numbers or incoherent, just return quiz.\n\n"
        f"{file_name}"
    )
