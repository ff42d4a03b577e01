from app.schemas.generation import (
    GenerationRequest,
    QuizTitleRequest,
    QuizTitleResponse,
    UploadedFile,
)
from app.schemas.quiz import (
    ANSWER_LABELS,
    Question,
    validate_question,
    validate_questions,
)

__all__ = [
    "ANSWER_LABELS",
    "GenerationRequest",
    "Question",
    "QuizTitleRequest",
    "QuizTitleResponse",
    "UploadedFile",
    "validate_question",
    "validate_questions",
]
