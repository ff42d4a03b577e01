from typing import Annotated, Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from app.exceptions import QuestionValidationError

ANSWER_LABELS = ("A", "B", "C", "D")
OPTION_COUNT = len(ANSWER_LABELS)


class Question(BaseModel):
    """퀴즈 문제 스키마 (선택지 4개, 정답 A-D)"""
    question: str = Field(..., description="The question prompt.")
    options: tuple[str, ...] = Field(
        ...,
        description=(
            "Four possible answers to the question. Only one should be correct. "
            "They should all be of equal lengths."
        ),
    )
    answer: str = Field(
        ...,
        description="The correct answer, where A is the first option, B is the second, and so on.",
    )

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("question")
    @classmethod
    def validate_question_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question must not be empty")
        return v

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != OPTION_COUNT:
            raise ValueError(f"options must have length {OPTION_COUNT}")
        return v

    @field_validator("answer")
    @classmethod
    def validate_answer(cls, v: str) -> str:
        if v not in ANSWER_LABELS:
            raise ValueError(f"answer must be one of {', '.join(ANSWER_LABELS)}")
        return v

    @property
    def answer_index(self) -> int:
        """정답 인덱스 (A=0 ... D=3)"""
        return ANSWER_LABELS.index(self.answer)

    @property
    def correct_option(self) -> str:
        return self.options[self.answer_index]


QuestionList = Annotated[list[Question], Field(min_length=1)]

_question_set_adapter = TypeAdapter(QuestionList)


def _issues_from(exc: ValidationError, root: str) -> list[tuple[str, str]]:
    """pydantic 오류를 (필드, 메시지) 목록으로 변환"""
    issues = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or root
        if error["type"] == "value_error":
            # field_validator에서 올린 메시지는 이미 필드명을 포함
            message = str(error["ctx"]["error"])
            if error["loc"] and isinstance(error["loc"][0], int):
                message = f"{error['loc'][0]}: {message}"
        else:
            message = f"{field}: {error['msg']}"
        issues.append((field, message))
    return issues


def validate_question(value: Any) -> Question:
    """임의의 JSON 값을 Question으로 검증/정규화"""
    try:
        return Question.model_validate(value)
    except ValidationError as e:
        raise QuestionValidationError(_issues_from(e, "question")) from e


def validate_questions(value: Any) -> tuple[Question, ...]:
    """문제 배열 전체를 엄격하게 검증 (완료 후 불변 tuple 반환)"""
    try:
        return tuple(_question_set_adapter.validate_python(value))
    except ValidationError as e:
        raise QuestionValidationError(_issues_from(e, "questions")) from e
