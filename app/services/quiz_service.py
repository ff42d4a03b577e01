import logging
import random
from typing import AsyncIterator, Protocol

import httpx
from google.genai.errors import APIError

from app.core.config import Settings
from app.exceptions import BaseAppError
from app.schemas.generation import GenerationRequest
from app.services import file_service, quiz_policy, stream_service
from app.services.quiz_policy import Difficulty, Language

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_TITLE = "Quiz"


class QuizGenerator(Protocol):
    """퀴즈 생성기 인터페이스 (GeminiQuizGenerator, 테스트용 가짜 생성기)"""

    def stream_questions(
        self,
        pdf: bytes,
        *,
        question_count: int,
        difficulty: Difficulty,
        language: Language,
    ) -> AsyncIterator[str]: ...

    async def generate_title(self, file_name: str) -> str: ...


def start_quiz_generation(
    generator: QuizGenerator,
    request: GenerationRequest,
    settings: Settings,
    rng: random.Random | None = None,
) -> AsyncIterator[bytes]:
    """업로드 검증 후 중계 스트림 생성

    여기서 발생하는 예외는 스트림 시작 전 실패이므로 호출자에게 그대로 전파된다.
    """
    pdf = file_service.read_pdf_upload(request.primary_file, settings.max_file_size_mb)
    question_count = quiz_policy.pick_question_count(request.difficulty, rng)

    logger.info(
        f"퀴즈 생성 시작: file={request.primary_file.name}, size={len(pdf)} bytes, "
        f"difficulty={request.difficulty.value}, language={request.language.value}, "
        f"target={question_count}"
    )
    if len(request.files) > 1:
        logger.debug(f"첫 번째 파일만 사용: 무시된 파일 {len(request.files) - 1}개")

    chunks = generator.stream_questions(
        pdf,
        question_count=question_count,
        difficulty=request.difficulty,
        language=request.language,
    )
    return stream_service.relay_quiz_stream(
        chunks,
        timeout_seconds=settings.generation_timeout_seconds,
        expected_count=question_count,
    )


async def generate_quiz_title(generator: QuizGenerator, file_name: str) -> str:
    """파일명 기반 퀴즈 제목 (실패 시 기본 제목)"""
    try:
        title = await generator.generate_title(file_name)
    except (BaseAppError, APIError, httpx.HTTPError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"퀴즈 제목 생성 실패, 기본 제목 사용: error_type={type(e).__name__}, error_message={str(e)[:200]}")
        return DEFAULT_QUIZ_TITLE

    title = title.strip()
    if not title or title.lower() == DEFAULT_QUIZ_TITLE.lower():
        return DEFAULT_QUIZ_TITLE
    return title
