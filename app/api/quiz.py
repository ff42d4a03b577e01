import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from app.core.config import Settings
from app.exceptions import InvalidQuizRequestError
from app.schemas.generation import GenerationRequest, QuizTitleRequest, QuizTitleResponse
from app.services import quiz_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quiz"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_quiz_generator(request: Request) -> quiz_service.QuizGenerator:
    return request.app.state.quiz_generator


@router.post("/generate-quiz")
async def generate_quiz(
    request: Request,
    generator: quiz_service.QuizGenerator = Depends(get_quiz_generator),
    settings: Settings = Depends(get_settings),
):
    """PDF로 퀴즈 생성 (문제 배열 JSON 텍스트 스트리밍)"""
    try:
        body = await request.json()
        generation_request = GenerationRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.warning(f"퀴즈 생성 요청 해석 실패: error_type={type(e).__name__}, path={request.url.path}")
        raise InvalidQuizRequestError() from e

    stream = quiz_service.start_quiz_generation(generator, generation_request, settings)
    return StreamingResponse(stream, media_type="text/plain", headers=STREAM_HEADERS)


@router.post("/generate-quiz-title", response_model=QuizTitleResponse)
async def generate_quiz_title(
    request: QuizTitleRequest,
    generator: quiz_service.QuizGenerator = Depends(get_quiz_generator),
):
    """파일명으로 퀴즈 제목 생성"""
    title = await quiz_service.generate_quiz_title(generator, request.file_name)
    return QuizTitleResponse(title=title)
