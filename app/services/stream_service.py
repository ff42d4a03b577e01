"""모델 토큰 스트림 중계

모델이 내보내는 텍스트 조각을 받는 즉시 UTF-8 바이트로 그대로 전달한다.
전달하는 동안 같은 내용을 디코더에 넣어 원소 단위로 검증하고, 스트림이
끝나면 배열 전체를 다시 엄격하게 검증한다.

어떤 이유로든 실패하면 {"error": "..."} 한 개를 마지막 내용으로 쓰고 끝낸다.
모든 종료 경로에서 모델 스트림을 닫는다.
"""
import asyncio
import json
import logging
from typing import AsyncIterator

from app.exceptions import GENERIC_GENERATION_ERROR, QuizGenerationTimeoutError
from app.schemas.quiz import Question, validate_question, validate_questions
from app.utils.json_stream import JsonArrayStreamDecoder

logger = logging.getLogger(__name__)


def error_envelope(message: str = GENERIC_GENERATION_ERROR) -> bytes:
    return json.dumps({"error": message}).encode("utf-8")


async def _close(iterator: AsyncIterator[str]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.warning(f"모델 스트림 종료 중 예외: {type(e).__name__}: {e}")


async def relay_quiz_stream(
    chunks: AsyncIterator[str],
    *,
    timeout_seconds: float,
    expected_count: int | None = None,
) -> AsyncIterator[bytes]:
    """모델 텍스트 스트림을 바이트 스트림으로 중계 (전체 시간 제한 포함)"""
    decoder: JsonArrayStreamDecoder[Question] = JsonArrayStreamDecoder(validate_question)
    iterator = chunks.__aiter__()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_seconds
    relayed_bytes = 0
    failed = False

    try:
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise QuizGenerationTimeoutError(timeout_seconds)
            try:
                text = await asyncio.wait_for(iterator.__anext__(), timeout=remaining)
            except StopAsyncIteration:
                break
            except asyncio.TimeoutError as e:
                raise QuizGenerationTimeoutError(timeout_seconds) from e

            for question in decoder.feed(text):
                logger.debug(
                    f"문제 수신 {len(decoder.accepted)}/{expected_count or '?'}: {question.question[:60]}"
                )
            data = text.encode("utf-8")
            relayed_bytes += len(data)
            yield data

        questions = validate_questions(decoder.finish())
        logger.info(f"퀴즈 스트림 완료: questions={len(questions)}, bytes={relayed_bytes}")
    except Exception as e:
        failed = True
        logger.error(
            f"퀴즈 스트림 실패: error_type={type(e).__name__}, error_message={str(e)[:300]}, "
            f"accepted={len(decoder.accepted)}, rejected={len(decoder.rejected)}, bytes={relayed_bytes}",
            exc_info=not isinstance(e, (QuizGenerationTimeoutError, ValueError)),
        )
        yield error_envelope()
    finally:
        await _close(iterator)
        logger.debug(f"퀴즈 스트림 종료 (failed={failed})")
