import json
import logging
from typing import AsyncIterator

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError

from app.core.config import Settings
from app.exceptions import GeminiAPIKeyError, GeminiServiceUnavailableError
from app.services import prompt_service
from app.services.quiz_policy import Difficulty, Language, generation_temperature

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


def _translate_gemini_error(e: Exception) -> Exception:
    """Gemini SDK 예외를 애플리케이션 예외로 변환 (해당 없으면 그대로)"""
    error_message = str(e)
    if isinstance(e, ClientError):
        lowered = error_message.lower()
        if "403" in error_message or "permission_denied" in lowered or "api key" in lowered:
            logger.error(f"Gemini API 키 문제 감지: error_type={type(e).__name__}")
            return GeminiAPIKeyError()
        logger.error(
            f"Gemini API ClientError: status_code={getattr(e, 'code', 'unknown')}, "
            f"error_message={error_message[:200]}"
        )
        return e
    if isinstance(e, ServerError):
        if "503" in error_message or "UNAVAILABLE" in error_message or "overloaded" in error_message.lower():
            logger.error(f"Gemini API 503 에러: {error_message[:200]}")
            return GeminiServiceUnavailableError()
        logger.error(f"Gemini API ServerError (503 아님): {error_message[:200]}")
        return e
    return e


class GeminiQuizGenerator:
    """Gemini 기반 퀴즈 생성기

    모델명과 API 키는 생성 시점에 주입된다. 요청 간 공유되는 상태는
    지연 생성되는 SDK 클라이언트뿐이다.
    """

    def __init__(self, api_key: str | None, model: str):
        self.api_key = api_key
        self.model = model
        self._client: genai.Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiQuizGenerator":
        return cls(api_key=settings.gemini_api_key, model=settings.gemini_model)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GeminiAPIKeyError("GEMINI_API_KEY is not configured.")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def stream_questions(
        self,
        pdf: bytes,
        *,
        question_count: int,
        difficulty: Difficulty,
        language: Language,
    ) -> AsyncIterator[str]:
        """문제 배열 JSON 텍스트를 토큰 스트림으로 반환"""
        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=prompt_service.build_system_instruction(question_count, language, difficulty),
            temperature=generation_temperature(difficulty),
            response_mime_type="application/json",
            response_schema=prompt_service.QUESTIONS_RESPONSE_SCHEMA,
        )
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt_service.build_user_prompt(question_count, language)),
                    types.Part.from_bytes(data=pdf, mime_type=PDF_MIME_TYPE),
                ],
            )
        ]

        logger.info(
            f"Gemini 스트리밍 요청: model={self.model}, questions={question_count}, "
            f"difficulty={difficulty.value}, language={language.value}"
        )
        stream = None
        try:
            stream = await client.aio.models.generate_content_stream(
                model=self.model,
                contents=contents,
                config=config,
            )
            async for chunk in stream:
                text = chunk.text
                if text:
                    yield text
        except (ClientError, ServerError) as e:
            translated = _translate_gemini_error(e)
            if translated is e:
                raise
            raise translated from e
        finally:
            if stream is not None and hasattr(stream, "aclose"):
                await stream.aclose()

    async def generate_title(self, file_name: str) -> str:
        """파일명으로 짧은 퀴즈 제목 생성"""
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt_service.build_title_prompt(file_name),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=prompt_service.TITLE_RESPONSE_SCHEMA,
                ),
            )
        except (ClientError, ServerError) as e:
            translated = _translate_gemini_error(e)
            if translated is e:
                raise
            raise translated from e

        if not response.text:
            raise ValueError("AI 응답이 비어있습니다")
        data = json.loads(response.text)
        if not isinstance(data, dict) or not isinstance(data.get("title"), str):
            raise ValueError(f"제목 응답 형식 오류: {response.text[:100]}")
        return data["title"].strip()
