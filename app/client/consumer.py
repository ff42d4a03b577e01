"""퀴즈 스트림 소비자

/api/generate-quiz 응답을 조금씩 받아 문제 목록을 점진적으로 구성한다.
스트림이 끝나고 배열 전체가 검증을 통과했을 때만 "ready" 상태가 된다.
"""
import codecs
import json
import logging
from enum import Enum
from typing import Any, Callable

import httpx

from app.client.files import LocalFile, prepare_files
from app.exceptions import QuestionValidationError
from app.schemas.generation import UploadedFile
from app.schemas.quiz import Question, validate_question, validate_questions
from app.services.quiz_service import DEFAULT_QUIZ_TITLE
from app.services.quiz_policy import (
    Difficulty,
    Language,
    expected_question_count,
    resolve_difficulty,
    resolve_language,
)
from app.utils.json_stream import JsonArrayStreamDecoder, JsonStreamError, find_error_envelope

logger = logging.getLogger(__name__)

CLIENT_GENERATION_ERROR = "Failed to generate quiz. Please try again."


class ConsumerStatus(str, Enum):
    idle = "idle"
    loading = "loading"
    ready = "ready"
    error = "error"


class QuizStreamConsumer:
    """스트리밍 응답을 문제 목록으로 디코딩하는 상태 기계

    partial_questions: 지금까지 완성되어 검증을 통과한 문제
    questions: 스트림 종료 후 전체 검증을 통과한 최종 문제 (불변)
    """

    def __init__(
        self,
        on_question: Callable[[Question], Any] | None = None,
        on_error: Callable[[str], Any] | None = None,
        on_finish: Callable[[tuple[Question, ...]], Any] | None = None,
    ):
        self.on_question = on_question
        self.on_error = on_error
        self.on_finish = on_finish
        self.reset()

    def reset(self) -> None:
        self.difficulty = Difficulty.normal
        self.partial_questions: list[Question] = []
        self.questions: tuple[Question, ...] = ()
        self.error: str | None = None
        self.is_loading = False
        self._chunks: list[str] = []
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._decoder: JsonArrayStreamDecoder[Question] = JsonArrayStreamDecoder(validate_question)
        self._stream_error: JsonStreamError | None = None

    def begin(self, difficulty: Difficulty | str | None = None) -> None:
        """새 요청 시작 (이전 결과는 통째로 버림)"""
        self.reset()
        self.difficulty = resolve_difficulty(difficulty)
        self.is_loading = True

    @property
    def status(self) -> ConsumerStatus:
        if self.is_loading:
            return ConsumerStatus.loading
        if self.error is not None:
            return ConsumerStatus.error
        if self.questions:
            return ConsumerStatus.ready
        return ConsumerStatus.idle

    @property
    def is_ready(self) -> bool:
        return self.status is ConsumerStatus.ready

    @property
    def expected_count(self) -> int:
        return expected_question_count(self.difficulty)

    @property
    def progress_percent(self) -> float:
        """완성된 문제 수 / 예상 문제 수 (첫 문제 도착 전에는 0)"""
        ready = len(self.partial_questions)
        if ready == 0:
            return 0.0
        return min(100.0, ready * 100.0 / self.expected_count)

    @property
    def progress_label(self) -> str:
        return f"{len(self.partial_questions)} of {self.expected_count} questions ready"

    def feed(self, chunk: bytes) -> list[Question]:
        """수신한 바이트 처리 후 새로 완성된 문제 반환"""
        if not self.is_loading:
            raise RuntimeError("begin() must be called before feeding stream data")
        return self._feed_text(self._utf8.decode(chunk))

    def _feed_text(self, text: str) -> list[Question]:
        if not text:
            return []
        self._chunks.append(text)
        if self._stream_error is not None:
            return []
        try:
            new_questions = self._decoder.feed(text)
        except JsonStreamError as e:
            # 오류 envelope일 수 있으므로 finish()에서 최종 판단
            logger.debug(f"스트림 디코딩 중단: {e}")
            self._stream_error = e
            return []

        for question in new_questions:
            self.partial_questions.append(question)
            if self.on_question:
                self.on_question(question)
        return new_questions

    def finish(self) -> tuple[Question, ...]:
        """스트림 종료 처리. 성공 시 최종 문제 목록 반환"""
        if not self.is_loading:
            raise RuntimeError("finish() called without an active stream")
        self._feed_text(self._utf8.decode(b"", final=True))

        envelope = find_error_envelope("".join(self._chunks))
        if envelope is not None:
            logger.warning(f"서버 오류 응답 수신: {envelope}")
            self.fail(envelope)
            return ()
        if self._stream_error is not None:
            logger.warning(f"잘못된 스트림 형식: {self._stream_error}")
            self.fail(CLIENT_GENERATION_ERROR)
            return ()

        try:
            questions = validate_questions(self._decoder.finish())
        except (JsonStreamError, QuestionValidationError) as e:
            logger.warning(f"최종 문제 배열 검증 실패: {e}")
            self.fail(CLIENT_GENERATION_ERROR)
            return ()

        self.questions = questions
        self.partial_questions = list(questions)
        self.is_loading = False
        logger.info(f"퀴즈 준비 완료: questions={len(questions)}")
        if self.on_finish:
            self.on_finish(questions)
        return questions

    def fail(self, message: str) -> None:
        """실패 처리 (부분 결과는 모두 버림)"""
        self.error = message
        self.partial_questions = []
        self.questions = ()
        self.is_loading = False
        if self.on_error:
            self.on_error(message)


def _error_message(body: bytes) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return CLIENT_GENERATION_ERROR
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return CLIENT_GENERATION_ERROR


class QuizClient:
    """퀴즈 생성 API 클라이언트 (httpx)"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 300.0,
        consumer: QuizStreamConsumer | None = None,
        max_file_size_mb: int = 20,
    ):
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_http = http_client is None
        self.consumer = consumer or QuizStreamConsumer()
        self.max_file_size_mb = max_file_size_mb
        self.files: list[UploadedFile] = []
        self.title: str | None = None
        self._last_payload: dict | None = None

    async def __aenter__(self) -> "QuizClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    @property
    def questions(self) -> tuple[Question, ...]:
        return self.consumer.questions

    def select_files(self, candidates: list[LocalFile]) -> list[str]:
        """업로드할 파일 선택. 거부된 파일의 메시지 목록 반환"""
        prepared = prepare_files(candidates, self.max_file_size_mb)
        self.files = prepared.files
        return prepared.rejections

    async def generate(
        self,
        difficulty: Difficulty | str | None = None,
        language: Language | str | None = None,
    ) -> tuple[Question, ...]:
        """선택한 PDF로 퀴즈 생성"""
        if not self.files:
            raise ValueError("No PDF file selected")
        payload = {
            "files": [f.model_dump() for f in self.files],
            "difficulty": resolve_difficulty(difficulty).value,
            "language": resolve_language(language).value,
        }
        self._last_payload = payload
        self.title = None

        questions = await self._run(payload)
        if questions:
            self.title = await self.generate_title(payload["files"][0]["name"])
        return questions

    async def regenerate(self) -> tuple[Question, ...]:
        """같은 요청으로 새 퀴즈 생성 (이전 문제는 통째로 교체)"""
        if self._last_payload is None:
            raise RuntimeError("Nothing to regenerate")
        return await self._run(self._last_payload)

    def clear(self) -> None:
        self.files = []
        self.title = None
        self._last_payload = None
        self.consumer.reset()

    async def generate_title(self, file_name: str) -> str:
        try:
            response = await self._http.post("/api/generate-quiz-title", json={"file_name": file_name})
            response.raise_for_status()
            return response.json()["title"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning(f"퀴즈 제목 요청 실패: {type(e).__name__}: {e}")
            return DEFAULT_QUIZ_TITLE

    async def _run(self, payload: dict) -> tuple[Question, ...]:
        consumer = self.consumer
        consumer.begin(payload.get("difficulty"))
        try:
            async with self._http.stream("POST", "/api/generate-quiz", json=payload) as response:
                if response.status_code != 200:
                    body = await response.aread()
                    logger.warning(f"퀴즈 생성 요청 거부: status_code={response.status_code}")
                    self._fail(_error_message(body))
                    return ()
                async for chunk in response.aiter_bytes():
                    consumer.feed(chunk)
        except httpx.HTTPError as e:
            logger.error(f"퀴즈 스트림 수신 실패: {type(e).__name__}: {e}")
            self._fail(CLIENT_GENERATION_ERROR)
            return ()

        questions = consumer.finish()
        if not questions:
            self.files = []
        return questions

    def _fail(self, message: str) -> None:
        self.consumer.fail(message)
        self.files = []
