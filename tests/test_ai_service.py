"""AI Service (Gemini) 테스트"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai.errors import ClientError, ServerError

from app.exceptions import GeminiAPIKeyError, GeminiServiceUnavailableError
from app.services import prompt_service
from app.services.ai_service import GeminiQuizGenerator
from app.services.quiz_policy import Difficulty, Language

from fakes import PDF_BYTES, questions_json, split_text


def _response_stream(texts):
    async def _gen():
        for text in texts:
            yield SimpleNamespace(text=text)
    return _gen()


def _generator_with(models) -> GeminiQuizGenerator:
    """모킹된 SDK 클라이언트를 가진 생성기"""
    generator = GeminiQuizGenerator(api_key="test-key", model="gemini-test")
    generator._client = MagicMock()
    generator._client.aio.models = models
    return generator


async def _collect(generator: GeminiQuizGenerator, **kwargs) -> list[str]:
    params = {"question_count": 12, "difficulty": Difficulty.normal, "language": Language.english}
    params.update(kwargs)
    return [text async for text in generator.stream_questions(PDF_BYTES, **params)]


def test_system_instruction_contents():
    """문제 수, 언어, 난이도 지침 포함"""
    instruction = prompt_service.build_system_instruction(23, "german", Difficulty.hard)

    assert "exactly 23 questions" in instruction
    assert "German" in instruction
    assert "regardless of the language of the document" in instruction
    assert prompt_service.DIFFICULTY_GUIDANCE[Difficulty.hard] in instruction
    assert "A, B, C, D" in instruction


def test_system_instruction_unknown_language_falls_back():
    instruction = prompt_service.build_system_instruction(10, "klingon", "nightmare")

    assert "English" in instruction
    assert prompt_service.DIFFICULTY_GUIDANCE[Difficulty.normal] in instruction


def test_title_prompt_includes_file_name():
    prompt = prompt_service.build_title_prompt("photosynthesis_notes.pdf")

    assert prompt.endswith("photosynthesis_notes.pdf")
    assert "return quiz" in prompt


def test_response_schema_requires_four_options():
    item = prompt_service.QUESTIONS_RESPONSE_SCHEMA["items"]

    assert item["properties"]["options"]["minItems"] == 4
    assert item["properties"]["options"]["maxItems"] == 4
    assert item["properties"]["answer"]["enum"] == ["A", "B", "C", "D"]


@pytest.mark.asyncio
async def test_stream_questions_yields_text_chunks():
    """SDK 청크 텍스트를 그대로 전달, 빈 청크는 생략"""
    texts = split_text(questions_json(3), 40)
    models = MagicMock()
    models.generate_content_stream = AsyncMock(return_value=_response_stream([*texts, ""]))
    generator = _generator_with(models)

    received = await _collect(generator, difficulty=Difficulty.hard, language=Language.spanish)

    assert received == texts
    kwargs = models.generate_content_stream.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    config = kwargs["config"]
    assert config.temperature == 0.7
    assert config.response_mime_type == "application/json"
    assert "exactly 12 questions" in config.system_instruction
    assert "Spanish" in config.system_instruction
    parts = kwargs["contents"][0].parts
    assert parts[1].inline_data.data == PDF_BYTES
    assert parts[1].inline_data.mime_type == "application/pdf"


@pytest.mark.asyncio
async def test_stream_questions_without_api_key():
    generator = GeminiQuizGenerator(api_key=None, model="gemini-test")

    with pytest.raises(GeminiAPIKeyError):
        await _collect(generator)


@pytest.mark.asyncio
async def test_stream_questions_permission_denied():
    """403 -> GeminiAPIKeyError"""
    models = MagicMock()
    models.generate_content_stream = AsyncMock(
        side_effect=ClientError(
            403,
            {"error": {"code": 403, "message": "API key not valid.", "status": "PERMISSION_DENIED"}},
        )
    )
    generator = _generator_with(models)

    with pytest.raises(GeminiAPIKeyError):
        await _collect(generator)


@pytest.mark.asyncio
async def test_stream_questions_overloaded():
    """503 -> GeminiServiceUnavailableError"""
    models = MagicMock()
    models.generate_content_stream = AsyncMock(
        side_effect=ServerError(
            503,
            {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}},
        )
    )
    generator = _generator_with(models)

    with pytest.raises(GeminiServiceUnavailableError):
        await _collect(generator)


@pytest.mark.asyncio
async def test_stream_questions_other_client_error_propagates():
    models = MagicMock()
    models.generate_content_stream = AsyncMock(
        side_effect=ClientError(
            400,
            {"error": {"code": 400, "message": "Request payload size exceeds the limit.", "status": "INVALID_ARGUMENT"}},
        )
    )
    generator = _generator_with(models)

    with pytest.raises(ClientError):
        await _collect(generator)


@pytest.mark.asyncio
async def test_generate_title():
    models = MagicMock()
    models.generate_content = AsyncMock(return_value=SimpleNamespace(text='{"title": " Cell Biology "}'))
    generator = _generator_with(models)

    title = await generator.generate_title("cell_biology.pdf")

    assert title == "Cell Biology"
    assert "cell_biology.pdf" in models.generate_content.call_args.kwargs["contents"]


@pytest.mark.asyncio
async def test_generate_title_empty_response():
    models = MagicMock()
    models.generate_content = AsyncMock(return_value=SimpleNamespace(text=""))
    generator = _generator_with(models)

    with pytest.raises(ValueError):
        await generator.generate_title("cell_biology.pdf")


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ['["Cell Biology"]', '{"title": 3}', '"Cell Biology"'])
async def test_generate_title_unexpected_shape(text):
    """객체가 아닌 응답은 ValueError"""
    models = MagicMock()
    models.generate_content = AsyncMock(return_value=SimpleNamespace(text=text))
    generator = _generator_with(models)

    with pytest.raises(ValueError):
        await generator.generate_title("cell_biology.pdf")
