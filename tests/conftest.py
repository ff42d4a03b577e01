"""공통 테스트 픽스처"""
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app

from fakes import FakeQuizGenerator, questions_json, split_text


@pytest.fixture
def test_settings():
    """테스트 설정"""
    return Settings(
        environment="test",
        gemini_api_key=None,
        max_file_size_mb=1,
        generation_timeout_seconds=5,
    )


@pytest.fixture
def fake_generator():
    return FakeQuizGenerator(chunks=split_text(questions_json(12), 17))


@pytest.fixture
def app(test_settings, fake_generator):
    return create_app(test_settings, fake_generator)


@pytest.fixture
def client(app):
    """동기 테스트 클라이언트"""
    with TestClient(app) as test_client:
        yield test_client
