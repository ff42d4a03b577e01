import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import quiz
from app.core.config import Settings, settings as default_settings
from app.core.logging import setup_logging
from app.exceptions import BaseAppError
from app.services.ai_service import GeminiQuizGenerator
from app.services.quiz_service import QuizGenerator

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


def create_app(
    settings: Settings | None = None,
    quiz_generator: QuizGenerator | None = None,
) -> FastAPI:
    """애플리케이션 생성 (설정과 생성기는 명시적으로 주입)"""
    settings = settings or default_settings
    setup_logging(settings)

    app = FastAPI(
        title="PDF2Quiz Backend API",
        description="PDF 업로드로 객관식 퀴즈를 스트리밍 생성하는 백엔드 API",
        version=APP_VERSION,
    )
    app.state.settings = settings
    app.state.quiz_generator = quiz_generator or GeminiQuizGenerator.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(quiz.router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """요청 검증 오류 핸들러"""
        logger.warning(f"요청 검증 오류: {exc.errors()}, path={request.url.path}")
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request body.", "detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(BaseAppError)
    async def app_exception_handler(request: Request, exc: BaseAppError):
        """애플리케이션 커스텀 예외 핸들러"""
        logger.warning(
            f"Application error: {exc.__class__.__name__} - {exc.message}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            }
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """전역 예외 핸들러 - 모든 미처리 예외를 로깅"""
        logger.error(
            f"Unhandled exception: {exc.__class__.__name__}",
            exc_info=True,
            extra={
                "path": request.url.path,
                "method": request.method,
            }
        )
        # 프로덕션 환경에서는 상세 에러 메시지 숨김
        if settings.environment == "production":
            content = {"error": "Internal Server Error"}
        else:
            content = {"error": str(exc), "type": exc.__class__.__name__}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return {"message": "PDF2Quiz Backend API", "version": APP_VERSION}

    @app.get("/health")
    async def health_check():
        """헬스 체크 엔드포인트"""
        return {"status": "healthy", "model": settings.gemini_model}

    return app


app = create_app()
