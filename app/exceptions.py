"""커스텀 예외 클래스 정의"""

GENERIC_GENERATION_ERROR = "Failed to generate quiz. Please try again or contact support."
PRE_STREAM_ERROR = "Failed to generate quiz. Please try again with a smaller PDF or contact support."


class BaseAppError(Exception):
    """애플리케이션 기본 예외 클래스"""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidQuizRequestError(BaseAppError):
    """요청 본문을 해석할 수 없을 때 (스트림 시작 전, 500)"""

    def __init__(self, message: str = PRE_STREAM_ERROR):
        super().__init__(message, status_code=500)


class UnsupportedFileTypeError(BaseAppError):
    """PDF가 아닌 파일 (스트림 시작 전, 500)"""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"{file_name} is not a PDF file", status_code=500)


class FileTooLargeError(BaseAppError):
    """업로드 용량 초과 (스트림 시작 전, 500)"""

    def __init__(self, file_name: str, max_size_mb: int):
        self.file_name = file_name
        self.max_size_mb = max_size_mb
        super().__init__(f"{file_name} is larger than {max_size_mb}MB", status_code=500)


class InvalidPdfError(BaseAppError):
    """PDF 내용이 비어 있거나 손상됨 (스트림 시작 전, 500)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class QuestionValidationError(BaseAppError, ValueError):
    """문제 스키마 검증 실패 (422)

    issues: (필드, 메시지) 목록
    """

    def __init__(self, issues: list[tuple[str, str]]):
        self.issues = issues
        message = "; ".join(msg for _, msg in issues) or "invalid question"
        super().__init__(message, status_code=422)

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.issues]


class GeminiServiceUnavailableError(BaseAppError):
    """Gemini API 서비스 일시적 과부하 에러 (503)"""

    def __init__(self, message: str = "The quiz model is temporarily overloaded. Please try again later."):
        super().__init__(message, status_code=503)


class GeminiAPIKeyError(BaseAppError):
    """Gemini API 키 관련 에러 (403)"""

    def __init__(self, message: str = "The quiz model rejected the configured API key."):
        super().__init__(message, status_code=403)


class QuizGenerationTimeoutError(BaseAppError):
    """생성 시간 초과 (504)"""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Quiz generation exceeded {timeout_seconds:g}s", status_code=504)
