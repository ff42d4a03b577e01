import base64
import binascii
import logging

from app.exceptions import (
    FileTooLargeError,
    InvalidPdfError,
    InvalidQuizRequestError,
    UnsupportedFileTypeError,
)
from app.schemas.generation import UploadedFile

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF"
DEFAULT_MAX_FILE_SIZE_MB = 20


def check_pdf_candidate(name: str, mime_type: str, size: int, max_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB) -> None:
    """업로드 전 파일 검사 (MIME 타입, 용량)"""
    if mime_type != PDF_MIME_TYPE:
        raise UnsupportedFileTypeError(name)
    if size > max_size_mb * 1024 * 1024:
        raise FileTooLargeError(name, max_size_mb)


def encode_data_url(content: bytes, mime_type: str = PDF_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_url(data: str) -> bytes:
    """base64 data URL (또는 순수 base64 문자열)을 바이트로 디코딩"""
    payload = data
    if data.startswith("data:"):
        header, sep, payload = data.partition(",")
        if not sep or ";base64" not in header:
            raise InvalidQuizRequestError()
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"base64 디코딩 실패: {e}")
        raise InvalidQuizRequestError() from e


def read_pdf_upload(file: UploadedFile, max_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB) -> bytes:
    """업로드 파일 검증 후 PDF 바이트 반환 (서버 측 재검사)

    1. 선언된 MIME 타입은 application/pdf
    2. base64 디코딩
    3. 용량 제한
    4. 비어 있지 않고 %PDF로 시작
    """
    if file.type != PDF_MIME_TYPE:
        raise UnsupportedFileTypeError(file.name)

    content = decode_data_url(file.data)

    if len(content) > max_size_mb * 1024 * 1024:
        raise FileTooLargeError(file.name, max_size_mb)
    if not content:
        raise InvalidPdfError(f"{file.name} is empty")
    if not content.startswith(PDF_MAGIC):
        raise InvalidPdfError(f"{file.name} does not appear to be a valid PDF")

    logger.debug(f"PDF 업로드 확인: name={file.name}, size={len(content)} bytes")
    return content
