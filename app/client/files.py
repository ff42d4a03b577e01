import logging
import mimetypes
from pathlib import Path

from pydantic import BaseModel, Field

from app.exceptions import FileTooLargeError, UnsupportedFileTypeError
from app.schemas.generation import UploadedFile
from app.services.file_service import DEFAULT_MAX_FILE_SIZE_MB, check_pdf_candidate, encode_data_url

logger = logging.getLogger(__name__)


class LocalFile(BaseModel):
    """업로드 후보 파일"""
    name: str
    type: str
    content: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> "LocalFile":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, type=mime_type or "application/octet-stream", content=path.read_bytes())

    @property
    def size(self) -> int:
        return len(self.content)


class PreparedUpload(BaseModel):
    """검사를 통과한 파일과 거부 메시지"""
    files: list[UploadedFile] = Field(default_factory=list)
    rejections: list[str] = Field(default_factory=list)


def prepare_files(candidates: list[LocalFile], max_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB) -> PreparedUpload:
    """업로드 전 파일 검사 및 data URL 인코딩

    거부는 파일 단위이며, 다른 정상 파일의 업로드를 막지 않는다.
    """
    prepared = PreparedUpload()
    for candidate in candidates:
        try:
            check_pdf_candidate(candidate.name, candidate.type, candidate.size, max_size_mb)
        except (UnsupportedFileTypeError, FileTooLargeError) as e:
            logger.warning(f"업로드 거부: {e.message}")
            prepared.rejections.append(e.message)
            continue
        prepared.files.append(
            UploadedFile(
                name=candidate.name,
                type=candidate.type,
                data=encode_data_url(candidate.content, candidate.type),
            )
        )
    return prepared
