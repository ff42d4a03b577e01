from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.services.quiz_policy import Difficulty, Language, resolve_difficulty, resolve_language


class UploadedFile(BaseModel):
    """업로드 파일 (base64 data URL)"""
    name: str = Field(..., description="원본 파일명")
    type: str = Field(..., description="선언된 MIME 타입")
    data: str = Field(..., description="base64 data URL 또는 base64 문자열")


class GenerationRequest(BaseModel):
    """퀴즈 생성 요청 스키마 (files[0]만 사용)"""
    files: list[UploadedFile] = Field(..., min_length=1)
    difficulty: Difficulty = Field(default=Difficulty.normal, description="easy | normal | hard")
    language: Language = Field(default=Language.english, description="출력 언어 코드")

    @field_validator("difficulty", mode="before")
    @classmethod
    def fallback_difficulty(cls, v: Any) -> Difficulty:
        return resolve_difficulty(v)

    @field_validator("language", mode="before")
    @classmethod
    def fallback_language(cls, v: Any) -> Language:
        return resolve_language(v)

    @property
    def primary_file(self) -> UploadedFile:
        return self.files[0]


class QuizTitleRequest(BaseModel):
    """퀴즈 제목 생성 요청 스키마"""
    file_name: str = Field(..., description="업로드한 PDF 파일명")


class QuizTitleResponse(BaseModel):
    """퀴즈 제목 응답 스키마"""
    title: str
