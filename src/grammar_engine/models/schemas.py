"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grammar_engine.models.domain import Category, DetectionSource


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CheckRequest(BaseModel):
    text: str = Field(min_length=1)
    language: str = "auto"

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Text is required and must be a non-empty string.")
        return value


class DetectRequest(BaseModel):
    text: str = Field(min_length=1)


class AnnotationSchema(_FromDomain):
    offset: int = Field(ge=0)
    length: int = Field(ge=1)
    message: str
    short_message: str
    category: Category
    replacements: list[str]
    source: str
    rule_id: str = ""
    confidence: float | None = None


class DetectionSchema(_FromDomain):
    language: str
    detected_language: str
    confidence: float
    reliable: bool
    source: DetectionSource
    elapsed_ms: float


class LanguageMismatchSchema(_FromDomain):
    detected: str
    selected: str
    confidence: float


class SourceBreakdownSchema(_FromDomain):
    elapsed_ms: float
    count: int
    status: str
    error: str | None = None


class PerformanceSchema(_FromDomain):
    elapsed_ms: float
    source_breakdown: dict[str, SourceBreakdownSchema]


class CheckResponse(_FromDomain):
    matches: list[AnnotationSchema]
    language: DetectionSchema | None
    performance: PerformanceSchema
    language_mismatch: LanguageMismatchSchema | None = None
    cached: bool = False


class LanguageInfo(BaseModel):
    name: str
    code: str
    long_code: str = Field(alias="longCode", default="")

    model_config = ConfigDict(populate_by_name=True)


class LanguagesResponse(BaseModel):
    languages: list[LanguageInfo]
    rule_engines: list[str]


class CacheStatsResponse(BaseModel):
    size: int
    max_entries: int
    ttl_seconds: float
    hits: int
    misses: int
    evictions: int


class HealthResponse(BaseModel):
    status: str
    rule_engines: list[str]
    suggestions_enabled: bool
    translation_enabled: bool
    cache_size: int
