"""Shared test fixtures."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.exceptions import ExternalServiceError, GenerationError
from grammar_engine.models.domain import (
    EXTERNAL_SERVICE,
    Annotation,
    Category,
    DetectionSource,
    ExternalCheckResult,
    LanguageDetectionResult,
)

LT_URL = "http://languagetool.test/v2"


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGrammarService:
    """Grammar service double: canned matches per text, call log, optional failure."""

    def __init__(
        self,
        matches: dict[str, list[Annotation]] | None = None,
        error: Exception | None = None,
        detected: tuple[str, float] = ("en-US", 0.9),
    ) -> None:
        self.matches = matches or {}
        self.error = error
        self.detected = detected
        self.calls: list[tuple[str, str]] = []

    async def check(self, text: str, language: str = "auto") -> ExternalCheckResult:
        self.calls.append((text, language))
        if self.error is not None:
            raise self.error
        return ExternalCheckResult(matches=list(self.matches.get(text, [])), language=language)

    async def detect_language(self, text: str) -> tuple[str, float]:
        if self.error is not None:
            raise self.error
        return self.detected

    async def languages(self) -> list[dict]:
        if self.error is not None:
            raise self.error
        return [{"name": "English (US)", "code": "en", "longCode": "en-US"}]


class FakeLLM:
    """LLM double returning a canned completion or structured response."""

    def __init__(
        self,
        response: str = "",
        structured: BaseModel | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response = response
        self.structured = structured
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt, system=None, temperature=0.1, max_tokens=500) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response

    async def generate_structured(self, prompt, response_schema, system=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.structured


class FixedIdentifier(LanguageIdentifier):
    """Real mismatch gating around a canned detection."""

    def __init__(self, settings, result: LanguageDetectionResult) -> None:
        super().__init__(settings)
        self.result = result

    async def identify(self, text: str) -> LanguageDetectionResult:
        return self.result


def service_annotation(offset: int, length: int, replacements=None, message="Possible error"):
    return Annotation(
        offset=offset,
        length=length,
        message=message,
        category=Category.GRAMMAR,
        source=EXTERNAL_SERVICE,
        replacements=list(replacements or []),
        rule_id="TEST_RULE",
    )


def detection(language: str, detected: str, confidence: float = 0.95) -> LanguageDetectionResult:
    return LanguageDetectionResult(
        language=language,
        detected_language=detected,
        confidence=confidence,
        reliable=confidence >= 0.8,
        source=DetectionSource.UNICODE_PATTERN,
    )


@pytest.fixture
def settings():
    """Test settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        languagetool_url=LT_URL,
        google_api_key="",
        translate_url="",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SpanCache(ttl_seconds=300, max_entries=100, clock=clock)


@pytest.fixture
def unreachable_service():
    return FakeGrammarService(error=ExternalServiceError("unreachable", status_code=503))


@pytest.fixture
def failing_llm():
    return FakeLLM(error=GenerationError("quota exceeded"))
