"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class Category(str, Enum):
    GRAMMAR = "Grammar"
    SPELLING = "Spelling"
    STYLE = "Style"
    PUNCTUATION = "Punctuation"
    FORMATTING = "Formatting"


class DetectionSource(str, Enum):
    UNICODE_PATTERN = "unicode-pattern"
    STATISTICAL = "statistical"
    EXTERNAL_SERVICE = "external-service"
    FALLBACK = "fallback"


class CheckState(str, Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    SOURCING = "sourcing"
    MERGING = "merging"
    DONE = "done"
    ERROR = "error"


# Annotation provenance
EXTERNAL_SERVICE = "external-service"
GENERATIVE_SUGGESTION = "generative-suggestion"
RULE_ENGINE_PREFIX = "rule-engine:"


def rule_engine_source(language: str) -> str:
    return f"{RULE_ENGINE_PREFIX}{language}"


@dataclass
class Annotation:
    offset: int
    length: int
    message: str
    category: Category
    source: str
    replacements: list[str] = field(default_factory=list)
    short_message: str = ""
    rule_id: str = ""
    confidence: float | None = None

    def __post_init__(self) -> None:
        if not self.short_message:
            self.short_message = self.message

    @property
    def key(self) -> tuple[int, int]:
        return (self.offset, self.length)

    @property
    def end(self) -> int:
        return self.offset + self.length

    def span_text(self, text: str) -> str:
        return text[self.offset : self.end]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["category"] = self.category.value
        return data


def unique_spans(annotations: list[Annotation]) -> list[Annotation]:
    """Keep the first annotation seen for each (offset, length) span."""
    seen: set[tuple[int, int]] = set()
    unique: list[Annotation] = []
    for annotation in annotations:
        if annotation.key in seen:
            continue
        seen.add(annotation.key)
        unique.append(annotation)
    return unique


@dataclass(frozen=True)
class LanguageDetectionResult:
    language: str  # supported checking code, e.g. "ja-JP"
    detected_language: str  # raw code reported by the winning strategy, e.g. "ja"
    confidence: float
    reliable: bool
    source: DetectionSource
    elapsed_ms: float = 0.0
    short_text: bool = False  # too few words for a statistical result to gate a mismatch


@dataclass(frozen=True)
class LanguageMismatch:
    detected: str
    selected: str
    confidence: float


@dataclass
class SourceBreakdown:
    elapsed_ms: float = 0.0
    count: int = 0
    status: str = "skipped"  # "ok", "failed", "skipped"
    error: str | None = None


@dataclass
class Performance:
    elapsed_ms: float = 0.0
    source_breakdown: dict[str, SourceBreakdown] = field(default_factory=dict)


@dataclass
class CheckResult:
    matches: list[Annotation]
    language: LanguageDetectionResult | None
    performance: Performance = field(default_factory=Performance)
    language_mismatch: LanguageMismatch | None = None
    cached: bool = False


@dataclass
class ExternalCheckResult:
    matches: list[Annotation]
    language: str | None  # code the service reports it checked with
    detected_language: str | None = None
    detected_confidence: float = 0.0
    performance_ms: float = 0.0
