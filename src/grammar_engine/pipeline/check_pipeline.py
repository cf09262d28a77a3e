"""Check orchestrator: detect, source, merge. The heart of the online path."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.config.constants import WARMUP_SAMPLES
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_codes import (
    base_language,
    is_auto,
    normalize_language,
)
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.exceptions import AllSourcesExhausted
from grammar_engine.generation.suggestion_generator import SuggestionGenerator
from grammar_engine.merging.merger import AnnotationMerger
from grammar_engine.models.domain import (
    EXTERNAL_SERVICE,
    GENERATIVE_SUGGESTION,
    RULE_ENGINE_PREFIX,
    Annotation,
    CheckResult,
    CheckState,
    Performance,
    SourceBreakdown,
)
from grammar_engine.observability.logger import get_logger
from grammar_engine.observability.metrics import (
    log_check_metrics,
    log_detection_metrics,
    log_latency,
)
from grammar_engine.observability.tracing import TraceContext
from grammar_engine.protocols.grammar_service import GrammarService
from grammar_engine.protocols.store import KeyValueStore
from grammar_engine.protocols.translator import MessageTranslator
from grammar_engine.protocols.validator import SuggestionValidator
from grammar_engine.rules.registry import RuleEngineRegistry

logger = get_logger("check_pipeline")

# Keys of the per-source performance breakdown
RULE_ENGINE = "rule-engine"
VALIDATION = "validation"
BREAKDOWN_SOURCES = (RULE_ENGINE, EXTERNAL_SERVICE, GENERATIVE_SUGGESTION, VALIDATION)


@dataclass
class SourceOutcome:
    """Result of one annotation source: its annotations or the error it raised."""

    source: str
    annotations: list[Annotation] = field(default_factory=list)
    error: Exception | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def breakdown(self, count: int) -> SourceBreakdown:
        return SourceBreakdown(
            elapsed_ms=round(self.elapsed_ms, 2),
            count=count,
            status="ok" if self.ok else "failed",
            error=type(self.error).__name__ if self.error is not None else None,
        )


def breakdown_key(annotation: Annotation) -> str:
    if annotation.source.startswith(RULE_ENGINE_PREFIX):
        return RULE_ENGINE
    return annotation.source


class CheckOrchestrator:
    def __init__(
        self,
        identifier: LanguageIdentifier,
        registry: RuleEngineRegistry,
        merger: AnnotationMerger,
        cache: KeyValueStore,
        settings: Settings,
        grammar_service: GrammarService | None = None,
        generator: SuggestionGenerator | None = None,
        validator: SuggestionValidator | None = None,
        translator: MessageTranslator | None = None,
    ) -> None:
        self._identifier = identifier
        self._registry = registry
        self._merger = merger
        self._cache = cache
        self._settings = settings
        self._service = grammar_service
        self._generator = generator
        self._validator = validator
        self._translator = translator

    @property
    def registry(self) -> RuleEngineRegistry:
        return self._registry

    async def check_text(self, text: str, language: str | None = "auto") -> CheckResult:
        trace = TraceContext()
        state = CheckState.IDLE

        state = self._transition(trace, state, CheckState.DETECTING)
        with trace.span("detecting"):
            detection = await self._identifier.identify(text)
        log_detection_metrics(
            trace.trace_id,
            detection.language,
            detection.confidence,
            detection.source.value,
            detection.elapsed_ms,
        )

        if is_auto(language):
            check_language = detection.language
        else:
            mismatch = self._identifier.detect_mismatch(detection, language)
            if mismatch is not None:
                logger.info(
                    "language_mismatch",
                    trace_id=trace.trace_id,
                    detected=mismatch.detected,
                    selected=mismatch.selected,
                    confidence=round(mismatch.confidence, 4),
                )
                self._transition(trace, state, CheckState.DONE)
                return CheckResult(
                    matches=[],
                    language=detection,
                    performance=Performance(elapsed_ms=round(trace.elapsed_ms, 2)),
                    language_mismatch=mismatch,
                )
            check_language = normalize_language(language) or language.strip()

        if not text.strip():
            self._transition(trace, state, CheckState.DONE)
            return CheckResult(
                matches=[],
                language=detection,
                performance=Performance(elapsed_ms=round(trace.elapsed_ms, 2)),
            )

        cache_key = SpanCache.make_key("check", check_language, text)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.info("check_cache_hit", trace_id=trace.trace_id, language=check_language)
            self._transition(trace, state, CheckState.DONE)
            cached.cached = True
            cached.performance = replace(
                cached.performance, elapsed_ms=round(trace.elapsed_ms, 2)
            )
            return cached

        state = self._transition(trace, state, CheckState.SOURCING)
        outcomes: dict[str, SourceOutcome] = {}
        primary = await self._generative_primary(text, check_language, trace, outcomes)
        secondary = await self._secondary(text, check_language, trace, outcomes)

        secondary_ok = any(
            outcomes[name].ok for name in (RULE_ENGINE, EXTERNAL_SERVICE) if name in outcomes
        )
        if not primary and not secondary_ok:
            self._transition(trace, state, CheckState.ERROR)
            failures = {name: o.error for name, o in outcomes.items() if o.error is not None}
            logger.warning(
                "all_sources_exhausted",
                trace_id=trace.trace_id,
                language=check_language,
                failures={name: type(e).__name__ for name, e in failures.items()},
            )
            raise AllSourcesExhausted(failures)

        state = self._transition(trace, state, CheckState.MERGING)
        with trace.span("merging"):
            matches = self._merger.merge(primary, secondary, text)

        if self._translator is not None and self._settings.translation_enabled:
            with trace.span("translation"):
                matches = await self._localize(matches, check_language)

        breakdown = self._breakdown(outcomes, matches)
        result = CheckResult(
            matches=matches,
            language=detection,
            performance=Performance(
                elapsed_ms=round(trace.elapsed_ms, 2), source_breakdown=breakdown
            ),
        )

        if all(o.ok for o in outcomes.values()):
            await self._cache.set(cache_key, result)
        else:
            logger.info(
                "check_not_cached",
                trace_id=trace.trace_id,
                failed=[name for name, o in outcomes.items() if not o.ok],
            )

        self._transition(trace, state, CheckState.DONE)
        for stage, duration in trace.durations().items():
            log_latency(trace.trace_id, stage, duration)
        log_check_metrics(
            trace.trace_id,
            check_language,
            {name: b.count for name, b in breakdown.items()},
            len(matches),
            trace.elapsed_ms,
        )
        return result

    async def warm_up(self, samples: dict[str, str] | None = None) -> dict[str, str]:
        """Run one check per sample language concurrently; report ok/error per language."""
        samples = samples if samples is not None else WARMUP_SAMPLES
        languages = list(samples)
        outcomes = await asyncio.gather(
            *(self.check_text(samples[lang], lang) for lang in languages),
            return_exceptions=True,
        )
        report: dict[str, str] = {}
        for lang, outcome in zip(languages, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("warmup_failed", language=lang, error=type(outcome).__name__)
                report[lang] = "error"
            else:
                report[lang] = "ok"
        logger.info(
            "warmup_completed",
            ok=sum(1 for status in report.values() if status == "ok"),
            total=len(report),
        )
        return report

    def suggestions_supported(self, language: str) -> bool:
        if self._generator is None or self._validator is None:
            return False
        supported = {base_language(code) for code in self._settings.suggestion_languages}
        return base_language(language) in supported

    async def _generative_primary(
        self,
        text: str,
        language: str,
        trace: TraceContext,
        outcomes: dict[str, SourceOutcome],
    ) -> list[Annotation]:
        """Validated generative suggestions, or [] when unavailable or nothing survived."""
        if not self.suggestions_supported(language):
            return []

        generated = await self._run(GENERATIVE_SUGGESTION, trace, self._generator.suggest, text)
        outcomes[GENERATIVE_SUGGESTION] = generated
        if not generated.ok or not generated.annotations:
            return []

        validated = await self._run(
            VALIDATION, trace, self._validator.validate, text, generated.annotations, language
        )
        outcomes[VALIDATION] = validated
        return validated.annotations if validated.ok else []

    async def _secondary(
        self,
        text: str,
        language: str,
        trace: TraceContext,
        outcomes: dict[str, SourceOutcome],
    ) -> list[Annotation]:
        annotations: list[Annotation] = []
        engine = self._registry.get_engine(language)
        if engine is not None:
            rule_outcome = await self._run(RULE_ENGINE, trace, engine.check, text)
            outcomes[RULE_ENGINE] = rule_outcome
            annotations.extend(rule_outcome.annotations)

        query_external = (
            engine is None
            or not annotations
            or self._settings.always_query_external
        )
        if query_external and self._service is not None:
            external = await self._run(
                EXTERNAL_SERVICE, trace, self._external_check, text, language
            )
            outcomes[EXTERNAL_SERVICE] = external
            annotations.extend(external.annotations)
        return annotations

    async def _external_check(self, text: str, language: str) -> list[Annotation]:
        result = await self._service.check(text, language)
        return result.matches

    async def _run(
        self, name: str, trace: TraceContext, operation: Callable, *args
    ) -> SourceOutcome:
        start = time.monotonic()
        with trace.span(name):
            try:
                annotations = operation(*args)
                if inspect.isawaitable(annotations):
                    annotations = await annotations
            except Exception as e:
                logger.warning(
                    "source_failed",
                    trace_id=trace.trace_id,
                    source=name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return SourceOutcome(
                    source=name, error=e, elapsed_ms=(time.monotonic() - start) * 1000
                )
        return SourceOutcome(
            source=name,
            annotations=list(annotations),
            elapsed_ms=(time.monotonic() - start) * 1000,
        )

    async def _localize(self, matches: list[Annotation], language: str) -> list[Annotation]:
        """Translate grammar-service messages; rule and generative messages are already English."""
        external = [a for a in matches if a.source == EXTERNAL_SERVICE]
        if not external:
            return matches
        texts = list(dict.fromkeys(t for a in external for t in (a.message, a.short_message)))
        translated = await self._translator.translate_batch(texts, language)
        lookup = dict(zip(texts, translated))
        return [
            replace(a, message=lookup[a.message], short_message=lookup[a.short_message])
            if a.source == EXTERNAL_SERVICE
            else a
            for a in matches
        ]

    @staticmethod
    def _breakdown(
        outcomes: dict[str, SourceOutcome], matches: list[Annotation]
    ) -> dict[str, SourceBreakdown]:
        contributed: dict[str, int] = {}
        for annotation in matches:
            key = breakdown_key(annotation)
            contributed[key] = contributed.get(key, 0) + 1

        breakdown: dict[str, SourceBreakdown] = {}
        for name in BREAKDOWN_SOURCES:
            outcome = outcomes.get(name)
            if outcome is None:
                breakdown[name] = SourceBreakdown()
            elif name == VALIDATION:
                breakdown[name] = outcome.breakdown(len(outcome.annotations))
            else:
                breakdown[name] = outcome.breakdown(contributed.get(name, 0))
        return breakdown

    @staticmethod
    def _transition(trace: TraceContext, current: CheckState, new: CheckState) -> CheckState:
        logger.debug(
            "check_state", trace_id=trace.trace_id, from_state=current.value, to_state=new.value
        )
        return new
