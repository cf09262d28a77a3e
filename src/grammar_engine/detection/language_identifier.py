"""Layered language identification: script heuristics, langdetect, grammar service."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from langdetect import DetectorFactory, detect_langs

from grammar_engine.config.constants import RELIABLE_CONFIDENCE, UNICODE_PATTERN_CONFIDENCE
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_codes import (
    base_language,
    is_auto,
    normalize_language,
    same_language,
)
from grammar_engine.exceptions import DetectionFailure, ExternalServiceError
from grammar_engine.models.domain import (
    DetectionSource,
    LanguageDetectionResult,
    LanguageMismatch,
)
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.grammar_service import GrammarService

logger = get_logger("language_identifier")

# langdetect is randomized unless seeded
DetectorFactory.seed = 0

_KANA = re.compile(r"[\u3040-\u309F\u30A0-\u30FF]")
_HAN = re.compile(r"[\u4E00-\u9FFF\u3400-\u4DBF]")
_HANGUL = re.compile(r"[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]")
_THAI = re.compile(r"[\u0E00-\u0E7F]")
_ARABIC = re.compile(r"[\u0600-\u06FF\u0750-\u077F]")
_CYRILLIC = re.compile(r"[\u0400-\u04FF]")
_CYRILLIC_RUN = re.compile(r"[\u0400-\u04FF]{3,}")

# Minimum share of letters a script needs before it decides the language
_SCRIPT_SHARE = 0.3

# Latin-script markers specific enough to name a language, checked in order
_LATIN_MARKERS: list[tuple[str, float, re.Pattern[str]]] = [
    ("es", 0.9, re.compile(r"[\u00BF\u00A1]")),
    ("pt", 0.85, re.compile(r"\b(?:você|não|também|português)\b", re.IGNORECASE)),
    (
        "it",
        0.92,
        re.compile(
            r"\b(?:più|meno|però|anche|già|così|perché|sono|fatto|molto|troppo)\b",
            re.IGNORECASE,
        ),
    ),
]

_WORD = re.compile(r"\w+")

RawDetection = tuple[str, float]


class LanguageIdentifier:
    def __init__(self, settings: Settings, grammar_service: GrammarService | None = None) -> None:
        self._settings = settings
        self._service = grammar_service

    async def identify(self, text: str) -> LanguageDetectionResult:
        start = time.monotonic()
        strategies: list[tuple[DetectionSource, Callable[[str], Awaitable[RawDetection]]]] = [
            (DetectionSource.UNICODE_PATTERN, self._unicode_pattern),
            (DetectionSource.STATISTICAL, self._statistical),
            (DetectionSource.EXTERNAL_SERVICE, self._external),
        ]
        failures: dict[str, str] = {}
        for source, strategy in strategies:
            try:
                code, confidence = await strategy(text)
            except DetectionFailure as e:
                failures[source.value] = str(e)
                continue
            except Exception as e:
                failures[source.value] = f"{type(e).__name__}: {e}"
                continue
            short_text = (
                source != DetectionSource.UNICODE_PATTERN
                and len(_WORD.findall(text)) < self._settings.statistical_min_words
            )
            return self._resolve(code, confidence, source, start, short_text)

        logger.info("language_detection_fallback", failures=failures)
        return self._fallback(start)

    def detect_mismatch(
        self, detection: LanguageDetectionResult, selected: str | None
    ) -> LanguageMismatch | None:
        """Report when confidently detected text disagrees with the caller's choice."""
        if is_auto(selected):
            return None
        if detection.short_text:
            return None
        if detection.confidence <= self._settings.mismatch_confidence_threshold:
            return None
        if same_language(detection.detected_language, selected):
            return None
        return LanguageMismatch(
            detected=detection.detected_language,
            selected=selected,
            confidence=detection.confidence,
        )

    @staticmethod
    def match_unicode_script(text: str) -> str | None:
        letters = sum(1 for ch in text if ch.isalpha())
        if letters == 0:
            return None

        kana = len(_KANA.findall(text))
        han = len(_HAN.findall(text))
        if kana and (kana + han) / letters >= _SCRIPT_SHARE:
            return "ja"

        for code, pattern in (
            ("ko", _HANGUL),
            ("th", _THAI),
            ("ar", _ARABIC),
            ("ru", _CYRILLIC),
        ):
            if len(pattern.findall(text)) / letters < _SCRIPT_SHARE:
                continue
            # Cyrillic also needs a run of three letters
            if code == "ru" and not _CYRILLIC_RUN.search(text):
                continue
            return code

        if han / letters >= _SCRIPT_SHARE:
            return "zh"
        return None

    @staticmethod
    def match_latin_markers(text: str) -> RawDetection | None:
        for code, confidence, pattern in _LATIN_MARKERS:
            if pattern.search(text):
                return code, confidence
        return None

    async def _unicode_pattern(self, text: str) -> RawDetection:
        code = self.match_unicode_script(text)
        if code is not None:
            return code, UNICODE_PATTERN_CONFIDENCE
        marker = self.match_latin_markers(text)
        if marker is None:
            raise DetectionFailure("no distinctive script or marker")
        return marker

    async def _statistical(self, text: str) -> RawDetection:
        try:
            candidates = detect_langs(text)
        except Exception as e:
            raise DetectionFailure(f"classifier failed: {e}") from e
        if not candidates:
            raise DetectionFailure("classifier returned no candidates")
        top = candidates[0]
        if top.prob < self._settings.statistical_min_confidence:
            raise DetectionFailure(f"classifier unsure ({top.lang}={top.prob:.2f})")
        return top.lang, float(top.prob)

    async def _external(self, text: str) -> RawDetection:
        if self._service is None:
            raise DetectionFailure("no grammar service configured")
        try:
            return await self._service.detect_language(text)
        except ExternalServiceError as e:
            raise DetectionFailure(f"grammar service detection failed: {e}") from e

    def _resolve(
        self,
        code: str,
        confidence: float,
        source: DetectionSource,
        start: float,
        short_text: bool = False,
    ) -> LanguageDetectionResult:
        elapsed_ms = (time.monotonic() - start) * 1000
        checking = normalize_language(code)
        confidence = max(0.0, min(1.0, confidence))
        if checking is None:
            logger.info("language_unsupported", detected=code, source=source.value)
            return LanguageDetectionResult(
                language=self._settings.fallback_language,
                detected_language=base_language(code),
                confidence=confidence,
                reliable=False,
                source=source,
                elapsed_ms=elapsed_ms,
                short_text=short_text,
            )
        return LanguageDetectionResult(
            language=checking,
            detected_language=code.lower(),
            confidence=confidence,
            reliable=confidence >= RELIABLE_CONFIDENCE and not short_text,
            source=source,
            elapsed_ms=elapsed_ms,
            short_text=short_text,
        )

    def _fallback(self, start: float) -> LanguageDetectionResult:
        fallback = self._settings.fallback_language
        return LanguageDetectionResult(
            language=fallback,
            detected_language=base_language(fallback),
            confidence=0.0,
            reliable=False,
            source=DetectionSource.FALLBACK,
            elapsed_ms=(time.monotonic() - start) * 1000,
        )
