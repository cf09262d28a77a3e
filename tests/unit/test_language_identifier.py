"""Tests for layered language identification and mismatch gating."""

from __future__ import annotations

import pytest
from conftest import FakeGrammarService, detection

from grammar_engine.detection import language_identifier as module
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.exceptions import ExternalServiceError
from grammar_engine.models.domain import DetectionSource


class FakeLanguage:
    def __init__(self, lang: str, prob: float) -> None:
        self.lang = lang
        self.prob = prob


def _raise(*args, **kwargs):
    raise module.DetectionFailure("boom")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("こんにちは世界", "ja"),
        ("私は学生です", "ja"),
        ("你好世界", "zh"),
        ("Привет, как дела?", "ru"),
        ("я и ты", None),
        ("안녕하세요", "ko"),
        ("สวัสดีครับ", "th"),
        ("مرحبا بالعالم", "ar"),
        ("Hello world", None),
        ("12345", None),
    ],
)
def test_match_unicode_script(text, expected):
    assert LanguageIdentifier.match_unicode_script(text) == expected


async def test_unicode_pattern_wins_first(settings):
    result = await LanguageIdentifier(settings).identify("のの")
    assert result.language == "ja-JP"
    assert result.detected_language == "ja"
    assert result.source == DetectionSource.UNICODE_PATTERN
    assert result.confidence == pytest.approx(0.95)
    assert result.reliable


async def test_unsupported_script_falls_back_unreliable(settings):
    result = await LanguageIdentifier(settings).identify("안녕하세요")
    assert result.language == "en-US"
    assert result.detected_language == "ko"
    assert not result.reliable


async def test_statistical_result_is_mapped(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", lambda text: [FakeLanguage("fr", 0.99)])
    result = await LanguageIdentifier(settings).identify("Bonjour tout le monde")
    assert result.language == "fr"
    assert result.source == DetectionSource.STATISTICAL
    assert result.reliable


async def test_low_statistical_confidence_falls_through_to_service(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", lambda text: [FakeLanguage("fr", 0.3)])
    service = FakeGrammarService(detected=("de", 0.9))
    result = await LanguageIdentifier(settings, grammar_service=service).identify("Hallo")
    assert result.language == "de-DE"
    assert result.source == DetectionSource.EXTERNAL_SERVICE


async def test_all_strategies_failing_uses_fallback(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", _raise)
    service = FakeGrammarService(error=ExternalServiceError("down", status_code=503))
    result = await LanguageIdentifier(settings, grammar_service=service).identify("Hello")
    assert result.language == "en-US"
    assert result.source == DetectionSource.FALLBACK
    assert result.confidence == 0.0
    assert not result.reliable


async def test_classifier_exception_never_escapes(settings, monkeypatch):
    def explode(text):
        raise RuntimeError("classifier crashed")

    monkeypatch.setattr(module, "detect_langs", explode)
    result = await LanguageIdentifier(settings).identify("Hello")
    assert result.source == DetectionSource.FALLBACK


def test_mismatch_reported_for_confident_other_language(settings):
    identifier = LanguageIdentifier(settings)
    mismatch = identifier.detect_mismatch(detection("fr", "fr", 0.9), "de-DE")
    assert mismatch is not None
    assert mismatch.detected == "fr"
    assert mismatch.selected == "de-DE"
    assert mismatch.confidence == pytest.approx(0.9)


@pytest.mark.parametrize(
    "confidence, selected",
    [
        (0.9, "auto"),
        (0.6, "de-DE"),
        (0.9, "fr"),
    ],
)
def test_no_mismatch(settings, confidence, selected):
    identifier = LanguageIdentifier(settings)
    assert identifier.detect_mismatch(detection("fr", "fr", confidence), selected) is None


def test_english_variants_never_mismatch(settings):
    identifier = LanguageIdentifier(settings)
    assert identifier.detect_mismatch(detection("en-US", "en", 0.99), "en-GB") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("¿Cómo estás?", ("es", 0.9)),
        ("¡Hola!", ("es", 0.9)),
        ("Você não sabe", ("pt", 0.85)),
        ("Lui è molto stanco", ("it", 0.92)),
        ("Perché no?", ("it", 0.92)),
        ("Hello world", None),
    ],
)
def test_match_latin_markers(text, expected):
    assert LanguageIdentifier.match_latin_markers(text) == expected


async def test_latin_marker_resolves_before_classifier(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", lambda text: [FakeLanguage("pt", 0.99)])
    result = await LanguageIdentifier(settings).identify("Lui è molto stanco")
    assert result.language == "it"
    assert result.source == DetectionSource.UNICODE_PATTERN
    assert result.confidence == pytest.approx(0.92)
    assert not result.short_text


async def test_short_statistical_result_does_not_gate(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", lambda text: [FakeLanguage("pt", 0.99)])
    identifier = LanguageIdentifier(settings)
    result = await identifier.identify("Ciao mondo")
    assert result.source == DetectionSource.STATISTICAL
    assert result.short_text
    assert not result.reliable
    assert identifier.detect_mismatch(result, "it") is None


async def test_long_statistical_result_still_gates(settings, monkeypatch):
    monkeypatch.setattr(module, "detect_langs", lambda text: [FakeLanguage("fr", 0.99)])
    identifier = LanguageIdentifier(settings)
    result = await identifier.identify("Bonjour tout le monde")
    assert not result.short_text
    mismatch = identifier.detect_mismatch(result, "de-DE")
    assert mismatch is not None
    assert mismatch.detected == "fr"
