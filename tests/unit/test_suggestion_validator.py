"""Tests for service-backed and prompt-backed suggestion validation."""

from __future__ import annotations

import pytest
from conftest import FakeGrammarService, FakeLLM, service_annotation

from grammar_engine.exceptions import ExternalServiceError, ValidationFailure
from grammar_engine.generation.suggestion_generator import parse_suggestions
from grammar_engine.verification.suggestion_validator import (
    ConfirmedSuggestion,
    PromptSuggestionValidator,
    ServiceSuggestionValidator,
    ValidationResponse,
    apply_correction,
)

TEXT = "She have went home."


@pytest.fixture
def candidates():
    return parse_suggestions("have | has | agreement\nwent | gone | participle", TEXT)


def test_apply_correction():
    candidate = parse_suggestions("have | has | agreement", TEXT)[0]
    assert apply_correction(TEXT, candidate) == "She has went home."


async def test_service_validator_keeps_fixed_suggestions(candidates):
    # "went" -> "gone" still leaves an issue at the same span
    service = FakeGrammarService(
        matches={
            "She has went home.": [service_annotation(8, 4)],
            "She have gone home.": [service_annotation(9, 4)],
        }
    )
    confirmed = await ServiceSuggestionValidator(service).validate(TEXT, candidates)
    assert [(a.offset, a.replacements, a.confidence) for a in confirmed] == [
        (4, ["has"], 1.0)
    ]
    assert len(service.calls) == 2


async def test_service_validator_drops_failed_items_only(candidates):
    class PartlyFailingService(FakeGrammarService):
        async def check(self, text, language="auto"):
            if "gone" in text:
                raise ExternalServiceError("timeout", status_code=408)
            return await super().check(text, language)

    confirmed = await ServiceSuggestionValidator(PartlyFailingService()).validate(
        TEXT, candidates
    )
    assert [a.replacements for a in confirmed] == [["has"]]


async def test_service_validator_with_no_candidates():
    service = FakeGrammarService()
    assert await ServiceSuggestionValidator(service).validate(TEXT, []) == []
    assert service.calls == []


async def test_service_validator_rejects_length_changing_fix_still_flagged():
    text = "She have a dog"
    candidates = parse_suggestions("have | had | tense", text)
    service = FakeGrammarService(matches={"She had a dog": [service_annotation(4, 3)]})
    assert await ServiceSuggestionValidator(service).validate(text, candidates) == []


async def test_service_validator_ignores_issues_outside_replaced_span():
    text = "She have a dog"
    candidates = parse_suggestions("have | had | tense", text)
    service = FakeGrammarService(matches={"She had a dog": [service_annotation(10, 3)]})
    confirmed = await ServiceSuggestionValidator(service).validate(text, candidates)
    assert [(a.offset, a.length, a.replacements) for a in confirmed] == [(4, 4, ["had"])]


async def test_prompt_validator_keeps_echoed_pairs(candidates):
    llm = FakeLLM(
        structured=ValidationResponse(
            confirmed=[ConfirmedSuggestion(original="have", replacement="has")]
        )
    )
    confirmed = await PromptSuggestionValidator(llm).validate(TEXT, candidates)
    assert [(a.offset, a.replacements, a.confidence) for a in confirmed] == [
        (4, ["has"], 0.8)
    ]
    assert "have -> has" in llm.prompts[0]


async def test_prompt_validator_ignores_noop_pairs(candidates):
    llm = FakeLLM(
        structured=ValidationResponse(
            confirmed=[ConfirmedSuggestion(original="went", replacement="went")]
        )
    )
    assert await PromptSuggestionValidator(llm).validate(TEXT, candidates) == []


async def test_prompt_validator_failure_raises_validation_failure(candidates, failing_llm):
    with pytest.raises(ValidationFailure):
        await PromptSuggestionValidator(failing_llm).validate(TEXT, candidates)
