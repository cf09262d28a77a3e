"""Confirm generative suggestions before they reach a result."""

from __future__ import annotations

import asyncio
from dataclasses import replace

from pydantic import BaseModel

from grammar_engine.config.constants import (
    PROMPT_VALIDATED_CONFIDENCE,
    SERVICE_VALIDATED_CONFIDENCE,
)
from grammar_engine.exceptions import GenerationError, ValidationFailure
from grammar_engine.generation.prompt_templates import (
    VALIDATION_PROMPT,
    VALIDATION_SYSTEM,
    format_suggestions_block,
)
from grammar_engine.models.domain import Annotation
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.grammar_service import GrammarService
from grammar_engine.protocols.llm import LLMProvider

logger = get_logger("suggestion_validator")


def apply_correction(text: str, candidate: Annotation) -> str:
    if not candidate.replacements:
        raise ValidationFailure("Suggestion has no replacement")
    return text[: candidate.offset] + candidate.replacements[0] + text[candidate.end :]


class ServiceSuggestionValidator:
    """Apply each correction and re-check it with the grammar service.

    A suggestion is confirmed when the service reports nothing overlapping the
    replaced span of the corrected text.
    """

    def __init__(self, service: GrammarService) -> None:
        self._service = service

    async def validate(
        self, text: str, candidates: list[Annotation], language: str = "en-US"
    ) -> list[Annotation]:
        if not candidates:
            return []
        outcomes = await asyncio.gather(
            *(self._confirm(text, c, language) for c in candidates),
            return_exceptions=True,
        )

        confirmed: list[Annotation] = []
        for candidate, outcome in zip(candidates, outcomes):
            if isinstance(outcome, BaseException):
                logger.debug(
                    "suggestion_rejected",
                    offset=candidate.offset,
                    reason=f"{type(outcome).__name__}: {outcome}",
                )
                continue
            confirmed.append(outcome)

        logger.info("suggestions_validated", accepted=len(confirmed), total=len(candidates))
        return confirmed

    async def _confirm(self, text: str, candidate: Annotation, language: str) -> Annotation:
        corrected = apply_correction(text, candidate)
        result = await self._service.check(corrected, language)
        start = candidate.offset
        end = start + max(len(candidate.replacements[0]), 1)
        if any(m.offset < end and m.end > start for m in result.matches):
            raise ValidationFailure("Service still reports an issue at the corrected span")
        return replace(candidate, confidence=SERVICE_VALIDATED_CONFIDENCE)


class ConfirmedSuggestion(BaseModel):
    original: str
    replacement: str


class ValidationResponse(BaseModel):
    confirmed: list[ConfirmedSuggestion] = []


class PromptSuggestionValidator:
    """Ask the LLM, in an independent prompt, which suggestions are correct."""

    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    async def validate(
        self, text: str, candidates: list[Annotation], language: str = "en-US"
    ) -> list[Annotation]:
        if not candidates:
            return []
        prompt = VALIDATION_PROMPT.format(
            text=text, suggestions_block=format_suggestions_block(text, candidates)
        )
        try:
            response = await self._llm.generate_structured(
                prompt, ValidationResponse, system=VALIDATION_SYSTEM
            )
        except GenerationError as e:
            raise ValidationFailure(f"Validation prompt failed: {e}") from e

        pairs: dict[str, str] = {}
        for item in response.confirmed:
            original, replacement = item.original.strip(), item.replacement.strip()
            if original and replacement and original != replacement:
                pairs.setdefault(original, replacement)

        confirmed = [
            replace(
                candidate,
                replacements=[pairs[candidate.span_text(text)]],
                confidence=PROMPT_VALIDATED_CONFIDENCE,
            )
            for candidate in candidates
            if candidate.span_text(text) in pairs
        ]
        logger.info("suggestions_validated", accepted=len(confirmed), total=len(candidates))
        return confirmed
