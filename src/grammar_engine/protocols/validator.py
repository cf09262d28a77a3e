"""Protocol for generative-suggestion validators."""

from __future__ import annotations

from typing import Protocol

from grammar_engine.models.domain import Annotation


class SuggestionValidator(Protocol):
    async def validate(
        self, text: str, candidates: list[Annotation], language: str = "en-US"
    ) -> list[Annotation]: ...
