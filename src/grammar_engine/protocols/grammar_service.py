"""Protocol for the general-purpose grammar service."""

from __future__ import annotations

from typing import Protocol

from grammar_engine.models.domain import ExternalCheckResult


class GrammarService(Protocol):
    async def check(self, text: str, language: str = "auto") -> ExternalCheckResult: ...

    async def detect_language(self, text: str) -> tuple[str, float]: ...

    async def languages(self) -> list[dict]: ...
