"""Protocol for per-language rule engines."""

from __future__ import annotations

from typing import Protocol

from grammar_engine.models.domain import Annotation


class Engine(Protocol):
    language: str

    def check(self, text: str) -> list[Annotation]: ...
