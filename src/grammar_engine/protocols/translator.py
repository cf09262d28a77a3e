"""Protocol for message translation."""

from __future__ import annotations

from typing import Protocol


class MessageTranslator(Protocol):
    async def translate(self, text: str, source_language: str) -> str: ...

    async def translate_batch(self, texts: list[str], source_language: str) -> list[str]: ...
