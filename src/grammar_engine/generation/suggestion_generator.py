"""Generative suggestions: prompt the LLM, parse 'original | correction | explanation' lines."""

from __future__ import annotations

import re

from grammar_engine.exceptions import SuggestionParseError
from grammar_engine.generation.prompt_templates import SUGGESTION_PROMPT, SUGGESTION_SYSTEM
from grammar_engine.models.domain import GENERATIVE_SUGGESTION, Annotation, Category
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.llm import LLMProvider

logger = get_logger("suggestions")

_LINE = re.compile(r"^(.+?)\s*\|\s*(.+?)\s*\|\s*(.+)$")


def parse_line(line: str) -> tuple[str, str, str]:
    match = _LINE.match(line.strip())
    if match is None:
        raise SuggestionParseError(f"Not a suggestion line: {line[:80]!r}")
    original, correction, explanation = (part.strip() for part in match.groups())
    if not original or not correction:
        raise SuggestionParseError(f"Empty field in suggestion line: {line[:80]!r}")
    return original, correction, explanation


def locate(text: str, original: str, claimed: set[int]) -> int:
    """First occurrence of original whose offset is not already claimed, or -1."""
    start = 0
    while True:
        offset = text.find(original, start)
        if offset == -1 or offset not in claimed:
            return offset
        start = offset + 1


def parse_suggestions(raw: str, text: str) -> list[Annotation]:
    annotations: list[Annotation] = []
    claimed: set[int] = set()
    rejected = 0
    for line in raw.splitlines():
        if not line.strip():
            continue
        try:
            original, correction, explanation = parse_line(line)
        except SuggestionParseError:
            rejected += 1
            continue
        if original == correction:
            continue

        offset = locate(text, original, claimed)
        if offset == -1:
            rejected += 1
            continue
        claimed.add(offset)
        annotations.append(
            Annotation(
                offset=offset,
                length=len(original),
                message=explanation,
                category=Category.GRAMMAR,
                replacements=[correction],
                source=GENERATIVE_SUGGESTION,
                rule_id="GENERATIVE_SUGGESTION",
            )
        )
    if rejected:
        logger.debug("suggestion_lines_rejected", count=rejected)
    return annotations


class SuggestionGenerator:
    def __init__(
        self, llm: LLMProvider, temperature: float = 0.1, max_tokens: int = 500
    ) -> None:
        self._llm = llm
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def suggest(self, text: str) -> list[Annotation]:
        """Ask the LLM for corrections. GenerationError propagates to the caller."""
        raw = await self._llm.generate(
            SUGGESTION_PROMPT.format(text=text),
            system=SUGGESTION_SYSTEM,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        annotations = parse_suggestions(raw, text)
        logger.info("generated_suggestions", text_len=len(text), count=len(annotations))
        return annotations
