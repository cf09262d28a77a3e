"""Shared runner for hand-authored, pattern-based rule engines.

A rule is a tagged pattern object: a compiled regex, a message template, a
category, and a replacement builder. Every language engine is just a list of
rules evaluated by the same loop, so no language carries its own offset
bookkeeping.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from grammar_engine.models.domain import Annotation, Category, rule_engine_source, unique_spans

MatchFormatter = Callable[[re.Match], str]
ReplacementBuilder = Callable[[re.Match], list[str]]
MatchPredicate = Callable[[re.Match, str], bool]


def match_case(original: str, replacement: str) -> str:
    """Carry the capitalization of the flagged text over to a replacement."""
    if not original or not replacement:
        return replacement
    if len(original) > 1 and original.isupper():
        return replacement.upper()
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


@dataclass
class PatternRule:
    rule_id: str
    pattern: re.Pattern | str
    message: str | MatchFormatter
    short_message: str
    category: Category
    replacements: Sequence[str] | ReplacementBuilder = ()
    target: int | str = 0
    accept: MatchPredicate | None = None
    preserve_case: bool = False
    flags: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern, self.flags)

    def annotations(self, text: str, source: str) -> Iterator[Annotation]:
        for match in self.pattern.finditer(text):
            start, end = match.span(self.target)
            if start < 0 or end <= start:
                continue
            if self.accept is not None and not self.accept(match, text):
                continue
            flagged = match.group(self.target)
            replacements = self._build_replacements(match)
            if self.preserve_case:
                replacements = [match_case(flagged, r) for r in replacements]
            yield Annotation(
                offset=start,
                length=end - start,
                message=self._format(self.message, match),
                short_message=self.short_message,
                category=self.category,
                replacements=replacements,
                source=source,
                rule_id=self.rule_id,
            )

    def _build_replacements(self, match: re.Match) -> list[str]:
        if callable(self.replacements):
            return list(self.replacements(match))
        return [self._format(template, match) for template in self.replacements]

    def _format(self, template: str | MatchFormatter, match: re.Match) -> str:
        if callable(template):
            return template(match)
        return template.format(
            match=match.group(0),
            target=match.group(self.target),
            **match.groupdict(default=""),
        )


class RuleEngine:
    def __init__(
        self,
        language: str,
        rules: list[PatternRule],
        applies_to: Callable[[str], bool] | None = None,
    ) -> None:
        self.language = language
        self.rules = rules
        self._applies_to = applies_to

    @property
    def source(self) -> str:
        return rule_engine_source(self.language)

    def check(self, text: str) -> list[Annotation]:
        if not text or not text.strip():
            return []
        if self._applies_to is not None and not self._applies_to(text):
            return []

        found: list[Annotation] = []
        for rule in self.rules:
            found.extend(rule.annotations(text, self.source))
        # Earliest rule wins on a shared span
        return unique_spans(found)


# Rule families shared by the space-separated languages


def duplicate_token_rule(prefix: str, message: str) -> PatternRule:
    return PatternRule(
        rule_id=f"{prefix}_DUPLICATE_WORD",
        pattern=r"\b(?P<word>\w+)\s+(?P=word)\b",
        message=message,
        short_message="Duplicate word",
        category=Category.GRAMMAR,
        replacements=["{word}"],
        flags=re.IGNORECASE,
    )


def multiple_spaces_rule(prefix: str) -> PatternRule:
    return PatternRule(
        rule_id=f"{prefix}_MULTIPLE_SPACES",
        pattern=r"(?<=\S) {2,}(?=\S)",
        message="Multiple consecutive spaces",
        short_message="Spacing error",
        category=Category.FORMATTING,
        replacements=[" "],
    )


def space_before_punctuation_rule(prefix: str) -> PatternRule:
    return PatternRule(
        rule_id=f"{prefix}_SPACE_BEFORE_PUNCTUATION",
        pattern=r"(?<=\w)(?P<space> +)(?=[,.;:!?])",
        message="Unexpected space before punctuation",
        short_message="Spacing error",
        category=Category.FORMATTING,
        replacements=[""],
        target="space",
    )
