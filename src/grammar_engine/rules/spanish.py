"""Spanish rules: subject-verb agreement and inverted punctuation."""

from __future__ import annotations

import re

from grammar_engine.models.domain import Category
from grammar_engine.rules.engine import (
    PatternRule,
    RuleEngine,
    duplicate_token_rule,
    multiple_spaces_rule,
    space_before_punctuation_rule,
)

PLURAL_TO_SINGULAR: dict[str, str] = {
    "van": "va",
    "son": "es",
    "están": "está",
    "tienen": "tiene",
    "hacen": "hace",
    "pueden": "puede",
    "quieren": "quiere",
}
SINGULAR_TO_PLURAL = {v: k for k, v in PLURAL_TO_SINGULAR.items()}

SINGULAR_DETERMINERS = ("el", "la", "un", "una", "este", "esta", "ese", "esa")
PLURAL_DETERMINERS = ("los", "las", "unos", "unas", "estos", "estas", "esos", "esas")

# Words that start a new subject or clause inside the look-ahead window
_CLAUSE_BREAKERS = (
    "y|e|o|u|ni|que|quien|quienes|cuando|donde|porque|"
    "yo|tú|él|ella|usted|nosotros|nosotras|ellos|ellas|ustedes|los|las|me|te|se|nos|le|les"
)


def _agreement_pattern(determiners: tuple[str, ...], verbs: list[str]) -> str:
    # determiner + noun + up to two modifiers + verb, without crossing a clause boundary
    return (
        rf"\b(?:{'|'.join(determiners)})\s+\w+\s+"
        rf"(?:(?!(?:{_CLAUSE_BREAKERS})\b)\w+\s+){{0,2}}?"
        rf"(?P<verb>{'|'.join(verbs)})\b"
    )


def _inverted_mark_rule(rule_id: str, opening: str, closing: str, name: str) -> PatternRule:
    return PatternRule(
        rule_id=rule_id,
        pattern=(
            rf"(?:^|(?<=[.!?]\s))(?P<word>[^\s¿¡.!?]+)"
            rf"(?=[^.!?¿¡]*{re.escape(closing)})"
        ),
        message=f"{name} in Spanish must open with '{opening}'",
        short_message="Missing inverted punctuation",
        category=Category.PUNCTUATION,
        replacements=[opening + "{word}"],
        target="word",
        flags=re.MULTILINE,
    )


def build_rules() -> list[PatternRule]:
    return [
        PatternRule(
            rule_id="ES_SINGULAR_SUBJECT_PLURAL_VERB",
            pattern=_agreement_pattern(SINGULAR_DETERMINERS, list(PLURAL_TO_SINGULAR)),
            message=lambda m: (
                "Subject-verb agreement error: singular subject requires singular verb "
                f"'{PLURAL_TO_SINGULAR[m.group('verb').lower()]}' instead of '{m.group('verb')}'"
            ),
            short_message="Subject-verb agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [PLURAL_TO_SINGULAR[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="ES_PLURAL_SUBJECT_SINGULAR_VERB",
            pattern=_agreement_pattern(PLURAL_DETERMINERS, list(SINGULAR_TO_PLURAL)),
            message=lambda m: (
                "Subject-verb agreement error: plural subject requires plural verb "
                f"'{SINGULAR_TO_PLURAL[m.group('verb').lower()]}' instead of '{m.group('verb')}'"
            ),
            short_message="Subject-verb agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [SINGULAR_TO_PLURAL[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="ES_PLURAL_PRONOUN_SINGULAR_VERB",
            pattern=rf"\b(?:ellos|ellas|ustedes)\s+(?:no\s+)?(?P<verb>{'|'.join(SINGULAR_TO_PLURAL)})\b",
            message=lambda m: (
                f"Plural pronoun requires '{SINGULAR_TO_PLURAL[m.group('verb').lower()]}'"
            ),
            short_message="Subject-verb agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [SINGULAR_TO_PLURAL[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        _inverted_mark_rule("ES_MISSING_INVERTED_QUESTION", "¿", "?", "A question"),
        _inverted_mark_rule("ES_MISSING_INVERTED_EXCLAMATION", "¡", "!", "An exclamation"),
        duplicate_token_rule("ES", "Repeated word '{word}'"),
        multiple_spaces_rule("ES"),
        space_before_punctuation_rule("ES"),
    ]


def create_spanish_engine() -> RuleEngine:
    return RuleEngine("es", build_rules())
