"""Russian rules: past-tense gender agreement, verb number, noun case after verbs and prepositions."""

from __future__ import annotations

import re

from grammar_engine.models.domain import Category
from grammar_engine.rules.engine import (
    PatternRule,
    RuleEngine,
    duplicate_token_rule,
    multiple_spaces_rule,
)

# End of a Cyrillic word
_END = r"(?![а-яё])"

# Past-tense ending required by each personal pronoun
PAST_ENDINGS: dict[str, str] = {"он": "", "она": "а", "оно": "о", "они": "и"}
PAST_STEMS = ("сказал", "имел", "читал", "сделал", "написал", "знал", "хотел", "был")

# Third person singular -> plural
PRESENT_PLURAL: dict[str, str] = {
    "имеет": "имеют",
    "читает": "читают",
    "делает": "делают",
    "знает": "знают",
    "говорит": "говорят",
    "хочет": "хотят",
}

TRANSITIVE_VERBS = ("имеет", "имел", "имела", "читает", "читал", "читала", "купил", "купила")
FEMININE_NOUNS = ("книга", "машина", "работа", "газета", "школа", "улица", "почта", "комната")


def _wrong_past_ending(match: re.Match, text: str) -> bool:
    expected = PAST_ENDINGS[match.group("pronoun").lower()]
    return match.group("ending").lower() != expected


def _past_form(match: re.Match) -> str:
    return match.group("stem") + PAST_ENDINGS[match.group("pronoun").lower()]


def _accusative(noun: str) -> str:
    return noun[:-1] + "у"


def _prepositional(noun: str) -> str:
    return noun[:-1] + "е"


def build_rules() -> list[PatternRule]:
    nouns = "|".join(FEMININE_NOUNS)
    return [
        PatternRule(
            rule_id="RU_PAST_TENSE_AGREEMENT",
            pattern=(
                rf"(?<!и\s)\b(?P<pronoun>он|она|оно|они)\s+"
                rf"(?:(?:уже|вчера|тоже|не|всегда|никогда)\s+)?"
                rf"(?P<verb>(?P<stem>{'|'.join(PAST_STEMS)})(?P<ending>[аои]?)){_END}"
            ),
            message=lambda m: (
                f"Gender/number agreement: '{m.group('pronoun')}' requires '{_past_form(m)}'"
            ),
            short_message="Agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [_past_form(m)],
            target="verb",
            accept=_wrong_past_ending,
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="RU_PLURAL_SUBJECT_SINGULAR_VERB",
            pattern=rf"\bони\s+(?:не\s+)?(?P<verb>{'|'.join(PRESENT_PLURAL)}){_END}",
            message=lambda m: (
                f"Plural subject requires '{PRESENT_PLURAL[m.group('verb').lower()]}'"
            ),
            short_message="Agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [PRESENT_PLURAL[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="RU_DIRECT_OBJECT_CASE",
            pattern=rf"\b(?:{'|'.join(TRANSITIVE_VERBS)})\s+(?P<noun>{nouns}){_END}",
            message=lambda m: (
                f"Direct object takes the accusative: '{_accusative(m.group('noun'))}'"
            ),
            short_message="Case error",
            category=Category.GRAMMAR,
            replacements=lambda m: [_accusative(m.group("noun"))],
            target="noun",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="RU_PREPOSITION_CASE",
            pattern=rf"\b(?:в|на)\s+(?P<noun>{nouns}){_END}",
            message=lambda m: (
                f"Noun after a preposition cannot stay in the nominative: "
                f"'{_prepositional(m.group('noun'))}'"
            ),
            short_message="Case error",
            category=Category.GRAMMAR,
            replacements=lambda m: [
                _prepositional(m.group("noun")),
                _accusative(m.group("noun")),
            ],
            target="noun",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        duplicate_token_rule("RU", "Repeated word '{word}'"),
        multiple_spaces_rule("RU"),
    ]


def create_russian_engine() -> RuleEngine:
    return RuleEngine("ru-RU", build_rules())
