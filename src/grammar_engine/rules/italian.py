"""Italian rules: invalid verb forms, pronoun/verb agreement, common misspellings."""

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

INVALID_VERB_FORMS = ("vano", "vain", "vanu")

# Plural form -> singular form of common irregular verbs
PLURAL_TO_SINGULAR: dict[str, str] = {
    "vanno": "va",
    "sono": "è",
    "hanno": "ha",
    "fanno": "fa",
    "stanno": "sta",
    "danno": "dà",
}
SINGULAR_TO_PLURAL = {v: k for k, v in PLURAL_TO_SINGULAR.items()}

# Misspelling -> correction, both matched as whole words
MISSPELLINGS: dict[str, tuple[str, str]] = {
    "qual'è": ("qual è", "'Qual è' is written without an apostrophe"),
    "perchè": ("perché", "'Perché' takes an acute accent"),
    "poichè": ("poiché", "'Poiché' takes an acute accent"),
    "affinchè": ("affinché", "'Affinché' takes an acute accent"),
    "pò": ("po'", "\"Po'\" is written with an apostrophe, not an accent"),
    "sè stesso": ("sé stesso", "'Sé stesso' takes an acute accent"),
}


def _misspelling_entry(match: re.Match) -> tuple[str, str]:
    return MISSPELLINGS[match.group(0).lower()]


def build_rules() -> list[PatternRule]:
    plural_verbs = "|".join(PLURAL_TO_SINGULAR)
    singular_verbs = "|".join(SINGULAR_TO_PLURAL)
    misspellings = "|".join(re.escape(w) for w in MISSPELLINGS)
    return [
        PatternRule(
            rule_id="IT_INVALID_VERB_FORM",
            pattern=rf"\b(?:{'|'.join(INVALID_VERB_FORMS)})\b",
            message=(
                "'{match}' is not a valid Italian verb form. "
                "Did you mean 'va' (singular) or 'vanno' (plural)?"
            ),
            short_message="Spelling error",
            category=Category.SPELLING,
            replacements=["va", "vanno"],
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="IT_SINGULAR_SUBJECT_PLURAL_VERB",
            pattern=rf"\b(?:lui|lei|egli|ella)\s+(?:non\s+)?(?P<verb>{plural_verbs})\b",
            message=lambda m: (
                "Subject-verb agreement: a singular subject requires "
                f"'{PLURAL_TO_SINGULAR[m.group('verb').lower()]}'"
            ),
            short_message="Agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [PLURAL_TO_SINGULAR[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="IT_PLURAL_SUBJECT_SINGULAR_VERB",
            pattern=rf"\b(?:loro|essi|esse)\s+(?:non\s+)?(?P<verb>{singular_verbs})(?!\w)",
            message=lambda m: (
                "Subject-verb agreement: a plural subject requires "
                f"'{SINGULAR_TO_PLURAL[m.group('verb').lower()]}'"
            ),
            short_message="Agreement error",
            category=Category.GRAMMAR,
            replacements=lambda m: [SINGULAR_TO_PLURAL[m.group("verb").lower()]],
            target="verb",
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        PatternRule(
            rule_id="IT_COMMON_MISSPELLING",
            pattern=rf"(?<!\w)(?:{misspellings})(?!\w)",
            message=lambda m: _misspelling_entry(m)[1],
            short_message="Spelling error",
            category=Category.SPELLING,
            replacements=lambda m: [_misspelling_entry(m)[0]],
            preserve_case=True,
            flags=re.IGNORECASE,
        ),
        duplicate_token_rule("IT", "Repeated word '{word}'"),
        multiple_spaces_rule("IT"),
        space_before_punctuation_rule("IT"),
    ]


def create_italian_engine() -> RuleEngine:
    return RuleEngine("it", build_rules())
