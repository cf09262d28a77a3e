"""Japanese rules: doubled particles, conflicting particles, missing 。."""

from __future__ import annotations

import re

from grammar_engine.models.domain import Category
from grammar_engine.rules.engine import PatternRule, RuleEngine

_JAPANESE_SCRIPT = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]")

# Particles that never legitimately repeat back to back
PARTICLES = "がをにへでのは"

# Particle pairs that cannot follow each other directly
INVALID_SEQUENCES: dict[str, str] = {
    "をが": "Object particle 'を' cannot be followed by subject particle 'が'",
    "がを": "Subject particle 'が' cannot be followed by object particle 'を'",
    "はが": "Topic particle 'は' cannot be followed by subject particle 'が'",
    "をに": "Object particle 'を' cannot be followed by particle 'に'",
    "にを": "Particle 'に' cannot be followed by object particle 'を'",
}

_SENTENCE_END = re.compile(r"(ます|ました|ている|た|です)$")
_HAS_PARTICLE = re.compile(r"(は|を|に|へ|で|から|まで|も|より|と|や)")


def _is_japanese(text: str) -> bool:
    return bool(_JAPANESE_SCRIPT.search(text))


def _needs_terminal_punctuation(match: re.Match, text: str) -> bool:
    # Only flag clear, complete sentences
    return (
        len(text) > 10
        and bool(_SENTENCE_END.search(text))
        and bool(_HAS_PARTICLE.search(text))
    )


def _invalid_sequence_message(match: re.Match) -> str:
    key = re.sub(r"\s+", "", match.group(0))
    return INVALID_SEQUENCES[key]


def build_rules() -> list[PatternRule]:
    sequences = "|".join(
        rf"{re.escape(pair[0])}\s*{re.escape(pair[1])}" for pair in INVALID_SEQUENCES
    )
    return [
        PatternRule(
            rule_id="JA_DOUBLE_PARTICLE",
            pattern=rf"(?P<particle>[{PARTICLES}])(?P=particle)",
            message="Double particle '{particle}' detected",
            short_message="Duplicate particle",
            category=Category.GRAMMAR,
            replacements=["{particle}"],
        ),
        PatternRule(
            rule_id="JA_PARTICLE_CONFLICT",
            pattern=sequences,
            message=_invalid_sequence_message,
            short_message="Particle conflict",
            category=Category.GRAMMAR,
        ),
        PatternRule(
            rule_id="JA_MISSING_TERMINAL_PUNCTUATION",
            pattern=r"(?P<last>[^。！？!?\s])\Z",
            message="Missing sentence-ending punctuation",
            short_message="Punctuation error",
            category=Category.PUNCTUATION,
            replacements=["{last}。"],
            target="last",
            accept=_needs_terminal_punctuation,
        ),
    ]


def create_japanese_engine() -> RuleEngine:
    return RuleEngine("ja-JP", build_rules(), applies_to=_is_japanese)
