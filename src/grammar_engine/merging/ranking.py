"""Ordering of competing replacement candidates for a single span."""

from __future__ import annotations

from difflib import SequenceMatcher

COMMON_WORDS = frozenset(
    {
        "the", "a", "an", "is", "are", "was", "were", "have", "has", "had",
        "do", "does", "did", "will", "would", "should", "could", "can",
        "and", "or", "but", "so", "because", "if", "when", "where", "how",
    }
)

COMMON_WORD_BONUS = 8.0
CASE_MATCH_BONUS = 5.0
LENGTH_PENALTY = 0.5


def _same_case(original: str, candidate: str) -> bool:
    if not original or not candidate:
        return False
    return original[0].isupper() == candidate[0].isupper()


def score_replacement(original: str, candidate: str) -> float:
    similarity = SequenceMatcher(None, original.lower(), candidate.lower()).ratio()
    score = 10.0 * similarity - LENGTH_PENALTY * abs(len(candidate) - len(original))
    if candidate.lower() in COMMON_WORDS:
        score += COMMON_WORD_BONUS
    if _same_case(original, candidate):
        score += CASE_MATCH_BONUS
    return score


def rank_replacements(original: str, candidates: list[str]) -> list[str]:
    """Best first: closest in spelling and length, common words, matching case, then A-Z."""
    unique = list(dict.fromkeys(candidates))
    return sorted(unique, key=lambda c: (-score_replacement(original, c), c))


def cap_replacements(candidates: list[str], limit: int) -> list[str]:
    return list(dict.fromkeys(candidates))[:limit]
