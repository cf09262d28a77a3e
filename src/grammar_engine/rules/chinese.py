"""Chinese rules: duplicated particles and measure-word (classifier) agreement."""

from __future__ import annotations

import re

from grammar_engine.models.domain import Category
from grammar_engine.rules.engine import PatternRule, RuleEngine

# Noun -> accepted measure words, most common first
MEASURE_WORDS: dict[str, list[str]] = {
    "苹果": ["个"],
    "鱼": ["条"],
    "书": ["本"],
    "猫": ["只"],
    "狗": ["只", "条"],
    "鸡": ["只"],
    "鸟": ["只"],
    "人": ["个", "位"],
    "东西": ["个", "件"],
    "问题": ["个"],
    "学生": ["个", "名", "位"],
    "老师": ["位", "个", "名"],
    "女孩": ["个"],
    "男孩": ["个"],
    "车": ["辆"],
    "汽车": ["辆"],
    "衣服": ["件"],
    "纸": ["张"],
    "桌子": ["张"],
    "床": ["张"],
    "马": ["匹"],
    "笔": ["支"],
    "电脑": ["台"],
    "河": ["条"],
    "裤子": ["条"],
}

CLASSIFIERS = "个本只辆件张条位名匹支台对双块片种群"
NUMERALS = "一二两三四五六七八九十百千万零0-9"

DUPLICATE_PARTICLES = "的了在吗"

# Longest nouns first so 汽车 wins over 车
_NOUNS = "|".join(sorted((re.escape(n) for n in MEASURE_WORDS), key=len, reverse=True))


def _correct_measure(match: re.Match) -> str:
    return MEASURE_WORDS[match.group("noun")][0]


def _wrong_measure(match: re.Match, text: str) -> bool:
    return match.group("measure") not in MEASURE_WORDS[match.group("noun")]


def build_rules() -> list[PatternRule]:
    return [
        PatternRule(
            rule_id="ZH_DUPLICATE_PARTICLE",
            pattern=rf"(?P<particle>[{DUPLICATE_PARTICLES}])(?P=particle)+",
            message="Duplicate particle '{particle}'",
            short_message="Duplicate word",
            category=Category.GRAMMAR,
            replacements=["{particle}"],
        ),
        PatternRule(
            rule_id="ZH_WRONG_MEASURE_WORD",
            pattern=rf"[{NUMERALS}]+\s*(?P<measure>[{CLASSIFIERS}])\s*(?P<noun>{_NOUNS})",
            message=lambda m: (
                f"Wrong measure word: '{m.group('noun')}' needs "
                f"'{_correct_measure(m)}' not '{m.group('measure')}'"
            ),
            short_message="Wrong measure word",
            category=Category.GRAMMAR,
            replacements=lambda m: [_correct_measure(m)],
            target="measure",
            accept=_wrong_measure,
        ),
        PatternRule(
            rule_id="ZH_MISSING_MEASURE_WORD",
            pattern=rf"[{NUMERALS}]+\s*(?P<noun>{_NOUNS})",
            message=lambda m: (
                f"Missing measure word: '{m.group('noun')}' needs '{_correct_measure(m)}'"
            ),
            short_message="Missing measure word",
            category=Category.GRAMMAR,
            replacements=lambda m: [f"{_correct_measure(m)}{m.group('noun')}"],
            target="noun",
        ),
    ]


def create_chinese_engine() -> RuleEngine:
    return RuleEngine("zh-CN", build_rules())
