"""Tests for the per-language rule engines and their registry."""

from __future__ import annotations

import pytest

from grammar_engine.models.domain import Category
from grammar_engine.rules.chinese import create_chinese_engine
from grammar_engine.rules.engine import PatternRule, RuleEngine, match_case
from grammar_engine.rules.italian import create_italian_engine
from grammar_engine.rules.japanese import create_japanese_engine
from grammar_engine.rules.registry import create_default_registry
from grammar_engine.rules.russian import create_russian_engine
from grammar_engine.rules.spanish import create_spanish_engine


def spans(annotations):
    return [(a.offset, a.length, a.replacements) for a in annotations]


# --- shared runner ---


def test_match_case():
    assert match_case("Vano", "va") == "Va"
    assert match_case("VANO", "va") == "VA"
    assert match_case("vano", "va") == "va"


def test_runner_keeps_earliest_rule_on_shared_span():
    first = PatternRule("FIRST", r"cat", "first", "first", Category.GRAMMAR, ["dog"])
    second = PatternRule("SECOND", r"cat", "second", "second", Category.STYLE, ["cow"])
    result = RuleEngine("xx", [first, second]).check("a cat")
    assert len(result) == 1
    assert result[0].rule_id == "FIRST"
    assert result[0].source == "rule-engine:xx"


def test_runner_ignores_blank_input():
    engine = create_italian_engine()
    assert engine.check("") == []
    assert engine.check("   ") == []


# --- Japanese ---


def test_japanese_double_particle():
    result = create_japanese_engine().check("のの")
    assert len(result) == 1
    annotation = result[0]
    assert (annotation.offset, annotation.length) == (0, 2)
    assert annotation.replacements == ["の"]
    assert annotation.category == Category.GRAMMAR
    assert annotation.source == "rule-engine:ja-JP"


def test_japanese_particle_conflict():
    result = create_japanese_engine().check("私はりんごをが食べます。")
    assert [(a.offset, a.length, a.rule_id) for a in result] == [
        (5, 2, "JA_PARTICLE_CONFLICT")
    ]


def test_japanese_missing_terminal_punctuation():
    text = "私は毎日学校に行きます"
    result = create_japanese_engine().check(text)
    assert spans(result) == [(len(text) - 1, 1, ["す。"])]
    assert result[0].category == Category.PUNCTUATION


def test_japanese_short_sentence_not_flagged_for_punctuation():
    assert create_japanese_engine().check("行きます") == []


def test_japanese_engine_skips_non_japanese_text():
    assert create_japanese_engine().check("Hello world") == []


# --- Chinese ---


def test_chinese_wrong_measure_word():
    result = create_chinese_engine().check("三本苹果")
    assert spans(result) == [(1, 1, ["个"])]


def test_chinese_missing_measure_word():
    result = create_chinese_engine().check("三苹果")
    assert spans(result) == [(1, 2, ["个苹果"])]


def test_chinese_correct_measure_word_not_flagged():
    assert create_chinese_engine().check("我有三个苹果") == []


def test_chinese_duplicate_particle():
    result = create_chinese_engine().check("我们的的书")
    assert spans(result) == [(2, 2, ["的"])]


# --- Italian ---


def test_italian_invalid_verb_form():
    result = create_italian_engine().check("Lui vano al parco")
    assert len(result) == 1
    annotation = result[0]
    assert (annotation.offset, annotation.length) == (4, 4)
    assert annotation.replacements == ["va", "vanno"]
    assert annotation.category == Category.SPELLING


def test_italian_singular_subject_plural_verb():
    result = create_italian_engine().check("Lui vanno al parco")
    assert spans(result) == [(4, 5, ["va"])]


def test_italian_misspelling_keeps_case():
    result = create_italian_engine().check("Perchè no")
    assert spans(result) == [(0, 6, ["Perché"])]


def test_italian_formatting_rules():
    result = create_italian_engine().check("Ciao  mondo , amici")
    assert spans(result) == [(4, 2, [" "]), (11, 1, [""])]


def test_italian_duplicate_word():
    result = create_italian_engine().check("il il cane")
    assert spans(result) == [(0, 5, ["il"])]


# --- Spanish ---


def test_spanish_singular_subject_plural_verb():
    result = create_spanish_engine().check("El perro son grande")
    assert spans(result) == [(9, 3, ["es"])]


def test_spanish_plural_subject_singular_verb():
    result = create_spanish_engine().check("Los perros es grandes")
    assert spans(result) == [(11, 2, ["son"])]


def test_spanish_agreement_does_not_cross_relative_clause():
    assert create_spanish_engine().check("El libro que ellos tienen") == []


def test_spanish_plural_pronoun_singular_verb():
    result = create_spanish_engine().check("Ellos tiene hambre")
    assert spans(result) == [(6, 5, ["tienen"])]


def test_spanish_missing_inverted_question_mark():
    result = create_spanish_engine().check("Hola. Cómo estás?")
    assert spans(result) == [(6, 4, ["¿Cómo"])]
    assert result[0].category == Category.PUNCTUATION


def test_spanish_question_with_opening_mark_not_flagged():
    assert create_spanish_engine().check("¿Cómo estás?") == []


# --- Russian ---


def test_russian_feminine_past_tense():
    result = create_russian_engine().check("Она сказал правду")
    assert spans(result) == [(4, 6, ["сказала"])]


def test_russian_masculine_past_tense():
    result = create_russian_engine().check("Он сказали правду")
    assert spans(result) == [(3, 7, ["сказал"])]


def test_russian_correct_past_tense_not_flagged():
    assert create_russian_engine().check("Она сказала правду") == []


def test_russian_plural_subject_singular_verb():
    result = create_russian_engine().check("Они имеет машину")
    assert spans(result) == [(4, 5, ["имеют"])]


def test_russian_direct_object_case():
    result = create_russian_engine().check("Она читала книга")
    assert spans(result) == [(11, 5, ["книгу"])]


def test_russian_preposition_case():
    result = create_russian_engine().check("Я иду в школа")
    assert spans(result) == [(8, 5, ["школе", "школу"])]


# --- registry ---


@pytest.mark.parametrize("code", ["ja", "ja-JP", "JA_jp"])
def test_registry_accepts_any_code_spelling(code):
    assert create_default_registry().get_engine(code).language == "ja-JP"


def test_registry_returns_none_without_engine():
    registry = create_default_registry()
    assert registry.get_engine("en-US") is None
    assert registry.get_engine("auto") is None
    assert registry.get_engine(None) is None


def test_registry_lists_languages():
    assert create_default_registry().languages == ["ja-JP", "zh-CN", "it", "es", "ru-RU"]
