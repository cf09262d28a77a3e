"""Tests for annotation merging and replacement ranking."""

from __future__ import annotations

from conftest import service_annotation

from grammar_engine.merging.merger import AnnotationMerger
from grammar_engine.merging.ranking import rank_replacements
from grammar_engine.models.domain import (
    GENERATIVE_SUGGESTION,
    Annotation,
    Category,
    rule_engine_source,
)


def generative(offset, length, replacement):
    return Annotation(
        offset=offset,
        length=length,
        message="suggested",
        category=Category.GRAMMAR,
        source=GENERATIVE_SUGGESTION,
        replacements=[replacement],
    )


def test_primary_wins_on_shared_span():
    primary = [generative(0, 4, "had")]
    secondary = [service_annotation(0, 4, ["has"]), service_annotation(10, 2, ["is"])]
    merged = AnnotationMerger().merge(primary, secondary)
    assert [(a.offset, a.source) for a in merged] == [
        (0, GENERATIVE_SUGGESTION),
        (10, "external-service"),
    ]


def test_duplicates_within_one_list_collapse():
    secondary = [service_annotation(3, 2, ["a"]), service_annotation(3, 2, ["b"])]
    merged = AnnotationMerger().merge([], secondary)
    assert len(merged) == 1
    assert merged[0].replacements == ["a"]


def test_result_sorted_by_offset_then_length():
    secondary = [
        service_annotation(9, 1),
        service_annotation(2, 3),
        service_annotation(2, 1),
    ]
    merged = AnnotationMerger().merge([], secondary)
    assert [a.key for a in merged] == [(2, 1), (2, 3), (9, 1)]


def test_out_of_bounds_annotations_dropped_when_text_given():
    secondary = [service_annotation(0, 3), service_annotation(2, 10)]
    merged = AnnotationMerger().merge([], secondary, text="short")
    assert [a.key for a in merged] == [(0, 3)]


def test_service_replacements_ranked_and_capped():
    text = "Their is a problem"
    secondary = [service_annotation(0, 5, ["there", "They're", "There"])]
    merged = AnnotationMerger(max_replacements=2).merge([], secondary, text=text)
    assert merged[0].replacements == ["There", "They're"]


def test_rule_engine_replacements_keep_authored_order():
    rule = Annotation(
        offset=4,
        length=4,
        message="invalid verb",
        category=Category.SPELLING,
        source=rule_engine_source("it"),
        replacements=["va", "vanno", "andava", "vado"],
    )
    merged = AnnotationMerger().merge([], [rule], text="Lui vano al parco")
    assert merged[0].replacements == ["va", "vanno", "andava"]


def test_inputs_are_not_mutated():
    annotation = service_annotation(0, 5, ["there", "There"])
    AnnotationMerger(max_replacements=1).merge([], [annotation], text="Their")
    assert annotation.replacements == ["there", "There"]


def test_rank_prefers_common_words():
    assert rank_replacements("hav", ["haven", "have"]) == ["have", "haven"]


def test_rank_breaks_ties_alphabetically():
    assert rank_replacements("x", ["b", "a"]) == ["a", "b"]


def test_rank_removes_duplicate_candidates():
    assert rank_replacements("teh", ["the", "the"]) == ["the"]
