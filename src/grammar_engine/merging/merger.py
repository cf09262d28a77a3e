"""Reconcile annotation lists from several sources into one result list."""

from __future__ import annotations

from dataclasses import replace

from grammar_engine.merging.ranking import cap_replacements, rank_replacements
from grammar_engine.models.domain import EXTERNAL_SERVICE, Annotation, unique_spans
from grammar_engine.observability.logger import get_logger

logger = get_logger("merger")


def within_bounds(annotation: Annotation, text_length: int) -> bool:
    return annotation.offset >= 0 and annotation.length >= 1 and annotation.end <= text_length


class AnnotationMerger:
    def __init__(self, max_replacements: int = 3) -> None:
        self._max_replacements = max_replacements

    def merge(
        self,
        primary: list[Annotation],
        secondary: list[Annotation],
        text: str | None = None,
    ) -> list[Annotation]:
        """Primary wins on every shared (offset, length); result sorted by position.

        When text is given, annotations reaching past its end are dropped and
        grammar-service replacements are ranked against the flagged span.
        """
        combined = unique_spans(list(primary) + list(secondary))

        if text is not None:
            kept = [a for a in combined if within_bounds(a, len(text))]
            if len(kept) != len(combined):
                logger.warning("annotations_out_of_bounds", dropped=len(combined) - len(kept))
            combined = kept

        merged = [self._order_replacements(a, text) for a in combined]
        merged.sort(key=lambda a: a.key)
        return merged

    def _order_replacements(self, annotation: Annotation, text: str | None) -> Annotation:
        candidates = annotation.replacements
        if annotation.source == EXTERNAL_SERVICE and len(candidates) > 1:
            original = annotation.span_text(text) if text is not None else ""
            candidates = rank_replacements(original, candidates)
        return replace(annotation, replacements=cap_replacements(candidates, self._max_replacements))
