"""Metric recording helpers for checks."""

from __future__ import annotations

from grammar_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_detection_metrics(
    trace_id: str,
    language: str,
    confidence: float,
    source: str,
    elapsed_ms: float,
) -> None:
    logger.info(
        "detection_metrics",
        trace_id=trace_id,
        language=language,
        confidence=round(confidence, 4),
        source=source,
        elapsed_ms=round(elapsed_ms, 2),
    )


def log_check_metrics(
    trace_id: str,
    language: str,
    source_counts: dict[str, int],
    total_matches: int,
    elapsed_ms: float,
) -> None:
    logger.info(
        "check_metrics",
        trace_id=trace_id,
        language=language,
        source_counts=source_counts,
        total_matches=total_matches,
        elapsed_ms=round(elapsed_ms, 2),
    )


def log_latency(trace_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
