"""Grammar check and language detection endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from grammar_engine.api.dependencies import get_identifier, get_orchestrator, get_settings
from grammar_engine.api.rate_limiter import rate_limit
from grammar_engine.config.constants import GENERIC_FAILURE_MESSAGE
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.exceptions import AllSourcesExhausted
from grammar_engine.models.schemas import (
    CheckRequest,
    CheckResponse,
    DetectionSchema,
    DetectRequest,
)
from grammar_engine.pipeline.check_pipeline import CheckOrchestrator

router = APIRouter()


def _enforce_length(text: str, settings: Settings) -> None:
    if len(text) > settings.max_text_length:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Text exceeds {settings.max_text_length} characters.",
        )


@router.post("/check", response_model=CheckResponse)
async def check(
    request: CheckRequest,
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
    _client: str = Depends(rate_limit),
) -> CheckResponse:
    _enforce_length(request.text, settings)
    try:
        result = await orchestrator.check_text(request.text, request.language)
    except AllSourcesExhausted:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=GENERIC_FAILURE_MESSAGE
        )
    return CheckResponse.model_validate(result)


@router.post("/detect", response_model=DetectionSchema)
async def detect(
    request: DetectRequest,
    identifier: LanguageIdentifier = Depends(get_identifier),
    settings: Settings = Depends(get_settings),
    _client: str = Depends(rate_limit),
) -> DetectionSchema:
    _enforce_length(request.text, settings)
    detection = await identifier.identify(request.text)
    return DetectionSchema.model_validate(detection)
