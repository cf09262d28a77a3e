"""Health, supported-language and cache endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from grammar_engine.api.dependencies import (
    get_cache,
    get_grammar_service,
    get_registry,
    get_settings,
)
from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.config.settings import Settings
from grammar_engine.exceptions import ExternalServiceError
from grammar_engine.models.schemas import (
    CacheStatsResponse,
    HealthResponse,
    LanguageInfo,
    LanguagesResponse,
)
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.grammar_service import GrammarService
from grammar_engine.rules.registry import RuleEngineRegistry

logger = get_logger("routes_health")

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    registry: RuleEngineRegistry = Depends(get_registry),
    cache: SpanCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        rule_engines=registry.languages,
        suggestions_enabled=settings.suggestions_enabled,
        translation_enabled=settings.translation_enabled,
        cache_size=cache.size,
    )


@router.get("/languages", response_model=LanguagesResponse)
async def languages(
    service: GrammarService = Depends(get_grammar_service),
    registry: RuleEngineRegistry = Depends(get_registry),
) -> LanguagesResponse:
    try:
        raw = await service.languages()
    except ExternalServiceError as e:
        logger.warning("languages_unavailable", status_code=e.status_code)
        raw = []
    return LanguagesResponse(
        languages=[LanguageInfo.model_validate(item) for item in raw],
        rule_engines=registry.languages,
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(cache: SpanCache = Depends(get_cache)) -> CacheStatsResponse:
    return CacheStatsResponse(**cache.stats())
