"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from grammar_engine.api.middleware import RequestTimingMiddleware
from grammar_engine.api.routes_check import router as check_router
from grammar_engine.api.routes_health import router as health_router
from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.exceptions import ConfigurationError
from grammar_engine.generation.gemini_provider import GeminiProvider
from grammar_engine.generation.suggestion_generator import SuggestionGenerator
from grammar_engine.merging.merger import AnnotationMerger
from grammar_engine.observability.logger import get_logger, setup_logging
from grammar_engine.pipeline.check_pipeline import CheckOrchestrator
from grammar_engine.rules.registry import create_default_registry
from grammar_engine.services.language_tool import LanguageToolAdapter
from grammar_engine.services.translation import LibreTranslateClient
from grammar_engine.verification.suggestion_validator import (
    PromptSuggestionValidator,
    ServiceSuggestionValidator,
)

logger = get_logger("app")


def build_orchestrator(
    settings: Settings, client: httpx.AsyncClient, cache: SpanCache
) -> tuple[CheckOrchestrator, LanguageToolAdapter, LanguageIdentifier]:
    """Wire every component of the check path around one HTTP client and one store."""
    if not settings.languagetool_url:
        raise ConfigurationError("GRAMMAR_LANGUAGETOOL_URL must be set")
    if settings.translate_messages and not settings.translate_url:
        raise ConfigurationError("GRAMMAR_TRANSLATE_MESSAGES requires GRAMMAR_TRANSLATE_URL")

    grammar_service = LanguageToolAdapter(
        client=client,
        store=cache,
        base_url=settings.languagetool_url,
        timeout_seconds=settings.languagetool_timeout_seconds,
        level=settings.languagetool_level,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        languages_ttl_seconds=settings.languages_cache_ttl_seconds,
    )
    identifier = LanguageIdentifier(settings, grammar_service=grammar_service)

    # Generative suggestions only when an API key is configured
    generator = None
    validator = None
    if settings.suggestions_enabled:
        llm = GeminiProvider(api_key=settings.google_api_key, model=settings.gemini_model)
        generator = SuggestionGenerator(
            llm,
            temperature=settings.gemini_temperature,
            max_tokens=settings.gemini_max_tokens,
        )
        if settings.suggestion_validation_mode == "prompt":
            validator = PromptSuggestionValidator(llm)
        else:
            validator = ServiceSuggestionValidator(grammar_service)

    translator = None
    if settings.translation_enabled:
        translator = LibreTranslateClient(
            client=client,
            store=cache,
            base_url=settings.translate_url,
            api_key=settings.translate_api_key,
            target_language=settings.translate_target_language,
            timeout_seconds=settings.translate_timeout_seconds,
        )

    orchestrator = CheckOrchestrator(
        identifier=identifier,
        registry=create_default_registry(),
        merger=AnnotationMerger(max_replacements=settings.max_replacements),
        cache=cache,
        settings=settings,
        grammar_service=grammar_service,
        generator=generator,
        validator=validator,
        translator=translator,
    )
    return orchestrator, grammar_service, identifier


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    setup_logging()

    cache = SpanCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
        sweep_interval_seconds=settings.cache_sweep_interval_seconds,
    )
    cache.start()
    client = httpx.AsyncClient()

    orchestrator, grammar_service, identifier = build_orchestrator(settings, client, cache)

    # Attach to app state
    app.state.settings = settings
    app.state.cache = cache
    app.state.http_client = client
    app.state.grammar_service = grammar_service
    app.state.identifier = identifier
    app.state.registry = orchestrator.registry
    app.state.orchestrator = orchestrator

    logger.info(
        "startup_complete",
        rule_engines=orchestrator.registry.languages,
        suggestions_enabled=settings.suggestions_enabled,
        translation_enabled=settings.translation_enabled,
    )

    if settings.warmup_on_startup:
        await orchestrator.warm_up()

    yield

    await cache.stop()
    await client.aclose()
    logger.info("shutdown_complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Grammar Engine",
        version="1.0.0",
        description="Multilingual grammar checking across rule engines and external services",
        lifespan=lifespan,
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(check_router, tags=["check"])
    return app
