"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.config.settings import Settings
from grammar_engine.detection.language_identifier import LanguageIdentifier
from grammar_engine.pipeline.check_pipeline import CheckOrchestrator
from grammar_engine.protocols.grammar_service import GrammarService
from grammar_engine.rules.registry import RuleEngineRegistry


def get_orchestrator(request: Request) -> CheckOrchestrator:
    return request.app.state.orchestrator


def get_identifier(request: Request) -> LanguageIdentifier:
    return request.app.state.identifier


def get_grammar_service(request: Request) -> GrammarService:
    return request.app.state.grammar_service


def get_registry(request: Request) -> RuleEngineRegistry:
    return request.app.state.registry


def get_cache(request: Request) -> SpanCache:
    return request.app.state.cache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
