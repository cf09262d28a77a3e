"""Registry mapping language codes to rule engines."""

from __future__ import annotations

from grammar_engine.detection.language_codes import base_language, is_auto
from grammar_engine.protocols.rule_engine import Engine
from grammar_engine.rules.chinese import create_chinese_engine
from grammar_engine.rules.italian import create_italian_engine
from grammar_engine.rules.japanese import create_japanese_engine
from grammar_engine.rules.russian import create_russian_engine
from grammar_engine.rules.spanish import create_spanish_engine


class RuleEngineRegistry:
    def __init__(self) -> None:
        self._engines: dict[str, Engine] = {}

    def register(self, engine: Engine) -> None:
        self._engines[base_language(engine.language)] = engine

    def get_engine(self, language: str | None) -> Engine | None:
        """Engine for any spelling of a language code ("ja", "ja-JP", "JA_jp"), or None."""
        if is_auto(language):
            return None
        return self._engines.get(base_language(language))

    @property
    def languages(self) -> list[str]:
        return [engine.language for engine in self._engines.values()]


def create_default_registry() -> RuleEngineRegistry:
    """Create a registry with all built-in rule engines."""
    registry = RuleEngineRegistry()
    for engine in (
        create_japanese_engine(),
        create_chinese_engine(),
        create_italian_engine(),
        create_spanish_engine(),
        create_russian_engine(),
    ):
        registry.register(engine)
    return registry
