"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # General-purpose grammar service (LanguageTool-compatible)
    languagetool_url: str = "https://api.languagetool.org/v2"
    languagetool_timeout_seconds: float = 10.0
    languagetool_level: Literal["default", "picky"] = "default"

    # Generative suggestions / Gemini
    google_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.1
    gemini_max_tokens: int = 500
    suggestion_languages: list[str] = ["en"]
    suggestion_validation_mode: Literal["service", "prompt"] = "service"

    # Translation of annotation messages (LibreTranslate-compatible)
    translate_url: str = ""
    translate_api_key: str = ""
    translate_messages: bool = False
    translate_target_language: str = "en"
    translate_timeout_seconds: float = 10.0

    # Language detection
    fallback_language: str = "en-US"
    statistical_min_confidence: float = 0.5
    statistical_min_words: int = 3
    mismatch_confidence_threshold: float = 0.6

    # Caching
    cache_ttl_seconds: float = 300.0
    cache_max_entries: int = 1000
    cache_sweep_interval_seconds: float = 300.0
    languages_cache_ttl_seconds: float = 3600.0

    # Merging
    max_replacements: int = 3
    always_query_external: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_text_length: int = 20000
    rate_limit_requests_per_minute: int = 60
    warmup_on_startup: bool = False

    model_config = {"env_file": ".env", "env_prefix": "GRAMMAR_"}

    @property
    def suggestions_enabled(self) -> bool:
        return bool(self.google_api_key)

    @property
    def translation_enabled(self) -> bool:
        return self.translate_messages and bool(self.translate_url)
