"""LibreTranslate-compatible client for localizing annotation messages."""

from __future__ import annotations

import asyncio

import httpx

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.detection.language_codes import base_language
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.store import KeyValueStore

logger = get_logger("translation")

# Checking codes whose translation-service code is not just the base language
_TRANSLATION_CODES = {"zh-tw": "zt"}


def to_translation_code(code: str) -> str:
    cleaned = code.strip().replace("_", "-").lower()
    return _TRANSLATION_CODES.get(cleaned, base_language(cleaned))


class LibreTranslateClient:
    """Translate short messages; any failure yields the original text."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: KeyValueStore,
        base_url: str,
        api_key: str = "",
        target_language: str = "en",
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: float = 1800.0,
    ) -> None:
        self._client = client
        self._store = store
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._target = to_translation_code(target_language)
        self._timeout = timeout_seconds
        self._cache_ttl = cache_ttl_seconds

    async def translate(self, text: str, source_language: str) -> str:
        if not text or not source_language:
            return text
        source = to_translation_code(source_language)
        if source == self._target:
            return text

        key = SpanCache.make_key("translation", source, self._target, text)
        cached = await self._store.get(key)
        if cached is not None:
            return cached

        body = {"q": text, "source": source, "target": self._target, "format": "text"}
        if self._api_key:
            body["api_key"] = self._api_key
        try:
            response = await asyncio.wait_for(
                self._client.post(f"{self._base_url}/translate", json=body),
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as e:
            logger.warning("translation_failed", source=source, error=str(e))
            return text

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str) or not translated:
            logger.warning("translation_malformed", source=source)
            return text

        await self._store.set(key, translated, ttl_seconds=self._cache_ttl)
        return translated

    async def translate_batch(self, texts: list[str], source_language: str) -> list[str]:
        return list(await asyncio.gather(*(self.translate(t, source_language) for t in texts)))
