"""HTTP adapter for a LanguageTool-compatible grammar service."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.detection.language_codes import AUTO, to_service_code
from grammar_engine.exceptions import ExternalServiceError, ServiceTimeoutError
from grammar_engine.models.domain import (
    EXTERNAL_SERVICE,
    Annotation,
    Category,
    ExternalCheckResult,
)
from grammar_engine.observability.logger import get_logger
from grammar_engine.protocols.store import KeyValueStore

logger = get_logger("language_tool")

# rule.category.id -> annotation category
CATEGORY_IDS: dict[str, Category] = {
    "TYPOS": Category.SPELLING,
    "SPELLING": Category.SPELLING,
    "PUNCTUATION": Category.PUNCTUATION,
    "TYPOGRAPHY": Category.PUNCTUATION,
    "STYLE": Category.STYLE,
    "REDUNDANCY": Category.STYLE,
    "PLAIN_ENGLISH": Category.STYLE,
    "COLLOCATIONS": Category.STYLE,
}

# rule.issueType -> annotation category, consulted before the category id
ISSUE_TYPES: dict[str, Category] = {
    "misspelling": Category.SPELLING,
    "whitespace": Category.FORMATTING,
    "typographical": Category.PUNCTUATION,
    "style": Category.STYLE,
}


def map_category(rule: dict[str, Any]) -> Category:
    rule_id = str(rule.get("id", "")).upper()
    if "WHITESPACE" in rule_id or "SPACE" in rule_id.split("_"):
        return Category.FORMATTING
    issue = ISSUE_TYPES.get(str(rule.get("issueType", "")).lower())
    if issue is not None:
        return issue
    category = rule.get("category")
    category_id = str(category.get("id", "")).upper() if isinstance(category, dict) else ""
    return CATEGORY_IDS.get(category_id, Category.GRAMMAR)


def utf16_index_map(text: str) -> list[int] | None:
    """Map UTF-16 code-unit indexes to code-point indexes.

    None when the text has no characters outside the BMP, in which case both
    index spaces coincide.
    """
    if all(ord(ch) <= 0xFFFF for ch in text):
        return None
    mapping: list[int] = []
    for index, ch in enumerate(text):
        mapping.append(index)
        if ord(ch) > 0xFFFF:
            mapping.append(index + 1)
    mapping.append(len(text))
    return mapping


def normalize_matches(text: str, matches: list[dict[str, Any]]) -> list[Annotation]:
    """Convert raw service matches into annotations over code-point offsets."""
    index_map = utf16_index_map(text)
    annotations: list[Annotation] = []
    for match in matches:
        if not isinstance(match, dict):
            continue
        try:
            offset = int(match["offset"])
            end = offset + int(match["length"])
        except (KeyError, TypeError, ValueError):
            continue
        if index_map is not None:
            if offset < 0 or end >= len(index_map):
                continue
            offset, end = index_map[offset], index_map[end]
        if offset < 0 or end <= offset or end > len(text):
            continue

        rule = match.get("rule")
        if not isinstance(rule, dict):
            rule = {}
        message = str(match.get("message") or "")
        annotations.append(
            Annotation(
                offset=offset,
                length=end - offset,
                message=message,
                short_message=str(match.get("shortMessage") or message),
                category=map_category(rule),
                replacements=[
                    str(r["value"])
                    for r in match.get("replacements") or []
                    if isinstance(r, dict) and r.get("value") is not None
                ],
                source=EXTERNAL_SERVICE,
                rule_id=str(rule.get("id", "")),
            )
        )
    return annotations


class LanguageToolAdapter:
    def __init__(
        self,
        client: httpx.AsyncClient,
        store: KeyValueStore,
        base_url: str = "https://api.languagetool.org/v2",
        timeout_seconds: float = 10.0,
        level: str = "default",
        cache_ttl_seconds: float | None = None,
        languages_ttl_seconds: float = 3600.0,
    ) -> None:
        self._client = client
        self._store = store
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._level = level
        self._cache_ttl = cache_ttl_seconds
        self._languages_ttl = languages_ttl_seconds

    async def check(self, text: str, language: str = AUTO) -> ExternalCheckResult:
        start = time.monotonic()
        service_language = to_service_code(language)
        data = await self._check_raw(text, service_language)

        reported = data.get("language") or {}
        detected = reported.get("detectedLanguage") or {}
        return ExternalCheckResult(
            matches=normalize_matches(text, data["matches"]),
            language=reported.get("code") or service_language,
            detected_language=detected.get("code"),
            detected_confidence=float(detected.get("confidence") or 0.0),
            performance_ms=(time.monotonic() - start) * 1000,
        )

    async def detect_language(self, text: str) -> tuple[str, float]:
        data = await self._check_raw(text, AUTO)
        detected = (data.get("language") or {}).get("detectedLanguage") or {}
        code = detected.get("code")
        if not code or not isinstance(code, str):
            raise ExternalServiceError("No detected language in service response", status_code=502)
        return code, float(detected.get("confidence") or 0.0)

    async def languages(self) -> list[dict[str, Any]]:
        key = SpanCache.make_key("languagetool-languages", self._base_url)
        cached = await self._store.get(key)
        if cached is not None:
            return cached
        data = await self._request("GET", "/languages")
        if not isinstance(data, list):
            raise ExternalServiceError("Unexpected languages response", status_code=502, details=data)
        await self._store.set(key, data, ttl_seconds=self._languages_ttl)
        return data

    async def _check_raw(self, text: str, service_language: str) -> dict[str, Any]:
        key = SpanCache.make_key("languagetool", service_language, text)
        cached = await self._store.get(key)
        if cached is not None:
            logger.debug("service_cache_hit", language=service_language)
            return cached

        data = await self._request(
            "POST",
            "/check",
            data={
                "text": text,
                "language": service_language,
                "enabledOnly": "false",
                "level": self._level,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("matches"), list):
            raise ExternalServiceError(
                "Response did not contain matches", status_code=502, details=data
            )
        await self._store.set(key, data, ttl_seconds=self._cache_ttl)
        return data

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method, url, headers={"Accept": "application/json"}, **kwargs
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("service_timeout", path=path, timeout_seconds=self._timeout)
            raise ServiceTimeoutError() from e
        except httpx.HTTPError as e:
            logger.warning("service_unreachable", path=path, error=str(e))
            raise ExternalServiceError(
                f"Grammar service unreachable: {e}", status_code=503
            ) from e

        if response.status_code >= 400:
            logger.warning("service_error", path=path, status_code=response.status_code)
            raise ExternalServiceError(
                f"Grammar service error: {response.reason_phrase}",
                status_code=response.status_code,
                details=response.text[:500],
            )
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "Grammar service returned invalid JSON", status_code=502
            ) from e
