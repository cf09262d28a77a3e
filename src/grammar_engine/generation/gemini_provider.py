"""Google Gemini LLM provider using the google-genai SDK."""

from __future__ import annotations

import json

from google import genai
from google.genai import types
from pydantic import BaseModel

from grammar_engine.exceptions import GenerationError
from grammar_engine.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiProvider:
    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 500,
    ) -> str:
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            logger.warning("gemini_generation_failed", model=self._model, error=str(e))
            raise GenerationError(f"Gemini generation failed: {e}") from e
        return response.text or ""

    async def generate_structured(
        self,
        prompt: str,
        response_schema: type[BaseModel],
        system: str | None = None,
    ) -> BaseModel:
        config = types.GenerateContentConfig(
            temperature=0.0,
            response_mime_type="application/json",
            response_schema=response_schema,
            system_instruction=system,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
            return response_schema.model_validate(json.loads(response.text or "{}"))
        except Exception as e:
            logger.warning("gemini_structured_failed", model=self._model, error=str(e))
            raise GenerationError(f"Gemini structured generation failed: {e}") from e
