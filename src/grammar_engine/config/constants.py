"""Fixed constants that are not worth exposing as settings."""

from __future__ import annotations

# Confidence assigned by the Unicode-range heuristic
UNICODE_PATTERN_CONFIDENCE = 0.95

# Detections at or above this confidence are flagged reliable
RELIABLE_CONFIDENCE = 0.8

# Confidence recorded on generative suggestions once validated
SERVICE_VALIDATED_CONFIDENCE = 1.0
PROMPT_VALIDATED_CONFIDENCE = 0.8


# Sample texts used to warm the grammar service on startup
WARMUP_SAMPLES: dict[str, str] = {
    "en-US": "Hello world",
    "fr": "Bonjour le monde",
    "de-DE": "Hallo Welt",
    "es": "Hola mundo",
    "pt": "Olá mundo",
    "it": "Ciao mondo",
    "ru-RU": "Привет мир",
    "ja-JP": "こんにちは世界",
    "zh-CN": "你好世界",
}

GENERIC_FAILURE_MESSAGE = "Grammar check failed"
