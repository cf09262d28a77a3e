"""Language-code normalization tables.

Three vocabularies meet here: raw ISO codes reported by detectors ("ja",
"zh-cn"), the checking codes used internally ("ja-JP", "zh-CN"), and the
codes the grammar service accepts. Everything downstream works with checking
codes only.
"""

from __future__ import annotations

# Raw detector code -> checking code
DETECTED_TO_CHECKING: dict[str, str] = {
    "en": "en-US",
    "fr": "fr",
    "de": "de-DE",
    "es": "es",
    "it": "it",
    "pt": "pt",
    "nl": "nl",
    "ru": "ru-RU",
    "pl": "pl-PL",
    "sv": "sv",
    "da": "da-DK",
    "sk": "sk-SK",
    "sl": "sl-SI",
    "ro": "ro-RO",
    "ca": "ca-ES",
    "gl": "gl-ES",
    "ga": "ga-IE",
    "br": "br-FR",
    "el": "el-GR",
    "uk": "uk-UA",
    "ar": "ar",
    "fa": "fa",
    "ta": "ta-IN",
    "tl": "tl-PH",
    "ja": "ja-JP",
    "zh": "zh-CN",
    "zh-cn": "zh-CN",
    "zh-tw": "zh-CN",
}

# Checking code -> grammar-service code
SERVICE_CODES: dict[str, str] = {
    "en-US": "en-US",
    "en-GB": "en-GB",
    "en-AU": "en-AU",
    "en-CA": "en-CA",
    "fr": "fr",
    "de-DE": "de-DE",
    "de-AT": "de-AT",
    "de-CH": "de-CH",
    "es": "es",
    "it": "it",
    "pt": "pt-PT",
    "pt-PT": "pt-PT",
    "pt-BR": "pt-BR",
    "nl": "nl",
    "ru-RU": "ru-RU",
    "pl-PL": "pl-PL",
    "sv": "sv",
    "da-DK": "da-DK",
    "sk-SK": "sk-SK",
    "sl-SI": "sl-SI",
    "ro-RO": "ro-RO",
    "ca-ES": "ca-ES",
    "gl-ES": "gl-ES",
    "ga-IE": "ga-IE",
    "br-FR": "br-FR",
    "el-GR": "el-GR",
    "uk-UA": "uk-UA",
    "ar": "ar",
    "fa": "fa",
    "ta-IN": "ta-IN",
    "tl-PH": "tl-PH",
    "ja-JP": "ja-JP",
    "zh-CN": "zh-CN",
}

_CANONICAL = {code.lower(): code for code in SERVICE_CODES}

AUTO = "auto"


def base_language(code: str) -> str:
    return code.strip().replace("_", "-").split("-")[0].lower()


def is_auto(code: str | None) -> bool:
    return code is None or code.strip().lower() in ("", AUTO)


def normalize_language(code: str | None) -> str | None:
    """Map any reasonable spelling of a language code to a checking code.

    Returns None for "auto" and for languages that cannot be checked.
    """
    if is_auto(code):
        return None
    cleaned = code.strip().replace("_", "-").lower()
    if cleaned in _CANONICAL:
        return _CANONICAL[cleaned]
    if cleaned in DETECTED_TO_CHECKING:
        return DETECTED_TO_CHECKING[cleaned]
    return DETECTED_TO_CHECKING.get(base_language(cleaned))


def to_service_code(code: str | None) -> str:
    checking = normalize_language(code)
    if checking is None:
        return AUTO
    return SERVICE_CODES.get(checking, AUTO)


def same_language(a: str, b: str) -> bool:
    """True for regional variants of one language, e.g. en-US and en-GB."""
    return base_language(a) == base_language(b)
