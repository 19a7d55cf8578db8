"""langsource: Generate localized JSON translation files with Gemini."""

__version__ = "1.0.5"

from .client import (
    ConnectivityError,
    GeminiAPIError,
    GeminiClient,
    InvalidAPIKeyError,
    check_connectivity,
)
from .translator import (
    TranslationResult,
    build_prompt,
    extract_json,
    generate_translations,
    translate_language,
)
from .utils import SUPPORTED_LANGUAGES, get_language_name

__all__ = [
    "__version__",
    "ConnectivityError",
    "GeminiAPIError",
    "InvalidAPIKeyError",
    "GeminiClient",
    "check_connectivity",
    "TranslationResult",
    "build_prompt",
    "extract_json",
    "generate_translations",
    "translate_language",
    "SUPPORTED_LANGUAGES",
    "get_language_name",
]
