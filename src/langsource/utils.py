"""Utility functions for langsource."""

from __future__ import annotations

import json
import os
from pathlib import Path
from types import MappingProxyType

import pycountry
from dotenv import set_key

API_KEY_ENV_VAR = "LANGSOURCE_API_KEY"

# Order matters: it is the order languages are offered and translated in
SUPPORTED_LANGUAGE_CODES = (
    "en",
    "ja",
    "ko",
    "ru",
    "pt",
    "ar",
    "de",
    "fr",
    "es",
    "it",
    "zh",
    "ur",
)


def _lookup_language_name(code: str) -> str:
    language = pycountry.languages.get(alpha_2=code)
    if language is None:
        raise ValueError(f"Unknown language code: {code}")
    return language.name


SUPPORTED_LANGUAGES = MappingProxyType(
    {code: _lookup_language_name(code) for code in SUPPORTED_LANGUAGE_CODES}
)


def get_language_name(code: str) -> str:
    """
    Get the display name for a supported language code.

    Args:
        code: Two-letter ISO 639-1 language code (e.g., 'de', 'ja')

    Returns:
        Full language name (e.g., 'German', 'Japanese')

    Raises:
        ValueError: If the language code is not in the supported table
    """
    code_lower = code.strip().lower()
    if code_lower not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Unsupported language code: {code}. "
            f"Supported codes are: {', '.join(SUPPORTED_LANGUAGES)}"
        )
    return SUPPORTED_LANGUAGES[code_lower]


def parse_language_codes(value: str) -> list[str]:
    """
    Parse a comma or whitespace separated list of language codes.

    Duplicates are dropped, first occurrence wins.

    Raises:
        ValueError: If the list is empty or contains an unsupported code
    """
    codes = []
    for raw in value.replace(",", " ").split():
        code = raw.lower()
        get_language_name(code)
        if code not in codes:
            codes.append(code)

    if not codes:
        raise ValueError("Please select at least one language.")
    return codes


def load_base_document(path: Path):
    """
    Load and parse the base translations file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON
    """
    if not path.is_file():
        raise FileNotFoundError(f"Base translations file not found: {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse ({path}): {e}") from e


def save_api_key(api_key: str, env_file: Path | None = None) -> Path:
    """
    Persist the API key to a .env file and the current process environment.

    Args:
        api_key: The Gemini API key
        env_file: Target .env file, defaults to .env in the working directory

    Returns:
        Path of the .env file written
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    env_file.touch(exist_ok=True)
    set_key(str(env_file), API_KEY_ENV_VAR, api_key, quote_mode="never")
    os.environ[API_KEY_ENV_VAR] = api_key
    return env_file
