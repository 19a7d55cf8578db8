"""Core translation logic for langsource."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .client import GeminiClient, get_api_key
from .utils import SUPPORTED_LANGUAGES, get_language_name, load_base_document

# Load environment variables from .env file in current working directory
load_dotenv(find_dotenv(usecwd=True))

logger = logging.getLogger(__name__)

# Retry configuration - can be overridden via environment variables or .env file
MAX_RETRIES = int(os.environ.get("LANGSOURCE_MAX_RETRIES", "3"))
RETRY_DELAY = float(os.environ.get("LANGSOURCE_RETRY_DELAY", "3.0"))

STATUS_WRITTEN = "written"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

_OUTPUT_EXAMPLE = """{
  "key1": "translated_value1",
  "key2": "translated_value2",
  "key3": {
    "key4": "translated_value3"
  }
}"""


@dataclass
class TranslationResult:
    """Outcome of one language's translation job."""

    code: str
    language: str
    status: str
    output_file: Path | None = None
    attempts: int = 0
    error: BaseException | None = None


def build_prompt(base_data, target_language: str) -> str:
    """
    Build the instruction sent to the model for one target language.

    Args:
        base_data: Parsed base document
        target_language: Display name of the target language (e.g. 'German')
    """
    base_text = json.dumps(base_data, indent=2, ensure_ascii=False)
    lines = [
        "Your task is to translate the values of a given JSON file into the specified "
        "target language, without changing the structure or keys of the JSON. "
        "Follow these guidelines:",
        "1. If the target language is the same as the current language of the JSON "
        "values, return the original JSON.",
        "2. Do not translate URLs, code, names, path names, or any other text that "
        "should not be translated.",
        "3. Maintain the original JSON format without any additional text.",
        "4. If a value is not translatable or should not be translated, you can leave "
        "it as is.",
        f"Here is the JSON file and you need to translate it into {target_language}:",
        '"""',
        base_text,
        '"""',
        "Your output should adhere to the format below without any additional text:",
        _OUTPUT_EXAMPLE,
    ]
    return "\n".join(lines)


def extract_json(text: str):
    """
    Parse the JSON object found between the first '{' and the last '}'.

    Braces are not balanced or escape-checked, so anything the model writes
    around the object is ignored but stray braces inside that noise are not.

    Raises:
        ValueError: If the text has no '{' ... '}' span
        json.JSONDecodeError: If the span is not valid JSON
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ValueError(f"No JSON object found in model response: {text[:200]!r}")
    return json.loads(text[start : end + 1])


def write_translation(output_file: Path, translations) -> None:
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(translations, f, ensure_ascii=False, indent=2)
        f.write("\n")


async def translate_language(
    client: GeminiClient,
    base_file: Path,
    base_data,
    code: str,
    max_retries: int | None = None,
    retry_delay: float | None = None,
) -> TranslationResult:
    """
    Translate the base document into one language and write <code>.json.

    The job is attempted once plus up to max_retries more times with a fixed
    delay in between. The last error is re-raised once retries run out, with
    the number of attempts made stored on it as ``translation_attempts``.

    Returns:
        TranslationResult with status 'written' or 'skipped'
    """
    if max_retries is None:
        max_retries = MAX_RETRIES
    if retry_delay is None:
        retry_delay = RETRY_DELAY

    language = get_language_name(code)
    file_name = f"{code}.json"
    if file_name == base_file.name:
        logger.info(
            f"Skipping translation for {file_name} as it is the same as the base file."
        )
        return TranslationResult(code=code, language=language, status=STATUS_SKIPPED)

    output_file = base_file.parent / file_name
    prompt = build_prompt(base_data, language)
    attempts = 0

    while True:
        attempts += 1
        try:
            text = await client.generate(prompt)
            translations = extract_json(text)
            await asyncio.to_thread(write_translation, output_file, translations)
            logger.info(f"{file_name} generated successfully.")
            return TranslationResult(
                code=code,
                language=language,
                status=STATUS_WRITTEN,
                output_file=output_file,
                attempts=attempts,
            )
        except Exception as e:
            if attempts > max_retries:
                logger.error(f"Failed to generate {file_name} after {attempts} attempts.")
                e.translation_attempts = attempts
                raise
            logger.warning(
                f"Retrying ({attempts}/{max_retries}) for {file_name} due to error: {e}"
            )
            await asyncio.sleep(retry_delay)


async def generate_translations(
    base_file: Path,
    languages: list[str] | None = None,
    client: GeminiClient | None = None,
) -> list[TranslationResult]:
    """
    Generate translation files for the given languages.

    All languages are translated concurrently. A failing language is
    reported in its result and never cancels the others.

    Args:
        base_file: Path to the base translations JSON file
        languages: Target language codes, or None for every supported language
        client: GeminiClient to use; one is created (and closed) if omitted

    Returns:
        One TranslationResult per valid requested language, in request order

    Raises:
        FileNotFoundError: If the base file does not exist
        ValueError: If the base file is not valid JSON or no API key is set
    """
    base_file = Path(base_file)
    base_data = load_base_document(base_file)

    if languages is None:
        languages = list(SUPPORTED_LANGUAGES)

    valid_codes = []
    for code in languages:
        try:
            get_language_name(code)
        except ValueError as e:
            logger.warning(f"Skipping {code}: {e}")
            continue
        code = code.strip().lower()
        # One job per output file
        if code not in valid_codes:
            valid_codes.append(code)

    if not valid_codes:
        logger.warning("No valid target languages to translate.")
        return []

    owns_client = client is None
    if owns_client:
        client = GeminiClient(get_api_key())

    logger.info(f"Starting translation generation from ({base_file})")

    try:
        outcomes = await asyncio.gather(
            *(translate_language(client, base_file, base_data, code) for code in valid_codes),
            return_exceptions=True,
        )
    finally:
        if owns_client:
            await client.aclose()

    results = []
    for code, outcome in zip(valid_codes, outcomes):
        if isinstance(outcome, BaseException):
            results.append(
                TranslationResult(
                    code=code,
                    language=get_language_name(code),
                    status=STATUS_FAILED,
                    attempts=getattr(outcome, "translation_attempts", 0),
                    error=outcome,
                )
            )
        else:
            results.append(outcome)

    failed = [result for result in results if result.status == STATUS_FAILED]
    if failed:
        logger.warning(
            f"Translation finished with {len(failed)} of {len(results)} "
            "language(s) failing."
        )
    else:
        logger.info("Translation complete.")

    return results
