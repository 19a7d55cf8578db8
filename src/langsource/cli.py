"""Command-line interface for langsource."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import click
import httpx
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .client import (
    ConnectivityError,
    GeminiAPIError,
    GeminiClient,
    InvalidAPIKeyError,
    check_connectivity,
)
from .translator import STATUS_FAILED, STATUS_SKIPPED, generate_translations
from .utils import (
    API_KEY_ENV_VAR,
    SUPPORTED_LANGUAGES,
    parse_language_codes,
    save_api_key,
)

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = (
    "This package requires internet connection. "
    "Please check your internet connection."
)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="[+] %(levelname)s: %(message)s")
    # httpx logs full request URLs, which carry the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _verify_api_key(api_key: str) -> None:
    async with GeminiClient(api_key) as client:
        try:
            await client.verify_api_key()
        except InvalidAPIKeyError:
            raise
        except GeminiAPIError as e:
            logger.warning(
                f"Could not verify the API key (HTTP {e.status_code}), continuing."
            )


def _api_key_value(value: str) -> str:
    value = value.strip()
    if not value:
        raise click.BadParameter("Please enter a valid API key.")
    return value


def prompt_api_key(env_file: Path | None = None) -> None:
    """Ask for the API key unless one is set and the user keeps it."""
    if os.environ.get(API_KEY_ENV_VAR):
        if not click.confirm("Do you want to update the API Key?", default=False):
            return

    api_key = click.prompt(
        "Enter your Gemini API key", hide_input=True, value_proc=_api_key_value
    ).strip()
    asyncio.run(_verify_api_key(api_key))
    save_api_key(api_key, env_file)
    logger.info("API Key Added.")


def _language_value(value: str) -> list[str]:
    try:
        return parse_language_codes(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def prompt_languages() -> list[str]:
    click.echo("Supported languages:")
    for code, name in SUPPORTED_LANGUAGES.items():
        click.echo(f"  {code}  {name}")

    return click.prompt(
        "Select the languages you want to generate translations for (comma separated)",
        default=", ".join(SUPPORTED_LANGUAGES),
        value_proc=_language_value,
    )


def _base_file_value(value: str) -> Path:
    value = value.strip()
    if not value:
        raise click.BadParameter("Please enter a valid path.")
    if not value.endswith(".json"):
        raise click.BadParameter("Please enter a valid JSON file.")
    path = Path(value)
    if not path.exists():
        raise click.BadParameter("The specified path does not exist.")
    return path


def prompt_base_file() -> Path:
    return click.prompt(
        "Enter the path of the file containing the base translations",
        value_proc=_base_file_value,
    )


def _print_results(results) -> None:
    print()
    print("Translation results:")
    for result in results:
        label = f"{result.language} ({result.code})"
        if result.status == STATUS_FAILED:
            print(f"  {label}: FAILED - {result.error}")
        elif result.status == STATUS_SKIPPED:
            print(f"  {label}: skipped (same as base file)")
        else:
            print(f"  {label}: Written to {result.output_file}")


def run_generate() -> int:
    """Run the interactive generate command."""
    prompt_api_key()
    languages = prompt_languages()
    base_file = prompt_base_file()

    results = asyncio.run(generate_translations(base_file, languages))
    _print_results(results)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langsource",
        description="AI-powered CLI that generates i18n JSON translation files using Gemini",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Pick languages and a base file interactively
  langsource generate

  # Same, using the short alias
  langsource g

Environment Variables:
  {API_KEY_ENV_VAR}    Your Gemini API key (prompted and saved to .env if missing)
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.add_parser(
        "generate",
        aliases=["g"],
        help="Generate translations for supported languages",
        description="Generate translations for supported languages",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    # Load environment variables from .env file in current working directory
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if not asyncio.run(check_connectivity()):
            raise ConnectivityError(OFFLINE_MESSAGE)

        return run_generate()
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConnectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, click.Abort):
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
