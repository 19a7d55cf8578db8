"""Async client for the Gemini generateContent endpoint."""

from __future__ import annotations

import logging
import os

import httpx
from dotenv import find_dotenv, load_dotenv

from .utils import API_KEY_ENV_VAR

# Load environment variables from .env file in current working directory
load_dotenv(find_dotenv(usecwd=True))

logger = logging.getLogger(__name__)

API_HOST = "generativelanguage.googleapis.com"
API_BASE_URL = f"https://{API_HOST}/v1beta/models"

# Model configuration - can be overridden via environment variables or .env file
MODEL = os.environ.get("LANGSOURCE_MODEL", "gemini-1.5-flash")
TEMPERATURE = float(os.environ.get("LANGSOURCE_TEMPERATURE", "0.4"))
MAX_OUTPUT_TOKENS = int(os.environ.get("LANGSOURCE_MAX_OUTPUT_TOKENS", "3000"))

# Key verification sends a tiny request with its own generation settings
PROBE_PROMPT = "Hello, how are you?"
PROBE_TEMPERATURE = 0.5
PROBE_MAX_OUTPUT_TOKENS = 100

CONNECTIVITY_TIMEOUT = 3.0


class GeminiAPIError(httpx.HTTPStatusError):
    """
    The API answered with a non-2xx status.

    The message leaves out the request URL, which carries the API key.
    """

    def __init__(self, response: httpx.Response):
        self.status_code = response.status_code
        self.body = response.text
        message = f"Gemini API returned HTTP {self.status_code}"
        if self.body:
            message += f": {self.body[:200]}"
        super().__init__(message, request=response.request, response=response)


class InvalidAPIKeyError(ValueError):
    """The API rejected the configured key."""


class ConnectivityError(ConnectionError):
    """The generative-language host cannot be reached."""


def get_api_key() -> str:
    """Read the API key from the environment, failing if it is missing."""
    api_key = os.environ.get(API_KEY_ENV_VAR)
    if not api_key:
        raise ValueError(
            f"Missing API key. Please set the {API_KEY_ENV_VAR} environment variable."
        )
    return api_key


class GeminiClient:
    """
    Thin wrapper around the Gemini generateContent REST call.

    A single underlying httpx.AsyncClient is shared by all requests made
    through one instance; use it as an async context manager to close it.
    """

    def __init__(
        self,
        api_key: str,
        model: str = MODEL,
        temperature: float = TEMPERATURE,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._owns_http_client = http_client is None
        # Generation can take a while; requests are never cut short
        self._http = http_client or httpx.AsyncClient(timeout=None)

    @property
    def url(self) -> str:
        return f"{API_BASE_URL}/{self.model}:generateContent"

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    def build_payload(
        self,
        prompt: str,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature if temperature is None else temperature,
                "maxOutputTokens": (
                    self.max_output_tokens
                    if max_output_tokens is None
                    else max_output_tokens
                ),
            },
        }

    async def _post(self, payload: dict) -> httpx.Response:
        response = await self._http.post(
            self.url,
            params={"key": self.api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise GeminiAPIError(response)
        return response

    async def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the text of the first candidate.

        Raises:
            GeminiAPIError: On a non-2xx response (an httpx.HTTPStatusError)
            httpx.TransportError: If the request could not be sent
            ValueError: If the response has no candidate text
        """
        response = await self._post(self.build_payload(prompt))
        data = response.json()
        if not data:
            raise ValueError("Failed to generate translation: No response data.")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Unexpected response: {str(data)[:200]}") from e
        return text.strip()

    async def verify_api_key(self) -> None:
        """
        Check the key with a minimal request.

        Raises:
            InvalidAPIKeyError: If the API answers 400 for the probe
        """
        payload = self.build_payload(
            PROBE_PROMPT,
            temperature=PROBE_TEMPERATURE,
            max_output_tokens=PROBE_MAX_OUTPUT_TOKENS,
        )
        try:
            await self._post(payload)
        except GeminiAPIError as e:
            if e.status_code == 400:
                raise InvalidAPIKeyError("Invalid API Key.") from e
            raise


async def check_connectivity(
    host: str = API_HOST,
    timeout: float = CONNECTIVITY_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Return True if any HTTPS response arrives from host within timeout."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            await client.head(f"https://{host}")
    except httpx.TransportError as e:
        logger.debug("Connectivity check against %s failed: %s", host, e)
        return False
    return True
