"""Async HTTP client for the Gemini generateContent API.

WHY: The converter needs a text-generation model for three things:
turning transcript windows into SRT, checking that a transcript has
timestamps at all, and proposing spelling corrections. This module
encapsulates the HTTP details behind a single client class so the
pipeline, CLI, server, and tests only see plain methods.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager — enter it to get an authenticated client, exit
to close the connection pool. generate() satisfies the pipeline's
Generator protocol; has_timestamps() and propose_corrections() build on
it with JSON response mode.

RULES:
- Always use the async context manager (async with GeminiClient(...) as client:)
- Default model is gemini-2.5-flash (override via GEMINI_MODEL)
- Non-2xx responses and blocked prompts raise GeminiAPIError
- has_timestamps() falls back to a regex check if the API call fails
- propose_corrections() returns [] if the API call fails
- A transport may be injected for tests (httpx.MockTransport)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from srt_converter.api.models import GenerateContentResponse
from srt_converter.config import (
    CORRECTIONS_TEMPERATURE,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    load_api_key,
)
from srt_converter.core.corrections import SpellingCorrection, parse_corrections
from srt_converter.core.prompts import (
    CORRECTIONS_PROMPT,
    CORRECTIONS_SCHEMA,
    TIMESTAMP_CHECK_PROMPT,
    TIMESTAMP_SAMPLE_CHARS,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_FALLBACK_RE = re.compile(r"\d{1,2}:\d{2}")


class GeminiAPIError(Exception):
    """Raised when the Gemini API returns an error response.

    WHY: Callers need a typed exception to distinguish API errors from
    network errors or other failures.

    HOW: Wraps the HTTP status code and response body.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Gemini API error {status_code}: {message}")


class GeminiClient:
    """Async client for the Gemini text-generation API.

    WHY: Provides a clean, typed interface for every generator call the
    converter makes. Handles auth, request shaping, and error wrapping.

    HOW: Wraps httpx.AsyncClient with the x-goog-api-key header. Use as
    an async context manager to ensure the connection pool is closed.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url defaults to GEMINI_BASE_URL from config
    - model defaults to GEMINI_MODEL from config
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(120.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Raw generation
    # ------------------------------------------------------------------

    async def generate(
        self,
        instructions: str,
        content: str,
        temperature: float,
        response_mime_type: Optional[str] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Send one generateContent request and return the generated text.

        WHY: This is the Generator collaborator the pipeline calls once
        per transcript window.

        HOW: POSTs to /models/{model}:generateContent with the system
        instruction, a single user turn, and the generation config.

        RULES:
        - instructions are sent as systemInstruction (omitted when empty)
        - Raises GeminiAPIError on non-2xx responses
        - Raises GeminiAPIError when the response has no candidates
          (blocked prompt); the block reason is kept in the message

        Args:
            instructions: System instruction text.
            content: The user prompt.
            temperature: Sampling temperature.
            response_mime_type: Optional, e.g. "application/json".
            response_schema: Optional JSON response schema.

        Returns:
            The text of the first candidate.
        """
        client = self._ensure_client()

        generation_config: Dict[str, Any] = {"temperature": temperature}
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type
        if response_schema:
            generation_config["responseSchema"] = response_schema

        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": content}]}],
            "generationConfig": generation_config,
        }
        if instructions:
            body["systemInstruction"] = {"parts": [{"text": instructions}]}

        resp = await client.post(
            "/models/{}:generateContent".format(self._model),
            json=body,
        )
        if resp.status_code != 200:
            raise GeminiAPIError(resp.status_code, resp.text)

        parsed = GenerateContentResponse.from_dict(resp.json())
        if not parsed.candidates:
            raise GeminiAPIError(
                resp.status_code,
                "No candidates returned (block reason: {})".format(parsed.block_reason or "unknown"),
            )
        return parsed.text

    # ------------------------------------------------------------------
    # Transcript checks
    # ------------------------------------------------------------------

    async def has_timestamps(self, text: str) -> bool:
        """Ask the model whether the transcript contains timestamps.

        WHY: Transcripts pasted without timestamps cannot be anchored, so
        the conversion would produce a meaningless track. Checking first
        gives the user a clear error instead.

        HOW: Sends the first 1000 characters in JSON response mode and
        reads the "hasTimestamps" flag.

        RULES:
        - Any API, network, or JSON error falls back to a regex check
          for an `m:ss`-shaped substring
        """
        prompt = TIMESTAMP_CHECK_PROMPT.format(sample=text[:TIMESTAMP_SAMPLE_CHARS])
        try:
            raw = await self.generate(
                "", prompt, 0.0, response_mime_type="application/json"
            )
            result = json.loads(raw or "{}")
            return isinstance(result, dict) and result.get("hasTimestamps") is True
        except (GeminiAPIError, httpx.HTTPError, ValueError) as exc:
            logger.warning("Timestamp check failed, using regex fallback: %s", exc)
            return bool(_TIMESTAMP_FALLBACK_RE.search(text))

    async def propose_corrections(self, text: str) -> List[SpellingCorrection]:
        """Ask the model for likely transcription errors.

        RULES:
        - Uses a response schema so the output is a JSON array
        - Insignificant (case/punctuation-only) changes are filtered out
        - Any API, network, or JSON error returns []
        """
        try:
            raw = await self.generate(
                "",
                CORRECTIONS_PROMPT.format(transcript=text),
                CORRECTIONS_TEMPERATURE,
                response_mime_type="application/json",
                response_schema=CORRECTIONS_SCHEMA,
            )
            return parse_corrections(raw or "[]")
        except (GeminiAPIError, httpx.HTTPError, ValueError) as exc:
            logger.error("Proposing corrections failed: %s", exc)
            return []
