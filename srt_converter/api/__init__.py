"""Gemini API client package — async HTTP interface to the text generator.

WHY: The converter delegates subtitle generation, timestamp detection,
and correction proposals to a hosted model. This package encapsulates
all Gemini API communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. The GeminiClient
class provides one method per generator use. Response data is parsed
into typed dataclasses defined in models.py.

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Authentication is via the x-goog-api-key header from config
"""

from srt_converter.api.client import GeminiAPIError, GeminiClient
from srt_converter.api.models import GenerateContentResponse

__all__ = ["GeminiAPIError", "GeminiClient", "GenerateContentResponse"]
