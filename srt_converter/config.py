"""Configuration constants, timing policy defaults, and .env loading.

WHY: Centralizes all tunable values (window size, timing policy, Gemini
endpoint, daily quota) so they are easy to find, update, and override.
The core modules never read the environment themselves — callers pass
these values in — so the constants here are the single source of
defaults.

HOW: python-dotenv loads the .env file on import. Constants are
module-level values read via os.getenv with typed defaults. The
load_api_key() function provides a clear error when the key is missing.

RULES:
- Timing constants are integer milliseconds
- MAX_WINDOW_CHARS bounds each transcript window sent to the generator
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad values."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Chunking and timing policy
# ---------------------------------------------------------------------------

MAX_WINDOW_CHARS = _int_env("MAX_WINDOW_CHARS", 6000)
"""Character budget for one transcript window (a line is never split)."""

MAX_CONCURRENT_WINDOWS = max(1, _int_env("MAX_CONCURRENT_WINDOWS", 4))
"""Generator requests in flight at once for one conversion."""

TRAILING_DURATION_MS = _int_env("TRAILING_DURATION_MS", 4000)
"""Display duration of the last block in a track (no next anchor)."""

FLICKER_BUFFER_MS = _int_env("FLICKER_BUFFER_MS", 1)
"""Gap between a block's end and the next block's start."""

MIN_DURATION_MS = _int_env("MIN_DURATION_MS", 1000)
"""Fallback duration when the next start is not after this start."""

# ---------------------------------------------------------------------------
# Gemini API configuration defaults
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.0"))
CORRECTIONS_TEMPERATURE = 0.1
CONVERSION_TIMEOUT_S = float(os.getenv("CONVERSION_TIMEOUT_S", "300"))
"""Overall timeout for one HTTP API conversion (all windows)."""

# ---------------------------------------------------------------------------
# Daily usage quota
# ---------------------------------------------------------------------------

DAILY_LIMIT = _int_env("DAILY_LIMIT", 1000)
USAGE_FILE = os.getenv("USAGE_FILE", ".srt_converter_usage.json")


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    WHY: The API key is required for every generator call. Loading it
    from the environment (via .env) keeps it out of source code.

    HOW: Reads GEMINI_API_KEY from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("GEMINI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key
