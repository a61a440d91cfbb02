"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint has its own request and response model. The
correction mode reuses the core CorrectionMode enum so the API and the
pipeline can never disagree on valid values.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from srt_converter.config import MAX_WINDOW_CHARS
from srt_converter.core.prompts import CorrectionMode


# ---------------------------------------------------------------------------
# Shared models
# ---------------------------------------------------------------------------


class CorrectionModel(BaseModel):
    """A spelling correction, as proposed by the model or approved by a client."""

    id: str = Field(description="Correction identifier (e.g. 'corr-0').")
    original: str = Field(description="Text as transcribed.")
    correction: str = Field(description="Corrected text.")
    context: str = Field(default="", description="Snippet surrounding the error.")
    timestamp: str = Field(default="", description="Nearest transcript timestamp.")
    selected: bool = Field(default=True, description="Whether the correction is applied.")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TranscriptRequest(BaseModel):
    """A transcript to validate or analyze."""

    transcript: str = Field(description="Time-stamped transcript text.")


class SubtitleRequest(BaseModel):
    """A transcript to convert into SRT.

    RULES:
    - mode defaults to 'none' (text preserved exactly)
    - corrections are only used in 'spelling' and 'both' modes
    - max_chars bounds each generation window; lines are never split
    """

    transcript: str = Field(description="Time-stamped transcript text.")
    mode: CorrectionMode = Field(
        default=CorrectionMode.NONE,
        description="Text correction mode: none, punctuation, spelling, or both.",
    )
    corrections: List[CorrectionModel] = Field(
        default_factory=list,
        description="Reviewed spelling corrections; unselected ones are ignored.",
    )
    max_chars: int = Field(
        default=MAX_WINDOW_CHARS,
        gt=0,
        description="Maximum characters per generation window.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "transcript": "0:00 welcome back everyone\n0:04 today we look at fractions",
                "mode": "punctuation",
                "corrections": [],
                "max_chars": 6000,
            }
        ]
    }}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SubtitleResponse(BaseModel):
    """The generated subtitle track."""

    srt: str = Field(description="Complete SRT file content.")
    block_count: int = Field(description="Number of subtitle blocks in the track.")


class ValidationResponse(BaseModel):
    """Result of the timestamp presence check."""

    has_timestamps: bool = Field(description="True if the transcript contains timestamps.")


class CorrectionsResponse(BaseModel):
    """Proposed spelling corrections for review."""

    corrections: List[CorrectionModel] = Field(description="Significant proposed corrections.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    remaining_today: Optional[int] = Field(
        default=None,
        description="Conversions remaining in today's quota.",
    )
