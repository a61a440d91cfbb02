"""FastAPI application exposing the converter over HTTP with OpenAPI docs.

WHY: Web front-ends and automation tools (curl, n8n) need an HTTP API
to validate transcripts, fetch correction proposals, and convert
transcripts to SRT without holding the Gemini API key themselves.
FastAPI provides request validation and automatic OpenAPI documentation.

HOW: A single FastAPI app exposes four endpoints grouped by tags. The
generator is provided by a dependency (get_generator) that opens a
GeminiClient per request; tests override it with a fake. The daily
usage tracker is a module-level singleton, consulted before and
incremented after each successful conversion.

RULES:
- Error responses use a consistent ErrorResponse schema
- A conversion either returns the whole track or an error — never a
  partial track
- 400 empty transcript, 429 quota exhausted, 502 generator failure,
  503 generator not configured, 504 timeout
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, List

from fastapi import Depends, FastAPI, HTTPException

from srt_converter import __version__
from srt_converter.api.client import GeminiClient
from srt_converter.config import CONVERSION_TIMEOUT_S, USAGE_FILE
from srt_converter.core.corrections import SpellingCorrection
from srt_converter.core.pipeline import (
    ConversionRequest,
    ConversionTimeoutError,
    EmptyTranscriptError,
    GenerationError,
    build_track,
)
from srt_converter.core.srt import serialize_blocks
from srt_converter.server.models import (
    CorrectionModel,
    CorrectionsResponse,
    ErrorResponse,
    HealthResponse,
    SubtitleRequest,
    SubtitleResponse,
    TranscriptRequest,
    ValidationResponse,
)
from srt_converter.usage import QuotaExceededError, UsageTracker

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and tracker setup
# ---------------------------------------------------------------------------

usage_tracker = UsageTracker(USAGE_FILE)

app = FastAPI(
    title="Transcript to SRT Converter API",
    description=(
        "REST API for converting time-stamped transcripts into SRT subtitle "
        "files with a text-generation model. Generated output is repaired "
        "into a gapless, sequentially indexed track."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


async def get_generator() -> AsyncIterator[GeminiClient]:
    """Yield an open GeminiClient for the duration of one request."""
    try:
        client = GeminiClient()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    async with client:
        yield client


def _to_model(c: SpellingCorrection) -> CorrectionModel:
    return CorrectionModel(
        id=c.id,
        original=c.original,
        correction=c.correction,
        context=c.context,
        timestamp=c.timestamp,
        selected=c.selected,
    )


def _from_model(c: CorrectionModel) -> SpellingCorrection:
    return SpellingCorrection(
        id=c.id,
        original=c.original,
        correction=c.correction,
        context=c.context,
        timestamp=c.timestamp,
        selected=c.selected,
    )


# ---------------------------------------------------------------------------
# Endpoints: Subtitles
# ---------------------------------------------------------------------------


@app.post(
    "/subtitles",
    response_model=SubtitleResponse,
    tags=["subtitles"],
    summary="Convert a transcript into SRT",
    description=(
        "Splits the transcript into windows, generates each window, repairs "
        "timestamps and timing, and returns one merged SRT track."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Empty transcript"},
        429: {"model": ErrorResponse, "description": "Daily limit reached"},
        502: {"model": ErrorResponse, "description": "Generator failed for a window"},
        504: {"model": ErrorResponse, "description": "Conversion timed out"},
    },
)
async def create_subtitles(
    body: SubtitleRequest,
    generator: GeminiClient = Depends(get_generator),
) -> SubtitleResponse:
    if not body.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript is empty")

    try:
        usage_tracker.check()
    except QuotaExceededError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    request = ConversionRequest(
        mode=body.mode,
        corrections=[_from_model(c) for c in body.corrections],
    )

    try:
        track = await build_track(
            body.transcript,
            generator,
            request=request,
            max_chars=body.max_chars,
            timeout_s=CONVERSION_TIMEOUT_S,
        )
    except EmptyTranscriptError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ConversionTimeoutError as exc:
        logger.warning("Conversion timed out: %s", exc)
        raise HTTPException(status_code=504, detail=str(exc))
    except GenerationError as exc:
        logger.exception("Conversion failed")
        raise HTTPException(status_code=502, detail=str(exc))

    usage_tracker.increment()
    return SubtitleResponse(srt=serialize_blocks(track), block_count=len(track))


@app.post(
    "/validate",
    response_model=ValidationResponse,
    tags=["transcripts"],
    summary="Check a transcript for timestamps",
    description="Returns whether the transcript contains timestamps to anchor subtitles on.",
)
async def validate_transcript(
    body: TranscriptRequest,
    generator: GeminiClient = Depends(get_generator),
) -> ValidationResponse:
    has_timestamps = await generator.has_timestamps(body.transcript)
    return ValidationResponse(has_timestamps=has_timestamps)


@app.post(
    "/corrections",
    response_model=CorrectionsResponse,
    tags=["transcripts"],
    summary="Propose spelling corrections",
    description=(
        "Returns likely transcription errors (homophones, misheard names) "
        "for review. Case- and punctuation-only changes are filtered out."
    ),
)
async def propose_corrections(
    body: TranscriptRequest,
    generator: GeminiClient = Depends(get_generator),
) -> CorrectionsResponse:
    proposed: List[SpellingCorrection] = await generator.propose_corrections(body.transcript)
    return CorrectionsResponse(corrections=[_to_model(c) for c in proposed])


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check, including the remaining daily quota.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        remaining_today=usage_tracker.remaining(),
    )


def run_api():
    """Entry point for the srt-converter-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
