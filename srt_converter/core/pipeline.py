"""Chunk-merge pipeline — generate each window, repair it, merge the track.

WHY: The generator is the only unreliable, slow, and size-limited part
of the conversion. This module isolates it: the transcript is split
into windows, each window goes through generate → strip fence →
normalize timecodes → parse → refine on its own, and the per-window
tracks are merged into one globally indexed track.

HOW: Windows run concurrently as asyncio tasks with no shared state; a
semaphore caps how many generator requests are in flight at once.
asyncio.gather() returns results in task order, so the merge follows
window order regardless of which request finishes first. If any window
fails, every other in-flight request is cancelled and the conversion
fails as a whole. An optional timeout covers the entire run.

RULES:
- Never return a partial track — one failed window fails the conversion
- Merge order is window order, not completion order
- Timestamps are not offset between windows (they are already absolute)
- The generator is injected; this module never reads configuration
  beyond defaults, and never touches the usage quota
- on_status is optional; when provided, called with progress strings
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from srt_converter.config import GENERATION_TEMPERATURE, MAX_CONCURRENT_WINDOWS, MAX_WINDOW_CHARS
from srt_converter.core.chunking import chunk_transcript, merge_tracks, strip_code_fence
from srt_converter.core.corrections import SpellingCorrection
from srt_converter.core.ir import Track, Window
from srt_converter.core.prompts import (
    SYSTEM_INSTRUCTION,
    CorrectionMode,
    build_prompt,
    build_window_content,
)
from srt_converter.core.srt import parse_blocks, serialize_blocks
from srt_converter.core.timecode import normalize_timecodes
from srt_converter.core.timing import DEFAULT_POLICY, TimingPolicy, refine_timing

logger = logging.getLogger(__name__)


class Generator(Protocol):
    """The external text-generation collaborator.

    Returns a candidate SRT track for the given content. The text may be
    wrapped in a code fence, contain malformed blocks, or use
    non-canonical timestamps — the pipeline repairs all of these.
    """

    async def generate(self, instructions: str, content: str, temperature: float) -> str:
        ...


class ConversionError(Exception):
    """Base class for failures that abort a whole conversion."""


class GenerationError(ConversionError):
    """Raised when the generator fails for any window.

    RULES:
    - position is the 0-based window that failed
    - The original exception is chained as __cause__
    """

    def __init__(self, position: int, cause: BaseException) -> None:
        self.position = position
        super().__init__(
            "Generation failed for window {}: {}".format(position + 1, cause)
        )


class ConversionTimeoutError(ConversionError):
    """Raised when the conversion exceeds its overall timeout."""


class EmptyTranscriptError(ConversionError):
    """Raised when the transcript contains no non-whitespace text."""


@dataclass
class ConversionRequest:
    """Per-conversion generation settings.

    RULES:
    - mode: how much the generator may change the text
    - corrections: reviewed spelling corrections (only selected are used)
    - temperature: sampling temperature; 0.0 keeps output non-creative
    """

    mode: CorrectionMode = CorrectionMode.NONE
    corrections: List[SpellingCorrection] = field(default_factory=list)
    temperature: float = GENERATION_TEMPERATURE


async def process_window(
    window: Window,
    generator: Generator,
    prompt: str,
    temperature: float = GENERATION_TEMPERATURE,
    policy: TimingPolicy = DEFAULT_POLICY,
) -> Track:
    """Generate and repair one window into a self-contained track.

    Args:
        window: The transcript slice to convert.
        generator: The text-generation collaborator.
        prompt: Request preamble from build_prompt().
        temperature: Sampling temperature for the generator.
        policy: Timing refinement constants.

    Returns:
        The window's refined blocks, with their generated index labels.

    Raises:
        ValueError: If a non-empty window yields no subtitle blocks
            (a refusal or an empty reply).
    """
    raw = await generator.generate(
        SYSTEM_INSTRUCTION,
        build_window_content(prompt, window.text),
        temperature,
    )
    cleaned = normalize_timecodes(strip_code_fence(raw or ""))
    blocks = parse_blocks(cleaned)
    if not blocks and window.text.strip():
        raise ValueError("Generator returned no subtitle blocks")
    logger.debug("Window %d: %d block(s) parsed", window.position + 1, len(blocks))
    return refine_timing(blocks, policy)


async def _process_checked(
    window: Window,
    generator: Generator,
    prompt: str,
    temperature: float,
    policy: TimingPolicy,
) -> Track:
    try:
        return await process_window(window, generator, prompt, temperature, policy)
    except Exception as exc:
        raise GenerationError(window.position, exc) from exc


async def _process_all(
    windows: Sequence[Window],
    generator: Generator,
    prompt: str,
    temperature: float,
    policy: TimingPolicy,
    on_status: Optional[Callable[[str], None]],
    concurrency: int,
) -> List[Track]:
    """Run windows concurrently, at most ``concurrency`` at a time, in window order."""
    total = len(windows)
    semaphore = asyncio.Semaphore(concurrency)

    async def _run(window: Window) -> Track:
        async with semaphore:
            track = await _process_checked(window, generator, prompt, temperature, policy)
        if on_status:
            on_status("  Window {}/{} done ({} blocks)".format(
                window.position + 1, total, len(track)
            ))
        return track

    tasks = [asyncio.ensure_future(_run(w)) for w in windows]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # Covers a failed window as well as outer cancellation/timeout
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def build_track(
    transcript: str,
    generator: Generator,
    request: Optional[ConversionRequest] = None,
    max_chars: int = MAX_WINDOW_CHARS,
    policy: TimingPolicy = DEFAULT_POLICY,
    timeout_s: Optional[float] = None,
    on_status: Optional[Callable[[str], None]] = None,
    concurrency: int = MAX_CONCURRENT_WINDOWS,
) -> Track:
    """Convert a transcript into one merged, refined track.

    WHY: This is the whole conversion minus serialization; the HTTP API
    uses it to report block counts alongside the SRT text.

    HOW: chunk → process all windows concurrently → merge in order.

    RULES:
    - Raises EmptyTranscriptError when chunking yields no windows
    - At most ``concurrency`` generator requests are in flight at once
    - Raises GenerationError if any window fails (others are cancelled)
    - Raises ConversionTimeoutError if timeout_s elapses (all cancelled)

    Args:
        transcript: The full time-stamped transcript.
        generator: The text-generation collaborator.
        request: Mode, corrections, and temperature (defaults to NONE mode).
        max_chars: Character budget per window.
        policy: Timing refinement constants.
        timeout_s: Optional overall timeout in seconds.
        on_status: Optional callback for progress updates.
        concurrency: Maximum windows generated at the same time.

    Returns:
        The merged track, indexed 1..N.
    """
    if concurrency <= 0:
        raise ValueError("concurrency must be positive, got {}".format(concurrency))
    request = request or ConversionRequest()
    windows = chunk_transcript(transcript, max_chars)
    if not windows:
        raise EmptyTranscriptError("Transcript is empty")

    if on_status:
        on_status("Split transcript into {} window(s)".format(len(windows)))
    logger.info("Converting transcript: %d chars, %d window(s)", len(transcript), len(windows))

    prompt = build_prompt(request.mode, request.corrections)
    work = _process_all(
        windows, generator, prompt, request.temperature, policy, on_status, concurrency
    )

    if timeout_s is None:
        tracks = await work
    else:
        try:
            tracks = await asyncio.wait_for(work, timeout=timeout_s)
        except asyncio.TimeoutError:
            raise ConversionTimeoutError(
                "Conversion timed out after {:.0f}s".format(timeout_s)
            ) from None

    merged = merge_tracks(tracks)
    logger.info("Merged %d block(s) from %d window(s)", len(merged), len(tracks))
    return merged


async def convert_transcript(
    transcript: str,
    generator: Generator,
    request: Optional[ConversionRequest] = None,
    max_chars: int = MAX_WINDOW_CHARS,
    policy: TimingPolicy = DEFAULT_POLICY,
    timeout_s: Optional[float] = None,
    on_status: Optional[Callable[[str], None]] = None,
    concurrency: int = MAX_CONCURRENT_WINDOWS,
) -> str:
    """Convert a transcript into SRT text. See build_track() for details."""
    track = await build_track(
        transcript,
        generator,
        request=request,
        max_chars=max_chars,
        policy=policy,
        timeout_s=timeout_s,
        on_status=on_status,
        concurrency=concurrency,
    )
    return serialize_blocks(track)
