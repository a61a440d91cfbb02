"""Timing refiner — flicker-free, continuous end times anchored on start times.

WHY: The generator gets end times wrong or leaves them meaningless,
but start times are anchored to the source transcript's own
timestamps and are the only timing signal trusted absolutely.
Recomputing every end time from the next block's start guarantees a
track with no visible gap and no overlap between consecutive captions.

HOW: Walks the blocks in order. Each block keeps its start; a block
with a successor ends one flicker buffer before that successor starts;
the last block gets a fixed trailing duration.

RULES:
- start_ms is never altered, for any input
- Non-last block: end = next.start - flicker_buffer_ms
- If that end is not after the start (coincident or inverted starts),
  end = start + min_duration_ms
- Last block: end = start + trailing_duration_ms
- Returns a new tuple; input blocks are not modified
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from srt_converter.config import (
    FLICKER_BUFFER_MS,
    MIN_DURATION_MS,
    TRAILING_DURATION_MS,
)
from srt_converter.core.ir import SubtitleBlock, Track
from srt_converter.core.srt import parse_blocks, serialize_blocks


@dataclass(frozen=True)
class TimingPolicy:
    """Tunable constants for timing refinement, all in milliseconds."""

    flicker_buffer_ms: int = FLICKER_BUFFER_MS
    min_duration_ms: int = MIN_DURATION_MS
    trailing_duration_ms: int = TRAILING_DURATION_MS


DEFAULT_POLICY = TimingPolicy()


def refine_timing(
    blocks: Sequence[SubtitleBlock],
    policy: TimingPolicy = DEFAULT_POLICY,
) -> Track:
    """Recompute end times so the track is continuous and non-overlapping.

    Args:
        blocks: Parsed blocks in track order.
        policy: Timing constants (buffer, minimum and trailing durations).

    Returns:
        New blocks with the same starts and refined ends.
    """
    refined = []
    last = len(blocks) - 1

    for i, block in enumerate(blocks):
        start = block.start_ms
        if i < last:
            end = blocks[i + 1].start_ms - policy.flicker_buffer_ms
            if end <= start:
                end = start + policy.min_duration_ms
        else:
            end = start + policy.trailing_duration_ms
        refined.append(replace(block, end_ms=end))

    return tuple(refined)


def refine_srt(text: str, policy: TimingPolicy = DEFAULT_POLICY) -> str:
    """Parse, refine, and re-serialize one SRT string."""
    return serialize_blocks(refine_timing(parse_blocks(text), policy))
