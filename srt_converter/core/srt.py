"""SRT block parser and serializer.

WHY: The generator returns a candidate SRT track as one string. Timing
refinement and merging work on individual blocks, and a single broken
block must not invalidate an otherwise usable track.

HOW: parse_blocks() splits on blank-line separators and keeps only the
pieces that look like a block (index line, time-range line with
" --> ", at least one text line). serialize_blocks() writes blocks back
in the canonical wire format.

RULES:
- Never raises on malformed input; bad pieces are dropped (logged at DEBUG)
- Text lines are preserved as-is (no trimming, no rewrapping)
- Timecodes are read with parse_timecode and written with format_timecode
- Output blocks are separated by exactly one blank line, no trailing blank
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from srt_converter.core.ir import SubtitleBlock, Track
from srt_converter.core.timecode import format_timecode, parse_timecode

logger = logging.getLogger(__name__)

TIME_SEPARATOR = " --> "

_BLANK_LINE_RE = re.compile(r"\n\s*\n")


def _parse_piece(piece: str) -> Optional[SubtitleBlock]:
    """Parse one blank-line-delimited piece, or return None if malformed."""
    lines = piece.split("\n")
    if len(lines) < 3:
        return None

    index = lines[0].strip()
    time_line = lines[1]
    if TIME_SEPARATOR not in time_line:
        return None

    start_text, _, end_text = time_line.partition(TIME_SEPARATOR)
    if not start_text.strip() or not end_text.strip():
        return None

    return SubtitleBlock(
        index=index,
        start_ms=parse_timecode(start_text),
        end_ms=parse_timecode(end_text),
        lines=tuple(lines[2:]),
    )


def parse_blocks(text: str) -> Track:
    """Split raw SRT text into subtitle blocks.

    WHY: Generated text may contain stray commentary, truncated blocks,
    or blocks without a time range. These are recoverable defects: the
    rest of the track is still worth keeping.

    HOW: Normalizes line endings, strips the text, splits on blank lines
    (allowing whitespace on the blank line), and parses each piece.

    RULES:
    - Pieces with fewer than 3 lines are dropped
    - Pieces whose second line lacks " --> " are dropped
    - The index label is kept verbatim (stripped of surrounding spaces)
    - Returns an empty tuple for empty input

    Args:
        text: Raw SRT text.

    Returns:
        The parsed blocks in source order.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not normalized:
        return ()

    blocks = []
    for piece in _BLANK_LINE_RE.split(normalized):
        block = _parse_piece(piece)
        if block is None:
            logger.debug("Dropping malformed SRT block: %r", piece[:80])
            continue
        blocks.append(block)
    return tuple(blocks)


def serialize_blocks(blocks: Iterable[SubtitleBlock]) -> str:
    """Serialize blocks to SRT text.

    Each block is written as ``index\\nstart --> end\\ntext\\n\\n``; the
    trailing blank line after the final block is trimmed.
    """
    parts = []
    for block in blocks:
        parts.append(
            "{}\n{}{}{}\n{}\n\n".format(
                block.index,
                format_timecode(block.start_ms),
                TIME_SEPARATOR,
                format_timecode(block.end_ms),
                block.text,
            )
        )
    return "".join(parts).rstrip("\n")
