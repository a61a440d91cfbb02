"""Transcript windowing, code-fence stripping, and track merging.

WHY: Long transcripts cannot be submitted to the generator in one call
without risking truncated or degraded output. Splitting them into
bounded windows, generating each independently, and stitching the
results back together must produce a track indistinguishable (modulo
index labels) from one produced in a single pass.

HOW: chunk_transcript() packs whole lines into windows up to a character
budget. strip_code_fence() removes the Markdown fence the generator
likes to wrap SRT in. merge_tracks() concatenates per-window tracks in
window order and renumbers the blocks 1..N.

RULES:
- A line is never split; a single over-long line becomes its own window
- Windows containing only whitespace are not emitted
- Merging never shifts timestamps — window times are already absolute
- Merged index labels are dense, starting at "1"
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable, List, Tuple

from srt_converter.core.ir import SubtitleBlock, Track, Window

_FENCE_OPEN_RE = re.compile(r"^\s*```(?:[\w-]*[ \t]*\n)?")
_FENCE_CLOSE_RE = re.compile(r"\n?[ \t]*```\s*$")
# First complete fenced region anywhere in the text, e.g. after a preamble line
_FENCED_BODY_RE = re.compile(r"```[\w-]*[ \t]*\n(.*?)\n?[ \t]*```", re.DOTALL)


def chunk_transcript(transcript: str, max_chars: int) -> Tuple[Window, ...]:
    """Split a transcript into line-aligned windows of bounded size.

    WHY: Each window is a separate generator call. Cutting a line in half
    would separate a timestamp from its text (or split a word), so
    windows are only ever cut between lines.

    HOW: Accumulates lines into the current window. When adding the next
    line plus its separating newline would exceed max_chars, the current
    window is finalized and the line starts a new one.

    RULES:
    - max_chars must be positive (ValueError otherwise)
    - Each emitted window is stripped of leading/trailing whitespace
    - Whitespace-only windows are skipped; positions stay dense
    - A line longer than max_chars forms a window on its own

    Args:
        transcript: The full source transcript.
        max_chars: Character budget per window.

    Returns:
        Windows in transcript order.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive, got {}".format(max_chars))

    windows: List[Window] = []

    def _emit(lines: List[str]) -> None:
        text = "\n".join(lines).strip()
        if text:
            windows.append(Window(position=len(windows), text=text))

    current: List[str] = []
    size = 0
    for line in transcript.split("\n"):
        added = len(line) + (1 if current else 0)
        if current and size + added > max_chars:
            _emit(current)
            current = [line]
            size = len(line)
        else:
            current.append(line)
            size += added
    _emit(current)

    return tuple(windows)


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence (```srt ... ```) around the SRT body.

    RULES:
    - A complete fenced region anywhere in the text wins; any preamble
      or trailing commentary outside it is discarded
    - Otherwise a leading opener and a trailing closer are removed
      independently (an unterminated or closer-only fence)
    """
    fenced = _FENCED_BODY_RE.search(text)
    if fenced:
        return fenced.group(1).strip()
    stripped = _FENCE_OPEN_RE.sub("", text, count=1)
    stripped = _FENCE_CLOSE_RE.sub("", stripped, count=1)
    return stripped.strip()


def merge_tracks(tracks: Iterable[Track]) -> Track:
    """Concatenate per-window tracks and renumber all blocks 1..N.

    Args:
        tracks: Refined tracks, in window order.

    Returns:
        One track whose index labels are "1", "2", ... in order.
    """
    merged: List[SubtitleBlock] = []
    for track in tracks:
        for block in track:
            merged.append(replace(block, index=str(len(merged) + 1)))
    return tuple(merged)
