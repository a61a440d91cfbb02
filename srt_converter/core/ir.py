"""Immutable value types shared by the codec, parser, refiner, and merger.

WHY: Every core stage consumes the output of the previous one. Passing
plain dicts around would make the block shape implicit and invite
in-place edits that break the "refinement produces a new sequence"
contract. Frozen dataclasses make the shape explicit and mutation
impossible.

HOW: Two dataclasses and one alias:
  SubtitleBlock — one SRT entry (index label, start/end ms, text lines)
  Window        — one bounded slice of the source transcript
  Track         — an ordered tuple of SubtitleBlocks

RULES:
- All times are integer milliseconds from track start
- index is a string label, preserved verbatim until merge reassigns it
- lines holds the text lines in order (1-2 expected, not enforced)
- Use dataclasses.replace() to derive a changed block
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SubtitleBlock:
    """A single subtitle entry.

    RULES:
    - index: source label ("1", "12", "a") — not necessarily numeric
    - start_ms: anchored to the source transcript; refinement never changes it
    - end_ms: recomputed by the timing refiner
    - lines: text lines after the time-range line, unmodified
    """

    index: str
    start_ms: int
    end_ms: int
    lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        """The block's text lines joined with newlines."""
        return "\n".join(self.lines)


@dataclass(frozen=True)
class Window:
    """A contiguous, line-aligned slice of the source transcript.

    RULES:
    - position: 0-based order of the window within the transcript
    - text: the slice's lines joined by newlines, stripped at both ends
    """

    position: int
    text: str


Track = Tuple[SubtitleBlock, ...]
