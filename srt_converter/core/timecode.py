"""Timecode codec — parse, format, and normalize SRT timestamps.

WHY: The generator is asked for canonical `HH:MM:SS,mmm` timecodes but
routinely returns `HH:MM:SS.mmm`, short fractions (`00:00:04.5`), or
the separator dropped entirely (`00:00:04500`). Downstream parsing and
timing refinement need one integer millisecond value per timecode, and
the output file needs one spelling.

HOW: parse_timecode() splits on `:`, `,` or `.` and converts each field
leniently. format_timecode() decomposes milliseconds with divmod.
normalize_timecodes() rewrites every timecode-shaped substring in a
block of text to the canonical form and leaves everything else alone.

RULES:
- Parsing never raises — invalid or missing fields count as zero
- Fewer than 3 fields (h, m, s) parse to 0
- A fractional field shorter than 3 digits is a decimal fraction
  ("5" → 500 ms), matching how the generator abbreviates
- Canonical form: 2-digit h/m/s, comma, 3-digit ms
- Hours of 100 or more widen the field rather than being truncated
"""

from __future__ import annotations

import re

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000

_SPLIT_RE = re.compile(r"[:,.]")
_LEADING_DIGITS_RE = re.compile(r"\d+")
_BARE_DIGITS_RE = re.compile(r"^(\d{2})(\d{2})(\d{2})(\d{3})$")

# h:mm:s(s) followed by either a fractional part (. or ,) or a bare 3-digit ms
_TIMECODE_RE = re.compile(
    r"(?<![\d:])(\d{1,2}):(\d{2}):(\d{1,2})(?:[.,](\d{1,3})|(\d{3}))(?!\d)"
)


def _leading_int(field: str) -> int:
    """Leading digits of a field as an int, or 0 when there are none."""
    match = _LEADING_DIGITS_RE.match(field.strip())
    return int(match.group()) if match else 0


def _fraction_ms(field: str) -> int:
    """Convert a fractional-seconds field to milliseconds.

    "5" → 500, "05" → 50, "500" → 500. Digits beyond the third are
    dropped (sub-millisecond precision).
    """
    match = _LEADING_DIGITS_RE.match(field.strip())
    if not match:
        return 0
    return int(match.group()[:3].ljust(3, "0"))


def parse_timecode(text: str) -> int:
    """Parse a timecode string into absolute milliseconds.

    WHY: Generated SRT text uses several timestamp spellings and may be
    malformed. The refiner needs a number for every block, so a bad
    timecode must degrade to zero instead of aborting the track.

    HOW: Splits on ":", "," or "." and reads hours, minutes, seconds and
    an optional fraction. A 4- or 5-digit seconds field ("04500" or
    "4500") is the bare form: its last 3 digits are milliseconds. A single
    9-digit field ("000004500") is read as HHMMSSmmm.

    RULES:
    - Never raises
    - Fewer than 3 fields → 0 (unless the 9-digit bare form)
    - Non-numeric fields → 0
    - Missing fraction → 0 ms

    Args:
        text: The timecode text, e.g. "00:01:02,345".

    Returns:
        Milliseconds from track start.
    """
    stripped = text.strip()
    bare = _BARE_DIGITS_RE.match(stripped)
    if bare:
        h, m, s, ms = (int(g) for g in bare.groups())
        return h * _MS_PER_HOUR + m * _MS_PER_MINUTE + s * _MS_PER_SECOND + ms

    parts = _SPLIT_RE.split(stripped)
    if len(parts) < 3:
        return 0

    hours = _leading_int(parts[0])
    minutes = _leading_int(parts[1])
    seconds_field = parts[2].strip()

    if len(parts) >= 4:
        seconds = _leading_int(seconds_field)
        millis = _fraction_ms(parts[3])
    elif len(seconds_field) in (4, 5) and seconds_field.isdigit():
        seconds = int(seconds_field[:-3])
        millis = int(seconds_field[-3:])
    else:
        seconds = _leading_int(seconds_field)
        millis = 0

    return (
        hours * _MS_PER_HOUR
        + minutes * _MS_PER_MINUTE
        + seconds * _MS_PER_SECOND
        + millis
    )


def format_timecode(ms: int) -> str:
    """Format milliseconds as a canonical `HH:MM:SS,mmm` timecode.

    Negative values are clamped to zero.
    """
    ms = max(0, int(ms))
    hours, rem = divmod(ms, _MS_PER_HOUR)
    minutes, rem = divmod(rem, _MS_PER_MINUTE)
    seconds, millis = divmod(rem, _MS_PER_SECOND)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, seconds, millis)


def _canonical_match(match: re.Match) -> str:
    hours, minutes, seconds, fraction, bare_ms = match.groups()
    millis = fraction.ljust(3, "0") if fraction is not None else bare_ms
    return "{:02d}:{}:{:02d},{}".format(int(hours), minutes, int(seconds), millis)


def normalize_timecodes(text: str) -> str:
    """Rewrite every timecode in ``text`` to the canonical comma form.

    WHY: The parser splits the time-range line and the refiner trusts
    start times absolutely, so every timecode must be read the same way
    regardless of how the generator spelled it.

    HOW: One regex matches `h:mm:ss` followed by either a `.`/`,`
    fraction of 1-3 digits or a bare 3-digit millisecond suffix. Each
    match is replaced in place; all other text is untouched.

    RULES:
    - "00:00:04.5"   → "00:00:04,500" (fraction right-padded)
    - "00:00:04500"  → "00:00:04,500"
    - "00:00:4500"   → "00:00:04,500" (seconds zero-padded)
    - "0:00:04,500"  → "00:00:04,500" (hours zero-padded)
    - Already-canonical timecodes are unchanged
    - Text without timecodes is returned unchanged
    """
    return _TIMECODE_RE.sub(_canonical_match, text)
