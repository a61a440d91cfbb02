"""Shared test fixtures for the srt_converter test suite.

WHY: Several test modules need the same sample transcript, a realistic
(imperfect) generator response for it, and a fake generator that
stands in for the Gemini API. Centralizing them here keeps every test
working from the same authoritative case.

HOW: SAMPLE_TRANSCRIPT is a short pasted transcript with timestamps.
SAMPLE_GENERATED is what a generator plausibly returns for it: fenced,
with dotted, short-fraction, and bare-millisecond timecodes and
meaningless end times. EXPECTED_SRT is the repaired track.
FakeGenerator records calls and answers through a callback.

RULES:
- The fake generator never performs network I/O
- window_text() recovers the transcript window from a prompt
"""

import asyncio
from typing import Callable, List, Optional, Tuple

import pytest

SAMPLE_TRANSCRIPT = (
    "0:00 welcome back everyone\n"
    "0:04 today we are looking at fractions\n"
    "0:09 and how to add them"
)

SAMPLE_GENERATED = (
    "```srt\n"
    "1\n"
    "00:00:00.0 --> 00:00:03.5\n"
    "welcome back everyone\n"
    "\n"
    "2\n"
    "00:00:04,000 --> 00:00:04,000\n"
    "today we are looking at fractions\n"
    "\n"
    "3\n"
    "00:00:09000 --> 00:00:12000\n"
    "and how to add them\n"
    "```"
)

EXPECTED_SRT = (
    "1\n"
    "00:00:00,000 --> 00:00:03,999\n"
    "welcome back everyone\n"
    "\n"
    "2\n"
    "00:00:04,000 --> 00:00:08,999\n"
    "today we are looking at fractions\n"
    "\n"
    "3\n"
    "00:00:09,000 --> 00:00:13,000\n"
    "and how to add them"
)


def window_text(content: str) -> str:
    """Extract the transcript window from a generation prompt."""
    return content.split("Transcript:\n", 1)[1]


class FakeGenerator:
    """In-memory Generator: answers each call via ``respond(window_text)``.

    ``delay(window_text)`` optionally returns seconds to sleep before
    answering, to control completion order.
    """

    def __init__(
        self,
        respond: Callable[[str], str],
        delay: Optional[Callable[[str], float]] = None,
    ) -> None:
        self.respond = respond
        self.delay = delay
        self.calls: List[Tuple[str, str, float]] = []
        self.cancelled: List[str] = []

    async def generate(self, instructions: str, content: str, temperature: float) -> str:
        self.calls.append((instructions, content, temperature))
        text = window_text(content)
        if self.delay:
            try:
                await asyncio.sleep(self.delay(text))
            except asyncio.CancelledError:
                self.cancelled.append(text)
                raise
        return self.respond(text)


@pytest.fixture
def sample_transcript():
    return SAMPLE_TRANSCRIPT


@pytest.fixture
def sample_generator():
    """A generator that returns SAMPLE_GENERATED for any window."""
    return FakeGenerator(lambda text: SAMPLE_GENERATED)
