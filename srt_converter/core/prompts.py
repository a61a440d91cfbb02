"""Generator prompts and correction modes.

WHY: The quality of the generator's SRT depends almost entirely on the
instructions it receives. Keeping every prompt in one module makes them
easy to review and tune without touching pipeline code.

HOW: SYSTEM_INSTRUCTION holds the fixed SRT formatting rules.
build_prompt() assembles the per-request preamble from the selected
CorrectionMode and approved corrections; build_window_content() appends
one transcript window to it. The timestamp check and correction
proposal prompts live here too.

RULES:
- Start times must match source timestamps exactly (the refiner relies
  on this)
- Text must never move between timestamp buckets
- Only selected corrections are included in the prompt
"""

from __future__ import annotations

import enum
from typing import Iterable

from srt_converter.core.corrections import SpellingCorrection


class CorrectionMode(str, enum.Enum):
    """How much the generator may change the transcript text.

    RULES:
    - none: preserve text exactly
    - punctuation: fix punctuation and capitalization only
    - spelling: apply approved spelling corrections only
    - both: approved corrections plus punctuation/capitalization
    """

    NONE = "none"
    PUNCTUATION = "punctuation"
    SPELLING = "spelling"
    BOTH = "both"

    @property
    def needs_corrections(self) -> bool:
        return self in (CorrectionMode.SPELLING, CorrectionMode.BOTH)


SYSTEM_INSTRUCTION = """\
You are a strict SRT formatting engine. You are NOT a creative writer.

CORE TASK:
Convert the provided transcript into valid SRT format.

SYNCHRONIZATION OVER SENTENCE STRUCTURE:
- Your first priority is matching text to its specific timestamp.
- NEVER fix a broken sentence by moving text from a later timestamp to an earlier one.
- A sentence fragment is better than audio that is out of sync.
- If the transcript says a phrase starts at 0:10, you MUST NOT start it at 0:05.

TIMESTAMP BUCKETS:
The transcript provides buckets of text starting at specific times.
- Input "0:10 I am going to" and "0:15 the store." must become two blocks,
  one starting at 00:00:10,000 and one at 00:00:15,000.
- NEVER move text backwards into a previous timestamp block.

TIMING RULES:
1. The start time of a subtitle block MUST MATCH the source timestamp exactly.
2. If a text segment is too long (more than 42 characters per line or more
   than 2 lines), split it. The first part starts at the anchor time, later
   parts start after it, and all parts finish before the next anchor.

FORMATTING:
1. At most 2 lines per block.
2. About 42 characters per line.
3. Remove junk endings (e.g. "You.", "Copyright").
4. Timestamps use HH:MM:SS,mmm.

SRT OUTPUT FORMAT:
1
00:00:00,000 --> 00:00:04,000
Line 1 text
Line 2 text

2
00:00:04,050 --> 00:00:08,000
Next text
"""

_LOWERCASE_CONTINUATION = (
    "IMPORTANT: Do not treat each line as a complete sentence. If a line "
    "clearly continues a sentence from the previous line, leave it in "
    "lowercase (unless it is a proper noun)."
)

_REMINDER = (
    "REMINDER: Strict max 42 chars per line, max 2 lines per block. Split "
    "blocks if necessary. START TIMES MUST MATCH SOURCE TIMESTAMPS EXACTLY. "
    "DO NOT MOVE TEXT BETWEEN TIMESTAMP BUCKETS."
)


def _format_corrections(corrections: Iterable[SpellingCorrection]) -> str:
    return "\n".join(
        '- Change "{}" to "{}" near {}'.format(c.original, c.correction, c.timestamp)
        for c in corrections
        if c.selected
    )


def build_prompt(
    mode: CorrectionMode,
    corrections: Iterable[SpellingCorrection] = (),
) -> str:
    """Build the request preamble for the selected correction mode.

    Args:
        mode: How much the generator may change the text.
        corrections: Reviewed corrections; unselected ones are ignored.

    Returns:
        The prompt text that precedes each transcript window.
    """
    prompt = "Convert the following transcript into a valid SRT file. "
    listed = _format_corrections(corrections)

    if mode == CorrectionMode.NONE:
        prompt += (
            "Do NOT change punctuation or capitalization at all. "
            "Preserve the text exactly as is."
        )
    elif mode == CorrectionMode.PUNCTUATION:
        prompt += (
            "Correct ONLY basic punctuation and capitalization.\n"
            + _LOWERCASE_CONTINUATION
            + "\nPreserve mid-sentence line breaks."
        )
    elif mode == CorrectionMode.SPELLING:
        prompt += (
            "Apply the following specific spelling corrections ONLY.\n"
            "Do not change the general punctuation style unless it is part "
            "of the specific correction.\n\n"
            "Corrections to apply:\n" + listed + "\n\n"
            "If a correction is not in this list, do not make it."
        )
    elif mode == CorrectionMode.BOTH:
        prompt += (
            "Apply the following specific spelling corrections.\n"
            "Additionally, correct all basic punctuation and capitalization "
            "throughout the entire text.\n"
            + _LOWERCASE_CONTINUATION
            + "\n\nSpecific corrections to apply:\n" + listed
        )

    return prompt + "\n\n" + _REMINDER


def build_window_content(prompt: str, window_text: str) -> str:
    """Append one transcript window to the request preamble."""
    return "{}\n\nTranscript:\n{}".format(prompt, window_text)


# ---------------------------------------------------------------------------
# Transcript checks
# ---------------------------------------------------------------------------

TIMESTAMP_SAMPLE_CHARS = 1000

TIMESTAMP_CHECK_PROMPT = """\
Analyze the following text. Does it contain timestamps (like 0:00, 01:23, 1:02:45)?
Reply with strict JSON: {{"hasTimestamps": boolean}}

Text:
{sample}... (truncated)"""

CORRECTIONS_PROMPT = """\
Analyze this transcript for TRANSCRIPTION ERRORS (spelling, homophones, and misheard words).

YOUR TASK:
Identify words or phrases that are likely mis-transcribed by auto-captions and
provide the corrected version based on context.

LOOK FOR:
1. Homophones (e.g. "their" vs "there", "see" vs "sea").
2. Misheard proper nouns. Use context to infer the correct entity.
3. Phonetic mix-ups: words that sound similar but make no sense in context.
4. Split or merged words (e.g. "all right" vs "alright", "login" vs "log in").
5. Whole phrases: if a phrase is wrong, correct the whole phrase.

STRICT CONSTRAINTS:
- NO STYLE CHANGES: do not rephrase sentences or change vocabulary choices.
- IGNORE PUNCTUATION: do not list changes that only touch commas or periods.

Return a list of proposed corrections as valid JSON.

Transcript:
{transcript}"""

CORRECTIONS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "original": {"type": "STRING"},
            "correction": {"type": "STRING"},
            "context": {
                "type": "STRING",
                "description": "Small snippet of text surrounding the error",
            },
            "timestamp": {
                "type": "STRING",
                "description": "The nearest timestamp to this error",
            },
        },
        "required": ["original", "correction", "context", "timestamp"],
    },
}
