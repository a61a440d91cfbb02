"""Command-line interface for the transcript-to-SRT converter.

WHY: Users need a simple way to turn a pasted transcript into a subtitle
file from the terminal. The CLI wires together the full flow — file
validation, daily quota, timestamp check, optional spelling review,
windowed generation with timing repair, and file saving — behind a
single command.

HOW: Uses argparse to accept a transcript file, correction mode, and
tuning options. Runs the async flow via asyncio.run(). Status messages
go to stderr; the SRT is saved next to the transcript (or to
--output-dir) as {stem}.srt.

RULES:
- Positional argument: transcript text file path
- --mode: none | punctuation | spelling | both (default: none)
- spelling/both modes propose corrections; --accept-all approves all of
  them, otherwise each one is confirmed interactively
- Output naming: {stem}.srt, numeric suffix for conflicts ({stem}-2.srt)
- The usage quota is checked before any API call and incremented only
  after the SRT is saved
- Status output goes to stderr (not stdout)
- Exit code 1 on errors, 130 on Ctrl-C
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from srt_converter.api.client import GeminiClient
from srt_converter.config import (
    GENERATION_TEMPERATURE,
    MAX_CONCURRENT_WINDOWS,
    MAX_WINDOW_CHARS,
    USAGE_FILE,
)
from srt_converter.core.corrections import SpellingCorrection
from srt_converter.core.pipeline import ConversionError, ConversionRequest, convert_transcript
from srt_converter.core.prompts import CorrectionMode
from srt_converter.usage import QuotaExceededError, UsageTracker

_NO_TIMESTAMPS_MESSAGE = (
    "It looks like this transcript has no timestamps. Make sure the "
    "transcript shows timestamps (e.g. 0:00 or 1:23), copy it again, and retry."
)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.

    HOW: Writes to sys.stderr with a flush to ensure immediate display.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str, code: int = 1) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(code)


def _resolve_output_path(stem: str, output_dir: Path) -> Path:
    """Resolve the SRT output path, adding a numeric suffix on conflict.

    WHY: Users may run the converter several times on the same
    transcript. Overwriting a previous (possibly hand-edited) SRT would
    lose work.

    RULES:
    - First attempt: {stem}.srt (e.g. lecture.srt)
    - Conflict: {stem}-N.srt, with N starting at 2 (lecture-2.srt)
    """
    candidate = output_dir / "{}.srt".format(stem)
    counter = 2
    while candidate.exists():
        candidate = output_dir / "{}-{}.srt".format(stem, counter)
        counter += 1
    return candidate


def _review_corrections(
    corrections: List[SpellingCorrection],
    accept_all: bool,
) -> List[SpellingCorrection]:
    """Let the user approve or reject each proposed correction.

    WHY: Proposed corrections are guesses. Applying one the user did
    not want (a name that really is spelled oddly) is worse than
    applying none.

    HOW: With accept_all, every correction stays selected. Otherwise
    each one is shown with its context and the user answers y/n
    (empty answer means yes).

    RULES:
    - Returns only the approved corrections
    - EOF on stdin rejects the remaining corrections
    """
    if accept_all:
        return list(corrections)

    approved: List[SpellingCorrection] = []
    for c in corrections:
        _status('  [{}] "{}" -> "{}"  ({})'.format(c.timestamp, c.original, c.correction, c.context))
        try:
            answer = input("  Apply this correction? [Y/n] ").strip().lower()
        except EOFError:
            break
        if answer in ("", "y", "yes"):
            approved.append(c)
    return approved


async def _run_pipeline(args: argparse.Namespace) -> None:
    """Execute the full conversion flow.

    WHY: This is the async core of the CLI — it orchestrates all steps
    from validation through generation and saving.

    HOW: Validates inputs and quota, then inside one GeminiClient
    session checks for timestamps, proposes and reviews corrections if
    the mode needs them, and converts the transcript. The SRT is saved
    and the quota incremented only after everything succeeded.

    RULES:
    - No output file is written if any window fails
    - Quota errors, missing timestamps, and generator failures exit 1
    """
    input_path = Path(args.transcript_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    if args.max_chars <= 0:
        _fail("--max-chars must be positive")
    if args.concurrency <= 0:
        _fail("--concurrency must be positive")

    transcript = input_path.read_text(encoding="utf-8")
    if not transcript.strip():
        _fail("Transcript is empty: {}".format(input_path))

    usage = UsageTracker(args.usage_file)
    try:
        usage.check()
    except QuotaExceededError as e:
        _fail(str(e))

    mode = CorrectionMode(args.mode)

    try:
        async with GeminiClient() as client:
            if not args.skip_validation:
                _status("Checking transcript for timestamps...")
                if not await client.has_timestamps(transcript):
                    _fail(_NO_TIMESTAMPS_MESSAGE)

            corrections: List[SpellingCorrection] = []
            if mode.needs_corrections:
                _status("Analyzing transcript for spelling errors...")
                proposed = await client.propose_corrections(transcript)
                _status("  {} correction(s) proposed".format(len(proposed)))
                corrections = _review_corrections(proposed, args.accept_all)
                _status("  {} correction(s) approved".format(len(corrections)))

            _status("Generating subtitles...")
            request = ConversionRequest(
                mode=mode,
                corrections=corrections,
                temperature=args.temperature,
            )
            srt_text = await convert_transcript(
                transcript,
                client,
                request=request,
                max_chars=args.max_chars,
                timeout_s=args.timeout,
                on_status=_status,
                concurrency=args.concurrency,
            )
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except ValueError as e:
        # Config errors (missing API key, etc.)
        _fail(str(e))
    except ConversionError as e:
        _fail(str(e))

    output_path = _resolve_output_path(input_path.stem, output_dir)
    output_path.write_text(srt_text + "\n", encoding="utf-8")
    count = usage.increment()

    _status("")
    _status("Done! Saved {}".format(output_path))
    _status("  {} of {} conversions used today".format(count, usage.daily_limit))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the flow.
    """
    parser = argparse.ArgumentParser(
        prog="srt_converter",
        description="Convert a time-stamped transcript into an SRT subtitle "
                    "file using a text-generation model.",
    )

    parser.add_argument(
        "transcript_file",
        help="Path to the transcript text file.",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in CorrectionMode],
        default=CorrectionMode.NONE.value,
        help="Text correction mode (default: %(default)s).",
    )

    parser.add_argument(
        "--accept-all",
        action="store_true",
        help="Approve every proposed spelling correction without asking.",
    )

    parser.add_argument(
        "--max-chars",
        type=int,
        default=MAX_WINDOW_CHARS,
        help="Maximum characters per generation window (default: %(default)s).",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        default=MAX_CONCURRENT_WINDOWS,
        help="Maximum windows generated at the same time (default: %(default)s).",
    )

    parser.add_argument(
        "--temperature",
        type=float,
        default=GENERATION_TEMPERATURE,
        help="Generation temperature (default: %(default)s).",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the conversion after this many seconds.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the SRT file (default: same as transcript).",
    )

    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip the timestamp presence check.",
    )

    parser.add_argument(
        "--usage-file",
        default=USAGE_FILE,
        help="Path of the daily usage counter file (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    asyncio.run(_run_pipeline(args))


if __name__ == "__main__":
    main()
