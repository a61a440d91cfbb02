"""Transcript-to-SRT converter — model-backed subtitle generation with repair.

WHY: A text-generation model can turn a time-stamped transcript into
subtitle text, but its output is never guaranteed to be a valid track:
timestamps come back in mixed spellings, blocks are malformed, end times
overlap or leave gaps, and long transcripts must be split across calls.
This package wraps the generator in a deterministic repair layer that
always yields one gapless, sequentially indexed SRT track (or a clear
failure).

HOW: Four-stage pipeline — chunk the transcript into windows, generate
each window (API client), normalize and parse the returned SRT (core
codec + parser), refine timing and merge the windows into one track.
Each stage is independently testable.

RULES:
- The core (timecode, srt, timing, chunking) is pure and model-agnostic
- The generator is a collaborator passed in by the caller
- A failed window fails the whole conversion — no partial tracks
"""

__version__ = "0.1.0"
