"""Core codec, parsing, timing, and chunk-merge modules.

WHY: The core package is the deterministic heart of the converter —
everything that repairs generated subtitle text into a valid track.
None of it knows which model produced the text.

HOW: timecode.py converts timestamps, srt.py parses and serializes
blocks, timing.py refines end times, chunking.py splits transcripts and
merges tracks, pipeline.py orchestrates windows through a generator.
ir.py holds the immutable value types they share.

RULES:
- Value types are frozen — every stage returns new tuples
- Recoverable per-block defects are filtered, never raised
- Only pipeline.py performs I/O (through the injected generator)
"""
