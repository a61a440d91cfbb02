"""Unit tests for the timing refiner.

WHY: The refiner defines what viewers see: a gap flashes a black
frame, an overlap stacks two captions. Start times must never move,
because they are the only timing trusted from the source.

HOW: Worked examples for the normal, degenerate, and trailing cases,
then property checks over randomized block sequences.
"""

import random

from srt_converter.core.ir import SubtitleBlock
from srt_converter.core.timing import TimingPolicy, refine_srt, refine_timing


def _blocks(starts, end=0):
    return tuple(
        SubtitleBlock(index=str(i + 1), start_ms=s, end_ms=end, lines=("text",))
        for i, s in enumerate(starts)
    )


class TestRefineTimingExamples:

    def test_extends_to_next_start(self):
        refined = refine_timing(_blocks([0, 4500, 9000]))
        assert [b.end_ms for b in refined] == [4499, 8999, 13000]

    def test_identical_starts_use_minimum_duration(self):
        refined = refine_timing(_blocks([5000, 5000]))
        assert refined[0].end_ms == 6000
        assert refined[1].end_ms == 9000

    def test_inverted_starts_use_minimum_duration(self):
        refined = refine_timing(_blocks([5000, 3000]))
        assert refined[0].end_ms == 6000

    def test_next_start_one_ms_later_uses_minimum_duration(self):
        # next.start - 1 == start, which is not after the start
        refined = refine_timing(_blocks([5000, 5001]))
        assert refined[0].end_ms == 6000

    def test_single_block_gets_trailing_duration(self):
        refined = refine_timing(_blocks([7000]))
        assert refined[0].end_ms == 11000

    def test_empty(self):
        assert refine_timing(()) == ()

    def test_ignores_generated_end_times(self):
        refined = refine_timing(_blocks([0, 2000], end=999_999))
        assert [b.end_ms for b in refined] == [1999, 6000]

    def test_custom_policy(self):
        policy = TimingPolicy(flicker_buffer_ms=40, min_duration_ms=500, trailing_duration_ms=2000)
        refined = refine_timing(_blocks([0, 1000, 1000]), policy)
        assert [b.end_ms for b in refined] == [960, 1500, 3000]

    def test_input_unchanged(self):
        original = _blocks([0, 4500])
        refine_timing(original)
        assert [b.end_ms for b in original] == [0, 0]

    def test_preserves_index_and_text(self):
        block = SubtitleBlock(index="a", start_ms=0, end_ms=0, lines=("one", "two"))
        (refined,) = refine_timing([block])
        assert refined.index == "a"
        assert refined.lines == ("one", "two")


class TestRefineTimingProperties:

    def test_start_anchoring(self):
        rng = random.Random(1234)
        for _ in range(50):
            starts = [rng.randint(0, 60_000) for _ in range(rng.randint(0, 12))]
            refined = refine_timing(_blocks(starts))
            assert [b.start_ms for b in refined] == starts

    def test_no_gaps_or_overlaps_for_increasing_starts(self):
        rng = random.Random(99)
        for _ in range(50):
            starts = sorted(rng.sample(range(0, 600_000, 7), rng.randint(2, 15)))
            refined = refine_timing(_blocks(starts))
            for current, nxt in zip(refined, refined[1:]):
                assert current.end_ms + 1 == nxt.start_ms
                assert current.end_ms > current.start_ms

    def test_every_end_after_start(self):
        rng = random.Random(7)
        for _ in range(50):
            starts = [rng.randint(0, 10_000) for _ in range(rng.randint(1, 10))]
            for block in refine_timing(_blocks(starts)):
                assert block.end_ms > block.start_ms


class TestRefineSrt:

    def test_parse_refine_serialize(self):
        text = (
            "1\n00:00:00,000 --> 00:00:01,000\nA\n\n"
            "2\n00:00:04,500 --> 00:00:05,000\nB"
        )
        assert refine_srt(text) == (
            "1\n00:00:00,000 --> 00:00:04,499\nA\n\n"
            "2\n00:00:04,500 --> 00:00:08,500\nB"
        )
