"""Tests for the command-line interface.

WHY: The CLI is the main entry point for users. Wrong argument defaults,
an overwritten SRT, or an output file left behind after a failed
conversion would all reach users directly.

HOW: Parser and helper tests run without I/O. End-to-end tests call
main() on tmp_path files with GeminiClient patched to return an
in-memory fake, so no network call is ever made.

RULES:
- The Gemini API is never called
- Every run uses its own usage file under tmp_path
"""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import patch

import pytest

from conftest import EXPECTED_SRT, SAMPLE_GENERATED, SAMPLE_TRANSCRIPT, FakeGenerator
from srt_converter.cli import (
    _resolve_output_path,
    _review_corrections,
    build_parser,
    main,
)
from srt_converter.config import GENERATION_TEMPERATURE, MAX_CONCURRENT_WINDOWS, MAX_WINDOW_CHARS
from srt_converter.core.corrections import SpellingCorrection


class FakeClient(FakeGenerator):
    """Async context manager standing in for GeminiClient."""

    def __init__(self, respond, has_timestamps=True, corrections=()):
        super().__init__(respond)
        self._has_timestamps = has_timestamps
        self._corrections = list(corrections)
        self.checked = 0
        self.proposed = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def has_timestamps(self, text):
        self.checked += 1
        return self._has_timestamps

    async def propose_corrections(self, text):
        self.proposed += 1
        return self._corrections


def _corrections():
    return [
        SpellingCorrection(id="corr-0", original="fractions", correction="fractions!", timestamp="0:04"),
        SpellingCorrection(id="corr-1", original="them", correction="then", timestamp="0:09"),
    ]


@pytest.fixture
def transcript_file(tmp_path):
    path = tmp_path / "lecture.txt"
    path.write_text(SAMPLE_TRANSCRIPT, encoding="utf-8")
    return path


@pytest.fixture
def usage_file(tmp_path):
    return tmp_path / "usage.json"


def _run(fake, *argv):
    with patch("srt_converter.cli.GeminiClient", return_value=fake):
        main([str(a) for a in argv])


# ---------------------------------------------------------------------------
# Parser and helpers
# ---------------------------------------------------------------------------


class TestBuildParser:

    def test_defaults(self):
        args = build_parser().parse_args(["lecture.txt"])
        assert args.transcript_file == "lecture.txt"
        assert args.mode == "none"
        assert args.max_chars == MAX_WINDOW_CHARS
        assert args.temperature == GENERATION_TEMPERATURE
        assert args.timeout is None
        assert args.concurrency == MAX_CONCURRENT_WINDOWS
        assert not args.accept_all
        assert not args.skip_validation

    def test_mode_choices(self):
        args = build_parser().parse_args(["t.txt", "--mode", "both", "--accept-all"])
        assert args.mode == "both"
        assert args.accept_all
        with pytest.raises(SystemExit):
            build_parser().parse_args(["t.txt", "--mode", "shout"])


class TestResolveOutputPath:

    def test_no_conflict(self, tmp_path):
        assert _resolve_output_path("lecture", tmp_path) == tmp_path / "lecture.srt"

    def test_numeric_suffix_on_conflict(self, tmp_path):
        (tmp_path / "lecture.srt").write_text("x")
        (tmp_path / "lecture-2.srt").write_text("x")
        assert _resolve_output_path("lecture", tmp_path) == tmp_path / "lecture-3.srt"


class TestReviewCorrections:

    def test_accept_all(self):
        corrections = _corrections()
        assert _review_corrections(corrections, accept_all=True) == corrections

    def test_interactive_answers(self, monkeypatch):
        answers = iter(["n", ""])
        monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
        approved = _review_corrections(_corrections(), accept_all=False)
        assert [c.id for c in approved] == ["corr-1"]

    def test_eof_rejects_remaining(self, monkeypatch):
        answers = iter(["y"])

        def fake_input(prompt):
            try:
                return next(answers)
            except StopIteration:
                raise EOFError

        monkeypatch.setattr("builtins.input", fake_input)
        approved = _review_corrections(_corrections(), accept_all=False)
        assert [c.id for c in approved] == ["corr-0"]


# ---------------------------------------------------------------------------
# End-to-end runs
# ---------------------------------------------------------------------------


class TestMain:

    def test_writes_srt_and_counts_usage(self, transcript_file, usage_file):
        fake = FakeClient(lambda text: SAMPLE_GENERATED)
        _run(fake, transcript_file, "--usage-file", usage_file)

        output = transcript_file.with_suffix(".srt")
        assert output.read_text(encoding="utf-8") == EXPECTED_SRT + "\n"
        assert fake.checked == 1
        assert json.loads(usage_file.read_text())["count"] == 1

    def test_second_run_does_not_overwrite(self, transcript_file, usage_file):
        _run(FakeClient(lambda text: SAMPLE_GENERATED), transcript_file, "--usage-file", usage_file)
        _run(FakeClient(lambda text: SAMPLE_GENERATED), transcript_file, "--usage-file", usage_file)
        assert transcript_file.with_name("lecture-2.srt").is_file()

    def test_output_dir(self, transcript_file, usage_file, tmp_path):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        _run(FakeClient(lambda text: SAMPLE_GENERATED), transcript_file,
             "--usage-file", usage_file, "--output-dir", out_dir)
        assert (out_dir / "lecture.srt").is_file()

    def test_spelling_mode_accept_all(self, transcript_file, usage_file):
        fake = FakeClient(lambda text: SAMPLE_GENERATED, corrections=_corrections())
        _run(fake, transcript_file, "--mode", "spelling", "--accept-all", "--usage-file", usage_file)
        assert fake.proposed == 1
        assert 'Change "them" to "then" near 0:09' in fake.calls[0][1]

    def test_skip_validation(self, transcript_file, usage_file):
        fake = FakeClient(lambda text: SAMPLE_GENERATED, has_timestamps=False)
        _run(fake, transcript_file, "--skip-validation", "--usage-file", usage_file)
        assert fake.checked == 0
        assert transcript_file.with_suffix(".srt").is_file()

    def test_missing_file_exits_1(self, tmp_path, usage_file):
        with pytest.raises(SystemExit) as excinfo:
            _run(FakeClient(str), tmp_path / "missing.txt", "--usage-file", usage_file)
        assert excinfo.value.code == 1

    def test_quota_exhausted_exits_before_any_call(self, transcript_file, usage_file, capsys):
        usage_file.write_text(json.dumps({"date": date.today().isoformat(), "count": 1000}))
        fake = FakeClient(lambda text: SAMPLE_GENERATED)
        with pytest.raises(SystemExit) as excinfo:
            _run(fake, transcript_file, "--usage-file", usage_file)
        assert excinfo.value.code == 1
        assert fake.checked == 0
        assert fake.calls == []
        assert "Daily limit reached" in capsys.readouterr().err

    def test_no_timestamps_exits_1(self, transcript_file, usage_file):
        fake = FakeClient(lambda text: SAMPLE_GENERATED, has_timestamps=False)
        with pytest.raises(SystemExit) as excinfo:
            _run(fake, transcript_file, "--usage-file", usage_file)
        assert excinfo.value.code == 1
        assert fake.calls == []
        assert not transcript_file.with_suffix(".srt").exists()

    def test_generator_failure_leaves_no_output(self, transcript_file, usage_file, capsys):
        def respond(text):
            raise RuntimeError("model overloaded")

        with pytest.raises(SystemExit) as excinfo:
            _run(FakeClient(respond), transcript_file, "--usage-file", usage_file)
        assert excinfo.value.code == 1
        assert "model overloaded" in capsys.readouterr().err
        assert not transcript_file.with_suffix(".srt").exists()
        assert not usage_file.exists()

    def test_non_positive_max_chars_exits_1(self, transcript_file, usage_file):
        with pytest.raises(SystemExit) as excinfo:
            _run(FakeClient(str), transcript_file, "--max-chars", "0", "--usage-file", usage_file)
        assert excinfo.value.code == 1

    def test_non_positive_concurrency_exits_1(self, transcript_file, usage_file):
        fake = FakeClient(lambda text: SAMPLE_GENERATED)
        with pytest.raises(SystemExit) as excinfo:
            _run(fake, transcript_file, "--concurrency", "0", "--usage-file", usage_file)
        assert excinfo.value.code == 1
        assert fake.calls == []
