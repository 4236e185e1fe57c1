"""Tests for inccov.stats.RunStats."""

from inccov.stats import RunStats


def _filled() -> RunStats:
    s = RunStats()
    s.changed_files = 2
    s.changed_ranges = 5
    s.profile_files = 10
    s.blocks_scanned = 120
    s.blocks_selected = 7
    s.statements_selected = 12
    s.statements_covered = 9
    s.files_matched = ["example.com/m/a.go", "example.com/m/b.go"]
    s.output = "increment_coverage.out"
    return s


def test_statements_uncovered():
    assert _filled().statements_uncovered == 3


def test_format_summary_header():
    assert RunStats().format_summary()[0] == "--- inccov summary ---"


def test_format_summary_counts():
    text = "\n".join(_filled().format_summary())
    assert "changed files:       2" in text
    assert "changed ranges:      5" in text
    assert "blocks:              120" in text
    assert "blocks:              7" in text
    assert "covered:             9" in text
    assert "uncovered:           3" in text


def test_format_summary_files_matched():
    lines = _filled().format_summary()
    assert "files matched (2): example.com/m/a.go, example.com/m/b.go" in lines


def test_format_summary_no_files_matched():
    assert "files matched: none" in RunStats().format_summary()


def test_format_summary_output_line():
    lines = _filled().format_summary()
    assert lines[-1] == "wrote increment_coverage.out (mode: count)"
