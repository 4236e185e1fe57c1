"""Tests for run_engine."""

from unittest.mock import patch

import pytest

from inccov.config import InccovConfig
from inccov.engine import resolve_module_root, run_engine
from inccov.errors import DiffError, ManifestError, ProfileParseError
from inccov.profile import CoverageBlock
from inccov.stats import RunStats

DIFF = """\
diff --git a/pkg/x.go b/pkg/x.go
index 3b18e51..a9c2f1d 100644
--- a/pkg/x.go
+++ b/pkg/x.go
@@ -10,2 +12,3 @@ func Run() error {
diff --git a/pkg/x_test.go b/pkg/x_test.go
@@ -1,2 +1,30 @@
"""

PROFILE = """\
mode: set
example.com/m/pkg/x.go:12.5,14.1 2 7
example.com/m/pkg/x.go:16.2,20.3 3 0
example.com/m/pkg/x_test.go:1.1,2.2 1 1
example.com/m/pkg/y.go:1.1,2.2 1 1
"""


def _config(tmp_path, **kwargs) -> InccovConfig:
    coverage = tmp_path / "coverage.out"
    coverage.write_text(PROFILE, encoding="utf-8")
    defaults = dict(
        branch="main",
        coverage_file=str(coverage),
        output=str(tmp_path / "increment_coverage.out"),
        module_root="example.com/m",
    )
    defaults.update(kwargs)
    return InccovConfig(**defaults)


def _output(config: InccovConfig) -> str:
    return config.output_path.read_text(encoding="utf-8")


def test_writes_selected_blocks(tmp_path):
    config = _config(tmp_path)
    selected = run_engine(config, diff_text=DIFF)
    assert selected == [("example.com/m/pkg/x.go", CoverageBlock(12, 5, 14, 1, 2, 7))]
    assert _output(config) == "mode: count\nexample.com/m/pkg/x.go:12.5,14.1 2 7\n"


def test_empty_diff_writes_header_only(tmp_path):
    config = _config(tmp_path)
    assert run_engine(config, diff_text="") == []
    assert _output(config) == "mode: count\n"


def test_deleted_lines_only_writes_header_only(tmp_path):
    config = _config(tmp_path)
    diff = "diff --git a/pkg/x.go b/pkg/x.go\n@@ -5,3 +4,0 @@\n"
    run_engine(config, diff_text=diff)
    assert _output(config) == "mode: count\n"


def test_inherit_mode(tmp_path):
    config = _config(tmp_path, inherit_mode=True)
    run_engine(config, diff_text=DIFF)
    assert _output(config).startswith("mode: set\n")


def test_strict_overlap(tmp_path):
    diff = "diff --git a/pkg/x.go b/pkg/x.go\n@@ -1 +18,1 @@\n"
    compat = run_engine(_config(tmp_path), diff_text=diff)
    strict = run_engine(_config(tmp_path, strict_overlap=True), diff_text=diff)
    assert [b.start_line for _, b in compat] == [12]
    assert [b.start_line for _, b in strict] == [16]


def test_runs_git_when_no_diff_text(tmp_path):
    config = _config(tmp_path, branch="release")
    with patch("inccov.engine.run_git_diff", return_value=DIFF) as git:
        run_engine(config)
    git.assert_called_once_with("release")
    assert "x.go:12.5,14.1" in _output(config)


def test_idempotent(tmp_path):
    config = _config(tmp_path)
    run_engine(config, diff_text=DIFF)
    first = config.output_path.read_bytes()
    run_engine(config, diff_text=DIFF)
    assert config.output_path.read_bytes() == first


def test_stats_populated(tmp_path):
    stats = RunStats()
    run_engine(_config(tmp_path), diff_text=DIFF, stats=stats)
    assert stats.changed_files == 1
    assert stats.changed_ranges == 1
    assert stats.profile_files == 3
    assert stats.blocks_scanned == 4
    assert stats.blocks_selected == 1
    assert stats.statements_selected == 2
    assert stats.statements_covered == 2
    assert stats.files_matched == ["example.com/m/pkg/x.go"]
    assert stats.mode == "count"


def test_git_failure_writes_nothing(tmp_path):
    config = _config(tmp_path)
    with patch("inccov.engine.run_git_diff", side_effect=DiffError("boom")):
        with pytest.raises(DiffError):
            run_engine(config)
    assert not config.output_path.exists()


def test_bad_profile_writes_nothing(tmp_path):
    config = _config(tmp_path)
    config.coverage_path.write_text("not a profile\n", encoding="utf-8")
    with pytest.raises(ProfileParseError):
        run_engine(config, diff_text=DIFF)
    assert not config.output_path.exists()


# ---------------------------------------------------------------------------
# resolve_module_root
# ---------------------------------------------------------------------------


def test_resolve_module_root_prefers_config():
    assert resolve_module_root(InccovConfig(module_root="x.org/y")) == "x.org/y"


def test_resolve_module_root_reads_manifest(tmp_path):
    manifest = tmp_path / "go.mod"
    manifest.write_text("module example.com/m\n", encoding="utf-8")
    assert resolve_module_root(InccovConfig(manifest=str(manifest))) == "example.com/m"


def test_missing_manifest_fails_before_diff(tmp_path):
    config = _config(tmp_path, module_root="", manifest=str(tmp_path / "go.mod"))
    with patch("inccov.engine.run_git_diff") as git:
        with pytest.raises(ManifestError):
            run_engine(config)
    git.assert_not_called()
