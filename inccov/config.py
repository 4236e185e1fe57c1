"""Load inccov configuration from pyproject.toml and optional .inccov.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError, ManifestError


@dataclass
class InccovConfig:
    """Runtime configuration for inccov."""

    # Base revision the current HEAD is diffed against
    branch: str = ""
    # Full coverage profile for HEAD (Go cover text format)
    coverage_file: str = "coverage.out"
    # Incremental profile written by the run
    output: str = "increment_coverage.out"
    # Module manifest whose first "module" line qualifies diff paths
    manifest: str = "go.mod"
    # Logical root prefixed to every diff path; read from the manifest
    # when left empty.
    module_root: str = ""

    # Only files ending in source_suffix and not in test_suffix are matched
    source_suffix: str = ".go"
    test_suffix: str = "_test.go"

    # False keeps the historical selection rule (block end <= range end).
    # True selects blocks that intersect the changed span on both sides.
    strict_overlap: bool = False
    # False always writes "mode: count"; True copies the input profile's mode.
    inherit_mode: bool = False

    @property
    def coverage_path(self) -> Path:
        return Path(self.coverage_file)

    @property
    def output_path(self) -> Path:
        return Path(self.output)


def _read_toml(path: Path) -> dict:
    """Read a TOML file; return empty dict if missing or unparseable."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError):
        return {}


def _apply(cfg: InccovConfig, d: dict) -> None:
    """Overlay dict values onto cfg, ignoring unknown keys.

    Raises ConfigError if a known key has a value of the wrong type.
    """
    valid = set(cfg.__dataclass_fields__)
    for key, val in d.items():
        if key not in valid:
            continue
        expected = type(getattr(cfg, key))
        if type(val) is not expected:
            raise ConfigError(
                f"{key} must be a {expected.__name__}, got {type(val).__name__} {val!r}"
            )
        setattr(cfg, key, val)


def load_config(project_root: Optional[Path] = None) -> InccovConfig:
    """Load config from pyproject.toml [tool.inccov], then .inccov.toml."""
    if project_root is None:
        project_root = Path.cwd()
    cfg = InccovConfig()
    pyproject = _read_toml(project_root / "pyproject.toml")
    _apply(cfg, pyproject.get("tool", {}).get("inccov", {}))
    local = _read_toml(project_root / ".inccov.toml")
    _apply(cfg, local)
    return cfg


def read_module_root(manifest: Path) -> str:
    """Return the module path declared in a go.mod-style manifest.

    Blank lines and ``//`` comments before the declaration are skipped.
    Raises ManifestError if the file is missing or has no module line.
    """
    try:
        text = manifest.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"can't find the {manifest} file") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"can't read {manifest}: {e}") from e

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        parts = line.split(None, 1)
        if parts[0] != "module" or len(parts) < 2:
            break
        name = parts[1].split("//", 1)[0].strip().strip('"`')
        if name:
            return name
        break
    raise ManifestError(f"no module declaration in {manifest}")
