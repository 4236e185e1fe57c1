"""Go coverage profile parser.

Go test produces coverage profiles with format:
mode: set|count|atomic
<package>/<file>:<startline>.<startcol>,<endline>.<endcol> <numstmt> <count>

Example:
mode: count
example.com/m/pkg/x.go:12.5,14.1 2 7
example.com/m/pkg/x.go:16.2,18.3 1 0

Blocks are grouped per file and sorted by start position. Blocks that
share a position (from concatenated per-package profiles) are folded into
one: counts are OR-ed in set mode and summed otherwise.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, NamedTuple

import structlog

from .errors import ProfileParseError

logger = structlog.get_logger()

_MODE_PREFIX = "mode: "

_BLOCK_LINE = re.compile(r"^(.+):(\d+)\.(\d+),(\d+)\.(\d+) (\d+) (\d+)$")


class CoverageBlock(NamedTuple):
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_stmt: int
    count: int

    def same_position(self, other: "CoverageBlock") -> bool:
        return (
            self.start_line == other.start_line
            and self.start_col == other.start_col
            and self.end_line == other.end_line
            and self.end_col == other.end_col
        )


@dataclass
class Profile:
    """All coverage blocks recorded for one source file."""

    file_name: str
    mode: str
    blocks: List[CoverageBlock] = field(default_factory=list)


def parse_block_line(line: str):
    """Split a profile line into (file_name, CoverageBlock).

    Raises ValueError if the line does not match the block format.
    """
    match = _BLOCK_LINE.match(line)
    if match is None:
        raise ValueError(f"line {line!r} doesn't match expected format")
    file_name = match.group(1)
    numbers = [int(g) for g in match.groups()[1:]]
    return file_name, CoverageBlock(*numbers)


def _fold_blocks(blocks: List[CoverageBlock], mode: str) -> List[CoverageBlock]:
    """Sort blocks by start and merge samples recorded at the same position."""
    ordered = sorted(blocks, key=lambda b: (b.start_line, b.start_col))
    folded: List[CoverageBlock] = []
    for block in ordered:
        if folded and block.same_position(folded[-1]):
            last = folded[-1]
            if block.num_stmt != last.num_stmt:
                raise ProfileParseError(
                    f"inconsistent NumStmt: changed from {last.num_stmt}"
                    f" to {block.num_stmt}"
                )
            if mode == "set":
                count = last.count | block.count
            else:
                count = last.count + block.count
            folded[-1] = last._replace(count=count)
            continue
        folded.append(block)
    return folded


def parse_profile_text(text: str) -> List[Profile]:
    """Parse the text of a coverage profile into per-file profiles.

    Profiles are returned sorted by file name. Raises ProfileParseError on
    a bad mode line, a malformed block line, or conflicting statement
    counts for the same block.
    """
    lines = text.splitlines()
    if not lines:
        raise ProfileParseError("bad mode line: empty profile")

    mode_line = lines[0].strip()
    mode = mode_line[len(_MODE_PREFIX) :].strip()
    if not mode_line.startswith(_MODE_PREFIX) or not mode:
        raise ProfileParseError(f"bad mode line: {mode_line!r}")

    blocks_by_file: Dict[str, List[CoverageBlock]] = {}
    for lineno, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line:
            continue
        # Concatenated per-package profiles repeat the mode line.
        if line.startswith(_MODE_PREFIX):
            continue
        try:
            file_name, block = parse_block_line(line)
        except ValueError as e:
            raise ProfileParseError(f"line {lineno}: {e}") from e
        blocks_by_file.setdefault(file_name, []).append(block)

    profiles = [
        Profile(file_name=name, mode=mode, blocks=_fold_blocks(blocks, mode))
        for name, blocks in sorted(blocks_by_file.items())
    ]
    logger.debug(
        "profile.parsed",
        mode=mode,
        files=len(profiles),
        blocks=sum(len(p.blocks) for p in profiles),
    )
    return profiles


def parse_profiles(path: Path) -> List[Profile]:
    """Read and parse the coverage profile at *path*."""
    if not path.exists():
        raise ProfileParseError(f"coverage file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileParseError(f"failed to read coverage file {path}: {e}") from e
    return parse_profile_text(content)


def profile_mode(profiles: List[Profile], default: str = "count") -> str:
    """Return the declared mode shared by *profiles*, or *default* if none."""
    return profiles[0].mode if profiles else default
