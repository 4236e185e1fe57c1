"""Serialize selected coverage blocks back into the Go profile format."""

from pathlib import Path
from typing import Iterable, Tuple

import structlog

from .errors import OutputError
from .profile import CoverageBlock

logger = structlog.get_logger()

DEFAULT_MODE = "count"


def format_block(file_name: str, block: CoverageBlock) -> str:
    return (
        f"{file_name}:{block.start_line}.{block.start_col},"
        f"{block.end_line}.{block.end_col} {block.num_stmt} {block.count}"
    )


def render_profile(
    selected: Iterable[Tuple[str, CoverageBlock]], mode: str = DEFAULT_MODE
) -> str:
    """Return the profile text: the mode header, then one line per block."""
    lines = [f"mode: {mode}"]
    lines.extend(format_block(file_name, block) for file_name, block in selected)
    return "\n".join(lines) + "\n"


def write_profile(
    path: Path,
    selected: Iterable[Tuple[str, CoverageBlock]],
    mode: str = DEFAULT_MODE,
) -> None:
    """Create or truncate *path* and write the rendered profile to it.

    Raises OutputError if the file cannot be opened or written.
    """
    text = render_profile(selected, mode)
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as e:
        raise OutputError(f"failed to write {path}: {e}") from e
    logger.debug("output.written", path=str(path), bytes=len(text))
