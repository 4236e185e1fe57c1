"""Obtain the diff between a base branch and HEAD from git."""

import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .errors import DiffError

logger = structlog.get_logger()


def git_diff_command(branch: str, git: str = "git") -> List[str]:
    # Zero context lines; only Added, Copied, Modified and Renamed files.
    return [git, "diff", branch, "HEAD", "--unified=0", "--diff-filter=ACMR"]


def run_git_diff(branch: str, cwd: Optional[Path] = None, git: str = "git") -> str:
    """Return the output of ``git diff <branch> HEAD``.

    Raises DiffError if git cannot be started or exits non-zero.
    """
    cmd = git_diff_command(branch, git)
    logger.debug("git.diff", cmd=" ".join(cmd), cwd=str(cwd) if cwd else None)
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise DiffError(f"exec git diff cmd error: {e}") from e
    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise DiffError(
            f"exec git diff cmd error: exit status {result.returncode}"
            + (f": {stderr}" if stderr else "")
        )
    return result.stdout


def read_diff_file(path: str) -> str:
    """Return diff text from *path*, or from stdin when *path* is ``-``.

    Bytes that are not valid UTF-8 are replaced; only the header lines
    of the diff are ever parsed.
    """
    if path == "-":
        return sys.stdin.buffer.read().decode("utf-8", errors="replace")
    try:
        return Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise DiffError(f"failed to read diff file {path}: {e}") from e
