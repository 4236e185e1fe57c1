"""Parse unified diffs into changed line ranges per source file."""

import posixpath
from typing import Dict, List, NamedTuple, Optional

import structlog
from unidiff.constants import RE_HUNK_HEADER

logger = structlog.get_logger()

_GIT_HEADER = "diff --git"


class ChangedRange(NamedTuple):
    """New-side span of one hunk.

    ``length`` is 0 when the hunk header omitted the line count; the span
    still covers ``start``.
    """

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


def parse_hunk_header(line: str) -> Optional[ChangedRange]:
    """Return the new-side range of a ``@@ -a,b +c,d @@`` header, or None.

    The ``-`` group describes the pre-change file and is ignored.
    """
    match = RE_HUNK_HEADER.match(line)
    if match is None:
        return None
    tgt_start, tgt_len = match.group(3), match.group(4)
    return ChangedRange(int(tgt_start), int(tgt_len) if tgt_len else 0)


def qualify_path(module_root: str, path: str) -> str:
    """Join a repo-relative path onto the module root with ``/`` separators."""
    joined = posixpath.join(module_root, path.replace("\\", "/"))
    return posixpath.normpath(joined)


def _target_path(header: str) -> str:
    """Return the new-side path of a ``diff --git a/<p> b/<p>`` line."""
    path = header.rsplit(" ", 1)[-1]
    if path.startswith("b/"):
        path = path[2:]
    return path


def is_source_file(path: str, source_suffix: str, test_suffix: str) -> bool:
    return path.endswith(source_suffix) and not path.endswith(test_suffix)


def parse_diff(
    diff_text: str,
    module_root: str,
    source_suffix: str = ".go",
    test_suffix: str = "_test.go",
) -> Dict[str, List[ChangedRange]]:
    """Parse a ``git diff --unified=0`` string into file -> changed ranges.

    Keys are module-qualified paths of non-test source files; each value
    lists the new-side range of every hunk in diff order. Hunks under a
    skipped file section, or before any section, are ignored.
    """
    result: Dict[str, List[ChangedRange]] = {}
    current: Optional[List[ChangedRange]] = None

    for line in diff_text.splitlines():
        if line.startswith(_GIT_HEADER):
            path = _target_path(line)
            if not is_source_file(path, source_suffix, test_suffix):
                logger.debug("diff.file_skipped", path=path)
                current = None
                continue
            current = result.setdefault(qualify_path(module_root, path), [])
        elif line.startswith("@@"):
            if current is None:
                continue
            changed = parse_hunk_header(line)
            if changed is not None:
                current.append(changed)

    logger.debug(
        "diff.parsed",
        files=len(result),
        ranges=sum(len(r) for r in result.values()),
    )
    return result
