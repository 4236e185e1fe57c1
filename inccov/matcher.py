"""Select the coverage blocks that belong to changed lines."""

from typing import Callable, Dict, List, Sequence, Set, Tuple

import structlog

from .diff_parser import ChangedRange
from .profile import CoverageBlock, Profile

logger = structlog.get_logger()

Selection = List[Tuple[str, CoverageBlock]]


def ends_within(changed: ChangedRange, block: CoverageBlock) -> bool:
    """Return True if the block's last line is not past the range's far end.

    This is the historical selection rule. It has no lower bound: any block
    ending before the changed span is selected as well.
    """
    return block.end_line <= changed.end


def overlaps(changed: ChangedRange, block: CoverageBlock) -> bool:
    """Return True if the block and ``[start, start + length]`` intersect."""
    return block.start_line <= changed.end and block.end_line >= changed.start


def match_file(
    ranges: Sequence[ChangedRange],
    blocks: Sequence[CoverageBlock],
    predicate: Callable[[ChangedRange, CoverageBlock], bool],
) -> List[int]:
    """Return indices of *blocks* selected by any range, each at most once.

    Ranges are tried in order; for each range the blocks are scanned in
    profile order, so the result lists indices in selection order.
    """
    seen: Set[int] = set()
    selected: List[int] = []
    for changed in ranges:
        for i, block in enumerate(blocks):
            if i in seen:
                continue
            if predicate(changed, block):
                seen.add(i)
                selected.append(i)
    return selected


def match_blocks(
    changed: Dict[str, List[ChangedRange]],
    profiles: Sequence[Profile],
    strict: bool = False,
) -> Selection:
    """Return ``(file, block)`` pairs for every block touched by the diff.

    Profiles whose file has no changed ranges contribute nothing. With
    *strict* the two-sided ``overlaps`` test replaces ``ends_within``.
    """
    predicate = overlaps if strict else ends_within
    result: Selection = []
    for profile in profiles:
        ranges = changed.get(profile.file_name)
        if not ranges:
            continue
        indices = match_file(ranges, profile.blocks, predicate)
        result.extend((profile.file_name, profile.blocks[i]) for i in indices)
        logger.debug(
            "match.file",
            file=profile.file_name,
            ranges=len(ranges),
            blocks=len(profile.blocks),
            selected=len(indices),
        )
    return result
