"""Obtain the diff, match it against the coverage profile, and write the result."""

from pathlib import Path
from typing import Optional

import structlog

from .config import InccovConfig, read_module_root
from .diff_parser import parse_diff
from .emitter import DEFAULT_MODE, write_profile
from .git_diff import run_git_diff
from .matcher import Selection, match_blocks
from .profile import parse_profiles, profile_mode
from .stats import RunStats

logger = structlog.get_logger()


def resolve_module_root(config: InccovConfig) -> str:
    """Return the configured module root, reading the manifest if unset."""
    if config.module_root:
        return config.module_root
    return read_module_root(Path(config.manifest))


def run_engine(
    config: InccovConfig,
    diff_text: Optional[str] = None,
    stats: Optional[RunStats] = None,
) -> Selection:
    """Write the incremental profile described by *config*.

    The diff is taken from *diff_text* when given, otherwise from
    ``git diff <config.branch> HEAD``. Returns the selected blocks in
    output order. Raises an InccovError subclass on any failure; nothing
    is written in that case.
    """
    if stats is None:
        stats = RunStats()
    module_root = resolve_module_root(config)

    if diff_text is None:
        diff_text = run_git_diff(config.branch)
    changed = parse_diff(
        diff_text,
        module_root,
        source_suffix=config.source_suffix,
        test_suffix=config.test_suffix,
    )
    stats.changed_files = len(changed)
    stats.changed_ranges = sum(len(ranges) for ranges in changed.values())
    logger.info(
        "diff.parsed",
        module=module_root,
        files=stats.changed_files,
        ranges=stats.changed_ranges,
    )

    profiles = parse_profiles(config.coverage_path)
    stats.profile_files = len(profiles)
    stats.blocks_scanned = sum(len(p.blocks) for p in profiles)
    logger.info(
        "profile.parsed",
        path=str(config.coverage_path),
        files=stats.profile_files,
        blocks=stats.blocks_scanned,
    )

    selected = match_blocks(changed, profiles, strict=config.strict_overlap)
    stats.blocks_selected = len(selected)
    stats.statements_selected = sum(block.num_stmt for _, block in selected)
    stats.statements_covered = sum(
        block.num_stmt for _, block in selected if block.count > 0
    )
    for file_name, _ in selected:
        if file_name not in stats.files_matched:
            stats.files_matched.append(file_name)
    logger.info(
        "match.done",
        strict=config.strict_overlap,
        selected=stats.blocks_selected,
    )

    mode = profile_mode(profiles) if config.inherit_mode else DEFAULT_MODE
    write_profile(config.output_path, selected, mode)
    stats.mode = mode
    stats.output = str(config.output_path)
    logger.info("output.written", path=stats.output, mode=mode)
    return selected
