"""Cumulative statistics for a single inccov run."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RunStats:
    """Holds counts for a single inccov run."""

    # Diff side
    changed_files: int = 0
    changed_ranges: int = 0

    # Profile side
    profile_files: int = 0
    blocks_scanned: int = 0

    # Output side
    blocks_selected: int = 0
    statements_selected: int = 0
    statements_covered: int = 0
    files_matched: List[str] = field(default_factory=list)

    mode: str = "count"
    output: str = ""

    @property
    def statements_uncovered(self) -> int:
        return self.statements_selected - self.statements_covered

    def format_summary(self) -> List[str]:
        """Return a list of lines forming the human-readable run summary."""
        lines = ["--- inccov summary ---"]
        lines.append("diff:")
        lines.append(f"  changed files:       {self.changed_files}")
        lines.append(f"  changed ranges:      {self.changed_ranges}")
        lines.append("profile:")
        lines.append(f"  files:               {self.profile_files}")
        lines.append(f"  blocks:              {self.blocks_scanned}")
        lines.append("selected:")
        lines.append(f"  blocks:              {self.blocks_selected}")
        lines.append(f"  statements:          {self.statements_selected}")
        lines.append(f"  covered:             {self.statements_covered}")
        lines.append(f"  uncovered:           {self.statements_uncovered}")
        if self.files_matched:
            flist = ", ".join(self.files_matched)
            lines.append(f"files matched ({len(self.files_matched)}): {flist}")
        else:
            lines.append("files matched: none")
        lines.append(f"wrote {self.output} (mode: {self.mode})")
        return lines
