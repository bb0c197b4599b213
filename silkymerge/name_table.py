"""Character name substitution table (``nametable.txt``)."""

import logging
import os
from typing import Optional

from .diagnostics import CONSISTENCY, STRUCTURAL, Report

log = logging.getLogger(__name__)


class NameTable:
    """JP -> EN speaker names, shared by every script of a run.

    Also remembers which unknown names have already been reported so each
    one is warned about only once per run.
    """

    def __init__(self, names: Optional[dict] = None):
        self.names: dict = dict(names or {})
        self.unseen_names: set = set()

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def lookup(self, name: str) -> Optional[str]:
        return self.names.get(name)

    def translate(self, name: str, report: Report, line_no: Optional[int] = None) -> Optional[str]:
        """Return the EN name, warning the first time an unknown name shows up."""
        if name in self:
            return self.names[name]
        if name not in self.unseen_names:
            self.unseen_names.add(name)
            report.warn(CONSISTENCY, f"Unknown name {name}", line_no)
        return None

    def parse_lines(self, lines: list, report: Report):
        """Load ``jp<TAB>en`` rows.  A row with only a JP name maps to itself."""
        for row_no, row in enumerate(lines, start=1):
            parts = [p for p in row.rstrip("\r\n").split("\t") if p]
            if not parts:
                continue
            if len(parts) == 2:
                self.names[parts[0]] = parts[1]
            elif len(parts) == 1:
                report.warn(CONSISTENCY, f"Need a TL for name {parts[0]}", row_no)
                self.names[parts[0]] = parts[0]
            else:
                report.error(STRUCTURAL, f"Malformatted name table line: {row}", row_no)

    @classmethod
    def load(cls, path: str, report: Report) -> "NameTable":
        """Load a name table file; a missing file gives an empty table."""
        table = cls()
        if not os.path.exists(path):
            report.warn(STRUCTURAL, f"Can't find name table: {path}")
            return table
        with open(path, "r", encoding="utf-8-sig") as f:
            table.parse_lines(f.read().splitlines(), report)
        log.debug("Loaded %d names from %s", len(table), path)
        return table
