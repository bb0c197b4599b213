"""Structured diagnostics collected while processing one script."""

import logging
from dataclasses import dataclass, field
from typing import Optional

# Severities
INFO = "info"
WARNING = "warning"
ERROR = "error"

# Kinds
STRUCTURAL = "structural"    # missing script, unreadable file
ALIGNMENT = "alignment"      # no match, count mismatch, unsplittable line
CONSISTENCY = "consistency"  # divergent reference, unknown name, stray blank
ENCODING = "encoding"        # output still holds wide characters
EXHAUSTION = "exhaustion"    # too many errors in one file
NOTE = "note"

_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


class MergeError(Exception):
    """Structural failure that stops processing of the current file."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass
class Diagnostic:
    severity: str
    kind: str
    source: str              # file name the diagnostic refers to
    message: str
    line_no: Optional[int] = None

    @property
    def location(self) -> str:
        if self.line_no is None:
            return self.source
        return f"{self.source}:{self.line_no}"

    def __str__(self) -> str:
        if not self.source:
            return self.message
        return f"{self.location}: {self.message}"


@dataclass
class Report:
    """Ordered diagnostics for one file (or for the run itself)."""
    source: str = ""
    diagnostics: list = field(default_factory=list)

    def add(self, severity: str, kind: str, message: str,
            line_no: Optional[int] = None) -> Diagnostic:
        diag = Diagnostic(severity, kind, self.source, message, line_no)
        self.diagnostics.append(diag)
        return diag

    def info(self, message: str, line_no: Optional[int] = None) -> Diagnostic:
        return self.add(INFO, NOTE, message, line_no)

    def warn(self, kind: str, message: str,
             line_no: Optional[int] = None) -> Diagnostic:
        return self.add(WARNING, kind, message, line_no)

    def error(self, kind: str, message: str,
              line_no: Optional[int] = None) -> Diagnostic:
        return self.add(ERROR, kind, message, line_no)

    def extend(self, other: "Report"):
        self.diagnostics.extend(other.diagnostics)

    @property
    def errors(self) -> list:
        return [d for d in self.diagnostics if d.severity == ERROR]

    @property
    def warnings(self) -> list:
        return [d for d in self.diagnostics if d.severity == WARNING]

    def of_kind(self, kind: str) -> list:
        return [d for d in self.diagnostics if d.kind == kind]

    def emit(self, logger: logging.Logger):
        """Forward every diagnostic to *logger* at its severity."""
        for diag in self.diagnostics:
            logger.log(_LEVELS[diag.severity], "%s", diag)
