"""Translation merge engine: runs parse -> align -> write for each script."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .alignment import AlignmentEngine
from .codec import read_legacy_lines
from .config import MergeSettings
from .diagnostics import STRUCTURAL, MergeError, Report
from .name_table import NameTable
from .patch_writer import PatchWriter
from .script_parser import ScriptParser
from .tl_parser import TranslationParser

log = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    name: str
    succeeded: bool = False
    lines: int = 0
    matched: int = 0
    errors: int = 0
    warnings: int = 0
    aborted: bool = False


@dataclass
class BatchSummary:
    outcomes: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)


def find_source_file(source_dir: str, name: str) -> Optional[str]:
    """Find the script matching a translation file name, ignoring case."""
    wanted = name.lower()
    for entry in sorted(os.listdir(source_dir)):
        path = os.path.join(source_dir, entry)
        if entry.lower() == wanted and os.path.isfile(path):
            return path
    return None


class ScriptMerger:
    """Merges one translation file into its script."""

    def __init__(self, name_table: NameTable, settings: Optional[MergeSettings] = None,
                 aligner: Optional[AlignmentEngine] = None):
        self.name_table = name_table
        self.settings = settings or MergeSettings()
        self.aligner = aligner or AlignmentEngine()

    def merge(self, tl_path: str, source_path: str, out_path: str) -> tuple:
        """Process one file.  Returns (FileOutcome, Report).

        I/O and decoding problems become a structural error on the report;
        they never propagate past this file.
        """
        name = os.path.basename(tl_path)
        report = Report(name)
        outcome = FileOutcome(name=name)
        try:
            self._merge(tl_path, source_path, out_path, report, outcome)
        except (OSError, UnicodeDecodeError) as e:
            report.error(STRUCTURAL, f"Couldn't process {name}: {e}")
        outcome.errors = len(report.errors)
        outcome.warnings = len(report.warnings)
        return outcome, report

    def _merge(self, tl_path: str, source_path: str, out_path: str,
               report: Report, outcome: FileOutcome):
        name = outcome.name
        translations, tl_report = TranslationParser(name).parse_file(tl_path)
        report.extend(tl_report)

        raw_lines = read_legacy_lines(source_path, self.settings.script_encoding)
        script, script_report = ScriptParser(name, self.settings.script_encoding).parse_lines(raw_lines)
        report.extend(script_report)

        stats, _ = self.aligner.align(script, translations, report)
        outcome.lines = script.total
        outcome.matched = stats.matched

        writer = PatchWriter(self.name_table, self.settings)
        result = writer.write(raw_lines, script, out_path, report)
        outcome.aborted = result.aborted
        outcome.succeeded = not result.aborted and result.error_count == 0


class BatchRunner:
    """Processes every translation file of a directory, one at a time."""

    def __init__(self, source_dir: str, tl_dir: str, out_dir: str,
                 settings: Optional[MergeSettings] = None):
        self.source_dir = source_dir
        self.tl_dir = tl_dir
        self.out_dir = out_dir
        self.settings = settings or MergeSettings()
        self.name_table = NameTable()

    def check_dirs(self):
        """Raise MergeError when an input directory is missing; create the output dir."""
        if not os.path.isdir(self.source_dir):
            raise MergeError(
                f"Cannot find script source directory {os.path.abspath(self.source_dir)}")
        if not os.path.isdir(self.tl_dir):
            raise MergeError(
                f"Cannot find English script directory {os.path.abspath(self.tl_dir)}")
        os.makedirs(self.out_dir, exist_ok=True)

    def load_name_table(self):
        path = os.path.join(self.tl_dir, self.settings.name_table_file)
        report = Report(self.settings.name_table_file)
        self.name_table = NameTable.load(path, report)
        report.emit(log)

    def run(self) -> BatchSummary:
        """Process the whole batch.  Raises MergeError only for missing directories."""
        self.check_dirs()
        self.load_name_table()
        merger = ScriptMerger(self.name_table, self.settings)
        summary = BatchSummary()

        for entry in sorted(os.listdir(self.tl_dir)):
            tl_path = os.path.join(self.tl_dir, entry)
            if not os.path.isfile(tl_path):
                continue
            if entry == self.settings.name_table_file:
                continue
            if os.path.splitext(entry)[1] != self.settings.translation_suffix:
                log.info("Skipping %s-- not a %s", entry, self.settings.translation_suffix)
                summary.skipped.append(entry)
                continue

            source_path = find_source_file(self.source_dir, entry)
            if source_path is None:
                log.error("Couldn't find corresponding script file for %s", entry)
                summary.outcomes.append(FileOutcome(name=entry, errors=1))
                continue

            out_path = os.path.join(self.out_dir, os.path.basename(source_path))
            outcome, report = merger.merge(tl_path, source_path, out_path)
            report.emit(log)
            summary.outcomes.append(outcome)
            log.debug("%s: %d/%d lines matched, %d errors, %d warnings", entry,
                      outcome.matched, outcome.lines, outcome.errors, outcome.warnings)

        log.info("Run complete!")
        return summary
