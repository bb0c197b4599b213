"""Translation file parser.

The translation files are hand-edited text: JP reference lines (sometimes
spread over several physical lines), EN lines, comments, and ``\\`` lines
that close a block.  Translators forget terminators, prefix EN lines with
comment markers by accident, and leave blocks untranslated, so the parser
classifies each line on its own and patches up the obvious slips.
"""

import logging

from .codec import contains_wide, clean_quotes, is_punctuation, read_translation_lines
from .diagnostics import ALIGNMENT, CONSISTENCY, Report
from .project_model import TranslationGroup, TranslationSet

log = logging.getLogger(__name__)

TERMINATOR = "\\"

_COMMENT_PREFIXES = (";", ":", "●", "--")

# Soft-return markers and bracket characters removed before classification
_STRIP_TOKENS = ("\\r・", "\\r", "\n", "<", ">")

# In-line run marker: ":hret " plus the five-character id that follows it
_HRET_MARKER = ":hret "
_HRET_LENGTH = 11

# Reference text made only of these gets "..." as its translation
_ELLIPSIS_CHARS = frozenset("…。")


def clean_line(raw: str) -> str:
    """Normalize one physical line of a translation file."""
    line = raw.strip()
    for token in _STRIP_TOKENS:
        line = line.replace(token, "")
    # Trailing continuation backslash; a lone "\" is a terminator and stays
    if len(line) > 1 and line.endswith(TERMINATOR):
        line = line[:-1]
    return clean_quotes(line)


def is_garbage(line: str) -> bool:
    """Blank, comment, or control line."""
    if not line:
        return True
    if line.startswith(_COMMENT_PREFIXES):
        return True
    return line.startswith(TERMINATOR) and not line.startswith("\\r")


def strip_hret(line: str) -> str:
    index = line.find(_HRET_MARKER)
    if index == -1:
        return line
    return line[:index] + line[index + _HRET_LENGTH:]


class TranslationParser:
    """Turns one translation file into an ordered list of TranslationGroups."""

    def __init__(self, source: str = ""):
        self.source = source

    def parse_file(self, path: str) -> tuple:
        """Read and parse *path*.  Returns (TranslationSet, Report)."""
        return self.parse_lines(read_translation_lines(path))

    def parse_lines(self, raw_lines: list) -> tuple:
        """Parse already-decoded physical lines.  Returns (TranslationSet, Report)."""
        report = Report(self.source)
        result = TranslationSet(source=self.source)
        group = TranslationGroup()
        total = len(raw_lines)

        # One virtual terminator past the end flushes the last block
        for index in range(total + 1):
            line_no = index + 1
            if index == total:
                line = TERMINATOR
            else:
                line = clean_line(raw_lines[index])

            garbage = is_garbage(line)
            if (garbage and len(line) > 2 and group.reference_sublines
                    and not contains_wide(line)):
                # Accidental comment marker in front of an EN line
                garbage = False

            if garbage:
                if line.startswith(TERMINATOR):
                    if not group.is_empty:
                        self._close_group(group, result, report, line_no)
                        group = TranslationGroup()
                elif not line:
                    self._check_stray_blank(group, raw_lines, index, report)
                continue

            if contains_wide(line) or (is_punctuation(line) and not group.reference_sublines):
                if group.translated_sublines:
                    # Previous block was never terminated
                    group.line_no = line_no
                    result.groups.append(group)
                    group = TranslationGroup()
                group.reference_sublines.append(strip_hret(line))
                continue

            if line.startswith(TERMINATOR):
                line = line[1:]
            group.translated_sublines.append(line)

        log.debug("%s: parsed %d translation groups", self.source, result.total)
        return result, report

    def _close_group(self, group: TranslationGroup, result: TranslationSet,
                     report: Report, line_no: int):
        group.line_no = line_no

        if not group.translated_line:
            if all(c in _ELLIPSIS_CHARS for c in group.reference_line):
                group.translated_sublines.append("...")
            else:
                earlier = result.find_first(group.reference_line)
                if earlier is not None:
                    group.translated_sublines.extend(earlier.translated_sublines)
                else:
                    report.error(ALIGNMENT, f"No TL found:\n{group.reference_line}\n",
                                 line_no)
                    group.translated_sublines.append(f"({self.source}::{line_no} TL missing)")
                    group.placeholder = True
        elif not group.reference_sublines:
            report.warn(ALIGNMENT,
                        f"No reference line found for TL:\n{group.translated_line}\n",
                        line_no)
            group.reference_sublines.append(f"({self.source}::{line_no} ref missing)")
            group.placeholder = True

        result.groups.append(group)

    def _check_stray_blank(self, group: TranslationGroup, raw_lines: list,
                           index: int, report: Report):
        """Flag a blank line sitting between a JP block and its EN text."""
        if not group.reference_sublines or group.translated_sublines:
            return
        if index + 1 >= len(raw_lines):
            return
        following = clean_line(raw_lines[index + 1])
        if len(following) > 1 and not is_garbage(following) and not contains_wide(following):
            report.warn(CONSISTENCY,
                        f"Erroneous blank line before TL:\n{group.reference_line}\n",
                        index + 1)
