"""Writes the translated script.

Replays the source script pair by pair, swapping the EN sublines into the
STR_UNCRYPT literals the script parser identified, and speaker names into
the PUSH_STR name literals.  Every other line is copied as is.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from . import FILLER_GLYPH, MARKER_PREFIXES, OP_PUSH_STR, OP_STR_UNCRYPT, OP_TO_NEW_STRING
from .codec import clean_nametag, contains_wide, quote_literals
from .config import MergeSettings
from .diagnostics import ALIGNMENT, ENCODING, EXHAUSTION, Report
from .name_table import NameTable
from .project_model import ScriptLines
from .script_parser import literal_text, opcode_of

log = logging.getLogger(__name__)

FILLER_OPERAND = '["' + FILLER_GLYPH + '"]'
EMPTY_OPERAND = '[""]'
NAME_OPERAND_PREFIX = '["【'


def make_operand(text: str) -> str:
    return f'["{quote_literals(text)}"]'


@dataclass
class PatchResult:
    lines: list = field(default_factory=list)  # output lines, trailing blank included
    error_count: int = 0
    replaced: int = 0
    squashed: int = 0
    aborted: bool = False


class PatchWriter:
    """Produces the patched script for one file."""

    def __init__(self, name_table: Optional[NameTable] = None,
                 settings: Optional[MergeSettings] = None):
        self.name_table = name_table if name_table is not None else NameTable()
        self.settings = settings or MergeSettings()

    def render(self, raw_lines: list, script: ScriptLines, report: Report) -> PatchResult:
        """Build the output lines.  Stops early once too many errors pile up."""
        result = PatchResult()
        out = result.lines
        lines = script.lines
        line_index = 0   # current logical line
        subindex = 0     # current JP subline inside it
        squash = 0       # STR_UNCRYPT pairs still to drop for a merged line
        total = len(raw_lines)
        i = 0

        while i < total:
            if result.error_count >= self.settings.max_errors:
                report.error(EXHAUSTION,
                             f"Aborting after {result.error_count} errors; output is partial",
                             i + 1)
                result.aborted = True
                break

            op_line = raw_lines[i].strip()
            if not op_line:
                i += 1
                continue
            if op_line.startswith(MARKER_PREFIXES):
                # Label / offset marker: no operand line
                out.append(op_line)
                i += 1
                continue
            if i + 1 >= total:
                report.warn(ALIGNMENT, f"Opcode without operand at end of file: {op_line}", i + 1)
                break

            line_no = i + 1
            data_line = raw_lines[i + 1].strip()
            data_out = data_line
            i += 2

            opcode = opcode_of(op_line)
            logical = lines[line_index] if line_index < len(lines) else None

            if opcode == OP_TO_NEW_STRING and squash > 0:
                # Folded into the previous literal
                continue

            if opcode == OP_STR_UNCRYPT:
                if squash > 0:
                    if data_line != FILLER_OPERAND:
                        squash -= 1
                    result.squashed += 1
                    continue

                text = literal_text(data_line)
                if text == FILLER_GLYPH:
                    data_out = EMPTY_OPERAND
                elif logical is None:
                    report.error(ALIGNMENT, "Exhausted logical lines before EOF", line_no)
                    result.error_count += 1
                    result.aborted = True
                    break
                elif logical.jp_sublines[subindex] == text:
                    eng = ""
                    if subindex < len(logical.eng_sublines):
                        eng = logical.eng_sublines[subindex]
                    else:
                        report.error(ALIGNMENT,
                                     f"No corresponding ENG line for {text}", line_no)
                    data_out = make_operand(eng)
                    result.replaced += 1

                    if subindex == len(logical.jp_sublines) - 1:
                        line_index, subindex = line_index + 1, 0
                    elif subindex == len(logical.eng_sublines) - 1:
                        # One EN line covers a multi-part JP line: drop the rest
                        squash = len(logical.jp_sublines) - len(logical.eng_sublines)
                        line_index, subindex = line_index + 1, 0
                    else:
                        subindex += 1
                else:
                    report.error(ALIGNMENT,
                                 f"Logical lines don't match script on line {line_no}\n"
                                 f"Have: {text}\nExpected: {logical.jp_sublines[subindex]}\n",
                                 line_no)
                    result.error_count += 1

            elif opcode == OP_PUSH_STR:
                if data_line.startswith(NAME_OPERAND_PREFIX):
                    name = clean_nametag(data_line[2:-2])
                    eng_name = self.name_table.translate(name, report, line_no)
                    if eng_name is not None:
                        data_out = make_operand(eng_name)
                elif contains_wide(data_line):
                    # Unknown pushed text; wide characters would break the engine
                    data_out = make_operand(f"pushed str line {line_no}")

            rejected = [text for text in (op_line, data_out) if contains_wide(text)]
            if rejected:
                report.error(ENCODING,
                             "Can't write line because it contains full-width characters:\n"
                             + "\n".join(rejected),
                             line_no)
                result.error_count += 1
                continue

            out.append(op_line)
            out.append(data_out)

        out.append("")
        return result

    def write(self, raw_lines: list, script: ScriptLines, out_path: str,
              report: Report) -> PatchResult:
        """Render and write the patched script to *out_path* (overwritten)."""
        result = self.render(raw_lines, script, report)
        if os.path.exists(out_path):
            os.remove(out_path)
        newline = self.settings.output_newline
        with open(out_path, "w", encoding=self.settings.output_encoding, newline="") as f:
            for line in result.lines:
                f.write(line + newline)
        log.debug("%s: wrote %d lines (%d replaced, %d squashed, %d errors)",
                  out_path, len(result.lines), result.replaced, result.squashed,
                  result.error_count)
        return result
