"""Disassembled Silky script reader.

Rebuilds dialogue sentences ("logical lines") out of the STR_UNCRYPT
literals of a script.  A sentence can be spread over several literals
joined by TO_NEW_STRING or an in-script RETURN; when other opcodes sit
between two pieces the pieces must stay separate on output, which is
recorded as a forced split.

Script layout, one opcode line followed by its operand line::

    #1-STR_UNCRYPT
    ["『５班か。どういうメンバーがいるんだろう』"]
    #1-TO_NEW_STRING
    [0]
"""

import logging
from enum import Enum

from . import FILLER_GLYPH, OP_MESSAGE, OP_RETURN, OP_STR_UNCRYPT, OP_TO_NEW_STRING
from .codec import LEGACY_ENCODING, clean_quotes, read_legacy_lines
from .diagnostics import Report
from .project_model import LogicalLine, ScriptLines

log = logging.getLogger(__name__)


class ParserState(Enum):
    IDLE = "idle"              # no pending text; between sentences or after code
    AWAIT_TEXT = "await_text"  # STR_UNCRYPT seen, its literal comes next
    AFTER_TEXT = "after_text"  # a literal was just read
    RETURNING = "returning"    # RETURN straight after text: a newline, not a boundary
    CONTINUING = "continuing"  # TO_NEW_STRING: next literal joins this sentence


class Event(Enum):
    UNCRYPT = OP_STR_UNCRYPT
    NEW_STRING = OP_TO_NEW_STRING
    RETURN = OP_RETURN
    MESSAGE = OP_MESSAGE
    OTHER = "other"
    TEXT = "text"


class Action(Enum):
    NONE = "none"
    SEAL = "seal"          # close the current line if it has text
    MARK_SPLIT = "split"   # code between two halves of a sentence
    CAPTURE = "capture"    # take the literal as a new subline


_S = ParserState
_E = Event
_A = Action

# (state, event) -> (action, next state).  Pairs missing from the table
# leave the state untouched.
TRANSITIONS = {
    (_S.IDLE, _E.UNCRYPT): (_A.SEAL, _S.AWAIT_TEXT),
    (_S.AFTER_TEXT, _E.UNCRYPT): (_A.SEAL, _S.AWAIT_TEXT),
    (_S.RETURNING, _E.UNCRYPT): (_A.NONE, _S.AWAIT_TEXT),
    (_S.CONTINUING, _E.UNCRYPT): (_A.NONE, _S.AWAIT_TEXT),

    (_S.IDLE, _E.NEW_STRING): (_A.NONE, _S.CONTINUING),
    (_S.AFTER_TEXT, _E.NEW_STRING): (_A.NONE, _S.CONTINUING),
    (_S.RETURNING, _E.NEW_STRING): (_A.NONE, _S.CONTINUING),

    (_S.AFTER_TEXT, _E.RETURN): (_A.NONE, _S.RETURNING),

    (_S.IDLE, _E.MESSAGE): (_A.SEAL, _S.IDLE),
    (_S.AFTER_TEXT, _E.MESSAGE): (_A.SEAL, _S.IDLE),
    (_S.RETURNING, _E.MESSAGE): (_A.SEAL, _S.IDLE),
    (_S.CONTINUING, _E.MESSAGE): (_A.SEAL, _S.IDLE),

    (_S.AFTER_TEXT, _E.OTHER): (_A.NONE, _S.IDLE),
    (_S.RETURNING, _E.OTHER): (_A.NONE, _S.IDLE),
    (_S.CONTINUING, _E.OTHER): (_A.MARK_SPLIT, _S.CONTINUING),

    (_S.AWAIT_TEXT, _E.TEXT): (_A.CAPTURE, _S.AFTER_TEXT),
}


def opcode_of(line: str):
    """Return the opcode name of an opcode line, or None for operand lines."""
    if line.startswith("#") and len(line) > 2:
        return line[3:]
    return None


def literal_text(operand: str) -> str:
    """Payload of a ``["..."]`` operand with return markers and quotes removed."""
    text = operand[2:-2]
    text = text.replace("\\r", "")
    return clean_quotes(text)


def classify(line: str):
    """Map a trimmed script line to a parser Event (None for uninteresting lines)."""
    opcode = opcode_of(line)
    if opcode is None:
        return _E.TEXT if line.startswith("[") else None
    try:
        return Event(opcode)
    except ValueError:
        return _E.OTHER


class ScriptParser:
    """Single pass over a script, producing its logical lines."""

    def __init__(self, source: str = "", encoding: str = LEGACY_ENCODING):
        self.source = source
        self.encoding = encoding

    def parse_file(self, path: str) -> tuple:
        """Read and parse *path*.  Returns (ScriptLines, Report)."""
        return self.parse_lines(read_legacy_lines(path, self.encoding))

    def parse_lines(self, raw_lines: list) -> tuple:
        """Parse decoded script lines.  Returns (ScriptLines, Report)."""
        report = Report(self.source)
        result = ScriptLines(source=self.source)
        state = _S.IDLE
        current = LogicalLine()

        for index, raw in enumerate(raw_lines):
            line = raw.strip()
            event = classify(line)
            if event is None:
                continue
            if state is _S.AWAIT_TEXT and event is not _E.TEXT:
                # The literal never came; drop the pending capture
                state = _S.IDLE
            if event is _E.NEW_STRING and not current.jp_sublines:
                continue

            action, next_state = TRANSITIONS.get((state, event), (_A.NONE, state))

            if action is _A.SEAL and current.jp_sublines:
                result.lines.append(current)
                current = LogicalLine()
            elif action is _A.MARK_SPLIT:
                current.is_split_forced = True
            elif action is _A.CAPTURE:
                text = literal_text(line)
                if text != FILLER_GLYPH:
                    if not current.jp_sublines:
                        current.line_no = index + 1
                    current.jp_sublines.append(text)

            state = next_state

        if current.jp_sublines:
            result.lines.append(current)

        log.debug("%s: %d logical lines (%d split-forced)", self.source,
                  result.total, result.split_forced_count)
        return result, report
