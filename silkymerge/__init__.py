"""Silky script translation merger.

Stitches a human translation file back into a disassembled Silky Engine
script (``#1-STR_UNCRYPT`` / ``["..."]`` line pairs).
"""

__version__ = "1.0.0"

# Opcodes that bound or shape a dialogue literal
OP_STR_UNCRYPT = "STR_UNCRYPT"
OP_TO_NEW_STRING = "TO_NEW_STRING"
OP_RETURN = "RETURN"
OP_MESSAGE = "MESSAGE"
OP_PUSH_STR = "PUSH_STR"

# Single-line markers written by the disassembler (free bytes, labels,
# second offsets).  They carry no operand line.
MARKER_PREFIXES = ("#0", "#2", "#3")

# A lone middle dot literal is structural filler, never dialogue
FILLER_GLYPH = "\u30fb"  # ・
