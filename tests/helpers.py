"""Builders for small disassembled scripts and translation files."""

from silkymerge.project_model import LogicalLine, TranslationGroup, TranslationSet


def uncrypt(text):
    return ["#1-STR_UNCRYPT", f'["{text}"]']


def op(name, operand="[0]"):
    return [f"#1-{name}", operand]


def script(*chunks):
    """Flatten opcode/operand chunks into script lines (trailing blank included)."""
    lines = []
    for chunk in chunks:
        lines.extend(chunk)
    lines.append("")
    return lines


def group(reference, translated):
    refs = [reference] if isinstance(reference, str) else list(reference)
    tls = [translated] if isinstance(translated, str) else list(translated)
    return TranslationGroup(reference_sublines=refs, translated_sublines=tls)


def tl_set(*groups):
    return TranslationSet(source="test.txt", groups=list(groups))


def logical(*sublines, forced=False):
    return LogicalLine(jp_sublines=list(sublines), is_split_forced=forced)


def write_cp932(path, lines):
    path.write_bytes("\r\n".join(lines).encode("cp932"))
