"""Data model for translation groups, logical script lines and their collections."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TranslationGroup:
    """One block of the translation file: JP reference text plus its EN lines."""
    reference_sublines: list = field(default_factory=list)   # JP, as written in the TL file
    translated_sublines: list = field(default_factory=list)  # EN lines of the same block
    line_no: int = 0       # TL file line that closed the block
    placeholder: bool = False  # text was filled in because the block lacked it

    @property
    def reference_line(self) -> str:
        return "".join(self.reference_sublines)

    @property
    def translated_line(self) -> str:
        return " ".join(self.translated_sublines)

    @property
    def is_empty(self) -> bool:
        return not self.reference_sublines and not self.translated_sublines

    def __str__(self) -> str:
        return f"{self.reference_line} / {self.translated_line}"


@dataclass
class LogicalLine:
    """One sentence of dialogue rebuilt from consecutive STR_UNCRYPT literals."""
    jp_sublines: list = field(default_factory=list)
    eng_sublines: list = field(default_factory=list)
    is_split_forced: bool = False  # code sits between sublines, so they can't be merged
    line_no: int = 0               # script line of the first literal
    combined_eng_line: str = ""
    reference_line: str = ""

    @property
    def combined_jp_line(self) -> str:
        return "".join(self.jp_sublines)

    @property
    def is_translated(self) -> bool:
        return bool(self.eng_sublines)

    @property
    def is_squashed(self) -> bool:
        """True when fewer EN sublines cover the JP ones (merged on output)."""
        return 0 < len(self.eng_sublines) < len(self.jp_sublines)

    def __str__(self) -> str:
        return self.combined_jp_line


@dataclass
class TranslationSet:
    """All groups parsed from one translation file, in file order."""
    source: str = ""
    groups: list = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.groups)

    def _build_index(self):
        """Build the reference-text lookup.  Later duplicates win."""
        self._by_reference = {}
        for g in self.groups:
            self._by_reference[g.reference_line] = g

    def get(self, index: int) -> Optional[TranslationGroup]:
        """Return the group at *index*, or None past either end."""
        if 0 <= index < len(self.groups):
            return self.groups[index]
        return None

    def get_by_reference(self, reference: str) -> Optional[TranslationGroup]:
        """Find a group anywhere in the file by its exact reference text."""
        if not hasattr(self, "_by_reference"):
            self._build_index()
        return self._by_reference.get(reference)

    def find_first(self, reference: str) -> Optional[TranslationGroup]:
        """Return the earliest translated group with this exact reference text."""
        for g in self.groups:
            if g.reference_line == reference and g.translated_sublines and not g.placeholder:
                return g
        return None


@dataclass
class ScriptLines:
    """Logical lines reconstructed from one script, in script order."""
    source: str = ""
    lines: list = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.lines)

    @property
    def split_forced_count(self) -> int:
        return sum(1 for ln in self.lines if ln.is_split_forced)
