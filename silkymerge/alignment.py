"""Alignment of script logical lines with translation groups.

The translation file and the script disagree on line counts, order and
sentence boundaries.  Each logical line is run through an ordered chain
of matchers; the first one that finds a group (or groups) wins, and the
match is then applied to the line.

Matching strategy, in priority order:
1. Exact match at the cursor
2. Exact match anywhere (translator reordered blocks)
3. Two sublines covered by two consecutive groups
4. Three sublines covered by three consecutive groups
5. Three sublines spread over two groups by sentence splitting
6. Best fuzzy match anywhere in the file
7. Every subline found on its own somewhere (reordered and split)
8. Closest reference subline among the neighbouring groups
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .diagnostics import ALIGNMENT, CONSISTENCY, Report
from .project_model import LogicalLine, ScriptLines, TranslationGroup, TranslationSet
from .text_processor import (edit_distance, fuzzy_equal, is_large_mismatch,
                             split_sentence, split_three, tolerance)

log = logging.getLogger(__name__)

# How a match is written into the logical line
APPLY_GROUP = "group"          # one group for the whole line
APPLY_PER_SUBLINE = "subline"  # one group per JP subline
APPLY_THREE_PART = "three"     # two groups spread over three sublines


@dataclass
class Match:
    strategy: str
    groups: list
    mode: str = APPLY_GROUP
    consumed: int = 0  # groups used past the cursor


@dataclass
class AlignmentContext:
    translations: TranslationSet
    cursor: int = -1

    @property
    def groups(self) -> list:
        return self.translations.groups

    def at(self, offset: int = 0) -> Optional[TranslationGroup]:
        return self.translations.get(self.cursor + offset)


# ── Matchers ────────────────────────────────────────────────────────
# Each takes (line, ctx) and returns a Match or None.

def match_positional(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    local = ctx.at()
    if local is not None and local.reference_line == line.combined_jp_line:
        return Match("positional", [local])
    return None


def match_global_exact(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    found = ctx.translations.get_by_reference(line.combined_jp_line)
    if found is not None:
        return Match("global-exact", [found])
    return None


def _coverage(line: LogicalLine, ctx: AlignmentContext, count: int) -> Optional[Match]:
    if len(line.jp_sublines) != count:
        return None
    groups = [ctx.at(k) for k in range(count)]
    if any(g is None for g in groups):
        return None
    for subline, group in zip(line.jp_sublines, groups):
        if not fuzzy_equal(subline, group.reference_line):
            return None
    return Match(f"{count}-subline-coverage", groups, APPLY_PER_SUBLINE, count - 1)


def match_two_sublines(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    return _coverage(line, ctx, 2)


def match_three_sublines(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    return _coverage(line, ctx, 3)


def match_three_part_split(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    if len(line.jp_sublines) != 3:
        return None
    first, second = ctx.at(), ctx.at(1)
    if first is None or second is None:
        return None
    return Match("three-part-split", [first, second], APPLY_THREE_PART, 1)


def match_best_fuzzy(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    target = line.combined_jp_line
    limit = tolerance(len(target))
    best, best_dist = None, limit + 1
    for group in ctx.groups:
        dist = edit_distance(target, group.reference_line, score_cutoff=limit)
        if dist < best_dist:
            best, best_dist = group, dist
            if dist == 0:
                break
    if best is not None:
        return Match("best-fuzzy", [best])
    return None


def match_scattered(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    if not line.jp_sublines:
        return None
    # Later groups overwrite earlier ones; each group fills one subline at most
    found = [None] * len(line.jp_sublines)
    for group in ctx.groups:
        for j, subline in enumerate(line.jp_sublines):
            if subline == group.reference_line:
                found[j] = group
                break
    if any(g is None for g in found):
        return None
    return Match("scattered-sublines", found, APPLY_PER_SUBLINE)


def match_neighbours(line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
    target = line.combined_jp_line
    best = ctx.at()
    best_dist = edit_distance(target, best.reference_line) if best is not None else None
    for offset in (-1, 0, 1):
        group = ctx.at(offset)
        if group is None:
            continue
        for subline in group.reference_sublines:
            dist = edit_distance(target, subline)
            if best_dist is None or dist < best_dist:
                best, best_dist = group, dist
    if best is not None:
        return Match("neighbour-fuzzy", [best])
    return None


DEFAULT_MATCHERS = (
    match_positional,
    match_global_exact,
    match_two_sublines,
    match_three_sublines,
    match_three_part_split,
    match_best_fuzzy,
    match_scattered,
    match_neighbours,
)


# ── Applying matches ────────────────────────────────────────────────

def _reference_contains(line: LogicalLine, group: TranslationGroup) -> bool:
    """True if one of the group's reference sublines is this whole line."""
    return line.combined_jp_line in group.reference_sublines


def _pad(line: LogicalLine):
    while len(line.eng_sublines) < len(line.jp_sublines):
        line.eng_sublines.append("")


def apply_group(line: LogicalLine, group: TranslationGroup, report: Report) -> bool:
    """Apply one group's (possibly combined) translation to every subline.

    Returns False when the line is split-forced and the EN text can't be
    broken down to match; the line is then padded with empty sublines.
    """
    line.combined_eng_line = group.translated_line
    line.reference_line = group.reference_line
    jp_count = len(line.jp_sublines)

    if jp_count == 1 and len(group.reference_sublines) > 1 and _reference_contains(line, group):
        line.eng_sublines.append(group.translated_line)
        return True

    succeeded = False
    if len(group.translated_sublines) == jp_count:
        line.eng_sublines.extend(group.translated_sublines)
        succeeded = True
    elif jp_count == 1 or not line.is_split_forced:
        # Safe to merge: the writer squashes the remaining literals
        line.eng_sublines.append(line.combined_eng_line)
        succeeded = True
    elif jp_count == 2:
        parts = split_sentence(line.combined_eng_line)
        if parts is not None:
            line.eng_sublines.extend(parts)
            succeeded = True
            report.warn(ALIGNMENT,
                        "Automatically splitting TL to match split JP line:\n"
                        f"{line.jp_sublines[0]}\n{parts[0]}\n{line.jp_sublines[1]}\n{parts[1]}\n",
                        line.line_no)

    if not succeeded:
        report.error(ALIGNMENT,
                     f"Couldn't break down line:\n{line.combined_jp_line}\n"
                     f"A split is forced into {jp_count} parts, "
                     f"but EN can't be autosplit: {line.combined_eng_line}\n",
                     line.line_no)
        line.eng_sublines.append(line.combined_eng_line)
        _pad(line)
        return False

    if not _reference_contains(line, group) and is_large_mismatch(line.combined_jp_line,
                                                                   line.reference_line):
        report.warn(CONSISTENCY,
                    "Source/reference line mismatch:\n"
                    f"{line.combined_jp_line}\n{line.reference_line}\n{line.combined_eng_line}\n",
                    line.line_no)
    return True


def apply_groups(line: LogicalLine, groups: list, report: Report) -> bool:
    """Apply one group per JP subline."""
    if len(groups) != len(line.jp_sublines):
        report.error(ALIGNMENT, f"Line count mismatch: {line.combined_jp_line}\n",
                     line.line_no)
        _pad(line)
        return False

    for subline, group in zip(line.jp_sublines, groups):
        line.eng_sublines.append(group.translated_line)
        if not fuzzy_equal(subline, group.reference_line):
            report.warn(CONSISTENCY,
                        f"Source/reference line mismatch:\n{subline}\n{group.reference_line}\n",
                        line.line_no)
    line.combined_eng_line = " ".join(line.eng_sublines)
    line.reference_line = "".join(g.reference_line for g in groups)
    return True


def apply_three_part(line: LogicalLine, first: TranslationGroup,
                     second: TranslationGroup, report: Report) -> bool:
    """Spread two groups over a three-subline JP line."""
    line.combined_eng_line = f"{first.translated_line} {second.translated_line}"
    line.reference_line = first.reference_line + second.reference_line
    if len(line.jp_sublines) != 3:
        report.error(ALIGNMENT, f"3 line count mismatch: {line.combined_jp_line}\n",
                     line.line_no)
        _pad(line)
        return False

    parts = split_three(first.translated_line, second.translated_line)
    if parts is None:
        details = "\n".join(line.jp_sublines + first.translated_sublines
                            + second.translated_sublines)
        report.error(ALIGNMENT,
                     "Source has multiple sublines with code inbetween, "
                     f"but TL can't be split:\n{details}\n",
                     line.line_no)
        line.eng_sublines.extend([first.translated_line, second.translated_line])
        _pad(line)
        return False

    line.eng_sublines.extend(parts)
    return True


def apply_match(line: LogicalLine, match: Match, report: Report) -> bool:
    if match.mode == APPLY_PER_SUBLINE:
        return apply_groups(line, match.groups, report)
    if match.mode == APPLY_THREE_PART:
        return apply_three_part(line, match.groups[0], match.groups[1], report)
    return apply_group(line, match.groups[0], report)


# ── Engine ──────────────────────────────────────────────────────────

@dataclass
class AlignmentStats:
    matched: int = 0
    unmatched: int = 0
    failed: int = 0
    by_strategy: dict = field(default_factory=dict)


class AlignmentEngine:
    """Walks the logical lines in script order, filling their EN sublines."""

    def __init__(self, matchers: Optional[list] = None):
        self.matchers: list[Callable] = list(matchers or DEFAULT_MATCHERS)

    def find_match(self, line: LogicalLine, ctx: AlignmentContext) -> Optional[Match]:
        for matcher in self.matchers:
            match = matcher(line, ctx)
            if match is not None:
                return match
        return None

    def align(self, script: ScriptLines, translations: TranslationSet,
              report: Optional[Report] = None) -> tuple:
        """Align every logical line.  Returns (AlignmentStats, Report)."""
        report = report if report is not None else Report(script.source)
        ctx = AlignmentContext(translations=translations)
        stats = AlignmentStats()

        for line in script.lines:
            ctx.cursor += 1
            match = self.find_match(line, ctx)
            if match is None:
                stats.unmatched += 1
                report.error(ALIGNMENT, f"No TL match found for {line.combined_jp_line}\n",
                             line.line_no)
                _pad(line)
                continue

            ctx.cursor += match.consumed
            stats.matched += 1
            stats.by_strategy[match.strategy] = stats.by_strategy.get(match.strategy, 0) + 1
            if not apply_match(line, match, report):
                stats.failed += 1

        log.debug("%s: aligned %d/%d lines %s", script.source, stats.matched,
                  script.total, stats.by_strategy)
        return stats, report
