# webch/merge.py
# Applies parsed change-file sections to a line sequence.
#
# Matching is sequential and forward-only: each section's old lines are searched
# for only after the end of the previous section's match. Sections must therefore
# appear in the same order as their targets in the text.

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import NoMatchError
from .lines import Line
from .parser import ChangeSection


class TextBuffer:
    """Read-only line sequence with a forward cursor over the unconsumed tail."""

    def __init__(self, lines: Iterable[Line]):
        self._lines: Tuple[Line, ...] = tuple(lines)
        self._contents: Tuple[bytes, ...] = tuple(l.contents for l in self._lines)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def cursor(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._lines) - self._pos

    def line_at(self, index: int) -> Optional[Line]:
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def find(self, block: Sequence[Line]) -> Optional[int]:
        """
        Absolute index of the first run at or after the cursor whose contents
        equal block's contents, or None. An empty block matches at the cursor.
        """
        want = tuple(l.contents for l in block)
        if not want:
            # also matches with nothing left, so an insertion can append after the last line
            return self._pos
        n = len(want)
        first = want[0]
        last_start = len(self._contents) - n
        for i in range(self._pos, last_start + 1):
            if self._contents[i] == first and self._contents[i:i + n] == want:
                return i
        return None

    def take_until(self, index: int) -> Tuple[Line, ...]:
        if index < self._pos or index > len(self._lines):
            raise IndexError(f"cannot take until {index} from cursor {self._pos}")
        taken = self._lines[self._pos:index]
        self._pos = index
        return taken

    def skip(self, count: int) -> None:
        if count < 0 or count > self.remaining:
            raise IndexError(f"cannot skip {count} lines, {self.remaining} remaining")
        self._pos += count

    def take_rest(self) -> Tuple[Line, ...]:
        return self.take_until(len(self._lines))


@dataclass(frozen=True)
class SectionMatch:
    section: ChangeSection
    position: int               # index into the input text
    first_line: Optional[Line]  # first replaced (or following) line; None at end of text

    @property
    def removed(self) -> int:
        return len(self.section.old_lines)

    @property
    def inserted(self) -> int:
        return len(self.section.new_lines)


def merge_changefile(
    text: Sequence[Line], sections: Iterable[ChangeSection]
) -> Tuple[List[Line], List[SectionMatch]]:
    """
    Returns (new_text, matches). Raises NoMatchError, naming the section header,
    as soon as one section's old lines cannot be found in the remaining text;
    no partial result is returned in that case.
    """
    buf = TextBuffer(text)
    out: List[Line] = []
    matches: List[SectionMatch] = []

    for section in sections:
        pos = buf.find(section.old_lines)
        if pos is None:
            raise NoMatchError(section.header.source_name, section.header.line_number)
        out.extend(buf.take_until(pos))
        buf.skip(len(section.old_lines))
        out.extend(section.new_lines)
        matches.append(SectionMatch(section, pos, buf.line_at(pos)))

    out.extend(buf.take_rest())
    return out, matches


def apply_changefile(text: Sequence[Line], sections: Iterable[ChangeSection]) -> List[Line]:
    new_text, _ = merge_changefile(text, sections)
    return new_text


def apply_changefiles(
    text: Sequence[Line], change_files: Iterable[Iterable[ChangeSection]]
) -> List[Line]:
    """Cumulative application: each change file sees the previous one's output."""
    current = list(text)
    for sections in change_files:
        current = apply_changefile(current, sections)
    return current
