# webch/parser.py
# Parses a change file into sections.
# Grammar (prefix match on each line; any text after the marker is ignored):
#   @x   opens a section; the line becomes the section header
#   @y   separates old lines from new lines
#   @z   closes the section
# Lines outside sections are commentary and skipped.

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .errors import MissingTerminatorWarning, StructureError, UnterminatedSectionError
from .lines import PLATFORM_CRLF, Line, read_lines

MARK_X = b"@x"
MARK_Y = b"@y"
MARK_Z = b"@z"

# ASCII whitespace, without vertical tab
_BLANK = b" \t\n\r\x0c"


@dataclass(frozen=True)
class ChangeSection:
    header: Line
    old_lines: Tuple[Line, ...]
    new_lines: Tuple[Line, ...]

    @property
    def is_insertion(self) -> bool:
        return not self.old_lines


def _is_blank(contents: bytes) -> bool:
    return not contents.lstrip(_BLANK)


def parse_changefile(lines: Iterable[Line]) -> Tuple[List[ChangeSection], List[MissingTerminatorWarning]]:
    """
    Returns (sections, warnings).

    Raises StructureError for @y/@z outside a section and UnterminatedSectionError
    when the file ends before the @y of an open section. A missing final @z is
    only reported as a warning; the section keeps whatever new lines were read.
    """
    sections: List[ChangeSection] = []
    warns: List[MissingTerminatorWarning] = []
    cursor = iter(lines)

    for line in cursor:
        contents = line.contents
        if not contents.startswith(MARK_X):
            if contents.startswith(MARK_Y) or contents.startswith(MARK_Z):
                raise StructureError(line.source_name, line.line_number)
            continue
        header = line

        old: List[Line] = []
        for line in cursor:
            if line.contents.startswith(MARK_Y):
                break
            # leading blank lines are not part of the old block
            if old or not _is_blank(line.contents):
                old.append(line)
        else:
            raise UnterminatedSectionError(header.source_name, header.line_number)

        new: List[Line] = []
        for line in cursor:
            if line.contents.startswith(MARK_Z):
                break
            new.append(line)
        else:
            warns.append(MissingTerminatorWarning(header.source_name, header.line_number))

        sections.append(ChangeSection(header, tuple(old), tuple(new)))

    return sections, warns


def read_changefile(
    path: Union[str, Path], *, strip_cr: bool = PLATFORM_CRLF
) -> Tuple[List[ChangeSection], List[MissingTerminatorWarning]]:
    return parse_changefile(read_lines(path, strip_cr=strip_cr))
