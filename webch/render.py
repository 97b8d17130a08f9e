# webch/render.py
# Output renderers for a merged line sequence.
#
# Both renderers share the left column "<file>(<line>)" padded to a width
# computed over the whole output, followed by " | " and the line contents.
# The listing escapes every byte outside 0x20..0x7E as a reverse-video <XX>;
# the raw writer passes contents through untouched.

from __future__ import annotations
import sys
from typing import BinaryIO, Sequence, TextIO

from .lines import PLATFORM_CRLF, Line

SEPARATOR = " | "
_REVERSE = "\x1b[7m"
_RESET = "\x1b[0m"


def column_width(lines: Sequence[Line]) -> int:
    """Widest source name in UTF-8 bytes, plus digits of the largest line number, plus 2."""
    max_name = max((len(l.source_name.encode("utf-8")) for l in lines), default=0)
    max_num = max((l.line_number for l in lines), default=0)
    # two for the parentheses
    return max_name + len(str(max_num)) + 2


def location_column(line: Line, width: int) -> str:
    return f"{line.location:<{width}}{SEPARATOR}"


def escape_bytes(contents: bytes) -> str:
    parts = []
    for b in contents:
        if 0x20 <= b <= 0x7E:
            parts.append(chr(b))
        else:
            parts.append(f"{_REVERSE}<{b:02X}>{_RESET}")
    return "".join(parts)


def print_lines(lines: Sequence[Line], stream: TextIO | None = None) -> None:
    """Human-readable listing (terminal)."""
    out = stream if stream is not None else sys.stdout
    width = column_width(lines)
    for line in lines:
        out.write(location_column(line, width) + escape_bytes(line.contents) + "\n")
    out.flush()


def write_lines(lines: Sequence[Line], stream: BinaryIO, *, crlf: bool = PLATFORM_CRLF) -> None:
    """Byte-accurate writer; every line ends with LF, or CR LF when crlf is set."""
    eol = b"\r\n" if crlf else b"\n"
    width = column_width(lines)
    for line in lines:
        stream.write(location_column(line, width).encode("utf-8"))
        stream.write(line.contents)
        stream.write(eol)
    stream.flush()
