# webch/lines.py
# Line model: one physical line of a file, contents kept as opaque bytes.

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .errors import ChangeFileIOError

LF = b"\n"
CR = b"\r"

# Platform default for "paired" terminators (CR LF).
PLATFORM_CRLF = os.name == "nt"


@dataclass(frozen=True)
class Line:
    source_name: str    # interned; shared by every line of one file
    line_number: int    # 1-based
    contents: bytes     # terminator stripped

    @property
    def location(self) -> str:
        return f"{self.source_name}({self.line_number})"


def split_lines(data: bytes, source_name: str, *, strip_cr: bool = PLATFORM_CRLF) -> List[Line]:
    """
    Split raw bytes on LF into numbered Lines.

    The LF is removed; a CR right before it is removed only when strip_cr is set.
    A trailing fragment without LF is still a line. Empty input gives no lines.
    """
    name = sys.intern(str(source_name))
    out: List[Line] = []
    if not data:
        return out
    chunks = data.split(LF)
    if chunks[-1] == b"":
        # data ended with LF; the split leaves an empty tail that is not a line
        chunks.pop()
    for n, chunk in enumerate(chunks, start=1):
        if strip_cr and chunk.endswith(CR):
            chunk = chunk[:-1]
        out.append(Line(name, n, chunk))
    return out


def read_lines(path: Union[str, Path], *, strip_cr: bool = PLATFORM_CRLF) -> List[Line]:
    """Read a whole file as Lines; the source name is the path as given."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ChangeFileIOError(str(path), e) from e
    return split_lines(data, str(path), strip_cr=strip_cr)
