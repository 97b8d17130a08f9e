# webch/errors.py
# Error taxonomy for reading, parsing and merging change files.

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


class WebChError(Exception):
    pass


class ConfigurationError(WebChError):
    """Bad or missing command-line arguments; raised before any file is touched."""


class ChangeFileIOError(WebChError):
    def __init__(self, path: str, cause: Optional[OSError] = None):
        reason = cause.strerror if cause is not None and cause.strerror else str(cause or "I/O error")
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.cause = cause


# ----------------------------
# Parse errors
# ----------------------------

class ChangeFileError(WebChError):
    def __init__(self, message: str, source_name: str, line_number: int):
        super().__init__(message)
        self.source_name = source_name
        self.line_number = line_number


class StructureError(ChangeFileError):
    def __init__(self, source_name: str, line_number: int):
        super().__init__(
            f"Change file missing @x at {source_name}({line_number})",
            source_name, line_number,
        )


class UnterminatedSectionError(ChangeFileError):
    def __init__(self, source_name: str, line_number: int):
        super().__init__(
            f"Change file ended after @x at {source_name}({line_number})",
            source_name, line_number,
        )


# ----------------------------
# Merge errors
# ----------------------------

class MergeError(WebChError):
    pass


class NoMatchError(MergeError):
    def __init__(self, source_name: str, line_number: int):
        super().__init__(f"Change file section do not match [{source_name}({line_number})]")
        self.source_name = source_name
        self.line_number = line_number


# ----------------------------
# Diagnostics (non-fatal)
# ----------------------------

@dataclass(frozen=True)
class MissingTerminatorWarning:
    source_name: str    # change file
    line_number: int    # header of the unterminated section

    @property
    def message(self) -> str:
        return f"At the end of change file missing @z [{self.source_name}]"

    def __str__(self) -> str:
        return self.message
