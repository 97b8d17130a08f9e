# webch: apply WEB-style change files (@x/@y/@z) to a base text.

from .errors import (
    ChangeFileError,
    ChangeFileIOError,
    ConfigurationError,
    MergeError,
    MissingTerminatorWarning,
    NoMatchError,
    StructureError,
    UnterminatedSectionError,
    WebChError,
)
from .lines import Line, read_lines, split_lines
from .merge import SectionMatch, TextBuffer, apply_changefile, apply_changefiles, merge_changefile
from .parser import ChangeSection, parse_changefile, read_changefile

__version__ = "0.1.0"
