#!/usr/bin/env python3
"""
webch CLI: apply WEB change files to a base file.

Usage:
  webch [-v|-vv] [-w DIR] [-o PATH|-] [--receipt-out PATH] WEBFILE CHFILE [CHFILE ...]

Options are read only up to WEBFILE; every later argument is a change file.

Output:
  no -o       annotated listing on stdout (non-printable bytes shown as <XX>)
  -o -        raw lines on stdout
  -o PATH     raw lines written to PATH

Change files are applied in the order given, each to the previous result.
Any error aborts the run with exit status 1.
"""

from __future__ import annotations
import argparse
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import ChangeFileIOError, ConfigurationError, WebChError
from .lines import PLATFORM_CRLF, Line, read_lines
from .merge import merge_changefile
from .parser import parse_changefile
from .receipt import finish_error, finish_ok, make_base_receipt, record_changefile, record_web, write_receipt
from .render import print_lines, write_lines


@dataclass(frozen=True)
class Config:
    web_file: str
    change_files: Tuple[str, ...]
    verbose: int = 0
    directory: Optional[str] = None
    output: Optional[str] = None
    crlf: bool = PLATFORM_CRLF
    receipt_out: Optional[str] = None


class _ArgParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise ConfigurationError(message)


def _make_parser() -> argparse.ArgumentParser:
    p = _ArgParser(
        prog="webch",
        description="Apply WEB change files (@x/@y/@z) to a base file.",
    )
    p.add_argument("-v", dest="verbose", action="count", default=0, help="Verbose progress on stderr (-vv for section detail).")
    p.add_argument("-w", "--workdir", dest="directory", metavar="DIR", help="Change to DIR before touching any file.")
    p.add_argument("-o", "--output", dest="output", metavar="PATH", help="Write raw output to PATH ('-' for stdout).")
    p.add_argument("--crlf", dest="crlf", action="store_true", default=PLATFORM_CRLF,
                   help="Strip CR before LF on read and write CR LF line ends.")
    p.add_argument("--no-crlf", dest="crlf", action="store_false", help="Plain LF handling.")
    p.add_argument("--receipt-out", metavar="PATH", help="Write a JSON run receipt to PATH.")
    p.add_argument("web_file", help="Base (web) file.")
    # options end at the base file; everything after it is a change file
    p.add_argument("change_files", nargs=argparse.REMAINDER, help="Change files, applied in order.")
    return p


def build_config(argv: Optional[List[str]] = None) -> Config:
    args = _make_parser().parse_args(argv)
    if not args.web_file or not args.change_files:
        raise ConfigurationError("not enough arguments")
    return Config(
        web_file=args.web_file,
        change_files=tuple(args.change_files),
        verbose=args.verbose,
        directory=args.directory,
        output=args.output,
        crlf=args.crlf,
        receipt_out=args.receipt_out,
    )


def _note(config: Config, level: int, msg: str) -> None:
    if config.verbose >= level:
        print(f"[webch] {msg}", file=sys.stderr)


def _emit(config: Config, lines: List[Line]) -> str:
    if config.output is None:
        print_lines(lines, sys.stdout)
        return "listing"
    if config.output == "-":
        sys.stdout.flush()
        write_lines(lines, sys.stdout.buffer, crlf=config.crlf)
        return "-"
    _note(config, 1, f"Output file: {config.output}")
    try:
        with open(config.output, "wb") as f:
            write_lines(lines, f, crlf=config.crlf)
    except OSError as e:
        raise ChangeFileIOError(config.output, e) from e
    return config.output


def run(config: Config, receipt: Optional[Dict[str, Any]] = None) -> List[Line]:
    """Load, merge every change file in order, render. Returns the final lines."""
    if receipt is None:
        receipt = make_base_receipt()

    if config.directory:
        _note(config, 1, f"Working directory: {config.directory}")
        try:
            os.chdir(config.directory)
        except OSError as e:
            raise ChangeFileIOError(config.directory, e) from e

    _note(config, 1, f"Web file: {config.web_file}")
    text = read_lines(config.web_file, strip_cr=config.crlf)
    record_web(receipt, config.web_file, text)

    for chfile in config.change_files:
        _note(config, 1, f"Change file: {chfile}")
        chlines = read_lines(chfile, strip_cr=config.crlf)
        sections, warns = parse_changefile(chlines)
        for w in warns:
            print(f"[webch] warning: {w.message}", file=sys.stderr)
        text, matches = merge_changefile(text, sections)
        for m in matches:
            where = m.first_line.location if m.first_line is not None else "end of text"
            _note(config, 2, f"section {m.section.header.location} matched at {where}")
        record_changefile(receipt, chfile, chlines, matches, warns)

    destination = _emit(config, text)

    if config.receipt_out:
        _save_receipt(config.receipt_out, finish_ok(receipt, destination, text))
    return text


def _save_receipt(path: str, receipt: Dict[str, Any]) -> None:
    try:
        write_receipt(path, receipt)
    except OSError as e:
        raise ChangeFileIOError(path, e) from e


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = build_config(argv)
    except ConfigurationError as e:
        print(f"Problem parsing arguments: {e}", file=sys.stderr)
        return 1

    receipt = make_base_receipt()
    try:
        run(config, receipt)
        return 0
    except WebChError as e:
        print(f"Application error: {e}", file=sys.stderr)
        if config.receipt_out:
            try:
                _save_receipt(config.receipt_out, finish_error(receipt, str(e)))
            except ChangeFileIOError as re_err:
                print(f"Application error: {re_err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
