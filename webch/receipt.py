# webch/receipt.py
# Run receipts: a JSON record of what a merge run read, matched and wrote.
# Receipts are checked against schemas/receipt.schema.json before they leave
# the process.

from __future__ import annotations

import datetime as _dt
import hashlib
import json
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from jsonschema import Draft202012Validator

from .errors import MissingTerminatorWarning
from .lines import Line
from .merge import SectionMatch

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "receipt.schema.json"

_validator: Optional[Draft202012Validator] = None


def _now_utc_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def lines_hash(lines: Sequence[Line]) -> str:
    """sha256 over the line contents, each followed by LF."""
    h = hashlib.sha256()
    for line in lines:
        h.update(line.contents)
        h.update(b"\n")
    return f"sha256:{h.hexdigest()}"


def _location(line: Optional[Line]) -> Optional[Dict[str, Any]]:
    if line is None:
        return None
    return {"file": line.source_name, "line": line.line_number}


def make_base_receipt() -> Dict[str, Any]:
    return {
        "engine": "webch",
        "run": {"timestamp": _now_utc_iso(), "uuid": str(uuid.uuid4())},
        "web": None,
        "changeFiles": [],
    }


def record_web(receipt: Dict[str, Any], path: str, lines: Sequence[Line]) -> None:
    receipt["web"] = {"path": str(path), "hash": lines_hash(lines), "lines": len(lines)}


def section_entry(match: SectionMatch) -> Dict[str, Any]:
    return {
        "header": _location(match.section.header),
        "oldLines": match.removed,
        "newLines": match.inserted,
        "matchedAt": _location(match.first_line),
    }


def record_changefile(
    receipt: Dict[str, Any],
    path: str,
    lines: Sequence[Line],
    matches: Sequence[SectionMatch],
    warns: Sequence[MissingTerminatorWarning],
) -> None:
    receipt["changeFiles"].append({
        "path": str(path),
        "hash": lines_hash(lines),
        "sections": [section_entry(m) for m in matches],
        "warnings": [w.message for w in warns],
    })


def finish_ok(receipt: Dict[str, Any], destination: str, lines: Sequence[Line]) -> Dict[str, Any]:
    receipt["output"] = {"destination": destination, "lines": len(lines)}
    receipt["status"] = "ok"
    return receipt


def finish_error(receipt: Dict[str, Any], reason: str) -> Dict[str, Any]:
    receipt.pop("output", None)
    receipt["status"] = "error"
    receipt["reason"] = reason
    return receipt


def load_schema() -> Dict[str, Any]:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def validate_receipt(receipt: Dict[str, Any]) -> None:
    """Raises jsonschema.ValidationError on a malformed receipt."""
    global _validator
    if _validator is None:
        schema = load_schema()
        Draft202012Validator.check_schema(schema)
        _validator = Draft202012Validator(schema)
    _validator.validate(receipt)


def write_receipt(path: str, receipt: Dict[str, Any]) -> None:
    validate_receipt(receipt)
    Path(path).write_text(json.dumps(receipt, indent=2, sort_keys=True) + "\n", encoding="utf-8")
