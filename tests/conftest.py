# tests/conftest.py
# Put the project root (the folder holding 'webch' and 'tests') on sys.path so
# `from webch...` imports work under pytest without installing the package.

import sys
import pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

try:
    import webch  # noqa: F401
except Exception as e:
    has_pkg = (ROOT / "webch" / "__init__.py").is_file()
    raise RuntimeError(
        f"Failed to import 'webch' from {ROOT_STR}. "
        f"webch/__init__.py exists: {has_pkg}"
    ) from e
