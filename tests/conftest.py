"""Pytest configuration to ensure the RomID modules are importable."""

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
_root_str = str(_REPO_ROOT)
if _root_str not in sys.path:
    sys.path.insert(0, _root_str)

import RomHeader  # noqa: E402


@pytest.fixture(autouse=True)
def _quiet_debug():
    previous = RomHeader.debug_enabled()
    RomHeader.set_debug(False)
    yield
    RomHeader.set_debug(previous)
