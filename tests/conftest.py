"""Shared test fixtures."""

from pathlib import Path

import pytest

from notemarker.core.frame_rates import FRAME_RATES
from notemarker.core.timecode_calc import parse

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_export_path() -> Path:
    return FIXTURES_DIR / "sample_export.txt"


@pytest.fixture
def sample_export(sample_export_path) -> str:
    return sample_export_path.read_text(encoding="utf-8")


@pytest.fixture
def ndf():
    return FRAME_RATES["29.97"]


@pytest.fixture
def df():
    return FRAME_RATES["29.97drop"]


@pytest.fixture
def tc():
    """Parse a timecode at the default 29.97 non-drop profile."""
    return lambda text: parse(text, FRAME_RATES["29.97"])
