"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Shared fixtures with known-good and deliberately broken TLE lines
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

import pytest
from _pytest.config import Config
from _pytest.python import Function

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# =============================================================================
# COLLECTION HOOKS
# =============================================================================


def pytest_collection_modifyitems(config: Config, items: List[Function]) -> None:
    """Auto-mark tests under tests/integration."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# FIXTURES - TLE data
# =============================================================================

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

ICEYE_LINE1 = "1 62707U 25009DC  25306.22031033  .00004207  00000+0  39848-3 0  9995"
ICEYE_LINE2 = "2 62707  97.7269  23.9854 0002193 135.9671 224.1724 14.94137357 66022"


@pytest.fixture
def iss_lines() -> Tuple[str, str]:
    """Canonical ISS element set (2008 epoch, valid checksums)."""
    return ISS_LINE1, ISS_LINE2


@pytest.fixture
def iss_tle(iss_lines: Tuple[str, str]) -> str:
    """ISS as a 3-line TLE string."""
    return f"ISS (ZARYA)\n{iss_lines[0]}\n{iss_lines[1]}"


@pytest.fixture
def sample_tle_lines() -> Tuple[str, str]:
    """Sample TLE data for ICEYE-X44."""
    return ICEYE_LINE1, ICEYE_LINE2


@pytest.fixture
def iceye_tle(sample_tle_lines: Tuple[str, str]) -> str:
    """ICEYE-X44 as a 3-line TLE string."""
    return f"ICEYE-X44\n{sample_tle_lines[0]}\n{sample_tle_lines[1]}"


@pytest.fixture
def reference_time() -> datetime:
    """A moment a few days after the ICEYE-X44 epoch (2025-11-02)."""
    return datetime(2025, 11, 8, 0, 0, 0)


@pytest.fixture
def catalog_text(iss_tle: str, iceye_tle: str) -> str:
    """Two-record catalog document with a comment and blank lines."""
    return f"# Sample catalog\n{iss_tle}\n\n{iceye_tle}\n"
