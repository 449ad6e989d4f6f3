"""
Pytest configuration and shared fixtures for keyscrub tests.

Provides small indicator sets, a throwaway YAML configuration, and a fixed
clock so banner dates and record timestamps are predictable.
"""

import os
import sys
from datetime import datetime

import pytest
import yaml

# Add parent directory to path for package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keyscrub.core.domain import Indicator  # noqa: E402
from keyscrub.core.loader import IndicatorLoader  # noqa: E402

IP_PATTERN = r"(?<![\d.])(\d{1,3}(?:\.\d{1,3}){3})(?!\d)"
UNC_PATTERN = r"(\\\\[^\\\s]+\\[^\\\s]+\\)"

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 0)


@pytest.fixture
def ip_indicator():
    """IPv4 indicator labelled Address."""
    return Indicator.compile(IP_PATTERN, "Address")


@pytest.fixture
def unc_indicator():
    """UNC share indicator labelled Hostname, capturing the whole \\\\host\\share\\ literal."""
    return Indicator.compile(UNC_PATTERN, "Hostname")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def write_config(tmp_path):
    """Return a helper that writes a YAML config and returns its path."""

    def _write(data, name="indicators.yaml"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config_file(write_config):
    """A minimal valid configuration with UNC and IPv4 indicators."""
    return write_config(
        {
            "banner": "Sanitized {date}",
            "keylist_banner": "Keylist {date}",
            "indicators": [
                {"label": "Hostname", "pattern": UNC_PATTERN},
                {"label": "Address", "pattern": IP_PATTERN},
            ],
            "ignore": ["127.0.0.1"],
        }
    )


@pytest.fixture
def loader(config_file):
    return IndicatorLoader(config_file)
