"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from realroi.main import app
from realroi.calculations.model import Deal


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "golden: marks regression tests against recorded outputs")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def base_deal():
    """$450k rental, 20% down at 6.5% over 30 years, 10-year horizon."""
    return Deal(
        price=450000,
        down_pct=0.20,
        rate=6.5,
        term_years=30,
        taxes_pct=0.017,
        insurance_annual=1800,
        rent_monthly=2600,
        timeline_years=10,
        gains_rate=0.055,
        inflation_rate=0.03,
    )
