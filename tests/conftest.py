"""
Pytest configuration for teraspend tests.

This file helps pytest find and run tests correctly by setting up the Python path
and shared fixtures.
"""

import os
import sys

import pytest

# Add the src directory to the Python path to help with imports
src_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from teraspend.core import dispatch
from teraspend.core.config import TeraspendConfig
from teraspend.core.models.record import UTXORecord


def new_record_bins(output_count: int = 3, owner: str = None) -> dict:
    """Bins of a freshly created record: all outputs unspent, unlocked."""
    return {
        name: value
        for name, value in UTXORecord.new(output_count, owner=owner).to_bins().items()
        if value is not None
    }


@pytest.fixture
def make_record():
    return new_record_bins


@pytest.fixture
def record():
    """A record with 3 unspent outputs."""
    return new_record_bins(3)


@pytest.fixture(autouse=True)
def default_module_config():
    """Reset the handler configuration between tests."""
    dispatch.configure(TeraspendConfig())
    yield
    dispatch.configure(TeraspendConfig())
