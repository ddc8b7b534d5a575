"""
pytest configuration for partnercenter_bindings tests.

Adds src directory to Python path for imports and clears log context
between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _clean_log_context():
    """Reset per-invocation log context around each test."""
    from partnercenter_bindings.logging import clear_log_context

    clear_log_context()
    yield
    clear_log_context()


