#!/usr/bin/env python3
"""
Pytest configuration for Stencil tests.

Provides a fixed clock and ready-made template environments.
"""

import os
import sys
from datetime import datetime

import pytest
import pytz

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from templating import RenderConfig, create_environment
from observability.logging import clear_render_context


@pytest.fixture
def fixed_now():
    """End of January in a leap year, so month arithmetic has to clip."""
    return datetime(2024, 1, 31, 12, 0, tzinfo=pytz.utc)


@pytest.fixture
def environment():
    """Default environment: lenient undefined, no autoescape, UTC dates."""
    return create_environment()


@pytest.fixture
def strict_environment():
    return create_environment(RenderConfig(strict_undefined=True))


@pytest.fixture(autouse=True)
def reset_render_context():
    yield
    clear_render_context()
