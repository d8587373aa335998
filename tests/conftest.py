from __future__ import annotations

from datetime import datetime

import pytest


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 15, 8, 5, 0)
