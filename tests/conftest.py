from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import settings

settings.register_profile("prodgrid", deadline=None, max_examples=150)
settings.load_profile("prodgrid")

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture
def origin() -> datetime:
    return datetime(2024, 1, 25, 8, 0, 0)


@pytest.fixture
def midnight() -> datetime:
    return datetime(2024, 1, 25)


@pytest.fixture
def examples_dir() -> Path:
    return EXAMPLES_DIR
