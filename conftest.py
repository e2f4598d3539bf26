"""
Repository-level pytest configuration.

Provides local defaults for the adapter settings so that a fresh clone runs
against a locally started backend and frontend. CI overrides these through
the environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _local_env_defaults() -> Generator[None, None, None]:
    """Set local environment defaults if not already provided by the user/CI."""
    defaults = {
        # UI
        "UI_BASE_URL": "http://localhost:3000",
        # API
        "API_BASE_URL": "http://localhost:8000",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
