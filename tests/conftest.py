"""Shared fixtures for spannerspy tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from spannerspy.config import reset_config

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep host environment and any ./spannerspy.yaml out of every test."""
    for name in (
        "SPANNERSPY_CONFIG",
        "SPANNERSPY_LOG_LEVEL",
        "SPANNERSPY_PRETTY",
        "SPANNERSPY_INDENT",
        "SPANNERSPY_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_ddl() -> str:
    return (FIXTURES_DIR / "sample-schema.sql").read_text()


@pytest.fixture
def complex_ddl() -> str:
    return (FIXTURES_DIR / "complex-schema.sql").read_text()


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """Load the hand-written JSON schema document."""
    with open(FIXTURES_DIR / "sample.json") as f:
        return json.load(f)
