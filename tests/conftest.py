"""Pytest configuration and fixtures for litemap tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from litemap.application.database import Database
from litemap.infrastructure.config import Config, DatabaseConfig
from litemap.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a configuration that creates a database in the temporary directory."""
    return Config(
        database=DatabaseConfig(
            path=temp_dir / "data" / "test.db",
            create=True,
            timeout_seconds=1.0,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def db(temp_dir: Path) -> Generator[Database, None, None]:
    """Provide a handle on a freshly created database file."""
    handle = Database.create(temp_dir / "test.db")
    yield handle
    handle.close()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
