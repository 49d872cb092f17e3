"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from mcp_hub.core.registry_store import SeedRegistry, load_builtin_registry
from mcp_hub.core.settings import HubSettings, SettingsStore
from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
from mcp_hub.integrations.package_manager.fake import FakePackageManager
from mcp_hub.integrations.time.fake import FakeTime


@pytest.fixture
def seed() -> SeedRegistry:
    """The built-in registry shipped as package data."""
    return load_builtin_registry()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def settings() -> SettingsStore:
    """In-memory settings with defaults."""
    return SettingsStore(HubSettings(), None)


@pytest.fixture
def fake_filesystem(tmp_path: Path) -> FakePackageFilesystem:
    return FakePackageFilesystem(packages_root=tmp_path / "Packages")


@pytest.fixture
def fake_package_manager() -> FakePackageManager:
    return FakePackageManager()
