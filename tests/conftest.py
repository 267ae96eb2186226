"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from termsetup.adapters.mock import MockAdapter
from termsetup.adapters.registry import AdapterRegistry
from termsetup.core.models.settings import Settings


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A throwaway home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(home: Path, tmp_path: Path) -> Settings:
    """Settings rooted in the throwaway home."""
    shells = tmp_path / "shells"
    shells.write_text("/bin/sh\n/bin/bash\n")
    return Settings.for_home(home, shells_file=shells)


@pytest.fixture
def shell_mock() -> MockAdapter:
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def git_mock() -> MockAdapter:
    return MockAdapter(adapter_name="git")


@pytest.fixture
def registry(shell_mock: MockAdapter, git_mock: MockAdapter) -> AdapterRegistry:
    """Registry whose shell and git adapters are mocks."""
    reg = AdapterRegistry()
    reg.register(shell_mock)
    reg.register(git_mock)
    return reg
