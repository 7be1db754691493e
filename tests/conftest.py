"""Pytest configuration and fixtures."""

import json
import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest

from cargo_matrix.config import reset_settings_manager
from cargo_matrix.models.package import Dependency, Package, WorkspaceMetadata
from cargo_matrix.models.settings import Settings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, temp_dir):
    """Keep tests away from the user's settings file and environment."""
    monkeypatch.setenv("CARGO_MATRIX_HOME_DIR", str(temp_dir / "home"))
    monkeypatch.delenv("CARGO", raising=False)
    for key in ("CARGO_MATRIX_LOGGING_LEVEL", "CARGO_MATRIX_LOGGING_FILE", "CARGO_MATRIX_CARGO"):
        monkeypatch.delenv(key, raising=False)
    reset_settings_manager()
    yield
    reset_settings_manager()


@pytest.fixture
def settings():
    """Settings using a plain 'cargo' program."""
    return Settings(cargo="cargo")


@pytest.fixture
def make_package():
    """Factory for packages with features and dependencies."""

    def _make(name="demo", features=None, dependencies=None, config=None):
        metadata = {"cargo-matrix": config} if config is not None else None
        return Package(
            id=f"{name} 0.1.0 (path+file:///ws/{name})",
            name=name,
            features=features or {},
            dependencies=[Dependency(**dep) for dep in (dependencies or [])],
            metadata=metadata,
        )

    return _make


@pytest.fixture
def workspace(make_package):
    """A three member workspace plus one non-member package."""
    members = [
        make_package("alpha", features={"default": ["x"], "x": [], "y": ["dep:y"]},
                     dependencies=[{"name": "y", "optional": True}]),
        make_package("beta", features={"fast": [], "small": []},
                     config={"channel": [{"name": "default", "always_deny": ["small"]}]}),
        make_package("gamma"),
    ]
    outsider = make_package("serde")
    return WorkspaceMetadata(
        packages=members + [outsider],
        workspace_members=[p.id for p in members],
        workspace_root="/ws",
    )


@pytest.fixture
def workspace_json(workspace):
    """The workspace rendered like `cargo metadata` output."""
    return json.dumps(workspace.model_dump())


class RecordingRunner:
    """Stand-in for subprocess.run that records commands."""

    def __init__(self, returncodes=None):
        self.returncodes = list(returncodes or [])
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        code = self.returncodes.pop(0) if self.returncodes else 0
        return subprocess.CompletedProcess(cmd, code)


@pytest.fixture
def recording_runner():
    """Factory for RecordingRunner instances."""
    return RecordingRunner
