"""
Pytest configuration and fixtures for Cloister tests.
"""

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from cloister.Config.schema import GateConfig
from cloister.TokenGate import issue_token


TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
MAX_FILE_SIZE = 64


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    """
    Create an allowed directory with a few files, plus a sibling directory
    whose name shares the allowed directory's prefix.
    """
    shared = tmp_path / "data" / "shared"
    shared.mkdir(parents=True)
    (shared / "readme.txt").write_text("Hello World")
    (shared / "data.json").write_text('{"key": "value"}')
    (shared / "subfolder").mkdir()
    (shared / "subfolder" / "nested.txt").write_text("Nested content")

    evil = tmp_path / "data" / "shared-evil"
    evil.mkdir()
    (evil / "secret.txt").write_text("should never be readable")

    return shared


@pytest.fixture
def gate_config(sandbox: Path) -> GateConfig:
    """Policy allowing only the sandbox directory."""
    return GateConfig(
        allowed_paths=(str(sandbox),),
        max_file_size=MAX_FILE_SIZE,
        jwt_secret=TEST_SECRET,
    )


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for tokens signed with the test secret."""
    def _make(subject: str = "tester", **kwargs) -> str:
        kwargs.setdefault("expires_in", 300)
        return issue_token(TEST_SECRET, subject, **kwargs)
    return _make


@pytest.fixture
def auth_headers(make_token) -> dict:
    return {"Authorization": f"Bearer {make_token()}", "X-Client-ID": "pytest"}


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every CLOISTER_* variable from the environment."""
    for key in list(os.environ):
        if key.startswith("CLOISTER_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def secret() -> str:
    """The signing secret behind gate_config and make_token."""
    return TEST_SECRET
