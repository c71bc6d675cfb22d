"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

TESTS_DIR = Path(__file__).parent
LOCAL_TMP = TESTS_DIR / ".tmp"


@pytest.fixture(autouse=True)
def _isolated_git(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's git configuration and any enclosing repository out of tests."""
    global_config = tmp_path_factory.mktemp("gitconfig") / "config"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(LOCAL_TMP))


@pytest.fixture(autouse=True)
def _no_network() -> None:
    """Prevent tests from reaching a real repository host."""
    def _blocked_request(self: object, method: str, url: str, *args: object, **kwargs: object) -> None:
        raise RuntimeError("Network disabled in tests")

    with patch("requests.sessions.Session.request", new=_blocked_request):
        yield  # type: ignore[misc]


@pytest.fixture()
def work_dir(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Provide a local working directory under tests/.tmp/<test_name>/.

    Files are easy to inspect after a test run. The directory is cleaned
    and recreated at the start of each test.
    """
    test_name = request.node.name
    test_dir = LOCAL_TMP / test_name

    # Clean previous run
    if test_dir.exists():
        shutil.rmtree(test_dir)
    test_dir.mkdir(parents=True)

    monkeypatch.chdir(test_dir)
    return test_dir


@pytest.fixture()
def make_repo() -> Callable[..., None]:
    """Return a helper that initializes a git repo with the given remotes."""

    def _make_repo(path: Path, **remotes: str) -> None:
        subprocess.run(["git", "init"], cwd=path, capture_output=True, check=True)
        for name, url in remotes.items():
            subprocess.run(["git", "remote", "add", name, url], cwd=path, capture_output=True, check=True)

    return _make_repo
