"""Credentials and user configuration for shissue.

Stored values come from git configuration (``shissue.username`` and
``shissue.token``) and, as a fallback, from a ``.shissue.toml`` file found
by searching upward from the working directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import toml

from shissue.utils import git_config_get

CONFIG_FILENAME = ".shissue.toml"
DISPLAY_MODES = ("long", "full", "short", "oneline")


@dataclass(frozen=True)
class Credentials:
    """Optional authentication data handed to every host request.

    GitHub uses ``username``/``password`` (HTTP basic); GitLab uses ``token``.
    No username means no basic authentication.
    """

    username: str = ""
    password: str = field(default="", repr=False)
    token: str = field(default="", repr=False)

    def with_password(self, password: str) -> Credentials:
        return replace(self, password=password)


@dataclass
class ShissueConfig:
    """Settings stored in .shissue.toml."""

    username: str = ""
    token: str = ""
    mode: str = "long"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShissueConfig:
        auth = data.get("auth", {})
        display = data.get("display", {})
        mode = display.get("mode", "long")
        if mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display mode in {CONFIG_FILENAME}: {mode}")
        return cls(
            username=auth.get("username", ""),
            token=auth.get("token", ""),
            mode=mode,
        )

    @classmethod
    def load(cls, path: Path | None = None) -> ShissueConfig:
        """Load .shissue.toml, searching upward from path. Defaults when absent."""
        config_path = find_config(path)
        if config_path is None:
            return cls()
        return cls.load_from(config_path)

    @classmethod
    def load_from(cls, config_path: Path) -> ShissueConfig:
        with open(config_path) as f:
            data = toml.load(f)
        return cls.from_dict(data)


def find_config(start: Path | None = None) -> Path | None:
    """Find .shissue.toml by searching upward from start directory."""
    if start is None:
        start = Path.cwd()

    current = start.resolve()
    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_credentials(directory: Path | None = None, config: ShissueConfig | None = None) -> Credentials:
    """Build credentials from git config, falling back to .shissue.toml."""
    if config is None:
        config = ShissueConfig.load(directory)
    username = git_config_get("shissue.username", cwd=directory) or config.username
    token = git_config_get("shissue.token", cwd=directory) or config.token
    return Credentials(username=username, token=token)
