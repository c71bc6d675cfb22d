"""Utility helpers for shissue."""

from __future__ import annotations

import re
import subprocess
from datetime import datetime
from pathlib import Path

WHITE = (255, 255, 255)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def run_git(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result."""
    cmd = ["git", *args]
    return subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)


def git_config_get(key: str, cwd: Path | None = None) -> str:
    """Return a git configuration value, or an empty string when unset."""
    try:
        result = run_git("config", "--get", key, cwd=cwd)
    except FileNotFoundError:
        return ""
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def parse_hex_color(value: str | None) -> tuple[int, int, int]:
    """Decode an ``rrggbb`` or ``#rrggbb`` color into an RGB triple.

    Missing or malformed colors decode to white.
    """
    if not value:
        return WHITE
    match = _HEX_COLOR.match(value.strip())
    if match is None:
        return WHITE
    r, g, b = (int(part, 16) for part in match.groups())
    return (r, g, b)


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO 8601 timestamp as sent by the GitLab API.

    Raises ``ValueError`` when the value is missing or malformed.
    """
    if not value:
        raise ValueError("Missing timestamp")
    # Python < 3.11 does not accept the 'Z' suffix
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
