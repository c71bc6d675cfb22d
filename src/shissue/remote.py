"""Locate the ``origin`` remote of a git working directory.

Two URL grammars are recognised, tried in this order:

1. SSH (scp-like): ``user@host:author/name[.git]``
2. HTTPS: ``https://[user@]host[:port]/author/name[.git]`` (``http`` too)

In both, ``author`` is everything between the host and the last ``/`` (so
GitLab subgroups like ``group/sub`` are kept whole) and ``name`` is the last
path segment with a single trailing ``.git`` removed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from shissue.errors import GitCommandError, NoRemoteError, NoRepositoryError
from shissue.utils import run_git

logger = logging.getLogger(__name__)

REMOTE_NAME = "origin"
GIT_NOT_A_REPOSITORY = 128

SSH_GRAMMAR = re.compile(
    r"^(?P<user>[^@\s/:]+)@(?P<host>[A-Za-z0-9._-]+):/?(?P<author>\S+)/(?P<name>[^/\s]+?)/?$"
)
HTTPS_GRAMMAR = re.compile(
    r"^https?://(?:[^@/\s]+@)?(?P<host>[A-Za-z0-9._-]+(?::\d+)?)/(?P<author>\S+)/(?P<name>[^/\s]+?)/?$"
)


@dataclass
class Remote:
    """A repository as seen through its remote URL.

    ``author``, ``name`` and ``url`` start out as parsed from the remote and
    are replaced by the host's canonical values once a host initializes.
    ``api_url`` and ``desc`` are only filled in by the host.
    """

    author: str
    name: str
    base_url: str
    url: str
    api_url: str = ""
    desc: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.author}/{self.name}"


def _strip_git_suffix(name: str) -> str:
    if name.endswith(".git"):
        return name[:-4]
    return name


def parse_remote_url(url: str) -> Remote | None:
    """Parse a remote URL with the SSH grammar, then the HTTPS one."""
    for grammar in (SSH_GRAMMAR, HTTPS_GRAMMAR):
        match = grammar.match(url.strip())
        if match is None:
            continue
        name = _strip_git_suffix(match.group("name"))
        if not name:
            continue
        return Remote(
            author=match.group("author"),
            name=name,
            base_url=match.group("host"),
            url=url.strip(),
        )
    return None


def parse_remote_lines(output: str) -> Remote:
    """Pick the first parseable ``origin`` entry from ``git remote -v`` output."""
    for line in output.strip().splitlines():
        remote_name, _, rest = line.partition("\t")
        if remote_name != REMOTE_NAME or not rest:
            continue
        url = rest.split(" ")[0]
        remote = parse_remote_url(url)
        if remote is not None:
            return remote
        logger.debug("Ignoring unrecognised origin URL %s", url)
    raise NoRemoteError("This git repository doesn't have an 'origin' remote with a supported URL")


def locate(directory: Path | None = None) -> Remote:
    """Return the ``origin`` remote of the repository containing ``directory``."""
    if directory is None:
        directory = Path.cwd()

    try:
        result = run_git("-C", str(directory), "remote", "-v")
    except FileNotFoundError as exc:
        raise GitCommandError("git executable not found") from exc

    if result.returncode == GIT_NOT_A_REPOSITORY:
        raise NoRepositoryError(f"No git repository found in {directory} or any parent directory")
    if result.returncode != 0:
        raise GitCommandError(f"git remote failed: {result.stderr.strip()}")

    remote = parse_remote_lines(result.stdout)
    logger.debug("Found origin remote %s on %s", remote.full_name, remote.base_url)
    return remote
