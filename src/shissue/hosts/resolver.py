"""Find the host that serves a remote."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import requests

from shissue.config import Credentials
from shissue.errors import AuthFailedError, ForbiddenError, ShissueError
from shissue.hosts.base import RepoHost
from shissue.hosts.github_host import GitHubHost
from shissue.hosts.gitlab_host import GitLabHost
from shissue.remote import Remote

logger = logging.getLogger(__name__)

DEFAULT_HOSTS: tuple[type[RepoHost], ...] = (GitHubHost, GitLabHost)


def resolve(
    credentials: Credentials | None,
    remote: Remote,
    candidates: Sequence[type[RepoHost]] = DEFAULT_HOSTS,
    *,
    verify: bool = True,
) -> RepoHost:
    """Return the first candidate host that accepts the repository.

    Authentication and permission errors stop the search: the repository
    most likely lives on that host, and trying the next one would only
    report it as missing there. Any other failure moves on to the next
    candidate; if all fail, the last failure is raised.
    """
    if not candidates:
        raise ValueError("No repository hosts to try")

    last_error: Exception | None = None
    for candidate in candidates:
        host = candidate(credentials, verify=verify)
        try:
            host.initialize(remote)
        except (AuthFailedError, ForbiddenError):
            raise
        except (ShissueError, requests.RequestException) as exc:
            logger.debug("%s does not serve %s: %s", host.name, remote.full_name, exc)
            last_error = exc
            continue
        logger.debug("Using %s for %s", host.name, remote.full_name)
        return host

    assert last_error is not None
    raise last_error
