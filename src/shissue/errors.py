"""Exceptions raised by the remote locator and the repository hosts."""

from __future__ import annotations


class ShissueError(RuntimeError):
    """Base class for every error the core reports to the CLI."""


class NoRepositoryError(ShissueError):
    """The directory is not inside a git repository."""


class NoRemoteError(ShissueError):
    """The repository has no usable remote named ``origin``."""


class GitCommandError(ShissueError):
    """git could not be run or failed for a reason other than a missing repository."""


class HostError(ShissueError):
    """A repository host rejected a request.

    ``status`` is the HTTP status code when the host sent one.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(HostError):
    """The repository does not exist on this host."""


class AuthFailedError(HostError):
    """The supplied credentials were rejected."""


class ForbiddenError(HostError):
    """The repository exists but access to it is denied."""


class RateLimitedError(HostError):
    """The host's request quota is exhausted."""


class TransportError(HostError):
    """The host answered with something that is not a usable response."""


class HostNotInitializedError(ShissueError):
    """A query was made before ``initialize`` succeeded."""
