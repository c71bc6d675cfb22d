"""GitHub repository host, backed by PyGithub."""

from __future__ import annotations

import logging
from typing import Any

from github import Auth, Github, GithubException, RateLimitExceededException
from github.Issue import Issue as GitHubIssue
from github.IssueComment import IssueComment
from github.Repository import Repository

from shissue.config import Credentials
from shissue.errors import (
    AuthFailedError,
    ForbiddenError,
    HostError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)
from shissue.hosts.base import PAGE_SIZE, Comment, Issue, IssueFilter, Label, RepoHost, paginate
from shissue.remote import Remote
from shissue.utils import parse_hex_color

logger = logging.getLogger(__name__)

GITHUB_HOSTS = ("github.com", "www.github.com")
GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30


def is_github(base_url: str) -> bool:
    """Whether a remote host name is github.com."""
    return base_url.lower() in GITHUB_HOSTS


def issue_query(issue_filter: IssueFilter) -> dict[str, Any]:
    """Translate a filter into ``Repository.get_issues`` keyword arguments.

    PyGithub sends ``labels`` comma-joined, e.g. ``labels=bug,ui&state=open``.
    """
    query: dict[str, Any] = {"state": issue_filter.state}
    if issue_filter.labels:
        query["labels"] = issue_filter.label_names
    if issue_filter.assignee:
        query["assignee"] = issue_filter.assignee
    if issue_filter.creator:
        query["creator"] = issue_filter.creator
    return query


def _quota_exhausted(headers: dict[str, str] | None) -> bool:
    for key, value in (headers or {}).items():
        if key.lower() == "x-ratelimit-remaining":
            return str(value) == "0"
    return False


def to_host_error(exc: GithubException) -> HostError:
    """Map a PyGithub exception onto the shissue error taxonomy."""
    status = exc.status
    if isinstance(exc, RateLimitExceededException) or status == 429 or (
        status == 403 and _quota_exhausted(exc.headers)
    ):
        return RateLimitedError("GitHub API rate limit exceeded", status=status)
    if status == 401:
        return AuthFailedError("Authentication failed: wrong username and/or password", status=status)
    if status == 403:
        return ForbiddenError("Permission denied by GitHub", status=status)
    if status == 404:
        return NotFoundError("Repository not found on GitHub", status=status)
    return TransportError(f"GitHub API error {status}: {exc.data}", status=status)


class GitHubHost(RepoHost):
    """GitHub host."""

    name = "GitHub"

    def __init__(self, credentials: Credentials | None = None, *, verify: bool = True) -> None:
        super().__init__(credentials, verify=verify)
        self.client: Github | None = None
        self._repo: Repository | None = None

    def connect(self) -> Github:
        """Create the API client, with basic auth when a username is known."""
        auth = None
        if self.credentials.username and self.credentials.password:
            auth = Auth.Login(self.credentials.username, self.credentials.password)
        return Github(
            auth=auth,
            base_url=GITHUB_API_URL,
            per_page=PAGE_SIZE,
            timeout=REQUEST_TIMEOUT,
            verify=self.verify,
            retry=None,
        )

    def initialize(self, remote: Remote) -> str:
        # Credentials are only ever sent to github.com
        if not is_github(remote.base_url):
            raise NotFoundError(f"{remote.base_url} is not a GitHub host")

        self.client = self.connect()
        logger.debug("Looking up %s on GitHub", remote.full_name)
        try:
            repo = self.client.get_repo(remote.full_name)
        except GithubException as exc:
            raise to_host_error(exc) from exc

        self._repo = repo
        remote.name = repo.name
        remote.desc = repo.description or ""
        remote.author = repo.owner.login
        remote.url = repo.html_url
        remote.api_url = repo.url
        self.remote = remote
        return repo.url

    def _require_repo(self) -> Repository:
        self._require_remote()
        assert self._repo is not None
        return self._repo

    def list_issues(self, issue_filter: IssueFilter | None = None) -> list[Issue]:
        repo = self._require_repo()
        if not repo.has_issues:
            return []

        query = issue_query(issue_filter or IssueFilter())
        logger.debug("Listing GitHub issues of %s with %s", repo.full_name, query)
        try:
            listing = repo.get_issues(**query)
            gh_issues = paginate(listing.get_page)
        except GithubException as exc:
            raise to_host_error(exc) from exc

        # The issues endpoint also returns pull requests
        return [self._to_issue(item) for item in gh_issues if item.pull_request is None]

    def get_issue(self, number: int) -> Issue | None:
        repo = self._require_repo()
        if not repo.has_issues:
            return None

        try:
            gh_issue = repo.get_issue(number)
        except GithubException as exc:
            if exc.status in (404, 410):
                return None
            raise to_host_error(exc) from exc

        if gh_issue.pull_request is not None:
            return None
        return self._to_issue(gh_issue)

    def list_comments(self, number: int) -> list[Comment]:
        repo = self._require_repo()
        if not repo.has_issues:
            return []

        try:
            gh_issue = repo.get_issue(number)
            gh_comments = paginate(gh_issue.get_comments().get_page)
        except GithubException as exc:
            if exc.status in (404, 410):
                return []
            raise to_host_error(exc) from exc

        return [self._to_comment(item) for item in gh_comments]

    @staticmethod
    def _to_issue(data: GitHubIssue) -> Issue:
        return Issue(
            id=data.id,
            number=data.number,
            title=data.title,
            url=data.html_url,
            author=data.user.login if data.user else "",
            created_at=data.created_at,
            body=data.body or "",
            assignees=tuple(user.login for user in data.assignees),
            labels=tuple(Label(name=label.name, color=parse_hex_color(label.color)) for label in data.labels),
            is_closed=data.state == "closed",
        )

    @staticmethod
    def _to_comment(data: IssueComment) -> Comment:
        return Comment(
            id=data.id,
            url=data.html_url,
            author=data.user.login if data.user else "",
            created_at=data.created_at,
            body=data.body or "",
        )
