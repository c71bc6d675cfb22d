"""GitLab repository host using the GitLab REST API (v4).

Example::

    from shissue.config import Credentials
    from shissue.hosts.gitlab_host import GitLabHost

    host = GitLabHost(Credentials(token="glpat-..."))
    host.initialize(remote)
    issues = host.list_issues()
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from shissue import __version__
from shissue.config import Credentials
from shissue.errors import (
    AuthFailedError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)
from shissue.hosts.base import PAGE_SIZE, Comment, Issue, IssueFilter, Label, RepoHost, paginate
from shissue.remote import Remote
from shissue.utils import WHITE, parse_hex_color, parse_timestamp

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
USER_AGENT = f"shissue/{__version__}"

_STATES = {"open": "opened", "closed": "closed"}


def api_root(base_url: str) -> str:
    """Return the REST API root of a GitLab instance."""
    return f"https://{base_url}/api/v4"


def list_options(issue_filter: IssueFilter) -> dict[str, Any]:
    """Translate a filter into GitLab issue listing options.

    State ``all`` is GitLab's default and is left out.
    """
    options: dict[str, Any] = {}
    if issue_filter.labels:
        options["labels"] = issue_filter.label_names
    state = _STATES.get(issue_filter.state)
    if state:
        options["state"] = state
    if issue_filter.assignee:
        options["assignee_username"] = issue_filter.assignee
    if issue_filter.creator:
        options["author_username"] = issue_filter.creator
    return options


def _wire_params(options: dict[str, Any]) -> dict[str, Any]:
    params = dict(options)
    if "labels" in params:
        params["labels"] = ",".join(params["labels"])
    return params


def check_response(response: requests.Response) -> None:
    """Raise the shissue error matching a failed GitLab response."""
    status = response.status_code
    if status < 400:
        return
    if status == 401:
        raise AuthFailedError("Authentication failed: GitLab rejected the access token", status=status)
    if status == 403:
        raise ForbiddenError("Permission denied by GitLab", status=status)
    if status == 404:
        raise NotFoundError("Repository not found on GitLab", status=status)
    if status == 429:
        raise RateLimitedError("GitLab API rate limit exceeded", status=status)
    raise TransportError(f"GitLab API error {status}: {response.text[:200]}", status=status)


class GitLabHost(RepoHost):
    """GitLab host.

    Args:
        credentials: Only ``token`` is used, sent as a bearer token.
        verify: Verify TLS certificates.
        session: Optional ``requests.Session`` to send requests with.
    """

    name = "GitLab"

    def __init__(
        self,
        credentials: Credentials | None = None,
        *,
        verify: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(credentials, verify=verify)
        self._session = session or requests.Session()
        self._session.verify = verify
        self._session.headers["Accept"] = "application/json"
        self._session.headers["User-Agent"] = USER_AGENT
        if self.credentials.token:
            self._session.headers["Authorization"] = f"Bearer {self.credentials.token}"
        self._api_base = ""
        self._project_path = ""
        self._issues_enabled = True

    # ------------------------------------------------------------------
    # RepoHost interface
    # ------------------------------------------------------------------

    def initialize(self, remote: Remote) -> str:
        self._api_base = api_root(remote.base_url)
        logger.debug("Looking up %s on GitLab (%s)", remote.full_name, self._api_base)
        project = self._get(f"projects/{quote(remote.full_name, safe='')}")
        if not isinstance(project, dict) or "id" not in project:
            raise TransportError("Malformed project description from GitLab")

        self._project_path = f"projects/{project['id']}"
        self._issues_enabled = project.get("issues_enabled", True) and (
            project.get("issues_access_level") != "disabled"
        )
        namespace = project.get("namespace") or {}

        remote.name = project.get("name") or remote.name
        remote.desc = project.get("description") or ""
        remote.author = namespace.get("full_path") or remote.author
        remote.url = project.get("web_url") or remote.url
        remote.api_url = f"{self._api_base}/{self._project_path}"
        self.remote = remote
        return remote.api_url

    def list_issues(self, issue_filter: IssueFilter | None = None) -> list[Issue]:
        self._require_remote()
        if not self._issues_enabled:
            return []

        params = _wire_params(list_options(issue_filter or IssueFilter()))
        logger.debug("Listing GitLab issues of %s with %s", self._project_path, params)
        items = self._get_all(f"{self._project_path}/issues", params)
        colors = self._label_colors() if any(item.get("labels") for item in items) else {}
        return [self._to_issue(item, colors) for item in items]

    def get_issue(self, number: int) -> Issue | None:
        self._require_remote()
        if not self._issues_enabled:
            return None

        # The issue id GitLab addresses issues by is not the number users see
        try:
            items = self._get(f"{self._project_path}/issues", {"iids[]": number})
        except NotFoundError:
            return None
        if not isinstance(items, list):
            raise TransportError("Malformed issue list from GitLab")
        if not items:
            return None

        item = items[0]
        if not isinstance(item, dict):
            raise TransportError("Malformed issue from GitLab")
        colors = self._label_colors() if item.get("labels") else {}
        return self._to_issue(item, colors)

    def list_comments(self, number: int) -> list[Comment]:
        remote = self._require_remote()
        if not self._issues_enabled:
            return []

        try:
            notes = self._get_all(
                f"{self._project_path}/issues/{number}/notes",
                {"sort": "asc", "order_by": "created_at"},
            )
        except NotFoundError:
            return []

        issue_url = f"{remote.url}/-/issues/{number}"
        # Notes also carry system events (label changes, closing, ...)
        return [
            self._to_comment(note, issue_url)
            for note in notes
            if not note.get("system") and note.get("noteable_type", "Issue") == "Issue"
        ]

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}/{path.lstrip('/')}"
        response = self._session.get(url, params=params, timeout=REQUEST_TIMEOUT)
        check_response(response)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Malformed JSON from {url}") from exc

    def _get_all(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        def fetch_page(page: int) -> list[dict[str, Any]]:
            data = self._get(path, {**params, "page": page + 1, "per_page": PAGE_SIZE})
            if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
                raise TransportError(f"Expected a list of objects from {path}")
            return data

        return paginate(fetch_page)

    def _label_colors(self) -> dict[str, tuple[int, int, int]]:
        """Map label names to colors; issues only carry label names."""
        labels = self._get_all(f"{self._project_path}/labels", {})
        return {label["name"]: parse_hex_color(label.get("color")) for label in labels if "name" in label}

    # ------------------------------------------------------------------
    # Model converters
    # ------------------------------------------------------------------

    @staticmethod
    def _to_issue(data: dict[str, Any], colors: dict[str, tuple[int, int, int]]) -> Issue:
        try:
            labels = []
            for label in data.get("labels") or []:
                if isinstance(label, dict):
                    labels.append(Label(name=label["name"], color=parse_hex_color(label.get("color"))))
                else:
                    labels.append(Label(name=label, color=colors.get(label, WHITE)))
            assignees = data.get("assignees") or ([data["assignee"]] if data.get("assignee") else [])
            return Issue(
                id=data["id"],
                number=data["iid"],
                title=data.get("title", ""),
                url=data.get("web_url", ""),
                author=(data.get("author") or {}).get("username", ""),
                created_at=parse_timestamp(data.get("created_at")),
                body=data.get("description") or "",
                assignees=tuple(user.get("username", "") for user in assignees),
                labels=tuple(labels),
                is_closed=data.get("state") == "closed",
            )
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise TransportError("Malformed issue from GitLab") from exc

    @staticmethod
    def _to_comment(data: dict[str, Any], issue_url: str) -> Comment:
        try:
            return Comment(
                id=data["id"],
                url=f"{issue_url}#note_{data['id']}",
                author=(data.get("author") or {}).get("username", ""),
                created_at=parse_timestamp(data.get("created_at")),
                body=data.get("body") or "",
            )
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise TransportError("Malformed note from GitLab") from exc
