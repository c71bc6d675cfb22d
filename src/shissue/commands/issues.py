"""shissue issues - List repository issues, or show a single one."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import click
import requests
from rich.color import Color
from rich.console import Console
from rich.markup import escape
from rich.style import Style
from rich.text import Text

from shissue.config import DISPLAY_MODES, Credentials
from shissue.errors import ShissueError
from shissue.hosts.base import Comment, Issue, IssueFilter, Label, RepoHost
from shissue.hosts.resolver import resolve
from shissue.remote import locate

console = Console()

STATES = ("open", "closed", "all")


def ensure_password(credentials: Credentials) -> Credentials:
    """Ask for the password when a username is known but no password is."""
    if credentials.username and not credentials.password:
        password = click.prompt(f"Password for {credentials.username}", hide_input=True, default="", show_default=False)
        return credentials.with_password(password)
    return credentials


def open_host(credentials: Credentials, verify: bool = True, directory: Path | None = None) -> RepoHost:
    """Locate the origin remote of the directory and find the host serving it."""
    remote = locate(directory or Path.cwd())
    return resolve(credentials, remote, verify=verify)


def build_filter(labels: str = "", assignee: str = "", creator: str = "", state: str = "open") -> IssueFilter:
    """Build an issue filter from command-line values."""
    if state not in STATES:
        raise ValueError(f"Unknown state: {state}")
    names = frozenset(name.strip() for name in labels.split(",") if name.strip())
    return IssueFilter(
        labels=names or None,
        assignee=assignee or None,
        creator=creator or None,
        include_open=state in ("open", "all"),
        include_closed=state in ("closed", "all"),
    )


def _is_light(color: tuple[int, int, int]) -> bool:
    r, g, b = (c // 51 for c in color)
    return r + g * 2.5 + b > 9


def render_label(label: Label) -> Text:
    """A label as a chip drawn on its own color."""
    foreground = "black" if _is_light(label.color) else "white"
    return Text(f" {label.name} ", style=Style(color=foreground, bgcolor=Color.from_rgb(*label.color)))


def render_labels(labels: Iterable[Label]) -> Text:
    text = Text()
    for label in labels:
        text.append(" ")
        text.append_text(render_label(label))
    return text


def print_issue_long(issue: Issue) -> None:
    """Print an issue with its metadata and body."""
    title_style = "bold red" if issue.is_closed else "bold yellow"
    heading = Text("\t#")
    heading.append(str(issue.number), style="bold")
    heading.append(" - ")
    heading.append(issue.title, style=title_style)
    heading.append_text(render_labels(issue.labels))
    console.print(heading)

    console.print(f"\tCreated by [bold cyan]{escape(issue.author)}[/bold cyan] in {issue.created_at:%Y-%m-%d %H:%M}")
    if issue.assignees:
        console.print(f"\tAssigned to [yellow]{escape(', '.join(issue.assignees))}[/yellow]")
    else:
        console.print("\tAssigned to no one")
    if issue.is_closed:
        console.print("\tThis issue has been closed")
    console.print(f"\tView it online: {escape(issue.url)}")
    console.print()
    console.print(issue.body, markup=False, highlight=False)
    console.print()


def print_issue_short(issue: Issue) -> None:
    """Print an issue on one line."""
    line = Text(" #")
    line.append(str(issue.number), style="bold")
    line.append(" ")
    line.append(issue.title, style="bold red" if issue.is_closed else "")
    line.append(" (by ")
    line.append(issue.author, style="yellow")
    line.append(") ")
    line.append_text(render_labels(issue.labels))
    console.print(line)


def print_comments(comments: Iterable[Comment]) -> None:
    for comment in comments:
        console.print(
            f"\t\t comment by [yellow]{escape(comment.author)}[/yellow] in {comment.created_at:%Y-%m-%d %H:%M}"
        )
        for line in comment.body.split("\n"):
            console.print("\t\t\t" + line, markup=False, highlight=False)
        console.print()


def _show_issue(host: RepoHost, number: int) -> None:
    issue = host.get_issue(number)
    if issue is None:
        console.print(f"[red]No issue found with number {number}[/red]")
        raise SystemExit(1)

    print_issue_long(issue)
    print_comments(host.list_comments(number))


def cmd_issues(
    target: str | None,
    *,
    credentials: Credentials,
    verify: bool = True,
    default_mode: str = "long",
    labels: str = "",
    assignee: str = "",
    creator: str = "",
    state: str = "open",
) -> None:
    """List the issues of the current repository, or show issue ``target``."""
    mode = default_mode
    number: int | None = None
    if target is not None:
        if target.isdigit():
            number = int(target)
        elif target in DISPLAY_MODES:
            mode = target
        else:
            console.print(
                f"[red]Mode {escape(target)} is unknown.[/red]\n"
                "Try 'long' or 'full' for a complete detail of issues, "
                "'oneline' or 'short' for a simple listing, "
                "or an issue number to see that issue."
            )
            raise SystemExit(1)

    try:
        host = open_host(ensure_password(credentials), verify=verify)
        if number is not None:
            _show_issue(host, number)
            return
        issues = host.list_issues(build_filter(labels, assignee, creator, state))
    except (ShissueError, requests.RequestException) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    if not issues:
        console.print("[yellow]No issues found.[/yellow]")
        return

    for issue in issues:
        if mode in ("long", "full"):
            print_issue_long(issue)
        else:
            print_issue_short(issue)


def cmd_remote(*, credentials: Credentials, verify: bool = True) -> None:
    """Show the origin remote and the host that serves it."""
    try:
        remote = locate(Path.cwd())
        console.print(f"origin: [cyan]{escape(remote.full_name)}[/cyan] ({escape(remote.base_url)})")
        host = resolve(ensure_password(credentials), remote, verify=verify)
    except (ShissueError, requests.RequestException) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    console.print(f"Host:    [green]{host.name}[/green]")
    console.print(f"Project: {escape(remote.full_name)}")
    if remote.desc:
        console.print(f"About:   {escape(remote.desc)}")
    console.print(f"URL:     {escape(remote.url)}")
    console.print(f"API:     {escape(remote.api_url)}")
