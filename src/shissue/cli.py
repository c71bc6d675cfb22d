"""shissue CLI - view GitHub and GitLab issues from the command line."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from shissue import __version__
from shissue.config import Credentials, ShissueConfig, load_credentials


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="shissue")
@click.option("--username", "-U", default=None, help="Username of your repository host account")
@click.option("--password", "-P", default=None, help="Password of your repository host account")
@click.option(
    "--allow-untrusted-certs",
    is_flag=True,
    default=False,
    help="Allow connecting to hosts whose certificates are not trusted by the system",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log API requests")
def main(
    username: str | None = None,
    password: str | None = None,
    allow_untrusted_certs: bool = False,
    verbose: bool = False,
) -> None:
    """shissue - view GitHub/GitLab issues in the command line.

    Stored credentials are read from 'git config shissue.username' and
    'git config shissue.token', or from a .shissue.toml file.
    """
    setup_logging(verbose)

    try:
        config = ShissueConfig.load()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    credentials = load_credentials(config=config)
    if username:
        credentials = Credentials(username=username, token=credentials.token)
    if password:
        if not credentials.username:
            raise click.UsageError("Specify a username before a password")
        credentials = credentials.with_password(password)

    click.get_current_context().obj = {
        "credentials": credentials,
        "verify": not allow_untrusted_certs,
        "mode": config.mode,
    }


@main.command()
@click.argument("target", required=False, default=None)
@click.option("--labels", "-l", default="", help="Comma-separated labels to filter by")
@click.option("--assignee", "-a", default="", help="Only issues assigned to this user")
@click.option("--creator", "-c", default="", help="Only issues created by this user")
@click.option(
    "--state",
    "-s",
    type=click.Choice(["open", "closed", "all"]),
    default="open",
    help="Issue state to list (default: open)",
)
@click.pass_obj
def issues(obj: dict, target: str | None, labels: str, assignee: str, creator: str, state: str) -> None:
    """List repository issues.

    TARGET is a display mode (long, full, short, oneline) or an issue
    number, in which case that issue is shown with its comments.
    """
    from shissue.commands.issues import cmd_issues

    cmd_issues(
        target,
        credentials=obj["credentials"],
        verify=obj["verify"],
        default_mode=obj["mode"],
        labels=labels,
        assignee=assignee,
        creator=creator,
        state=state,
    )


@main.command()
@click.pass_obj
def remote(obj: dict) -> None:
    """Show the origin remote and the host serving it."""
    from shissue.commands.issues import cmd_remote

    cmd_remote(credentials=obj["credentials"], verify=obj["verify"])


if __name__ == "__main__":
    main()
