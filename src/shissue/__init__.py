"""shissue - view GitHub and GitLab issues from the command line."""

__version__ = "0.1.0"
