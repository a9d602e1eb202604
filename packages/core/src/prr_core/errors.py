"""Error hierarchy for prr.

Every failure the core raises derives from PrrError so the CLI can turn any
of them into a clean exit without catching unrelated exceptions.
"""

from __future__ import annotations


class PrrError(Exception):
    """Base error for prr operations."""


class ParseError(PrrError):
    """The review file does not follow the review grammar."""

    def __init__(self, lineno: int, message: str):
        super().__init__(f"line {lineno}: {message}")
        self.lineno = lineno
        self.message = message


class CorruptionError(PrrError):
    """Quoted text in the review file no longer matches the original diff."""

    def __init__(self, message: str, lineno: int | None = None):
        super().__init__(message)
        self.lineno = lineno


class LifecycleError(PrrError):
    """Refused to overwrite or remove a review with unsubmitted comments.

    Callers may retry with ``force=True``.
    """


class ReviewIOError(PrrError):
    """Reading or writing a review's files failed."""


class ConfigError(PrrError):
    """The configuration file could not be loaded."""


class BackendError(PrrError):
    """The code-hosting backend rejected a request."""
