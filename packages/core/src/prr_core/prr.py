"""Coordinates config, the hosting backend and review files."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path

from prr_core.backend.base import Backend, new_backend
from prr_core.config import resolve_workdir
from prr_core.errors import PrrError
from prr_core.parser import LineLocation, ReviewAction
from prr_core.review import Review, ReviewComments, get_all_existing

logger = logging.getLogger(__name__)

_PR_STR_RE = re.compile(r"^(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)/(?P<num>\d+)$")
_PR_URL_RE = re.compile(r"^https?://[^/]+/(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)/pull/(?P<num>\d+)(?:[/?#].*)?$")


def _side(location: LineLocation) -> tuple[int, str]:
    return location.line, location.side.value


def _gh_cli_token() -> str | None:
    """Token of the GitHub CLI session, if `gh` is installed and logged in."""
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    logger.debug("Using the GitHub CLI session token")
    return result.stdout.strip() or None


def build_review_body(parsed: ReviewComments, commit_id: str | None = None) -> dict:
    """Build the JSON body of a GitHub create-review request."""
    comments = []
    for c in parsed.inline_comments:
        line, side = _side(c.line)
        comment = {"path": c.file, "line": line, "body": c.comment, "side": side}
        # GitHub rejects a span that starts on the line it ends on
        if c.start_line is not None and c.start_line != c.line:
            start_line, start_side = _side(c.start_line)
            comment["start_line"] = start_line
            comment["start_side"] = start_side
        comments.append(comment)

    body = {
        "body": parsed.review_comment,
        "event": parsed.action.value,
        "comments": comments,
    }
    if commit_id:
        body["commit_id"] = commit_id
    return body


class Prr:
    """Entry point for every prr operation.

    The backend is created on first use so that purely local operations
    (status, remove, apply) work without credentials.
    """

    def __init__(self, config: dict, backend: Backend | None = None):
        self.config = config
        self._backend = backend

    @property
    def backend(self) -> Backend:
        if self._backend is None:
            token = self.config.get("token") or os.environ.get("GITHUB_TOKEN") or _gh_cli_token()
            if not token:
                raise PrrError(
                    "No GitHub token found. Set prr.token in the config file, set GITHUB_TOKEN, "
                    "or run `gh auth login` first."
                )
            self._backend = new_backend({**self.config, "token": token})
        return self._backend

    def workdir(self) -> Path:
        return resolve_workdir(self.config)

    def parse_pr_str(self, pr: str) -> tuple[str, str, int]:
        """Parse ``owner/repo/24``, a pull request URL, or ``24`` with a local repository configured."""
        pr = pr.strip()
        match = _PR_STR_RE.match(pr) or _PR_URL_RE.match(pr)
        if match:
            return match.group("owner"), match.group("repo"), int(match.group("num"))

        if pr.isdigit():
            repository = self.config.get("repository")
            if not repository:
                raise PrrError(f"PR number '{pr}' needs a repository: set local.repository in .prr.yml")
            owner, _, repo = repository.partition("/")
            if not owner or not repo or "/" in repo:
                raise PrrError(f"Invalid local repository '{repository}', expected owner/repo")
            return owner, repo, int(pr)

        raise PrrError(f"Invalid PR string '{pr}', expected owner/repo/number")

    def review(self, owner: str, repo: str, pr_num: int) -> Review:
        return Review(self.workdir(), owner, repo, pr_num)

    def get_pr(self, owner: str, repo: str, pr_num: int, force: bool = False) -> Review:
        """Download a PR and start (or restart) a review of it."""
        info = self.backend.get_pr_info(owner, repo, pr_num)
        return Review.create(self.workdir(), info.diff, owner, repo, pr_num, info.commit, force=force)

    def submit_pr(self, owner: str, repo: str, pr_num: int, debug: bool = False) -> dict:
        """Submit a review and return the request body.

        With ``debug`` nothing is sent; the body is only returned for inspection.
        """
        review = self.review(owner, repo, pr_num)
        parsed = review.comments()
        metadata = review.metadata()

        has_comments = parsed.review_comment or parsed.inline_comments or parsed.file_comments
        if not has_comments and parsed.action != ReviewAction.APPROVE:
            raise PrrError("No review comments")
        if parsed.file_comments and not metadata.commit_id:
            raise PrrError("File comments need the PR commit id; re-fetch the review with `prr get --force`")

        body = build_review_body(parsed, metadata.commit_id)
        if debug:
            return body

        self.backend.submit_review(owner, repo, pr_num, body)
        for fc in parsed.file_comments:
            self.backend.submit_file_comment(owner, repo, pr_num, metadata.commit_id, fc)

        review.mark_submitted()
        logger.debug("Submitted review %s", review.handle())
        return body

    def apply_pr(self, owner: str, repo: str, pr_num: int, cwd: Path | None = None) -> None:
        """Apply the PR's diff to the working tree with ``git apply``."""
        diff = self.review(owner, repo, pr_num).metadata().original
        try:
            result = subprocess.run(
                ["git", "apply", "-"],
                input=diff,
                capture_output=True,
                text=True,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise PrrError("git is not installed") from e
        if result.returncode != 0:
            raise PrrError(f"Failed to apply diff: {result.stderr.strip()}")

    def reviews(self) -> list[Review]:
        return get_all_existing(self.workdir())

    def remove_reviews(self, prs: list[str], force: bool = False, submitted: bool = False) -> list[Review]:
        """Remove the named reviews and, with ``submitted``, every submitted review."""
        targets = [self.review(*self.parse_pr_str(pr)) for pr in prs]
        if submitted:
            named = {r.handle() for r in targets}
            targets.extend(
                r for r in self.reviews() if r.handle() not in named and r.metadata().submitted is not None
            )

        for review in targets:
            review.remove(force=force)
        return targets
