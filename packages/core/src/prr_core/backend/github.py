"""GitHub backend built on PyGithub."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from github import Auth, Github, GithubException

from prr_core.backend.base import Backend, ReviewInfo
from prr_core.errors import BackendError

if TYPE_CHECKING:
    from prr_core.parser import FileComment

logger = logging.getLogger(__name__)

_NO_CONTENT_STATUSES = ("renamed", "copied", "changed", "unchanged")


def render_diff(files) -> str:
    """Render a PR's changed files as a single ``git diff`` style unified diff.

    GitHub returns one patch per file with no file headers; each gets a
    ``diff --git`` header and ``---``/``+++`` lines so the result can be
    quoted into a review file and fed to ``git apply``.
    """
    sections = []
    for f in files:
        old = f.previous_filename or f.filename
        new = f.filename
        lines = [f"diff --git a/{old} b/{new}"]
        if f.status == "added":
            lines.append("new file mode 100644")
        elif f.status == "removed":
            lines.append("deleted file mode 100644")
        elif f.status == "renamed":
            lines.extend([f"rename from {old}", f"rename to {new}"])
        elif f.status == "copied":
            lines.extend([f"copy from {old}", f"copy to {new}"])

        if f.patch:
            lines.append("--- /dev/null" if f.status == "added" else f"--- a/{old}")
            lines.append("+++ /dev/null" if f.status == "removed" else f"+++ b/{new}")
            lines.append(f.patch.rstrip("\n"))
        elif f.status in _NO_CONTENT_STATUSES:
            # Pure rename or copy, or a mode change. The API does not report
            # file modes, so a mode change is left as a bare header.
            pass
        elif f.additions or f.deletions:
            # GitHub omits the patch of very large text diffs but still counts their lines
            logger.warning("GitHub omitted the patch for %s; it is not part of the review", new)
        else:
            lines.append(f"Binary files a/{old} and b/{new} differ")
        sections.append("\n".join(lines))

    return "".join(section + "\n" for section in sections)


class GithubBackend(Backend):
    def __init__(self, token: str, url: str | None = None):
        kwargs = {"auth": Auth.Token(token)}
        if url:
            kwargs["base_url"] = url
        self._gh = Github(**kwargs)

    def _pull(self, owner: str, repo: str, pr_num: int):
        gh_repo = self._gh.get_repo(f"{owner}/{repo}")
        return gh_repo, gh_repo.get_pull(pr_num)

    def get_pr_info(self, owner: str, repo: str, pr_num: int) -> ReviewInfo:
        try:
            _, pr = self._pull(owner, repo, pr_num)
            diff = render_diff(pr.get_files())
            commit = pr.head.sha
        except GithubException as e:
            raise BackendError(f"Failed to fetch {owner}/{repo}#{pr_num}: {e.status} {e.data}") from e
        return ReviewInfo(diff=diff, commit=commit)

    def submit_review(self, owner: str, repo: str, pr_num: int, body: dict) -> None:
        logger.debug("Dispatching review for %s/%s#%d", owner, repo, pr_num)
        try:
            gh_repo, pr = self._pull(owner, repo, pr_num)
            kwargs = {"body": body["body"], "event": body["event"], "comments": body["comments"]}
            if body.get("commit_id"):
                kwargs["commit"] = gh_repo.get_commit(body["commit_id"])
            pr.create_review(**kwargs)
        except json.JSONDecodeError as e:
            # GH is known to send unescaped control characters in JSON responses
            logger.warning("GH response had invalid JSON")
            logger.debug("JSON error: %s", e)
        except GithubException as e:
            raise BackendError(f"Error during POST: Status code: {e.status}, Body: {e.data}") from e

    def submit_file_comment(
        self,
        owner: str,
        repo: str,
        pr_num: int,
        commit_id: str,
        fc: FileComment,
    ) -> None:
        logger.debug("Dispatching file comment on %s for %s/%s#%d", fc.file, owner, repo, pr_num)
        try:
            gh_repo, pr = self._pull(owner, repo, pr_num)
            pr.create_review_comment(
                body=fc.comment,
                commit=gh_repo.get_commit(commit_id),
                path=fc.file,
                subject_type="file",
            )
        except json.JSONDecodeError as e:
            logger.warning("GH response had invalid JSON")
            logger.debug("JSON error: %s", e)
        except GithubException as e:
            raise BackendError(f"Error during POST: Status code: {e.status}, Body: {e.data}") from e
