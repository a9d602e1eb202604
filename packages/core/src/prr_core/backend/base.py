"""Code-hosting backend interface.

The core only ever needs three things from a hosting service: the diff of a
pull request, a way to post a review, and a way to post a file-level comment.
Concrete backends implement this interface; ``new_backend`` picks one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prr_core.parser import FileComment


@dataclass
class ReviewInfo:
    """What a backend returns for a pull request."""

    diff: str  # unified diff of the whole PR
    commit: str  # head commit SHA


class Backend(ABC):
    @abstractmethod
    def get_pr_info(self, owner: str, repo: str, pr_num: int) -> ReviewInfo:
        """Fetch the diff and head commit of a pull request."""

    @abstractmethod
    def submit_review(self, owner: str, repo: str, pr_num: int, body: dict) -> None:
        """Post a review.

        ``body`` has the keys ``body``, ``event``, ``comments`` and optionally
        ``commit_id``, shaped like GitHub's create-review request.
        """

    @abstractmethod
    def submit_file_comment(
        self,
        owner: str,
        repo: str,
        pr_num: int,
        commit_id: str,
        fc: FileComment,
    ) -> None:
        """Post a comment on a whole file."""


def new_backend(config: dict) -> Backend:
    """Instantiate the backend for the configured host (GitHub only)."""
    from prr_core.backend.github import GithubBackend

    return GithubBackend(token=config["token"], url=config.get("url"))
