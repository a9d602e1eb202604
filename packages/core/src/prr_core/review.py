"""Review files on disk: creation, validation, comment extraction and status."""

from __future__ import annotations

import enum
import logging
import time
from pathlib import Path
from typing import NamedTuple

from prr_core.errors import CorruptionError, LifecycleError, ParseError, PrrError, ReviewIOError
from prr_core.parser import FileComment, InlineComment, ReviewAction, ReviewComment, ReviewParser
from prr_core.snip import SnipResolver, has_snips
from prr_core.utils.text import is_quoted, quote_lines, split_lines, unquote
from prr_store.base import MetadataStore, MetadataStoreError
from prr_store.models import ReviewMetadata
from prr_store.sidecar import SidecarStore

logger = logging.getLogger(__name__)

REVIEW_SUFFIX = ".prr"


class ReviewStatus(enum.Enum):
    NEW = "NEW"  # freshly downloaded, no comments yet
    REVIEWED = "REVIEWED"  # has comments that have not been submitted
    SUBMITTED = "SUBMITTED"  # submitted; later edits are not tracked

    def __str__(self) -> str:
        return self.value


class ReviewComments(NamedTuple):
    action: ReviewAction
    review_comment: str
    inline_comments: list[InlineComment]
    file_comments: list[FileComment]


class Review:
    """A single review, identified by workdir, owner, repo and PR number.

    The object itself holds no review state. Everything lives in the review
    file at ``<workdir>/<owner>/<repo>/<pr_num>.prr`` and its metadata, so a
    Review for files that do not exist yet is valid until it is used.
    """

    def __init__(
        self,
        workdir: Path,
        owner: str,
        repo: str,
        pr_num: int,
        store: MetadataStore | None = None,
    ):
        self.workdir = Path(workdir)
        self.owner = owner
        self.repo = repo
        self.pr_num = pr_num
        self._store = store if store is not None else SidecarStore()

    def __repr__(self) -> str:
        return f"Review({self.handle()!r})"

    @classmethod
    def create(
        cls,
        workdir: Path,
        diff: str,
        owner: str,
        repo: str,
        pr_num: int,
        commit_id: str,
        force: bool = False,
        store: MetadataStore | None = None,
    ) -> Review:
        """Write a fresh review file and metadata for a PR diff.

        Refuses to overwrite a review with unsubmitted comments unless ``force``.
        """
        review = cls(workdir, owner, repo, pr_num, store=store)
        path = review.path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReviewIOError(f"Failed to create workdir directories: {e}") from e

        if not force and review.exists() and review.unsubmitted():
            raise LifecycleError(
                "You have unsubmitted changes to the requested review. "
                "Either submit the existing changes, delete the existing review file, "
                "or re-run this command with --force."
            )

        try:
            # newline="" keeps a bare "\r" inside a diff line from becoming a line break
            path.write_text(quote_lines(diff), encoding="utf-8", newline="")
        except OSError as e:
            raise ReviewIOError(f"Failed to write review file {path}: {e}") from e
        review._save_metadata(ReviewMetadata(original=diff, submitted=None, commit_id=commit_id))
        logger.debug("Created review file %s", path)
        return review

    # ------------------------------------------------------------------ #
    # Paths                                                              #
    # ------------------------------------------------------------------ #

    def path(self) -> Path:
        """Path to the user-facing review file."""
        return self.workdir / self.owner / self.repo / f"{self.pr_num}{REVIEW_SUFFIX}"

    def metadata_path(self) -> Path:
        return self._store.path(self.path())

    def handle(self) -> str:
        """Short name for the review, eg. ``owner/repo/24``."""
        return f"{self.owner}/{self.repo}/{self.pr_num}"

    def exists(self) -> bool:
        return self.path().exists()

    # ------------------------------------------------------------------ #
    # Metadata                                                           #
    # ------------------------------------------------------------------ #

    def metadata(self) -> ReviewMetadata:
        try:
            return self._store.load(self.path())
        except MetadataStoreError as e:
            raise CorruptionError(f"Failed to parse metadata file: {e}") from e
        except OSError as e:
            raise ReviewIOError(f"Failed to load metadata file {self.metadata_path()}: {e}") from e

    def _save_metadata(self, metadata: ReviewMetadata) -> None:
        try:
            self._store.save(self.path(), metadata)
        except OSError as e:
            raise ReviewIOError(f"Failed to write metadata file {self.metadata_path()}: {e}") from e

    def mark_submitted(self) -> None:
        """Record the current time as the submission time."""
        metadata = self.metadata()
        metadata.submitted = int(time.time())
        self._save_metadata(metadata)

    # ------------------------------------------------------------------ #
    # Comments                                                           #
    # ------------------------------------------------------------------ #

    def comments(self) -> ReviewComments:
        """Parse the reviewer's comments out of the review file."""
        try:
            with open(self.path(), encoding="utf-8", newline="") as f:
                contents = f.read()
        except OSError as e:
            raise ReviewIOError(f"Failed to read review file {self.path()}: {e}") from e

        lines = split_lines(contents)
        if has_snips(lines):
            lines = SnipResolver(self.metadata().original).resolve(lines)
        self.validate(lines)

        parser = ReviewParser()
        action = ReviewAction.COMMENT
        review_comment = ""
        inline_comments: list[InlineComment] = []
        file_comments: list[FileComment] = []

        for lineno, line in enumerate(lines, 1):
            comment = parser.parse_line(line)
            if isinstance(comment, ReviewComment):
                if review_comment:
                    raise ParseError(lineno, "more than one review comment")
                review_comment = comment.comment
            elif isinstance(comment, InlineComment):
                inline_comments.append(comment)
            elif isinstance(comment, FileComment):
                file_comments.append(comment)
            elif isinstance(comment, ReviewAction):
                action = comment

        trailing = parser.finish()
        if isinstance(trailing, InlineComment):
            inline_comments.append(trailing)

        return ReviewComments(action, review_comment, inline_comments, file_comments)

    def validate(self, lines: str | list[str]) -> None:
        """Check that the quoted lines of a (snip-resolved) review file match the original diff.

        Raises CorruptionError naming the first line of the review file that differs.
        """
        if isinstance(lines, str):
            lines = split_lines(lines)
        original = [line.rstrip() for line in split_lines(self.metadata().original)]

        idx = 0
        for lineno, line in enumerate(lines, 1):
            if not is_quoted(line):
                continue
            found = unquote(line).rstrip()
            if idx >= len(original):
                break
            if found != original[idx]:
                raise CorruptionError(
                    "Detected corruption in quoted part of review file: "
                    f"Line {lineno}, found {found!r} expected {original[idx]!r}",
                    lineno=lineno,
                )
            idx += 1

        quoted = sum(1 for line in lines if is_quoted(line))
        if quoted != len(original):
            raise CorruptionError(
                "Detected corruption in quoted part of review file: found trailing or truncated lines"
            )

    # ------------------------------------------------------------------ #
    # Status                                                             #
    # ------------------------------------------------------------------ #

    def reviewed(self) -> bool:
        """Whether the review file contains any comments."""
        parsed = self.comments()
        return bool(parsed.review_comment or parsed.inline_comments or parsed.file_comments)

    def unsubmitted(self) -> bool:
        """Whether there are comments on disk that have not been submitted."""
        if self.metadata().submitted is not None:
            return False
        return self.reviewed()

    def status(self) -> ReviewStatus:
        if self.metadata().submitted is not None:
            return ReviewStatus.SUBMITTED
        if self.reviewed():
            return ReviewStatus.REVIEWED
        return ReviewStatus.NEW

    def remove(self, force: bool = False) -> None:
        """Delete the review file and its metadata."""
        if not force and self.unsubmitted():
            raise LifecycleError(
                "You have unsubmitted changes to the requested review. "
                "Re-run this command with --force to ignore this check."
            )

        try:
            self.path().unlink()
        except OSError as e:
            raise ReviewIOError(f"Failed to remove review file {self.path()}: {e}") from e
        try:
            self._store.remove(self.path())
        except OSError as e:
            raise ReviewIOError(f"Failed to remove metadata file {self.metadata_path()}: {e}") from e
        logger.debug("Removed review %s", self.handle())


def get_all_existing(workdir: Path, store: MetadataStore | None = None) -> list[Review]:
    """Return every review stored under ``workdir``.

    Reviews live at ``<workdir>/<owner>/<repo>/<pr_num>.prr``; anything else
    in the tree is ignored.
    """
    workdir = Path(workdir)
    try:
        paths = sorted(workdir.glob(f"*/*/*{REVIEW_SUFFIX}"))
    except OSError as e:
        raise ReviewIOError(f"Failed to read workdir {workdir}: {e}") from e

    reviews = []
    for path in paths:
        if not path.is_file():
            continue
        try:
            pr_num = int(path.stem)
        except ValueError:
            raise PrrError(f"Failed to parse PR num: {path}")
        reviews.append(Review(workdir, path.parent.parent.name, path.parent.name, pr_num, store=store))
    return reviews
