"""Tests for review files: creation, validation, parsing and lifecycle."""

import json

import pytest

from prr_core.errors import CorruptionError, LifecycleError, PrrError, ReviewIOError
from prr_core.parser import InlineComment, LineLocation, ReviewAction
from prr_core.review import Review, ReviewStatus, get_all_existing

DIFF_LINES = [
    "diff --git a/src/app.py b/src/app.py",  # 1
    "index 83db48f..bf269f4 100644",  # 2
    "--- a/src/app.py",  # 3
    "+++ b/src/app.py",  # 4
    "@@ -1,5 +1,6 @@",  # 5
    " import os",  # 6   L1 R1
    "+import sys",  # 7   R2
    " ",  # 8   L2 R3
    " def main():",  # 9   L3 R4
    "-    return 0",  # 10  L4
    "+    return run(sys.argv)",  # 11  R5
    " ",  # 12  L5 R6
    "@@ -20,3 +21,4 @@ def run(argv):",  # 13
    "     args = parse(argv)",  # 14  L20 R21
    "+    log(args)",  # 15  R22
    "     return 0",  # 16  L21 R23
    " ",  # 17  L22 R24
    "diff --git a/README.md b/README.md",  # 18
    "new file mode 100644",  # 19
    "--- /dev/null",  # 20
    "+++ b/README.md",  # 21
    "@@ -0,0 +1,2 @@",  # 22
    "+# app",  # 23  R1
    "+Does things.",  # 24  R2
]
DIFF = "\n".join(DIFF_LINES) + "\n"


@pytest.fixture
def review(tmp_path):
    return Review.create(tmp_path, DIFF, "some_owner", "some_repo", 3, "abc123")


def read_lines(review):
    return review.path().read_text().split("\n")[:-1]


def write_lines(review, lines):
    review.path().write_text("\n".join(lines) + "\n")


def insert(review, after, *comment_lines):
    """Insert comment lines after 1-based line ``after`` of the review file."""
    lines = read_lines(review)
    lines[after:after] = list(comment_lines)
    write_lines(review, lines)


# ---------------------------------------------------------------------------
# create()
# ---------------------------------------------------------------------------


class TestCreate:
    def test_paths(self, review, tmp_path):
        assert review.path() == tmp_path / "some_owner" / "some_repo" / "3.prr"
        assert review.metadata_path() == tmp_path / "some_owner" / "some_repo" / ".3"
        assert review.handle() == "some_owner/some_repo/3"
        assert review.exists()

    def test_review_file_is_quoted_diff(self, review):
        lines = read_lines(review)
        assert len(lines) == len(DIFF_LINES)
        assert lines[0] == "> diff --git a/src/app.py b/src/app.py"
        assert lines[7] == ">  "
        assert lines[9] == "> -    return 0"

    def test_metadata_written(self, review):
        data = json.loads(review.metadata_path().read_text())
        assert data == {"original": DIFF, "submitted": None, "commit_id": "abc123"}

    def test_fresh_review_validates(self, review):
        review.validate(review.path().read_text())

    def test_carriage_return_inside_line_survives(self, tmp_path):
        diff = (
            "diff --git a/log.txt b/log.txt\n"
            "@@ -1,1 +1,1 @@\n"
            "-progress 10%\rprogress 20%\n"
            "+done\n"
        )
        review = Review.create(tmp_path, diff, "o", "r", 1, "sha")

        with open(review.path(), encoding="utf-8", newline="") as f:
            contents = f.read()
        assert "> -progress 10%\rprogress 20%\n" in contents
        review.validate(contents)

        commented = contents + "why?\n"
        with open(review.path(), "w", encoding="utf-8", newline="") as f:
            f.write(commented)
        parsed = review.comments()
        assert parsed.inline_comments == [InlineComment("log.txt", LineLocation.right(1), None, "why?")]
        assert review.status() == ReviewStatus.REVIEWED

    def test_blank_lines_quoted_bare(self, tmp_path):
        diff = "diff --git a/x b/x\n@@ -1,3 +1,3 @@\n a\n\n c\n"
        review = Review.create(tmp_path, diff, "o", "r", 1, "sha")
        assert read_lines(review)[3] == ">"


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


class TestValidate:
    def test_detects_changed_quoted_line(self, review):
        lines = read_lines(review)
        lines[8] = "> def mian():"
        write_lines(review, lines)
        with pytest.raises(CorruptionError) as exc:
            review.comments()
        assert exc.value.lineno == 9
        assert "Line 9" in str(exc.value)

    def test_line_number_counts_comment_lines(self, review):
        insert(review, 0, "Overall comment", "")
        lines = read_lines(review)
        lines[10] = "> def mian():"
        write_lines(review, lines)
        with pytest.raises(CorruptionError) as exc:
            review.comments()
        assert exc.value.lineno == 11

    def test_trailing_whitespace_stripped_by_editor(self, review):
        write_lines(review, [line.rstrip() for line in read_lines(review)])
        assert review.comments().inline_comments == []

    def test_truncated_file(self, review):
        write_lines(review, read_lines(review)[:-1])
        with pytest.raises(CorruptionError, match="trailing or truncated"):
            review.comments()

    def test_extra_quoted_line(self, review):
        write_lines(review, read_lines(review) + ["> +extra"])
        with pytest.raises(CorruptionError, match="trailing or truncated"):
            review.comments()

    def test_accepts_list_of_lines(self, review):
        review.validate(read_lines(review))


# ---------------------------------------------------------------------------
# comments()
# ---------------------------------------------------------------------------


class TestComments:
    def test_no_comments(self, review):
        parsed = review.comments()
        assert parsed.action == ReviewAction.COMMENT
        assert parsed.review_comment == ""
        assert parsed.inline_comments == []
        assert parsed.file_comments == []

    def test_review_and_inline_comments(self, review):
        insert(review, 24, "Nice README")
        insert(review, 10, "Why remove?")
        insert(review, 0, "@prr reject", "Needs work.", "")

        parsed = review.comments()
        assert parsed.action == ReviewAction.REQUEST_CHANGES
        assert parsed.review_comment == "Needs work."
        assert parsed.inline_comments == [
            InlineComment("src/app.py", LineLocation.left(4), None, "Why remove?"),
            InlineComment("README.md", LineLocation.right(2), None, "Nice README"),
        ]

    def test_span_comment(self, review):
        insert(review, 16, "these two")
        insert(review, 14, "")
        parsed = review.comments()
        assert parsed.inline_comments == [
            InlineComment("src/app.py", LineLocation.right(23), LineLocation.right(22), "these two"),
        ]

    def test_snipped_review(self, review):
        lines = read_lines(review)
        write_lines(
            review,
            lines[:10] + ["Why remove?", "[...]", "> +# app", "> +Does things.", "Nice README"],
        )
        parsed = review.comments()
        assert parsed.inline_comments == [
            InlineComment("src/app.py", LineLocation.left(4), None, "Why remove?"),
            InlineComment("README.md", LineLocation.right(2), None, "Nice README"),
        ]
        # The file on disk keeps its snips
        assert "[...]" in review.path().read_text()

    def test_unresolvable_snip(self, review):
        write_lines(review, ["> diff --git a/nope b/nope", "[...]"])
        with pytest.raises(CorruptionError, match="could not resolve snip"):
            review.comments()

    def test_missing_review_file(self, review):
        review.path().unlink()
        with pytest.raises(ReviewIOError):
            review.comments()


# ---------------------------------------------------------------------------
# Status and lifecycle
# ---------------------------------------------------------------------------


class TestStatus:
    def test_new(self, review):
        assert review.status() == ReviewStatus.NEW
        assert str(review.status()) == "NEW"
        assert not review.reviewed()
        assert not review.unsubmitted()

    def test_reviewed(self, review):
        insert(review, 9, "hmm")
        assert review.status() == ReviewStatus.REVIEWED
        assert review.unsubmitted()

    def test_submitted(self, review):
        insert(review, 9, "hmm")
        review.mark_submitted()
        assert review.status() == ReviewStatus.SUBMITTED
        assert isinstance(review.metadata().submitted, int)
        assert not review.unsubmitted()

    def test_edits_after_submission_still_submitted(self, review):
        review.mark_submitted()
        insert(review, 9, "late comment")
        assert review.status() == ReviewStatus.SUBMITTED

    def test_metadata_without_commit_id(self, review):
        review.metadata_path().write_text(json.dumps({"original": DIFF, "submitted": None}))
        assert review.metadata().commit_id is None
        assert review.status() == ReviewStatus.NEW

    def test_corrupt_metadata(self, review):
        review.metadata_path().write_text("{not json")
        with pytest.raises(CorruptionError, match="metadata"):
            review.status()


class TestLifecycle:
    def test_recreate_unreviewed(self, review, tmp_path):
        again = Review.create(tmp_path, DIFF, "some_owner", "some_repo", 3, "def456")
        assert again.metadata().commit_id == "def456"

    def test_refuses_to_overwrite_unsubmitted(self, review, tmp_path):
        insert(review, 9, "hmm")
        before = review.path().read_text()
        with pytest.raises(LifecycleError, match="--force"):
            Review.create(tmp_path, DIFF, "some_owner", "some_repo", 3, "def456")
        assert review.path().read_text() == before
        assert review.metadata().commit_id == "abc123"

    def test_force_overwrites(self, review, tmp_path):
        insert(review, 9, "hmm")
        again = Review.create(tmp_path, DIFF, "some_owner", "some_repo", 3, "def456", force=True)
        assert again.status() == ReviewStatus.NEW

    def test_overwrite_after_submission(self, review, tmp_path):
        insert(review, 9, "hmm")
        review.mark_submitted()
        again = Review.create(tmp_path, DIFF, "some_owner", "some_repo", 3, "def456")
        assert again.status() == ReviewStatus.NEW
        assert again.metadata().submitted is None

    def test_remove_new(self, review):
        review.remove()
        assert not review.path().exists()
        assert not review.metadata_path().exists()

    def test_remove_refuses_unsubmitted(self, review):
        insert(review, 9, "hmm")
        with pytest.raises(LifecycleError):
            review.remove()
        assert review.path().exists()
        assert review.metadata_path().exists()

    def test_remove_force(self, review):
        insert(review, 9, "hmm")
        review.remove(force=True)
        assert not review.path().exists()
        assert not review.metadata_path().exists()

    def test_remove_submitted(self, review):
        insert(review, 9, "hmm")
        review.mark_submitted()
        review.remove()
        assert not review.exists()


class TestGetAllExisting:
    def test_lists_reviews(self, tmp_path):
        Review.create(tmp_path, DIFF, "b_owner", "repo", 7, "sha")
        Review.create(tmp_path, DIFF, "a_owner", "repo", 12, "sha")
        (tmp_path / "notes.txt").write_text("ignored")
        (tmp_path / "a_owner" / "repo" / "README").write_text("ignored")

        handles = [r.handle() for r in get_all_existing(tmp_path)]
        assert handles == ["a_owner/repo/12", "b_owner/repo/7"]

    def test_empty_workdir(self, tmp_path):
        assert get_all_existing(tmp_path) == []

    def test_missing_workdir(self, tmp_path):
        assert get_all_existing(tmp_path / "nope") == []

    def test_bad_file_name(self, tmp_path):
        path = tmp_path / "owner" / "repo" / "abc.prr"
        path.parent.mkdir(parents=True)
        path.write_text("")
        with pytest.raises(PrrError, match="Failed to parse PR num"):
            get_all_existing(tmp_path)
