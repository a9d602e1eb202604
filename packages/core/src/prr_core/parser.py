"""State machine that turns an annotated review file back into comments.

A review file is the PR diff with every line quoted (``> ``). Anything the
reviewer types between quoted lines is a comment on the quoted line directly
above it:

    > diff --git a/foo.py b/foo.py
    > @@ -1,2 +1,2 @@
    > -x = 1
    > +x = 2
    Why 2?

Text before the first quoted line is the overall review comment, where a
``@prr approve|reject|comment`` directive may also set the review action.
A blank line followed by quoted lines opens a span: the comment that ends the
span covers every quoted line from the first one after the blank line.

Feed lines one at a time to ``ReviewParser.parse_line`` and call
``finish()`` once the input is exhausted.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Union

from prr_core.errors import ParseError
from prr_core.utils.text import is_quoted, strip_blank_lines, unquote

logger = logging.getLogger(__name__)

_DIFF_HEADER_PREFIX = "diff --git"
_HUNK_HEADER_PREFIX = "@@"
_DIFF_HEADER_RE = re.compile(r"^diff --git a/(?P<old>.+?) b/(?P<new>.+)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(?P<lstart>\d+)(?:,(?P<llen>\d+))? \+(?P<rstart>\d+)(?:,(?P<rlen>\d+))? @@")


class Side(str, enum.Enum):
    """Side of a diff a location refers to, named as GitHub names them."""

    LEFT = "LEFT"
    RIGHT = "RIGHT"


@dataclass(frozen=True)
class LineLocation:
    """A line number in either the pre-change (left) or post-change (right) file."""

    side: Side
    line: int

    @classmethod
    def left(cls, line: int) -> LineLocation:
        return cls(Side.LEFT, line)

    @classmethod
    def right(cls, line: int) -> LineLocation:
        return cls(Side.RIGHT, line)


class ReviewAction(enum.Enum):
    """Overall disposition of a review. Values are GitHub review events."""

    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    COMMENT = "COMMENT"


_DIRECTIVES = {
    "approve": ReviewAction.APPROVE,
    "reject": ReviewAction.REQUEST_CHANGES,
    "comment": ReviewAction.COMMENT,
}


@dataclass(frozen=True)
class ReviewComment:
    """The review-level comment written above the first quoted line."""

    comment: str


@dataclass(frozen=True)
class InlineComment:
    """A comment on a line of the diff, or on a span ending at that line."""

    file: str
    line: LineLocation
    start_line: LineLocation | None
    comment: str


@dataclass(frozen=True)
class FileComment:
    """A comment on a whole file rather than on any of its lines."""

    file: str
    comment: str


Comment = Union[ReviewComment, InlineComment, FileComment, ReviewAction]


# ---------------------------------------------------------------------------
# Parser states
# ---------------------------------------------------------------------------


@dataclass
class _FileDiffState:
    filename: str
    left: int = 0
    right: int = 0
    # Location of the most recent quoted line in the hunk
    location: LineLocation | None = None
    span_start: LineLocation | None = None


@dataclass
class _Start:
    lines: list[str] = field(default_factory=list)


@dataclass
class _FilePreamble:
    filename: str


@dataclass
class _FileDiff:
    diff: _FileDiffState


@dataclass
class _SpanStartOrComment:
    diff: _FileDiffState


@dataclass
class _Comment:
    diff: _FileDiffState
    lines: list[str]


def _location(diff: _FileDiffState, text: str) -> LineLocation:
    if text.startswith("-"):
        return LineLocation.left(diff.left)
    return LineLocation.right(diff.right)


class ReviewParser:
    """Line-at-a-time parser for review files.

    ``parse_line`` returns at most one comment per line. Inline comments are
    only emitted once the line after them is seen, so the last one in a file
    comes out of ``finish()``.
    """

    def __init__(self):
        self._state: _Start | _FilePreamble | _FileDiff | _SpanStartOrComment | _Comment = _Start()
        self._lineno = 0

    def parse_line(self, line: str) -> Comment | None:
        self._lineno += 1
        state = self._state

        if isinstance(state, _Start):
            return self._parse_start(state, line)
        if isinstance(state, _FilePreamble):
            return self._parse_preamble(state, line)
        if isinstance(state, _FileDiff):
            return self._parse_file_diff(state, line)
        if isinstance(state, _SpanStartOrComment):
            return self._parse_span_start_or_comment(state, line)
        return self._parse_comment(state, line)

    def finish(self) -> Comment | None:
        """Flush a comment left open at the end of the file."""
        state = self._state
        if isinstance(state, _Comment):
            comment = self._inline(state)
            state.diff.span_start = None
            self._state = _FileDiff(state.diff)
            return comment
        if isinstance(state, (_FileDiff, _SpanStartOrComment)) and state.diff.span_start is not None:
            raise self._error("unterminated span at end of file")
        return None

    # ------------------------------------------------------------------ #
    # State handlers                                                     #
    # ------------------------------------------------------------------ #

    def _parse_start(self, state: _Start, line: str) -> Comment | None:
        if is_quoted(line):
            text = unquote(line)
            if not text.startswith(_DIFF_HEADER_PREFIX):
                raise self._error("expected a diff header before any quoted diff content")
            self._state = _FilePreamble(self._parse_diff_header(text))
            review = strip_blank_lines(state.lines)
            return ReviewComment(review) if review else None

        words = line.split()
        if words and words[0] == "@prr":
            if len(words) != 2 or words[1] not in _DIRECTIVES:
                raise self._error(f"unknown directive: {line.strip()!r}")
            return _DIRECTIVES[words[1]]

        state.lines.append(line)
        return None

    def _parse_preamble(self, state: _FilePreamble, line: str) -> Comment | None:
        if not is_quoted(line):
            raise self._error("comments are not allowed before the first hunk of a file")

        text = unquote(line)
        if text.startswith(_DIFF_HEADER_PREFIX):
            # Previous file had no hunks (binary file, pure rename, ...)
            self._state = _FilePreamble(self._parse_diff_header(text))
        elif text.startswith(_HUNK_HEADER_PREFIX):
            diff = _FileDiffState(filename=state.filename)
            self._reset_position(diff, text)
            self._state = _FileDiff(diff)
        return None

    def _parse_file_diff(self, state: _FileDiff, line: str) -> Comment | None:
        if is_quoted(line):
            self._state = self._feed_diff_line(state.diff, unquote(line))
        elif not line.strip():
            self._state = _SpanStartOrComment(state.diff)
        else:
            self._state = _Comment(state.diff, [line])
        return None

    def _parse_span_start_or_comment(self, state: _SpanStartOrComment, line: str) -> Comment | None:
        if not is_quoted(line):
            if line.strip():
                self._state = _Comment(state.diff, [line])
            return None

        text = unquote(line)
        diff = state.diff
        if text.startswith(_DIFF_HEADER_PREFIX):
            self._state = self._feed_diff_line(diff, text)
            return None
        if diff.span_start is not None:
            raise self._error("unterminated span: a new span started before the previous one got a comment")

        self._state = self._feed_diff_line(diff, text)
        diff.span_start = diff.location
        return None

    def _parse_comment(self, state: _Comment, line: str) -> Comment | None:
        if not is_quoted(line):
            state.lines.append(line)
            return None

        comment = self._inline(state)
        state.diff.span_start = None
        self._state = self._feed_diff_line(state.diff, unquote(line))
        return comment

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _feed_diff_line(self, diff: _FileDiffState, text: str) -> _FilePreamble | _FileDiff:
        """Consume a quoted line inside a file diff and return the next state."""
        if text.startswith(_DIFF_HEADER_PREFIX):
            if diff.span_start is not None:
                raise self._error("span crosses into another file")
            return _FilePreamble(self._parse_diff_header(text))

        if text.startswith(_HUNK_HEADER_PREFIX):
            if diff.span_start is not None:
                raise self._error("span crosses into another hunk")
            self._reset_position(diff, text)
        elif not text.startswith("\\"):
            # "\ No newline at end of file" is not a line of either file
            if text.startswith("-"):
                diff.left += 1
            elif text.startswith("+"):
                diff.right += 1
            else:
                diff.left += 1
                diff.right += 1
            diff.location = _location(diff, text)
        return _FileDiff(diff)

    def _reset_position(self, diff: _FileDiffState, text: str) -> None:
        match = _HUNK_HEADER_RE.match(text)
        if match is None:
            raise self._error(f"malformed hunk header: {text!r}")
        # The first content line increments to the declared start. A start of
        # 0 marks an added or deleted file whose empty side is never addressed.
        diff.left = max(int(match.group("lstart")) - 1, 0)
        diff.right = max(int(match.group("rstart")) - 1, 0)
        diff.location = _location(diff, text)

    def _parse_diff_header(self, text: str) -> str:
        match = _DIFF_HEADER_RE.match(text)
        if match is None:
            raise self._error(f"malformed diff header: {text!r}")
        logger.debug("Parsing diff for %s", match.group("new"))
        return match.group("new")

    def _inline(self, state: _Comment) -> InlineComment:
        return InlineComment(
            file=state.diff.filename,
            line=state.diff.location,
            start_line=state.diff.span_start,
            comment=strip_blank_lines(state.lines),
        )

    def _error(self, message: str) -> ParseError:
        return ParseError(self._lineno, message)
