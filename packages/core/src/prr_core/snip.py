"""Expand snip markers in a review file against the original diff.

Reviewers may replace any run of quoted lines with a line reading ``[...]``
(or ``[..]``) to keep a review file short. Before the file can be validated
and parsed, every snip has to be replaced by the quoted lines it stands for.

Alignment works like glob matching with a snip acting as ``*``: quoted lines
must match the original one for one, comment lines are carried over without
consuming any original lines, and a snip consumes the shortest run of original
lines that lets the rest of the file line up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from prr_core.errors import CorruptionError
from prr_core.utils.text import is_quoted, is_snip, quote_line, split_lines, unquote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Quoted:
    raw: str
    text: str


@dataclass(frozen=True)
class _Snip:
    raw: str


@dataclass(frozen=True)
class _Comment:
    raw: str


def _classify(line: str) -> _Quoted | _Snip | _Comment:
    if is_snip(line):
        return _Snip(line)
    if is_quoted(line):
        return _Quoted(line, unquote(line))
    return _Comment(line)


def has_snips(lines: list[str]) -> bool:
    return any(is_snip(line) for line in lines)


class SnipResolver:
    """Resolves the snips in a review file against the original diff text.

    Runs of quoted and comment lines are matched iteratively; only snips
    recurse, so stack depth grows with the number of snips rather than the
    length of the file. Cursor pairs known not to align are remembered.
    """

    def __init__(self, original: str):
        self._original = split_lines(original)

    def resolve(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with every snip replaced by the quoted original lines.

        Raises CorruptionError when the file cannot be aligned with the original.
        """
        pattern = [_classify(line) for line in lines]
        failed: set[tuple[int, int]] = set()
        resolved = self._match(pattern, 0, 0, failed)
        if resolved is None:
            raise CorruptionError("Detected corruption in quoted part of review file: could not resolve snip")
        logger.debug("Resolved %d snip(s)", sum(isinstance(p, _Snip) for p in pattern))
        return resolved

    def _match(
        self,
        pattern: list[_Quoted | _Snip | _Comment],
        pi: int,
        oi: int,
        failed: set[tuple[int, int]],
    ) -> list[str] | None:
        if (pi, oi) in failed:
            return None

        start = (pi, oi)
        out: list[str] = []
        while pi < len(pattern):
            item = pattern[pi]
            if isinstance(item, _Comment):
                out.append(item.raw)
                pi += 1
            elif isinstance(item, _Quoted):
                if oi >= len(self._original) or item.text.rstrip() != self._original[oi].rstrip():
                    failed.add(start)
                    return None
                out.append(item.raw)
                pi += 1
                oi += 1
            else:
                for end in range(oi, len(self._original) + 1):
                    rest = self._match(pattern, pi + 1, end, failed)
                    if rest is not None:
                        return out + [quote_line(line) for line in self._original[oi:end]] + rest
                failed.add(start)
                return None

        if oi != len(self._original):
            failed.add(start)
            return None
        return out
