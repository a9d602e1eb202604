"""Helpers for the review file's quoting convention."""

from __future__ import annotations

QUOTE = ">"
SNIP_MARKERS = ("[..]", "[...]")


def split_lines(text: str) -> list[str]:
    """Split on newlines only, dropping a trailing empty line and any ``\\r``.

    ``str.splitlines`` also breaks on form feeds and other separators that
    can legitimately appear inside diff content, so it is not used here.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def quote_line(line: str) -> str:
    if not line:
        return QUOTE
    return f"{QUOTE} {line}"


def quote_lines(text: str) -> str:
    """Quote every line of text, one per line, with a trailing newline."""
    return "".join(quote_line(line) + "\n" for line in split_lines(text))


def is_quoted(line: str) -> bool:
    return line == QUOTE or line.startswith(QUOTE + " ")


def unquote(line: str) -> str:
    """Return the content of a quoted line. A bare quote is an empty line."""
    if line == QUOTE:
        return ""
    return line[len(QUOTE) + 1 :]


def is_snip(line: str) -> bool:
    return line.strip() in SNIP_MARKERS


def strip_blank_lines(lines: list[str]) -> str:
    """Join lines with newlines, dropping leading and trailing blank lines."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])
