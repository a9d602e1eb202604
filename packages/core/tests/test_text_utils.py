from prr_core.utils.text import (
    is_quoted,
    is_snip,
    quote_line,
    quote_lines,
    split_lines,
    strip_blank_lines,
    unquote,
)


class TestQuoting:
    def test_quote_line(self):
        assert quote_line("+x = 1") == "> +x = 1"
        assert quote_line(" ") == ">  "
        assert quote_line("") == ">"

    def test_quote_lines(self):
        assert quote_lines("a\n\nb\n") == "> a\n>\n> b\n"

    def test_quote_lines_without_trailing_newline(self):
        assert quote_lines("a\nb") == "> a\n> b\n"

    def test_is_quoted(self):
        assert is_quoted("> a")
        assert is_quoted(">")
        assert not is_quoted(">a")
        assert not is_quoted(" > a")
        assert not is_quoted("")

    def test_unquote(self):
        assert unquote("> -old") == "-old"
        assert unquote(">  ctx") == " ctx"
        assert unquote(">") == ""


class TestSplitLines:
    def test_drops_trailing_empty_line(self):
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_keeps_inner_blank_lines(self):
        assert split_lines("a\n\nb") == ["a", "", "b"]

    def test_strips_carriage_returns(self):
        assert split_lines("a\r\nb\r\n") == ["a", "b"]

    def test_form_feed_is_not_a_line_break(self):
        assert split_lines("a\x0cb\n") == ["a\x0cb"]

    def test_empty(self):
        assert split_lines("") == []


def test_is_snip():
    assert is_snip("[...]")
    assert is_snip("[..]")
    assert is_snip("  [...]\t")
    assert not is_snip("> [...]")
    assert not is_snip("[....]")


def test_strip_blank_lines():
    assert strip_blank_lines(["", " ", "a", "", "b", "  ", ""]) == "a\n\nb"
    assert strip_blank_lines(["", ""]) == ""
    assert strip_blank_lines([]) == ""
