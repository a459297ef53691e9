"""Tests for turning input lines into commands."""

from result import Err, Ok

from smallsh.api import CommandSpec
from smallsh.errors import LineTooLong, MalformedCommand
from smallsh.parser import MAX_LINE_LENGTH, SmallshParser


def _parse(line: str) -> CommandSpec | None:
    """Parse a line that is expected to be valid."""
    result = SmallshParser(pid=1234).parse(line)
    assert isinstance(result, Ok)
    return result.ok_value


class TestFiltering:
    """Lines that carry no command."""

    def test_blank_line(self) -> None:
        """Empty and whitespace-only lines are skipped."""
        assert _parse("\n") is None
        assert _parse("   \n") is None

    def test_comment(self) -> None:
        """Lines starting with # are skipped."""
        assert _parse("# ls -l\n") is None

    def test_too_long(self) -> None:
        """Lines past the limit are rejected."""
        result = SmallshParser().parse("x" * (MAX_LINE_LENGTH + 1) + "\n")
        assert isinstance(result, Err)
        assert result.err_value == LineTooLong(MAX_LINE_LENGTH + 1, MAX_LINE_LENGTH)
        assert "2048" in result.err_value.message()

    def test_at_limit(self) -> None:
        """A line must be under the limit, so exactly the limit is rejected."""
        result = SmallshParser().parse("x" * MAX_LINE_LENGTH + "\n")
        assert result == Err(LineTooLong(MAX_LINE_LENGTH, MAX_LINE_LENGTH))

    def test_just_under_limit(self) -> None:
        """One character short of the limit is accepted."""
        line = "x" * (MAX_LINE_LENGTH - 1)
        assert _parse(line + "\n") == CommandSpec(line)


class TestTokens:
    """Program, arguments, redirection and the background flag."""

    def test_program_and_args(self) -> None:
        """Space-separated words become the program and its arguments."""
        assert _parse("ls -l  /tmp\n") == CommandSpec("ls", ("-l", "/tmp"))

    def test_pid_expansion(self) -> None:
        """$$ expands to the shell's pid everywhere on the line."""
        assert _parse("echo $$ x$$y\n") == CommandSpec("echo", ("1234", "x1234y"))

    def test_redirections(self) -> None:
        """< and > set the input and output paths."""
        spec = _parse("sort < in.txt > out.txt\n")
        assert spec == CommandSpec("sort", (), "in.txt", "out.txt")

    def test_output_before_input(self) -> None:
        """Redirections may come in either order."""
        spec = _parse("sort > out.txt < in.txt\n")
        assert spec == CommandSpec("sort", (), "in.txt", "out.txt")

    def test_background(self) -> None:
        """A final & requests background execution."""
        spec = _parse("sleep 5 &\n")
        assert spec == CommandSpec("sleep", ("5",), background=True)

    def test_background_after_redirection(self) -> None:
        """& may follow the redirections."""
        spec = _parse("wc < in.txt > out.txt &\n")
        assert spec == CommandSpec("wc", (), "in.txt", "out.txt", background=True)

    def test_ampersand_in_the_middle_is_an_argument(self) -> None:
        """Only the last token can mean background."""
        spec = _parse("echo & done\n")
        assert spec == CommandSpec("echo", ("&", "done"))

    def test_missing_redirect_target(self) -> None:
        """An operator with no file name is rejected."""
        result = SmallshParser().parse("cat <\n")
        assert isinstance(result, Err)
        assert isinstance(result.err_value, MalformedCommand)

    def test_words_after_redirection(self) -> None:
        """Arguments cannot follow a redirection."""
        result = SmallshParser().parse("cat < in.txt extra\n")
        assert isinstance(result, Err)
        assert isinstance(result.err_value, MalformedCommand)
