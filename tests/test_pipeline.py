"""Tests for the pipeline module."""

import sys

import pytest

from minishell.pipeline import REDIRECT_OPERATORS, Command, execute, open_redirects, parse_redirections


class TestParseRedirections:
    def test_no_redirections(self):
        cmd = parse_redirections(["echo", "hello"])
        assert cmd == Command(argv=["echo", "hello"])

    @pytest.mark.parametrize("op", [">", "1>"])
    def test_stdout_redirect(self, op):
        cmd = parse_redirections(["echo", "hello", op, "out.txt"])
        assert cmd.argv == ["echo", "hello"]
        assert cmd.stdout_file == "out.txt"
        assert cmd.stdout_append is False

    @pytest.mark.parametrize("op", [">>", "1>>"])
    def test_stdout_append(self, op):
        cmd = parse_redirections(["echo", "hello", op, "out.txt"])
        assert cmd.stdout_file == "out.txt"
        assert cmd.stdout_append is True

    def test_stderr_redirect(self):
        cmd = parse_redirections(["ls", "nope", "2>", "err.txt"])
        assert cmd.argv == ["ls", "nope"]
        assert cmd.stderr_file == "err.txt"
        assert cmd.stderr_append is False
        assert cmd.stdout_file is None

    def test_stderr_append(self):
        cmd = parse_redirections(["ls", "2>>", "err.txt"])
        assert cmd.stderr_file == "err.txt"
        assert cmd.stderr_append is True

    def test_both_streams(self):
        cmd = parse_redirections(["cmd", ">", "out", "2>", "err", "arg"])
        assert cmd.argv == ["cmd", "arg"]
        assert cmd.stdout_file == "out"
        assert cmd.stderr_file == "err"

    def test_redirect_before_command(self):
        cmd = parse_redirections([">", "out", "echo", "hi"])
        assert cmd.argv == ["echo", "hi"]

    def test_last_redirect_wins(self):
        cmd = parse_redirections(["echo", ">", "a", ">>", "b"])
        assert cmd.stdout_file == "b"
        assert cmd.stdout_append is True

    def test_missing_target(self):
        with pytest.raises(ValueError, match="newline"):
            parse_redirections(["echo", ">"])

    def test_missing_command(self):
        with pytest.raises(ValueError, match="missing command"):
            parse_redirections([">", "out"])

    def test_attached_operator_is_a_word(self):
        assert parse_redirections(["echo", "a>b"]).argv == ["echo", "a>b"]

    def test_operator_set(self):
        assert REDIRECT_OPERATORS == {">", "1>", ">>", "1>>", "2>", "2>>"}


class TestOpenRedirects:
    def test_no_files(self):
        assert open_redirects(Command(argv=["x"])) == (None, None)

    def test_truncate_and_append(self, tmp_path):
        out = tmp_path / "out.txt"
        out.write_text("old\n")
        stdout_fh, stderr_fh = open_redirects(Command(argv=["x"], stdout_file=str(out)))
        stdout_fh.write("new\n")
        stdout_fh.close()
        assert stderr_fh is None
        assert out.read_text() == "new\n"

        stdout_fh, _ = open_redirects(Command(argv=["x"], stdout_file=str(out), stdout_append=True))
        stdout_fh.write("more\n")
        stdout_fh.close()
        assert out.read_text() == "new\nmore\n"

    def test_unopenable_target(self, tmp_path, capsys):
        cmd = Command(argv=["x"], stdout_file=str(tmp_path / "missing" / "out.txt"))
        with pytest.raises(OSError):
            open_redirects(cmd)
        assert "minishell:" in capsys.readouterr().err


class TestExecute:
    def test_exit_code(self):
        assert execute(Command(argv=[sys.executable, "-c", "raise SystemExit(3)"])) == 3

    def test_stdout_to_file(self, tmp_path):
        out = tmp_path / "out.txt"
        cmd = Command(argv=[sys.executable, "-c", "print('hi')"], stdout_file=str(out))
        assert execute(cmd) == 0
        assert out.read_text() == "hi\n"

    def test_stderr_to_file(self, tmp_path):
        err = tmp_path / "err.txt"
        cmd = Command(
            argv=[sys.executable, "-c", "import sys; sys.stderr.write('oops\\n')"],
            stderr_file=str(err),
        )
        assert execute(cmd) == 0
        assert err.read_text() == "oops\n"

    def test_command_not_found(self, capsys):
        assert execute(Command(argv=["nonexistent_cmd_xyz"])) == 127
        assert "nonexistent_cmd_xyz: command not found" in capsys.readouterr().err

    def test_bad_redirect_target(self, tmp_path):
        cmd = Command(argv=[sys.executable, "-c", "pass"], stdout_file=str(tmp_path / "no" / "f"))
        assert execute(cmd) == 1
