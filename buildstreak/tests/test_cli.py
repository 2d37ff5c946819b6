"""Tests for the buildstreak command line."""

from datetime import date
from unittest.mock import patch

import pytest

from buildstreak.buildstreak import build_parser, main, run
from buildstreak.core.config import MARKER_FILE, STORE_DIR_NAME


def invoke(*argv: str) -> int:
    """Run main() and return its exit code."""
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


@pytest.fixture(autouse=True)
def fixed_date():
    """Pin the store date so tests do not straddle midnight."""
    with patch("buildstreak.core.operations.local_today", return_value=date(2026, 10, 19)):
        yield


@pytest.fixture
def project(tmp_path, monkeypatch):
    """An initialized project as the working directory."""
    monkeypatch.chdir(tmp_path)
    assert invoke("init") == 0
    return tmp_path


class TestParser:
    """Tests for build_parser()."""

    def test_defaults(self):
        args = build_parser().parse_args(["status"])
        assert args.command == "status"
        assert args.path is None
        assert args.use_global is False
        assert args.lock is True
        assert args.debug is False

    def test_flags(self):
        args = build_parser().parse_args(["--global", "--no-lock", "--debug", "fail"])
        assert args.use_global is True
        assert args.lock is False
        assert args.debug is True


class TestCommands:
    """End-to-end command tests."""

    def test_init_prints_message(self, tmp_path, monkeypatch, capsys):
        """init should create the store and report it."""
        monkeypatch.chdir(tmp_path)
        assert invoke("init") == 0
        out = capsys.readouterr().out
        assert "Initialized buildstreak store at" in out
        assert (tmp_path / STORE_DIR_NAME).is_dir()
        assert (tmp_path / MARKER_FILE).exists()

    def test_init_with_path(self, tmp_path, monkeypatch):
        """init should accept a base path."""
        base = tmp_path / "stores"
        base.mkdir()
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)

        assert invoke("init", str(base)) == 0
        assert (base / STORE_DIR_NAME).is_dir()
        assert (work / MARKER_FILE).read_text() == str(base / STORE_DIR_NAME)

    def test_init_twice_fails(self, project, capsys):
        """A second init should exit 1 with the error on stderr."""
        capsys.readouterr()
        assert invoke("init") == 1
        assert "FileExistsError" in capsys.readouterr().err

    def test_success_success_fail_status(self, project, capsys):
        """status should print the tally after a build sequence."""
        assert invoke("success") == 0
        assert invoke("success") == 0
        assert invoke("fail") == 0
        capsys.readouterr()

        assert invoke("status") == 0
        assert capsys.readouterr().out == "2 | 1\n"

    def test_silent_commands(self, project, capsys):
        """success, fail and reset should print nothing."""
        capsys.readouterr()
        for command in ("success", "fail", "reset"):
            assert invoke(command) == 0
        assert capsys.readouterr().out == ""

    def test_reset(self, project, capsys):
        invoke("success")
        invoke("reset")
        capsys.readouterr()
        invoke("status")
        assert capsys.readouterr().out == "0 | 0\n"

    @pytest.mark.parametrize("command", ["tmux", "render"])
    def test_render(self, project, capsys, command):
        """Render should print the segment without a trailing newline."""
        invoke("success")
        invoke("success")
        invoke("fail")
        capsys.readouterr()

        assert invoke(command) == 0
        out = capsys.readouterr().out
        assert out.startswith("#[fg=colour237,bg=colour234]")
        assert " 2 | 1 " in out
        assert not out.endswith("\n")

    def test_render_undecodable_counter(self, project, capsys):
        """A binary day file should render as a tie, not crash."""
        day_file = project / STORE_DIR_NAME / "19-10-26.streak"
        day_file.write_bytes(b"\x80\x81")
        capsys.readouterr()

        assert invoke("tmux") == 0
        assert " 0 | 0 " in capsys.readouterr().out
        assert day_file.read_text() == "0\n0"

    def test_render_uninitialized(self, tmp_path, monkeypatch, capsys):
        """Render outside a project should print nothing and succeed."""
        monkeypatch.chdir(tmp_path)
        assert invoke("tmux") == 0
        assert capsys.readouterr().out == ""

    def test_status_uninitialized(self, tmp_path, monkeypatch, capsys):
        """status outside a project should exit 1 with a diagnostic."""
        monkeypatch.chdir(tmp_path)
        assert invoke("status") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "NotInitializedError" in captured.err

    def test_global_store(self, tmp_path, monkeypatch, capsys):
        """--global should work without init."""
        monkeypatch.chdir(tmp_path)
        with patch("buildstreak.core.config.GLOBAL_ROOT", tmp_path / "global"):
            assert invoke("--global", "fail") == 0
            capsys.readouterr()
            assert invoke("--global", "status") == 0
        assert capsys.readouterr().out == "0 | 1\n"

    def test_global_init_rejected(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert invoke("--global", "init") == 1
        assert not (tmp_path / MARKER_FILE).exists()


class TestUsageErrors:
    """Bad invocations exit 1."""

    def test_missing_command(self, capsys):
        assert invoke() == 1
        assert "Mode missing" in capsys.readouterr().err

    def test_invalid_command(self, capsys):
        assert invoke("deploy") == 1
        assert "Invalid command" in capsys.readouterr().err

    def test_too_many_arguments(self, project, capsys):
        """argparse usage errors should exit 1, not 2."""
        assert invoke("status", "a", "b") == 1
        assert "unrecognized arguments: b" in capsys.readouterr().err

    def test_unknown_option(self, capsys):
        assert invoke("--bogus") == 1
        assert "unrecognized arguments: --bogus" in capsys.readouterr().err

    def test_extra_argument(self, project, capsys):
        """Only init takes a path."""
        assert invoke("status", "extra") == 1
        assert "Unexpected argument" in capsys.readouterr().err

    def test_run_returns_exit_code(self, project):
        """run() should return the code instead of exiting."""
        args = build_parser().parse_args(["success"])
        assert run(args) == 0
