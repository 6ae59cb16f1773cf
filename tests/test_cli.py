"""Tests for CLI interface.

Test Coverage:
    - Argument parsing
    - Command routing
    - Exit codes for success, partial success and fatal errors
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from lldiff import __version__
from lldiff.cli import cmd_run, cmd_version, create_parser, main
from lldiff.errors import BackendRejected, ConfigMissing, ToolNotFound, VersionUnavailable


class TestParserCreation:
    """Test CLI parser creation."""

    def test_parser_prog_name(self):
        """Parser has correct program name."""
        assert create_parser().prog == "lldiff"

    def test_help_exits(self):
        """--help exits cleanly."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--help"])


class TestRunCommand:
    """Test run command parsing."""

    def test_run_defaults(self):
        """run has no stage filter by default."""
        args = create_parser().parse_args(["run"])
        assert args.command == "run"
        assert args.only is None
        assert args.repo_root is None
        assert args.log_dir is None

    @pytest.mark.parametrize("stage", ["update", "git", "images", "notify"])
    def test_run_only_stage(self, stage):
        """--only accepts every stage name."""
        args = create_parser().parse_args(["run", "--only", stage])
        assert args.only == stage

    def test_run_only_invalid(self):
        """Unknown stages are rejected."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["run", "--only", "deploy"])

    def test_run_paths(self):
        """--repo-root and --log-dir parse as paths."""
        args = create_parser().parse_args(["run", "--repo-root", "/srv/data", "--log-dir", "logs"])
        assert args.repo_root == Path("/srv/data")
        assert args.log_dir == Path("logs")


class TestCmdRun:
    """Test run command execution with a mocked orchestrator."""

    @pytest.mark.parametrize(
        "only,method",
        [
            (None, "run"),
            ("update", "run_update"),
            ("git", "run_git"),
            ("images", "run_images"),
            ("notify", "run_notify"),
        ],
    )
    def test_routes_to_stage(self, only, method):
        """Each --only value calls the matching orchestrator method."""
        args = create_parser().parse_args(["run"] + (["--only", only] if only else []))

        with patch("lldiff.cli.Orchestrator") as mock_cls:
            exit_code = cmd_run(args)

        assert exit_code == 0
        getattr(mock_cls.return_value, method).assert_called_once_with()

    @pytest.mark.parametrize(
        "error",
        [
            ToolNotFound("hailstorm"),
            VersionUnavailable("no version"),
            ConfigMissing(["ONEBOT_URL"]),
            BackendRejected("forward failed", "{}"),
        ],
    )
    def test_fatal_errors_exit_nonzero(self, error):
        """Fatal pipeline errors return exit code 1."""
        args = create_parser().parse_args(["run"])

        with patch("lldiff.cli.Orchestrator") as mock_cls:
            mock_cls.return_value.run.side_effect = error
            assert cmd_run(args) == 1

    def test_unexpected_error_exit_nonzero(self):
        """Unexpected exceptions are logged and return 1."""
        args = create_parser().parse_args(["run"])

        with patch("lldiff.cli.Orchestrator") as mock_cls:
            mock_cls.return_value.run.side_effect = RuntimeError("boom")
            assert cmd_run(args) == 1

    def test_keyboard_interrupt(self):
        """Ctrl-C returns 130."""
        args = create_parser().parse_args(["run"])

        with patch("lldiff.cli.Orchestrator") as mock_cls:
            mock_cls.return_value.run.side_effect = KeyboardInterrupt
            assert cmd_run(args) == 130

    def test_repo_root_override(self, tmp_path):
        """--repo-root replaces the configured root for this run."""
        args = create_parser().parse_args(["run", "--repo-root", str(tmp_path)])

        with patch("lldiff.cli.Orchestrator") as mock_cls:
            cmd_run(args)

        config = mock_cls.call_args.kwargs["config"]
        assert config.repo_root == tmp_path


class TestVersionCommand:
    """Test version command."""

    def test_version_command_execution(self, capsys):
        """Version command prints the package version."""
        args = create_parser().parse_args(["version"])

        assert cmd_version(args) == 0
        assert __version__ in capsys.readouterr().out


class TestMainEntryPoint:
    """Test main() entry point."""

    def test_main_no_args_shows_help(self, capsys):
        """Main with no arguments shows help."""
        assert main([]) == 0
        assert "lldiff" in capsys.readouterr().out.lower()

    def test_main_version_command(self, capsys):
        """Main routes version command correctly."""
        assert main(["version"]) == 0
        assert "link-like-diff" in capsys.readouterr().out

    def test_main_run_writes_log_file(self, tmp_path):
        """--log-dir adds a dated log file."""
        with patch("lldiff.cli.Orchestrator", MagicMock()):
            exit_code = main(["run", "--log-dir", str(tmp_path / "logs")])

        assert exit_code == 0
        assert list((tmp_path / "logs").glob("run_*.log"))
