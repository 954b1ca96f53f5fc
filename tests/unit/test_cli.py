"""
Unit tests for command-line argument handling (no database involved).
"""

import pytest

from winequality.cli import admin_cli, load_cli

pytestmark = pytest.mark.unit


class TestLoadCli:
    """Tests for wine-load"""

    def test_defaults(self):
        args = load_cli.build_parser().parse_args([])

        assert args.red == "data/winequality-red.csv"
        assert args.white == "data/winequality-white.csv"
        assert args.progress_interval == 1000
        assert args.read_timeout is None
        assert args.metrics_file is None

    def test_options(self):
        args = load_cli.build_parser().parse_args(
            ["--red", "r.csv", "--white", "w.csv", "--read-timeout", "30", "--log-format", "text"]
        )

        assert args.red == "r.csv"
        assert args.read_timeout == 30.0
        assert args.log_format == "text"

    def test_missing_input_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            load_cli.main(["--red", str(tmp_path / "nope.csv"), "--white", str(tmp_path / "nope2.csv")])

        assert exc_info.value.code == 1

    def test_missing_input_file_never_connects(self, red_csv, tmp_path, test_env_vars, monkeypatch):
        async def run_load(args, config):
            raise AssertionError("run_load must not start when an input file is missing")

        monkeypatch.setattr(load_cli, "run_load", run_load)

        with pytest.raises(SystemExit) as exc_info:
            load_cli.main(["--red", red_csv, "--white", str(tmp_path / "missing.csv")])

        assert exc_info.value.code == 1

    def test_bad_configuration_exits(self, red_csv, white_csv, monkeypatch):
        monkeypatch.setenv("DB_PASSWORD", "")

        with pytest.raises(SystemExit) as exc_info:
            load_cli.main(["--red", red_csv, "--white", white_csv])

        assert exc_info.value.code == 1


class TestLoadCliMetricsFile:
    """wine-load --metrics-file never decides the exit status"""

    @staticmethod
    def stub_run(monkeypatch, outcome):
        async def run_load(args, config):
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(load_cli, "run_load", run_load)

    def test_written_after_commit(self, red_csv, white_csv, tmp_path, test_env_vars, monkeypatch):
        self.stub_run(monkeypatch, True)
        target = tmp_path / "winequality.prom"

        load_cli.main(["--red", red_csv, "--white", white_csv, "--metrics-file", str(target)])

        assert "winequality_load_runs_total" in target.read_text()

    def test_unwritable_path_keeps_commit_exit_status(
        self, red_csv, white_csv, tmp_path, test_env_vars, monkeypatch, capsys
    ):
        self.stub_run(monkeypatch, True)
        target = tmp_path / "missing_dir" / "winequality.prom"

        # Returns normally: exit status 0
        load_cli.main(["--red", red_csv, "--white", white_csv, "--metrics-file", str(target)])

        assert not target.parent.exists()
        assert "Could not write metrics file" in capsys.readouterr().out

    def test_unwritable_path_keeps_failure_exit_status(
        self, red_csv, white_csv, tmp_path, test_env_vars, monkeypatch
    ):
        self.stub_run(monkeypatch, RuntimeError("insert failed"))
        target = tmp_path / "missing_dir" / "winequality.prom"

        with pytest.raises(SystemExit) as exc_info:
            load_cli.main(["--red", red_csv, "--white", white_csv, "--metrics-file", str(target)])

        assert exc_info.value.code == 1


class TestAdminCli:
    """Tests for wine-admin"""

    def test_update_collects_only_given_fields(self):
        args = admin_cli.build_parser().parse_args(
            ["update", "--id", "3", "--quality", "7", "--free-sulfur-dioxide", "12.5"]
        )

        assert args.id == 3
        assert admin_cli.wine_fields(args) == {"quality": 7, "free_sulfur_dioxide": 12.5}

    def test_create_requires_type_and_quality(self):
        with pytest.raises(SystemExit):
            admin_cli.build_parser().parse_args(["create", "--alcohol", "9.4"])

    def test_list_defaults(self):
        args = admin_cli.build_parser().parse_args(["list"])

        assert args.page == 1
        assert args.limit == 100

    def test_no_command_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            admin_cli.main([])

        assert exc_info.value.code == 1
