"""
Tests for the CLI.

CRITICAL TESTS:
1. test_version - Version command works
2. test_dry_run_passes - Matrix runs end to end, exit 0
3. test_insufficient_nodes - Configuration errors exit 254
"""

import json
import sys

import pytest
from typer.testing import CliRunner

from faultline import __version__
from faultline.cli.main import app
from faultline.core.errors import EXIT_CONFIG_ERROR, EXIT_INVALID, EXIT_OK


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No stray faultline.yml from the working directory or home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.delenv('FAULTLINE_DATADOG_API_KEY', raising=False)


class TestVersion:

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestList:

    def test_lists_workloads_and_nemeses(self, runner):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "bank-index" in result.stdout
        assert "majority-ring" in result.stdout
        assert "clocks" in result.stdout


class TestPlan:

    def test_plan_counts(self, runner):
        result = runner.invoke(app, [
            "plan", "-t", "bank", "-t", "g2",
            "--nemesis", "none", "--nemesis", "parts",
            "--test-count", "2",
        ])
        assert result.exit_code == 0
        assert "8 runs" in result.stdout
        assert "parts" in result.stdout

    def test_plan_absent_token(self, runner):
        result = runner.invoke(app, [
            "plan", "-t", "bank", "--nemesis", "small-skews",
            "--nemesis2", "absent", "--nemesis2", "big-skews",
        ])
        assert result.exit_code == 0
        assert "1 runs" in result.stdout

    def test_plan_unknown_nemesis(self, runner):
        result = runner.invoke(app, ["plan", "-t", "bank", "--nemesis", "meteor"])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "E1004" in result.stdout


class TestTest:
    """Test the test command."""

    def test_dry_run_passes(self, runner, tmp_path):
        report_path = tmp_path / 'report.json'
        result = runner.invoke(app, [
            "test", "-t", "bank", "-t", "register",
            "--nemesis", "none", "--nemesis", "partitions",
            "--dry-run", "--report", str(report_path),
        ])
        assert result.exit_code == EXIT_OK
        assert "PASSED" in result.stdout

        report = json.loads(report_path.read_text())
        assert report['total_runs'] == 4
        assert report['valid'] is True

    def test_insufficient_nodes(self, runner):
        """2 nodes for 3 replicas: exit 254, no runs."""
        result = runner.invoke(app, [
            "test", "-t", "bank", "--nodes", "n1,n2", "-r", "3", "--dry-run",
        ])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "E1002" in result.stdout
        assert "PASSED" not in result.stdout

    def test_wrong_type_in_config_file(self, runner, tmp_path):
        """A quoted number in the config is a configuration error, not an invalid run."""
        config = tmp_path / 'matrix.yml'
        config.write_text("cluster:\n  replicas: '3'\nmatrix:\n  workloads: [bank]\n")
        for command in (["test", "--dry-run"], ["plan"]):
            result = runner.invoke(app, command + ["-c", str(config)])
            assert result.exit_code == EXIT_CONFIG_ERROR
            assert "E1001" in result.stdout
            assert "cluster.replicas" in result.stdout

    def test_unknown_workload(self, runner):
        result = runner.invoke(app, ["test", "-t", "ledger", "--dry-run"])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_no_runner_configured(self, runner):
        result = runner.invoke(app, ["test", "-t", "bank"])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "no test runner" in result.stdout

    def test_invalid_run_exits_one(self, runner, tmp_path):
        """A runner that reports an anomaly fails the matrix; results are stored."""
        script = tmp_path / 'runner.py'
        script.write_text("import sys\nsys.stdin.read()\nprint('{\"valid\": false}')\n")
        store_dir = tmp_path / 'store'
        result = runner.invoke(app, [
            "test", "-t", "bank",
            "--runner", f"{sys.executable} {script}",
            "--store-dir", str(store_dir),
        ])
        assert result.exit_code == EXIT_INVALID
        assert "FAILED" in result.stdout
        assert list(store_dir.glob('*/*/results.json'))

    def test_valid_run_through_runner(self, runner, tmp_path):
        script = tmp_path / 'runner.py'
        script.write_text(
            "import json, sys\n"
            "run = json.load(sys.stdin)\n"
            "ok = run['test']['options']['strong_read'] is False\n"
            "print(json.dumps({'valid': ok}))\n"
        )
        result = runner.invoke(app, [
            "test", "-t", "sets", "--no-strong-read",
            "--runner", f"{sys.executable} {script}",
            "--store-dir", str(tmp_path / 'store'),
        ])
        assert result.exit_code == EXIT_OK

    def test_config_file(self, runner, tmp_path):
        config = tmp_path / 'matrix.yml'
        config.write_text(
            "matrix:\n"
            "  workloads: [pages]\n"
            "  nemeses: [none, start-kill]\n"
            "  test_count: 2\n"
        )
        report_path = tmp_path / 'report.json'
        result = runner.invoke(app, [
            "test", "-c", str(config), "--dry-run", "--report", str(report_path),
        ])
        assert result.exit_code == EXIT_OK
        assert json.loads(report_path.read_text())['total_runs'] == 4


class TestConfig:
    """Test config commands."""

    def test_config_init(self, runner):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "matrix:" in result.stdout
        assert "replicas:" in result.stdout

    def test_config_validate_valid(self, runner, tmp_path):
        path = tmp_path / 'faultline.yml'
        path.write_text("cluster:\n  replicas: 3\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "Valid" in result.stdout

    def test_config_validate_invalid(self, runner, tmp_path):
        path = tmp_path / 'faultline.yml'
        path.write_text("cluster:\n  replicas: 0\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1

    def test_config_dump_redacts(self, runner, tmp_path):
        path = tmp_path / 'faultline.yml'
        path.write_text("workload:\n  datadog_api_key: dd-secret\n")
        result = runner.invoke(app, ["config", "dump", str(path)])
        assert result.exit_code == 0
        assert "dd-secret" not in result.stdout

    def test_unknown_action(self, runner):
        result = runner.invoke(app, ["config", "explode"])
        assert result.exit_code == 1
