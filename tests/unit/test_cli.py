"""Unit tests for the multicluster command line."""

import pytest
from typer.testing import CliRunner

from multicluster import __version__, cli
from multicluster.cli import app
from multicluster.orchestrator import ClusterOrchestrator
from multicluster.prompts import choose_confirmer

runner = CliRunner()


@pytest.fixture
def invoke(monkeypatch, clusters_dir, cluster_tool, network_tool, kube_api, sleeps):
    """Run the CLI against the fake tools and a temporary clusters directory."""
    monkeypatch.setenv("MULTICLUSTER_DEFAULT_INTERFACE", "eth0")

    def fake_orchestrator(settings):
        return ClusterOrchestrator(
            settings,
            cluster_tool=cluster_tool,
            network_tool=network_tool,
            api=kube_api,
            confirm=choose_confirmer(settings.assume_yes, settings.non_interactive),
            console=cli.console,
            sleep=sleeps.append,
            prerequisites=lambda: [],
        )

    monkeypatch.setattr(cli, "create_orchestrator", fake_orchestrator)

    def run(*args):
        return runner.invoke(app, ["--clusters-dir", str(clusters_dir), *args])

    return run


def test_no_arguments_prints_help():
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "init" in result.stdout
    assert "create" in result.stdout


def test_help_command():
    result = runner.invoke(app, ["help"])
    assert result.exit_code == 0
    assert "delete" in result.stdout


def test_unknown_command_prints_usage_and_fails():
    result = runner.invoke(app, ["frobnicate"])
    assert result.exit_code == 1
    assert "Unknown command: frobnicate" in result.stdout
    assert "status" in result.stdout


def test_unknown_command_after_global_options(invoke, clusters_dir):
    result = invoke("--yes", "frobnicate")
    assert result.exit_code == 1
    assert "Unknown command: frobnicate" in result.stdout
    assert "Usage" in result.stdout
    assert not clusters_dir.exists()


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"multicluster version {__version__}" in result.stdout


def test_init_without_arguments_fails(invoke, clusters_dir):
    result = invoke("init")
    assert result.exit_code == 1
    assert "Cluster name is required" in result.stdout
    assert not clusters_dir.exists()


def test_init_without_ip_fails(invoke):
    result = invoke("init", "demo")
    assert result.exit_code == 1
    assert "Cluster IP is required" in result.stdout


def test_init_invalid_ip_fails(invoke):
    result = invoke("init", "demo", "10.0.0.999")
    assert result.exit_code == 1
    assert "Configuration Error" in result.stdout


def test_init_then_status(invoke, clusters_dir):
    result = invoke("init", "demo", "10.0.0.5")
    assert result.exit_code == 0
    assert 'CLUSTER_IP="10.0.0.5"' in (clusters_dir / "demo" / "config" / "cluster.env").read_text()

    result = invoke("status", "demo")
    assert result.exit_code == 0
    assert "Configuration loaded (IP: 10.0.0.5)" in result.stdout
    assert "KIND cluster does not exist" in result.stdout
    assert "Manifests directory exists (1 files)" in result.stdout


def test_init_existing_without_yes_keeps_config(invoke, clusters_dir):
    invoke("init", "demo", "10.0.0.5")

    result = invoke("init", "demo", "10.0.0.9")

    assert result.exit_code == 0
    assert "Keeping existing configuration" in result.stdout
    assert "10.0.0.5" in (clusters_dir / "demo" / "config" / "cluster.env").read_text()


def test_init_existing_with_yes_overwrites(invoke, clusters_dir):
    invoke("init", "demo", "10.0.0.5")

    result = runner.invoke(app, ["--clusters-dir", str(clusters_dir), "--yes", "init", "demo", "10.0.0.9"])

    assert result.exit_code == 0
    assert 'CLUSTER_IP="10.0.0.9"' in (clusters_dir / "demo" / "config" / "cluster.env").read_text()


def test_create_and_list(invoke, kube_api):
    invoke("init", "demo", "10.0.0.5")

    result = invoke("create", "demo")
    assert result.exit_code == 0
    assert "setup complete" in result.stdout
    assert len(kube_api.applied()) == 3

    result = invoke("list")
    assert result.exit_code == 0
    assert "demo" in result.stdout
    assert "10.0.0.5" in result.stdout
    assert "running" in result.stdout


def test_create_without_config_fails(invoke, cluster_tool):
    result = invoke("create", "ghost")
    assert result.exit_code == 1
    assert "Configuration Error" in result.stdout
    assert "create" not in cluster_tool.call_names()


def test_create_failure_exits_1(invoke, cluster_tool):
    invoke("init", "demo", "10.0.0.5")
    cluster_tool.fail_create = True

    result = invoke("create", "demo")

    assert result.exit_code == 1
    assert "Command Failed" in result.stdout


def test_delete_without_config_fails(invoke):
    result = invoke("delete", "ghost")
    assert result.exit_code == 1
    assert "Cluster directory not found" in result.stdout


def test_delete_with_warnings_still_succeeds(invoke, cluster_tool):
    invoke("init", "demo", "10.0.0.5")
    cluster_tool.fail_delete = True

    result = invoke("delete", "demo")

    assert result.exit_code == 0
    assert "finished with warnings" in result.stdout


def test_status_without_clusters_dir(invoke):
    result = invoke("status")
    assert result.exit_code == 0
    assert "Configuration directory not found" in result.stdout


def test_list_with_empty_clusters_dir(invoke, clusters_dir):
    clusters_dir.mkdir()

    result = invoke("list")

    assert result.exit_code == 0
    assert "No cluster configurations found" in result.stdout
    assert "multicluster init" in result.stdout


def test_log_file_receives_debug_records(invoke, tmp_path):
    log_file = tmp_path / "logs" / "multicluster.log"

    result = invoke("--verbose", "--log-file", str(log_file), "version")

    assert result.exit_code == 0
    assert "Logging initialized" in log_file.read_text()


def test_status_without_kind_reports_cluster_absent(invoke, cluster_tool):
    invoke("init", "demo", "10.0.0.5")
    cluster_tool.installed = False

    result = invoke("status", "demo")

    assert result.exit_code == 0
    assert "KIND cluster does not exist (kind is not installed)" in result.stdout
