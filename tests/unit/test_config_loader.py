"""Tests for loading cluster.env files."""

import pytest

from multicluster.config import load_cluster_config, parse_env
from multicluster.exceptions import ConfigNotFoundError, InvalidConfigError
from multicluster.layout import ClusterLayout

VALID_ENV = """\
# Cluster Configuration for demo
CLUSTER_IP="10.0.0.5"
SUBNET="192.168.55.0/24"      # Change to your subnet
GATEWAY="192.168.55.1"        # Change to your gateway IP
PARENT_INTERFACE="enp0s31f6"  # Change to your parent interface
"""


def write_env(clusters_dir, name, text):
    layout = ClusterLayout(clusters_dir, name)
    layout.config_dir.mkdir(parents=True)
    layout.env_file.write_text(text)
    return layout


def test_parse_env_handles_quotes_and_comments():
    values = parse_env(VALID_ENV)

    assert values == {
        "CLUSTER_IP": "10.0.0.5",
        "SUBNET": "192.168.55.0/24",
        "GATEWAY": "192.168.55.1",
        "PARENT_INTERFACE": "enp0s31f6",
    }


def test_parse_env_accepts_export_and_single_quotes():
    values = parse_env("export CLUSTER_IP='10.1.1.1'\nGATEWAY=10.1.1.254\n\n# comment only\n")

    assert values["CLUSTER_IP"] == "10.1.1.1"
    assert values["GATEWAY"] == "10.1.1.254"


def test_parse_env_later_assignment_wins():
    assert parse_env("A=1\nA=2\n") == {"A": "2"}


def test_parse_env_rejects_unbalanced_quotes():
    with pytest.raises(ValueError, match="line 1"):
        parse_env('CLUSTER_IP="10.0.0.5\n')


def test_load_valid_config(clusters_dir):
    layout = write_env(clusters_dir, "demo", VALID_ENV)

    config = load_cluster_config(layout)

    assert config.name == "demo"
    assert config.cluster_ip == "10.0.0.5"
    assert config.subnet == "192.168.55.0/24"
    assert config.gateway == "192.168.55.1"
    assert config.parent_interface == "enp0s31f6"
    assert config.context == "kind-demo"
    assert config.alias_address == "10.0.0.5/32"


def test_missing_directory_is_config_not_found(clusters_dir):
    with pytest.raises(ConfigNotFoundError, match="Cluster directory not found"):
        load_cluster_config(ClusterLayout(clusters_dir, "ghost"))


def test_missing_env_file_is_config_not_found(clusters_dir):
    layout = ClusterLayout(clusters_dir, "demo")
    layout.root.mkdir(parents=True)

    with pytest.raises(ConfigNotFoundError, match="cluster.env"):
        load_cluster_config(layout)


@pytest.mark.parametrize("key", ["CLUSTER_IP", "SUBNET", "GATEWAY", "PARENT_INTERFACE"])
def test_each_required_key_is_enforced(clusters_dir, key):
    text = "\n".join(line for line in VALID_ENV.splitlines() if not line.startswith(key))
    layout = write_env(clusters_dir, "demo", text)

    with pytest.raises(InvalidConfigError) as exc_info:
        load_cluster_config(layout)

    assert key in exc_info.value.message


def test_empty_value_is_invalid(clusters_dir):
    layout = write_env(clusters_dir, "demo", VALID_ENV.replace('GATEWAY="192.168.55.1"', 'GATEWAY=""'))

    with pytest.raises(InvalidConfigError, match="GATEWAY"):
        load_cluster_config(layout)


def test_malformed_ip_is_invalid(clusters_dir):
    layout = write_env(clusters_dir, "demo", VALID_ENV.replace("10.0.0.5", "10.0.0.500"))

    with pytest.raises(InvalidConfigError) as exc_info:
        load_cluster_config(layout)

    assert "cluster_ip" in exc_info.value.details


def test_loading_does_not_touch_environment(clusters_dir, monkeypatch):
    monkeypatch.delenv("CLUSTER_IP", raising=False)
    layout = write_env(clusters_dir, "demo", VALID_ENV)

    load_cluster_config(layout)

    import os

    assert "CLUSTER_IP" not in os.environ


def test_loading_does_not_modify_file(clusters_dir):
    layout = write_env(clusters_dir, "demo", VALID_ENV)
    before = layout.env_file.read_bytes()

    load_cluster_config(layout)

    assert layout.env_file.read_bytes() == before
