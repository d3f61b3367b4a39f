"""Pytest configuration and shared fixtures."""

import io
import os
from pathlib import Path

import pytest
from hypothesis import Verbosity, settings
from rich.console import Console

from multicluster.exceptions import ExternalCommandError, KubernetesError, ToolMissingError
from multicluster.orchestrator import ClusterOrchestrator
from multicluster.prompts import FixedAnswer
from multicluster.settings import Settings

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class FakeClusterTool:
    """In-memory kind."""

    def __init__(
        self, clusters=(), fail_create=False, fail_delete=False, fail_list=False, installed=True
    ):
        self.installed = installed
        self.clusters = set(clusters)
        self.fail_create = fail_create
        self.fail_delete = fail_delete
        self.fail_list = fail_list
        self.calls = []

    def list_clusters(self):
        self.calls.append(("list",))
        if not self.installed:
            raise ToolMissingError("kind")
        if self.fail_list:
            raise ExternalCommandError("Listing KIND clusters failed (exit code 1)")
        return sorted(self.clusters)

    def create_cluster(self, config_file):
        self.calls.append(("create", Path(config_file)))
        if self.fail_create:
            raise ExternalCommandError("KIND cluster creation failed (exit code 1)", "boom")
        # kind reads the name from the config file; the directory name matches it
        self.clusters.add(Path(config_file).parent.parent.name)

    def delete_cluster(self, name):
        self.calls.append(("delete", name))
        if self.fail_delete:
            raise ExternalCommandError(f"Deleting KIND cluster {name} failed (exit code 1)")
        self.clusters.discard(name)

    def get_kubeconfig(self, name):
        self.calls.append(("kubeconfig", name))
        return f"apiVersion: v1\nkind: Config\ncurrent-context: kind-{name}\n"

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeNetworkTool:
    """In-memory host interfaces and addresses."""

    def __init__(self, interfaces=("eth0",), fail_add=False, fail_remove=False):
        self.interfaces = set(interfaces)
        self.addresses = set()
        self.fail_add = fail_add
        self.fail_remove = fail_remove
        self.calls = []

    def interface_exists(self, interface):
        self.calls.append(("exists", interface))
        return interface in self.interfaces

    def add_address(self, address, interface):
        self.calls.append(("add", address, interface))
        if self.fail_add or (address, interface) in self.addresses:
            raise ExternalCommandError("RTNETLINK answers: File exists")
        self.addresses.add((address, interface))

    def remove_address(self, address, interface):
        self.calls.append(("remove", address, interface))
        if self.fail_remove or (address, interface) not in self.addresses:
            raise ExternalCommandError("RTNETLINK answers: Cannot assign requested address")
        self.addresses.discard((address, interface))


class FakeKubernetesApi:
    """Records kubectl-style calls; failures are scripted per source."""

    def __init__(self, nodes=None, fail_wait=False):
        self.nodes = dict(nodes or {})
        self.fail_wait = fail_wait
        self.failures = {}
        self.calls = []

    def fail_next(self, source, times=1):
        self.failures[str(source)] = times

    def apply(self, context, source):
        self.calls.append(("apply", context, str(source)))
        remaining = self.failures.get(str(source), 0)
        if remaining:
            self.failures[str(source)] = remaining - 1
            raise ExternalCommandError(f"Applying {source} failed (exit code 1)")

    def wait_for_pods_ready(self, context, namespace, timeout):
        self.calls.append(("wait", context, namespace, timeout))
        if self.fail_wait:
            raise ExternalCommandError(f"Waiting for pods in {namespace} timed out after {timeout}s")

    def count_nodes(self, context):
        self.calls.append(("nodes", context))
        if context not in self.nodes:
            raise KubernetesError(f"Cluster {context} is not reachable")
        return self.nodes[context]

    def applied(self):
        return [call[2] for call in self.calls if call[0] == "apply"]


@pytest.fixture
def clusters_dir(tmp_path):
    return tmp_path / "clusters"


@pytest.fixture
def test_settings(clusters_dir):
    return Settings(
        clusters_dir=clusters_dir,
        metallb_settle_seconds=0,
        pool_retry_backoff_seconds=15,
        default_interface="eth0",
    )


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def cluster_tool():
    return FakeClusterTool()


@pytest.fixture
def network_tool():
    return FakeNetworkTool()


@pytest.fixture
def kube_api():
    return FakeKubernetesApi()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_orchestrator(test_settings, cluster_tool, network_tool, kube_api, quiet_console, sleeps):
    """Factory for an orchestrator wired to the fakes; answers 'no' by default."""

    def factory(answer=False, prerequisites=None):
        return ClusterOrchestrator(
            test_settings,
            cluster_tool=cluster_tool,
            network_tool=network_tool,
            api=kube_api,
            confirm=FixedAnswer(answer),
            console=quiet_console,
            sleep=sleeps.append,
            prerequisites=prerequisites or (lambda: []),
        )

    return factory


@pytest.fixture
def orchestrator(make_orchestrator):
    return make_orchestrator()
