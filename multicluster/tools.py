"""Adapters for the external tools multicluster drives.

Workflows only talk to the ``ClusterTool``, ``NetworkTool`` and
``KubernetesApi`` protocols; the classes here implement them with kind, the
iproute2 ``ip`` command, kubectl and the Kubernetes Python client.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from multicluster.exceptions import ExternalCommandError, KubernetesError, ToolMissingError
from multicluster.logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_TOOLS = ("docker", "kind")
OPTIONAL_TOOLS = ("kubectl",)

INSTALL_HINTS = {
    "docker": "Install Docker: https://docs.docker.com/engine/install/",
    "kind": "Install KIND: https://kind.sigs.k8s.io/docs/user/quick-start/#installation",
    "kubectl": "Install kubectl: https://kubernetes.io/docs/tasks/tools/",
    "ip": "Install iproute2 (the 'ip' command)",
}


def run_command(
    args: list[str], timeout: float | None = None, description: str | None = None
) -> subprocess.CompletedProcess:
    """Run a command, capturing output, and raise on any failure.

    Args:
        args: Command and arguments
        timeout: Optional timeout in seconds
        description: Human readable name of the step, used in error messages

    Returns:
        The completed process (returncode is always 0)

    Raises:
        ToolMissingError: If the executable is not found
        ExternalCommandError: If the command fails or times out
    """
    description = description or " ".join(args)
    logger.debug(f"Running: {' '.join(args)}")

    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        raise ToolMissingError(args[0], INSTALL_HINTS.get(args[0]))
    except subprocess.TimeoutExpired:
        raise ExternalCommandError(
            f"{description} timed out after {timeout}s", command=args, returncode=None
        )

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.debug(f"Command exited {result.returncode}: {stderr}")
        raise ExternalCommandError(
            f"{description} failed (exit code {result.returncode})",
            stderr or None,
            command=args,
            returncode=result.returncode,
        )
    return result


def check_prerequisites(
    required: tuple[str, ...] = REQUIRED_TOOLS, optional: tuple[str, ...] = OPTIONAL_TOOLS
) -> list[str]:
    """Check external tools are on PATH.

    Returns:
        Names of missing optional tools

    Raises:
        ToolMissingError: For the first missing required tool
    """
    for tool in required:
        if shutil.which(tool) is None:
            logger.error(f"Required tool not found: {tool}")
            raise ToolMissingError(tool, INSTALL_HINTS.get(tool))

    missing = [tool for tool in optional if shutil.which(tool) is None]
    for tool in missing:
        logger.warning(f"{tool} is not installed")
    return missing


class ClusterTool(Protocol):
    """Cluster-in-container provisioning tool."""

    def list_clusters(self) -> list[str]: ...

    def create_cluster(self, config_file: Path) -> None: ...

    def delete_cluster(self, name: str) -> None: ...

    def get_kubeconfig(self, name: str) -> str: ...


class NetworkTool(Protocol):
    """Host networking commands."""

    def interface_exists(self, interface: str) -> bool: ...

    def add_address(self, address: str, interface: str) -> None: ...

    def remove_address(self, address: str, interface: str) -> None: ...


class KubernetesApi(Protocol):
    """Operations against a cluster selected by kubeconfig context."""

    def apply(self, context: str, source: str) -> None: ...

    def wait_for_pods_ready(self, context: str, namespace: str, timeout: int) -> None: ...

    def count_nodes(self, context: str) -> int: ...


class KindCli:
    """ClusterTool backed by the ``kind`` binary."""

    def __init__(self, binary: str = "kind", query_timeout: float | None = 60):
        self.binary = binary
        self.query_timeout = query_timeout

    def list_clusters(self) -> list[str]:
        result = run_command(
            [self.binary, "get", "clusters"],
            timeout=self.query_timeout,
            description="Listing KIND clusters",
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def create_cluster(self, config_file: Path) -> None:
        # No timeout: image pulls on first use can take a long time
        run_command(
            [self.binary, "create", "cluster", "--config", str(config_file)],
            description="KIND cluster creation",
        )

    def delete_cluster(self, name: str) -> None:
        run_command(
            [self.binary, "delete", "cluster", "--name", name],
            description=f"Deleting KIND cluster {name}",
        )

    def get_kubeconfig(self, name: str) -> str:
        result = run_command(
            [self.binary, "get", "kubeconfig", "--name", name],
            timeout=self.query_timeout,
            description=f"Exporting kubeconfig for {name}",
        )
        return result.stdout


class IpRoute2:
    """NetworkTool backed by the iproute2 ``ip`` command."""

    def __init__(self, binary: str = "ip", timeout: float | None = 30):
        self.binary = binary
        self.timeout = timeout

    def interface_exists(self, interface: str) -> bool:
        try:
            run_command([self.binary, "link", "show", interface], timeout=self.timeout)
        except ExternalCommandError:
            return False
        return True

    def add_address(self, address: str, interface: str) -> None:
        run_command(
            [self.binary, "addr", "add", address, "dev", interface],
            timeout=self.timeout,
            description=f"Assigning {address} to {interface}",
        )

    def remove_address(self, address: str, interface: str) -> None:
        run_command(
            [self.binary, "addr", "del", address, "dev", interface],
            timeout=self.timeout,
            description=f"Removing {address} from {interface}",
        )


class KubectlClient:
    """KubernetesApi using kubectl for apply/wait and the Python client for queries."""

    def __init__(self, binary: str = "kubectl", request_timeout: float = 10):
        self.binary = binary
        self.request_timeout = request_timeout

    def apply(self, context: str, source: str) -> None:
        run_command(
            [self.binary, "--context", context, "apply", "-f", str(source)],
            description=f"Applying {source}",
        )

    def wait_for_pods_ready(self, context: str, namespace: str, timeout: int) -> None:
        run_command(
            [
                self.binary,
                "--context",
                context,
                "wait",
                "pod",
                "--all",
                "--for",
                "condition=Ready",
                "--namespace",
                namespace,
                "--timeout",
                f"{timeout}s",
            ],
            # kubectl enforces the wait itself; the margin covers process startup
            timeout=timeout + 30,
            description=f"Waiting for pods in {namespace}",
        )

    def count_nodes(self, context: str) -> int:
        """Count nodes through the API server of the given context.

        Raises:
            KubernetesError: If the context is unknown or the API is unreachable
        """
        from kubernetes import client, config
        from kubernetes.client.rest import ApiException
        from kubernetes.config.config_exception import ConfigException

        try:
            api_client = config.new_client_from_config(context=context)
        except ConfigException as e:
            raise KubernetesError(f"Failed to load kubeconfig context {context}", str(e))

        try:
            with api_client:
                nodes = client.CoreV1Api(api_client).list_node(_request_timeout=self.request_timeout)
        except ApiException as e:
            raise KubernetesError(f"Failed to list nodes in {context}: {e.reason}", str(e.body))
        except Exception as e:
            # urllib3 connection errors surface with several types
            raise KubernetesError(f"Cluster {context} is not reachable", str(e))

        return len(nodes.items)
