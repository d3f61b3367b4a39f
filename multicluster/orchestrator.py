"""Cluster lifecycle workflows: init, create, delete, status and list.

Steps run strictly in order and stop at the first fatal error. Nothing is
rolled back: a failed create leaves the IP alias and any partially created
cluster in place for inspection, and ``delete`` cleans both up. Alias
add/remove and cluster delete are best effort and only warn.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import ValidationError
from rich.console import Console

from multicluster.config import load_cluster_config
from multicluster.exceptions import InvalidConfigError
from multicluster.layout import ClusterLayout
from multicluster.loadbalancer import LoadBalancerInstaller
from multicluster.logging_config import get_logger
from multicluster.manifests import ManifestApplier
from multicluster.models.cluster import ClusterConfig, ClusterStatus, ClusterSummary
from multicluster.network import NetworkAliaser
from multicluster.prompts import Confirmer, choose_confirmer
from multicluster.provisioner import ClusterProvisioner, ExistingCluster
from multicluster.settings import Settings
from multicluster.status import StatusReporter
from multicluster.templates import render_cluster_files
from multicluster.tools import (
    ClusterTool,
    IpRoute2,
    KindCli,
    KubectlClient,
    KubernetesApi,
    NetworkTool,
    check_prerequisites,
)

logger = get_logger(__name__)


class Outcome(Enum):
    """How a workflow that may short-circuit on a declined prompt ended."""

    DONE = "done"
    KEPT_EXISTING = "kept-existing"


@dataclass
class DeleteReport:
    """Best-effort results of a delete."""

    cluster_deleted: bool
    ip_released: bool


class ClusterOrchestrator:
    """Composes the cluster components into the CLI workflows."""

    def __init__(
        self,
        settings: Settings,
        cluster_tool: ClusterTool,
        network_tool: NetworkTool,
        api: KubernetesApi,
        confirm: Confirmer,
        console: Console | None = None,
        sleep: Callable[[float], None] = time.sleep,
        prerequisites: Callable[[], list[str]] = check_prerequisites,
    ):
        self.settings = settings
        self.confirm = confirm
        self.console = console or Console()
        self.prerequisites = prerequisites

        self.provisioner = ClusterProvisioner(cluster_tool, self.console)
        self.aliaser = NetworkAliaser(network_tool, self.console)
        self.loadbalancer = LoadBalancerInstaller(api, settings, self.console, sleep=sleep)
        self.applier = ManifestApplier(api, self.console)
        self.reporter = StatusReporter(settings.clusters_dir, cluster_tool, api)

    @classmethod
    def from_settings(cls, settings: Settings, console: Console | None = None) -> "ClusterOrchestrator":
        """Build an orchestrator driving the real kind, ip and kubectl tools."""
        return cls(
            settings,
            cluster_tool=KindCli(query_timeout=settings.command_timeout),
            network_tool=IpRoute2(timeout=settings.command_timeout),
            api=KubectlClient(),
            confirm=choose_confirmer(settings.assume_yes, settings.non_interactive),
            console=console,
        )

    def layout(self, name: str) -> ClusterLayout:
        return ClusterLayout(self.settings.clusters_dir, name)

    def init(
        self,
        name: str | None,
        cluster_ip: str | None,
        subnet: str | None = None,
        gateway: str | None = None,
        interface: str | None = None,
    ) -> Outcome:
        """Write a new cluster directory from templates.

        Declining to overwrite an existing directory leaves it untouched.

        Raises:
            InvalidConfigError: If the name or IP is missing or invalid
        """
        if not name:
            raise InvalidConfigError("Cluster name is required", "Usage: multicluster init <name> <ip>")
        if not cluster_ip:
            raise InvalidConfigError("Cluster IP is required", "Usage: multicluster init <name> <ip>")

        try:
            config = ClusterConfig(
                name=name,
                cluster_ip=cluster_ip,
                subnet=subnet or self.settings.default_subnet,
                gateway=gateway or self.settings.default_gateway,
                parent_interface=interface or self.settings.default_interface,
            )
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors())
            raise InvalidConfigError(f"Invalid cluster configuration for '{name}'", problems)

        layout = self.layout(name)
        if layout.exists():
            self.console.print(
                f"[yellow]Warning:[/yellow] Cluster configuration already exists: {layout.root}"
            )
            if not self.confirm(f"Overwrite configuration of '{name}'?"):
                self.console.print("Keeping existing configuration")
                return Outcome.KEPT_EXISTING

        logger.info(f"Initializing cluster configuration: {name}")
        for relative, content in render_cluster_files(config, self.settings.metallb_namespace).items():
            path = layout.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            logger.debug(f"Wrote {path}")
        layout.manifests_dir.mkdir(parents=True, exist_ok=True)

        self.console.print(f"[green]✓[/green] Cluster configuration created: {layout.root}")
        self.console.print("  Edit config/cluster.env and config/kind-config.yaml as needed")
        self.console.print("  Add additional manifests to the manifests/ directory")
        self.console.print(f"  Then run: multicluster create {name}")
        return Outcome.DONE

    def create(self, name: str | None) -> Outcome:
        """Provision a cluster end to end.

        prerequisites -> config -> recreate check -> IP alias -> cluster ->
        MetalLB -> manifests -> access summary.
        """
        if not name:
            raise InvalidConfigError("Cluster name is required", "Usage: multicluster create <name>")

        logger.info(f"Creating cluster: {name}")
        self.prerequisites()
        layout = self.layout(name)
        config = load_cluster_config(layout)
        self.console.print(f"Loaded config for {name}: IP={config.cluster_ip}")

        if self.provisioner.resolve_existing(name, self.confirm) is ExistingCluster.KEPT:
            return Outcome.KEPT_EXISTING

        self.aliaser.add(config)
        self.provisioner.create(config, layout)
        self.loadbalancer.install(config, layout)
        self.applier.apply_all(config, layout)

        logger.info(f"Cluster {name} setup complete")
        self.console.print(f"\n[green]✓ Cluster {name} setup complete![/green]")
        self.print_access_summary(config, layout)
        return Outcome.DONE

    def delete(self, name: str | None) -> DeleteReport:
        """Delete the cluster and release its IP.

        The configuration must load first: without it the IP to release is
        unknown, so nothing is touched.
        """
        if not name:
            raise InvalidConfigError("Cluster name is required", "Usage: multicluster delete <name>")

        config = load_cluster_config(self.layout(name))
        logger.info(f"Deleting cluster: {name}")
        self.console.print(f"Deleting cluster: [cyan]{name}[/cyan]")

        cluster_deleted = self.provisioner.delete(name)
        ip_released = self.aliaser.remove(config)
        return DeleteReport(cluster_deleted=cluster_deleted, ip_released=ip_released)

    def status(self, name: str | None = None) -> list[ClusterStatus]:
        if name:
            return [self.reporter.cluster_status(name)]
        return self.reporter.all_statuses()

    def list_clusters(self) -> list[ClusterSummary]:
        return self.reporter.summaries()

    def print_access_summary(self, config: ClusterConfig, layout: ClusterLayout) -> None:
        context = config.context
        self.console.print(f"\n[bold blue]=== CLUSTER: {config.name} ===[/bold blue]\n")
        self.console.print(f"  Cluster IP:        {config.cluster_ip}")
        self.console.print(f"  Config Directory:  {layout.root}")
        self.console.print(f"  Kubectl Context:   {context}")
        self.console.print("\n[bold]Quick Commands:[/bold]")
        self.console.print(f"  kubectl --context {context} get nodes")
        self.console.print(f"  kubectl --context {context} get pods -A")
        self.console.print(f"  export KUBECONFIG={layout.kubeconfig.resolve()}")
        self.console.print("\n[bold]Access cluster:[/bold]")
        self.console.print(f"  Direct IP:     http://{config.cluster_ip}")
        self.console.print(
            f"  Port forward:  kubectl --context {context} port-forward svc/<service> 8080:80"
        )
