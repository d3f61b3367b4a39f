"""KIND cluster lifecycle: existence, recreate decision, create and delete."""

from enum import Enum

from rich.console import Console

from multicluster.exceptions import ExternalCommandError, KindConfigMissingError, ToolMissingError
from multicluster.layout import ClusterLayout
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterConfig
from multicluster.prompts import Confirmer
from multicluster.tools import ClusterTool

logger = get_logger(__name__)


class ExistingCluster(Enum):
    """Outcome of checking for a cluster before creating it."""

    ABSENT = "absent"  # nothing registered, go ahead
    RECREATING = "recreating"  # operator confirmed, old cluster deleted
    KEPT = "kept"  # operator declined, leave it alone and stop


class ClusterProvisioner:
    """Wraps the cluster tool for one workflow run."""

    def __init__(self, tool: ClusterTool, console: Console | None = None):
        self.tool = tool
        self.console = console or Console()

    def exists(self, name: str) -> bool:
        """Check whether the cluster tool currently manages a cluster with this name.

        Raises:
            ExternalCommandError: If the clusters cannot be listed
        """
        return name in self.tool.list_clusters()

    def resolve_existing(self, name: str, confirm: Confirmer) -> ExistingCluster:
        """Decide what to do about an already registered cluster.

        A declined recreate is not an error: the caller stops the create
        workflow successfully and leaves the cluster untouched.
        """
        if not self.exists(name):
            return ExistingCluster.ABSENT

        logger.warning(f"Cluster {name} already exists")
        self.console.print(f"[yellow]Warning:[/yellow] Cluster {name} already exists!")
        if not confirm(f"Recreate cluster '{name}'?"):
            logger.info(f"Keeping existing cluster {name}")
            self.console.print("Keeping existing cluster")
            return ExistingCluster.KEPT

        self.console.print("Deleting existing cluster...")
        self.delete(name)
        return ExistingCluster.RECREATING

    def create(self, config: ClusterConfig, layout: ClusterLayout) -> None:
        """Create the cluster from its kind config and save its kubeconfig.

        Creation is not retried; a half-created cluster needs a human look.

        Raises:
            KindConfigMissingError: If config/kind-config.yaml is missing
            ExternalCommandError: If creation or kubeconfig export fails
        """
        if not layout.kind_config.is_file():
            raise KindConfigMissingError(
                f"KIND config not found: {layout.kind_config}",
                f"Regenerate it with: multicluster init {config.name} {config.cluster_ip}",
            )

        logger.info(f"Creating KIND cluster {config.name} from {layout.kind_config}")
        self.console.print(f"Creating KIND cluster: [cyan]{config.name}[/cyan]")
        self.console.print(f"Using config: {layout.kind_config}")
        self.console.print("This may take a few minutes...")
        self.tool.create_cluster(layout.kind_config)

        kubeconfig = self.tool.get_kubeconfig(config.name)
        layout.config_dir.mkdir(parents=True, exist_ok=True)
        layout.kubeconfig.write_text(kubeconfig)
        layout.kubeconfig.chmod(0o600)
        logger.debug(f"Saved kubeconfig to {layout.kubeconfig}")

        self.console.print(f"[green]✓[/green] Cluster {config.name} created successfully")

    def delete(self, name: str) -> bool:
        """Delete the cluster, tolerating failure.

        Returns:
            True if the tool reported success, False otherwise (warned)
        """
        logger.info(f"Deleting KIND cluster {name}")
        try:
            self.tool.delete_cluster(name)
        except (ExternalCommandError, ToolMissingError) as e:
            logger.warning(f"Failed to delete cluster {name}: {e}")
            self.console.print(f"[yellow]Warning:[/yellow] Failed to delete cluster {name}")
            return False
        self.console.print(f"[green]✓[/green] Cluster {name} deleted")
        return True
