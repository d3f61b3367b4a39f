"""Read-only status of configured clusters."""

from pathlib import Path

from multicluster.config import load_cluster_config
from multicluster.exceptions import KubernetesError, MultiClusterError, ToolMissingError
from multicluster.layout import ClusterLayout, discover_clusters
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterStatus, ClusterSummary, kind_context
from multicluster.tools import ClusterTool, KubernetesApi

logger = get_logger(__name__)


class StatusReporter:
    """Inspects cluster directories and the live clusters behind them.

    Nothing is cached: every report re-queries kind and the API server, and
    each check tolerates whatever the previous one could not find.
    """

    def __init__(self, clusters_dir: str | Path, cluster_tool: ClusterTool, api: KubernetesApi):
        self.clusters_dir = Path(clusters_dir)
        self.cluster_tool = cluster_tool
        self.api = api

    def _registered(self, name: str) -> tuple[bool | None, str | None]:
        try:
            return name in self.cluster_tool.list_clusters(), None
        except ToolMissingError as e:
            # without kind no cluster can be running
            logger.debug(f"Could not list clusters: {e}")
            return False, e.message
        except MultiClusterError as e:
            logger.debug(f"Could not list clusters: {e}")
            return None, e.message

    def cluster_status(self, name: str) -> ClusterStatus:
        """Report on one cluster."""
        layout = ClusterLayout(self.clusters_dir, name)
        if not layout.exists():
            return ClusterStatus(name=name, directory_present=False)

        status = ClusterStatus(name=name, directory_present=True)

        try:
            config = load_cluster_config(layout)
            status.config_loaded = True
            status.cluster_ip = config.cluster_ip
        except MultiClusterError as e:
            status.config_error = e.message

        status.registered, status.registration_error = self._registered(name)
        if status.registered:
            try:
                status.node_count = self.api.count_nodes(kind_context(name))
                status.reachable = True
            except KubernetesError as e:
                logger.debug(f"Cluster {name} not reachable: {e}")
                status.reachable = False

        status.manifests_dir_present = layout.manifests_dir.is_dir()
        status.manifest_count = len(layout.manifest_files())
        return status

    def all_statuses(self) -> list[ClusterStatus]:
        """Report on every cluster directory, independently of each other."""
        return [self.cluster_status(name) for name in discover_clusters(self.clusters_dir)]

    def summaries(self) -> list[ClusterSummary]:
        """One summary per cluster directory, never failing on a single cluster.

        kind is listed once per call; a cluster only shows as running when its
        configuration also loads.
        """
        names = discover_clusters(self.clusters_dir)
        if not names:
            return []

        try:
            running = set(self.cluster_tool.list_clusters())
        except MultiClusterError as e:
            logger.warning(f"Could not list KIND clusters: {e.message}")
            running = set()

        summaries = []
        for name in names:
            summary = ClusterSummary(name=name)
            try:
                config = load_cluster_config(ClusterLayout(self.clusters_dir, name))
            except MultiClusterError as e:
                logger.debug(f"Skipping state of {name}: {e.message}")
            else:
                summary.cluster_ip = config.cluster_ip
                summary.running = name in running
            summaries.append(summary)
        return summaries
