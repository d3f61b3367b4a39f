"""Applying a cluster's manifests/ folder."""

from pathlib import Path

from rich.console import Console

from multicluster.layout import ClusterLayout
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterConfig
from multicluster.tools import KubernetesApi

logger = get_logger(__name__)


class ManifestApplier:
    """Applies every *.yaml / *.yml under manifests/ in filename order, fail-fast."""

    def __init__(self, api: KubernetesApi, console: Console | None = None):
        self.api = api
        self.console = console or Console()

    def apply_all(self, config: ClusterConfig, layout: ClusterLayout) -> list[Path]:
        """Apply the cluster's manifests against its own context.

        Returns:
            The manifests applied; empty when there is no manifests directory

        Raises:
            ExternalCommandError: On the first manifest that fails to apply
        """
        if not layout.manifests_dir.is_dir():
            logger.info("No manifests directory found, skipping manifest application")
            self.console.print("No manifests directory found, skipping manifest application")
            return []

        manifests = layout.manifest_files()
        self.console.print(f"Applying manifests from: {layout.manifests_dir}")
        for manifest in manifests:
            self.console.print(f"  Applying: {manifest.name}")
            self.api.apply(config.context, str(manifest))

        logger.info(f"Applied {len(manifests)} manifests to {config.context}")
        self.console.print(f"[green]✓[/green] All manifests applied ({len(manifests)})")
        return manifests
