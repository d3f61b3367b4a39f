"""Binding cluster IPs to the host's parent interface."""

from rich.console import Console

from multicluster.exceptions import (
    ExternalCommandError,
    InterfaceNotFoundError,
    ToolMissingError,
)
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterConfig
from multicluster.tools import NetworkTool

logger = get_logger(__name__)


class NetworkAliaser:
    """Adds and removes the secondary ``<ip>/32`` address of a cluster.

    Both directions are best effort: the address may already be bound (a
    repeated create) or already gone (after a host reboot).
    """

    def __init__(self, tool: NetworkTool, console: Console | None = None):
        self.tool = tool
        self.console = console or Console()

    def add(self, config: ClusterConfig) -> bool:
        """Bind the cluster IP to its parent interface.

        Returns:
            True if the address was added, False if adding failed (warned)

        Raises:
            InterfaceNotFoundError: If the parent interface does not exist
        """
        interface = config.parent_interface
        self.console.print(f"Assigning additional IP: {config.cluster_ip} to interface {interface}")

        if not self.tool.interface_exists(interface):
            logger.error(f"Network interface {interface} does not exist")
            raise InterfaceNotFoundError(
                f"Network interface {interface} does not exist",
                "Set PARENT_INTERFACE in the cluster's config/cluster.env (see 'ip link show')",
            )

        try:
            self.tool.add_address(config.alias_address, interface)
        except ExternalCommandError as e:
            logger.warning(f"Failed to assign IP {config.cluster_ip} to interface {interface}: {e}")
            self.console.print(
                f"[yellow]Warning:[/yellow] Failed to assign IP {config.cluster_ip} "
                f"to interface {interface} (it may already be assigned)"
            )
            return False

        logger.info(f"Assigned IP {config.cluster_ip} to {interface}")
        self.console.print(f"[green]✓[/green] Assigned IP: {config.cluster_ip}")
        return True

    def remove(self, config: ClusterConfig) -> bool:
        """Release the cluster IP from its parent interface.

        Returns:
            True if the address was removed, False if removal failed (warned)
        """
        interface = config.parent_interface
        self.console.print(f"Removing IP {config.cluster_ip} from interface {interface}")

        try:
            self.tool.remove_address(config.alias_address, interface)
        except (ExternalCommandError, ToolMissingError) as e:
            logger.warning(f"Failed to remove IP {config.cluster_ip} from interface {interface}: {e}")
            self.console.print(
                f"[yellow]Warning:[/yellow] Failed to remove IP {config.cluster_ip} "
                f"from interface {interface}"
            )
            return False

        logger.info(f"Removed IP {config.cluster_ip} from {interface}")
        return True
