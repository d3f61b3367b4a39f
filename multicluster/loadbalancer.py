"""MetalLB installation on a freshly created cluster."""

import time
from collections.abc import Callable

from rich.console import Console
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from multicluster.exceptions import ExternalCommandError
from multicluster.layout import ClusterLayout
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterConfig
from multicluster.settings import Settings
from multicluster.tools import KubernetesApi

logger = get_logger(__name__)

# one retry only, for the controller's validating webhook coming up late
POOL_APPLY_ATTEMPTS = 2


class LoadBalancerInstaller:
    """Installs the MetalLB controller and the cluster's address pool."""

    def __init__(
        self,
        api: KubernetesApi,
        settings: Settings,
        console: Console | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api = api
        self.settings = settings
        self.console = console or Console()
        self.sleep = sleep

    def install(self, config: ClusterConfig, layout: ClusterLayout) -> None:
        """Apply the controller, wait for it, then apply the address pool.

        Raises:
            ExternalCommandError: If the controller apply fails, the pods are not
                Ready within the timeout, or the pool apply fails twice
        """
        context = config.context
        namespace = self.settings.metallb_namespace

        logger.info(f"Installing MetalLB from {self.settings.metallb_manifest_url} into {context}")
        self.api.apply(context, self.settings.metallb_manifest_url)

        self.console.print(f"Waiting for MetalLB pods in {namespace} to become ready...")
        self.api.wait_for_pods_ready(context, namespace, self.settings.metallb_ready_timeout)
        self.sleep(self.settings.metallb_settle_seconds)

        self.apply_pool(context, str(layout.metallb_manifest))
        logger.info(f"MetalLB applied to cluster {config.name}")
        self.console.print(f"[green]✓[/green] MetalLB applied to cluster {config.name}")

    def apply_pool(self, context: str, manifest: str) -> None:
        """Apply the address pool manifest, retrying exactly once after a fixed backoff."""
        for attempt in Retrying(
            stop=stop_after_attempt(POOL_APPLY_ATTEMPTS),
            wait=wait_fixed(self.settings.pool_retry_backoff_seconds),
            retry=retry_if_exception_type(ExternalCommandError),
            before_sleep=self._log_retry,
            sleep=self.sleep,
            reraise=True,
        ):
            with attempt:
                self.api.apply(context, manifest)

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            f"Address pool apply failed ({retry_state.outcome.exception()}), "
            f"retrying in {self.settings.pool_retry_backoff_seconds}s"
        )
        self.console.print(
            "[yellow]Warning:[/yellow] Address pool apply failed, "
            f"retrying in {self.settings.pool_retry_backoff_seconds}s"
        )
