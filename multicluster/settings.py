"""Process-wide settings, overridable through MULTICLUSTER_* environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_METALLB_VERSION = "v0.13.7"
DEFAULT_METALLB_MANIFEST_URL = (
    "https://raw.githubusercontent.com/metallb/metallb/"
    f"{DEFAULT_METALLB_VERSION}/config/manifests/metallb-native.yaml"
)


class Settings(BaseSettings):
    """Tunables for cluster layout, prompts and the MetalLB install.

    Attributes:
        clusters_dir: Root directory holding one subdirectory per cluster.
        assume_yes: Answer yes to destructive confirmations.
        non_interactive: Never prompt; take the non-destructive answer.
        metallb_manifest_url: Controller manifest applied to every new cluster.
        metallb_namespace: Namespace whose pods must become Ready.
        metallb_ready_timeout: Seconds to wait for the controller pods.
        metallb_settle_seconds: Pause between readiness and the pool apply.
        pool_retry_backoff_seconds: Wait before the single pool apply retry.
        default_subnet: Subnet written into new cluster.env files.
        default_gateway: Gateway written into new cluster.env files.
        default_interface: Parent interface written into new cluster.env files.
        command_timeout: Timeout in seconds for short read-only tool queries.
    """

    model_config = SettingsConfigDict(env_prefix="MULTICLUSTER_", extra="ignore")

    clusters_dir: Path = Path("clusters")
    assume_yes: bool = False
    non_interactive: bool = False

    metallb_manifest_url: str = DEFAULT_METALLB_MANIFEST_URL
    metallb_namespace: str = "metallb-system"
    metallb_ready_timeout: int = Field(default=600, ge=1)
    metallb_settle_seconds: float = Field(default=5, ge=0)
    pool_retry_backoff_seconds: float = Field(default=15, ge=0)

    default_subnet: str = "192.168.55.0/24"
    default_gateway: str = "192.168.55.1"
    default_interface: str = "enp0s31f6"

    command_timeout: int = Field(default=60, ge=1)
