"""Data models for cluster configuration and state."""

import ipaddress
import re

from pydantic import BaseModel, field_validator

# kind cluster names end up in container and context names
CLUSTER_NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

KIND_CONTEXT_PREFIX = "kind-"

# path separator plus characters special inside double-quoted cluster.env values
INTERFACE_FORBIDDEN = frozenset("/\"\\$`")


def kind_context(name: str) -> str:
    """Return the kubeconfig context kind registers for a cluster name."""
    return f"{KIND_CONTEXT_PREFIX}{name}"


class ClusterConfig(BaseModel):
    """Configuration of one cluster as stored in its cluster.env file."""

    model_config = {"frozen": True}

    name: str
    cluster_ip: str
    subnet: str
    gateway: str
    parent_interface: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the cluster name is usable as a kind cluster name."""
        if not v:
            raise ValueError("cluster name cannot be empty")
        if len(v) > 50:
            raise ValueError("cluster name cannot exceed 50 characters")
        if not CLUSTER_NAME_PATTERN.match(v):
            raise ValueError(
                f"cluster name '{v}' must contain only lowercase alphanumeric characters "
                "and hyphens, and cannot start or end with a hyphen"
            )
        return v

    @field_validator("cluster_ip")
    @classmethod
    def validate_cluster_ip(cls, v: str) -> str:
        """Validate the cluster IP is a single IPv4 address, bound as a /32."""
        if not v:
            raise ValueError("value cannot be empty")
        try:
            ipaddress.IPv4Address(v)
        except ValueError:
            raise ValueError(f"'{v}' is not a valid IPv4 address")
        return v

    @field_validator("gateway")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate the value is a single IP address."""
        if not v:
            raise ValueError("value cannot be empty")
        try:
            ipaddress.ip_address(v)
        except ValueError:
            raise ValueError(f"'{v}' is not a valid IP address")
        return v

    @field_validator("subnet")
    @classmethod
    def validate_subnet(cls, v: str) -> str:
        """Validate subnet is a network in CIDR notation."""
        if not v:
            raise ValueError("subnet cannot be empty")
        try:
            ipaddress.ip_network(v, strict=False)
        except ValueError:
            raise ValueError(f"subnet '{v}' must be a valid CIDR (e.g., 192.168.55.0/24)")
        return v

    @field_validator("parent_interface")
    @classmethod
    def validate_interface(cls, v: str) -> str:
        """Validate parent_interface is a plausible interface name."""
        if not v:
            raise ValueError("parent_interface cannot be empty")
        if any(c.isspace() or c in INTERFACE_FORBIDDEN for c in v):
            raise ValueError(f"parent_interface '{v}' is not a valid interface name")
        return v

    @property
    def context(self) -> str:
        """kubectl context of the cluster."""
        return kind_context(self.name)

    @property
    def alias_address(self) -> str:
        """Host-route form of the cluster IP bound to the parent interface."""
        return f"{self.cluster_ip}/32"


class ClusterStatus(BaseModel):
    """Read-only report of one cluster's configuration and runtime state.

    ``registered`` and ``reachable`` are None when the check could not be run
    (kind missing, or the cluster is not registered).
    """

    name: str
    directory_present: bool
    config_loaded: bool = False
    cluster_ip: str | None = None
    config_error: str | None = None
    registered: bool | None = None
    registration_error: str | None = None
    reachable: bool | None = None
    node_count: int | None = None
    manifests_dir_present: bool = False
    manifest_count: int = 0


class ClusterSummary(BaseModel):
    """One line of the cluster listing."""

    name: str
    cluster_ip: str | None = None
    running: bool = False

    @property
    def display_ip(self) -> str:
        return self.cluster_ip or "unknown"
