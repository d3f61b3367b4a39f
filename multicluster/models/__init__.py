"""Data models for cluster configuration and state."""

from multicluster.models.cluster import (
    ClusterConfig,
    ClusterStatus,
    ClusterSummary,
    kind_context,
)

__all__ = [
    "ClusterConfig",
    "ClusterStatus",
    "ClusterSummary",
    "kind_context",
]
