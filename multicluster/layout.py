"""On-disk layout of cluster directories.

Each cluster lives in ``<clusters_dir>/<name>/``::

    config/cluster.env        CLUSTER_IP, SUBNET, GATEWAY, PARENT_INTERFACE
    config/kind-config.yaml   kind cluster definition
    config/metallb.yaml       MetalLB address pool for the cluster IP
    config/kubeconfig         written after the cluster is created
    manifests/*.yaml|*.yml    applied after MetalLB, in filename order
    README.md
"""

from pathlib import Path

MANIFEST_SUFFIXES = (".yaml", ".yml")


class ClusterLayout:
    """Paths owned by a single cluster directory."""

    def __init__(self, clusters_dir: str | Path, name: str):
        self.clusters_dir = Path(clusters_dir)
        self.name = name
        self.root = self.clusters_dir / name

    def __repr__(self) -> str:
        return f"ClusterLayout({str(self.root)!r})"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def env_file(self) -> Path:
        return self.config_dir / "cluster.env"

    @property
    def kind_config(self) -> Path:
        return self.config_dir / "kind-config.yaml"

    @property
    def metallb_manifest(self) -> Path:
        return self.config_dir / "metallb.yaml"

    @property
    def kubeconfig(self) -> Path:
        return self.config_dir / "kubeconfig"

    @property
    def manifests_dir(self) -> Path:
        return self.root / "manifests"

    @property
    def readme(self) -> Path:
        return self.root / "README.md"

    def exists(self) -> bool:
        return self.root.is_dir()

    def manifest_files(self) -> list[Path]:
        """Return manifest files directly under manifests/, sorted by filename.

        Returns an empty list when the directory does not exist.
        """
        if not self.manifests_dir.is_dir():
            return []
        return sorted(
            (
                path
                for path in self.manifests_dir.iterdir()
                if path.is_file() and path.suffix in MANIFEST_SUFFIXES
            ),
            key=lambda p: p.name,
        )


def discover_clusters(clusters_dir: str | Path) -> list[str]:
    """List cluster names, i.e. subdirectories of the clusters root, sorted.

    Returns an empty list if the root itself is missing.
    """
    root = Path(clusters_dir)
    if not root.is_dir():
        return []
    return sorted(path.name for path in root.iterdir() if path.is_dir())
