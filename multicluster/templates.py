"""Rendering of the files generated by ``multicluster init``.

YAML documents are built as CommentedMaps and dumped with ruamel.yaml so key
order and block style stay stable between runs.
"""

from io import StringIO

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.scalarstring import DoubleQuotedScalarString, LiteralScalarString

from multicluster.models.cluster import ClusterConfig

KIND_API_VERSION = "kind.x-k8s.io/v1alpha4"
METALLB_API_VERSION = "metallb.io/v1beta1"

SAMPLE_APP_NAME = "test-app"
SAMPLE_APP_IMAGE = "nginx:alpine"

INGRESS_READY_PATCH = """\
kind: InitConfiguration
nodeRegistration:
  kubeletExtraArgs:
    node-labels: "ingress-ready=true"
"""


def _yaml() -> YAML:
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.indent(mapping=2, sequence=2, offset=0)
    return yaml


def _dump(*documents) -> str:
    stream = StringIO()
    if len(documents) == 1:
        _yaml().dump(documents[0], stream)
    else:
        _yaml().dump_all(documents, stream)
    return stream.getvalue()


def _cmap(**items) -> CommentedMap:
    cmap = CommentedMap()
    for key, value in items.items():
        cmap[key] = value
    return cmap


def render_cluster_env(config: ClusterConfig) -> str:
    """Render cluster.env for a configuration."""
    return (
        f"# Cluster Configuration for {config.name}\n"
        f'CLUSTER_IP="{config.cluster_ip}"\n'
        f'SUBNET="{config.subnet}"      # Change to your subnet\n'
        f'GATEWAY="{config.gateway}"        # Change to your gateway IP\n'
        f'PARENT_INTERFACE="{config.parent_interface}"  # Change to your parent interface\n'
    )


def render_kind_config(config: ClusterConfig) -> str:
    """Render a kind cluster with one control plane and two workers.

    HTTP and HTTPS on the control plane are published on the cluster IP only,
    so several clusters can share ports 80/443 on one host.
    """
    port_mappings = CommentedSeq(
        _cmap(
            containerPort=port,
            hostPort=port,
            protocol="TCP",
            listenAddress=DoubleQuotedScalarString(config.cluster_ip),
        )
        for port in (80, 443)
    )
    control_plane = _cmap(
        role="control-plane",
        kubeadmConfigPatches=CommentedSeq([LiteralScalarString(INGRESS_READY_PATCH)]),
        extraPortMappings=port_mappings,
    )
    document = _cmap(
        kind="Cluster",
        apiVersion=KIND_API_VERSION,
        name=DoubleQuotedScalarString(config.name),
        nodes=CommentedSeq([control_plane, _cmap(role="worker"), _cmap(role="worker")]),
    )
    return _dump(document)


def render_metallb_pool(config: ClusterConfig, namespace: str = "metallb-system") -> str:
    """Render an address pool holding exactly the cluster IP, plus its L2 advertisement."""
    pool = _cmap(
        apiVersion=METALLB_API_VERSION,
        kind="IPAddressPool",
        metadata=_cmap(name="default", namespace=namespace),
        spec=_cmap(addresses=CommentedSeq([f"{config.cluster_ip}-{config.cluster_ip}"])),
    )
    advertisement = _cmap(
        apiVersion=METALLB_API_VERSION,
        kind="L2Advertisement",
        metadata=_cmap(name="empty", namespace=namespace),
    )
    return _dump(pool, advertisement)


def render_sample_app() -> str:
    """Render the nginx Deployment and Service dropped into new manifests/ folders."""
    labels = _cmap(app=SAMPLE_APP_NAME)
    deployment = _cmap(
        apiVersion="apps/v1",
        kind="Deployment",
        metadata=_cmap(name=SAMPLE_APP_NAME, namespace="default"),
        spec=_cmap(
            replicas=1,
            selector=_cmap(matchLabels=_cmap(app=SAMPLE_APP_NAME)),
            template=_cmap(
                metadata=_cmap(labels=labels),
                spec=_cmap(
                    containers=CommentedSeq(
                        [
                            _cmap(
                                name="nginx",
                                image=SAMPLE_APP_IMAGE,
                                ports=CommentedSeq([_cmap(containerPort=80)]),
                            )
                        ]
                    )
                ),
            ),
        ),
    )
    service = _cmap(
        apiVersion="v1",
        kind="Service",
        metadata=_cmap(name=SAMPLE_APP_NAME, namespace="default"),
        spec=_cmap(
            selector=_cmap(app=SAMPLE_APP_NAME),
            ports=CommentedSeq([_cmap(port=80, targetPort=80)]),
            type="ClusterIP",
        ),
    )
    return _dump(deployment, service)


def render_readme(config: ClusterConfig, program: str = "multicluster") -> str:
    """Render the per-cluster README."""
    return f"""# Cluster: {config.name}

## Configuration
- **IP Address**: {config.cluster_ip}
- **Parent Interface**: {config.parent_interface}
- **Kubectl Context**: {config.context}

## Files
- `config/cluster.env` - Cluster IP, subnet, gateway and parent interface
- `config/kind-config.yaml` - KIND cluster configuration
- `config/metallb.yaml` - MetalLB address pool for the cluster IP
- `config/kubeconfig` - Written once the cluster has been created
- `manifests/` - Kubernetes manifests to apply (in filename order)

## Usage
```bash
# Create cluster
{program} create {config.name}

# Check status
{program} status {config.name}

# Delete cluster
{program} delete {config.name}
```
"""


def render_cluster_files(config: ClusterConfig, metallb_namespace: str = "metallb-system") -> dict[str, str]:
    """Render every file ``init`` writes, keyed by path relative to the cluster directory."""
    return {
        "config/cluster.env": render_cluster_env(config),
        "config/kind-config.yaml": render_kind_config(config),
        "config/metallb.yaml": render_metallb_pool(config, metallb_namespace),
        f"manifests/{SAMPLE_APP_NAME}.yaml": render_sample_app(),
        "README.md": render_readme(config),
    }
