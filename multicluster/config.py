"""Loading per-cluster configuration from cluster.env files.

The files are written as shell assignments (``KEY="value"  # comment``) so
they stay sourceable by hand; they are parsed here with shell quoting rules
instead of being sourced, and the result is returned as a ClusterConfig.
"""

import re
import shlex

from pydantic import ValidationError

from multicluster.exceptions import ConfigNotFoundError, InvalidConfigError
from multicluster.layout import ClusterLayout
from multicluster.logging_config import get_logger
from multicluster.models.cluster import ClusterConfig

logger = get_logger(__name__)

# cluster.env key -> ClusterConfig field
ENV_KEYS = {
    "CLUSTER_IP": "cluster_ip",
    "SUBNET": "subnet",
    "GATEWAY": "gateway",
    "PARENT_INTERFACE": "parent_interface",
}

ASSIGNMENT = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=(.*)$", re.DOTALL)


def parse_env(text: str) -> dict[str, str]:
    """Parse shell-style variable assignments.

    Blank lines, comments and an optional ``export`` prefix are handled;
    anything that is not an assignment is ignored. Later assignments win.

    Raises:
        ValueError: If a line has unbalanced quotes
    """
    values = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            raise ValueError(f"line {lineno}: {e}")
        if tokens and tokens[0] == "export":
            tokens = tokens[1:]
        for token in tokens:
            match = ASSIGNMENT.match(token)
            if match:
                values[match.group(1)] = match.group(2)
    return values


def load_cluster_config(layout: ClusterLayout) -> ClusterConfig:
    """Load and validate the configuration of one cluster.

    Args:
        layout: Layout of the cluster directory

    Returns:
        The validated configuration

    Raises:
        ConfigNotFoundError: If the cluster directory or cluster.env is missing
        InvalidConfigError: If a required key is missing, empty or invalid
    """
    if not layout.exists():
        raise ConfigNotFoundError(
            f"Cluster directory not found: {layout.root}",
            f"Initialize it with: multicluster init {layout.name} <ip>",
        )
    if not layout.env_file.is_file():
        raise ConfigNotFoundError(f"Cluster config not found: {layout.env_file}")

    logger.debug(f"Reading cluster config: {layout.env_file}")
    try:
        values = parse_env(layout.env_file.read_text())
    except ValueError as e:
        raise InvalidConfigError(f"Could not parse {layout.env_file}: {e}")

    missing = [key for key in ENV_KEYS if not values.get(key, "").strip()]
    if missing:
        raise InvalidConfigError(
            f"Missing required configuration in {layout.env_file}: {', '.join(missing)}",
            f"Required: {', '.join(ENV_KEYS)}",
        )

    fields = {field: values[key].strip() for key, field in ENV_KEYS.items()}
    try:
        config = ClusterConfig(name=layout.name, **fields)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors())
        raise InvalidConfigError(f"Invalid configuration in {layout.env_file}", problems)

    logger.info(f"Loaded config for {config.name}: IP={config.cluster_ip}")
    return config
