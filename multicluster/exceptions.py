"""Custom exceptions for multicluster."""


class MultiClusterError(Exception):
    """Base exception for all multicluster errors."""

    label = "Error"

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class ConfigNotFoundError(MultiClusterError):
    """Raised when a cluster directory or its cluster.env file is missing."""

    label = "Configuration Error"


class InvalidConfigError(MultiClusterError):
    """Raised when cluster configuration is missing keys or has bad values."""

    label = "Configuration Error"


class InterfaceNotFoundError(MultiClusterError):
    """Raised when the parent network interface does not exist on the host."""

    label = "Network Error"


class KindConfigMissingError(MultiClusterError):
    """Raised when a cluster has no kind-config.yaml to create from."""

    label = "Configuration Error"


class ToolMissingError(MultiClusterError):
    """Raised when a required external tool is not on PATH."""

    label = "Prerequisite Error"

    def __init__(self, tool: str, details: str = None):
        self.tool = tool
        super().__init__(f"{tool} is not installed", details)


class ExternalCommandError(MultiClusterError):
    """Raised when an external command exits non-zero or cannot be run."""

    label = "Command Failed"

    def __init__(
        self,
        message: str,
        details: str = None,
        command: list[str] | None = None,
        returncode: int | None = None,
    ):
        self.command = command or []
        self.returncode = returncode
        super().__init__(message, details)


class KubernetesError(MultiClusterError):
    """Exception raised for Kubernetes API errors."""

    label = "Kubernetes Error"
