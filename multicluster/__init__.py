"""Local multi-cluster kind environments with aliased host IPs and MetalLB."""

__version__ = "0.1.0"
