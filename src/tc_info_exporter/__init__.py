"""Tencent Cloud inventory exporter for Prometheus."""

__version__ = "0.1.0"

# Prefix for every metric this exporter emits
NAMESPACE = "tc_info"
