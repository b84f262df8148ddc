"""
Transport layer for meshgate.

This module handles:
- Direct (explicit address) and proxied (Kubernetes service proxy) API clients
- Kubernetes connection context
- Transport selection
"""

from meshgate._core.version import GATE_VERSION, user_agent
from meshgate._core.client import ApiClient, DirectClient, ProxiedClient
from meshgate._core.cluster import ClusterContext
from meshgate._core.transport import TransportSelector

__all__ = [
    # Version
    "GATE_VERSION",
    "user_agent",
    # Clients
    "ApiClient",
    "DirectClient",
    "ProxiedClient",
    # Cluster
    "ClusterContext",
    # Transport
    "TransportSelector",
]
