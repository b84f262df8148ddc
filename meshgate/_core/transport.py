"""
Transport selection: direct or proxied control-plane client.

A non-empty address always selects the direct transport and never looks
at the cluster. An empty address always selects the proxied transport.
There is no fallback from one to the other.
"""

from __future__ import annotations

import logging
from typing import Optional

from meshgate._core.client import ApiClient, DirectClient, ProxiedClient
from meshgate._core.cluster import ClusterContext
from meshgate.errors import TransportConstructionError
from meshgate.types import Facade

logger = logging.getLogger(__name__)


class TransportSelector:
    """
    Builds the ApiClient variant for one acquisition.

    Attributes:
        address: Explicit API address ("" or None for proxied mode)
        cluster: Cluster connection context, used only in proxied mode
        namespace: Control-plane namespace
        facade: API facade to connect to
    """

    def __init__(
        self,
        address: Optional[str] = None,
        cluster: Optional[ClusterContext] = None,
        namespace: str = "linkerd",
        facade: Facade = Facade.PUBLIC,
    ) -> None:
        self.address = address or ""
        self.cluster = cluster
        self.namespace = namespace
        self.facade = facade

    @property
    def is_direct(self) -> bool:
        """True when select() will build a direct client."""
        return bool(self.address)

    def select(self) -> ApiClient:
        """
        Construct the client.

        Returns:
            DirectClient if an address is set, else ProxiedClient

        Raises:
            TransportConstructionError: If the client cannot be constructed
        """
        if self.is_direct:
            logger.info(f"Using direct {self.facade.value} API client at {self.address}")
            return DirectClient(self.address, facade=self.facade)

        if self.cluster is None:
            raise TransportConstructionError(
                "No API address given and no cluster context to proxy through"
            )

        logger.info(
            f"Using {self.facade.value} API client proxied through Kubernetes "
            f"(namespace={self.namespace})"
        )
        return ProxiedClient(self.cluster, self.namespace, facade=self.facade)
