"""
Control-plane API clients.

Two transports implement the same ApiClient contract and speak the same
protocol (protobuf payloads POSTed to `api/v1/<method>`):
- Direct: HTTP to an explicit address (e.g. "10.0.0.1:8086")
- Proxied: HTTP through the Kubernetes API server service proxy

Payloads are opaque bytes in both directions; marshaling belongs to the
caller.

Usage:
    async with client:
        raw = await client.request("Version", request.SerializeToString())
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

import requests

from meshgate._core.version import user_agent
from meshgate.errors import ApiRequestError, TransportConstructionError
from meshgate.types import Facade

if TYPE_CHECKING:
    from meshgate._core.cluster import ClusterContext

logger = logging.getLogger(__name__)

# API path under the client's base URL
API_PREFIX = "api/v1/"

DEFAULT_REQUEST_TIMEOUT = 30.0


class ApiClient(ABC):
    """
    Capability contract shared by direct and proxied clients.

    Subclasses supply the base URL and the session; requests and close
    are shared.

    Attributes:
        facade: Control-plane API facade this client talks to
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session,
        facade: Facade,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.facade = facade
        self.timeout = timeout
        self._base_url = base_url
        self._session: Optional[requests.Session] = session

    @property
    def base_url(self) -> str:
        """URL the API paths are appended to."""
        return self._base_url

    @property
    def address(self) -> str:
        """Address the client is bound to."""
        return self._base_url

    @property
    @abstractmethod
    def is_direct(self) -> bool:
        """True for the direct transport."""

    def _post(self, method: str, payload: bytes) -> bytes:
        if self._session is None:
            raise ApiRequestError(f"{type(self).__name__} is closed")

        url = f"{self._base_url}{API_PREFIX}{method}"
        try:
            response = self._session.post(
                url,
                data=payload,
                headers={"Content-Type": "application/octet-stream"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ApiRequestError(f"{method} failed: {e}") from e

        if response.status_code != 200:
            raise ApiRequestError(
                f"Unexpected API response: {response.status_code} {response.reason}",
                status=response.status_code,
            )
        return response.content

    async def request(self, method: str, payload: bytes) -> bytes:
        """
        Issue one request against the control-plane API.

        Args:
            method: API method name, e.g. "Version"
            payload: Serialized request message

        Returns:
            Serialized response message

        Raises:
            ApiRequestError: If the request fails
        """
        # Run blocking HTTP in thread pool
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._post, method, payload)

    async def close(self) -> None:
        """Release transport resources. Safe to call multiple times."""
        if self._session is not None:
            self._session.close()
            self._session = None
            logger.debug(f"{type(self).__name__} closed")

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(facade={self.facade.value!r}, address={self.address!r})"


def direct_base_url(address: str) -> str:
    """
    Base URL for an explicit API address.

    Any non-blank address is accepted as-is; a scheme is added when
    missing.

    Raises:
        TransportConstructionError: If the address is blank
    """
    address = address.strip()
    if not address:
        raise TransportConstructionError("API address is empty")
    if "://" not in address:
        address = f"http://{address}"
    return address.rstrip("/") + "/"


class DirectClient(ApiClient):
    """HTTP client bound to an explicit address."""

    def __init__(
        self,
        address: str,
        facade: Facade = Facade.PUBLIC,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        session = requests.Session()
        session.headers["User-Agent"] = user_agent()
        super().__init__(direct_base_url(address), session, facade, timeout)
        self._address = address.strip()

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_direct(self) -> bool:
        return True


class ProxiedClient(ApiClient):
    """
    HTTP client tunneled through the Kubernetes API server service proxy.

    Requests are POSTed to
    {host}/api/v1/namespaces/{ns}/services/{service}:{port}/proxy/api/v1/{method}
    """

    def __init__(
        self,
        cluster: "ClusterContext",
        namespace: str,
        facade: Facade = Facade.PUBLIC,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        base_url = cluster.url_for(
            namespace,
            f"/services/{facade.service_name}:{facade.port_name}/proxy/",
        )
        super().__init__(base_url, cluster.session(), facade, timeout)
        self.namespace = namespace

    @property
    def is_direct(self) -> bool:
        return False
