"""
Kubernetes connection context for the proxied transport.

Wraps the `kubernetes` client configuration: kubeconfig discovery,
context selection and credentials are all delegated to the library.
Loading is lazy so that callers with an explicit API address never
touch the cluster.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config

from meshgate._core.version import user_agent
from meshgate.errors import TransportConstructionError

logger = logging.getLogger(__name__)


class ClusterContext:
    """
    Lazily-loaded Kubernetes API connection settings.

    Resolution order on first use:
    - kubeconfig (explicit path, else $KUBECONFIG / ~/.kube/config)
    - in-cluster service account config, when no kubeconfig is usable

    Attributes:
        kubeconfig_path: Path to a kubeconfig file, or None for the default
        context: Kubeconfig context name, or None for current-context
    """

    def __init__(
        self,
        kubeconfig_path: Optional[str] = None,
        context: Optional[str] = None,
    ) -> None:
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self._configuration: Optional[k8s_client.Configuration] = None

    @property
    def configuration(self) -> k8s_client.Configuration:
        """
        Loaded client configuration.

        Raises:
            TransportConstructionError: If no usable configuration is found
        """
        if self._configuration is None:
            self._configuration = self._load()
        return self._configuration

    def _load(self) -> k8s_client.Configuration:
        configuration = k8s_client.Configuration()
        try:
            k8s_config.load_kube_config(
                config_file=self.kubeconfig_path,
                context=self.context,
                client_configuration=configuration,
            )
            logger.debug(f"Loaded kubeconfig (context={self.context or 'current'})")
        except Exception as e:
            # Malformed files surface as yaml/KeyError/TypeError, not ConfigException
            if self.kubeconfig_path or self.context:
                raise TransportConstructionError(
                    f"Failed to load kubeconfig: {e}"
                ) from e
            try:
                k8s_config.load_incluster_config(client_configuration=configuration)
                logger.debug("Loaded in-cluster Kubernetes config")
            except Exception as incluster_error:
                raise TransportConstructionError(
                    f"Failed to load Kubernetes config: {e}; "
                    f"in-cluster config unavailable: {incluster_error}"
                ) from incluster_error

        if not configuration.host:
            raise TransportConstructionError("Kubernetes config has no API server host")
        return configuration

    @property
    def host(self) -> str:
        """API server base URL, without trailing slash."""
        return self.configuration.host.rstrip("/")

    def url_for(self, namespace: str, extra_path: str) -> str:
        """
        Build a namespaced API server URL.

        Args:
            namespace: Kubernetes namespace
            extra_path: Path under the namespace, starting with "/"

        Returns:
            URL like "https://host/api/v1/namespaces/<ns><extra_path>"

        Raises:
            TransportConstructionError: If extra_path is not absolute
        """
        if not extra_path.startswith("/"):
            raise TransportConstructionError(
                f"Path must start with a '/': {extra_path}"
            )
        return f"{self.host}/api/v1/namespaces/{namespace}{extra_path}"

    def session(self) -> requests.Session:
        """
        Build a requests session authenticated against the API server.

        Carries the kubeconfig's TLS settings, client certificate and
        bearer token, if any.
        """
        configuration = self.configuration
        session = requests.Session()

        if not configuration.verify_ssl:
            session.verify = False
        elif configuration.ssl_ca_cert:
            session.verify = configuration.ssl_ca_cert

        if configuration.cert_file and configuration.key_file:
            session.cert = (configuration.cert_file, configuration.key_file)

        token = configuration.get_api_key_with_prefix("authorization")
        if token:
            session.headers["Authorization"] = token

        session.headers["User-Agent"] = user_agent()
        return session
