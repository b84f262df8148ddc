"""
meshgate: readiness-gated control-plane clients for CLIs.

Before a command talks to the control plane it must know the cluster is
reachable, the control plane is installed and, for some commands, that
its API answers. This package provides:
- An ordered readiness gate with a retry deadline
- Direct (explicit address) and proxied (through Kubernetes) API clients
- A reporter turning check outcomes into diagnostics and an exit decision
- "Or exit" entry points for interactive CLI use

Installation:
    pip install meshgate

Quickstart (CLI):
    from meshgate import GateOptions, check_public_api_client_or_retry_or_exit

    options = GateOptions.from_env().with_retry_window(30)
    client = check_public_api_client_or_retry_or_exit(
        options, provider, api_checks=True,
    )

Quickstart (library):
    from meshgate import GateOptions, Ready, acquire_client

    result = await acquire_client(GateOptions(api_addr="10.0.0.1:8086"), provider)
    if isinstance(result, Ready):
        response = await result.client.request("Version", b"")
"""

from meshgate.types import (
    CheckCategory,
    CheckOutcome,
    RetryPolicy,
    Facade,
    FailureKind,
    FatalReason,
    Ready,
    Failed,
    AcquireResult,
)
from meshgate.errors import (
    MeshGateError,
    TransportConstructionError,
    ApiRequestError,
    CheckFailure,
    RetryableCheckFailure,
    HardCheckFailure,
    WarningCheckFailure,
    ReporterConfigError,
)
from meshgate._core.client import (
    ApiClient,
    DirectClient,
    ProxiedClient,
)
from meshgate._core.cluster import ClusterContext
from meshgate._core.transport import TransportSelector
from meshgate.report import (
    Reporter,
    DEFAULT_HEADLINES,
    DEFAULT_CHECK_COMMAND,
)
from meshgate.gate import (
    CheckProvider,
    GateOptions,
    ReadinessGate,
    acquire_client,
    acquire_client_sync,
    build_categories,
)
from meshgate.public import (
    exit_on_failure,
    raw_public_api_client,
    raw_viz_api_client,
    check_public_api_client_or_exit,
    check_viz_api_client_or_exit,
    check_public_api_client_or_retry_or_exit,
    check_viz_api_client_or_retry_or_exit,
)
from meshgate._core.version import GATE_VERSION

__version__ = GATE_VERSION

__all__ = [
    # Version
    "__version__",
    "GATE_VERSION",
    # Types
    "CheckCategory",
    "CheckOutcome",
    "RetryPolicy",
    "Facade",
    "FailureKind",
    "FatalReason",
    "Ready",
    "Failed",
    "AcquireResult",
    # Errors
    "MeshGateError",
    "TransportConstructionError",
    "ApiRequestError",
    "CheckFailure",
    "RetryableCheckFailure",
    "HardCheckFailure",
    "WarningCheckFailure",
    "ReporterConfigError",
    # Transport
    "ApiClient",
    "DirectClient",
    "ProxiedClient",
    "ClusterContext",
    "TransportSelector",
    # Reporting
    "Reporter",
    "DEFAULT_HEADLINES",
    "DEFAULT_CHECK_COMMAND",
    # Gate
    "CheckProvider",
    "GateOptions",
    "ReadinessGate",
    "acquire_client",
    "acquire_client_sync",
    "build_categories",
    # CLI entry points
    "exit_on_failure",
    "raw_public_api_client",
    "raw_viz_api_client",
    "check_public_api_client_or_exit",
    "check_viz_api_client_or_exit",
    "check_public_api_client_or_retry_or_exit",
    "check_viz_api_client_or_retry_or_exit",
]
