"""
Exception types for meshgate.

Provides typed exceptions for:
- Transport construction (direct or proxied client)
- Check failures, classified by how the gate reacts to them
- Control-plane request failures
- Reporter misconfiguration
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from meshgate.types import CheckCategory


class MeshGateError(Exception):
    """Base exception for all meshgate errors."""
    pass


# =============================================================================
# Transport Errors
# =============================================================================


class TransportConstructionError(MeshGateError, ConnectionError):
    """
    Raised when neither client variant can be constructed.

    This includes:
    - Malformed explicit API addresses
    - Missing or unreadable kubeconfig
    - Kubernetes contexts without a usable API server host

    Always fatal and never retried.
    """
    pass


class ApiRequestError(MeshGateError):
    """
    Raised when a request against the control-plane API fails.

    Attributes:
        status: HTTP status code, if a response was received
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


# =============================================================================
# Check Failures
# =============================================================================


class CheckFailure(MeshGateError):
    """
    Base class for failures raised by check providers.

    A provider may raise (or wrap) one of the subclasses below and turn it
    into a CheckOutcome with CheckOutcome.from_error(); the subclass decides
    whether the gate retries, warns, or stops.

    Example:
        try:
            await ping_controller()
        except requests.exceptions.ConnectionError as e:
            yield CheckOutcome.from_error(
                CheckCategory.CONTROL_PLANE_API,
                RetryableCheckFailure(f"controller not ready: {e}"),
            )
    """

    def __init__(self, message: str, category: Optional["CheckCategory"] = None):
        self.category = category
        super().__init__(message)


class RetryableCheckFailure(CheckFailure):
    """A failure expected to self-resolve, e.g. control plane still starting."""
    pass


class HardCheckFailure(CheckFailure):
    """A failure that will not self-resolve, e.g. missing installation."""
    pass


class WarningCheckFailure(CheckFailure):
    """A non-blocking issue. Reported, never fatal, never retried."""
    pass


# =============================================================================
# Reporting Errors
# =============================================================================


class ReporterConfigError(MeshGateError):
    """
    Raised when a Reporter is built with an incomplete headline mapping.

    Every CheckCategory the gate can produce must map to a headline.
    """
    pass
