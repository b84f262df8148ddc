"""
CLI entry points: acquire a control-plane client or exit.

These functions are the interactive counterpart of meshgate.gate. They run
the readiness checks, let the Reporter print diagnostics to stderr, and
terminate the process with exit code 1 on any fatal outcome.

Usage:
    from meshgate import GateOptions, check_public_api_client_or_exit

    client = check_public_api_client_or_exit(GateOptions.from_env(), provider)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from meshgate._core.client import ApiClient
from meshgate.gate import CheckProvider, GateOptions, acquire_client_sync
from meshgate.report import Reporter
from meshgate.types import AcquireResult, Facade, Failed

logger = logging.getLogger(__name__)


def exit_on_failure(result: AcquireResult) -> ApiClient:
    """
    Return the client from a successful result, else exit with code 1.

    The diagnostic for a Failed result has already been printed by the
    reporter.
    """
    if isinstance(result, Failed):
        logger.debug(f"Client acquisition failed: {result.reason}")
        sys.exit(1)
    return result.client


# =============================================================================
# Raw clients (no validation)
# =============================================================================


def raw_public_api_client(options: GateOptions) -> ApiClient:
    """
    Create a public API client without running any checks.

    Raises:
        TransportConstructionError: If the client cannot be constructed
    """
    return options.transport_selector(Facade.PUBLIC).select()


def raw_viz_api_client(options: GateOptions) -> ApiClient:
    """
    Create a viz API client without running any checks.

    Raises:
        TransportConstructionError: If the client cannot be constructed
    """
    return options.transport_selector(Facade.VIZ).select()


# =============================================================================
# Validated clients
# =============================================================================


def check_public_api_client_or_exit(
    options: GateOptions,
    provider: CheckProvider,
    reporter: Optional[Reporter] = None,
) -> ApiClient:
    """
    Build a public API client after the default checks, or exit.

    Retries are disabled: the first retryable failure is fatal.
    """
    return check_public_api_client_or_retry_or_exit(
        options.without_retries(), provider, api_checks=False, reporter=reporter
    )


def check_viz_api_client_or_exit(
    options: GateOptions,
    provider: CheckProvider,
    reporter: Optional[Reporter] = None,
) -> ApiClient:
    """
    Build a viz API client after the default checks, or exit.

    Retries are disabled: the first retryable failure is fatal.
    """
    return check_viz_api_client_or_retry_or_exit(
        options.without_retries(), provider, api_checks=False, reporter=reporter
    )


def check_public_api_client_or_retry_or_exit(
    options: GateOptions,
    provider: CheckProvider,
    api_checks: bool = False,
    reporter: Optional[Reporter] = None,
) -> ApiClient:
    """
    Build a public API client after the checks, retrying until the deadline.

    If options.retry_deadline is set, retryable failures print a waiting
    notice to stderr and the category is re-run until the deadline passes.

    Args:
        options: Gate options
        provider: Check provider
        api_checks: Also require the control-plane API to answer
        reporter: Outcome reporter (default: stderr)
    """
    result = acquire_client_sync(options, provider, Facade.PUBLIC, api_checks, reporter)
    return exit_on_failure(result)


def check_viz_api_client_or_retry_or_exit(
    options: GateOptions,
    provider: CheckProvider,
    api_checks: bool = False,
    reporter: Optional[Reporter] = None,
) -> ApiClient:
    """
    Build a viz API client after the checks, retrying until the deadline.

    See check_public_api_client_or_retry_or_exit.
    """
    result = acquire_client_sync(options, provider, Facade.VIZ, api_checks, reporter)
    return exit_on_failure(result)
