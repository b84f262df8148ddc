"""
Readiness gate: ordered checks, retry deadline, then a client.

The gate runs check categories strictly in dependency order, reports
every outcome through a callback, waits out retryable failures until the
retry deadline, and only after every category passed builds the client
through the transport selector. It never exits the process; failures are
returned as a Failed result (see meshgate.public for the exiting entry
points).

Usage:
    options = GateOptions.from_env().with_retry_window(30)
    result = await acquire_client(options, provider, api_checks=True)

    match result:
        case Ready(client=client):
            ...
        case Failed(reason=reason):
            print(f"not ready: {reason}")
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import dataclasses
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Coroutine,
    Iterable,
    List,
    Optional,
    Protocol,
    TypeVar,
)

from meshgate._core.cluster import ClusterContext
from meshgate._core.transport import TransportSelector
from meshgate.errors import TransportConstructionError
from meshgate.report import DEFAULT_CHECK_COMMAND, Reporter
from meshgate.types import (
    AcquireResult,
    CheckCategory,
    CheckOutcome,
    Facade,
    Failed,
    FailureKind,
    FatalReason,
    Ready,
    RetryPolicy,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

OutcomeCallback = Callable[[CheckOutcome], Optional[bool]]

BASELINE_CATEGORIES = (
    CheckCategory.KUBERNETES_API,
    CheckCategory.CONTROL_PLANE_EXISTENCE,
)


class CheckProvider(Protocol):
    """
    Performs the individual checks of a category.

    Implementations yield one CheckOutcome per individual check, tagged
    with the category they were asked to run. The gate may stop consuming
    the stream early (on a failure) and may ask for the same category
    again after a retryable failure.
    """

    def run_category(self, category: CheckCategory) -> AsyncIterator[CheckOutcome]:
        ...


def build_categories(api_checks: bool = False) -> List[CheckCategory]:
    """
    Effective category list for a client acquisition.

    Args:
        api_checks: Also require the control-plane API to answer

    Returns:
        Baseline categories, plus CONTROL_PLANE_API if requested
    """
    categories = list(BASELINE_CATEGORIES)
    if api_checks:
        categories.append(CheckCategory.CONTROL_PLANE_API)
    return categories


def normalize_categories(categories: Iterable[CheckCategory]) -> List[CheckCategory]:
    """Sort categories into dependency order and drop duplicates."""
    return sorted(set(CheckCategory(c) for c in categories))


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion from synchronous code.

    Uses a worker thread with its own event loop when called while a loop
    is already running in this thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class ReadinessGate:
    """
    Runs ordered check categories and yields a validated client.

    One gate serves one acquisition at a time; concurrent acquisitions
    (e.g. one per facade) each use their own gate.

    Attributes:
        provider: Check provider performing the individual checks
        selector: Transport selector building the client on success
    """

    def __init__(
        self,
        provider: CheckProvider,
        selector: TransportSelector,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.selector = selector
        self._clock = clock
        self._sleep = sleep

    async def acquire(
        self,
        categories: Iterable[CheckCategory],
        policy: RetryPolicy,
        on_outcome: OutcomeCallback,
        cancel: Optional[asyncio.Event] = None,
    ) -> AcquireResult:
        """
        Run the checks and build the client.

        Args:
            categories: Categories to run; executed in dependency order
            policy: Retry deadline and interval
            on_outcome: Called once per outcome; a truthy return stops the gate
            cancel: Optional event; once set, no further retry sleep starts

        Returns:
            Ready with the client, or Failed with the fatal reason
        """
        for category in normalize_categories(categories):
            failed = await self._run_category(category, policy, on_outcome, cancel)
            if failed is not None:
                return failed

        try:
            client = self.selector.select()
        except TransportConstructionError as e:
            outcome = CheckOutcome(category=CheckCategory.CONTROL_PLANE_API, error=e)
            on_outcome(outcome)
            return Failed(FatalReason(FailureKind.TRANSPORT, outcome.category, e))

        return Ready(client)

    def acquire_sync(
        self,
        categories: Iterable[CheckCategory],
        policy: RetryPolicy,
        on_outcome: OutcomeCallback,
    ) -> AcquireResult:
        """Sync wrapper for acquire."""
        return run_sync(self.acquire(categories, policy, on_outcome))

    async def _run_category(
        self,
        category: CheckCategory,
        policy: RetryPolicy,
        on_outcome: OutcomeCallback,
        cancel: Optional[asyncio.Event],
    ) -> Optional[Failed]:
        attempt = 0
        while True:
            attempt += 1
            logger.debug(f"Running {category.id} checks (attempt {attempt})")

            stream = self.provider.run_category(category)
            try:
                retry = False
                async for outcome in stream:
                    if outcome.category != category:
                        raise ValueError(
                            f"provider returned a {outcome.category.id} outcome "
                            f"while running {category.id}"
                        )

                    if outcome.retryable and not policy.allows_retry(self._clock()):
                        final = outcome.as_final()
                        on_outcome(final)
                        return Failed(
                            FatalReason(FailureKind.RETRIES_EXHAUSTED, category, final.error)
                        )

                    terminate = on_outcome(outcome)
                    if outcome.is_hard_failure or terminate:
                        return Failed(
                            FatalReason(FailureKind.HARD_FAILURE, category, outcome.error)
                        )

                    if outcome.retryable:
                        retry = True
                        break
            finally:
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    await aclose()

            if not retry:
                logger.debug(f"{category.id} checks passed")
                return None

            if cancel is not None and cancel.is_set():
                logger.info(f"Acquisition cancelled while waiting on {category.id}")
                return Failed(FatalReason(FailureKind.CANCELLED, category, None))

            logger.info(f"Retrying {category.id} checks in {policy.interval}s")
            await self._sleep(policy.interval)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class GateOptions:
    """
    Options for acquiring a control-plane client.

    Attributes:
        control_plane_namespace: Namespace the control plane runs in
        api_addr: Explicit API address; empty to proxy through Kubernetes
        kubeconfig_path: Kubeconfig file, None for the library default
        kube_context: Kubeconfig context, None for current-context
        retry_deadline: Absolute retry cutoff, None to disable retries
        retry_interval: Pause between retries, in seconds
        check_command: Command suggested in remediation messages
    """
    control_plane_namespace: str = "linkerd"
    api_addr: str = ""
    kubeconfig_path: Optional[str] = None
    kube_context: Optional[str] = None
    retry_deadline: Optional[datetime] = None
    retry_interval: float = 1.0
    check_command: str = DEFAULT_CHECK_COMMAND

    @classmethod
    def from_env(cls, **overrides: Any) -> "GateOptions":
        """
        Build options from environment variables.

        Environment Variables:
            MESHGATE_NAMESPACE: Control-plane namespace
            MESHGATE_API_ADDR: Explicit API address (direct mode)
            KUBECONFIG: Kubeconfig path
            MESHGATE_KUBE_CONTEXT: Kubeconfig context
            MESHGATE_RETRY_INTERVAL: Seconds between retries

        Keyword overrides take precedence over the environment.

        Raises:
            ValueError: If MESHGATE_RETRY_INTERVAL is not a number
        """
        values: dict[str, Any] = {}

        namespace = os.environ.get("MESHGATE_NAMESPACE")
        if namespace:
            values["control_plane_namespace"] = namespace

        addr = os.environ.get("MESHGATE_API_ADDR")
        if addr:
            values["api_addr"] = addr

        kubeconfig = os.environ.get("KUBECONFIG")
        if kubeconfig:
            values["kubeconfig_path"] = kubeconfig

        context = os.environ.get("MESHGATE_KUBE_CONTEXT")
        if context:
            values["kube_context"] = context

        interval = os.environ.get("MESHGATE_RETRY_INTERVAL")
        if interval:
            try:
                values["retry_interval"] = float(interval)
            except ValueError as e:
                raise ValueError(
                    f"MESHGATE_RETRY_INTERVAL must be a number of seconds, got {interval!r}"
                ) from e

        values.update(overrides)
        return cls(**values)

    def with_retry_window(self, seconds: float) -> "GateOptions":
        """Copy of these options with a retry deadline `seconds` from now."""
        return dataclasses.replace(
            self, retry_deadline=utcnow() + timedelta(seconds=seconds)
        )

    def without_retries(self) -> "GateOptions":
        """Copy of these options with retries disabled."""
        return dataclasses.replace(self, retry_deadline=None)

    def retry_policy(self) -> RetryPolicy:
        """Retry policy built from the deadline and interval."""
        return RetryPolicy(deadline=self.retry_deadline, interval=self.retry_interval)

    def cluster_context(self) -> ClusterContext:
        """Lazy Kubernetes context for the configured kubeconfig and context."""
        return ClusterContext(self.kubeconfig_path, self.kube_context)

    def transport_selector(self, facade: Facade = Facade.PUBLIC) -> TransportSelector:
        """Transport selector for `facade` using these options."""
        return TransportSelector(
            address=self.api_addr,
            cluster=self.cluster_context(),
            namespace=self.control_plane_namespace,
            facade=facade,
        )


async def acquire_client(
    options: GateOptions,
    provider: CheckProvider,
    facade: Facade = Facade.PUBLIC,
    api_checks: bool = False,
    reporter: Optional[Reporter] = None,
) -> AcquireResult:
    """
    Run the standard readiness checks and build a client.

    Args:
        options: Gate options
        provider: Check provider
        facade: API facade the client talks to
        api_checks: Also require the control-plane API to answer
        reporter: Outcome reporter (default: stderr, options.check_command)

    Returns:
        Ready with the client, or Failed with the fatal reason
    """
    effective_reporter = reporter or Reporter(check_command=options.check_command)
    gate = ReadinessGate(provider, options.transport_selector(facade))
    return await gate.acquire(
        build_categories(api_checks),
        options.retry_policy(),
        effective_reporter.report,
    )


def acquire_client_sync(
    options: GateOptions,
    provider: CheckProvider,
    facade: Facade = Facade.PUBLIC,
    api_checks: bool = False,
    reporter: Optional[Reporter] = None,
) -> AcquireResult:
    """Sync wrapper for acquire_client."""
    return run_sync(acquire_client(options, provider, facade, api_checks, reporter))
