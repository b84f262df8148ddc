"""
Type definitions for meshgate.

Defines enums and dataclasses used across the package for:
- Check categories and the outcomes check providers produce
- Retry policy (deadline + fixed interval)
- Control-plane API facades
- The tagged result of a client acquisition
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Optional, Union, TYPE_CHECKING

from meshgate.errors import RetryableCheckFailure, WarningCheckFailure

if TYPE_CHECKING:
    from meshgate._core.client import ApiClient


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Check Types
# =============================================================================


class CheckCategory(IntEnum):
    """
    Class of precondition checks, ordered by dependency.

    Lower values are infrastructure checks that must pass before any
    higher category is started:
    - KUBERNETES_API: the cluster API answers with the given credentials
    - CONTROL_PLANE_EXISTENCE: the control plane is installed
    - CONTROL_PLANE_API: the control-plane API answers
    """
    KUBERNETES_API = 1
    CONTROL_PLANE_EXISTENCE = 2
    CONTROL_PLANE_API = 3

    @property
    def id(self) -> str:
        """Stable string id, as shown by `linkerd check`."""
        return _CATEGORY_IDS[self]


_CATEGORY_IDS = {
    CheckCategory.KUBERNETES_API: "kubernetes-api",
    CheckCategory.CONTROL_PLANE_EXISTENCE: "linkerd-existence",
    CheckCategory.CONTROL_PLANE_API: "linkerd-api",
}


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result of one individual check inside a category.

    Attributes:
        category: Category that produced the outcome
        error: Failure cause, None on success
        warning: Failure is surfaced but never fatal
        retryable: Failure is transient; the gate may re-run the category
        description: Optional name of the individual check
    """
    category: CheckCategory
    error: Optional[BaseException] = None
    warning: bool = False
    retryable: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if self.warning and self.retryable:
            raise ValueError(
                f"outcome for {self.category.id} cannot be both a warning and retryable"
            )

    @classmethod
    def success(cls, category: CheckCategory, description: str = "") -> "CheckOutcome":
        """Build a passing outcome."""
        return cls(category=category, description=description)

    @classmethod
    def from_error(
        cls,
        category: CheckCategory,
        error: BaseException,
        description: str = "",
    ) -> "CheckOutcome":
        """
        Classify an exception into an outcome.

        RetryableCheckFailure becomes a retryable outcome and
        WarningCheckFailure a warning; anything else is a hard failure.
        """
        return cls(
            category=category,
            error=error,
            warning=isinstance(error, WarningCheckFailure),
            retryable=isinstance(error, RetryableCheckFailure),
            description=description,
        )

    @property
    def succeeded(self) -> bool:
        """True when the check passed."""
        return self.error is None

    @property
    def is_hard_failure(self) -> bool:
        """True for a failure that is neither a warning nor retryable."""
        return self.error is not None and not self.warning and not self.retryable

    def as_final(self) -> "CheckOutcome":
        """Copy of a retryable outcome with retries no longer permitted."""
        return dataclasses.replace(self, retryable=False)


@dataclass(frozen=True)
class RetryPolicy:
    """
    When the gate may wait for a retryable failure to clear.

    Attributes:
        deadline: Absolute cutoff. A naive datetime is read as local time.
            None disables retries: the first retryable outcome is fatal.
        interval: Fixed pause in seconds before a category is re-run
    """
    deadline: Optional[datetime] = None
    interval: float = 1.0

    def __post_init__(self) -> None:
        # Naive deadlines are taken as local time
        if self.deadline is not None and self.deadline.tzinfo is None:
            object.__setattr__(self, "deadline", self.deadline.astimezone(timezone.utc))

    @classmethod
    def within(cls, seconds: float, interval: float = 1.0) -> "RetryPolicy":
        """Policy whose deadline is `seconds` from now."""
        return cls(deadline=utcnow() + timedelta(seconds=seconds), interval=interval)

    def allows_retry(self, now: datetime) -> bool:
        """Check if another attempt may still start at `now`."""
        return self.deadline is not None and now < self.deadline


# =============================================================================
# Transport Types
# =============================================================================


class Facade(str, Enum):
    """
    Control-plane API facade a client talks to.

    - PUBLIC: controller public API
    - VIZ: metrics API of the viz extension
    """
    PUBLIC = "public"
    VIZ = "viz"

    @property
    def service_name(self) -> str:
        """Kubernetes Service the proxied client tunnels to."""
        return _FACADE_ENDPOINTS[self][0]

    @property
    def port_name(self) -> str:
        """Named Service port used in the proxy path."""
        return _FACADE_ENDPOINTS[self][1]


_FACADE_ENDPOINTS = {
    Facade.PUBLIC: ("linkerd-controller-api", "http"),
    Facade.VIZ: ("metrics-api", "http"),
}


# =============================================================================
# Acquisition Result
# =============================================================================


class FailureKind(str, Enum):
    """Why an acquisition ended without a client."""
    HARD_FAILURE = "hard_failure"
    RETRIES_EXHAUSTED = "retries_exhausted"
    TRANSPORT = "transport"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class FatalReason:
    """
    Cause of a failed acquisition.

    Attributes:
        kind: Failure classification
        category: Category being checked when the gate stopped
        error: Underlying error
    """
    kind: FailureKind
    category: CheckCategory
    error: Optional[BaseException] = None

    def __str__(self) -> str:
        return f"{self.category.id}: {self.kind.value}: {self.error}"


@dataclass
class Ready:
    """Acquisition succeeded; the caller owns `client`."""
    client: "ApiClient"


@dataclass
class Failed:
    """Acquisition failed; the diagnostic has already been reported."""
    reason: FatalReason


AcquireResult = Union[Ready, Failed]
