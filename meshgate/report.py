"""
Reporting and exit policy for check outcomes.

The Reporter is the on_outcome callback handed to the readiness gate. It
writes user-facing diagnostics, one line per message, and tells the gate
whether the outcome is terminal.

Usage:
    reporter = Reporter(check_command="linkerd check")
    result = await gate.acquire(categories, policy, reporter.report)
"""

from __future__ import annotations

import logging
import sys
from typing import Mapping, Optional, TextIO

from meshgate.errors import ReporterConfigError
from meshgate.types import CheckCategory, CheckOutcome

logger = logging.getLogger(__name__)


DEFAULT_HEADLINES: Mapping[CheckCategory, str] = {
    CheckCategory.KUBERNETES_API: "Cannot connect to Kubernetes",
    CheckCategory.CONTROL_PLANE_EXISTENCE: "Cannot find Linkerd",
    CheckCategory.CONTROL_PLANE_API: "Cannot connect to Linkerd",
}

DEFAULT_CHECK_COMMAND = "linkerd check"

WAITING_NOTICE = "Waiting for control plane to become available"


class Reporter:
    """
    Maps check outcomes to diagnostics and a terminate decision.

    Attributes:
        headlines: Headline per category, covering every CheckCategory
        check_command: Command suggested in the remediation line
    """

    def __init__(
        self,
        headlines: Optional[Mapping[CheckCategory, str]] = None,
        check_command: str = DEFAULT_CHECK_COMMAND,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.headlines = dict(DEFAULT_HEADLINES if headlines is None else headlines)
        missing = [c.id for c in CheckCategory if not self.headlines.get(c)]
        if missing:
            raise ReporterConfigError(
                f"No headline for check categories: {', '.join(missing)}"
            )
        self.check_command = check_command
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so pytest's capsys sees the writes
        return self._stream if self._stream is not None else sys.stderr

    def _write(self, line: str) -> None:
        print(line, file=self.stream)

    def report(self, outcome: CheckOutcome) -> bool:
        """
        Report one outcome.

        Args:
            outcome: Outcome produced by a check provider

        Returns:
            True if the process should terminate
        """
        if outcome.succeeded:
            return False

        if outcome.retryable:
            self._write(WAITING_NOTICE)
            return False

        headline = self.headlines[outcome.category]

        if outcome.warning:
            logger.warning(f"{outcome.category.id}: {outcome.error}")
            self._write(f"Warning: {headline}: {outcome.error}")
            return False

        self._write(f"{headline}: {outcome.error}")
        self._write(f"Validate the install with: {self.check_command}")
        return True
