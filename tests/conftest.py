"""
Pytest configuration for meshgate tests.
"""

import io
from typing import Dict, List, Sequence

import pytest
from unittest.mock import MagicMock

from meshgate.report import Reporter
from meshgate.types import CheckCategory, CheckOutcome

# Note: With pytest-asyncio in auto mode, no event_loop fixture needed


class ScriptedProvider:
    """
    Check provider replaying scripted outcomes.

    script maps a category to one list of outcomes per attempt; once the
    attempts run out the last one repeats. `calls` records every category
    run, in order.
    """

    def __init__(self, script: Dict[CheckCategory, Sequence[Sequence[CheckOutcome]]]):
        self.script = script
        self.calls: List[CheckCategory] = []
        self.yielded: List[CheckOutcome] = []

    async def run_category(self, category):
        attempt = self.calls.count(category)
        self.calls.append(category)
        attempts = self.script.get(category) or [[CheckOutcome.success(category)]]
        for outcome in attempts[min(attempt, len(attempts) - 1)]:
            self.yielded.append(outcome)
            yield outcome


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def stderr_buffer():
    """In-memory diagnostic stream."""
    return io.StringIO()


@pytest.fixture
def reporter(stderr_buffer):
    """Reporter writing to stderr_buffer."""
    return Reporter(stream=stderr_buffer)


@pytest.fixture
def mock_cluster():
    """ClusterContext stand-in with a fixed API server host."""
    cluster = MagicMock()
    cluster.url_for.side_effect = (
        lambda ns, path: f"https://k8s.example.com:6443/api/v1/namespaces/{ns}{path}"
    )
    cluster.session.return_value = MagicMock()
    return cluster


@pytest.fixture
def no_sleep():
    """Async sleep replacement recording requested intervals."""
    intervals = []

    async def sleep(seconds):
        intervals.append(seconds)

    sleep.intervals = intervals
    return sleep
