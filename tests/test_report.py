"""Tests for meshgate.report module."""

import io

import pytest

from meshgate.errors import ReporterConfigError
from meshgate.report import DEFAULT_HEADLINES, WAITING_NOTICE, Reporter
from meshgate.types import CheckCategory, CheckOutcome


class TestReporterConfig:
    """Tests for headline mapping validation."""

    def test_defaults_cover_every_category(self):
        assert set(DEFAULT_HEADLINES) == set(CheckCategory)

    def test_incomplete_mapping_raises(self):
        """A mapping missing a category fails at construction."""
        headlines = {
            CheckCategory.KUBERNETES_API: "Cannot connect to Kubernetes",
            CheckCategory.CONTROL_PLANE_EXISTENCE: "Cannot find Linkerd",
        }
        with pytest.raises(ReporterConfigError) as exc_info:
            Reporter(headlines=headlines)

        assert "linkerd-api" in str(exc_info.value)

    def test_empty_headline_rejected(self):
        headlines = dict(DEFAULT_HEADLINES)
        headlines[CheckCategory.KUBERNETES_API] = ""
        with pytest.raises(ReporterConfigError):
            Reporter(headlines=headlines)

    def test_custom_mapping(self, stderr_buffer):
        headlines = {c: f"Broken {c.id}" for c in CheckCategory}
        reporter = Reporter(headlines=headlines, check_command="mesh check", stream=stderr_buffer)

        reporter.report(CheckOutcome(CheckCategory.KUBERNETES_API, error=RuntimeError("x")))

        assert stderr_buffer.getvalue().splitlines() == [
            "Broken kubernetes-api: x",
            "Validate the install with: mesh check",
        ]


class TestReport:
    """Tests for Reporter.report."""

    def test_success_is_silent(self, reporter, stderr_buffer):
        assert reporter.report(CheckOutcome.success(CheckCategory.KUBERNETES_API)) is False
        assert stderr_buffer.getvalue() == ""

    def test_retryable_prints_waiting_notice(self, reporter, stderr_buffer):
        outcome = CheckOutcome(
            CheckCategory.CONTROL_PLANE_API,
            error=RuntimeError("not ready"),
            retryable=True,
        )

        assert reporter.report(outcome) is False
        assert stderr_buffer.getvalue() == WAITING_NOTICE + "\n"

    @pytest.mark.parametrize(
        "category,headline",
        [
            (CheckCategory.KUBERNETES_API, "Cannot connect to Kubernetes"),
            (CheckCategory.CONTROL_PLANE_EXISTENCE, "Cannot find Linkerd"),
            (CheckCategory.CONTROL_PLANE_API, "Cannot connect to Linkerd"),
        ],
    )
    def test_hard_failure_prints_headline_and_remediation(
        self, reporter, stderr_buffer, category, headline
    ):
        outcome = CheckOutcome(category, error=RuntimeError("boom"))

        assert reporter.report(outcome) is True
        assert stderr_buffer.getvalue().splitlines() == [
            f"{headline}: boom",
            "Validate the install with: linkerd check",
        ]

    def test_warning_is_softened(self, reporter, stderr_buffer):
        outcome = CheckOutcome(
            CheckCategory.CONTROL_PLANE_EXISTENCE,
            error=RuntimeError("old version"),
            warning=True,
        )

        assert reporter.report(outcome) is False
        lines = stderr_buffer.getvalue().splitlines()
        assert lines == ["Warning: Cannot find Linkerd: old version"]

    def test_defaults_to_stderr(self, capsys):
        Reporter().report(CheckOutcome(CheckCategory.KUBERNETES_API, error=RuntimeError("x")))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Cannot connect to Kubernetes: x" in captured.err

    def test_explicit_stream(self):
        stream = io.StringIO()
        Reporter(stream=stream).report(
            CheckOutcome(CheckCategory.KUBERNETES_API, error=RuntimeError("x"), retryable=True)
        )
        assert WAITING_NOTICE in stream.getvalue()
