"""Tests for meshgate.public module (CLI entry points)."""

from unittest.mock import patch

import pytest

from meshgate._core.client import DirectClient, ProxiedClient
from meshgate.errors import HardCheckFailure, RetryableCheckFailure
from meshgate.gate import GateOptions
from meshgate.public import (
    check_public_api_client_or_exit,
    check_public_api_client_or_retry_or_exit,
    check_viz_api_client_or_exit,
    check_viz_api_client_or_retry_or_exit,
    exit_on_failure,
    raw_public_api_client,
    raw_viz_api_client,
)
from meshgate.report import WAITING_NOTICE
from meshgate.types import (
    CheckCategory,
    CheckOutcome,
    Facade,
    Failed,
    FailureKind,
    FatalReason,
    Ready,
)

K8S = CheckCategory.KUBERNETES_API
API = CheckCategory.CONTROL_PLANE_API

DIRECT = GateOptions(api_addr="10.0.0.1:8086", retry_interval=0.01)


class TestExitOnFailure:
    """Tests for exit_on_failure."""

    def test_ready_returns_client(self):
        client = DirectClient("10.0.0.1:8086")
        assert exit_on_failure(Ready(client)) is client

    def test_failed_exits_with_code_1(self):
        result = Failed(FatalReason(FailureKind.HARD_FAILURE, K8S, RuntimeError("x")))

        with pytest.raises(SystemExit) as exc_info:
            exit_on_failure(result)

        assert exc_info.value.code == 1


class TestRawClients:
    """Raw clients run no checks."""

    def test_raw_public_direct(self):
        client = raw_public_api_client(DIRECT)

        assert isinstance(client, DirectClient)
        assert client.facade is Facade.PUBLIC

    def test_raw_viz_direct(self):
        client = raw_viz_api_client(DIRECT)

        assert isinstance(client, DirectClient)
        assert client.facade is Facade.VIZ

    def test_raw_public_proxied(self, mock_cluster):
        with patch("meshgate.gate.ClusterContext", return_value=mock_cluster):
            client = raw_public_api_client(GateOptions())

        assert isinstance(client, ProxiedClient)
        assert "/services/linkerd-controller-api:http/proxy/" in client.address


class TestCheckOrExit:
    """Tests for the no-retry entry points."""

    def test_success_returns_client(self, scripted_provider, capsys):
        client = check_public_api_client_or_exit(DIRECT, scripted_provider({}))

        assert isinstance(client, DirectClient)
        assert capsys.readouterr().err == ""

    def test_hard_failure_exits(self, scripted_provider, capsys):
        """Hard failure: exit 1 after headline plus remediation line."""
        provider = scripted_provider({
            K8S: [[CheckOutcome.from_error(K8S, HardCheckFailure("Unauthorized"))]],
        })

        with pytest.raises(SystemExit) as exc_info:
            check_public_api_client_or_exit(DIRECT, provider)

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.splitlines() == [
            "Cannot connect to Kubernetes: Unauthorized",
            "Validate the install with: linkerd check",
        ]

    def test_ignores_retry_deadline(self, scripted_provider, capsys):
        """The plain variants never retry, even with a deadline set."""
        provider = scripted_provider({
            K8S: [
                [CheckOutcome.from_error(K8S, RetryableCheckFailure("starting"))],
                [CheckOutcome.success(K8S)],
            ],
        })

        with pytest.raises(SystemExit):
            check_viz_api_client_or_exit(DIRECT.with_retry_window(60), provider)

        assert provider.calls == [K8S]
        assert WAITING_NOTICE not in capsys.readouterr().err

    def test_skips_api_checks(self, scripted_provider):
        provider = scripted_provider({})

        check_viz_api_client_or_exit(DIRECT, provider)

        assert API not in provider.calls


class TestCheckOrRetryOrExit:
    """Tests for the retrying entry points."""

    def test_retries_until_ready(self, scripted_provider, capsys):
        provider = scripted_provider({
            API: [
                [CheckOutcome.from_error(API, RetryableCheckFailure("no endpoints"))],
                [CheckOutcome.success(API)],
            ],
        })

        client = check_public_api_client_or_retry_or_exit(
            DIRECT.with_retry_window(60), provider, api_checks=True
        )

        assert isinstance(client, DirectClient)
        assert provider.calls.count(API) == 2
        assert capsys.readouterr().err.splitlines() == [WAITING_NOTICE]

    def test_viz_facade(self, scripted_provider):
        client = check_viz_api_client_or_retry_or_exit(DIRECT, scripted_provider({}))

        assert client.facade is Facade.VIZ

    def test_retry_without_deadline_exits(self, scripted_provider, capsys):
        provider = scripted_provider({
            API: [[CheckOutcome.from_error(API, RetryableCheckFailure("no endpoints"))]],
        })

        with pytest.raises(SystemExit) as exc_info:
            check_viz_api_client_or_retry_or_exit(DIRECT, provider, api_checks=True)

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.splitlines() == [
            "Cannot connect to Linkerd: no endpoints",
            "Validate the install with: linkerd check",
        ]

    def test_custom_check_command(self, scripted_provider, capsys):
        options = GateOptions(api_addr="10.0.0.1:8086", check_command="linkerd viz check")
        provider = scripted_provider({
            K8S: [[CheckOutcome.from_error(K8S, HardCheckFailure("timeout"))]],
        })

        with pytest.raises(SystemExit):
            check_viz_api_client_or_retry_or_exit(options, provider)

        assert "Validate the install with: linkerd viz check" in capsys.readouterr().err
