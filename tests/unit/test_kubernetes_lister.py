"""Unit tests for KubernetesEventLister and connect().

The CoreV1Api is replaced with mocks; no cluster is contacted.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from kubernetes_asyncio import client as k8s_client
from kubernetes_asyncio import config as k8s_config
from kubernetes_asyncio.client.exceptions import ApiException

from kube_event_exporter.errors import EventListError, ListerSetupError
from kube_event_exporter.lister.kubernetes import KubernetesEventLister, connect
from kube_event_exporter.models.events import EventRecord

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _v1_event(reason: str, type_: str, kind: str, count: int | None) -> SimpleNamespace:
    return SimpleNamespace(
        reason=reason,
        type=type_,
        involved_object=SimpleNamespace(kind=kind),
        count=count,
    )


def _page(items: list[Any], continue_token: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(items=items, metadata=SimpleNamespace(_continue=continue_token))


def _make_lister(*pages_or_errors: Any, page_size: int = 500, request_timeout: float | None = None):
    api_client = MagicMock()
    api_client.close = AsyncMock()
    lister = KubernetesEventLister(api_client, page_size=page_size, request_timeout=request_timeout)
    core_v1 = MagicMock()
    core_v1.list_event_for_all_namespaces = AsyncMock(side_effect=list(pages_or_errors))
    lister._core_v1 = core_v1
    return lister, core_v1, api_client


# ---------------------------------------------------------------------------
# list_events
# ---------------------------------------------------------------------------


class TestListEvents:
    async def test_single_page(self) -> None:
        """A single page is converted and requested with the default limit."""
        lister, core_v1, _ = _make_lister(
            _page([_v1_event("Scheduled", "Normal", "Pod", 2), _v1_event("Failed", "Warning", "Pod", 1)])
        )
        records = await lister.list_events()
        assert records == [
            EventRecord("Scheduled", "Normal", "Pod", 2),
            EventRecord("Failed", "Warning", "Pod", 1),
        ]
        core_v1.list_event_for_all_namespaces.assert_awaited_once_with(limit=500)

    async def test_follows_continue_token(self) -> None:
        """Continue tokens are followed until the list is exhausted."""
        lister, core_v1, _ = _make_lister(
            _page([_v1_event("A", "Normal", "Pod", 1)], continue_token="tok-1"),
            _page([_v1_event("B", "Normal", "Pod", 1)], continue_token="tok-2"),
            _page([_v1_event("C", "Warning", "Node", 3)]),
            page_size=1,
        )
        records = await lister.list_events()

        assert [r.reason for r in records] == ["A", "B", "C"]
        calls = core_v1.list_event_for_all_namespaces.await_args_list
        assert [c.kwargs for c in calls] == [
            {"limit": 1},
            {"limit": 1, "_continue": "tok-1"},
            {"limit": 1, "_continue": "tok-2"},
        ]

    async def test_page_size_zero_lists_unpaged(self) -> None:
        """Page size 0 issues one call without a limit."""
        lister, core_v1, _ = _make_lister(_page([]), page_size=0)
        assert await lister.list_events() == []
        core_v1.list_event_for_all_namespaces.assert_awaited_once_with()

    async def test_request_timeout_is_forwarded(self) -> None:
        """The per-request timeout is passed to the API client."""
        lister, core_v1, _ = _make_lister(_page([]), request_timeout=4.0)
        await lister.list_events()
        core_v1.list_event_for_all_namespaces.assert_awaited_once_with(limit=500, _request_timeout=4.0)

    async def test_missing_items_and_count(self) -> None:
        """A page without metadata ends the list; a missing count is 0."""
        lister, _, _ = _make_lister(SimpleNamespace(items=[_v1_event("Pulled", "Normal", "Pod", None)], metadata=None))
        assert await lister.list_events() == [EventRecord("Pulled", "Normal", "Pod", 0)]

    async def test_api_exception_becomes_list_error(self) -> None:
        """An API server rejection becomes EventListError with its status."""
        lister, _, _ = _make_lister(ApiException(status=403, reason="Forbidden"))
        with pytest.raises(EventListError) as exc_info:
            await lister.list_events()
        assert exc_info.value.status == 403
        assert "Forbidden" in str(exc_info.value)

    async def test_connection_error_becomes_list_error(self) -> None:
        """A transport failure becomes EventListError without a status."""
        lister, _, _ = _make_lister(aiohttp.ClientConnectionError("connection refused"))
        with pytest.raises(EventListError) as exc_info:
            await lister.list_events()
        assert exc_info.value.status is None

    async def test_failure_on_later_page_discards_earlier_pages(self) -> None:
        """A failure on any page fails the whole list."""
        lister, _, _ = _make_lister(
            _page([_v1_event("A", "Normal", "Pod", 1)], continue_token="tok-1"),
            ApiException(status=410, reason="Gone"),
        )
        with pytest.raises(EventListError):
            await lister.list_events()

    async def test_close_closes_api_client(self) -> None:
        """close() closes the owned API client."""
        lister, _, api_client = _make_lister()
        await lister.close()
        api_client.close.assert_awaited_once()

    def test_negative_page_size_rejected(self) -> None:
        """A negative page size is refused."""
        with pytest.raises(ValueError):
            KubernetesEventLister(MagicMock(), page_size=-1)


# ---------------------------------------------------------------------------
# connect
# ---------------------------------------------------------------------------


class TestConnect:
    async def test_in_cluster(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """In-cluster configuration is used when available."""
        load_kube = AsyncMock()
        monkeypatch.setattr(k8s_config, "load_incluster_config", MagicMock())
        monkeypatch.setattr(k8s_config, "load_kube_config", load_kube)
        monkeypatch.setattr(k8s_client, "ApiClient", MagicMock())

        lister = await connect(page_size=100)

        assert isinstance(lister, KubernetesEventLister)
        load_kube.assert_not_awaited()

    async def test_falls_back_to_kubeconfig(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Outside a cluster the kubeconfig file is loaded."""
        load_kube = AsyncMock()
        monkeypatch.setattr(
            k8s_config,
            "load_incluster_config",
            MagicMock(side_effect=k8s_config.ConfigException("not in cluster")),
        )
        monkeypatch.setattr(k8s_config, "load_kube_config", load_kube)
        monkeypatch.setattr(k8s_client, "ApiClient", MagicMock())

        lister = await connect(kubeconfig="/tmp/kubeconfig")

        assert isinstance(lister, KubernetesEventLister)
        load_kube.assert_awaited_once_with(config_file="/tmp/kubeconfig")

    async def test_no_configuration_is_setup_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """With neither source available, connect() raises ListerSetupError."""
        monkeypatch.setattr(
            k8s_config,
            "load_incluster_config",
            MagicMock(side_effect=k8s_config.ConfigException("not in cluster")),
        )
        monkeypatch.setattr(
            k8s_config,
            "load_kube_config",
            AsyncMock(side_effect=k8s_config.ConfigException("Invalid kube-config file")),
        )

        with pytest.raises(ListerSetupError, match="no usable Kubernetes configuration"):
            await connect()
