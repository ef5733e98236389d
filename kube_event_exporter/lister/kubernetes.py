"""EventLister backed by the Kubernetes core/v1 Events API.

Uses kubernetes-asyncio. ``connect()`` loads the in-cluster service account
configuration, falling back to a kubeconfig file for local development.
"""

from __future__ import annotations

from typing import Any

import aiohttp
from kubernetes_asyncio import client as k8s_client
from kubernetes_asyncio import config as k8s_config
from kubernetes_asyncio.client.exceptions import ApiException

from kube_event_exporter.errors import EventListError, ListerSetupError
from kube_event_exporter.lister import EventLister
from kube_event_exporter.models.events import EventRecord
from kube_event_exporter.observability.logging import get_logger

_log = get_logger("lister.kubernetes")

_DEFAULT_PAGE_SIZE = 500


class KubernetesEventLister(EventLister):
    """Lists core/v1 Events across all namespaces.

    Args:
        api_client:      Configured kubernetes-asyncio ApiClient. Owned by the
                         lister and closed by ``close()``.
        page_size:       Events requested per page. 0 requests everything in
                         a single call.
        request_timeout: Optional per-request timeout in seconds passed to
                         the API client.
    """

    def __init__(
        self,
        api_client: k8s_client.ApiClient,
        page_size: int = _DEFAULT_PAGE_SIZE,
        request_timeout: float | None = None,
    ) -> None:
        if page_size < 0:
            raise ValueError("page_size must not be negative")
        self._api_client = api_client
        self._core_v1 = k8s_client.CoreV1Api(api_client)
        self._page_size = page_size
        self._request_timeout = request_timeout

    async def list_events(self) -> list[EventRecord]:
        records: list[EventRecord] = []
        continue_token: str | None = None
        pages = 0
        while True:
            page = await self._list_page(continue_token)
            pages += 1
            records.extend(EventRecord.from_v1_event(item) for item in page.items or [])
            continue_token = _continue_token(page)
            if not continue_token:
                break

        _log.debug("events_listed", events=len(records), pages=pages)
        return records

    async def _list_page(self, continue_token: str | None) -> Any:
        kwargs: dict[str, Any] = {}
        if self._page_size:
            kwargs["limit"] = self._page_size
        if continue_token:
            kwargs["_continue"] = continue_token
        if self._request_timeout is not None:
            kwargs["_request_timeout"] = self._request_timeout

        try:
            return await self._core_v1.list_event_for_all_namespaces(**kwargs)
        except ApiException as exc:
            raise EventListError(f"event list failed: {exc.status} {exc.reason}", status=exc.status) from exc
        except aiohttp.ClientError as exc:
            raise EventListError(f"event list failed: {exc}") from exc

    async def close(self) -> None:
        await self._api_client.close()


def _continue_token(page: Any) -> str | None:
    metadata = getattr(page, "metadata", None)
    return getattr(metadata, "_continue", None)


async def connect(
    kubeconfig: str = "",
    page_size: int = _DEFAULT_PAGE_SIZE,
    request_timeout: float | None = None,
) -> KubernetesEventLister:
    """Build a KubernetesEventLister from in-cluster config or a kubeconfig file.

    Raises:
        ListerSetupError: neither configuration source could be loaded.
    """
    try:
        # load_incluster_config() is synchronous in kubernetes-asyncio
        k8s_config.load_incluster_config()
        _log.info("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException as incluster_exc:
        try:
            # load_kube_config() is async in kubernetes-asyncio
            await k8s_config.load_kube_config(config_file=kubeconfig or None)
        except (k8s_config.ConfigException, OSError) as exc:
            raise ListerSetupError(
                f"no usable Kubernetes configuration: in-cluster: {incluster_exc}; kubeconfig: {exc}"
            ) from exc
        _log.info("k8s client configured from kubeconfig", kubeconfig=kubeconfig or "default")

    return KubernetesEventLister(
        k8s_client.ApiClient(),
        page_size=page_size,
        request_timeout=request_timeout,
    )
