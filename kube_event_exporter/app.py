"""Application bootstrap for kube-event-exporter.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → K8s event lister → collector/registry → REST

Shutdown stops components in reverse startup order. Each component's stop
error is caught and logged independently.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kube_event_exporter.config import load_config
from kube_event_exporter.models.config import ExporterConfig
from kube_event_exporter.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog
    import uvicorn
    from prometheus_client import CollectorRegistry

    from kube_event_exporter.collector import EventCountCollector
    from kube_event_exporter.lister import EventLister

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class ExporterApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` is safe to call on an app that was never started or has
    already stopped.

    Args:
        config: Pre-built configuration. Loaded from the environment when
                omitted.
        lister: Pre-built EventLister. A Kubernetes lister is connected when
                omitted.
    """

    def __init__(self, config: ExporterConfig | None = None, lister: EventLister | None = None) -> None:
        self.config = config
        self._lister = lister
        self._owns_lister = lister is None
        self._collector: EventCountCollector | None = None
        self.registry: CollectorRegistry | None = None
        self._rest_server: uvicorn.Server | None = None
        self._rest_task: asyncio.Task[None] | None = None

        self._running = False
        self._stopped = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        The caller (main()) re-raises this as a non-zero exit.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("kube-event-exporter starting", version=_exporter_version())

        # --- 3. Kubernetes event lister ------------------------------------
        await self._start_lister()

        # --- 4. Collector and registry -----------------------------------
        self._start_collector()

        # --- 5. REST server ----------------------------------------------
        await self._start_rest()

        self._running = True
        self._log.info(
            "kube-event-exporter started",
            host=self.config.listen.host,
            port=self.config.listen.port,
        )

    async def _start_lister(self) -> None:
        """Connect the Kubernetes event lister unless one was injected."""
        assert self._log is not None
        assert self.config is not None
        if self._lister is not None:
            self._log.debug("using injected event lister")
            return
        self._log.debug("starting k8s event lister")
        try:
            from kube_event_exporter.lister.kubernetes import connect

            self._lister = await connect(
                kubeconfig=self.config.kubernetes.kubeconfig,
                page_size=self.config.kubernetes.page_size,
                request_timeout=self.config.kubernetes.list_timeout_seconds,
            )
        except Exception as exc:
            raise _ComponentError("k8s_lister", exc) from exc

    def _start_collector(self) -> None:
        """Build the collector and register it with a fresh registry."""
        assert self._log is not None
        assert self.config is not None
        assert self._lister is not None
        try:
            from prometheus_client import CollectorRegistry

            from kube_event_exporter.collector import EventCountCollector

            collector = EventCountCollector(
                self._lister,
                timeout=self.config.kubernetes.list_timeout_seconds,
                loop=asyncio.get_running_loop(),
            )
            registry = CollectorRegistry()
            registry.register(collector)
            self._collector = collector
            self.registry = registry
            self._log.info(
                "event collector registered",
                metric=collector.descriptor.name,
                list_timeout=self.config.kubernetes.list_timeout_seconds,
            )
        except Exception as exc:
            raise _ComponentError("collector", exc) from exc

    async def _start_rest(self) -> None:
        """Start the uvicorn server serving /metrics."""
        assert self._log is not None
        assert self.config is not None
        assert self.registry is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from kube_event_exporter.api import create_app

            fastapi_app = create_app(registry=self.registry)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host=self.config.listen.host,
                port=self.config.listen.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            self._rest_task = asyncio.create_task(server.serve(), name="rest-server")
            self._rest_server = server
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def wait(self, shutdown: asyncio.Event) -> None:
        """Block until *shutdown* is set or the REST server exits on its own."""
        assert self._rest_task is not None
        shutdown_wait = asyncio.create_task(shutdown.wait(), name="shutdown-wait")
        done, _ = await asyncio.wait(
            {shutdown_wait, self._rest_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if shutdown_wait not in done:
            shutdown_wait.cancel()
        if self._rest_task in done and self._log is not None:
            exc = None if self._rest_task.cancelled() else self._rest_task.exception()
            self._log.warning("rest server exited", error=str(exc) if exc else None)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if self._stopped or (not self._running and self._log is None):
            # Never started or already stopped; nothing to do
            return
        self._stopped = True

        log = self._log or get_logger("app")
        log.info("kube-event-exporter shutting down")
        self._running = False

        await self._stop_rest()
        self._collector = None
        self.registry = None
        if self._owns_lister:
            await self._stop_lister()

        log.info("kube-event-exporter stopped")

    async def _stop_rest(self) -> None:
        if self._rest_server is None or self._rest_task is None:
            return
        log = self._log or get_logger("app")
        self._rest_server.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(self._rest_task), timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component="rest", timeout=_SHUTDOWN_GRACE_SECONDS)
            self._rest_task.cancel()
        except Exception as exc:
            log.error("component stop raised an error", component="rest", error=str(exc))
        self._rest_server = None
        self._rest_task = None

    async def _stop_lister(self) -> None:
        """Close the kubernetes-asyncio ApiClient connection pool."""
        if self._lister is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._lister.close()
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._lister = None


def _exporter_version() -> str:
    from kube_event_exporter import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: ExporterConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = ExporterApp(config=config)
    loop = asyncio.get_running_loop()
    shutdown = asyncio.Event()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown.set)

    try:
        await app.start()
        await app.wait(shutdown)
    except _ComponentError as exc:
        # A mandatory component failed; log and exit non-zero
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        raise SystemExit(1) from exc
    finally:
        await app.stop()
