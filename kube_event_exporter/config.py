"""Configuration loading from environment variables."""

from __future__ import annotations

import math
import os
import re

from kube_event_exporter.models.config import (
    ExporterConfig,
    KubernetesConfig,
    ListenConfig,
    LogConfig,
)

_DEFAULT_LISTEN_ADDRESS = ":8080"
_MIN_LIST_TIMEOUT = 1.0
_MAX_LIST_TIMEOUT = 300.0

# host:port, [v6-host]:port or :port
_RE_LISTEN_ADDRESS = re.compile(r"^(?:\[(?P<v6>[0-9A-Fa-f:.]+)\]|(?P<host>[^:\[\]]*)):(?P<port>[0-9]{1,5})$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBE_EVENT_EXPORTER_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float) -> float:
    return float(_env(key, str(default)))


def _validate_list_timeout(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError(f"Invalid list timeout: {value}. Must be a finite number of seconds")
    return min(max(value, _MIN_LIST_TIMEOUT), _MAX_LIST_TIMEOUT)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def parse_listen_address(value: str) -> ListenConfig:
    """Parse a ``host:port`` listen address.

    An empty host (``:8080``) binds every interface. IPv6 hosts must be
    bracketed (``[::1]:8080``).
    """
    match = _RE_LISTEN_ADDRESS.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid listen address: {value!r}. Expected host:port")
    port = int(match.group("port"))
    if not 0 < port <= 65535:
        raise ValueError(f"Invalid listen port: {port}")
    host = match.group("v6") or match.group("host") or "0.0.0.0"
    return ListenConfig(host=host, port=port)


def load_config(
    listen_address: str | None = None,
    kubeconfig: str | None = None,
    list_timeout: float | None = None,
    log_level: str | None = None,
) -> ExporterConfig:
    """Load configuration from KUBE_EVENT_EXPORTER_* environment variables.

    Explicit arguments (from the command line) take precedence over the
    environment.
    """
    timeout = _env_float("LIST_TIMEOUT", 10.0) if list_timeout is None else list_timeout
    return ExporterConfig(
        listen=parse_listen_address(
            listen_address if listen_address is not None else _env("LISTEN_ADDRESS", _DEFAULT_LISTEN_ADDRESS)
        ),
        kubernetes=KubernetesConfig(
            kubeconfig=kubeconfig if kubeconfig is not None else _env("KUBECONFIG", ""),
            list_timeout_seconds=_validate_list_timeout(timeout),
            page_size=_env_int("PAGE_SIZE", 500, min_val=0),
        ),
        log=LogConfig(
            level=_validate_log_level(log_level if log_level is not None else _env("LOG_LEVEL", "info")),
        ),
    )
