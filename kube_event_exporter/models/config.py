"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ListenConfig:
    """HTTP listener configuration."""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class KubernetesConfig:
    """Kubernetes API access configuration."""

    kubeconfig: str = ""
    list_timeout_seconds: float = 10.0
    page_size: int = 500


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class ExporterConfig:
    """Top-level exporter configuration."""

    listen: ListenConfig = field(default_factory=ListenConfig)
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    log: LogConfig = field(default_factory=LogConfig)
