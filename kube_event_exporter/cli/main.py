"""Click command that loads configuration and runs the exporter."""

from __future__ import annotations

import asyncio

import click

from kube_event_exporter import __version__
from kube_event_exporter.config import load_config


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--listen-address",
    default=None,
    metavar="HOST:PORT",
    help="The address to listen on for HTTP requests. [default: :8080]",
)
@click.option(
    "--kubeconfig",
    default=None,
    type=click.Path(dir_okay=False),
    help="Kubeconfig used when not running in-cluster.",
)
@click.option(
    "--list-timeout",
    default=None,
    type=float,
    metavar="SECONDS",
    help="Upper bound for listing events on each scrape. [default: 10]",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Minimum log level. [default: info]",
)
@click.version_option(__version__, prog_name="kube-event-exporter")
def cli(
    listen_address: str | None,
    kubeconfig: str | None,
    list_timeout: float | None,
    log_level: str | None,
) -> None:
    """Export aggregated Kubernetes event counts as Prometheus metrics.

    Options fall back to the matching KUBE_EVENT_EXPORTER_* environment
    variables.
    """
    from kube_event_exporter.app import main

    try:
        config = load_config(
            listen_address=listen_address,
            kubeconfig=kubeconfig,
            list_timeout=list_timeout,
            log_level=log_level,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    asyncio.run(main(config))
