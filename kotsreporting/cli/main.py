"""Operator CLI for kotsreporting.

Commands:
  export        — print an app's stored report as JSON (or its encoded form)
  decode        — decode an encoded report taken from a support bundle
  distribution  — show the detected Kubernetes distribution
  cluster-id    — show the persistent cluster id (created if missing)
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Coroutine
from typing import Any, BinaryIO, TypeVar

import click
from kubernetes_asyncio.config import ConfigException

from kotsreporting import __version__
from kotsreporting.cluster.distribution import DistributionDetector
from kotsreporting.cluster.identity import ClusterIdentity
from kotsreporting.cluster.kube import kubernetes_object_store
from kotsreporting.config import load_config
from kotsreporting.errors import ReportingError
from kotsreporting.models.config import KotsReportingConfig
from kotsreporting.models.events import ReportType
from kotsreporting.observability.logging import setup_logging
from kotsreporting.report.codec import decode_report, encode_report
from kotsreporting.report.report import Report
from kotsreporting.report.store import ReportStore

_REPORT_TYPES = click.Choice([t.value for t in ReportType])

_T = TypeVar("_T")


def _run_async(coro: Coroutine[Any, Any, _T]) -> _T:
    """Run *coro*, turning cluster and report errors into a clean CLI failure."""
    try:
        return asyncio.run(coro)
    except (ReportingError, ConfigException) as exc:
        raise click.ClickException(str(exc)) from exc


def _report_json(report: Report) -> str:
    return json.dumps(
        {"type": report.type.value, "events": [event.to_dict() for event in report.events]},
        indent=2,
    )


@click.group()
@click.version_option(version=__version__, prog_name="kotsreporting")
@click.option(
    "--namespace",
    "-n",
    default=None,
    help="Namespace holding the report objects (defaults to configuration).",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Override KOTSREPORTING_LOG_LEVEL.",
)
@click.pass_context
def cli(ctx: click.Context, namespace: str | None, log_level: str | None) -> None:
    """Inspect the admin console's telemetry reports."""
    config = load_config()
    if namespace:
        config.reporting.namespace = namespace
    if log_level:
        config.log.level = log_level
    setup_logging(config.log.level, console=sys.stderr.isatty())
    ctx.obj = config


@cli.command("export")
@click.option("--app-slug", required=True, help="Slug of the app whose report to export.")
@click.option("--type", "report_type", type=_REPORT_TYPES, default=ReportType.INSTANCE.value, show_default=True)
@click.option("--encoded", is_flag=True, help="Print the stored base64(gzip(json)) form instead of JSON.")
@click.pass_obj
def export_cmd(config: KotsReportingConfig, app_slug: str, report_type: str, encoded: bool) -> None:
    """Print the stored report of APP_SLUG."""

    async def _run() -> Report:
        async with kubernetes_object_store() as objects:
            store = ReportStore(objects)
            return await store.read(config.reporting.namespace, app_slug, ReportType(report_type))

    report = _run_async(_run())

    if encoded:
        click.echo(encode_report(report).decode("ascii"))
    else:
        click.echo(_report_json(report))


@cli.command("decode")
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "--type",
    "report_type",
    type=_REPORT_TYPES,
    default=None,
    help="Report type for documents written without a type tag.",
)
def decode_cmd(source: BinaryIO, report_type: str | None) -> None:
    """Decode an encoded report read from SOURCE (default: stdin)."""
    data = source.read().strip()
    try:
        report = decode_report(data, ReportType(report_type) if report_type else None)
    except ReportingError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(_report_json(report))


@cli.command("distribution")
def distribution_cmd() -> None:
    """Show the detected Kubernetes distribution."""

    async def _run() -> str:
        async with kubernetes_object_store() as objects:
            return (await DistributionDetector(objects).detect()).value

    click.echo(_run_async(_run()))


@cli.command("cluster-id")
@click.pass_obj
def cluster_id_cmd(config: KotsReportingConfig) -> None:
    """Show the persistent cluster id, creating it if missing."""

    async def _run() -> str:
        async with kubernetes_object_store() as objects:
            return await ClusterIdentity(objects, config.reporting.namespace).get_cluster_id()

    click.echo(_run_async(_run()))
