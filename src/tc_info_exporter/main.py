"""
tc-info-exporter entry point.

Usage:
    tc-info-exporter                              Serve /metrics on :9150
    tc-info-exporter --collector.cbs --mock       Serve simulated inventory
    tc-info-exporter inventory                    One-shot inventory table
"""

from __future__ import annotations

import logging
import os
import sys
import time

import click
from dotenv import load_dotenv

from tc_info_exporter import __version__
from tc_info_exporter.collector.base import DEFAULT_PAGE_SIZE, DEFAULT_REGION, DEFAULT_REQUEST_TIMEOUT
from tc_info_exporter.credentials import mock_credentials, resolve_credentials
from tc_info_exporter.errors import CredentialError
from tc_info_exporter.mock.cloud import MockCloud
from tc_info_exporter.registry import DEFAULT_SCRAPE_TIMEOUT, build_collectors, build_registry
from tc_info_exporter.server import DEFAULT_LISTEN_ADDRESS, DEFAULT_METRICS_PATH, ExporterServer


log = logging.getLogger("tc_info_exporter")

LOG_LEVELS = ["debug", "info", "warn", "error"]


def _setup_logging(level: str):
    logging.basicConfig(
        level=logging.WARNING if level == "warn" else getattr(logging, level.upper()),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_env_file(path: str):
    if not path:
        return
    if not os.path.exists(path):
        log.warning("Error loading %s file: not found", path)
        return
    load_dotenv(path)
    log.debug("Loaded environment from %s", path)


def _make_collectors(opts: dict):
    """Resolve credentials and build the enabled collectors, or exit(1)."""
    enabled = [kind for kind in ("es", "cbs") if opts[kind]]
    if not enabled:
        log.warning("No collectors enabled; only exporter metrics will be served")

    client_factory = None
    if opts["mock"]:
        credentials = mock_credentials()
        client_factory = MockCloud(seed=42, clusters=3, disks=24).client_factory
    else:
        try:
            credentials = resolve_credentials()
        except CredentialError as e:
            log.error("Failed to get credential: %s", e)
            raise SystemExit(1)

    collectors = build_collectors(
        enabled,
        credentials,
        region=opts["region"],
        page_size=opts["page_size"],
        request_timeout=opts["request_timeout"],
        client_factory=client_factory,
    )

    # Catch a broken client setup now rather than on the first scrape
    for collector in collectors:
        try:
            collector.new_client()
        except Exception:
            log.exception("Failed to create %s client", collector.kind)
            raise SystemExit(1)

    return collectors


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tc-info-exporter")
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              envvar="TC_INFO_LISTEN_ADDRESS", show_default=True,
              help="Address to listen on for web interface and telemetry")
@click.option("--web.telemetry-path", "metrics_path", default=DEFAULT_METRICS_PATH,
              envvar="TC_INFO_METRICS_PATH", show_default=True,
              help="Path under which to expose metrics")
@click.option("--collector.es/--no-collector.es", "es", default=True,
              envvar="TC_INFO_COLLECTOR_ES", show_default=True,
              help="Collect Elasticsearch Service clusters")
@click.option("--collector.cbs/--no-collector.cbs", "cbs", default=False,
              envvar="TC_INFO_COLLECTOR_CBS", show_default=True,
              help="Collect Cloud Block Storage disks")
@click.option("--region", default=DEFAULT_REGION, envvar="TC_INFO_REGION", show_default=True,
              help="Tencent Cloud region to query")
@click.option("--page-size", default=DEFAULT_PAGE_SIZE, type=click.IntRange(1, 100),
              envvar="TC_INFO_PAGE_SIZE", show_default=True,
              help="Items requested per list API page")
@click.option("--scrape-timeout", default=DEFAULT_SCRAPE_TIMEOUT, type=float,
              envvar="TC_INFO_SCRAPE_TIMEOUT", show_default=True,
              help="Overall time budget for one scrape in seconds; also caps each API request timeout")
@click.option("--request-timeout", default=DEFAULT_REQUEST_TIMEOUT, type=click.IntRange(1),
              envvar="TC_INFO_REQUEST_TIMEOUT", show_default=True,
              help="Timeout for a single API request in seconds")
@click.option("--env-file", default=".env", show_default=True,
              help="dotenv file loaded before reading credentials ('' to skip)")
@click.option("--mock", is_flag=True, default=False,
              help="Serve a simulated account instead of calling Tencent Cloud")
@click.option("--log.level", "log_level", type=click.Choice(LOG_LEVELS), default="info",
              envvar="TC_INFO_LOG_LEVEL", show_default=True,
              help="Only log messages with the given severity or above")
@click.pass_context
def cli(ctx, listen_address: str, metrics_path: str, es: bool, cbs: bool, region: str,
        page_size: int, scrape_timeout: float, request_timeout: int, env_file: str,
        mock: bool, log_level: str):
    """Tencent Cloud inventory exporter for Prometheus."""
    _setup_logging(log_level)
    _load_env_file(env_file)

    ctx.ensure_object(dict)
    ctx.obj.update(
        listen_address=listen_address,
        metrics_path=metrics_path,
        es=es,
        cbs=cbs,
        region=region,
        page_size=page_size,
        scrape_timeout=scrape_timeout,
        request_timeout=request_timeout,
        mock=mock,
    )

    # No subcommand means serve
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.pass_context
def serve(ctx):
    """Serve the metrics endpoint until interrupted."""
    opts = ctx.obj
    log.info("Starting tc_info_exporter version=%s", __version__)

    collectors = _make_collectors(opts)
    for collector in collectors:
        log.info("Enabled collector %s", collector.name())

    try:
        registry = build_registry(collectors, scrape_timeout=opts["scrape_timeout"])
        server = ExporterServer(registry, opts["listen_address"], opts["metrics_path"])
    except (OSError, ValueError) as e:
        log.error("Error running HTTP server: %s", e)
        raise SystemExit(1)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    log.info("Exporter stopped")


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Print JSON lines instead of tables")
@click.pass_context
def inventory(ctx, as_json: bool):
    """Collect once from every enabled collector and print the results."""
    from tc_info_exporter.report.terminal import print_inventory, write_jsonl

    opts = ctx.obj
    collectors = _make_collectors(opts)

    deadline = time.monotonic() + opts["scrape_timeout"]
    results = [collector.collect(deadline=deadline) for collector in collectors]

    if as_json:
        write_jsonl(results, sys.stdout)
    else:
        print_inventory(collectors, results)

    if not all(r.ok for r in results):
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
