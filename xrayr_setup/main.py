"""
XrayR node setup: CLI entrypoint.

Usage:
    xrayr-setup --help
    xrayr-setup install
    xrayr-setup status
    python -m xrayr_setup.main detect
"""

from __future__ import annotations

import json
import os
import sys
import time
from functools import partial
from pathlib import Path

import click

from xrayr_setup import __version__
from xrayr_setup.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="xrayr-setup")
@click.option("--verbose", "-v", is_flag=True, help="Timestamps and module names on log lines.")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to xrayr-setup.yml (default: $XRAYR_SETUP_CONFIG or ./xrayr-setup.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """XrayR node setup: install XrayR, GOST and tune the host."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("XRAYR_SETUP_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        verbose=verbose,
        log_file=os.environ.get("XRAYR_SETUP_LOG_FILE"),
        log_file_level=os.environ.get("XRAYR_SETUP_LOG_FILE_LEVEL"),
    )


def _load_settings(ctx: click.Context):
    """Load settings or exit 1 with the config error."""
    from xrayr_setup.core.config.loader import ConfigError, load_settings

    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _runner(ctx: click.Context):
    """Command runner from ``ctx.obj`` (tests inject a mock) or the real one."""
    if "runner" not in ctx.obj:
        from xrayr_setup.adapters.shell.command import SubprocessRunner

        ctx.obj["runner"] = SubprocessRunner()
    return ctx.obj["runner"]


def _downloader(ctx: click.Context, timeout: int):
    if "downloader" not in ctx.obj:
        from xrayr_setup.adapters.http.download import UrllibDownloader

        ctx.obj["downloader"] = UrllibDownloader(timeout=timeout)
    return ctx.obj["downloader"]


@cli.command()
@click.option(
    "--bench/--no-bench",
    default=None,
    help="Run (or skip) the benchmark without asking. Default: ask.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the run report as JSON.")
@click.pass_context
def install(ctx: click.Context, bench: bool | None, as_json: bool) -> None:
    """Provision this host as an XrayR node (requires root)."""
    from xrayr_setup.core.engine.executor import StepContext
    from xrayr_setup.core.services.os_detect import build_host_profile
    from xrayr_setup.core.services.privilege import PrivilegeError, require_root
    from xrayr_setup.core.use_cases.provision import provision
    from xrayr_setup.ui.cli.prompt import timed_confirm
    from xrayr_setup.ui.cli.report import render_banner, render_run_footer, render_summary

    if not as_json:
        render_banner()

    try:
        require_root()
    except PrivilegeError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    settings = _load_settings(ctx)
    if bench is not None:
        settings = settings.model_copy(update={"benchmark": "yes" if bench else "no"})

    host = build_host_profile(settings.paths.os_root)
    step_ctx = StepContext(
        host=host,
        settings=settings,
        runner=_runner(ctx),
        downloader=_downloader(ctx, settings.download_timeout),
        confirm=ctx.obj.get("confirm") or partial(timed_confirm, timeout=settings.prompt_timeout),
        sleep=ctx.obj.get("sleep", time.sleep),
    )

    result = provision(step_ctx)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    render_run_footer(result.report)
    if result.summary is not None:
        render_summary(result.summary)
    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show the host / service summary without changing anything."""
    from xrayr_setup.core.services.os_detect import build_host_profile
    from xrayr_setup.core.services.summary import collect_summary
    from xrayr_setup.ui.cli.report import render_summary

    settings = _load_settings(ctx)
    host = build_host_profile(settings.paths.os_root)
    summary = collect_summary(host, settings, _runner(ctx))

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    render_summary(summary)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Detect and print the host OS classification."""
    from xrayr_setup.core.services.os_detect import build_host_profile

    settings = _load_settings(ctx)
    host = build_host_profile(settings.paths.os_root)

    if as_json:
        click.echo(json.dumps(host.model_dump(mode="json"), indent=2))
        return

    click.secho(f"\n🔍 {host.os_id}", fg="cyan", bold=True)
    click.echo(f"   Family: {host.os_family.value}")
    click.echo(f"   Hostname: {host.hostname}")
    if host.is_alpine:
        click.echo("   Kernel tuning and GOST are skipped on this host")
    click.echo()


if __name__ == "__main__":
    cli()
