"""
CLI rendering for the provisioning summary.

Thin presentation layer over ``core.services.summary``.
"""

from __future__ import annotations

import click

from xrayr_setup.core.engine.executor import ExecutionReport
from xrayr_setup.core.services.summary import SummaryReport

_RULE = "=" * 64


def render_banner() -> None:
    click.echo("=" * 41)
    click.echo(" XrayR automated installer")
    click.echo("=" * 41)


def render_run_footer(report: ExecutionReport) -> None:
    """One line per run outcome, plus the collected warnings."""
    click.echo()
    if report.aborted:
        click.secho(f"❌ Aborted at step '{report.aborted_by}'", fg="red", bold=True)
        return

    click.echo("=" * 41)
    click.secho("✅ All operations finished!", fg="green", bold=True)
    click.echo("=" * 41)
    if report.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warning in report.warnings:
            click.echo(f"   • {warning}")


def render_summary(summary: SummaryReport) -> None:
    """Print the host / services / commands report."""
    click.echo()
    click.secho("System information:", fg="blue", bold=True)
    click.echo(f" • Operating system: {summary.os_id}")
    click.echo(f" • Hostname: {summary.hostname}")
    if summary.kernel_tuning:
        click.echo(f" • BBR status: {summary.bbr}")
        click.echo(f" • IPv6 disabled: {summary.ipv6_disabled}")
    else:
        click.echo(" • Kernel optimization: skipped (Alpine)")

    click.echo()
    click.secho("Installed services:", fg="blue", bold=True)
    if not summary.services:
        click.echo("  (none detected)")
    for service in summary.services:
        label = service.name
        if service.version:
            label += f" ({service.version})"
        click.secho(f"  ✓ {label}", fg="green")
        if service.edition:
            click.echo(f"    Edition: {service.edition}")
        click.echo(f"    State: {service.state}")

    click.echo()
    click.secho("Configuration files:", fg="blue", bold=True)
    for label, path in summary.config_files:
        click.echo(f" • {label}: {path}")

    for section, commands in summary.commands.items():
        click.echo()
        click.secho(f"{section}:", fg="blue", bold=True)
        for label, cmd in commands:
            click.echo(f" • {label}: {cmd}")

    click.echo()
    click.secho(_RULE, fg="green")
    click.secho("Done! Adjust the configuration files to your needs.", fg="green")
    click.secho(_RULE, fg="green")

    if summary.tips:
        click.echo()
        click.secho("Tips:", fg="yellow")
        for tip in summary.tips:
            click.secho(f" • {tip}", fg="yellow")
    click.echo()
