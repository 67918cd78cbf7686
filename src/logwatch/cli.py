"""CLI for logwatch.

Usage:
    logwatch run
    logwatch watch --interval 5
    logwatch offsets list
    logwatch offsets reset /var/log/auth.log
    logwatch test-alert
"""

from pathlib import Path

import click

from logwatch.config import Config
from logwatch.errors import ConfigError, SetupError
from logwatch.logging import configure_logging
from logwatch.monitor import LogMonitor
from logwatch.offsets import OffsetStore
from logwatch.sources import offset_key


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=Path("/etc/logwatch/config.yaml"),
    envvar="LOGWATCH_CONFIG",
    show_default=True,
    help="Config file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path, verbose: bool) -> None:
    """Scan new log lines and send threshold alerts."""
    ctx.ensure_object(dict)
    try:
        config = Config.from_file(config_path)
        if verbose:
            config.log_level = "DEBUG"
        config.validate()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e
    ctx.obj["config"] = config


def get_monitor(ctx: click.Context) -> LogMonitor:
    """Create directories, start logging and return a ready monitor."""
    config: Config = ctx.obj["config"]
    monitor = LogMonitor(config)
    try:
        monitor.prepare()
    except SetupError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e
    configure_logging("logwatch", level=config.log_level, log_file=config.log_file)
    return monitor


@main.command("run")
@click.pass_context
def run(ctx: click.Context) -> None:
    """Run every check once.

    Exits 0 even when alerts fire or a transport fails.
    """
    monitor = get_monitor(ctx)
    summary = monitor.run_once()
    if summary.report is not None and summary.report.snapshot_path is not None:
        click.echo(f"{summary.alert_count} alert(s), saved to {summary.report.snapshot_path}")


@main.command("watch")
@click.option("--interval", "-i", type=click.IntRange(min=1), help="Minutes between runs")
@click.pass_context
def watch(ctx: click.Context, interval: int | None) -> None:
    """Run every check now and then on a fixed interval.

    For hosts without cron or systemd timers.
    """
    monitor = get_monitor(ctx)
    monitor.watch(interval)


@main.command("test-alert")
@click.pass_context
def test_alert(ctx: click.Context) -> None:
    """Send a test alert through every enabled transport."""
    monitor = get_monitor(ctx)
    if monitor.send_test_alert():
        click.echo("Test alert sent successfully!")
    else:
        click.echo("Failed to send test alert")
        raise SystemExit(1)


# --- Offset Commands ---


@main.group()
def offsets() -> None:
    """Inspect or reset stored line offsets."""
    pass


@offsets.command("list")
@click.pass_context
def offsets_list(ctx: click.Context) -> None:
    """List stored offsets."""
    store = OffsetStore(ctx.obj["config"].state_dir)
    stored = store.list_offsets()
    if not stored:
        click.echo("No offsets stored.")
        return
    for key, value in stored.items():
        click.echo(f"{key}\t{value}")


@offsets.command("reset")
@click.argument("source")
@click.pass_context
def offsets_reset(ctx: click.Context, source: str) -> None:
    """Forget the offset of SOURCE (a log path or an offset key).

    An existing file, or any argument containing "/", is taken as a path.
    The next run reads the whole file again.
    """
    key = offset_key(source) if "/" in source or Path(source).exists() else source
    store = OffsetStore(ctx.obj["config"].state_dir)
    if store.reset(key):
        click.echo(f"Reset offset {key}")
    else:
        click.echo(f"No offset stored for {key}")


if __name__ == "__main__":
    main()
