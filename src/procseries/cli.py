"""CLI commands for procseries."""

import time
from pathlib import Path

import click

from procseries.codec import dumps_raw, read_raw_lines
from procseries.config import Config
from procseries.errors import ProcseriesError
from procseries.logging import configure
from procseries.sampler import ProcessSampler
from procseries.view import ProcessesView


@click.group()
@click.version_option(package_name="procseries")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default ~/.config/procseries/config.toml)",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """Per-process CPU utilization series from cumulative tick samples."""
    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    configure(config.logging)
    ctx.obj = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append the raw snapshot to this JSON-lines file",
)
def sample(output: Path | None) -> None:
    """Take one raw snapshot of all processes."""
    sampler = ProcessSampler()
    sampler.prepare()
    try:
        raw = sampler.collect_raw()
    except ProcseriesError as e:
        raise click.ClickException(str(e)) from e

    line = dumps_raw(raw)
    processes = raw.data.count("\n")
    if output is None:
        click.echo(line)
        return
    with open(output, "a") as f:
        f.write(line + "\n")
    click.echo(f"Appended snapshot of {processes} processes to {output}", err=True)


@main.command()
@click.argument("raw_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def derive(raw_file: Path) -> None:
    """Print the `values` JSON for a file of raw snapshots."""
    view = ProcessesView()
    try:
        with open(raw_file) as f:
            raws = read_raw_lines(f)
        snapshots = [view.process_raw_data(raw) for raw in raws]
        click.echo(view.values(snapshots))
    except ProcseriesError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.option("--count", "-n", type=click.IntRange(min=1), default=None, help="Snapshots to take")
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between snapshots",
)
@click.pass_obj
def top(config: Config, count: int | None, interval: float | None) -> None:
    """Sample repeatedly and print the `values` JSON."""
    count = count or config.sampling.count
    interval = interval or config.sampling.interval

    sampler = ProcessSampler()
    sampler.prepare()
    view = ProcessesView(sampler.tick_rate)
    try:
        snapshots = []
        for i in range(count):
            if i:
                time.sleep(interval)
            snapshots.append(sampler.collect())
        click.echo(view.values(snapshots))
    except ProcseriesError as e:
        raise click.ClickException(str(e)) from e


@main.command()
def calls() -> None:
    """List the query operations served."""
    for call in ProcessesView().get_calls():
        click.echo(call)
