"""convextri CLI -- thin wrapper over TriangulationPipeline."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
import numpy as np

from convextri.engine import (
    ConsoleObserver,
    PipelineConfig,
    TimingObserver,
    TriangulationPipeline,
    load_config,
    serialize_config,
)
from convextri.engine.observers import Observer
from convextri.engine.pipeline import build_stages
from convextri.io import write_problem
from convextri.synthetic import random_convex_polygon, regular_polygon
from convextri.triangulation.table import SUPPORTED_DTYPES

# Process exit statuses
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILURE = 2


def _build_observers(
    config: PipelineConfig,
    verbose: bool,
) -> list[Observer]:
    """Assemble the observer list for a run.

    Args:
        config: Pipeline configuration (used for the artifact directory).
        verbose: Whether the console observer prints per-stage timings.

    Returns:
        Console and timing observers; the timing report is written to
        ``<output_dir>/timing.txt`` when an output directory is configured.
    """
    timing_path = (
        Path(config.output_dir).expanduser() / "timing.txt"
        if config.output_dir
        else None
    )
    return [
        ConsoleObserver(verbose=verbose),
        TimingObserver(output_path=timing_path),
    ]


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """convextri -- minimum-weight triangulation of convex polygons."""


@cli.command()
@click.argument("input_path", type=click.Path(dir_okay=False))
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option(
    "--output-image",
    "-of",
    "output_image",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also render the triangulation to this SVG file.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML config file.",
)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    help="Config override as key=val (e.g. --set solver.chunk_size=32).",
)
@click.option(
    "--workers",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads for the table fill (default: CPU count).",
)
@click.option(
    "--dtype",
    type=click.Choice(list(SUPPORTED_DTYPES)),
    default=None,
    help="Floating-point precision of the cost table.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for run artifacts (config.yaml, timing.txt).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Verbose output.")
def run(
    input_path: str,
    output_path: str,
    output_image: str | None,
    config_path: str | None,
    overrides: tuple[str, ...],
    workers: int | None,
    dtype: str | None,
    output_dir: str | None,
    verbose: bool,
) -> None:
    """Triangulate the polygon in INPUT_PATH and write the result to OUTPUT_PATH."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # 1. --set overrides, then the dedicated options on top
    cli_overrides: dict[str, Any] = {}
    for item in overrides:
        key, sep, value = item.partition("=")
        if not key or not sep:
            raise click.BadParameter(
                f"expected key=val, got {item!r}", param_hint="--set"
            )
        cli_overrides[key] = value

    cli_overrides["input_path"] = input_path
    cli_overrides["result_path"] = output_path
    if output_image:
        cli_overrides["image_path"] = output_image
    if workers is not None:
        cli_overrides["solver.workers"] = workers
    if dtype is not None:
        cli_overrides["solver.dtype"] = dtype
    if output_dir is not None:
        cli_overrides["output_dir"] = output_dir

    # 2. Load config, build and run the pipeline
    try:
        pipeline_config = load_config(
            yaml_path=config_path, cli_overrides=cli_overrides
        )
        stages = build_stages(pipeline_config)
        observers = _build_observers(
            config=pipeline_config,
            verbose=verbose,
        )
        pipeline = TriangulationPipeline(
            stages=stages,
            config=pipeline_config,
            observers=observers,
        )
        context = pipeline.run()
    except Exception as exc:
        sys.stderr.write(f"Exception caught: {exc}\n")
        sys.exit(EXIT_FAILURE)

    compute_seconds = context.stage_timing.get(
        "LoadProblemStage", 0.0
    ) + context.stage_timing.get("TriangulationStage", 0.0)
    click.echo(f"Cost of triangulation: {context.cost:.6g}")
    click.echo(f"computational time: {compute_seconds:.6g} s")


@cli.command()
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option(
    "--points",
    "-n",
    "n_points",
    required=True,
    type=click.IntRange(min=0),
    help="Number of polygon vertices.",
)
@click.option("--seed", type=int, default=None, help="Random seed.")
@click.option(
    "--regular",
    is_flag=True,
    default=False,
    help="Generate a regular polygon instead of a random convex one.",
)
@click.option("--radius", type=float, default=1.0, help="Circumradius.")
def generate(
    output_path: str,
    n_points: int,
    seed: int | None,
    regular: bool,
    radius: float,
) -> None:
    """Write a synthetic convex polygon to OUTPUT_PATH as a problem file."""
    if regular:
        points = regular_polygon(n_points, radius=radius)
    else:
        points = random_convex_polygon(
            n_points, rng=np.random.default_rng(seed), radius=radius
        )
    write_problem(output_path, points)
    click.echo(f"Wrote {n_points} vertices to {output_path}")


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    default="convextri.yaml",
    type=click.Path(),
    help="Output file path (default: convextri.yaml).",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite existing file.",
)
def init_config(output: str, force: bool) -> None:
    """Generate a template YAML config file with all defaults."""
    output_path = Path(output)
    if output_path.exists() and not force:
        raise click.ClickException(
            f"'{output}' already exists. Use --force to overwrite."
        )
    output_path.write_text(serialize_config(PipelineConfig()))
    click.echo(f"Config written to {output}")


def main(args: list[str] | None = None) -> None:
    """Entry point for the ``convextri`` console script.

    Malformed arguments exit with status 1; a failed run exits with 2.
    Without arguments the help page is printed and the exit status is 0.
    """
    argv = sys.argv[1:] if args is None else list(args)
    if not argv:
        with click.Context(cli, info_name="convextri") as ctx:
            click.echo(cli.get_help(ctx))
        sys.exit(EXIT_OK)

    try:
        status = cli.main(args=argv, prog_name="convextri", standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        sys.exit(EXIT_USAGE)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(EXIT_USAGE)
    sys.exit(status if isinstance(status, int) else EXIT_OK)
