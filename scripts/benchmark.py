"""Wall-clock benchmark of the wavefront solver across polygon sizes and worker counts.

Triangulates seeded random convex polygons and reports the best of
``--repeats`` runs for each (size, workers) pair, with speed-up relative to the
first worker count listed.

Usage::

    python scripts/benchmark.py --sizes 200 500 1000 --workers 1 2 4 8
"""

from __future__ import annotations

import argparse
import csv
import logging
import time
from pathlib import Path

import numpy as np

from convextri.synthetic import random_convex_polygon
from convextri.triangulation import triangulate

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark convex polygon triangulation.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[200, 500, 1000],
        help="Polygon vertex counts to benchmark.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        nargs="+",
        default=[1, 2, 4],
        help="Worker thread counts to compare.",
    )
    parser.add_argument(
        "--repeats", type=int, default=3, help="Runs per configuration."
    )
    parser.add_argument(
        "--dtype",
        choices=["float32", "float64"],
        default="float32",
        help="Cost table precision.",
    )
    parser.add_argument("--seed", type=int, default=0, help="Polygon RNG seed.")
    parser.add_argument(
        "--csv", type=Path, default=None, help="Optional CSV output path."
    )
    return parser.parse_args()


def _best_time(
    points: np.ndarray, workers: int, dtype: str, repeats: int
) -> tuple[float, float]:
    """Return (best seconds, cost) over *repeats* runs."""
    best = float("inf")
    cost = 0.0
    for _ in range(repeats):
        start = time.perf_counter()
        result = triangulate(points, workers=workers, dtype=dtype)
        best = min(best, time.perf_counter() - start)
        cost = result.cost
    return best, cost


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    rows: list[dict[str, object]] = []
    for n in args.sizes:
        points = random_convex_polygon(n, rng=np.random.default_rng(args.seed))
        baseline: float | None = None
        for workers in args.workers:
            seconds, cost = _best_time(points, workers, args.dtype, args.repeats)
            if baseline is None:
                baseline = seconds
            speedup = baseline / seconds if seconds > 0 else float("nan")
            logger.info(
                "n=%6d workers=%3d  %9.4fs  cost=%.6g  speed-up=%.2fx",
                n,
                workers,
                seconds,
                cost,
                speedup,
            )
            rows.append(
                {
                    "n": n,
                    "workers": workers,
                    "seconds": seconds,
                    "cost": cost,
                    "speedup": speedup,
                }
            )

    if args.csv is not None:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        with args.csv.open("w", newline="") as fh:
            writer = csv.DictWriter(fh, fieldnames=list(rows[0]) if rows else ["n"])
            writer.writeheader()
            writer.writerows(rows)
        logger.info("Wrote %d rows to %s", len(rows), args.csv)


if __name__ == "__main__":
    main()
