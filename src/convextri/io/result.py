"""Binary reader and writer for triangulation result files.

Layout (little-endian)::

    cost        float32
    triangles   m x (i int32, k int32, j int32)

For an n-vertex polygon ``m = n - 2`` (or 0 when n < 3).
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

_COST_DTYPE = np.dtype("<f4")
_INDEX_DTYPE = np.dtype("<i4")
_TRIANGLE_BYTES = 3 * _INDEX_DTYPE.itemsize


def write_result(path: str | Path, cost: float, triangles: np.ndarray) -> None:
    """Write a triangulation result.

    Args:
        path: Destination path. Parent directories are created.
        cost: Total triangulation cost.
        triangles: Vertex index triples, shape (m, 3).
    """
    tri = np.asarray(triangles, dtype=_INDEX_DTYPE).reshape(-1, 3)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as fh:
        fh.write(np.array([cost], dtype=_COST_DTYPE).tobytes())
        fh.write(tri.tobytes())


def read_result(
    path: str | Path, n_points: int | None = None
) -> tuple[float, np.ndarray]:
    """Read a triangulation result.

    Args:
        path: Path to the result file.
        n_points: Vertex count of the triangulated polygon. When given,
            exactly ``max(n_points - 2, 0)`` triangles are read; otherwise
            the count is inferred from the file size, which must then hold
            a whole number of triangles.

    Returns:
        Tuple of (cost, triangles) where triangles has shape (m, 3), int32.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file holds fewer bytes than required, or a
            partial triangle when the count is inferred.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Cannot open the result file '{path}' to read the result."
        )

    raw = path.read_bytes()
    if len(raw) < _COST_DTYPE.itemsize:
        raise ValueError(f"Result file '{path}' is missing its cost field")

    body = len(raw) - _COST_DTYPE.itemsize
    if n_points is None:
        if body % _TRIANGLE_BYTES:
            raise ValueError(
                f"Result file '{path}' has {body % _TRIANGLE_BYTES} trailing bytes "
                f"after its last whole triangle"
            )
        n_triangles = body // _TRIANGLE_BYTES
    else:
        n_triangles = max(n_points - 2, 0)
        if body < n_triangles * _TRIANGLE_BYTES:
            raise ValueError(
                f"Result file '{path}' is truncated: expected {n_triangles} "
                f"triangles, found {body // _TRIANGLE_BYTES}"
            )

    cost = float(np.frombuffer(raw, dtype=_COST_DTYPE, count=1)[0])
    if n_triangles == 0:
        return cost, np.empty((0, 3), dtype=np.int32)

    triangles = np.frombuffer(
        raw,
        dtype=_INDEX_DTYPE,
        count=3 * n_triangles,
        offset=_COST_DTYPE.itemsize,
    )
    return cost, triangles.reshape(n_triangles, 3).astype(np.int32)
