"""Binary reader and writer for polygon problem files.

Layout (little-endian)::

    n        int32
    points   n x (x float32, y float32)

Vertices are stored in counter-clockwise order.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from convextri.errors import InvalidInputError

_COUNT_DTYPE = np.dtype("<i4")
_COORD_DTYPE = np.dtype("<f4")


def read_problem(path: str | Path) -> np.ndarray:
    """Read a polygon from a binary problem file.

    Args:
        path: Path to the problem file.

    Returns:
        Array of shape (n, 2), float32.

    Raises:
        FileNotFoundError: If *path* does not exist.
        InvalidInputError: If the stored vertex count is negative.
        ValueError: If the file is shorter than the header declares.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Cannot open the input file '{path}' to read the problem."
        )

    raw = path.read_bytes()
    if len(raw) < _COUNT_DTYPE.itemsize:
        raise ValueError(f"Problem file '{path}' is missing its vertex count header")

    n = int(np.frombuffer(raw, dtype=_COUNT_DTYPE, count=1)[0])
    if n < 0:
        raise InvalidInputError(f"Problem file '{path}' declares {n} vertices")

    expected = _COUNT_DTYPE.itemsize + n * 2 * _COORD_DTYPE.itemsize
    if len(raw) < expected:
        raise ValueError(
            f"Problem file '{path}' is truncated: {n} vertices need "
            f"{expected} bytes, found {len(raw)}"
        )

    if n == 0:
        return np.empty((0, 2), dtype=np.float32)

    coords = np.frombuffer(
        raw, dtype=_COORD_DTYPE, count=2 * n, offset=_COUNT_DTYPE.itemsize
    )
    return coords.reshape(n, 2).astype(np.float32)


def write_problem(path: str | Path, points: np.ndarray) -> None:
    """Write a polygon to a binary problem file.

    Args:
        path: Destination path. Parent directories are created.
        points: Vertex array of shape (n, 2).
    """
    coords = np.asarray(points, dtype=_COORD_DTYPE).reshape(-1, 2)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as fh:
        fh.write(np.array([coords.shape[0]], dtype=_COUNT_DTYPE).tobytes())
        fh.write(coords.tobytes())
