"""convextri -- minimum-weight triangulation of convex polygons."""

from convextri.geometry import Point, distance
from convextri.triangulation import TriangulationResult, triangulate

__version__ = "0.1.0"

__all__ = ["Point", "TriangulationResult", "__version__", "distance", "triangulate"]
