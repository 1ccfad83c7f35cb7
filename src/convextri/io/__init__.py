"""Binary problem and result file I/O."""

from .problem import read_problem, write_problem
from .result import read_result, write_result

__all__ = ["read_problem", "read_result", "write_problem", "write_result"]
