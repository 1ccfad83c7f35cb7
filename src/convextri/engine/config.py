"""Frozen dataclass config hierarchy for the triangulation pipeline.

Loading precedence: defaults -> YAML file -> CLI overrides -> freeze.

The frozen guarantee prevents accidental mutation during execution. When a
run has an output directory, the serialized config is written there as the
first artifact so the run can be reproduced.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from convextri.triangulation.solver import DEFAULT_CHUNK_SIZE
from convextri.triangulation.table import SUPPORTED_DTYPES

# ---------------------------------------------------------------------------
# Section config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolverConfig:
    """Config for the wavefront solver.

    Attributes:
        workers: Worker threads for the table fill. None uses the CPU count.
        dtype: Table arithmetic, "float32" (matches the file format) or
            "float64".
        chunk_size: Cells per pool task within one width level.
    """

    workers: int | None = None
    dtype: str = "float32"
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.dtype not in SUPPORTED_DTYPES:
            raise ValueError(
                f"Unknown solver dtype {self.dtype!r}. "
                f"Valid values: {list(SUPPORTED_DTYPES)}"
            )
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"solver.workers must be positive, got {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(
                f"solver.chunk_size must be positive, got {self.chunk_size}"
            )


@dataclass(frozen=True)
class RenderConfig:
    """Config for the SVG render stage.

    Attributes:
        width: Image width in pixels.
        seed: Seed for the triangle fill colors.
    """

    width: int = 1600
    seed: int = 0


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level frozen config for a full pipeline run.

    Attributes:
        run_id: Unique run identifier (timestamp-based by default).
        output_dir: Directory for run artifacts (config.yaml, timing.txt).
            Empty disables artifacts.
        input_path: Binary problem file to read.
        result_path: Binary result file to write. Empty skips writing.
        image_path: SVG file to render. Empty skips rendering.
        solver: Solver config.
        render: Render config.
    """

    run_id: str = ""
    output_dir: str = ""
    input_path: str = ""
    result_path: str = ""
    image_path: str = ""
    solver: SolverConfig = dataclasses.field(default_factory=SolverConfig)
    render: RenderConfig = dataclasses.field(default_factory=RenderConfig)


_SECTIONS: dict[str, type] = {"solver": SolverConfig, "render": RenderConfig}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _generate_run_id() -> str:
    """Return a run identifier of the form "run_YYYYMMDD_HHMMSS"."""
    return f"run_{datetime.now():%Y%m%d_%H%M%S}"


def _flatten(nested: dict[str, Any]) -> dict[str, Any]:
    """Flatten one level of nesting to dot-notation keys.

    ``{"solver": {"workers": 4}}`` becomes ``{"solver.workers": 4}``; keys
    that are already dotted pass through.
    """
    flat: dict[str, Any] = {}
    for key, value in nested.items():
        if isinstance(value, dict):
            for subkey, subvalue in value.items():
                flat[f"{key}.{subkey}"] = subvalue
        else:
            flat[key] = value
    return flat


def _bucket(flat: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Group dot-notation keys by section; undotted keys go to "__top__"."""
    buckets: dict[str, dict[str, Any]] = {"__top__": {}}
    for key, value in flat.items():
        section, dot, field_name = key.partition(".")
        if dot:
            buckets.setdefault(section, {})[field_name] = value
        else:
            buckets["__top__"][key] = value
    return buckets


def _coerce(cls: type, values: dict[str, Any]) -> dict[str, Any]:
    """Validate field names for *cls* and convert string values to field types.

    CLI overrides arrive as strings ("4", "none"); YAML values are already
    typed and pass through unchanged.

    Raises:
        ValueError: If a key is not a field of *cls* or a value cannot be
            converted.
    """
    field_types = {f.name: str(f.type) for f in dataclasses.fields(cls)}
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if key not in field_types:
            raise ValueError(
                f"Unknown {cls.__name__} field {key!r}. "
                f"Valid fields: {sorted(field_types)}"
            )
        type_name = field_types[key]
        if isinstance(value, str):
            if "None" in type_name and value.lower() in ("none", "null", ""):
                value = None
            elif type_name.startswith("int"):
                try:
                    value = int(value)
                except ValueError as exc:
                    raise ValueError(
                        f"{cls.__name__}.{key} expects an integer, got {value!r}"
                    ) from exc
        coerced[key] = value
    return coerced


# ---------------------------------------------------------------------------
# Public factory
# ---------------------------------------------------------------------------


def load_config(
    yaml_path: str | Path | None = None,
    *,
    cli_overrides: dict[str, Any] | None = None,
    run_id: str | None = None,
) -> PipelineConfig:
    """Construct a frozen :class:`PipelineConfig` using layered overrides.

    Loading precedence (lowest → highest priority):

    1. Dataclass field defaults
    2. YAML file (*yaml_path*)
    3. CLI overrides (*cli_overrides*)
    4. Freeze

    CLI overrides may use dot-notation keys ("solver.workers") or nested
    dicts ({"solver": {"workers": 4}}).

    Args:
        yaml_path: Optional path to a YAML config file.
        cli_overrides: Optional dict of CLI overrides (highest precedence).
        run_id: Explicit run identifier. Auto-generated if not provided.

    Returns:
        Frozen :class:`PipelineConfig` with all overrides applied.

    Raises:
        ValueError: On unknown sections or fields, or invalid values.
    """
    layers: list[dict[str, Any]] = []
    if yaml_path is not None:
        with Path(yaml_path).open() as fh:
            raw: dict[str, Any] = yaml.safe_load(fh) or {}
        layers.append(raw)
    if cli_overrides is not None:
        layers.append(cli_overrides)

    merged: dict[str, dict[str, Any]] = {"__top__": {}}
    for layer in layers:
        for section, values in _bucket(_flatten(layer)).items():
            merged.setdefault(section, {}).update(values)

    unknown = set(merged) - set(_SECTIONS) - {"__top__"}
    if unknown:
        raise ValueError(
            f"Unknown config section(s) {sorted(unknown)}. "
            f"Valid sections: {sorted(_SECTIONS)}"
        )

    for name in _SECTIONS:
        if name in merged["__top__"]:
            raise ValueError(f"Config section {name!r} must be a mapping")

    top_kwargs = _coerce(PipelineConfig, merged["__top__"])
    file_run_id = top_kwargs.pop("run_id", None)
    resolved_run_id = run_id or file_run_id or _generate_run_id()
    sections = {
        name: cls(**_coerce(cls, merged.get(name, {})))
        for name, cls in _SECTIONS.items()
    }

    return PipelineConfig(run_id=resolved_run_id, **top_kwargs, **sections)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def serialize_config(config: PipelineConfig) -> str:
    """Serialize *config* to a YAML string.

    Args:
        config: Frozen pipeline config to serialize.

    Returns:
        YAML string that :func:`load_config` reads back to an equal config.
    """
    return yaml.dump(
        dataclasses.asdict(config), default_flow_style=False, sort_keys=True
    )
