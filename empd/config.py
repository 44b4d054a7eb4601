"""Simulation settings and building description loading.

A building description is a mapping (usually read from YAML or JSON) with
``materials``, ``constructions``, ``zones``, ``surfaces`` and
``empd_settings`` sections and an optional ``simulation`` section. Settings
may also come from a CSV file named by ``empd_settings_csv``, resolved
against the directory of the description file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from .dataclasses import (
    Building,
    Construction,
    EMPDSettings,
    HeatTransferAlgorithm,
    Material,
    MaterialGroup,
    Surface,
    SurfaceClass,
    Zone,
)
from .materials import load_empd_settings

EMPD_FIELDS = (
    "mu",
    "a",
    "b",
    "c",
    "d",
    "surface_depth",
    "deep_depth",
    "coating_thickness",
    "mu_coating",
)


def validate_positive(value: float, name: str) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON or YAML file into a dict."""
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    suffix = file_path.suffix.lower()
    with open(file_path, "r", encoding="utf-8") as f:
        if suffix == ".json":
            return json.load(f)
        elif suffix in [".yaml", ".yml"]:
            return yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported configuration file format: {suffix}")


@dataclass
class SimulationConfig:
    timesteps_per_hour: int = 4
    barometric_pressure: float = 101325.0  # [Pa]
    display_extra_warnings: bool = False
    report_constructions: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        validate_positive(self.timesteps_per_hour, "timesteps_per_hour")
        validate_positive(self.barometric_pressure, "barometric_pressure")
        if 60 % int(self.timesteps_per_hour) != 0:
            raise ValueError(
                f"timesteps_per_hour must divide evenly into 60, got {self.timesteps_per_hour}"
            )

    @property
    def timestep_seconds(self) -> float:
        """Zone timestep length; the timestep is a fraction of an hour."""
        return 3600.0 / self.timesteps_per_hour

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        return cls(**(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _material(entry: Dict[str, Any]) -> Material:
    try:
        name = str(entry["name"]).strip()
    except KeyError:
        raise ValueError(f"Material entry without a name: {entry}")
    return Material(
        name=name,
        group=MaterialGroup(str(entry.get("group", "regular")).lower()),
        r_only=bool(entry.get("r_only", False)),
        thickness=float(entry.get("thickness", 0.0)),
        conductivity=float(entry.get("conductivity", 0.0)),
        density=float(entry.get("density", 0.0)),
        specific_heat=float(entry.get("specific_heat", 0.0)),
    )


def empd_settings_from_dict(entry: Dict[str, Any]) -> EMPDSettings:
    missing = [f for f in ("material",) + EMPD_FIELDS if f not in entry]
    if missing:
        raise ValueError(f"EMPD settings entry is missing {', '.join(missing)}: {entry}")
    return EMPDSettings(str(entry["material"]), *(float(entry[f]) for f in EMPD_FIELDS))


def load_building(source: Union[str, Path, Dict[str, Any]]) -> Tuple[Building, List[EMPDSettings], SimulationConfig]:
    """Build a :class:`Building`, its EMPD settings objects and the simulation settings.

    Layers reference materials, surfaces reference constructions and zones
    by name; dangling references raise ``ValueError``.
    """
    data = source if isinstance(source, dict) else load_config_file(source)

    building = Building()
    for entry in data.get("materials", []):
        material = _material(entry)
        building.materials[material.name] = material

    for entry in data.get("constructions", []):
        layers: List[Material] = []
        for layer_name in entry.get("layers", []):
            if layer_name not in building.materials:
                raise ValueError(f"Construction {entry.get('name')!r} references unknown material {layer_name!r}")
            layers.append(building.materials[layer_name])
        if not layers:
            raise ValueError(f"Construction {entry.get('name')!r} has no layers")
        construction = Construction(str(entry["name"]), layers, bool(entry.get("is_window", False)))
        building.constructions[construction.name] = construction

    building.zones = [Zone(str(z["name"]) if isinstance(z, dict) else str(z)) for z in data.get("zones", [])]
    zone_names = {z.name for z in building.zones}

    for entry in data.get("surfaces", []):
        constr_name = entry.get("construction")
        if constr_name not in building.constructions:
            raise ValueError(f"Surface {entry.get('name')!r} references unknown construction {constr_name!r}")
        if entry.get("zone") not in zone_names:
            raise ValueError(f"Surface {entry.get('name')!r} references unknown zone {entry.get('zone')!r}")
        building.surfaces.append(Surface(
            name=str(entry["name"]),
            zone=str(entry["zone"]),
            construction=building.constructions[constr_name],
            heat_transfer=bool(entry.get("heat_transfer", True)),
            surface_class=SurfaceClass(str(entry.get("class", "wall")).lower()),
            algorithm=HeatTransferAlgorithm(str(entry.get("algorithm", "empd")).lower()),
            interzone=bool(entry.get("interzone", False)),
        ))

    settings = [empd_settings_from_dict(e) for e in data.get("empd_settings", [])]
    csv_name = data.get("empd_settings_csv")
    if csv_name:
        csv_path = Path(csv_name)
        if not csv_path.is_absolute() and not isinstance(source, dict):
            csv_path = Path(source).parent / csv_path
        if not csv_path.exists():
            raise FileNotFoundError(f"EMPD settings file not found: {csv_path}")
        settings.extend(load_empd_settings(csv_path))
    config = SimulationConfig.from_dict(data.get("simulation", {}))
    return building, settings, config
