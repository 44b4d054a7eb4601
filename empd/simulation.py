"""Step a building through prescribed boundary conditions.

This is a thin stand-in for a whole-building heat balance: zone air
states and inside surface temperatures are given per timestep instead of
being solved for.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .config import SimulationConfig
from .dataclasses import Building, EMPDSettings, SurfaceConditions, ZoneAirState
from .outputs import OutputRegistry
from .report import construction_report_lines
from .state import MoistureBalanceEMPD

logger = logging.getLogger(__name__)


@dataclass
class TimestepConditions:
    zones: Dict[str, ZoneAirState]
    surface_temperatures: Dict[str, float]  # inside face temperature by surface name [°C]
    h_mass_conv: Union[float, Dict[str, float]] = 0.003  # [m/s]
    barometric_pressure: Optional[float] = None  # [Pa]
    new_environment: bool = False
    iterations: int = 1  # engine calls per surface before the timestep converges

    def h_mass_conv_for(self, surface_name: str) -> float:
        if isinstance(self.h_mass_conv, dict):
            return self.h_mass_conv[surface_name]
        return self.h_mass_conv


@dataclass
class SurfaceSeries:
    rv_surface: List[float] = field(default_factory=list)
    rv_surf_layer: List[float] = field(default_factory=list)
    rv_deep_layer: List[float] = field(default_factory=list)
    rh: List[float] = field(default_factory=list)
    heat_flux_latent: List[float] = field(default_factory=list)
    temp_sat: List[Optional[float]] = field(default_factory=list)


def run_simulation(
    building: Building,
    settings: Iterable[EMPDSettings],
    steps: Sequence[TimestepConditions],
    config: Optional[SimulationConfig] = None,
) -> Dict[str, object]:
    """Run the EMPD model over ``steps`` and return per-surface time series.

    The first step always starts a new environment. Returns a dict suitable
    for :func:`empd.report.report` and JSON serialisation.
    """
    config = config or SimulationConfig()
    if not steps:
        raise ValueError("No timesteps provided")

    outputs = OutputRegistry()
    report_buf = io.StringIO()
    model = MoistureBalanceEMPD(building, settings, config, outputs=outputs, report_stream=report_buf)
    series = {s.name: SurfaceSeries() for s in building.surfaces if s.heat_transfer and not s.is_window}

    dt_hours = config.timestep_seconds / 3600.0
    times: List[float] = []
    try:
        for n, step in enumerate(steps):
            pb = step.barometric_pressure or config.barometric_pressure
            if n == 0 or step.new_environment:
                model.initialize(step.zones, pb, new_environment=True)
            for surf_id, surface in enumerate(building.surfaces):
                if surface.name not in series:
                    continue
                zone = step.zones[surface.zone]
                conditions = SurfaceConditions(
                    temp_surface_in=step.surface_temperatures.get(surface.name, zone.temperature),
                    temp_zone=zone.temperature,
                    h_mass_conv_in=step.h_mass_conv_for(surface.name),
                    zone_hum_rat=zone.humidity_ratio,
                    barometric_pressure=pb,
                )
                for _ in range(max(1, step.iterations)):
                    result = model.calculate(
                        surf_id, conditions, step.zones,
                        begin_environment=(n == 0 or step.new_environment),
                    )
                state = model.state(surf_id)
                out = series[surface.name]
                out.rv_surface.append(result.rv_surface)
                out.rv_surf_layer.append(state.rv_surf_layer)
                out.rv_deep_layer.append(state.rv_deep_layer)
                out.rh.append(state.rh_report)
                out.heat_flux_latent.append(result.heat_flux_latent)
                out.temp_sat.append(result.temp_sat)
            for surf_id in model.surface_ids:
                if building.surfaces[surf_id].heat_transfer:
                    model.update(surf_id)
            times.append((n + 1) * dt_hours)
            outputs.sample(times[-1])
    finally:
        diagnostics = model.diagnostics
        model.close()
    logger.info("Simulated %d timestep(s) for %d surface(s)", len(times), len(series))

    return {
        "timestep_seconds": config.timestep_seconds,
        "time_hours": times,
        "surfaces": {name: vars(s) for name, s in series.items()},
        "outputs": [
            {
                "name": v.name,
                "units": v.units,
                "key": v.key,
                "index_type": v.index_type,
                "store_type": v.store_type,
                "values": v.values,
            }
            for v in outputs.variables
        ],
        "constructions": list(construction_report_lines(building)),
        "construction_report": report_buf.getvalue(),
        "diagnostics": diagnostics.messages() if diagnostics is not None else [],
    }


def steps_from_dict(entries: Iterable[Dict[str, object]]) -> List[TimestepConditions]:
    """Build timestep conditions from plain dicts (JSON/YAML).

    Each entry has ``zones`` ({name: {temperature, humidity_ratio}}),
    ``surface_temperatures`` and optionally ``h_mass_conv``,
    ``barometric_pressure``, ``new_environment``, ``iterations`` and
    ``repeat`` (number of identical timesteps).
    """
    steps: List[TimestepConditions] = []
    for idx, entry in enumerate(entries):
        try:
            zones = {
                name: ZoneAirState(float(z["temperature"]), float(z["humidity_ratio"]))
                for name, z in dict(entry["zones"]).items()
            }
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid zone conditions in step {idx}: {exc}") from exc
        h_mass = entry.get("h_mass_conv", 0.003)
        for r in range(int(entry.get("repeat", 1))):
            steps.append(TimestepConditions(
                zones=zones,
                surface_temperatures={k: float(v) for k, v in dict(entry.get("surface_temperatures", {})).items()},
                h_mass_conv=dict(h_mass) if isinstance(h_mass, dict) else float(h_mass),
                barometric_pressure=entry.get("barometric_pressure"),
                new_environment=bool(entry.get("new_environment", False)) and r == 0,
                iterations=int(entry.get("iterations", 1)),
            ))
    return steps
