"""Per-surface EMPD state and its lifecycle.

:class:`MoistureBalanceEMPD` owns one :class:`SurfaceMoistureState` per
surface of a building. The host allocates and seeds it at the start of
every environment, calls :meth:`MoistureBalanceEMPD.calculate` for each
surface as often as its own iteration needs, and calls
:meth:`MoistureBalanceEMPD.update` once per surface after the timestep has
converged.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, TextIO

from .config import SimulationConfig
from .core import calc_moisture_balance_empd
from .dataclasses import (
    Building,
    EMPDResult,
    EMPDSettings,
    SurfaceConditions,
    SurfaceMoistureState,
    ZoneAirState,
)
from .outputs import OutputRegistry
from .psychrometrics import rhov_from_tdb_w_pb, room_air_vapor_density
from .validation import get_moisture_balance_empd_input

logger = logging.getLogger(__name__)

# Surface-layer mass transfer coefficient seeds [m/s]
HM_SEED_FIRST = 0.003
HM_SEED = 0.0003

OUTPUT_VARIABLES = (
    ("EMPD Surface Inside Face Water Vapor Density", "kg/m3", "rho_vapor_report"),
    ("EMPD Surface Inside Face Humidity Ratio", "kgWater/kgDryAir", "hum_rat_report"),
    ("EMPD Surface Inside Face Relative Humidity", "%", "rh_report"),
)


class MoistureBalanceEMPD:
    def __init__(
        self,
        building: Building,
        settings: Iterable[EMPDSettings],
        config: Optional[SimulationConfig] = None,
        outputs: Optional[OutputRegistry] = None,
        report_stream: Optional[TextIO] = None,
    ) -> None:
        self.building = building
        self.settings = list(settings)
        self.config = config or SimulationConfig()
        self.outputs = outputs
        self.report_stream = report_stream
        self.diagnostics = None
        self._states: Optional[List[SurfaceMoistureState]] = None
        self._closed = False
        self._seed_count = 0
        self._environment_seeded = False

    # -- lifecycle -------------------------------------------------------

    @property
    def allocated(self) -> bool:
        return self._states is not None

    def allocate(self) -> None:
        """Allocate states, process EMPD input and register outputs. Runs once."""
        if self._closed:
            raise RuntimeError("EMPD moisture balance has been closed")
        if self._states is not None:
            return
        report = self.report_stream if self.config.report_constructions else None
        self.diagnostics = get_moisture_balance_empd_input(
            self.building,
            self.settings,
            display_extra_warnings=self.config.display_extra_warnings,
            report_stream=report,
        )
        self.diagnostics.raise_for_errors(
            "GetMoistureBalanceEMPDInput: Errors found getting EMPD material properties, program terminated."
        )
        self._states = [SurfaceMoistureState() for _ in self.building.surfaces]

        if self.outputs is not None:
            for surf_id, surface in enumerate(self.building.surfaces):
                if not surface.heat_transfer or surface.is_window:
                    continue
                state = self._states[surf_id]
                for name, units, attr in OUTPUT_VARIABLES:
                    self.outputs.register(
                        name, units, surface.name,
                        lambda s=state, a=attr: getattr(s, a),
                        index_type="Zone", store_type="State",
                    )
        logger.info("Allocated EMPD state for %d surface(s)", len(self._states))

    def seed(self, zone_states: Dict[str, ZoneAirState], barometric_pressure: Optional[float] = None) -> None:
        """Seed every heat-transfer surface from the current zone air conditions."""
        states = self._require_states()
        pb = self.config.barometric_pressure if barometric_pressure is None else barometric_pressure
        hm_seed = HM_SEED_FIRST if self._seed_count == 0 else HM_SEED
        for surf_id, surface in enumerate(self.building.surfaces):
            if not surface.heat_transfer:
                continue
            zone = zone_states[surface.zone]
            rho_vapor_air_in = zone.vapor_density
            if rho_vapor_air_in is None:
                rho_vapor_air_in = room_air_vapor_density(zone.temperature, zone.humidity_ratio, pb)
            if zone.humidity_ratio == 0.0:
                # zone humidity not yet initialised
                rv_surface = rho_vapor_air_in
            else:
                rv_surface = rhov_from_tdb_w_pb(zone.temperature, zone.humidity_ratio, pb)
            state = states[surf_id]
            state.rv_surface = state.rv_surface_old = rv_surface
            state.rv_surf_layer = state.rv_surf_layer_old = rho_vapor_air_in
            state.rv_deep_layer = state.rv_deep_layer_old = rho_vapor_air_in
            state.hm_surf_layer = hm_seed
            state.mass_flux_surf_layer = 0.0
            state.mass_flux_deep_layer = 0.0
            state.mass_flux_zone = 0.0
        self._seed_count += 1

    @property
    def seed_count(self) -> int:
        return self._seed_count

    def initialize(
        self,
        zone_states: Dict[str, ZoneAirState],
        barometric_pressure: Optional[float] = None,
        new_environment: bool = True,
    ) -> None:
        """Allocate on first use, then seed all surfaces.

        ``new_environment`` marks the start of an environment (run period or
        design day) so that :meth:`calculate` does not seed again.
        """
        first = not self.allocated
        self.allocate()
        if first:
            for state in self._states:
                state.rho_vapor_report = 0.0
                state.hum_rat_report = 0.0
                state.rh_report = 0.0
                state.heat_flux_latent = 0.0
        self.seed(zone_states, barometric_pressure)
        if new_environment:
            self._environment_seeded = True

    def update(self, surf_id: int) -> None:
        """Move the converged values of a surface into its previous-timestep slots."""
        state = self._require_states()[surf_id]
        state.rv_surface_old = state.rv_surface
        state.rv_deep_layer_old = state.rv_deep_layer
        state.rv_surf_layer_old = state.rv_surf_layer

    def close(self) -> None:
        """Release all per-surface state."""
        self._states = None
        self._closed = True

    # -- evaluation ------------------------------------------------------

    def calculate(
        self,
        surf_id: int,
        conditions: SurfaceConditions,
        zone_states: Optional[Dict[str, ZoneAirState]] = None,
        begin_environment: bool = False,
    ) -> EMPDResult:
        """Run the EMPD balance for one surface at the current timestep.

        When ``begin_environment`` is set and the environment has not been
        seeded yet, the context initialises itself from ``zone_states``
        first. A call without ``begin_environment`` re-arms that check.
        """
        if begin_environment and not self._environment_seeded:
            if zone_states is None:
                raise ValueError("zone_states are required to initialise a new environment")
            self.initialize(zone_states, conditions.barometric_pressure)
        if not begin_environment:
            self._environment_seeded = False
        state = self._require_states()[surf_id]
        return calc_moisture_balance_empd(
            self.building.surfaces[surf_id], state, conditions, self.config.timestep_seconds
        )

    def state(self, surf_id: int) -> SurfaceMoistureState:
        return self._require_states()[surf_id]

    @property
    def surface_ids(self) -> List[int]:
        return list(range(len(self.building.surfaces)))

    def _require_states(self) -> List[SurfaceMoistureState]:
        if self._states is None:
            if self._closed:
                raise RuntimeError("EMPD moisture balance has been closed")
            raise RuntimeError("EMPD moisture balance used before initialize()")
        return self._states
