from .dataclasses import EMPDProperties, EMPDResult, Surface, SurfaceConditions, SurfaceMoistureState
from .psychrometrics import (
    KELVIN,
    LATENT_HEAT,
    R_WATER_VAPOR,
    hum_rat_from_pv,
    psat_empd,
    rh_empd,
    rh_from_tdb_rhov,
    rhov_from_tdb_rh,
    rhov_from_tdb_w_pb,
    room_air_vapor_density,
    saturation_temperature,
)
import logging
import math
from typing import Tuple

logger = logging.getLogger(__name__)


def _air_vapor_permeability(T: float, pb: float) -> float:
    """Vapor permeability of still air 2e-7·T^0.81/P in kg/(m·s·Pa), T in °C."""
    return 2.0e-7 * (T + KELVIN) ** 0.81 / pb


def vapor_diffusivity(props: EMPDProperties, T: float, pb: float) -> float:
    """Effective vapor diffusivity of the material [m²/s] at temperature ``T``.

    The vapor resistance factor scales the diffusivity of still air down;
    the gas constant term converts the pressure-driven permeability into a
    vapor-density driven diffusivity.
    """
    return _air_vapor_permeability(T, pb) / props.mu * R_WATER_VAPOR * (T + KELVIN)


def _power_term(coefficient: float, rh: float, exponent: float) -> float:
    if rh > 0.0:
        return coefficient * rh ** exponent
    # Dry limit; only a negative exponent diverges at RH = 0
    if exponent > 0.0:
        return 0.0
    if exponent == 0.0 or coefficient == 0.0:
        return coefficient
    return math.copysign(math.inf, coefficient)


def sorption_slope(props: EMPDProperties, rh: float) -> float:
    """Slope dU/dRH of the sorption curve U = a·RH^b + c·RH^d at ``rh`` [kg/kg].

    Returns ``inf`` for a dry material whose curve is vertical at RH = 0
    (an exponent below one), which freezes both layers for that step.
    """
    return (
        _power_term(props.a * props.b, rh, props.b - 1)
        + _power_term(props.c * props.c * props.d, rh, props.d - 1)
    )


def coating_resistance(props: EMPDProperties, T: float, pb: float) -> float:
    """Vapor resistance of the surface coating [s/m]; zero when no coating factor is set."""
    if props.mu_coating <= 0.0:
        return 0.0
    return props.coating_thickness * props.mu_coating / (
        _air_vapor_permeability(T, pb) * R_WATER_VAPOR * (T + KELVIN)
    )


def layer_coefficients(
    props: EMPDProperties, diffusivity: float, h_mass_conv: float, r_coating: float
) -> Tuple[float, float]:
    """Return (hm_surf_layer, hm_deep_layer) in m/s.

    ``hm_surf_layer`` couples the zone air with the centre of the surface
    layer through the convective film, the coating and half the surface
    layer. ``hm_deep_layer`` couples the two layer centres and is zero when
    there is no deep layer.
    """
    hm_surf = 1.0 / (0.5 * props.surface_depth / diffusivity + 1.0 / h_mass_conv + r_coating)
    if props.deep_depth <= 0.0:
        hm_deep = 0.0
    else:
        hm_deep = 2.0 * diffusivity / (props.deep_depth + props.surface_depth)
    return hm_surf, hm_deep


def calc_moisture_balance_empd(
    surface: Surface,
    state: SurfaceMoistureState,
    conditions: SurfaceConditions,
    timestep_seconds: float,
) -> EMPDResult:
    """Advance the two-node EMPD balance of one surface by one zone timestep.

    Reads the previous-timestep values of ``state`` and overwrites its
    current values, so the host may call this repeatedly within a timestep
    while its temperature solution converges. Old values are only moved
    forward by :meth:`empd.state.MoistureBalanceEMPD.update`.

    Returns the physical-surface vapor density, the latent heat flux and
    the saturation surface temperature used for condensation checks
    (``None`` when the two-node model is bypassed).
    """
    state.heat_flux_latent = 0.0
    state.temp_sat = None
    if not surface.heat_transfer:
        return EMPDResult(state.rv_surface, 0.0, None)

    pb = conditions.barometric_pressure
    material = surface.construction.inside_material
    if not material.empd_enabled:
        state.rv_surface = rhov_from_tdb_w_pb(conditions.temp_zone, conditions.zone_hum_rat, pb)
        return EMPDResult(state.rv_surface, 0.0, None)
    props = material.empd

    rho_vapor_air_in = conditions.rho_vapor_air_in
    if rho_vapor_air_in is None:
        rho_vapor_air_in = room_air_vapor_density(conditions.temp_zone, conditions.zone_hum_rat, pb)

    # Property evaluation state; temperature is not averaged over timesteps
    T_aver = conditions.temp_surface_in
    rv_aver = (state.rv_surface + state.rv_surface_old) * 0.5
    rh_aver = rh_empd(T_aver, rv_aver)

    # Condensation check quantities for the host
    pv_surf = rh_aver * psat_empd(T_aver)
    state.temp_sat = saturation_temperature(pv_surf)

    diffusivity = vapor_diffusivity(props, T_aver, pb)
    dU_dRH = sorption_slope(props, rh_aver)
    r_coating = coating_resistance(props, T_aver, pb)
    hm_surf_layer, hm_deep_layer = layer_coefficients(
        props, diffusivity, conditions.h_mass_conv_in, r_coating
    )
    state.hm_surf_layer = hm_surf_layer
    # Resistance between the physical surface and the surface-layer centre
    r_surface_layer = 1.0 / hm_surf_layer - 1.0 / conditions.h_mass_conv_in - r_coating

    state.mass_flux_zone = hm_surf_layer * (state.rv_surf_layer - rho_vapor_air_in)
    state.mass_flux_deep_layer = hm_deep_layer * (state.rv_surf_layer - state.rv_deep_layer)
    state.mass_flux_surf_layer = state.mass_flux_zone + state.mass_flux_deep_layer

    rh_surf_layer_old = rh_from_tdb_rhov(T_aver, state.rv_surf_layer_old)
    rh_deep_layer_old = rh_from_tdb_rhov(T_aver, state.rv_deep_layer_old)

    rh_surf_layer = rh_surf_layer_old + timestep_seconds * (
        -state.mass_flux_surf_layer / (material.density * props.surface_depth * dU_dRH)
    )
    if props.deep_depth <= 0.0:
        # No deep-layer capacitance: hold the node at its previous value
        rh_deep_layer = rh_deep_layer_old
        state.rv_deep_layer = state.rv_deep_layer_old
    else:
        rh_deep_layer = rh_deep_layer_old + timestep_seconds * (
            state.mass_flux_deep_layer / (material.density * props.deep_depth * dU_dRH)
        )
        state.rv_deep_layer = rhov_from_tdb_rh(T_aver, rh_deep_layer)
    state.rv_surf_layer = rhov_from_tdb_rh(T_aver, rh_surf_layer)

    state.pv_surf_layer = rh_surf_layer * psat_empd(T_aver)
    state.pv_deep_layer = rh_deep_layer * psat_empd(T_aver)

    state.rv_surface = state.rv_surf_layer - state.mass_flux_zone * r_surface_layer
    state.heat_flux_latent = state.mass_flux_zone * LATENT_HEAT

    state.rho_vapor_report = state.rv_surf_layer
    state.rh_report = rh_surf_layer * 100.0
    state.hum_rat_report = hum_rat_from_pv(state.pv_surf_layer, pb)

    logger.debug(
        "%s: rv_surf_layer=%.6g rv_deep_layer=%.6g flux_zone=%.4g",
        surface.name,
        state.rv_surf_layer,
        state.rv_deep_layer,
        state.mass_flux_zone,
    )
    return EMPDResult(state.rv_surface, state.heat_flux_latent, state.temp_sat)
