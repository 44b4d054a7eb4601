"""Psychrometric relations used by the EMPD model.

Temperatures are in °C, pressures in Pa, vapor densities in kg/m³ and
relative humidities as fractions (0-1) unless stated otherwise.
"""

from __future__ import annotations

import math

KELVIN = 273.15
R_WATER_VAPOR = 461.52  # gas constant of water vapor [J/kgK]
LATENT_HEAT = 2500000.0  # heat of vaporization [J/kg]
STD_PRESSURE = 101325.0  # [Pa]


def psat(T: float) -> float:
    """Saturation vapor pressure p_sat(T) in Pa (ASHRAE Hyland-Wexler).

    Over ice below 0 °C, over liquid water otherwise.
    """
    Tk = T + KELVIN
    if T < 0.0:
        ln_p = (
            -5.6745359e3 / Tk
            + 6.3925247
            - 9.677843e-3 * Tk
            + 6.2215701e-7 * Tk ** 2
            + 2.0747825e-9 * Tk ** 3
            - 9.484024e-13 * Tk ** 4
            + 4.1635019 * math.log(Tk)
        )
    else:
        ln_p = (
            -5.8002206e3 / Tk
            + 1.3914993
            - 4.8640239e-2 * Tk
            + 4.1764768e-5 * Tk ** 2
            - 1.4452093e-8 * Tk ** 3
            + 6.5459673 * math.log(Tk)
        )
    return math.exp(ln_p)


def psat_empd(T: float) -> float:
    """Saturation curve exp(23.7093 - 4111/(T + 237.7)) in Pa used by the EMPD balance."""
    return math.exp(23.7093 - 4111.0 / (T + 237.7))


def saturation_temperature(pv: float) -> float:
    """Invert :func:`psat_empd`: temperature (°C) at which ``pv`` is saturated."""
    if pv <= 0:
        return -KELVIN
    return 4111.0 / (23.7093 - math.log(pv)) + 35.45 - KELVIN


def rhov_from_tdb_w_pb(T: float, w: float, pb: float = STD_PRESSURE) -> float:
    """Vapor density of room air from dry-bulb, humidity ratio and pressure."""
    return w * pb / (R_WATER_VAPOR * (T + KELVIN) * (w + 0.62198))


def rhov_from_tdb_rh(T: float, rh: float) -> float:
    """Vapor density at dry-bulb ``T`` and relative humidity ``rh`` (0-1)."""
    return rh * psat(T) / (R_WATER_VAPOR * (T + KELVIN))


def rh_from_tdb_rhov(T: float, rhov: float) -> float:
    """Relative humidity (0-1) from dry-bulb and vapor density, clipped to [0, 1]."""
    if rhov <= 0:
        return 0.0
    rh = rhov * R_WATER_VAPOR * (T + KELVIN) / psat(T)
    return min(rh, 1.0)


def rh_empd(T: float, rhov: float) -> float:
    """Relative humidity (0-1) of ``rhov`` on the :func:`psat_empd` curve, unclipped."""
    return rhov * R_WATER_VAPOR * (T + KELVIN) / psat_empd(T)


def hum_rat_from_pv(pv: float, pb: float = STD_PRESSURE) -> float:
    """Humidity ratio (kg/kg) from vapor pressure and barometric pressure."""
    return 0.622 * pv / (pb - pv)


def room_air_vapor_density(T: float, w: float, pb: float = STD_PRESSURE) -> float:
    """Room-side vapor density, capped at saturation at ``T``."""
    return min(rhov_from_tdb_w_pb(T, w, pb), rhov_from_tdb_rh(T, 1.0))
