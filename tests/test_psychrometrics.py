import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from empd import psychrometrics as psy


def test_saturation_pressure_matches_ashrae_values():
    assert psy.psat(20.0) == pytest.approx(2339.0, rel=2e-3)
    assert psy.psat(0.0) == pytest.approx(611.2, rel=2e-3)
    assert psy.psat(-10.0) == pytest.approx(259.9, rel=5e-3)


def test_empd_saturation_curve_close_to_psat():
    assert psy.psat_empd(21.0) == pytest.approx(psy.psat(21.0), rel=5e-3)


def test_saturation_temperature_inverts_empd_curve():
    pv = psy.psat_empd(15.0)
    assert psy.saturation_temperature(pv) == pytest.approx(15.0, abs=1e-9)
    assert psy.saturation_temperature(0.0) == -273.15


def test_vapor_density_and_rh_are_inverse():
    rv = psy.rhov_from_tdb_rh(21.0, 0.6)
    assert psy.rh_from_tdb_rhov(21.0, rv) == pytest.approx(0.6)
    assert psy.rh_from_tdb_rhov(21.0, 0.0) == 0.0
    assert psy.rh_from_tdb_rhov(21.0, 1.0) == 1.0


def test_room_air_vapor_density():
    rv = psy.rhov_from_tdb_w_pb(22.0, 0.010, 101325.0)
    assert rv == pytest.approx(0.01177, rel=2e-3)
    # capped at saturation
    assert psy.room_air_vapor_density(10.0, 0.05) == pytest.approx(psy.rhov_from_tdb_rh(10.0, 1.0))


def test_humidity_ratio_from_vapor_pressure():
    assert psy.hum_rat_from_pv(1600.0, 101325.0) == pytest.approx(0.622 * 1600.0 / 99725.0)
