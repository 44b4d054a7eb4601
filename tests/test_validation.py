import io
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from empd.dataclasses import (
    Building,
    Construction,
    EMPDSettings,
    HeatTransferAlgorithm,
    Material,
    MaterialGroup,
    Surface,
    Zone,
)
from empd.diagnostics import Severity
from empd.validation import get_moisture_balance_empd_input


def settings(name, surface_depth=0.005, deep_depth=0.0, mu=8.0):
    return EMPDSettings(name, mu, 0.02, 1.0, 0.01, 2.0, surface_depth, deep_depth, 0.0, 0.0)


def build_building(layer_names=("Gypsum",), extra_materials=()):
    materials = {
        name: Material(name, thickness=0.02, conductivity=0.5, density=800.0)
        for name in ("Gypsum", "Brick", "Insulation", *extra_materials)
    }
    construction = Construction("Wall Assembly", [materials[n] for n in layer_names])
    return Building(
        materials=materials,
        constructions={construction.name: construction},
        zones=[Zone("Zone 1")],
        surfaces=[Surface("Wall 1", "Zone 1", construction)],
    )


def severe_messages(diag):
    return [d.message for d in diag.errors]


def test_deep_depth_not_beyond_surface_depth_is_reset():
    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum", 0.005, 0.004)])
    assert building.materials["Gypsum"].empd.deep_depth == 0.0
    assert len(diag.warnings) == 1
    assert "Setting deep-layer depth to zero" in diag.warnings[0].continuations[-1]
    assert not diag.has_errors

    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum", 0.005, 0.005)])
    assert building.materials["Gypsum"].empd.deep_depth == 0.0
    assert len(diag.warnings) == 1


def test_zero_and_valid_deep_depth_are_kept():
    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum", 0.005, 0.0)])
    assert building.materials["Gypsum"].empd.deep_depth == 0.0
    assert [d.severity for d in diag.records] == [Severity.INFO]

    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum", 0.005, 0.05)])
    assert building.materials["Gypsum"].empd.deep_depth == 0.05
    assert [d.severity for d in diag.records] == [Severity.INFO]


def test_unknown_material_is_one_severe_error():
    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum"), settings("Plaster")])
    assert len(diag.errors) == 1
    assert "Plaster" in diag.errors[0].message
    assert all(m.empd is None for name, m in building.materials.items() if name != "Gypsum")
    assert building.materials["Gypsum"].empd is not None


def test_material_lookup_ignores_case():
    building = build_building()
    diag = get_moisture_balance_empd_input(building, [settings("gypsum")])
    assert not diag.has_errors
    assert building.materials["Gypsum"].empd_enabled


def test_no_settings_objects_is_an_error():
    diag = get_moisture_balance_empd_input(build_building(), [])
    assert any("no \"MaterialProperty:MoisturePenetrationDepth:Settings\"" in m for m in severe_messages(diag))


def test_wrong_material_type_is_rejected():
    building = build_building(extra_materials=("Air Gap", "NoMass Board"))
    building.materials["Air Gap"].group = MaterialGroup.AIR
    building.materials["NoMass Board"].r_only = True
    diag = get_moisture_balance_empd_input(
        building, [settings("Gypsum"), settings("Air Gap"), settings("NoMass Board")]
    )
    assert len(diag.errors) == 2
    assert building.materials["Air Gap"].empd is None
    assert building.materials["NoMass Board"].empd is None


def test_outside_layer_placement_is_an_error():
    building = build_building(("Brick", "Insulation", "Gypsum"))
    diag = get_moisture_balance_empd_input(building, [settings("Brick")])
    outside = [d for d in diag.errors if "outside layer" in d.message]
    assert len(outside) == 1
    assert "Construction=Wall Assembly" in outside[0].message
    assert any("Brick" in c for c in outside[0].continuations)

    building = build_building(("Brick", "Insulation", "Gypsum"))
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum")])
    assert not diag.has_errors


def test_outside_layer_allowed_on_interzone_surface():
    building = build_building(("Gypsum", "Insulation", "Gypsum"))
    building.surfaces[0].interzone = True
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum")])
    assert not diag.has_errors


def test_middle_layer_placement_is_an_error():
    building = build_building(("Brick", "Insulation", "Gypsum"))
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum"), settings("Insulation")])
    middle = [d for d in diag.errors if "middle layer" in d.message]
    assert len(middle) == 1
    assert any("Insulation" in c for c in middle[0].continuations)


def test_missing_inside_layer_warning_is_rate_limited():
    building = build_building(("Brick", "Gypsum"))
    other = Construction("Partition", [building.materials["Brick"]])
    building.constructions[other.name] = other
    building.surfaces += [Surface("Wall 2", "Zone 1", other), Surface("Wall 3", "Zone 1", other)]

    diag = get_moisture_balance_empd_input(building, [settings("Gypsum")])
    assert len(diag.warnings) == 1
    assert not diag.has_errors

    verbose = get_moisture_balance_empd_input(building, [settings("Gypsum")], display_extra_warnings=True)
    assert len(verbose.warnings) == 2
    assert "Surface=Wall 2" in verbose.warnings[0].message
    assert verbose.warnings[1].continuations == ["with Construction=Partition"]


def test_zone_without_empd_surface_is_an_error():
    building = build_building()
    building.zones.append(Zone("Zone 2"))
    building.surfaces.append(
        Surface("Floor 2", "Zone 2", building.constructions["Wall Assembly"], algorithm=HeatTransferAlgorithm.CTF)
    )
    diag = get_moisture_balance_empd_input(building, [settings("Gypsum")])
    assert len(diag.errors) == 1
    assert "zone = Zone 2" in diag.errors[0].message
    assert diag.errors[0].severity is Severity.SEVERE


def test_report_generated_during_validation():
    buf = io.StringIO()
    get_moisture_balance_empd_input(build_building(), [settings("Gypsum")], report_stream=buf)
    assert "Construction EMPD, Wall Assembly, Gypsum" in buf.getvalue()
