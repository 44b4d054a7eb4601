import sys
from pathlib import Path

import pytest
import yaml

sys.path.append(str(Path(__file__).resolve().parents[1]))

from empd.config import SimulationConfig, load_building, load_config_file
from empd.dataclasses import HeatTransferAlgorithm, MaterialGroup, SurfaceClass

DESCRIPTION = {
    "materials": [
        {"name": "Gypsum", "thickness": 0.0127, "conductivity": 0.16, "density": 800},
        {"name": "Glass", "group": "glass"},
    ],
    "constructions": [
        {"name": "Interior Wall", "layers": ["Gypsum"]},
        {"name": "Window", "layers": ["Glass"], "is_window": True},
    ],
    "zones": ["Zone 1"],
    "surfaces": [
        {"name": "Wall 1", "zone": "Zone 1", "construction": "Interior Wall"},
        {"name": "Window 1", "zone": "Zone 1", "construction": "Window", "class": "window", "algorithm": "ctf"},
    ],
    "empd_settings": [
        {"material": "Gypsum", "mu": 8.0, "a": 0.02, "b": 1.0, "c": 0.01, "d": 2.0,
         "surface_depth": 0.005, "deep_depth": 0.0, "coating_thickness": 0.0, "mu_coating": 0.0},
    ],
    "simulation": {"timesteps_per_hour": 6, "display_extra_warnings": True},
}


def test_load_building_from_dict():
    building, settings, config = load_building(DESCRIPTION)
    assert list(building.materials) == ["Gypsum", "Glass"]
    assert building.materials["Glass"].group is MaterialGroup.GLASS
    assert building.constructions["Interior Wall"].inside_material is building.materials["Gypsum"]
    assert building.surfaces[1].surface_class is SurfaceClass.WINDOW
    assert building.surfaces[1].algorithm is HeatTransferAlgorithm.CTF
    assert [s.name for s in building.surfaces] == ["Wall 1", "Window 1"]
    assert settings[0].material_name == "Gypsum"
    assert settings[0].surface_depth == 0.005
    assert config.timestep_seconds == 600.0
    assert config.display_extra_warnings is True


def test_load_building_from_yaml(tmp_path):
    f = tmp_path / "building.yaml"
    f.write_text(yaml.safe_dump(DESCRIPTION), encoding="utf-8")
    assert load_config_file(f)["zones"] == ["Zone 1"]
    building, settings, config = load_building(f)
    assert [s.name for s in building.surfaces] == ["Wall 1", "Window 1"]
    assert len(settings) == 1


def test_dangling_references_raise():
    bad = dict(DESCRIPTION, constructions=[{"name": "Interior Wall", "layers": ["Plaster"]}])
    with pytest.raises(ValueError, match="Plaster"):
        load_building(bad)
    bad = dict(DESCRIPTION, zones=["Zone 2"])
    with pytest.raises(ValueError, match="unknown zone"):
        load_building(bad)
    bad = dict(DESCRIPTION, empd_settings=[{"material": "Gypsum", "mu": 8.0}])
    with pytest.raises(ValueError, match="missing"):
        load_building(bad)


def test_simulation_config_validation(tmp_path):
    assert SimulationConfig().timestep_seconds == 900.0
    with pytest.raises(ValueError):
        SimulationConfig(timesteps_per_hour=7)
    with pytest.raises(ValueError):
        SimulationConfig(barometric_pressure=0.0)
    txt = tmp_path / "building.txt"
    txt.write_text("zones: []", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported"):
        load_config_file(txt)
    with pytest.raises(FileNotFoundError):
        load_config_file(tmp_path / "missing.yaml")


def test_empd_settings_csv_is_resolved_next_to_description(tmp_path):
    (tmp_path / "settings.csv").write_text(
        "material,mu,a,b,c,d,surface_depth,deep_depth,coating_thickness,mu_coating\n"
        "Glass,5,0.01,0.5,0.002,3,0.002,0.01,0,0\n",
        encoding="utf-8",
    )
    f = tmp_path / "building.yaml"
    f.write_text(yaml.safe_dump(dict(DESCRIPTION, empd_settings_csv="settings.csv")), encoding="utf-8")
    _, settings, _ = load_building(f)
    assert [s.material_name for s in settings] == ["Gypsum", "Glass"]
    assert settings[1].b == 0.5

    with pytest.raises(FileNotFoundError):
        load_building(dict(DESCRIPTION, empd_settings_csv=str(tmp_path / "missing.csv")))
