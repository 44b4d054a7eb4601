"""Attach EMPD settings to base materials and check where they are used."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, TextIO

from .dataclasses import Building, EMPDSettings, HeatTransferAlgorithm, MaterialGroup
from .diagnostics import Diagnostics
from .report import report_constructions

OBJECT_NAME = "MaterialProperty:MoisturePenetrationDepth:Settings"
ROUTINE = "GetMoistureBalanceEMPDInput"


def attach_empd_settings(building: Building, settings: Iterable[EMPDSettings], diag: Diagnostics) -> int:
    """Copy each settings object onto its base material; return how many were attached."""
    settings = list(settings)
    if not settings:
        diag.severe(f'EMPD Solution requested, but no "{OBJECT_NAME}" objects were found.')
        return 0

    attached = 0
    for item in settings:
        material = building.find_material(item.material_name)
        if material is None:
            diag.severe(
                f"{OBJECT_NAME}: invalid Material Name entered={item.material_name}, "
                "must match to a valid Material name."
            )
            continue
        if material.group is not MaterialGroup.REGULAR or material.r_only:
            diag.severe(
                f"{OBJECT_NAME}: Reference Material is not appropriate type for EMPD properties, "
                f"material={material.name}, must have regular properties (L,Cp,K,D)",
                "..Only Material base materials are allowed to have EMPD properties.",
            )
            continue

        props = item.to_properties()
        if props.deep_depth <= props.surface_depth and props.deep_depth != 0.0:
            diag.warning(
                f'{OBJECT_NAME}: material="{material.name}"',
                "Deep-layer penetration depth must be zero or greater than the surface-layer penetration depth.",
                "Setting deep-layer depth to zero and continuing.",
            )
            props.deep_depth = 0.0
        material.empd = props
        attached += 1
    return attached


def check_surfaces(building: Building, diag: Diagnostics, display_extra_warnings: bool = False) -> Dict[str, bool]:
    """Check EMPD layer placement on every EMPD heat-transfer surface.

    Returns a mapping of zone name to whether it has at least one surface
    with an EMPD inside layer.
    """
    empd_zone: Dict[str, bool] = {zone.name: False for zone in building.zones}
    missing = 0
    for surface in building.surfaces:
        if not surface.heat_transfer or surface.is_window:
            continue
        if surface.algorithm is not HeatTransferAlgorithm.EMPD:
            continue
        construction = surface.construction
        if construction.inside_material.empd_enabled and surface.zone in empd_zone:
            empd_zone[surface.zone] = True
        else:
            missing += 1
            if missing == 1 and not display_extra_warnings:
                diag.warning(
                    f"{ROUTINE}: EMPD properties are not assigned to the inside layer of Surfaces",
                    "...use Output:Diagnostics,DisplayExtraWarnings; to show more details on individual surfaces.",
                )
            if display_extra_warnings:
                diag.warning(
                    f"{ROUTINE}: EMPD properties are not assigned to the inside layer in Surface={surface.name}",
                    f"with Construction={construction.name}",
                )

        if len(construction.layers) == 1:
            continue
        outside = construction.layers[0]
        if outside.empd_enabled and not surface.interzone:
            diag.severe(
                f"{ROUTINE}: EMPD properties are assigned to the outside layer in Construction={construction.name}",
                f"..Outside layer material with EMPD properties = {outside.name}",
                "..A material with EMPD properties must be assigned to the inside layer of a construction.",
            )
        for middle in construction.layers[1:-1]:
            if middle.empd_enabled:
                diag.severe(
                    f"{ROUTINE}: EMPD properties are assigned to a middle layer in Construction={construction.name}",
                    f"..Middle layer material with EMPD properties = {middle.name}",
                    "..A material with EMPD properties must be assigned to the inside layer of a construction.",
                )
    return empd_zone


def get_moisture_balance_empd_input(
    building: Building,
    settings: Iterable[EMPDSettings],
    display_extra_warnings: bool = False,
    report_stream: Optional[TextIO] = None,
    diag: Optional[Diagnostics] = None,
) -> Diagnostics:
    """Attach EMPD settings to materials and validate their placement.

    All problems are collected into the returned :class:`Diagnostics`; no
    exception is raised here. The construction EMPD table is written to
    ``report_stream`` when one is given.
    """
    diag = diag if diag is not None else Diagnostics()
    attached = attach_empd_settings(building, settings, diag)
    if attached:
        diag.info(f"{ROUTINE}: EMPD properties attached to {attached} material(s)")

    empd_zone = check_surfaces(building, diag, display_extra_warnings)
    for zone_name, has_empd in empd_zone.items():
        if not has_empd:
            diag.severe(
                f"{ROUTINE}: None of the constructions for zone = {zone_name} has an inside layer with EMPD properties",
                "..For each zone, the inside layer of at least one construction must have EMPD properties",
            )

    if report_stream is not None:
        report_constructions(building, report_stream)
    return diag

