"""Construction EMPD tables and HTML reports with charts."""

from __future__ import annotations

import base64
from io import BytesIO
from typing import Dict, Iterable, Iterator, List, Sequence, TextIO

from .dataclasses import Building

try:  # pragma: no cover - matplotlib is optional at runtime
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
except Exception:  # pragma: no cover - gracefully degrade if missing
    plt = None  # type: ignore

CONSTRUCTION_HEADER = (
    "! <Construction EMPD>, Construction Name, Inside Layer Material Name, "
    "Vapor Resistance Factor, a, b, c, d, Surface Penetration Depth {m}, "
    "Deep Penetration Depth {m}, Coating Vapor Resistance Factor, Coating Thickness {m}"
)


def construction_report_lines(building: Building) -> Iterator[str]:
    """Yield the header and one line per non-window construction with an EMPD inside layer."""
    yield CONSTRUCTION_HEADER
    for construction in building.constructions.values():
        if construction.is_window:
            continue
        material = construction.inside_material
        if not material.has_empd_properties:
            continue
        p = material.empd
        values = (p.mu, p.a, p.b, p.c, p.d, p.surface_depth, p.deep_depth, p.mu_coating, p.coating_thickness)
        nums = ", ".join(f"{v:8.4f}" for v in values)
        yield f" Construction EMPD, {construction.name}, {material.name}, {nums}"


def report_constructions(building: Building, stream: TextIO) -> int:
    """Write the construction EMPD table to ``stream``; return the number of construction rows."""
    rows = 0
    for line in construction_report_lines(building):
        stream.write(line + "\n")
        rows += 1
    return rows - 1


def _encode_fig(fig) -> str:
    buf = BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _plot_series(times: Sequence[float], series: Dict[str, List[float]], ylabel: str, title: str) -> str:
    if plt is None or not series:
        return ""
    fig, ax = plt.subplots()
    for label, ys in series.items():
        ax.plot(list(times), list(ys), label=label)
    ax.set_xlabel("t [h]")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend()
    return _encode_fig(fig)


def _construction_table(lines: Iterable[str]) -> str:
    rows = [line for line in lines if not line.startswith("!")]
    if not rows:
        return "<p>No constructions with EMPD properties.</p>"
    heads = [h.strip() for h in CONSTRUCTION_HEADER.split(",")[1:]]
    ths = "".join(f"<th>{h}</th>" for h in heads)
    trs = "".join(
        "<tr>" + "".join(f"<td>{c.strip()}</td>" for c in row.split(",")[1:]) + "</tr>"
        for row in rows
    )
    return f"<table id='constructions'><tr>{ths}</tr>{trs}</table>"


def report(results: dict) -> str:
    """Generate an HTML report from simulation results with charts and the construction table."""

    times = results.get("time_hours", [])
    surfaces = results.get("surfaces", {})
    lis = [
        f"<li>Timesteps: {len(times)} ({results.get('timestep_seconds', float('nan')):.0f} s)</li>",
        f"<li>Surfaces: {', '.join(surfaces) or '-'}</li>",
    ]
    for name, data in surfaces.items():
        latent = data.get("heat_flux_latent", [])
        if latent:
            lis.append(f"<li>{name}: final latent flux {latent[-1]:.3f} W/m², final RH {data['rh'][-1]:.1f} %</li>")

    rh_chart = _plot_series(
        times, {n: d.get("rh", []) for n, d in surfaces.items()}, "RH [%]", "Surface relative humidity"
    )
    rv_chart = _plot_series(
        times, {n: d.get("rv_surface", []) for n, d in surfaces.items()}, "ρv [kg/m³]", "Surface vapor density"
    )

    parts = [
        "<h2>EMPD Moisture Report</h2>",
        "<ul>",
        *lis,
        "</ul>",
        "<h3>Charts</h3>",
        f"<img src='data:image/png;base64,{rh_chart}' alt='RH chart' />" if rh_chart else "",
        f"<img src='data:image/png;base64,{rv_chart}' alt='Vapor density chart' />" if rv_chart else "",
        "<h3>Construction EMPD</h3>",
        _construction_table(results.get("constructions", [])),
    ]
    return "\n".join([p for p in parts if p])
