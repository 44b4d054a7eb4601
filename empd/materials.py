from __future__ import annotations

from pathlib import Path
import csv
from typing import List, Optional, Union

from .dataclasses import EMPDSettings

ROOT = Path(__file__).resolve().parents[1]
EMPD_SETTINGS_CSV = ROOT / 'context' / 'empd_settings.csv'

# Numeric columns in input object order
FIELDS = (
    'mu', 'a', 'b', 'c', 'd',
    'surface_depth', 'deep_depth', 'coating_thickness', 'mu_coating',
)


def _require_float(s: str | float | int | None, field: str, row: int) -> float:
    """Parse *s* as float or raise ``ValueError`` with row context."""
    if s is None or str(s).strip() == "":
        raise ValueError(f"Missing value for {field!r} in row {row}")
    if isinstance(s, (int, float)):
        return float(s)
    txt = str(s).strip().replace("\u00a0", " ").replace(" ", "").replace(",", ".")
    try:
        return float(txt)
    except ValueError as exc:
        raise ValueError(f"Invalid number for {field!r} in row {row}: {s}") from exc


def load_empd_settings(path: Optional[Union[str, Path]] = None) -> List[EMPDSettings]:
    """Load moisture penetration depth settings from a CSV file.

    Expected columns (case-insensitive, flexible order):
    material, mu, a, b, c, d, surface_depth, deep_depth, coating_thickness, mu_coating

    Returns an empty list when the file does not exist.
    """
    csv_path = Path(path) if path is not None else EMPD_SETTINGS_CSV
    if not csv_path.exists():
        return []
    out: List[EMPDSettings] = []
    with csv_path.open('r', encoding='utf-8') as f:
        rdr = csv.DictReader(f)
        for idx, row in enumerate(rdr, start=2):  # header is row 1
            if not any(row.values()):
                continue
            row = {(k or '').strip().lower(): v for k, v in row.items()}
            name = (row.get('material') or row.get('name') or '').strip()
            if not name:
                raise ValueError(f"Missing value for 'material' in row {idx}")
            try:
                values = {col: _require_float(row.get(col), col, idx) for col in FIELDS}
            except ValueError as exc:
                raise ValueError(f"Error parsing {csv_path.name}: {exc}")
            out.append(EMPDSettings(material_name=name, **values))
    return out
