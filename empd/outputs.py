from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple


@dataclass
class OutputVariable:
    name: str
    units: str
    key: str  # e.g. surface name
    getter: Callable[[], float]
    index_type: str = "Zone"
    store_type: str = "State"
    values: List[float] = field(default_factory=list)


class OutputRegistry:
    """Named, tagged scalar time series sampled once per timestep."""

    def __init__(self) -> None:
        self._vars: Dict[Tuple[str, str], OutputVariable] = {}
        self.steps: List[float] = []

    def register(
        self,
        name: str,
        units: str,
        key: str,
        getter: Callable[[], float],
        index_type: str = "Zone",
        store_type: str = "State",
    ) -> OutputVariable:
        if (name, key) in self._vars:
            raise ValueError(f"Output variable {name!r} already registered for {key!r}")
        var = OutputVariable(name, units, key, getter, index_type, store_type)
        self._vars[(name, key)] = var
        return var

    @property
    def variables(self) -> List[OutputVariable]:
        return list(self._vars.values())

    def sample(self, step: float) -> None:
        self.steps.append(step)
        for var in self._vars.values():
            var.values.append(float(var.getter()))
