from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class MaterialGroup(Enum):
    REGULAR = "regular"
    AIR = "air"
    GLASS = "glass"
    SHADE = "shade"
    SCREEN = "screen"
    BLIND = "blind"
    GAS = "gas"
    ECOROOF = "ecoroof"


class SurfaceClass(Enum):
    WALL = "wall"
    FLOOR = "floor"
    ROOF = "roof"
    CEILING = "ceiling"
    WINDOW = "window"
    DOOR = "door"
    SHADING = "shading"


class HeatTransferAlgorithm(Enum):
    CTF = "ctf"
    EMPD = "empd"
    HAMT = "hamt"
    CONDFD = "condfd"


@dataclass
class EMPDProperties:
    mu: float  # vapor resistance factor [-]
    a: float  # sorption curve coefficients [-]
    b: float
    c: float
    d: float
    surface_depth: float  # surface-layer penetration depth [m]
    deep_depth: float  # deep-layer penetration depth [m], 0 = no deep layer
    coating_thickness: float  # [m]
    mu_coating: float  # coating vapor resistance factor [-]

    @property
    def enabled(self) -> bool:
        return self.mu > 0.0


@dataclass
class Material:
    name: str
    group: MaterialGroup = MaterialGroup.REGULAR
    r_only: bool = False  # declared with thermal resistance only (no mass)
    thickness: float = 0.0  # [m]
    conductivity: float = 0.0  # [W/mK]
    density: float = 0.0  # [kg/m3]
    specific_heat: float = 0.0  # [J/kgK]
    empd: Optional[EMPDProperties] = None

    @property
    def has_empd_properties(self) -> bool:
        return self.empd is not None

    @property
    def empd_enabled(self) -> bool:
        return self.empd is not None and self.empd.enabled


@dataclass
class Construction:
    name: str
    layers: List[Material]  # outermost first, room-facing layer last
    is_window: bool = False

    @property
    def inside_material(self) -> Material:
        return self.layers[-1]


@dataclass
class Zone:
    name: str


@dataclass
class Surface:
    name: str
    zone: str
    construction: Construction
    heat_transfer: bool = True
    surface_class: SurfaceClass = SurfaceClass.WALL
    algorithm: HeatTransferAlgorithm = HeatTransferAlgorithm.EMPD
    interzone: bool = False  # outside face sees another zone

    @property
    def is_window(self) -> bool:
        return self.surface_class is SurfaceClass.WINDOW


@dataclass
class Building:
    materials: Dict[str, Material] = field(default_factory=dict)
    constructions: Dict[str, Construction] = field(default_factory=dict)
    zones: List[Zone] = field(default_factory=list)
    surfaces: List[Surface] = field(default_factory=list)  # list index = surface id

    def find_material(self, name: str) -> Optional[Material]:
        """Case-insensitive material lookup."""
        key = name.strip().upper()
        for mat_name, material in self.materials.items():
            if mat_name.upper() == key:
                return material
        return None


@dataclass
class EMPDSettings:
    """One moisture penetration depth settings object as read from input."""

    material_name: str
    mu: float
    a: float
    b: float
    c: float
    d: float
    surface_depth: float
    deep_depth: float
    coating_thickness: float
    mu_coating: float

    def to_properties(self) -> EMPDProperties:
        return EMPDProperties(
            mu=self.mu,
            a=self.a,
            b=self.b,
            c=self.c,
            d=self.d,
            surface_depth=self.surface_depth,
            deep_depth=self.deep_depth,
            coating_thickness=self.coating_thickness,
            mu_coating=self.mu_coating,
        )


@dataclass
class ZoneAirState:
    temperature: float  # zone air dry-bulb [°C]
    humidity_ratio: float  # [kgWater/kgDryAir]
    vapor_density: Optional[float] = None  # room-side estimate [kg/m3], overrides T/W


@dataclass
class SurfaceConditions:
    temp_surface_in: float  # inside face temperature, current timestep [°C]
    temp_zone: float  # zone air temperature [°C]
    h_mass_conv_in: float  # convective mass transfer coefficient [m/s]
    zone_hum_rat: float  # [kgWater/kgDryAir]
    barometric_pressure: float = 101325.0  # [Pa]
    rho_vapor_air_in: Optional[float] = None  # room-side vapor density [kg/m3]


@dataclass
class SurfaceMoistureState:
    rv_surface: float = 0.0  # vapor densities [kg/m3]
    rv_surface_old: float = 0.0
    rv_surf_layer: float = 0.0
    rv_surf_layer_old: float = 0.0
    rv_deep_layer: float = 0.0
    rv_deep_layer_old: float = 0.0
    hm_surf_layer: float = 0.0  # [m/s]
    mass_flux_surf_layer: float = 0.0  # [kg/m2s]
    mass_flux_deep_layer: float = 0.0
    mass_flux_zone: float = 0.0
    heat_flux_latent: float = 0.0  # [W/m2]
    temp_sat: Optional[float] = None  # [°C]
    rho_vapor_report: float = 0.0
    hum_rat_report: float = 0.0
    rh_report: float = 0.0  # [%]
    pv_surf_layer: float = 0.0  # [Pa]
    pv_deep_layer: float = 0.0


@dataclass
class EMPDResult:
    rv_surface: float
    heat_flux_latent: float
    temp_sat: Optional[float]
