from types import MappingProxyType
from typing import Dict, List, Tuple, Union

from core.components import CableSpec, Phase
from core.exceptions import InvalidInputError
from core.models import InstallationMethod

# Copper cable price list (USD per meter)
# Format: (Size_mm2, Price)
SINGLE_PHASE_PRICES = (
    (1, 2.50),
    (1.5, 1.03),
    (2.5, 4.80),
    (4, 6.50),
    (6, 9.20),
    (10, 14.50),
    (16, 22.80),
    (25, 35.40),
    (35, 48.60),
    (50, 68.90),
    (70, 95.20),
    (95, 128.50),
    (120, 165.80),
    (150, 210.40),
    (185, 265.70),
    (240, 345.90),
)

# 5-core cable, priced higher than the single-phase list
THREE_PHASE_PRICES = (
    (1, 3.20),
    (1.5, 1.50),
    (2.5, 6.10),
    (4, 8.30),
    (6, 11.80),
    (10, 18.60),
    (16, 29.20),
    (25, 45.10),
    (35, 62.30),
    (50, 88.40),
    (70, 122.50),
    (95, 165.80),
    (120, 214.20),
    (150, 272.80),
    (185, 344.50),
    (240, 448.90),
)

# Current carrying capacity (A), shared by both phase configurations
# 300 and 400 mm2 are reference-only: no price is listed for them
CURRENT_CAPACITY = MappingProxyType({
    1: 16, 1.5: 20, 2.5: 27, 4: 37, 6: 47, 10: 65, 16: 85, 25: 112, 35: 138,
    50: 168, 70: 213, 95: 258, 120: 299, 150: 340, 185: 384, 240: 447,
    300: 510, 400: 583,
})

# Conductor resistance (Ohm/km)
RESISTANCE_PER_KM = MappingProxyType({
    1: 18.1, 1.5: 12.1, 2.5: 7.41, 4: 4.61, 6: 3.08, 10: 1.83, 16: 1.15, 25: 0.727,
    35: 0.524, 50: 0.387, 70: 0.268, 95: 0.193, 120: 0.153, 150: 0.124,
    185: 0.099, 240: 0.0754, 300: 0.0601, 400: 0.0470,
})

# Ambient temperature correction factors (deg C -> factor), 30 deg C base
TEMPERATURE_FACTORS = MappingProxyType({
    30: 1.0,
    35: 0.94,
    40: 0.87,
    45: 0.79,
    50: 0.71,
    55: 0.61,
    60: 0.50,
})

INSTALLATION_FACTORS = MappingProxyType({
    InstallationMethod.AIR: 1.0,
    InstallationMethod.CONDUIT: 0.8,
    InstallationMethod.BURIED: 0.7,
    InstallationMethod.TRAY: 0.9,
})


def _build_table(prices: Tuple[Tuple[float, float], ...]) -> Tuple[CableSpec, ...]:
    return tuple(
        CableSpec(
            size=size,
            price_per_meter=price,
            current_capacity=CURRENT_CAPACITY[size],
            resistance_per_km=RESISTANCE_PER_KM[size],
        )
        for size, price in prices
    )


SINGLE_PHASE_CABLES = _build_table(SINGLE_PHASE_PRICES)
THREE_PHASE_CABLES = _build_table(THREE_PHASE_PRICES)


def resolve_phase(phases: Union[int, str, Phase]) -> Phase:
    """Accepts 1/3, Phase members or the query-string spellings 'single'/'three'."""
    if isinstance(phases, Phase):
        return phases
    if isinstance(phases, str):
        key = phases.strip().lower()
        if key in ("single", "single-phase", "1"):
            return Phase.SINGLE
        if key in ("three", "three-phase", "3"):
            return Phase.THREE
    elif phases in (1, 3) and not isinstance(phases, bool):
        return Phase(phases)
    raise InvalidInputError(f"Unsupported phase configuration: {phases}", field="phases")


def get_cable_table(phases: Union[int, str, Phase]) -> Tuple[CableSpec, ...]:
    if resolve_phase(phases) is Phase.SINGLE:
        return SINGLE_PHASE_CABLES
    return THREE_PHASE_CABLES


def get_cable_sizes(phases: Union[int, str, Phase] = 1) -> List[float]:
    return [c.size for c in get_cable_table(phases)]


def get_cable_prices(phases: Union[int, str, Phase] = 1) -> Dict[float, float]:
    return {c.size: c.price_per_meter for c in get_cable_table(phases)}


def get_temperature_factor(ambient_temp: float) -> float:
    # Exact match only, the forms offer a fixed list of temperatures
    return TEMPERATURE_FACTORS.get(ambient_temp, 1.0)


def get_installation_factor(method) -> float:
    if isinstance(method, str):
        try:
            method = InstallationMethod(method.strip().lower())
        except ValueError:
            return 1.0
    return INSTALLATION_FACTORS.get(method, 1.0)


def get_resistance(cable_size: float) -> Tuple[float, bool]:
    """
    Returns (Ohm/km, tabulated).
    Untabulated sizes fall back to 1/size, which is only a rough approximation.
    """
    if cable_size in RESISTANCE_PER_KM:
        return RESISTANCE_PER_KM[cable_size], True
    return 1 / cable_size, False
