from dataclasses import dataclass
from enum import Enum


class Phase(Enum):
    SINGLE = 1
    THREE = 3

    @property
    def label(self) -> str:
        return "single-phase" if self is Phase.SINGLE else "three-phase"

    @property
    def core_description(self) -> str:
        # Single-phase runs use 3-core cable (L, N, PE), three-phase use 5-core (L1-L3, N, PE)
        return "3-core" if self is Phase.SINGLE else "5-core"


@dataclass(frozen=True)
class CableSpec:
    size: float             # Cross-section in mm2
    price_per_meter: float  # USD/m, depends on the phase table
    current_capacity: float # Amps
    resistance_per_km: float # Ohm/km

    @property
    def label(self) -> str:
        return f"{self.size:g} mm²"
