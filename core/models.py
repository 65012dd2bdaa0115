import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from core.components import CableSpec, Phase
from core.exceptions import InvalidInputError


class InstallationMethod(Enum):
    AIR = "air"
    CONDUIT = "conduit"
    BURIED = "buried"
    TRAY = "tray"


class SafetyStatus(Enum):
    SAFE = "Safe"
    WARNING = "Warning"


class RecommendationTier(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


# Temperatures offered by the input forms (deg C)
AMBIENT_TEMPERATURES = (30, 35, 40, 45, 50, 55, 60)


def _require_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number", field=name)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive", field=name)


@dataclass
class CalculationInput:
    voltage: float            # V
    power: float              # kW
    power_factor: float
    distance: float           # m
    phases: int               # 1 or 3
    voltage_drop_limit: float # %
    installation_method: InstallationMethod = InstallationMethod.AIR
    ambient_temp: float = 30.0

    @property
    def phase(self) -> Phase:
        return Phase(self.phases)

    def validate(self) -> "CalculationInput":
        _require_positive("voltage", self.voltage)
        _require_positive("power", self.power)
        _require_positive("power_factor", self.power_factor)
        if self.power_factor > 1:
            raise InvalidInputError("power_factor must be between 0 and 1", field="power_factor")
        _require_positive("distance", self.distance)
        if self.phases not in (1, 3) or isinstance(self.phases, bool):
            raise InvalidInputError("phases must be 1 or 3", field="phases")
        _require_positive("voltage_drop_limit", self.voltage_drop_limit)
        if not isinstance(self.installation_method, InstallationMethod):
            raise InvalidInputError(
                f"Unknown installation method: {self.installation_method}", field="installation_method"
            )
        if isinstance(self.ambient_temp, bool) or not isinstance(self.ambient_temp, (int, float)):
            raise InvalidInputError("ambient_temp must be a number", field="ambient_temp")
        return self


@dataclass
class Recommendation:
    tier: RecommendationTier
    message: str

    def to_dict(self) -> dict:
        return {"type": self.tier.value, "message": self.message}


@dataclass
class EconomicAnalysis:
    cost_per_meter: float
    total_cost: float
    savings: float
    roi: float
    annual_loss_kwh: float
    annual_loss_cost: float
    cost_breakdown: str = ""
    # None when the cable loses no energy, so it never pays back
    payback_years: Optional[float] = None


@dataclass
class SafetyAnalysis:
    status: SafetyStatus
    voltage_drop: float
    limit: float
    margin: float
    recommendations: List[Recommendation] = field(default_factory=list)


@dataclass
class Analysis:
    economic: EconomicAnalysis
    safety: SafetyAnalysis
    advisories: List[Recommendation] = field(default_factory=list)

    @property
    def recommendations(self) -> List[Recommendation]:
        return self.safety.recommendations + self.advisories


@dataclass
class CalculationResult:
    current: float
    derated_current: float
    temperature_factor: float
    installation_factor: float
    cable: CableSpec
    voltage_drop: float
    safety: SafetyStatus
    price_per_meter: float
    total_cost: float
    power_loss: float
    oversize_fallback: bool = False
    description: str = ""
    analysis: Optional[Analysis] = None

    @property
    def cable_size(self) -> float:
        return self.cable.size

    @property
    def is_safe(self) -> bool:
        return self.safety is SafetyStatus.SAFE

    @property
    def safety_factor(self) -> float:
        """Capacity of the selected cable over the current it was selected for."""
        if self.derated_current <= 0:
            return math.inf
        return self.cable.current_capacity / self.derated_current
