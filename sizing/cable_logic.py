import logging
import math
from typing import Tuple

from core.components import CableSpec
from core.exceptions import InvalidInputError
from core.models import CalculationInput, CalculationResult, SafetyStatus
from sizing.analysis import build_analysis
from sizing.cable_tables import (
    get_cable_table,
    get_installation_factor,
    get_resistance,
    get_temperature_factor,
)

logger = logging.getLogger(__name__)

# Selected cable must carry 125% of the (derated) design current
SAFETY_MARGIN = 1.25


def _check_positive(**values):
    for name, value in values.items():
        if not math.isfinite(value) or value <= 0:
            raise InvalidInputError(f"{name} must be a positive number", field=name)


class CableSizingLogic:
    @staticmethod
    def compute_current(power: float, voltage: float, power_factor: float, phases: int) -> float:
        _check_positive(power=power, voltage=voltage, power_factor=power_factor)
        if power_factor > 1:
            raise InvalidInputError("Power factor must be between 0 and 1", field="power_factor")
        if phases == 1:
            current = (power * 1000) / (voltage * power_factor)
        elif phases == 3:
            current = (power * 1000) / (voltage * power_factor * math.sqrt(3))
        else:
            raise InvalidInputError(f"Unsupported phase count: {phases}", field="phases")
        if not math.isfinite(current):
            raise InvalidInputError("Inputs give a current out of range", field="voltage")
        return current

    @staticmethod
    def apply_derating(current: float, installation_method, ambient_temp: float) -> Tuple[float, float, float]:
        """Returns (derated_current, temp_factor, method_factor)."""
        f_temp = get_temperature_factor(ambient_temp)
        f_method = get_installation_factor(installation_method)
        return current / (f_temp * f_method), f_temp, f_method

    @staticmethod
    def select_cable(current: float, phases: int) -> Tuple[CableSpec, bool]:
        """Returns (cable, oversize_fallback). Falls back to the largest cable instead of failing."""
        required_capacity = current * SAFETY_MARGIN
        table = get_cable_table(phases)
        for cable in table:
            if cable.current_capacity >= required_capacity:
                return cable, False

        logger.warning(
            "Required capacity %.2f A exceeds largest cable (%s, %s A); using it anyway",
            required_capacity, table[-1].label, table[-1].current_capacity,
        )
        return table[-1], True

    @staticmethod
    def compute_voltage_drop(current: float, cable_size: float, distance: float, phases: int, voltage: float) -> float:
        _check_positive(cable_size=cable_size)
        resistance, tabulated = get_resistance(cable_size)
        if not tabulated:
            logger.warning("No resistance listed for %s mm2, approximating as 1/size", cable_size)
        resistance_per_meter = resistance / 1000

        if phases == 1:
            drop = 2 * current * resistance_per_meter * distance
        else:
            drop = math.sqrt(3) * current * resistance_per_meter * distance

        return (drop / voltage) * 100

    @staticmethod
    def compute_cost(cable: CableSpec, distance: float) -> Tuple[float, float]:
        """Returns (price_per_meter, total_cost)."""
        return cable.price_per_meter, distance * cable.price_per_meter

    @staticmethod
    def evaluate_safety(voltage_drop: float, voltage_drop_limit: float) -> SafetyStatus:
        return SafetyStatus.SAFE if voltage_drop <= voltage_drop_limit else SafetyStatus.WARNING

    @staticmethod
    def compute_power_loss(current: float, cable_size: float, distance: float, phases: int) -> float:
        # Watts dissipated in the run, resistance in Ohm/km and distance in m
        _check_positive(cable_size=cable_size)
        resistance, _ = get_resistance(cable_size)
        conductors = 2 if phases == 1 else 3
        return conductors * current ** 2 * resistance * distance / 1000

    @staticmethod
    def calculate_cable_size(data: CalculationInput) -> CalculationResult:
        data.validate()

        current = CableSizingLogic.compute_current(data.power, data.voltage, data.power_factor, data.phases)
        derated, f_temp, f_method = CableSizingLogic.apply_derating(
            current, data.installation_method, data.ambient_temp
        )

        cable, oversize = CableSizingLogic.select_cable(derated, data.phases)
        # Voltage drop and losses follow the current actually flowing, not the derated figure
        vd = CableSizingLogic.compute_voltage_drop(current, cable.size, data.distance, data.phases, data.voltage)
        price_per_meter, total_cost = CableSizingLogic.compute_cost(cable, data.distance)
        safety = CableSizingLogic.evaluate_safety(vd, data.voltage_drop_limit)
        power_loss = CableSizingLogic.compute_power_loss(current, cable.size, data.distance, data.phases)
        if not all(math.isfinite(v) for v in (vd, total_cost, power_loss)):
            raise InvalidInputError("Inputs are out of range", field="distance")

        logger.debug(
            "I=%.2f A (derated %.2f A, temp %.2f * method %.2f) -> %s, VD=%.2f%% (%s)",
            current, derated, f_temp, f_method, cable.label, vd, safety.value,
        )

        result = CalculationResult(
            current=current,
            derated_current=derated,
            temperature_factor=f_temp,
            installation_factor=f_method,
            cable=cable,
            voltage_drop=vd,
            safety=safety,
            price_per_meter=price_per_meter,
            total_cost=total_cost,
            power_loss=power_loss,
            oversize_fallback=oversize,
            description=(
                f"Recommended cable size ({data.phase.core_description} cable & earth "
                f"must be same size or half size)"
            ),
        )
        result.analysis = build_analysis(result, data)
        if not math.isfinite(result.analysis.economic.annual_loss_cost):
            raise InvalidInputError("Inputs are out of range", field="distance")
        return result


calculate = CableSizingLogic.calculate_cable_size
