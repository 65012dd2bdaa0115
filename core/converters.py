import math
from typing import Any, Mapping, Optional

from core.exceptions import InvalidInputError, MissingParametersError
from core.models import CalculationInput, InstallationMethod

REQUIRED_FIELDS = ("voltage", "power", "power_factor", "distance", "phases", "voltage_drop_limit")

# JSON / form spellings -> CalculationInput field
FIELD_ALIASES = {
    "voltage": "voltage",
    "power": "power",
    "powerFactor": "power_factor",
    "power_factor": "power_factor",
    "distance": "distance",
    "phases": "phases",
    "voltageDropLimit": "voltage_drop_limit",
    "voltage_drop_limit": "voltage_drop_limit",
    "installationMethod": "installation_method",
    "installation_method": "installation_method",
    "ambientTemp": "ambient_temp",
    "ambient_temp": "ambient_temp",
}


def convert_power_unit(val: float, unit: str, voltage: float, phases: int, pf: float) -> float:
    """Converts a power (or current) reading to kW."""
    unit = unit.strip().upper()

    # 1. Power Units
    if unit == "W": return val / 1000.0
    if unit == "KW": return val
    if unit == "MW": return val * 1000.0
    if unit == "HP": return val * 0.746

    # 2. Current Units
    if unit == "A":
        factor = math.sqrt(3) if phases == 3 else 1.0
        return val * voltage * factor * pf / 1000.0

    # 3. Apparent
    if unit == "VA": return val * pf / 1000.0
    if unit == "KVA": return val * pf
    if unit == "MVA": return val * pf * 1000.0

    raise InvalidInputError(f"Unsupported power unit: {unit}", field="power")


def convert_length_unit(val: float, unit: str) -> float:
    """Returns length in meters."""
    unit = unit.strip().lower()
    if unit in ["m", "meter", "meters"]: return val
    if unit in ["km"]: return val * 1000.0
    if unit in ["ft", "feet"]: return val * 0.3048
    if unit in ["yd", "yard", "yards"]: return val * 0.9144
    raise InvalidInputError(f"Unsupported length unit: {unit}", field="distance")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number", field=name)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        # Accept decimal commas typed into forms
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        raise InvalidInputError(f"{name} must be a number, got {value!r}", field=name)


def to_phases(value: Any) -> int:
    number = to_float(value, "phases")
    if number not in (1, 3):
        raise InvalidInputError("phases must be 1 or 3", field="phases")
    return int(number)


def to_installation_method(value: Any) -> InstallationMethod:
    if isinstance(value, InstallationMethod):
        return value
    try:
        return InstallationMethod(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError(f"Unknown installation method: {value}", field="installation_method")


def parse_calculation_input(payload: Optional[Mapping[str, Any]]) -> CalculationInput:
    """Builds a validated CalculationInput from a request body or form mapping."""
    if not payload:
        raise MissingParametersError()
    if not isinstance(payload, Mapping):
        raise InvalidInputError("Request body must be a JSON object")

    fields = {}
    for key, value in payload.items():
        name = FIELD_ALIASES.get(key)
        if name and not _is_blank(value):
            fields[name] = value

    missing = [f for f in REQUIRED_FIELDS if f not in fields]
    if missing:
        raise MissingParametersError(missing)

    data = CalculationInput(
        voltage=to_float(fields["voltage"], "voltage"),
        power=to_float(fields["power"], "power"),
        power_factor=to_float(fields["power_factor"], "power_factor"),
        distance=to_float(fields["distance"], "distance"),
        phases=to_phases(fields["phases"]),
        voltage_drop_limit=to_float(fields["voltage_drop_limit"], "voltage_drop_limit"),
        installation_method=to_installation_method(fields.get("installation_method", InstallationMethod.AIR)),
        ambient_temp=to_float(fields.get("ambient_temp", 30.0), "ambient_temp"),
    )
    return data.validate()
