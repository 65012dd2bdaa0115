import re
import sys

from core.converters import convert_length_unit, convert_power_unit, to_installation_method
from core.exceptions import InvalidInputError
from core.models import AMBIENT_TEMPERATURES, CalculationInput, InstallationMethod
from core.report import build_workbook, report_filename
from sizing.cable_logic import calculate

VALUE_UNIT_RE = re.compile(r"([0-9\.]+)\s*([a-zA-Z]+)")


def split_value_unit(text: str, default_unit: str):
    match = VALUE_UNIT_RE.match(text.strip())
    if match:
        return float(match.group(1)), match.group(2)
    return float(text), default_unit


def get_installation_params():
    print("\n--- Installation Conditions ---")

    print("Installation methods: (1) Air, (2) Conduit, (3) Buried, (4) Tray")
    m_choice = input("Select method [1]: ").strip()
    methods = {"1": "air", "2": "conduit", "3": "buried", "4": "tray"}
    method = to_installation_method(methods.get(m_choice, "air"))

    temps = ", ".join(str(t) for t in AMBIENT_TEMPERATURES)
    try:
        temp = float(input(f"Ambient temperature (°C) [{temps}] [Default 30]: ") or 30.0)
    except ValueError:
        temp = 30.0
    if temp not in AMBIENT_TEMPERATURES:
        print(f"[WARN] {temp:g}°C is not in the derating table, no temperature correction applied.")

    return method, temp


def get_runs_input(method: InstallationMethod, temp: float):
    runs = []
    print("\n--- Cable Runs ---")

    while True:
        print(f"\n[Run #{len(runs)+1}]")
        name = input("Run name (empty to finish): ").strip()
        if not name: break

        try:
            voltage = float(input("Voltage (V): "))
            phases = int(input("Phases (1 or 3): "))
            pf = float(input("Power factor [0.9]: ") or 0.9)

            val, unit = split_value_unit(input("Power (e.g. 10 kW, 1500 W, 5 HP, 20 A, 50 kVA): "), "kW")
            power_kw = convert_power_unit(val, unit, voltage, phases, pf)

            l_val, l_unit = split_value_unit(input("Cable length (e.g. 50 m, 100 ft): "), "m")
            length_m = convert_length_unit(l_val, l_unit)

            limit = float(input("Voltage drop limit % [5]: ") or 5.0)

            data = CalculationInput(
                voltage=voltage, power=power_kw, power_factor=pf, distance=length_m,
                phases=phases, voltage_drop_limit=limit,
                installation_method=method, ambient_temp=temp,
            ).validate()
            runs.append((name, data))

        except (ValueError, InvalidInputError) as e:
            print(f"Input error: {e}. Please try again.")

        more = input("Add another run? (y/n): ").lower()
        if more != 'y':
            break

    return runs


def main():
    print("==========================================================")
    print(" CABLE SIZING CALCULATOR")
    print("==========================================================")

    # 1. Shared installation conditions
    method, temp = get_installation_params()

    # 2. Cable runs
    run_data = get_runs_input(method, temp)

    if not run_data:
        print("No cable runs entered.")
        sys.exit()

    print("\nCalculating...")
    print("-" * 110)
    print(f"{'Run':<15} | {'I (A)':<8} | {'I Der.':<8} | {'Cable':<10} | {'% VD':<8} | {'Status':<8} | {'Total USD':<10} | {'Notes'}")
    print("-" * 110)

    results = []

    for name, data in run_data:
        result = calculate(data)
        results.append((name, data, result))

        warn = " (!)" if not result.is_safe else ""
        notes = "OVERSIZE" if result.oversize_fallback else ""
        print(f"{name:<15} | {result.current:<8.2f} | {result.derated_current:<8.2f} | {result.cable.label:<10} | "
              f"{result.voltage_drop:<8.2f}{warn} | {result.safety.value:<8} | {result.total_cost:<10.2f} | {notes}")

    print("-" * 110)

    # 3. Recommendations
    for name, _, result in results:
        print(f"\n[{name}] Margin: {result.analysis.safety.margin:.2f}% | {result.analysis.economic.cost_breakdown}")
        for rec in result.analysis.recommendations:
            print(f"  - ({rec.tier.value}) {rec.message}")

    # 4. Export
    ask = input("\nExport report to Excel? (y/n): ").lower()
    if ask == 'y':
        filename = report_filename()
        build_workbook(results).save(filename)
        print(f"\n[INFO] Excel report written: {filename}")


if __name__ == "__main__":
    main()
