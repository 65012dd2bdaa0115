import datetime
import io
from typing import List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from core.models import CalculationInput, CalculationResult, RecommendationTier
from sizing.cable_tables import (
    CURRENT_CAPACITY,
    INSTALLATION_FACTORS,
    RESISTANCE_PER_KM,
    SINGLE_PHASE_CABLES,
    TEMPERATURE_FACTORS,
    THREE_PHASE_CABLES,
)

RUN_HEADERS = [
    "Run", "Voltage (V)", "Power (kW)", "P.F.", "Phases", "Length (m)", "Method", "T.Amb (°C)",
    "I (A)", "I Derated (A)", "Cable (mm²)", "Capacity (A)", "% VD", "Limit %", "Status",
    "USD/m", "Total USD", "Loss (W)", "Notes",
]

HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
WARNING_FILL = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")
HEADER_FONT = Font(bold=True)


def _style_header(ws, row: int = 1) -> None:
    for cell in ws[row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def build_workbook(runs: List[Tuple[str, CalculationInput, CalculationResult]]) -> Workbook:
    """One row per (name, input, result) cable run plus recommendation and reference sheets."""
    wb = Workbook()

    # --- Sheet 1: Runs ---
    ws1 = wb.active
    ws1.title = "Cable Runs"
    ws1.append(RUN_HEADERS)
    _style_header(ws1)

    for name, data, res in runs:
        notes = "OVERSIZE: largest cable used" if res.oversize_fallback else res.description
        ws1.append([
            name,
            data.voltage, data.power, data.power_factor, data.phases,
            data.distance, data.installation_method.value, data.ambient_temp,
            round(res.current, 2), round(res.derated_current, 2),
            res.cable.size, res.cable.current_capacity,
            round(res.voltage_drop, 2), data.voltage_drop_limit, res.safety.value,
            res.price_per_meter, round(res.total_cost, 2), round(res.power_loss, 1),
            notes,
        ])
        if not res.is_safe:
            for cell in ws1[ws1.max_row]:
                cell.fill = WARNING_FILL

    for col in ws1.columns:
        ws1.column_dimensions[col[0].column_letter].width = 14

    # --- Sheet 2: Recommendations ---
    ws2 = wb.create_sheet("Recommendations")
    ws2.append(["Run", "Type", "Message"])
    _style_header(ws2)
    for name, _, res in runs:
        for rec in res.analysis.recommendations:
            ws2.append([name, rec.tier.value, rec.message])
            if rec.tier is RecommendationTier.WARNING:
                ws2.cell(row=ws2.max_row, column=2).font = Font(bold=True, color="C00000")
    ws2.column_dimensions["C"].width = 90

    # --- Sheet 3: Reference tables ---
    ws3 = wb.create_sheet("Ref Cable Table")
    ws3.append(["Size (mm²)", "Capacity (A)", "Resistance (Ohm/km)", "USD/m 1-ph", "USD/m 3-ph"])
    _style_header(ws3)
    prices_1 = {c.size: c.price_per_meter for c in SINGLE_PHASE_CABLES}
    prices_3 = {c.size: c.price_per_meter for c in THREE_PHASE_CABLES}
    for size, capacity in CURRENT_CAPACITY.items():
        ws3.append([size, capacity, RESISTANCE_PER_KM[size], prices_1.get(size, "-"), prices_3.get(size, "-")])

    # --- Sheet 4: Derating ---
    ws4 = wb.create_sheet("Ref Derating")
    ws4.append(["Ambient (°C)", "Factor"])
    _style_header(ws4)
    for temp, factor in TEMPERATURE_FACTORS.items():
        ws4.append([temp, factor])
    ws4.append([])
    ws4.append(["Installation Method", "Factor"])
    for method, factor in INSTALLATION_FACTORS.items():
        ws4.append([method.value, factor])

    ws4.append([])
    ws4.append(["Generated:", datetime.datetime.now().strftime("%Y-%m-%d %H:%M")])
    return wb


def workbook_bytes(runs: List[Tuple[str, CalculationInput, CalculationResult]]) -> bytes:
    output = io.BytesIO()
    build_workbook(runs).save(output)
    return output.getvalue()


def report_filename(prefix: str = "Cable_Report") -> str:
    return f"{prefix}_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
