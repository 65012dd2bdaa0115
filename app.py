import streamlit as st
import pandas as pd
import io
from core.converters import convert_length_unit, convert_power_unit, parse_calculation_input
from core.exceptions import InvalidInputError
from core.models import AMBIENT_TEMPERATURES, InstallationMethod, RecommendationTier
from core.report import workbook_bytes
from sizing.cable_logic import calculate
from sizing.cable_tables import get_cable_prices

# --- Page Config ---
st.set_page_config(
    page_title="Cable Sizing Calculator",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded"
)

# --- Custom CSS ---
st.markdown("""
<style>
    .main-header { font-family: 'Inter', sans-serif; color: #1E3A8A; font-weight: 700; }
    .stDataFrame { border-radius: 10px; overflow: hidden; }
</style>
""", unsafe_allow_html=True)

METHODS = [m.value for m in InstallationMethod]

# --- Session State Init ---
INPUT_COLUMNS = [
    "Name", "Voltage", "Power", "Unit", "Phases", "PF",
    "Length", "L.Unit", "VD Limit", "Method", "T.Amb"
]
RESULT_COLUMNS = ["I (A)", "I Derated (A)", "Cable (mm²)", "% VD", "Status", "USD/m", "Total USD", "Notes"]

if 'runs_df' not in st.session_state:
    st.session_state.runs_df = pd.DataFrame(columns=INPUT_COLUMNS)
else:
    # Keep only input columns, results are recomputed on every rerun
    existing_cols = [c for c in INPUT_COLUMNS if c in st.session_state.runs_df.columns]
    st.session_state.runs_df = st.session_state.runs_df[existing_cols]
    for col in INPUT_COLUMNS:
        if col not in st.session_state.runs_df.columns:
            st.session_state.runs_df[col] = None

if "voltage_input" not in st.session_state:
    st.session_state.voltage_input = 400.0

def on_phase_change():
    if st.session_state.phases_input == 1:
        st.session_state.voltage_input = 230.0
    else:
        st.session_state.voltage_input = 400.0

# --- Helper: Row -> Engine ---
def row_to_input(row):
    voltage = float(row["Voltage"])
    phases = int(row["Phases"])
    pf = float(row["PF"])
    return parse_calculation_input({
        "voltage": voltage,
        "power": convert_power_unit(float(row["Power"]), str(row["Unit"]), voltage, phases, pf),
        "powerFactor": pf,
        "distance": convert_length_unit(float(row["Length"]), str(row["L.Unit"])),
        "phases": phases,
        "voltageDropLimit": row["VD Limit"],
        "installationMethod": row["Method"],
        "ambientTemp": row["T.Amb"],
    })

def calculate_row_results(row):
    try:
        data = row_to_input(row)
        res = calculate(data)
        return pd.Series({
            "I (A)": round(res.current, 2),
            "I Derated (A)": round(res.derated_current, 2),
            "Cable (mm²)": res.cable.size,
            "% VD": round(res.voltage_drop, 2),
            "Status": res.safety.value,
            "USD/m": res.price_per_meter,
            "Total USD": round(res.total_cost, 2),
            "Notes": "OVERSIZE: largest cable used" if res.oversize_fallback else "",
            "_run": (str(row["Name"]), data, res)  # kept for the detail view and report (hidden)
        })
    except (InvalidInputError, ValueError, TypeError) as e:
        return pd.Series({"Notes": f"Error: {e}"})

# --- Helper: Export Excel (table as shown) ---
def table_to_excel(df):
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        cols_to_export = [c for c in df.columns if c != "_run"]
        df[cols_to_export].to_excel(writer, index=False, sheet_name='Cable Runs')
    return output.getvalue()

# --- Sidebar ---
with st.sidebar:
    st.title("Settings")
    st.info("Every cell of the main table can be edited directly.")

    price_phase = st.radio("Price list", ["single", "three"], horizontal=True)
    prices = get_cable_prices(price_phase)
    st.dataframe(
        pd.DataFrame({"Size (mm²)": list(prices.keys()), "USD/m": list(prices.values())}),
        hide_index=True, use_container_width=True
    )

    st.markdown("---")
    st.subheader("📥 Bulk Import")

    def get_template():
        data = {
            "Name": ["Pump feeder", "Lighting board"],
            "Voltage": [400, 230],
            "Power": [10, 3],
            "PowerUnit": ["kW", "kW"],
            "Phases": [3, 1],
            "PF": [0.8, 1.0],
            "Length": [100, 50],
            "LengthUnit": ["m", "m"],
            "VDLimit": [5.0, 3.0],
            "Method": ["air", "conduit"],
            "AmbientTemp": [30, 35],
        }
        df = pd.DataFrame(data)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Template')
        return output.getvalue()

    st.download_button(
        "📄 Download Excel Template",
        data=get_template(),
        file_name="cable_runs_template.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        help="Fill in the template and upload it below."
    )

    uploaded_file = st.file_uploader("Upload Excel", type=["xlsx"])

    if uploaded_file:
        if st.button("Process File"):
            new_rows = []
            try:
                df_in = pd.read_excel(uploaded_file)

                for idx, row in df_in.iterrows():
                    try:
                        n_row = {
                            "Name": str(row.get("Name", "Run")),
                            "Voltage": float(row.get("Voltage", 400)),
                            "Power": float(row.get("Power", 0)),
                            "Unit": str(row.get("PowerUnit", "kW")).strip(),
                            "Phases": int(row.get("Phases", 3)),
                            "PF": float(row.get("PF", 0.9)),
                            "Length": float(row.get("Length", 10)),
                            "L.Unit": str(row.get("LengthUnit", "m")).strip(),
                            "VD Limit": float(row.get("VDLimit", 5.0)),
                            "Method": str(row.get("Method", "air")).strip().lower(),
                            "T.Amb": float(row.get("AmbientTemp", 30)),
                        }
                        new_rows.append(n_row)
                    except (ValueError, TypeError) as e:
                        st.error(f"Could not parse row {idx+2}: {e}")
            except Exception as e:
                st.error(f"Could not read file: {e}")

            if new_rows:
                st.session_state.runs_df = pd.concat([st.session_state.runs_df, pd.DataFrame(new_rows)], ignore_index=True)
                st.success(f"✅ {len(new_rows)} runs imported.")
                st.rerun()

# --- Main Area ---
st.markdown("<h1 class='main-header'>⚡ Cable Sizing Calculator</h1>", unsafe_allow_html=True)
st.markdown("---")

with st.expander("➕ Add Cable Run", expanded=True):
    name = st.text_input("Run name", "Run 1")

    st.markdown("##### ⚡ Electrical Data")
    c_v1, c_v2, c_p1, c_p2, c_fp = st.columns([1.2, 0.8, 1.5, 0.8, 1])
    voltage = c_v1.number_input("Voltage (V)", step=10.0, key="voltage_input")
    phases = c_v2.radio("Phases", [1, 3], index=1, horizontal=True, key="phases_input", on_change=on_phase_change)
    power = c_p1.number_input("Power", 0.0, step=0.1, format="%.2f")
    unit = c_p2.selectbox("Unit", ["kW", "W", "HP", "A", "kVA"])
    pf = c_fp.number_input("PF", 0.1, 1.0, 0.9, 0.05)

    st.markdown("##### 📏 Installation")
    c_L1, c_L2, c_VD, c_M, c_T = st.columns([1.5, 0.8, 1, 1, 1])
    length = c_L1.number_input("Length", 1.0, step=1.0)
    l_unit = c_L2.selectbox("L.Unit", ["m", "ft"])
    vd_limit = c_VD.number_input("VD limit (%)", 0.5, 20.0, 5.0, 0.5)
    method = c_M.selectbox("Method", METHODS)
    temp = c_T.selectbox("T.Amb (°C)", AMBIENT_TEMPERATURES)

    st.write("")
    if st.button("Add to Table", type="primary", use_container_width=True):
        new_row = {
            "Name": name, "Voltage": voltage, "Power": power, "Unit": unit,
            "Phases": phases, "PF": pf, "Length": length, "L.Unit": l_unit,
            "VD Limit": vd_limit, "Method": method, "T.Amb": temp,
        }
        st.session_state.runs_df = pd.concat([st.session_state.runs_df, pd.DataFrame([new_row])], ignore_index=True)
        st.rerun()

st.markdown("### 📋 Cable Runs (Editable)")

tb1, tb2, tb3 = st.columns([1, 1, 4])
with tb1:
    if st.button("🗑️ Clear Table", type="secondary", use_container_width=True):
        st.session_state.runs_df = pd.DataFrame(columns=INPUT_COLUMNS)
        st.rerun()

st.caption("Edit any cell to recalculate. Select rows and press Delete to remove them.")

df_to_show = st.session_state.runs_df.copy()

if not df_to_show.empty:
    results = df_to_show.apply(calculate_row_results, axis=1)
    df_full = pd.concat([df_to_show, results], axis=1)
else:
    df_full = pd.concat([df_to_show, pd.DataFrame(columns=RESULT_COLUMNS + ["_run"])], axis=1)

with tb2:
    if not df_full.empty:
        st.download_button(
            "📥 Table",
            data=table_to_excel(df_full),
            file_name="cable_runs.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True
        )

column_config = {
    "Unit": st.column_config.SelectboxColumn(options=["kW", "W", "HP", "A", "kVA"], width="small"),
    "Voltage": st.column_config.NumberColumn(step=10),
    "Phases": st.column_config.SelectboxColumn(options=[1, 3], width="small"),
    "PF": st.column_config.NumberColumn(min_value=0.1, max_value=1.0, step=0.05),
    "L.Unit": st.column_config.SelectboxColumn(options=["m", "ft"], width="small"),
    "Method": st.column_config.SelectboxColumn(options=METHODS, width="small"),
    "T.Amb": st.column_config.SelectboxColumn(options=list(AMBIENT_TEMPERATURES), width="small"),
}

edited_df = st.data_editor(
    df_full.drop(columns=["_run"], errors="ignore"),  # result objects are not editable cells
    key="editor",
    use_container_width=True,
    num_rows="dynamic",
    column_config=column_config,
    disabled=RESULT_COLUMNS,
    height=400
)

edited_inputs = edited_df[INPUT_COLUMNS]
if not edited_inputs.equals(st.session_state.runs_df):
    st.session_state.runs_df = edited_inputs
    st.rerun()

# --- Detail Section ---
runs = []
if "_run" in df_full.columns:
    runs = df_full["_run"].dropna().tolist()

if runs:
    st.markdown("---")
    st.subheader("🔍 Run Analysis")

    labels = [r[0] for r in runs]
    selected = st.selectbox("Run", range(len(runs)), format_func=lambda i: labels[i])
    run_name, data, res = runs[selected]
    analysis = res.analysis

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Cable", res.cable.label)
    c2.metric("Current", f"{res.current:.2f} A", f"derated {res.derated_current:.2f} A", delta_color="off")
    c3.metric("Voltage Drop", f"{res.voltage_drop:.2f} %", f"margin {analysis.safety.margin:.2f} %")
    c4.metric("Total Cost", f"$ {res.total_cost:.2f}")
    st.caption(res.description)

    payback = analysis.economic.payback_years
    e1, e2, e3, e4, e5 = st.columns(5)
    e1.metric("Savings vs reference", f"$ {analysis.economic.savings:.2f}")
    e2.metric("ROI", f"{analysis.economic.roi:.1f} %")
    e3.metric("Annual loss", f"{analysis.economic.annual_loss_kwh:.1f} kWh", f"$ {analysis.economic.annual_loss_cost:.2f}", delta_color="off")
    e4.metric("Payback", "N/A" if payback is None else f"{payback:.1f} years")
    e5.metric("Safety factor", f"{res.safety_factor:.2f}")
    st.caption(analysis.economic.cost_breakdown)

    for rec in analysis.recommendations:
        if rec.tier is RecommendationTier.WARNING:
            st.warning(rec.message)
        elif rec.tier is RecommendationTier.SUCCESS:
            st.success(rec.message)
        else:
            st.info(rec.message)

    st.download_button(
        "📥 Download Report (Excel)",
        data=workbook_bytes(runs),
        file_name="cable_sizing_report.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        help="Runs, recommendations and reference tables."
    )
