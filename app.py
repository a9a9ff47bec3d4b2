import math

import altair as alt
import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from dimension_utils import apply_request_row
from layout_engine import compute_layout, generate_all_layouts
from layout_plot import draw_sheet_layout
from layout_storage import build_layout_payload, create_dxf_zip, json_to_payload, layout_to_dxf, parse_layout_payload, payload_to_json
from leftover_utils import build_layout_heatmap, calculate_layout_offcuts, is_leftover_reusable
from settings import (
    DEFAULT_BLANK_LENGTH,
    DEFAULT_BLANK_WIDTH,
    DEFAULT_OFFCUT_MIN_AREA,
    DEFAULT_OFFCUT_MIN_HEIGHT,
    DEFAULT_OFFCUT_MIN_WIDTH,
    DEFAULT_ORIENTATION,
    DEFAULT_SHEET_LENGTH,
    DEFAULT_SHEET_WIDTH,
    MATERIAL_DENSITIES,
    SHEET_PRESETS,
    configure_logging,
)
from sheet_optimizer import (
    calculate_cost_savings,
    calculate_scrap,
    calculate_scrap_from_efficiency,
    material_density,
    optimize_sheet_cutting,
)

configure_logging()

# --- PAGE CONFIG ---
st.set_page_config(page_title="Sheet Blank Layout", layout="wide")

# --- SESSION STATE ---
if 'sheet_width' not in st.session_state:
    st.session_state.sheet_width = DEFAULT_SHEET_WIDTH
if 'sheet_length' not in st.session_state:
    st.session_state.sheet_length = DEFAULT_SHEET_LENGTH
if 'blank_width' not in st.session_state:
    st.session_state.blank_width = DEFAULT_BLANK_WIDTH
if 'blank_length' not in st.session_state:
    st.session_state.blank_length = DEFAULT_BLANK_LENGTH
if 'orientation' not in st.session_state:
    st.session_state.orientation = DEFAULT_ORIENTATION
if 'last_sheet_preset_applied' not in st.session_state:
    st.session_state.last_sheet_preset_applied = "Custom"

ORIENTATION_OPTIONS = ["HORIZONTAL", "VERTICAL", "SMART_MIXED"]


def apply_pending_loaded_layout():
    pending = st.session_state.pop("pending_loaded_layout", None)
    if pending is None:
        return

    request = pending["request"]
    st.session_state.sheet_width = request["sheet_width"]
    st.session_state.sheet_length = request["sheet_length"]
    st.session_state.blank_width = request["blank_width"]
    st.session_state.blank_length = request["blank_length"]
    st.session_state.orientation = request["orientation"].value
    st.session_state["loaded_layout_name"] = pending["layout_name"]
    st.session_state.sheet_preset = infer_sheet_preset(request["sheet_width"], request["sheet_length"])
    st.session_state.last_sheet_preset_applied = st.session_state.sheet_preset


def infer_sheet_preset(sheet_width, sheet_length):
    for preset, dims in SHEET_PRESETS.items():
        if (sheet_width, sheet_length) == dims:
            return preset
    return "Custom"


def sync_sheet_dims_from_preset():
    preset = st.session_state.get("sheet_preset", "Custom")
    if st.session_state.get("last_sheet_preset_applied") == preset:
        return

    dims = SHEET_PRESETS.get(preset)
    if dims is not None:
        st.session_state.sheet_width, st.session_state.sheet_length = dims

    st.session_state.last_sheet_preset_applied = preset


def current_request():
    return apply_request_row({
        "sheet_width": st.session_state.sheet_width,
        "sheet_length": st.session_state.sheet_length,
        "blank_width": st.session_state.blank_width,
        "blank_length": st.session_state.blank_length,
        "orientation": st.session_state.orientation,
        "Swap L↔W": st.session_state.get("swap_blank", False),
    })


def stats_frame(layouts):
    rows = []
    for layout in layouts:
        row = {"Mode": layout.direction.value}
        row.update(layout.stats.to_dict())
        rows.append(row)
    return pd.DataFrame(rows)


apply_pending_loaded_layout()

# --- SIDEBAR ---
with st.sidebar:
    st.header("⚙️ Sheet & Blank")

    if "sheet_preset" not in st.session_state:
        st.session_state.sheet_preset = infer_sheet_preset(st.session_state.sheet_width, st.session_state.sheet_length)
    st.selectbox("Sheet preset", ["Custom"] + list(SHEET_PRESETS.keys()), key="sheet_preset", on_change=sync_sheet_dims_from_preset)

    st.number_input("Sheet width (mm)", min_value=1.0, step=10.0, key="sheet_width")
    st.number_input("Sheet length (mm)", min_value=1.0, step=10.0, key="sheet_length")
    st.number_input("Blank width (mm)", min_value=1.0, step=1.0, key="blank_width")
    st.number_input("Blank length (mm)", min_value=1.0, step=1.0, key="blank_length")
    st.checkbox("Swap blank L↔W", key="swap_blank")
    st.selectbox("Cutting mode", ORIENTATION_OPTIONS, key="orientation")

    st.write("---")
    uploaded = st.file_uploader("📂 Load layout (.json)", type=["json"])
    if uploaded is not None and st.button("Load"):
        try:
            st.session_state["pending_loaded_layout"] = parse_layout_payload(json_to_payload(uploaded.getvalue().decode("utf-8")))
            st.rerun()
        except ValueError as e:
            st.error(f"Could not load layout: {e}")

try:
    request = current_request()
except ValueError as e:
    st.error(str(e))
    st.stop()

layout = compute_layout(**request)
all_layouts = generate_all_layouts(request["sheet_width"], request["sheet_length"], request["blank_width"], request["blank_length"])

layout_tab, compare_tab, optimize_tab, offcut_tab = st.tabs(["📐 Layout", "🔀 Compare Modes", "🏭 Sheet Optimizer", "♻️ Offcuts & Heat Map"])

with layout_tab:
    stats = layout.stats
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total blanks", stats.total_blanks)
    m2.metric("Primary / extra", f"{stats.primary_blanks} / {stats.extra_blanks}")
    m3.metric("Efficiency", f"{stats.efficiency:.2f}%")
    m4.metric("Scrap", f"{stats.scrap_percentage:.2f}%")

    fig = draw_sheet_layout(layout)
    st.pyplot(fig)
    plt.close(fig)

    if layout.leftover_areas:
        st.markdown("#### Leftover areas")
        leftover_df = pd.DataFrame([a.to_dict() for a in layout.leftover_areas])
        leftover_df["reusable"] = [is_leftover_reusable(a.width, a.height) for a in layout.leftover_areas]
        st.dataframe(leftover_df, hide_index=True, width="stretch")

    export_col0, export_col1, export_col2 = st.columns([2, 1, 1])
    with export_col0:
        layout_name = st.text_input("Layout name", value=st.session_state.get("loaded_layout_name", "My Layout"))
    file_stem = layout_name.strip().replace(' ', '_') or 'layout'
    with export_col1:
        st.download_button(
            "💾 Save Layout",
            data=payload_to_json(build_layout_payload(layout_name, layout)),
            file_name=f"{file_stem}.json",
            mime="application/json",
            type="secondary",
            use_container_width=True,
        )
    with export_col2:
        st.download_button("💾 DXF", layout_to_dxf(layout), f"{file_stem}.dxf", "application/dxf", type="secondary", use_container_width=True)

with compare_tab:
    st.subheader("All cutting modes")
    st.caption(f"Best mode: {all_layouts['best_direction'].value}")
    modes = [all_layouts["horizontal"], all_layouts["vertical"], all_layouts["smart"]]
    compare_df = stats_frame(modes)
    st.dataframe(compare_df, hide_index=True, width="stretch")

    chart = (
        alt.Chart(compare_df)
        .mark_bar()
        .encode(
            x=alt.X("Mode:N", title="Cutting mode"),
            y=alt.Y("total_blanks:Q", title="Blanks per sheet"),
            color=alt.Color("Mode:N", legend=None),
            tooltip=["Mode", "total_blanks", "primary_blanks", "extra_blanks", alt.Tooltip("efficiency:Q", format=".2f")],
        )
        .properties(height=280)
    )
    st.altair_chart(chart, width="stretch")

    cols = st.columns(3)
    for col, mode_layout in zip(cols, modes):
        with col:
            mode_fig = draw_sheet_layout(mode_layout, show_labels=False)
            st.pyplot(mode_fig)
            plt.close(mode_fig)

    st.download_button(
        "💾 All modes (DXF zip)",
        create_dxf_zip({m.direction.value: m for m in modes}),
        "layouts.zip",
        "application/zip",
    )

with optimize_tab:
    st.subheader("Sheet size optimisation")
    o1, o2, o3 = st.columns(3)
    thickness = o1.number_input("Blank thickness (mm)", min_value=0.1, value=2.0, step=0.5)
    quantity = o2.number_input("Blanks required", min_value=1, value=500, step=10)
    material = o3.selectbox("Material", list(MATERIAL_DENSITIES))
    density = material_density(material)
    include_smart = st.checkbox("Include SMART_MIXED mode", value=True)

    default_sheets = pd.DataFrame(
        [{"sheet_size_id": name, "width_mm": w, "length_mm": l, "material_type": material, "active": True} for name, (w, l) in SHEET_PRESETS.items()]
    )
    sheets_df = st.data_editor(default_sheets, num_rows="dynamic", hide_index=True, key="optimizer_sheets")

    if st.button("🚀 OPTIMISE", type="primary", use_container_width=True):
        try:
            result = optimize_sheet_cutting(
                {
                    "width_mm": request["blank_width"],
                    "length_mm": request["blank_length"],
                    "thickness_mm": thickness,
                    "quantity": quantity,
                },
                sheets_df.to_dict("records"),
                density=density,
                include_smart=include_smart,
            )
        except ValueError as e:
            st.error(str(e))
        else:
            r1, r2, r3, r4 = st.columns(4)
            r1.metric("Best sheet", f"{result['best_sheet_width']:.0f} x {result['best_sheet_length']:.0f}")
            r2.metric("Mode", result["best_direction"])
            r3.metric("Blanks / sheet", result["total_blanks_per_sheet"])
            r4.metric("Sheets needed", result["sheets_needed"])

            scrap = calculate_scrap(
                {
                    "width": result["best_sheet_width"],
                    "length": result["best_sheet_length"],
                    "thickness": thickness,
                    "material_type": result["material_type"] or material,
                },
                result["total_blanks_weight_per_sheet"],
            )
            by_area = calculate_scrap_from_efficiency(scrap["sheet_weight"], result["efficiency"])
            st.caption(
                f"Blank weight {result['weight_of_blank']:.3f} kg · sheet {scrap['sheet_weight']:.2f} kg · "
                f"scrap {scrap['scrap_weight']:.2f} kg ({scrap['scrap_pct']:.1f}%) per sheet "
                f"(area basis {by_area['scrap_weight']:.2f} kg)"
            )

            comparisons = pd.DataFrame(result["all_sheet_comparisons"]).drop(columns=["leftover_details"])
            st.dataframe(comparisons, hide_index=True, width="stretch")

            baseline = result["horizontal_result"]
            if baseline:
                savings = calculate_cost_savings(
                    result,
                    {
                        "scrap": baseline["scrap"],
                        "efficiency": baseline["efficiency"],
                        "total_blanks_per_sheet": baseline["total_blanks"],
                        "sheets_needed": math.ceil(int(quantity) / baseline["total_blanks"]),
                    },
                )
                st.markdown("#### Versus horizontal cutting on the same sheet")
                st.json(savings)

with offcut_tab:
    st.subheader("Offcut Summary & Heat Map")
    min_offcut_w = st.number_input("Min offcut width (mm)", min_value=0.0, value=DEFAULT_OFFCUT_MIN_WIDTH, step=10.0, key="min_offcut_w")
    min_offcut_h = st.number_input("Min offcut height (mm)", min_value=0.0, value=DEFAULT_OFFCUT_MIN_HEIGHT, step=10.0, key="min_offcut_h")
    min_offcut_area = st.number_input("Min offcut area (mm²)", min_value=0.0, value=DEFAULT_OFFCUT_MIN_AREA, step=1000.0, key="min_offcut_area")

    offcuts = calculate_layout_offcuts(layout, min_width=min_offcut_w, min_height=min_offcut_h, min_area=min_offcut_area)

    metrics_col1, metrics_col2, metrics_col3 = st.columns(3)
    metrics_col1.metric("Utilization", f"{offcuts['utilization_pct']}%")
    metrics_col2.metric("Used area", f"{(offcuts['used_area'] / 1_000_000):.2f} m²")
    metrics_col3.metric("Waste area", f"{(offcuts['waste_area'] / 1_000_000):.2f} m²")

    if offcuts["reusable_offcuts"]:
        st.caption(f"Reusable offcuts found: {len(offcuts['reusable_offcuts'])}")
        st.dataframe(pd.DataFrame(offcuts["reusable_offcuts"]), hide_index=True, width="stretch")
    else:
        st.caption("No reusable offcuts match current filter thresholds.")

    st.markdown("#### Sheet Usage Heat Map")
    heat_cell = st.number_input("Heat map cell size (mm)", min_value=25.0, value=150.0, step=25.0, key="heatmap_cell_size")
    heat_rows = build_layout_heatmap(layout, cell_size=heat_cell)
    if heat_rows:
        heat_df = pd.DataFrame(heat_rows)
        heat_chart = (
            alt.Chart(heat_df)
            .mark_rect()
            .encode(
                x=alt.X("x:Q", title="X (mm)"),
                x2="x2:Q",
                y=alt.Y("y:Q", title="Y (mm)", scale=alt.Scale(reverse=True)),
                y2="y2:Q",
                color=alt.Color("usage_pct:Q", title="Usage %", scale=alt.Scale(scheme="yelloworangered", domain=[0, 100])),
                tooltip=[
                    alt.Tooltip("x:Q", title="X"),
                    alt.Tooltip("y:Q", title="Y"),
                    alt.Tooltip("usage_pct:Q", title="Usage %"),
                    alt.Tooltip("used_area:Q", title="Used area"),
                    alt.Tooltip("cell_area:Q", title="Cell area"),
                ],
            )
            .properties(height=360)
        )
        st.altair_chart(heat_chart, width="stretch")
        st.caption("Darker cells are covered by blanks; lighter cells are leftover material.")
