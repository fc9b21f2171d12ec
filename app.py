import logging

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from board_config import BOARD_PRESETS, DEFAULT_SETTINGS, ORIENTATION_MODES, infer_board_preset, new_layout, settings_of
from guillotine_editor import (
    add_part,
    find_part,
    move_part_to,
    place_part,
    placed_parts,
    rebuild_all,
    remove_part,
    rotate_part_90,
    unplaced_parts,
)
from layout_storage import build_layout_payload, layout_file_to_layout, payload_to_dxf, payload_to_json
from offcut_utils import calculate_layout_offcuts
from panel_utils import parts_to_editor_rows


def setup_logging(log_level="INFO"):
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)


setup_logging()

# --- PAGE CONFIG ---
st.set_page_config(page_title="Guillotine Cut Planner", layout="wide")

DEMO_PARTS = [
    {"id": "P1", "name": "A", "w": 400, "h": 300, "placed": False},
    {"id": "P2", "name": "B", "w": 300, "h": 200, "placed": False},
    {"id": "P3", "name": "C", "w": 200, "h": 250, "placed": False},
]

# --- SESSION STATE ---
if 'layout' not in st.session_state:
    st.session_state.layout = rebuild_all(new_layout(DEFAULT_SETTINGS, DEMO_PARTS))
if 'notice' not in st.session_state:
    st.session_state.notice = None
if 'layout_name' not in st.session_state:
    st.session_state.layout_name = "Untitled"


def apply_result(new_layout_state, result, success_msg):
    st.session_state.layout = new_layout_state
    if result["accepted"]:
        st.session_state.notice = ("success", success_msg)
    elif result["returned_to_pool"]:
        st.session_state.notice = ("warning", result["message"])
    else:
        st.session_state.notice = ("error", f"{result['reason']}: {result['message']}")
    st.rerun()


def draw_layout(layout):
    board_w = layout["board_w"]
    board_h = layout["board_h"]
    margin = layout["margin"]

    fig, ax = plt.subplots(figsize=(9, 9 * (board_h + 2 * margin) / (board_w + 2 * margin)))
    ax.set_xlim(0, board_w + 2 * margin)
    # Board coordinates grow downwards.
    ax.set_ylim(board_h + 2 * margin, 0)
    ax.set_aspect('equal')
    ax.axis('off')
    ax.add_patch(patches.Rectangle((margin, margin), board_w, board_h, fc='#f1f5f9', ec='#000'))

    for region in layout["regions"]:
        ax.add_patch(patches.Rectangle(
            (region["x"], region["y"]), region["w"], region["h"],
            fc=region["color"], alpha=0.35, ec='#555', ls=':', lw=0.8,
        ))

    skipped_ids = {s["id"] for s in layout["skipped"]}
    for part in placed_parts(layout):
        fc = '#fca5a5' if part["id"] in skipped_ids else ('#5a7' if part.get('rotated') else '#60a5fa')
        ax.add_patch(patches.Rectangle((part["x"], part["y"]), part["w"], part["h"], fc=fc, ec='#1e3a8a'))
        ax.text(
            part["x"] + part["w"] / 2, part["y"] + part["h"] / 2,
            f"{part['name']}\n{part['w']:g} x {part['h']:g}", ha='center', va='center', fontsize=7,
        )

    for cut in layout["cuts"]:
        ax.plot([cut["x1"], cut["x2"]], [cut["y1"], cut["y2"]], color='#ff0000', lw=1, ls='--')
        ax.text(
            cut["x1"], cut["y1"], str(cut["order"]), fontsize=6, ha='center', va='center',
            bbox={"boxstyle": "circle", "fc": "white", "ec": "black", "lw": 0.5},
        )

    st.pyplot(fig)
    plt.close(fig)


layout = st.session_state.layout

# --- SIDEBAR: BOARD SETTINGS ---
st.sidebar.header("⚙️ Board Settings")
current_preset = infer_board_preset(layout["board_w"], layout["board_h"])
preset_options = ["Custom"] + list(BOARD_PRESETS)
preset = st.sidebar.selectbox("Board Size", preset_options, index=preset_options.index(current_preset))
preset_dims = BOARD_PRESETS.get(preset, (layout["board_w"], layout["board_h"]))
board_w = st.sidebar.number_input("Board Width", value=float(preset_dims[0]), step=10.0)
board_h = st.sidebar.number_input("Board Height", value=float(preset_dims[1]), step=10.0)
kerf = st.sidebar.number_input("Kerf", value=float(layout["kerf"]), step=0.5, min_value=0.0)
margin = st.sidebar.number_input("Margin", value=float(layout["margin"]), step=1.0, min_value=0.0)
snap_tolerance = st.sidebar.number_input("Snap Tolerance", value=float(layout["snap_tolerance"]), step=5.0, min_value=0.0)
min_region = st.sidebar.number_input("Min Region Size", value=float(layout["min_region_size"]), step=5.0, min_value=0.0)
min_piece = st.sidebar.number_input("Min Piece Size", value=float(layout["min_piece_size"]), step=5.0, min_value=0.0)
orientation_mode = st.sidebar.selectbox(
    "Default Cut Orientation",
    ORIENTATION_MODES,
    index=ORIENTATION_MODES.index(layout["default_orientation"]),
)

if st.sidebar.button("Apply Settings", type="primary"):
    settings = settings_of(layout)
    settings.update({
        "board_w": board_w,
        "board_h": board_h,
        "kerf": kerf,
        "margin": margin,
        "snap_tolerance": snap_tolerance,
        "min_region_size": min_region,
        "min_piece_size": min_piece,
        "default_orientation": orientation_mode,
    })
    try:
        st.session_state.layout = rebuild_all(new_layout(settings, layout["parts"]))
        st.session_state.notice = ("success", "Settings applied; layout rebuilt.")
    except ValueError as e:
        st.session_state.notice = ("error", f"Invalid settings: {e}")
    st.rerun()

st.sidebar.divider()
st.sidebar.subheader("📂 Load / Save")
uploaded = st.sidebar.file_uploader("Load layout or pattern", type=["json", "dxf"])
if uploaded is not None and st.sidebar.button("Load File"):
    try:
        st.session_state.layout = layout_file_to_layout(uploaded.name, uploaded.getvalue(), settings_of(layout))
        st.session_state.layout_name = uploaded.name.rsplit(".", 1)[0]
        st.session_state.notice = ("success", f"Loaded {uploaded.name}")
    except ValueError as e:
        st.session_state.notice = ("error", f"Failed to load file: {e}")
    st.rerun()

payload = build_layout_payload(st.session_state.layout_name, layout)
st.sidebar.download_button("⬇️ Layout JSON", payload_to_json(payload), file_name=f"{st.session_state.layout_name}.json")
st.sidebar.download_button("⬇️ Layout DXF", payload_to_dxf(payload), file_name=f"{st.session_state.layout_name}.dxf")

# --- MAIN ---
st.title("🪚 Guillotine Cut Planner")

notice = st.session_state.pop("notice", None)
if notice:
    level, msg = notice
    getattr(st, level)(msg)

board_col, side_col = st.columns([3, 1])

with board_col:
    draw_layout(layout)
    for skipped in layout["skipped"]:
        part = find_part(layout, skipped["id"])
        st.warning(f"{part['name']} has no cut: {skipped['reason']}. Move or remove it to restore the plan.")

with side_col:
    st.subheader("🧩 Unplaced Pieces")
    pool = unplaced_parts(layout)
    if pool:
        pool_labels = {p["id"]: f"{p['name']} ({p['w']:g} x {p['h']:g})" for p in pool}
        pool_id = st.selectbox("Piece", list(pool_labels), format_func=lambda pid: pool_labels[pid], key="pool_pick")
        px_col, py_col = st.columns(2)
        place_x = px_col.number_input("X", value=float(layout["margin"]), step=1.0, key="place_x")
        place_y = py_col.number_input("Y", value=float(layout["margin"]), step=1.0, key="place_y")
        b1, b2 = st.columns(2)
        if b1.button("Place"):
            new_state, result = place_part(layout, pool_id, place_x, place_y)
            apply_result(new_state, result, f"Placed at ({result['x']}, {result['y']})")
        if b2.button("🔄 Rotate", key="rotate_pool"):
            new_state, result = rotate_part_90(layout, pool_id)
            apply_result(new_state, result, "Rotated")
    else:
        st.caption("All pieces are on the board.")

    with st.expander("➕ New piece"):
        n1, n2, n3 = st.columns(3)
        new_name = n1.text_input("Name", value="")
        new_w = n2.number_input("W", value=300.0, step=10.0, min_value=1.0)
        new_h = n3.number_input("H", value=200.0, step=10.0, min_value=1.0)
        if st.button("Add to pool"):
            st.session_state.layout = add_part(layout, new_name, new_w, new_h)
            st.session_state.notice = ("success", "Piece added")
            st.rerun()

    st.subheader("📐 Placed Pieces")
    on_board = placed_parts(layout)
    if on_board:
        board_labels = {p["id"]: f"{p['name']} @ ({p['x']:g}, {p['y']:g})" for p in on_board}
        board_id = st.selectbox("Piece", list(board_labels), format_func=lambda pid: board_labels[pid], key="board_pick")
        selected = find_part(layout, board_id)
        mx_col, my_col = st.columns(2)
        move_x = mx_col.number_input("X", value=float(selected["x"]), step=1.0, key=f"move_x_{board_id}")
        move_y = my_col.number_input("Y", value=float(selected["y"]), step=1.0, key=f"move_y_{board_id}")
        c1, c2, c3 = st.columns(3)
        if c1.button("Move"):
            new_state, result = move_part_to(layout, board_id, move_x, move_y)
            apply_result(new_state, result, f"Moved to ({result['x']}, {result['y']})")
        if c2.button("🔄", key="rotate_board"):
            new_state, result = rotate_part_90(layout, board_id)
            apply_result(new_state, result, "Rotated")
        if c3.button("🗑️"):
            new_state, result = remove_part(layout, board_id)
            apply_result(new_state, result, "Returned to pool")

tab_cuts, tab_offcuts, tab_parts = st.tabs(["✂️ Cut Sequence", "📊 Offcuts", "📋 Pieces"])

with tab_cuts:
    if layout["cuts"]:
        cut_df = pd.DataFrame(layout["cuts"])[["order", "orientation", "pos", "start", "end", "part_id"]]
        st.dataframe(cut_df, hide_index=True, width="stretch")
    else:
        st.info("Place a piece to generate cuts.")

with tab_offcuts:
    o1, o2, o3 = st.columns(3)
    min_offcut_w = o1.number_input("Min offcut width (mm)", min_value=0.0, value=120.0, step=10.0)
    min_offcut_h = o2.number_input("Min offcut height (mm)", min_value=0.0, value=120.0, step=10.0)
    min_offcut_area = o3.number_input("Min offcut area (mm²)", min_value=0.0, value=25000.0, step=1000.0)
    offcuts = calculate_layout_offcuts(layout, min_offcut_w, min_offcut_h, min_offcut_area)
    m1, m2, m3 = st.columns(3)
    m1.metric("Utilisation", f"{offcuts['utilization_pct']}%")
    m2.metric("Free area", f"{offcuts['free_area']:,.0f} mm²")
    m3.metric("Kerf & scrap", f"{offcuts['scrap_area']:,.0f} mm²")
    if offcuts["reusable_offcuts"]:
        st.dataframe(pd.DataFrame(offcuts["reusable_offcuts"]), hide_index=True, width="stretch")

with tab_parts:
    st.dataframe(pd.DataFrame(parts_to_editor_rows(layout["parts"])), hide_index=True, width="stretch")
