import base64
import io
import json
import logging
from datetime import datetime, timezone

import ezdxf
from ezdxf.lldxf.const import DXFStructureError

from board_config import new_layout, settings_of, usable_area
from layout_rebuilder import rebuild_layout
from panel_utils import coerce_bool, coerce_float

logger = logging.getLogger(__name__)

_DXF_MARKER_BEGIN = "GUILLOTINE_LAYOUT_PAYLOAD_BASE64_BEGIN"
_DXF_MARKER_END = "GUILLOTINE_LAYOUT_PAYLOAD_BASE64_END"

_PART_FIELDS = ("id", "name", "w", "h", "rotated", "placed", "x", "y", "orientation")


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_layout_payload(layout_name, layout):
    return {
        "version": 1,
        "layout_name": str(layout_name),
        "saved_at": _timestamp(),
        "settings": settings_of(layout),
        "parts": [{key: part.get(key) for key in _PART_FIELDS} for part in layout["parts"]],
        "cuts": [dict(cut) for cut in layout.get("cuts", [])],
    }


def parse_layout_payload(payload):
    layout = new_layout(payload.get("settings", {}), payload.get("parts", []))
    return {
        "layout_name": str(payload.get("layout_name", "Untitled")),
        "layout": rebuild_layout(layout),
    }


def payload_to_json(payload):
    return json.dumps(payload, indent=2)


def _rect_points(x, y, w, h):
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]


def layout_to_dxf_document(layout):
    doc = ezdxf.new()
    msp = doc.modelspace()
    doc.layers.new(name='SHEET_BOUNDARY', dxfattribs={'color': 1})
    doc.layers.new(name='PARTS', dxfattribs={'color': 5})
    doc.layers.new(name='FREE_REGIONS', dxfattribs={'color': 8})
    doc.layers.new(name='CUT_LINES', dxfattribs={'color': 3})
    doc.layers.new(name='LABELS', dxfattribs={'color': 7})

    area = usable_area(layout)
    msp.add_lwpolyline(_rect_points(area["x"], area["y"], area["w"], area["h"]), dxfattribs={'layer': 'SHEET_BOUNDARY'})

    for part in layout["parts"]:
        if not part["placed"]:
            continue
        x, y, w, h = part["x"], part["y"], part["w"], part["h"]
        msp.add_lwpolyline(_rect_points(x, y, w, h), dxfattribs={'layer': 'PARTS'})
        msp.add_text(part["name"], dxfattribs={'layer': 'LABELS', 'height': 20}).set_placement(
            (x + w / 2, y + h / 2), align=ezdxf.enums.TextEntityAlignment.MIDDLE_CENTER
        )
        msp.add_text(f"{int(w)}x{int(h)}", dxfattribs={'layer': 'LABELS', 'height': 15}).set_placement(
            (x + w / 2, y + h / 2 - 25), align=ezdxf.enums.TextEntityAlignment.MIDDLE_CENTER
        )

    for region in layout.get("regions", []):
        msp.add_lwpolyline(_rect_points(region["x"], region["y"], region["w"], region["h"]), dxfattribs={'layer': 'FREE_REGIONS'})

    for cut in layout.get("cuts", []):
        msp.add_line((cut["x1"], cut["y1"]), (cut["x2"], cut["y2"]), dxfattribs={'layer': 'CUT_LINES'})
        msp.add_text(str(cut["order"]), dxfattribs={'layer': 'LABELS', 'height': 12}).set_placement(
            (cut["x1"], cut["y1"]), align=ezdxf.enums.TextEntityAlignment.MIDDLE_CENTER
        )
    return doc


def payload_to_dxf(payload):
    layout = parse_layout_payload(payload)["layout"]
    dxf_io = io.StringIO()
    layout_to_dxf_document(layout).write(dxf_io)

    payload_bytes = payload_to_json(payload).encode("utf-8")
    encoded_payload = base64.b64encode(payload_bytes).decode("ascii")
    chunks = [encoded_payload[i:i + 250] for i in range(0, len(encoded_payload), 250)]

    # Comment pairs go first so group-code/value lines stay aligned.
    comment_lines = ["999", _DXF_MARKER_BEGIN]
    for chunk in chunks:
        comment_lines.extend(["999", chunk])
    comment_lines.extend(["999", _DXF_MARKER_END])
    return ("\n".join(comment_lines) + "\n" + dxf_io.getvalue()).encode("utf-8")


def _polyline_bbox(points):
    xs = [float(point[0]) for point in points]
    ys = [float(point[1]) for point in points]
    return min(xs), min(ys), max(xs), max(ys)


def _payload_from_dxf_geometry(dxf_bytes):
    dxf_text = dxf_bytes.decode("utf-8", errors="ignore")
    try:
        doc = ezdxf.read(io.StringIO(dxf_text))
    except DXFStructureError as e:
        raise ValueError(f"Unreadable DXF: {e}") from e
    msp = doc.modelspace()

    settings = {}
    parts = []

    for entity in msp.query("LWPOLYLINE"):
        layer = (entity.dxf.layer or "").upper()
        points = list(entity.get_points("xy"))
        if len(points) < 4:
            continue

        min_x, min_y, max_x, max_y = _polyline_bbox(points)
        width = max_x - min_x
        height = max_y - min_y
        if width <= 0 or height <= 0:
            continue

        if layer == "SHEET_BOUNDARY":
            settings.update({"board_w": width, "board_h": height, "margin": min_x})
        elif layer == "PARTS":
            parts.append({
                "id": f"P{len(parts) + 1}",
                "name": f"Loaded Part {len(parts) + 1}",
                "w": width,
                "h": height,
                "x": min_x,
                "y": min_y,
            })

    if not parts:
        raise ValueError("No layout payload or part geometry found in DXF")

    return {
        "version": 1,
        "layout_name": "Imported DXF Layout",
        "saved_at": _timestamp(),
        "settings": settings,
        "parts": parts,
        "cuts": [],
    }


def dxf_to_payload(dxf_bytes):
    lines = dxf_bytes.decode("utf-8").splitlines()
    comments = []
    for i in range(0, len(lines) - 1, 2):
        if lines[i].strip() == "999":
            comments.append(lines[i + 1].strip())

    if _DXF_MARKER_BEGIN not in comments or _DXF_MARKER_END not in comments:
        return _payload_from_dxf_geometry(dxf_bytes)

    start = comments.index(_DXF_MARKER_BEGIN) + 1
    end = comments.index(_DXF_MARKER_END)
    encoded_payload = "".join(comments[start:end])
    payload_json = base64.b64decode(encoded_payload.encode("ascii")).decode("utf-8")
    return json.loads(payload_json)


def _pattern_sheet(pattern):
    """First sheet of an optimiser pattern: pattern[0].layout[0] with its part rows."""
    try:
        sheet = pattern[0]["layout"][0]
        rows = sheet["part"]
    except (IndexError, KeyError, TypeError):
        raise ValueError("Pattern has no layout parts") from None
    if not isinstance(sheet, dict) or not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValueError("Pattern part rows must be objects")
    return sheet


def pattern_to_parts(pattern):
    """Parts from an optimiser pattern's part rows.

    Rows flagged rotated carry their dimensions swapped, so width and length
    are exchanged before placing.
    """
    rows = _pattern_sheet(pattern)["part"]

    parts = []
    for index, row in enumerate(rows):
        rotated = coerce_bool(row.get("rotated", False))
        width = coerce_float(row.get("width"))
        length = coerce_float(row.get("length"))
        item = row.get("nItem")
        parts.append({
            "id": f"P{index + 1}",
            "name": f"Pza {item}" if item not in (None, "") else str(row.get("part", index + 1)),
            "w": length if rotated else width,
            "h": width if rotated else length,
            "rotated": rotated,
            "x": row.get("x"),
            "y": row.get("y"),
        })
    return parts


def load_pattern_layout(pattern, settings=None):
    merged = {}
    sheet = _pattern_sheet(pattern)
    if sheet.get("sheetW") is not None and sheet.get("sheetH") is not None:
        merged.update({"board_w": sheet["sheetW"], "board_h": sheet["sheetH"]})
    merged.update(settings or {})
    layout = rebuild_layout(new_layout(merged, pattern_to_parts(pattern)))
    logger.info(f"Loaded pattern with {len(layout['parts'])} parts")
    return layout


def layout_file_to_layout(filename, file_bytes, settings=None):
    lower_name = str(filename or "").lower()
    if lower_name.endswith(".dxf"):
        return parse_layout_payload(dxf_to_payload(file_bytes))["layout"]

    data = json.loads(file_bytes.decode("utf-8"))
    if isinstance(data, list):
        return load_pattern_layout(data, settings)
    if isinstance(data, dict) and "parts" in data:
        return parse_layout_payload(data)["layout"]
    raise ValueError(f"Unrecognised layout file: {filename}")
