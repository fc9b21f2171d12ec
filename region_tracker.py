import logging

from geometry_utils import DEFAULT_EPSILON, is_corner_aligned, rect_area, rect_contains_rect

logger = logging.getLogger(__name__)

REGION_PALETTE = [
    "#fde68a", "#bbf7d0", "#bfdbfe", "#fecaca", "#ddd6fe",
    "#fed7aa", "#a5f3fc", "#f5d0fe", "#d9f99d", "#e5e7eb",
]


def region_color(index):
    return REGION_PALETTE[index % len(REGION_PALETTE)]


def _make_region(x, y, w, h, level=0, direction=None):
    return {"x": float(x), "y": float(y), "w": float(w), "h": float(h), "direction": direction, "level": int(level)}


def new_tracker(area):
    """Free-space state for one rebuild: the region list plus kerf-charged cut segments."""
    return {
        "regions": [_make_region(area["x"], area["y"], area["w"], area["h"])],
        "kerfed": {"horizontal": {}, "vertical": {}},
    }


def _line_key(coord):
    return round(float(coord), 3)


def cut_span(orientation, region):
    """Extent of a full cut through `region` along its own axis."""
    if orientation == "vertical":
        return region["y"], region["y"] + region["h"]
    return region["x"], region["x"] + region["w"]


def line_kerf(tracker, axis, coord, start, end, kerf, eps=1e-6):
    """Kerf a new cut segment would consume.

    Zero only when an already charged segment on the same line covers it;
    strips already separated by a perpendicular cut pay their own kerf.
    """
    for charged_start, charged_end in tracker["kerfed"][axis].get(_line_key(coord), []):
        if charged_start - eps <= start and end <= charged_end + eps:
            return 0.0
    return float(kerf)


def _charge_kerf(tracker, axis, coord, start, end, kerf):
    used = line_kerf(tracker, axis, coord, start, end, kerf)
    tracker["kerfed"][axis].setdefault(_line_key(coord), []).append((float(start), float(end)))
    return used


def _region_order(region):
    return (rect_area(region), region["y"], region["x"])


def find_region_containing(tracker, w, h, x, y, eps=DEFAULT_EPSILON):
    rect = {"x": float(x), "y": float(y), "w": float(w), "h": float(h)}
    candidates = [
        region
        for region in tracker["regions"]
        if w <= region["w"] + eps and h <= region["h"] + eps and rect_contains_rect(region, rect, eps)
    ]
    if not candidates:
        return None
    return min(candidates, key=_region_order)


def find_region_at(tracker, w, h, x, y, eps=DEFAULT_EPSILON):
    """Region whose origin corner matches (x, y) and which can hold the rectangle."""
    rect = {"x": float(x), "y": float(y), "w": float(w), "h": float(h)}
    candidates = [
        region
        for region in tracker["regions"]
        if is_corner_aligned(rect, region, eps) and w <= region["w"] + eps and h <= region["h"] + eps
    ]
    if not candidates:
        return None
    return min(candidates, key=_region_order)


def split_after_placement(tracker, region, piece_w, piece_h, orientation, kerf, min_size):
    if orientation not in ("vertical", "horizontal"):
        raise ValueError(f"Unknown cut orientation: {orientation!r}")

    far_x = region["x"] + piece_w
    far_y = region["y"] + piece_h
    level = region["level"] + 1
    inherited = region["direction"]

    if orientation == "vertical":
        kerf_x = _charge_kerf(tracker, "vertical", far_x, *cut_span("vertical", region), kerf)
        kerf_y = _charge_kerf(tracker, "horizontal", far_y, region["x"], far_x, kerf)
        children = [
            _make_region(far_x + kerf_x, region["y"], region["w"] - piece_w - kerf_x, region["h"], level, inherited),
            _make_region(region["x"], far_y + kerf_y, piece_w, region["h"] - piece_h - kerf_y, level, inherited),
        ]
    else:
        kerf_y = _charge_kerf(tracker, "horizontal", far_y, *cut_span("horizontal", region), kerf)
        kerf_x = _charge_kerf(tracker, "vertical", far_x, region["y"], far_y, kerf)
        children = [
            _make_region(region["x"], far_y + kerf_y, region["w"], region["h"] - piece_h - kerf_y, level, inherited),
            _make_region(far_x + kerf_x, region["y"], region["w"] - piece_w - kerf_x, piece_h, level, inherited),
        ]

    kept = [c for c in children if c["w"] > 0 and c["h"] > 0 and c["w"] >= min_size and c["h"] >= min_size]
    if not kept:
        logger.debug(f"Region at ({region['x']}, {region['y']}) fully consumed; leftovers below {min_size}")

    tracker["regions"] = [r for r in tracker["regions"] if r is not region] + kept
    return kept


def free_region(tracker, x, y, w, h):
    # Freed space is appended as-is; neighbours are never merged.
    region = _make_region(x, y, w, h)
    tracker["regions"].append(region)
    return region


def consume_region(tracker, region):
    tracker["regions"] = [r for r in tracker["regions"] if r is not region]


def export_regions(tracker):
    exported = []
    for index, region in enumerate(tracker["regions"]):
        row = dict(region)
        row["color"] = region_color(index)
        exported.append(row)
    return exported
