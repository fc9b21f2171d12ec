from geometry_utils import strip_obstructed

POSITION_TOLERANCE = 1.0


def make_cut(orientation, pos, start, end, part_id=None):
    if orientation == "horizontal":
        x1, y1, x2, y2 = start, pos, end, pos
    else:
        x1, y1, x2, y2 = pos, start, pos, end
    return {
        "orientation": orientation,
        "pos": float(pos),
        "start": float(start),
        "end": float(end),
        "x1": float(x1),
        "y1": float(y1),
        "x2": float(x2),
        "y2": float(y2),
        "part_id": part_id,
        "order": None,
    }


def cut_for_region(orientation, region, far_edge, kerf_used, part_id=None):
    """Full-span cut through `region` just past the piece's far edge."""
    pos = far_edge + kerf_used
    if orientation == "vertical":
        return make_cut("vertical", pos, region["y"], region["y"] + region["h"], part_id)
    return make_cut("horizontal", pos, region["x"], region["x"] + region["w"], part_id)


def find_obstruction(orientation, region, far_edge, kerf_used, parts, part_id):
    if orientation == "vertical":
        strip = {"x": far_edge, "y": region["y"], "w": kerf_used, "h": region["h"]}
    else:
        strip = {"x": region["x"], "y": far_edge, "w": region["w"], "h": kerf_used}
    for other in parts:
        if other["id"] == part_id or not other["placed"]:
            continue
        if strip_obstructed(strip, other):
            return other
    return None


def _inside_area(cut, area):
    if cut["orientation"] == "horizontal":
        low, high = area["y"], area["y"] + area["h"]
    else:
        low, high = area["x"], area["x"] + area["w"]
    return low < cut["pos"] < high


def _same_cut(a, b, eps):
    return (
        a["orientation"] == b["orientation"]
        and abs(a["pos"] - b["pos"]) < POSITION_TOLERANCE
        and abs(a["start"] - b["start"]) <= eps
        and abs(a["end"] - b["end"]) <= eps
    )


def finalize_cuts(cuts, area, eps=1.0):
    unique = []
    for cut in cuts:
        if not _inside_area(cut, area):
            continue
        if any(_same_cut(cut, kept, eps) for kept in unique):
            continue
        unique.append(dict(cut))

    unique.sort(key=lambda c: (round(c["pos"], 3), round(c["start"], 3), c["orientation"]))
    for order, cut in enumerate(unique, start=1):
        cut["order"] = order
    return unique
