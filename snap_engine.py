from board_config import usable_area


def legal_bounds(layout, part):
    area = usable_area(layout)
    return {
        "x_min": area["x"],
        "y_min": area["y"],
        "x_max": area["x"] + area["w"] - float(part["w"]),
        "y_max": area["y"] + area["h"] - float(part["h"]),
    }


def _snap_to_edges(value, size, low, high, tolerance):
    if abs(value - low) <= tolerance:
        return low
    if abs(value + size - high) <= tolerance:
        return high - size
    return None


def _snap_to_neighbour(value, size, other_start, other_size, kerf, tolerance):
    other_end = other_start + other_size
    if abs(value - (other_end + kerf)) <= tolerance:
        return other_end + kerf
    if abs(value + size + kerf - other_start) <= tolerance:
        return other_start - kerf - size
    if abs(value - other_start) <= tolerance:
        return other_start
    if abs(value + size - other_end) <= tolerance:
        return other_end - size
    return None


def _nearest_corner(x, y, regions, tolerance):
    best = None
    best_dist = None
    for region in regions:
        dx = abs(x - region["x"])
        dy = abs(y - region["y"])
        if dx > tolerance or dy > tolerance:
            continue
        dist = dx * dx + dy * dy
        if best is None or dist < best_dist:
            best = region
            best_dist = dist
    return best


def snap_position(layout, part, x, y, tolerance=None, regions=None):
    """Pull a candidate top-left corner onto nearby edges, neighbours and region corners.

    Every rule tests the raw candidate. Later rules override earlier ones per
    axis: board edges, then each placed neighbour in list order, then the
    nearest free-region corner. The result is clamped inside the board.
    """
    tol = float(layout["snap_tolerance"] if tolerance is None else tolerance)
    kerf = float(layout["kerf"])
    w = float(part["w"])
    h = float(part["h"])
    x = float(x)
    y = float(y)
    area = usable_area(layout)

    sx, sy = x, y
    edge_x = _snap_to_edges(x, w, area["x"], area["x"] + area["w"], tol)
    if edge_x is not None:
        sx = edge_x
    edge_y = _snap_to_edges(y, h, area["y"], area["y"] + area["h"], tol)
    if edge_y is not None:
        sy = edge_y

    for other in layout["parts"]:
        if other["id"] == part["id"] or not other["placed"]:
            continue
        nx = _snap_to_neighbour(x, w, other["x"], other["w"], kerf, tol)
        if nx is not None:
            sx = nx
        ny = _snap_to_neighbour(y, h, other["y"], other["h"], kerf, tol)
        if ny is not None:
            sy = ny

    corner = _nearest_corner(x, y, regions or [], tol)
    if corner is not None:
        sx, sy = corner["x"], corner["y"]

    bounds = legal_bounds(layout, part)
    sx = max(bounds["x_min"], min(sx, bounds["x_max"]))
    sy = max(bounds["y_min"], min(sy, bounds["y_max"]))
    return sx, sy
