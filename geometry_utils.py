DEFAULT_EPSILON = 1.0


def rects_overlap(a, b):
    """Interiors intersect; rectangles that only share an edge do not overlap."""
    return not (
        a["x"] + a["w"] <= b["x"]
        or b["x"] + b["w"] <= a["x"]
        or a["y"] + a["h"] <= b["y"]
        or b["y"] + b["h"] <= a["y"]
    )


def point_in_rect(x, y, rect, eps=DEFAULT_EPSILON):
    return (
        rect["x"] - eps <= x <= rect["x"] + rect["w"] + eps
        and rect["y"] - eps <= y <= rect["y"] + rect["h"] + eps
    )


def rect_contains_rect(outer, inner, eps=DEFAULT_EPSILON):
    return (
        inner["x"] >= outer["x"] - eps
        and inner["y"] >= outer["y"] - eps
        and inner["x"] + inner["w"] <= outer["x"] + outer["w"] + eps
        and inner["y"] + inner["h"] <= outer["y"] + outer["h"] + eps
    )


def is_corner_aligned(piece, region, eps=DEFAULT_EPSILON):
    return abs(piece["x"] - region["x"]) <= eps and abs(piece["y"] - region["y"]) <= eps


def rect_area(rect):
    return max(0.0, rect["w"]) * max(0.0, rect["h"])


def strip_obstructed(strip, rect, eps=1e-6):
    """True when `rect` has interior inside the (possibly zero-width) strip.

    A zero-width strip is a line: only rectangles crossing it strictly count.
    """
    return (
        rect["x"] < strip["x"] + strip["w"] - eps
        and rect["x"] + rect["w"] > strip["x"] + eps
        and rect["y"] < strip["y"] + strip["h"] - eps
        and rect["y"] + rect["h"] > strip["y"] + eps
    )
