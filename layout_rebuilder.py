import logging
from copy import deepcopy

from board_config import ORIENTATIONS, usable_area
from cut_recorder import cut_for_region, finalize_cuts, find_obstruction
from placement_validator import NO_FREE_REGION, NOT_CORNER_ALIGNED, OBSTRUCTED_CUT
from region_tracker import (
    consume_region,
    cut_span,
    export_regions,
    find_region_at,
    find_region_containing,
    line_kerf,
    new_tracker,
    split_after_placement,
)

logger = logging.getLogger(__name__)


def other_orientation(orientation):
    return "vertical" if orientation == "horizontal" else "horizontal"


def order_parts(parts, row_tolerance=1.0):
    """Top-to-bottom rows, left-to-right within a row.

    Parents always come before the pieces placed in their child regions,
    which is what makes the split sequence reproducible.
    """
    rows = []
    for part in sorted(parts, key=lambda p: (p["y"], p["x"], p["id"])):
        if rows and part["y"] - rows[-1][0]["y"] <= row_tolerance:
            rows[-1].append(part)
        else:
            rows.append([part])

    ordered = []
    for row in rows:
        ordered.extend(sorted(row, key=lambda p: (p["x"], p["y"], p["id"])))
    return ordered


def resolve_orientation(part, region, mode):
    if part.get("orientation") in ORIENTATIONS:
        return part["orientation"]
    if mode == "alternate":
        return "horizontal" if region["level"] % 2 == 0 else "vertical"
    if region.get("direction") in ORIENTATIONS:
        return region["direction"]
    return mode


def is_viable(orientation, region, w, h, eps=1e-6):
    # A cut only makes sense if it leaves stock on the far side of the piece.
    if orientation == "vertical":
        return region["w"] - w > eps
    return region["h"] - h > eps


def _far_edge(orientation, region, w, h):
    if orientation == "vertical":
        return region["x"] + w
    return region["y"] + h


def _process_part(layout, tracker, part, cuts, obstacles):
    eps = float(layout["align_tolerance"])
    kerf = float(layout["kerf"])
    w = float(part["w"])
    h = float(part["h"])

    region = find_region_at(tracker, w, h, part["x"], part["y"], eps)
    if region is None:
        if find_region_containing(tracker, w, h, part["x"], part["y"], eps) is not None:
            return NOT_CORNER_ALIGNED, None
        return NO_FREE_REGION, None

    desired = resolve_orientation(part, region, layout["default_orientation"])
    candidates = [o for o in (desired, other_orientation(desired)) if is_viable(o, region, w, h)]
    if not candidates:
        consume_region(tracker, region)
        return None, desired

    chosen = None
    for orientation in candidates:
        far_edge = _far_edge(orientation, region, w, h)
        kerf_used = line_kerf(tracker, orientation, far_edge, *cut_span(orientation, region), kerf)
        blocker = find_obstruction(orientation, region, far_edge, kerf_used, obstacles, part["id"])
        if blocker is not None:
            logger.warning(f"{orientation} cut for part {part['id']} blocked by part {blocker['id']}")
            continue
        chosen = orientation
        cuts.append(cut_for_region(orientation, region, far_edge, kerf_used, part["id"]))
        break

    if chosen is None:
        return OBSTRUCTED_CUT, None

    if region["direction"] is None:
        region["direction"] = chosen
    split_after_placement(tracker, region, w, h, chosen, kerf, float(layout["min_region_size"]))
    return None, chosen


def run_rebuild(layout, exclude_id=None):
    """Replay every placed part onto a fresh board.

    Returns (tracker, raw_cuts, skipped, orientations); the tracker still
    holds live regions so callers can keep validating against it.
    """
    tracker = new_tracker(usable_area(layout))
    placed = [p for p in layout["parts"] if p["placed"] and p["id"] != exclude_id]
    cuts = []
    skipped = []
    orientations = {}

    for part in order_parts(placed, float(layout["align_tolerance"])):
        reason, orientation = _process_part(layout, tracker, part, cuts, placed)
        if reason is not None:
            logger.warning(f"Part {part['id']} left out of the cut plan: {reason}")
            skipped.append({"id": part["id"], "reason": reason})
            continue
        orientations[part["id"]] = orientation

    return tracker, cuts, skipped, orientations


def rebuild_layout(layout):
    new_layout = deepcopy(layout)
    tracker, cuts, skipped, orientations = run_rebuild(new_layout)

    new_layout["regions"] = export_regions(tracker)
    new_layout["cuts"] = finalize_cuts(cuts, usable_area(new_layout), float(new_layout["align_tolerance"]))
    new_layout["skipped"] = skipped
    for part in new_layout["parts"]:
        part["cut_orientation"] = orientations.get(part["id"]) if part["placed"] else None

    logger.info(
        f"Rebuilt layout: {len(orientations)} parts, {len(new_layout['regions'])} free regions, "
        f"{len(new_layout['cuts'])} cuts, {len(skipped)} skipped"
    )
    return new_layout
