import logging
from copy import deepcopy

from board_config import usable_area
from geometry_utils import rects_overlap
from layout_rebuilder import rebuild_layout, resolve_orientation, run_rebuild
from panel_utils import coerce_float
from placement_validator import (
    ALREADY_PLACED,
    NOT_PLACED,
    OK,
    OUTSIDE_BOARD,
    PART_NOT_FOUND,
    REASON_MESSAGES,
    validate_placement,
)
from region_tracker import free_region
from snap_engine import snap_position

logger = logging.getLogger(__name__)


def find_part(layout, part_id):
    for part in layout["parts"]:
        if part["id"] == part_id:
            return part
    return None


def placed_parts(layout):
    return [p for p in layout["parts"] if p["placed"]]


def unplaced_parts(layout):
    return [p for p in layout["parts"] if not p["placed"]]


def next_part_id(layout):
    taken = {p["id"] for p in layout["parts"]}
    index = len(layout["parts"]) + 1
    while f"P{index}" in taken:
        index += 1
    return f"P{index}"


def _result(accepted, reason, x=None, y=None, region=None, returned_to_pool=False):
    return {
        "accepted": accepted,
        "reason": reason,
        "message": REASON_MESSAGES[reason],
        "x": x,
        "y": y,
        "region": region,
        "returned_to_pool": returned_to_pool,
    }


def _public_region(region):
    return {key: region[key] for key in ("x", "y", "w", "h", "direction", "level")}


def add_part(layout, name, w, h, part_id=None):
    """Add an unplaced part to the pool."""
    new_layout = deepcopy(layout)
    part_id = str(part_id) if part_id is not None else next_part_id(new_layout)
    if find_part(new_layout, part_id) is not None:
        raise ValueError(f"Duplicate part id: {part_id}")
    new_layout["parts"].append({
        "id": part_id,
        "name": str(name or part_id),
        "w": coerce_float(w),
        "h": coerce_float(h),
        "rotated": False,
        "placed": False,
        "x": None,
        "y": None,
        "orientation": None,
    })
    return new_layout


def _edit_tracker(layout, part):
    """Free space as seen while `part` is lifted off the board."""
    tracker, _, _, _ = run_rebuild(layout, exclude_id=part["id"])
    if part["placed"]:
        free_region(tracker, part["x"], part["y"], part["w"], part["h"])
    return tracker


def _return_to_pool(part):
    part["placed"] = False
    part["x"] = None
    part["y"] = None
    part["orientation"] = None


def rebuild_all(layout):
    return rebuild_layout(layout)


def place_part(layout, part_id, x, y):
    part = find_part(layout, part_id)
    if part is None:
        return layout, _result(False, PART_NOT_FOUND)
    if part["placed"]:
        return layout, _result(False, ALREADY_PLACED)

    tracker = _edit_tracker(layout, part)
    sx, sy = snap_position(layout, part, x, y, regions=tracker["regions"])
    ok, reason, region = validate_placement(layout, part, sx, sy, tracker)
    if not ok:
        logger.info(f"Rejected placing part {part_id} at ({sx}, {sy}): {reason}")
        return layout, _result(False, reason)

    new_layout = deepcopy(layout)
    placing = find_part(new_layout, part_id)
    placing["placed"] = True
    placing["x"] = region["x"]
    placing["y"] = region["y"]
    placing["orientation"] = resolve_orientation(placing, region, new_layout["default_orientation"])
    logger.info(f"Placed part {part_id} at ({region['x']}, {region['y']}) with {placing['orientation']} cut")
    return rebuild_layout(new_layout), _result(True, OK, region["x"], region["y"], _public_region(region))


def move_part_to(layout, part_id, x, y):
    part = find_part(layout, part_id)
    if part is None:
        return layout, _result(False, PART_NOT_FOUND)
    if not part["placed"]:
        return layout, _result(False, NOT_PLACED)

    dropped = {"x": float(x), "y": float(y), "w": float(part["w"]), "h": float(part["h"])}
    if not rects_overlap(dropped, usable_area(layout)):
        new_layout = deepcopy(layout)
        _return_to_pool(find_part(new_layout, part_id))
        logger.info(f"Part {part_id} dragged off the board; returned to pool")
        return rebuild_layout(new_layout), _result(False, OUTSIDE_BOARD, returned_to_pool=True)

    tracker = _edit_tracker(layout, part)
    sx, sy = snap_position(layout, part, x, y, regions=tracker["regions"])
    ok, reason, region = validate_placement(layout, part, sx, sy, tracker)
    if not ok:
        logger.info(f"Rejected moving part {part_id} to ({sx}, {sy}): {reason}")
        return layout, _result(False, reason)

    new_layout = deepcopy(layout)
    moving = find_part(new_layout, part_id)
    moving["x"] = region["x"]
    moving["y"] = region["y"]
    logger.info(f"Moved part {part_id} to ({region['x']}, {region['y']})")
    return rebuild_layout(new_layout), _result(True, OK, region["x"], region["y"], _public_region(region))


def remove_part(layout, part_id):
    part = find_part(layout, part_id)
    if part is None:
        return layout, _result(False, PART_NOT_FOUND)
    if not part["placed"]:
        return layout, _result(False, NOT_PLACED)

    new_layout = deepcopy(layout)
    _return_to_pool(find_part(new_layout, part_id))
    logger.info(f"Removed part {part_id} from the board")
    return rebuild_layout(new_layout), _result(True, OK)


def rotate_part_90(layout, part_id):
    part = find_part(layout, part_id)
    if part is None:
        return layout, _result(False, PART_NOT_FOUND)

    candidate = dict(part, w=part["h"], h=part["w"])
    if part["placed"]:
        tracker = _edit_tracker(layout, part)
        ok, reason, _ = validate_placement(layout, candidate, part["x"], part["y"], tracker)
        if not ok:
            logger.info(f"Rejected rotating part {part_id}: {reason}")
            return layout, _result(False, reason)

    new_layout = deepcopy(layout)
    rotating = find_part(new_layout, part_id)
    rotating["w"], rotating["h"] = rotating["h"], rotating["w"]
    rotating["rotated"] = not rotating.get("rotated", False)
    if not rotating["placed"]:
        return new_layout, _result(True, OK)
    return rebuild_layout(new_layout), _result(True, OK, rotating["x"], rotating["y"])
