from board_config import usable_area
from geometry_utils import rect_contains_rect, rects_overlap
from region_tracker import find_region_at, find_region_containing

OK = "OK"
TOO_SMALL = "TooSmall"
EXCEEDS_BOARD = "ExceedsBoard"
COLLISION = "Collision"
NOT_CORNER_ALIGNED = "NotCornerAligned"
NO_FREE_REGION = "NoFreeRegion"
OBSTRUCTED_CUT = "ObstructedCut"
PART_NOT_FOUND = "PartNotFound"
ALREADY_PLACED = "AlreadyPlaced"
NOT_PLACED = "NotPlaced"
OUTSIDE_BOARD = "OutsideBoard"

REASON_MESSAGES = {
    OK: "OK",
    TOO_SMALL: "Piece is smaller than the minimum cuttable size.",
    EXCEEDS_BOARD: "Piece does not fit inside the board.",
    COLLISION: "Piece overlaps another placed piece.",
    NOT_CORNER_ALIGNED: "Piece must start at the top-left corner of a free region.",
    NO_FREE_REGION: "No free region can hold the piece at this position.",
    OBSTRUCTED_CUT: "The separating cut would cross another piece.",
    PART_NOT_FOUND: "Part not found.",
    ALREADY_PLACED: "Part is already on the board.",
    NOT_PLACED: "Part is not on the board.",
    OUTSIDE_BOARD: "Piece dropped outside the board; returned to the unplaced pool.",
}


def check_dimensions(layout, w, h):
    min_size = float(layout["min_piece_size"])
    if w < min_size or h < min_size:
        return TOO_SMALL
    area = usable_area(layout)
    eps = float(layout["align_tolerance"])
    if w > area["w"] + eps or h > area["h"] + eps:
        return EXCEEDS_BOARD
    return OK


def find_collision(layout, part_id, rect):
    for other in layout["parts"]:
        if other["id"] == part_id or not other["placed"]:
            continue
        if rects_overlap(rect, other):
            return other
    return None


def validate_placement(layout, part, x, y, tracker):
    """Decide whether `part` may sit with its top-left corner at (x, y).

    Returns (ok, reason, region); region is the free region that will host
    the piece when ok is True.
    """
    w = float(part["w"])
    h = float(part["h"])
    reason = check_dimensions(layout, w, h)
    if reason != OK:
        return False, reason, None

    eps = float(layout["align_tolerance"])
    rect = {"x": float(x), "y": float(y), "w": w, "h": h}
    if not rect_contains_rect(usable_area(layout), rect, eps):
        return False, EXCEEDS_BOARD, None

    if find_collision(layout, part["id"], rect) is not None:
        return False, COLLISION, None

    region = find_region_at(tracker, w, h, rect["x"], rect["y"], eps)
    if region is not None:
        return True, OK, region

    if find_region_containing(tracker, w, h, rect["x"], rect["y"], eps) is not None:
        return False, NOT_CORNER_ALIGNED, None
    return False, NO_FREE_REGION, None
