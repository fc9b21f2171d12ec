TRUTHY_VALUES = {"1", "true", "t", "yes", "y", "on"}
FALSY_VALUES = {"0", "false", "f", "no", "n", "off", ""}


def coerce_bool(value):
    """Safely coerce mixed UI/import values to bool without bool('False') bugs."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_VALUES:
            return True
        if normalized in FALSY_VALUES:
            return False
    return False


def coerce_float(value, default=0.0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def coerce_optional_float(value):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_orientation(value):
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in ("horizontal", "vertical"):
        return normalized
    return None


def normalize_part(row, index=0):
    """Turn a loosely typed part row into the dict shape the engine works with.

    A row counts as placed only when it says so (or carries no flag) and has
    both coordinates.
    """
    part_id = row.get("id")
    if part_id is None or str(part_id).strip() == "":
        part_id = f"P{index + 1}"
    x = coerce_optional_float(row.get("x"))
    y = coerce_optional_float(row.get("y"))
    placed = coerce_bool(row.get("placed", True)) and x is not None and y is not None
    return {
        "id": str(part_id),
        "name": str(row.get("name") or part_id),
        "w": coerce_float(row.get("w", 0.0)),
        "h": coerce_float(row.get("h", 0.0)),
        "rotated": coerce_bool(row.get("rotated", False)),
        "placed": placed,
        "x": x if placed else None,
        "y": y if placed else None,
        "orientation": normalize_orientation(row.get("orientation")) if placed else None,
    }


def normalize_parts(rows):
    normalized = []
    seen = set()
    for index, row in enumerate(rows):
        part = normalize_part(dict(row), index)
        if part["id"] in seen:
            raise ValueError(f"Duplicate part id: {part['id']}")
        seen.add(part["id"])
        normalized.append(part)
    return normalized


def parts_to_editor_rows(parts):
    rows = []
    for part in parts:
        rows.append({
            "ID": part["id"],
            "Name": part["name"],
            "Width": part["w"],
            "Height": part["h"],
            "Rotated": part["rotated"],
            "Placed": part["placed"],
            "X": part["x"],
            "Y": part["y"],
            "Cut": part.get("cut_orientation") or "",
        })
    return rows
