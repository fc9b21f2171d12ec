from panel_utils import coerce_float, normalize_parts

ORIENTATIONS = ("horizontal", "vertical")
ORIENTATION_MODES = ORIENTATIONS + ("alternate",)

DEFAULT_SETTINGS = {
    "board_w": 2750.0,
    "board_h": 1830.0,
    "kerf": 1.5,
    "margin": 10.0,
    "snap_tolerance": 30.0,
    "min_region_size": 30.0,
    "min_piece_size": 50.0,
    "default_orientation": "horizontal",
    "align_tolerance": 1.0,
}

BOARD_PRESETS = {
    "Board (2750 x 1830)": (2750.0, 1830.0),
    "Board (2440 x 2150)": (2440.0, 2150.0),
}

_NON_NEGATIVE_KEYS = ("kerf", "margin", "snap_tolerance", "min_region_size", "min_piece_size", "align_tolerance")


def normalize_settings(settings=None):
    merged = dict(DEFAULT_SETTINGS)
    merged.update({k: v for k, v in (settings or {}).items() if k in DEFAULT_SETTINGS and v is not None})

    normalized = {}
    for key, default in DEFAULT_SETTINGS.items():
        if key == "default_orientation":
            continue
        normalized[key] = coerce_float(merged[key], default)

    if normalized["board_w"] <= 0 or normalized["board_h"] <= 0:
        raise ValueError("Board width and height must be positive")
    for key in _NON_NEGATIVE_KEYS:
        if normalized[key] < 0:
            raise ValueError(f"{key} cannot be negative")

    mode = str(merged["default_orientation"]).strip().lower()
    if mode not in ORIENTATION_MODES:
        raise ValueError(f"Unknown cut orientation: {merged['default_orientation']!r}")
    normalized["default_orientation"] = mode
    return normalized


def new_layout(settings=None, parts=None):
    layout = normalize_settings(settings)
    layout["parts"] = normalize_parts(parts or [])
    layout["regions"] = []
    layout["cuts"] = []
    layout["skipped"] = []
    return layout


def settings_of(layout):
    return {key: layout[key] for key in DEFAULT_SETTINGS}


def usable_area(layout):
    margin = float(layout["margin"])
    return {"x": margin, "y": margin, "w": float(layout["board_w"]), "h": float(layout["board_h"])}


def infer_board_preset(board_w, board_h):
    for preset, dims in BOARD_PRESETS.items():
        if (board_w, board_h) == dims:
            return preset
    return "Custom"
