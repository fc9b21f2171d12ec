from board_config import usable_area
from geometry_utils import rect_area


def calculate_layout_offcuts(layout, min_width=120.0, min_height=120.0, min_area=25000.0):
    """Utilisation figures for a rebuilt layout.

    Free area comes straight from the guillotine regions, so whatever is
    neither a part nor a free region is kerf or discarded scrap.
    """
    usable = usable_area(layout)
    interior_area = rect_area(usable)
    skipped_ids = {s["id"] for s in layout.get("skipped", [])}

    cut_parts = [p for p in layout["parts"] if p["placed"] and p["id"] not in skipped_ids]
    used_area = sum(rect_area(p) for p in cut_parts)
    free_area = sum(rect_area(r) for r in layout.get("regions", []))
    scrap_area = max(0.0, interior_area - used_area - free_area)

    reusable = [
        {
            "x": round(r["x"], 2),
            "y": round(r["y"], 2),
            "width": round(r["w"], 2),
            "height": round(r["h"], 2),
            "area": round(rect_area(r), 2),
        }
        for r in layout.get("regions", [])
        if r["w"] >= min_width and r["h"] >= min_height and rect_area(r) >= min_area
    ]
    reusable.sort(key=lambda r: r["area"], reverse=True)

    return {
        "interior_area": round(interior_area, 2),
        "used_area": round(used_area, 2),
        "free_area": round(free_area, 2),
        "scrap_area": round(scrap_area, 2),
        "utilization_pct": round((used_area / interior_area * 100.0), 2) if interior_area > 0 else 0.0,
        "reusable_offcuts": reusable,
    }
