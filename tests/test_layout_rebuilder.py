import unittest

from board_config import new_layout, usable_area
from geometry_utils import rect_contains_rect, rects_overlap
from layout_rebuilder import order_parts, rebuild_layout, resolve_orientation, run_rebuild
from placement_validator import NO_FREE_REGION, NOT_CORNER_ALIGNED, OBSTRUCTED_CUT


def box(region):
    return (region["x"], region["y"], region["w"], region["h"])


def part_by_id(layout, part_id):
    return next(p for p in layout["parts"] if p["id"] == part_id)


class LayoutRebuilderTests(unittest.TestCase):
    def setUp(self):
        self.settings = {"board_w": 2750, "board_h": 1830, "kerf": 1.5, "margin": 10, "default_orientation": "vertical"}

    def rebuild(self, parts, **overrides):
        settings = dict(self.settings, **overrides)
        return rebuild_layout(new_layout(settings, parts))

    def test_empty_board_is_one_region(self):
        layout = self.rebuild([])
        self.assertEqual([box(r) for r in layout["regions"]], [(10.0, 10.0, 2750.0, 1830.0)])
        self.assertEqual(layout["cuts"], [])
        self.assertEqual(layout["skipped"], [])

    def test_single_vertical_piece(self):
        layout = self.rebuild([{"id": "A", "w": 400, "h": 300, "x": 10, "y": 10}])

        self.assertEqual(len(layout["cuts"]), 1)
        cut = layout["cuts"][0]
        self.assertEqual(cut["orientation"], "vertical")
        self.assertEqual((cut["pos"], cut["start"], cut["end"], cut["order"]), (411.5, 10.0, 1840.0, 1))
        self.assertEqual([box(r) for r in layout["regions"]], [(411.5, 10.0, 2348.5, 1830.0), (10.0, 311.5, 400.0, 1528.5)])
        self.assertEqual(part_by_id(layout, "A")["cut_orientation"], "vertical")

    def test_rebuild_is_deterministic(self):
        parts = [
            {"id": "B", "w": 300, "h": 200, "x": 411.5, "y": 10},
            {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
            {"id": "C", "w": 200, "h": 250, "x": 10, "y": 311.5},
        ]
        first = self.rebuild(parts)
        second = rebuild_layout(first)
        self.assertEqual(first["cuts"], second["cuts"])
        self.assertEqual(first["regions"], second["regions"])
        self.assertEqual(first["skipped"], [])
        self.assertEqual([c["pos"] for c in first["cuts"]], [211.5, 411.5, 713.0])

    def test_regions_stay_disjoint_from_parts(self):
        layout = self.rebuild([
            {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
            {"id": "B", "w": 300, "h": 200, "x": 411.5, "y": 10},
            {"id": "C", "w": 200, "h": 250, "x": 10, "y": 311.5},
        ])
        area = usable_area(layout)
        regions = layout["regions"]
        for i, region in enumerate(regions):
            self.assertTrue(rect_contains_rect(area, region, 0.0))
            for other in regions[i + 1:]:
                self.assertFalse(rects_overlap(region, other))
            for part in layout["parts"]:
                self.assertFalse(rects_overlap(region, part))

    def test_orphaned_piece_is_skipped_without_cut(self):
        layout = self.rebuild(
            [{"id": "U", "w": 400, "h": 300, "x": 10, "y": 311.5}],
            default_orientation="horizontal",
        )
        self.assertEqual(layout["skipped"], [{"id": "U", "reason": NOT_CORNER_ALIGNED}])
        self.assertEqual(layout["cuts"], [])
        self.assertEqual([box(r) for r in layout["regions"]], [(10.0, 10.0, 2750.0, 1830.0)])
        self.assertTrue(part_by_id(layout, "U")["placed"])
        self.assertIsNone(part_by_id(layout, "U")["cut_orientation"])

    def test_overlapping_piece_has_no_region(self):
        layout = self.rebuild([
            {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
            {"id": "D", "w": 2100, "h": 300, "x": 10, "y": 10},
        ])
        self.assertEqual(layout["skipped"], [{"id": "D", "reason": NO_FREE_REGION}])

    def test_full_width_piece_falls_back_to_horizontal(self):
        layout = self.rebuild([{"id": "A", "w": 2750, "h": 300, "x": 10, "y": 10}])
        self.assertEqual(part_by_id(layout, "A")["cut_orientation"], "horizontal")
        self.assertEqual([(c["orientation"], c["pos"]) for c in layout["cuts"]], [("horizontal", 311.5)])
        self.assertEqual([box(r) for r in layout["regions"]], [(10.0, 311.5, 2750.0, 1528.5)])

    def test_exact_fill_consumes_region(self):
        layout = self.rebuild([{"id": "A", "w": 2750, "h": 1830, "x": 10, "y": 10}])
        self.assertEqual(layout["regions"], [])
        self.assertEqual(layout["cuts"], [])
        self.assertEqual(layout["skipped"], [])

    def test_blocked_cut_switches_orientation(self):
        layout = self.rebuild([
            {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
            {"id": "B", "w": 200, "h": 200, "x": 300, "y": 400},
        ])
        self.assertEqual(part_by_id(layout, "A")["cut_orientation"], "horizontal")
        self.assertEqual(layout["cuts"][0]["pos"], 311.5)
        self.assertEqual(layout["skipped"], [{"id": "B", "reason": NOT_CORNER_ALIGNED}])

    def test_horizontal_check_is_symmetric(self):
        layout = self.rebuild(
            [
                {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
                {"id": "B", "w": 200, "h": 200, "x": 500, "y": 250},
            ],
            default_orientation="horizontal",
        )
        self.assertEqual(part_by_id(layout, "A")["cut_orientation"], "vertical")

    def test_piece_blocked_both_ways_is_skipped(self):
        layout = self.rebuild([
            {"id": "A", "w": 400, "h": 300, "x": 10, "y": 10},
            {"id": "B", "w": 200, "h": 200, "x": 300, "y": 200},
        ])
        self.assertIn({"id": "A", "reason": OBSTRUCTED_CUT}, layout["skipped"])
        self.assertEqual(layout["cuts"], [])

    def test_run_rebuild_can_leave_a_part_out(self):
        layout = new_layout(self.settings, [{"id": "A", "w": 400, "h": 300, "x": 10, "y": 10}])
        tracker, cuts, skipped, orientations = run_rebuild(layout, exclude_id="A")
        self.assertEqual([box(r) for r in tracker["regions"]], [(10.0, 10.0, 2750.0, 1830.0)])
        self.assertEqual((cuts, skipped, orientations), ([], [], {}))

    def test_order_parts_groups_rows(self):
        parts = [
            {"id": "c", "x": 10.0, "y": 311.5},
            {"id": "b", "x": 411.5, "y": 10.4},
            {"id": "a", "x": 10.0, "y": 10.0},
        ]
        self.assertEqual([p["id"] for p in order_parts(parts, 1.0)], ["a", "b", "c"])

    def test_resolve_orientation(self):
        region = {"direction": "vertical", "level": 1}
        self.assertEqual(resolve_orientation({"orientation": "horizontal"}, region, "vertical"), "horizontal")
        self.assertEqual(resolve_orientation({"orientation": None}, region, "horizontal"), "vertical")
        self.assertEqual(resolve_orientation({"orientation": None}, region, "alternate"), "vertical")
        self.assertEqual(resolve_orientation({}, {"direction": None, "level": 2}, "alternate"), "horizontal")
        self.assertEqual(resolve_orientation({}, {"direction": None, "level": 0}, "vertical"), "vertical")


if __name__ == "__main__":
    unittest.main()
