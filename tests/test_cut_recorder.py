import unittest

from cut_recorder import cut_for_region, finalize_cuts, find_obstruction, make_cut


class CutRecorderTests(unittest.TestCase):
    def setUp(self):
        self.area = {"x": 10.0, "y": 10.0, "w": 2750.0, "h": 1830.0}
        self.region = {"x": 10.0, "y": 10.0, "w": 2750.0, "h": 1830.0}

    def test_vertical_cut_spans_region_height(self):
        cut = cut_for_region("vertical", self.region, 410.0, 1.5, "A")
        self.assertEqual((cut["pos"], cut["start"], cut["end"]), (411.5, 10.0, 1840.0))
        self.assertEqual((cut["x1"], cut["y1"], cut["x2"], cut["y2"]), (411.5, 10.0, 411.5, 1840.0))
        self.assertEqual(cut["part_id"], "A")

    def test_horizontal_cut_spans_region_width(self):
        cut = cut_for_region("horizontal", self.region, 310.0, 0.0)
        self.assertEqual((cut["x1"], cut["y1"], cut["x2"], cut["y2"]), (10.0, 310.0, 2760.0, 310.0))

    def test_duplicates_collapse(self):
        cuts = [
            make_cut("vertical", 411.5, 10.0, 1840.0, "A"),
            make_cut("vertical", 411.9, 10.5, 1840.0, "B"),
            make_cut("horizontal", 411.5, 10.0, 1840.0, "C"),
        ]
        result = finalize_cuts(cuts, self.area)
        self.assertEqual(len(result), 2)
        self.assertEqual([c["part_id"] for c in result], ["C", "A"])

    def test_edge_cuts_are_dropped(self):
        cuts = [
            make_cut("vertical", 2760.0, 10.0, 1840.0),
            make_cut("horizontal", 10.0, 10.0, 2760.0),
            make_cut("horizontal", 1900.0, 10.0, 2760.0),
        ]
        self.assertEqual(finalize_cuts(cuts, self.area), [])

    def test_order_follows_position(self):
        cuts = [
            make_cut("vertical", 713.0, 10.0, 1840.0),
            make_cut("horizontal", 311.5, 10.0, 2760.0),
            make_cut("vertical", 311.5, 10.0, 1840.0),
        ]
        result = finalize_cuts(cuts, self.area)
        self.assertEqual([c["order"] for c in result], [1, 2, 3])
        self.assertEqual([(c["pos"], c["orientation"]) for c in result],
                         [(311.5, "horizontal"), (311.5, "vertical"), (713.0, "vertical")])
        self.assertIsNone(cuts[0]["order"])

    def test_obstruction_detects_crossing_part(self):
        parts = [
            {"id": "A", "x": 10.0, "y": 10.0, "w": 400.0, "h": 300.0, "placed": True},
            {"id": "B", "x": 300.0, "y": 400.0, "w": 200.0, "h": 200.0, "placed": True},
        ]
        self.assertEqual(find_obstruction("vertical", self.region, 410.0, 1.5, parts, "A")["id"], "B")
        self.assertIsNone(find_obstruction("horizontal", self.region, 310.0, 1.5, parts, "A"))

    def test_zero_kerf_line_touching_part_is_clear(self):
        parts = [{"id": "B", "x": 410.0, "y": 10.0, "w": 100.0, "h": 100.0, "placed": True}]
        self.assertIsNone(find_obstruction("vertical", self.region, 410.0, 0.0, parts, "A"))


if __name__ == "__main__":
    unittest.main()
