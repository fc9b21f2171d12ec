import unittest

from panel_utils import coerce_bool, normalize_part, normalize_parts, parts_to_editor_rows


class PanelUtilsTests(unittest.TestCase):
    def test_coerce_bool_handles_string_false_correctly(self):
        self.assertFalse(coerce_bool("False"))
        self.assertFalse(coerce_bool("0"))
        self.assertFalse(coerce_bool("no"))

    def test_coerce_bool_handles_string_true_correctly(self):
        self.assertTrue(coerce_bool("True"))
        self.assertTrue(coerce_bool("1"))
        self.assertTrue(coerce_bool("yes"))

    def test_part_with_coordinates_is_placed(self):
        part = normalize_part({"id": 7, "w": "400", "h": "300", "x": "10", "y": "10", "orientation": "Vertical"})
        self.assertEqual(part["id"], "7")
        self.assertTrue(part["placed"])
        self.assertEqual((part["x"], part["y"], part["w"], part["h"]), (10.0, 10.0, 400.0, 300.0))
        self.assertEqual(part["orientation"], "vertical")

    def test_part_without_coordinates_goes_to_pool(self):
        part = normalize_part({"name": "Shelf", "w": 400, "h": 300, "x": None, "orientation": "vertical"}, index=2)
        self.assertEqual(part["id"], "P3")
        self.assertFalse(part["placed"])
        self.assertIsNone(part["orientation"])

    def test_explicit_unplaced_flag_wins(self):
        part = normalize_part({"id": "A", "w": 1, "h": 1, "x": 5, "y": 5, "placed": "False"})
        self.assertFalse(part["placed"])
        self.assertIsNone(part["x"])

    def test_duplicate_ids_are_rejected(self):
        with self.assertRaises(ValueError):
            normalize_parts([{"id": "A", "w": 1, "h": 1}, {"id": "A", "w": 2, "h": 2}])

    def test_editor_rows(self):
        rows = parts_to_editor_rows(normalize_parts([{"id": "A", "name": "Door", "w": 500, "h": 700}]))
        self.assertEqual(rows[0]["Name"], "Door")
        self.assertFalse(rows[0]["Placed"])
        self.assertEqual(rows[0]["Cut"], "")

    def test_editor_rows_show_the_cut_actually_used(self):
        part = normalize_part({"id": "A", "w": 2750, "h": 300, "x": 10, "y": 10, "orientation": "vertical"})
        part["cut_orientation"] = "horizontal"
        self.assertEqual(parts_to_editor_rows([part])[0]["Cut"], "horizontal")


if __name__ == "__main__":
    unittest.main()
