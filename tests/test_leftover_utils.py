import unittest
from dataclasses import replace

from layout_engine import compute_layout
from layout_types import Orientation
from leftover_utils import (
    blanks_within_sheet,
    build_layout_heatmap,
    calculate_layout_offcuts,
    find_overlaps,
    is_leftover_reusable,
)


class LeftoverUtilsTests(unittest.TestCase):
    def test_is_leftover_reusable_threshold(self):
        self.assertTrue(is_leftover_reusable(100, 250))
        self.assertFalse(is_leftover_reusable(30, 2440))
        self.assertTrue(is_leftover_reusable(30, 2440, min_dimension=25))

    def test_offcuts_of_empty_layout_cover_whole_sheet(self):
        layout = compute_layout(500, 400, 600, 700)

        result = calculate_layout_offcuts(layout, min_width=0.0, min_height=0.0, min_area=0.0)

        self.assertEqual(result["utilization_pct"], 0.0)
        self.assertEqual(len(result["reusable_offcuts"]), 1)
        self.assertEqual(result["reusable_offcuts"][0]["width"], 500.0)
        self.assertEqual(result["reusable_offcuts"][0]["height"], 400.0)

    def test_offcuts_report_expected_utilization(self):
        layout = compute_layout(1000, 1000, 300, 300)

        result = calculate_layout_offcuts(layout, min_width=50.0, min_height=50.0, min_area=10000.0)

        self.assertAlmostEqual(result["used_area"], 810000.0)
        self.assertAlmostEqual(result["waste_area"], 190000.0)
        self.assertAlmostEqual(result["utilization_pct"], 81.0)
        offcuts = [(r["x"], r["y"], r["width"], r["height"]) for r in result["reusable_offcuts"]]
        self.assertEqual(offcuts, [(900.0, 0.0, 100.0, 1000.0), (0.0, 900.0, 900.0, 100.0)])

    def test_offcuts_exclude_extra_blanks_cut_from_strip(self):
        # Two rotated 200x400 extras fill the top 800 mm of the 200 wide right strip.
        layout = compute_layout(1000, 1000, 400, 200, Orientation.SMART_MIXED)

        result = calculate_layout_offcuts(layout, min_width=0.0, min_height=0.0, min_area=0.0)

        offcuts = [(r["x"], r["y"], r["width"], r["height"]) for r in result["reusable_offcuts"]]
        self.assertEqual(offcuts, [(800.0, 800.0, 200.0, 200.0)])
        self.assertAlmostEqual(result["waste_area"], 40000.0)
        self.assertAlmostEqual(sum(r["area"] for r in result["reusable_offcuts"]), result["waste_area"])

    def test_heatmap_counts_strip_fill_as_used(self):
        layout = compute_layout(1000, 1000, 400, 200, Orientation.SMART_MIXED)

        cells = build_layout_heatmap(layout, cell_size=200.0)
        by_pos = {(c["cell_col"], c["cell_row"]): c["usage_pct"] for c in cells}

        self.assertEqual(by_pos[(4, 0)], 100.0)
        self.assertEqual(by_pos[(4, 3)], 100.0)
        self.assertEqual(by_pos[(4, 4)], 0.0)

    def test_offcuts_filter_small_scraps(self):
        layout = compute_layout(1220, 2440, 170, 760)

        result = calculate_layout_offcuts(layout, min_width=200.0, min_height=200.0, min_area=40000.0)

        self.assertEqual(result["reusable_offcuts"], [])

    def test_find_overlaps_detects_collision(self):
        layout = compute_layout(1000, 1000, 300, 300)
        moved = replace(layout.blanks[1], x=150.0)
        broken = replace(layout, blanks=(layout.blanks[0], moved) + layout.blanks[2:])

        self.assertEqual(find_overlaps(layout), [])
        self.assertIn((0, 1), find_overlaps(broken))

    def test_blanks_within_sheet_detects_escape(self):
        layout = compute_layout(1000, 1000, 300, 300)
        escaped = replace(layout.blanks[2], x=800.0)
        broken = replace(layout, blanks=layout.blanks[:2] + (escaped,) + layout.blanks[3:])

        self.assertTrue(blanks_within_sheet(layout))
        self.assertFalse(blanks_within_sheet(broken))

    def test_heatmap_cells_cover_sheet(self):
        layout = compute_layout(1000, 1000, 500, 500)

        cells = build_layout_heatmap(layout, cell_size=250.0)

        self.assertEqual(len(cells), 16)
        self.assertTrue(all(c["usage_pct"] == 100.0 for c in cells))

    def test_heatmap_marks_leftover_cells_empty(self):
        layout = compute_layout(1000, 1000, 300, 300)

        cells = build_layout_heatmap(layout, cell_size=100.0)
        last = [c for c in cells if c["cell_col"] == 9 and c["cell_row"] == 9][0]
        first = cells[0]

        self.assertEqual(len(cells), 100)
        self.assertEqual(last["usage_pct"], 0.0)
        self.assertEqual(first["usage_pct"], 100.0)


if __name__ == "__main__":
    unittest.main()
