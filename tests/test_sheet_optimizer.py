import unittest

from sheet_optimizer import (
    calculate_blank_weight,
    calculate_cost_savings,
    calculate_scrap,
    calculate_scrap_from_efficiency,
    material_density,
    optimize_sheet_cutting,
)

SHEETS = [
    {"sheet_size_id": "S1", "width_mm": 1220, "length_mm": 2440, "material_type": "MS", "cost_per_kg": 62.0},
    {"sheet_size_id": "S2", "width_mm": 1000, "length_mm": 1000, "material_type": "MS", "cost_per_kg": 60.0},
    {"sheet_size_id": "S3", "width_mm": 1500, "length_mm": 3000, "material_type": "MS", "active": False},
]


class WeightTests(unittest.TestCase):
    def test_blank_weight_for_steel(self):
        # 1000 x 1000 x 1 mm = 1e6 mm³ = 0.001 m³ -> 7.85 kg
        self.assertAlmostEqual(calculate_blank_weight(1000, 1000, 1), 7.85)

    def test_scrap_from_sheet_and_blank_weight(self):
        result = calculate_scrap({"width": 1000, "length": 1000, "thickness": 1}, 6.28)

        self.assertAlmostEqual(result["sheet_weight"], 7.85)
        self.assertAlmostEqual(result["scrap_weight"], 1.57)
        self.assertAlmostEqual(result["scrap_pct"], 20.0)

    def test_scrap_uses_sheet_material_density(self):
        result = calculate_scrap({"width": 1000, "length": 1000, "thickness": 1, "material_type": "AL"}, 0.0)

        self.assertAlmostEqual(result["sheet_weight"], 2.7)
        self.assertAlmostEqual(result["scrap_pct"], 100.0)

    def test_unknown_material_falls_back_to_mild_steel(self):
        self.assertEqual(material_density("al"), 2700.0)
        self.assertEqual(material_density("XYZ"), 7850.0)
        self.assertEqual(material_density(None), 7850.0)

        result = calculate_scrap({"width": 1000, "length": 1000, "thickness": 1, "material_type": "XYZ"}, 0.0)
        self.assertAlmostEqual(result["sheet_weight"], 7.85)

    def test_explicit_density_overrides_material(self):
        result = calculate_scrap({"width": 1000, "length": 1000, "thickness": 1, "material_type": "AL"}, 0.0, 8960.0)

        self.assertAlmostEqual(result["sheet_weight"], 8.96)

    def test_scrap_from_efficiency(self):
        result = calculate_scrap_from_efficiency(10.0, 80.0)

        self.assertAlmostEqual(result["scrap_weight"], 2.0)
        self.assertAlmostEqual(result["scrap_pct"], 20.0)


class OptimizeSheetCuttingTests(unittest.TestCase):
    def test_picks_sheet_with_most_blanks(self):
        result = optimize_sheet_cutting(
            {"width_mm": 170, "length_mm": 760, "thickness_mm": 2, "quantity": 100},
            SHEETS,
        )

        self.assertEqual(result["best_sheet_size_id"], "S1")
        self.assertEqual(result["best_direction"], "HORIZONTAL")
        self.assertEqual(result["total_blanks_per_sheet"], 21)
        self.assertEqual(result["sheets_needed"], 5)
        self.assertAlmostEqual(result["total_weight"], result["total_blanks_weight_per_sheet"] * 5)
        self.assertEqual(result["horizontal_result"]["total_blanks"], 21)
        self.assertEqual(result["vertical_result"]["total_blanks"], 14)

    def test_inactive_sheets_are_ignored(self):
        result = optimize_sheet_cutting(
            {"width_mm": 170, "length_mm": 760, "thickness_mm": 2, "quantity": 10},
            SHEETS,
        )

        self.assertNotIn("S3", {row["sheet_size_id"] for row in result["all_sheet_comparisons"]})

    def test_preferred_sheet_only(self):
        result = optimize_sheet_cutting(
            {"width_mm": 300, "length_mm": 300, "thickness_mm": 1, "quantity": 20},
            SHEETS,
            preferred_sheet_size="S2",
            compare_all_sizes=False,
        )

        self.assertEqual(result["best_sheet_size_id"], "S2")
        self.assertEqual(result["total_blanks_per_sheet"], 9)
        self.assertEqual(result["sheets_needed"], 3)

    def test_smart_mode_can_win(self):
        result = optimize_sheet_cutting(
            {"width_mm": 400, "length_mm": 200, "thickness_mm": 1, "quantity": 24},
            [{"sheet_size_id": "SQ", "width_mm": 1000, "length_mm": 1000}],
            include_smart=True,
        )

        self.assertEqual(result["best_direction"], "SMART_MIXED")
        self.assertEqual(result["total_blanks_per_sheet"], 12)
        self.assertEqual(result["sheets_needed"], 2)

    def test_sheet_rows_with_invalid_dimensions_are_skipped(self):
        sheets = [
            {"sheet_size_id": "NEW", "width_mm": float("nan"), "length_mm": None},
            {"sheet_size_id": "S2", "width_mm": 1000, "length_mm": 1000},
        ]

        with self.assertLogs("sheet_optimizer", level="WARNING") as logs:
            result = optimize_sheet_cutting(
                {"width_mm": 300, "length_mm": 300, "thickness_mm": 1, "quantity": 9},
                sheets,
            )

        self.assertEqual(result["best_sheet_size_id"], "S2")
        self.assertEqual(result["total_blanks_per_sheet"], 9)
        self.assertNotIn("NEW", {row["sheet_size_id"] for row in result["all_sheet_comparisons"]})
        self.assertTrue(any("NEW" in line for line in logs.output))

    def test_rejects_bad_requests(self):
        with self.assertRaises(ValueError):
            optimize_sheet_cutting({"width_mm": 170, "length_mm": 760}, SHEETS)
        with self.assertRaises(ValueError):
            optimize_sheet_cutting({"width_mm": 170, "length_mm": 760, "thickness_mm": 2}, [])

    def test_blank_too_large_for_every_sheet(self):
        with self.assertLogs("sheet_optimizer", level="WARNING"):
            with self.assertRaisesRegex(ValueError, "No valid cutting configurations"):
                optimize_sheet_cutting(
                    {"width_mm": 5000, "length_mm": 5000, "thickness_mm": 2, "quantity": 1},
                    SHEETS,
                )


class CostSavingsTests(unittest.TestCase):
    def test_savings_against_current_plan(self):
        optimized = {"scrap": 10.0, "efficiency": 90.0, "total_blanks_per_sheet": 12, "sheets_needed": 2}
        current = {"scrap": 20.0, "efficiency": 80.0, "total_blanks_per_sheet": 10, "sheets_needed": 3}

        savings = calculate_cost_savings(optimized, current)

        self.assertEqual(savings["scrap_reduction"], 10.0)
        self.assertEqual(savings["scrap_reduction_percentage"], 50.0)
        self.assertEqual(savings["extra_blanks_gained"], 2)
        self.assertEqual(savings["sheets_reduction"], 1)
        self.assertEqual(savings["efficiency_gain"], 10.0)

    def test_no_current_plan(self):
        self.assertIsNone(calculate_cost_savings({}, None))


if __name__ == "__main__":
    unittest.main()
