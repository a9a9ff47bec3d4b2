import logging
import math

from dimension_utils import coerce_dimension
from layout_engine import compute_layout
from layout_types import Orientation
from settings import DEFAULT_MATERIAL, MATERIAL_DENSITIES, STEEL_DENSITY

logger = logging.getLogger(__name__)


def calculate_blank_weight(width_mm, length_mm, thickness_mm, density=STEEL_DENSITY):
    """Weight in kg of a plate given in millimetres and a density in kg/m³."""
    volume_mm3 = width_mm * length_mm * thickness_mm
    return volume_mm3 * (density / 1_000_000_000)


def calculate_sheet_weight(width_mm, length_mm, thickness_mm, density=STEEL_DENSITY):
    return calculate_blank_weight(width_mm, length_mm, thickness_mm, density)


def material_density(material_type):
    """Density in kg/m³ for a material code, falling back to mild steel."""
    key = str(material_type or "").strip().upper()
    return MATERIAL_DENSITIES.get(key, MATERIAL_DENSITIES[DEFAULT_MATERIAL])


def calculate_scrap(sheet, total_blank_weight, density=None):
    if density is None:
        density = material_density(sheet.get("material_type"))
    sheet_weight = calculate_sheet_weight(sheet["width"], sheet["length"], sheet["thickness"], density)
    scrap_weight = max(0.0, sheet_weight - total_blank_weight)
    return {
        "sheet_weight": sheet_weight,
        "used_weight": total_blank_weight,
        "scrap_weight": scrap_weight,
        "scrap_pct": (scrap_weight / sheet_weight * 100) if sheet_weight > 0 else 0.0,
    }


def calculate_scrap_from_efficiency(sheet_weight, efficiency_pct):
    scrap_pct = 100 - efficiency_pct
    return {
        "scrap_weight": sheet_weight * (scrap_pct / 100),
        "scrap_pct": scrap_pct,
    }


def _blank_fits(blank_width, blank_length, sheet_width, sheet_length):
    fits_as_given = blank_width <= sheet_width and blank_length <= sheet_length
    fits_rotated = blank_length <= sheet_width and blank_width <= sheet_length
    return fits_as_given or fits_rotated


def _matches_preferred(sheet, preferred):
    if preferred is None:
        return False
    if isinstance(preferred, dict):
        return sheet.get("width_mm") == preferred.get("width") and sheet.get("length_mm") == preferred.get("length")
    return sheet.get("sheet_size_id") == preferred


def _candidate_row(layout, sheet):
    stats = layout.stats
    return {
        "direction": layout.direction.value,
        "sheet_width": layout.sheet_width,
        "sheet_length": layout.sheet_length,
        "sheet_size_id": sheet.get("sheet_size_id"),
        "material_type": sheet.get("material_type"),
        "sheet_cost_per_kg": sheet.get("cost_per_kg"),
        "primary_blanks": stats.primary_blanks,
        "extra_blanks": stats.extra_blanks,
        "total_blanks": stats.total_blanks,
        "blanks_across": stats.blanks_across,
        "blanks_along": stats.blanks_along,
        "leftover_width": stats.leftover_width,
        "leftover_length": stats.leftover_length,
        "leftover_area": stats.leftover_area,
        "efficiency": stats.efficiency,
        "scrap": stats.scrap_percentage,
        "used_area": stats.used_area,
        "total_sheet_area": stats.total_sheet_area,
        "leftover_details": [area.to_dict() for area in layout.leftover_areas],
    }


def optimize_sheet_cutting(
    blank_spec,
    available_sheets,
    preferred_sheet_size=None,
    compare_all_sizes=True,
    density=STEEL_DENSITY,
    include_smart=False,
):
    """
    Pick the sheet size and cutting direction giving the most blanks per sheet.

    Candidates are ranked by total blanks, then efficiency, then least
    leftover area. Sheets the blank cannot fit in either orientation are
    skipped.
    """
    if not blank_spec.get("width_mm") or not blank_spec.get("length_mm") or not blank_spec.get("thickness_mm"):
        raise ValueError("Invalid blank specifications: width, length, and thickness are required")
    if not available_sheets:
        raise ValueError("No sheet sizes available for optimization")

    blank_width = coerce_dimension(blank_spec["width_mm"], "width_mm")
    blank_length = coerce_dimension(blank_spec["length_mm"], "length_mm")
    blank_thickness = coerce_dimension(blank_spec["thickness_mm"], "thickness_mm")
    quantity = int(blank_spec.get("quantity") or 0)

    weight_of_blank = calculate_blank_weight(blank_width, blank_length, blank_thickness, density)

    if compare_all_sizes:
        sheets = [s for s in available_sheets if s.get("active", True) is not False]
    else:
        sheets = [s for s in available_sheets if _matches_preferred(s, preferred_sheet_size)]

    directions = [Orientation.HORIZONTAL, Orientation.VERTICAL]
    if include_smart:
        directions.append(Orientation.SMART_MIXED)

    results = []
    for sheet in sheets:
        try:
            sheet_width = coerce_dimension(sheet.get("width_mm"), "width_mm")
            sheet_length = coerce_dimension(sheet.get("length_mm"), "length_mm")
        except ValueError as exc:
            logger.warning("Skipping sheet %s with invalid dimensions: %s", sheet.get("sheet_size_id"), exc)
            continue

        if not _blank_fits(blank_width, blank_length, sheet_width, sheet_length):
            logger.warning(
                "Blank %sx%s too large for sheet %sx%s, skipping",
                blank_width, blank_length, sheet_width, sheet_length,
            )
            continue

        for direction in directions:
            layout = compute_layout(sheet_width, sheet_length, blank_width, blank_length, direction)
            if layout.stats.total_blanks > 0:
                results.append(_candidate_row(layout, sheet))

    if not results:
        raise ValueError("No valid cutting configurations found")

    # Stable sort keeps input order between exact ties.
    results.sort(key=lambda r: (-r["total_blanks"], -r["efficiency"], r["leftover_area"]))
    best = results[0]

    blanks_weight_per_sheet = weight_of_blank * best["total_blanks"]
    sheets_needed = math.ceil(quantity / best["total_blanks"]) if quantity > 0 else 0

    def _same_sheet(row, direction):
        return (
            row["sheet_width"] == best["sheet_width"]
            and row["sheet_length"] == best["sheet_length"]
            and row["direction"] == direction
        )

    result = {
        "blank_width": blank_width,
        "blank_length": blank_length,
        "blank_thickness": blank_thickness,
        "blank_quantity": quantity,
        "weight_of_blank": weight_of_blank,
        "total_blank_weight": weight_of_blank * quantity,
        "best_direction": best["direction"],
        "best_sheet_width": best["sheet_width"],
        "best_sheet_length": best["sheet_length"],
        "best_sheet_size_id": best["sheet_size_id"],
        "material_type": best["material_type"],
        "primary_blanks_per_sheet": best["primary_blanks"],
        "extra_blanks_from_leftover": best["extra_blanks"],
        "total_blanks_per_sheet": best["total_blanks"],
        "total_blanks_weight_per_sheet": blanks_weight_per_sheet,
        "efficiency": best["efficiency"],
        "scrap": best["scrap"],
        "leftover_area": best["leftover_area"],
        "leftover_width": best["leftover_width"],
        "leftover_length": best["leftover_length"],
        "leftover_details": best["leftover_details"],
        "sheets_needed": sheets_needed,
        "total_weight": blanks_weight_per_sheet * sheets_needed,
        "all_sheet_comparisons": results,
        "horizontal_result": next((r for r in results if _same_sheet(r, Orientation.HORIZONTAL.value)), None),
        "vertical_result": next((r for r in results if _same_sheet(r, Orientation.VERTICAL.value)), None),
    }

    logger.info(
        "Best sheet %sx%s %s: %d blanks/sheet, efficiency %.2f%%, %d sheets needed",
        best["sheet_width"],
        best["sheet_length"],
        best["direction"],
        best["total_blanks"],
        best["efficiency"],
        sheets_needed,
    )
    return result


def calculate_cost_savings(optimized_result, current_result):
    if not current_result:
        return None

    scrap_reduction = current_result["scrap"] - optimized_result["scrap"]
    if current_result["scrap"]:
        scrap_reduction_pct = scrap_reduction / current_result["scrap"] * 100
    else:
        scrap_reduction_pct = 0.0

    return {
        "scrap_reduction": round(scrap_reduction, 2),
        "scrap_reduction_percentage": round(scrap_reduction_pct, 2),
        "extra_blanks_gained": optimized_result["total_blanks_per_sheet"] - current_result["total_blanks_per_sheet"],
        "sheets_reduction": current_result["sheets_needed"] - optimized_result["sheets_needed"],
        "efficiency_gain": round(optimized_result["efficiency"] - current_result["efficiency"], 2),
    }
