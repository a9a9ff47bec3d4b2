import logging
import math

from dimension_utils import coerce_orientation, validate_dimensions
from layout_types import (
    CORNER,
    LENGTH_STRIP,
    WIDTH_STRIP,
    LayoutStats,
    LeftoverArea,
    Orientation,
    PlacedBlank,
    SheetLayout,
)

logger = logging.getLogger(__name__)


def _effective_dims(blank_width, blank_length, direction):
    if direction == Orientation.HORIZONTAL:
        return blank_width, blank_length
    return blank_length, blank_width


def _base_rotation(direction):
    return 0 if direction == Orientation.HORIZONTAL else 90


def _primary_grid(sheet_width, sheet_length, eff_w, eff_l):
    across = math.floor(sheet_width / eff_w)
    along = math.floor(sheet_length / eff_l)
    return across, along


def _grid_blanks(origin_x, origin_y, cols, rows, w, h, start_index, is_primary, rotation, leftover_type=None):
    blanks = []
    index = start_index
    for row in range(rows):
        for col in range(cols):
            blanks.append(
                PlacedBlank(
                    x=origin_x + col * w,
                    y=origin_y + row * h,
                    width=w,
                    height=h,
                    index=index,
                    is_primary=is_primary,
                    rotation=rotation,
                    leftover_type=leftover_type,
                )
            )
            index += 1
    return blanks


def _leftover_areas(sheet_length, used_width, used_length, leftover_width, leftover_length):
    # Zero-area regions (e.g. a bottom strip under an empty primary grid) are omitted.
    areas = []
    if leftover_width > 0:
        areas.append(LeftoverArea(used_width, 0.0, leftover_width, sheet_length, WIDTH_STRIP, "vertical"))
    if leftover_length > 0 and used_width > 0:
        areas.append(LeftoverArea(0.0, used_length, used_width, leftover_length, LENGTH_STRIP, "horizontal"))
    if leftover_width > 0 and leftover_length > 0:
        areas.append(LeftoverArea(used_width, used_length, leftover_width, leftover_length, CORNER, "both"))
    return areas


def _build_stats(sheet_width, sheet_length, blank_width, blank_length, across, along, extra_count, leftover_width, leftover_length):
    primary_count = across * along
    total_blanks = primary_count + extra_count
    used_area = total_blanks * blank_width * blank_length
    total_sheet_area = sheet_width * sheet_length
    efficiency = (used_area / total_sheet_area) * 100
    return LayoutStats(
        total_blanks=total_blanks,
        primary_blanks=primary_count,
        extra_blanks=extra_count,
        blanks_across=across,
        blanks_along=along,
        efficiency=efficiency,
        scrap_percentage=100 - efficiency,
        used_area=used_area,
        leftover_area=total_sheet_area - used_area,
        total_sheet_area=total_sheet_area,
        leftover_width=leftover_width,
        leftover_length=leftover_length,
    )


def _single_orientation_layout(sheet_width, sheet_length, blank_width, blank_length, direction):
    eff_w, eff_l = _effective_dims(blank_width, blank_length, direction)
    rotation = _base_rotation(direction)

    across, along = _primary_grid(sheet_width, sheet_length, eff_w, eff_l)
    used_width = across * eff_w
    used_length = along * eff_l
    leftover_width = sheet_width - used_width
    leftover_length = sheet_length - used_length

    blanks = _grid_blanks(0.0, 0.0, across, along, eff_w, eff_l, 0, True, rotation)
    next_index = len(blanks)

    extra_blanks = []
    # Right strip re-tiles against the full sheet length.
    if leftover_width >= eff_w:
        cols = math.floor(leftover_width / eff_w)
        rows = math.floor(sheet_length / eff_l)
        strip = _grid_blanks(used_width, 0.0, cols, rows, eff_w, eff_l, next_index, False, rotation, WIDTH_STRIP)
        extra_blanks.extend(strip)
        next_index += len(strip)

    # Bottom strip spans only the primary grid's used width; the corner stays empty.
    if leftover_length >= eff_l:
        cols = math.floor(used_width / eff_w)
        rows = math.floor(leftover_length / eff_l)
        strip = _grid_blanks(0.0, used_length, cols, rows, eff_w, eff_l, next_index, False, rotation, LENGTH_STRIP)
        extra_blanks.extend(strip)

    stats = _build_stats(
        sheet_width, sheet_length, blank_width, blank_length,
        across, along, len(extra_blanks), leftover_width, leftover_length,
    )
    return SheetLayout(
        direction=direction,
        sheet_width=sheet_width,
        sheet_length=sheet_length,
        blank_width=blank_width,
        blank_length=blank_length,
        actual_blank_width=eff_w,
        actual_blank_length=eff_l,
        stats=stats,
        blanks=tuple(blanks),
        leftover_areas=tuple(_leftover_areas(sheet_length, used_width, used_length, leftover_width, leftover_length)),
        extra_blanks=tuple(extra_blanks),
    )


def _best_strip_fit(strip_w, strip_h, eff_w, eff_l):
    """Pick same or rotated orientation for one leftover strip.

    Returns ``(rotated, cols, rows)``; ``cols * rows`` is zero when neither fits.
    Same orientation wins ties.
    """
    same_cols = math.floor(strip_w / eff_w)
    same_rows = math.floor(strip_h / eff_l)
    rotated_cols = math.floor(strip_w / eff_l)
    rotated_rows = math.floor(strip_h / eff_w)
    same = same_cols * same_rows
    rotated = rotated_cols * rotated_rows

    if same >= rotated and same > 0:
        return False, same_cols, same_rows
    if rotated > 0:
        return True, rotated_cols, rotated_rows
    return False, 0, 0


def _smart_mixed_layout(sheet_width, sheet_length, blank_width, blank_length):
    h_across, h_along = _primary_grid(sheet_width, sheet_length, blank_width, blank_length)
    v_across, v_along = _primary_grid(sheet_width, sheet_length, blank_length, blank_width)
    if h_across * h_along >= v_across * v_along:
        primary_direction, across, along = Orientation.HORIZONTAL, h_across, h_along
    else:
        primary_direction, across, along = Orientation.VERTICAL, v_across, v_along

    eff_w, eff_l = _effective_dims(blank_width, blank_length, primary_direction)
    rotation = _base_rotation(primary_direction)
    rotated_rotation = 90 - rotation

    used_width = across * eff_w
    used_length = along * eff_l
    leftover_width = sheet_width - used_width
    leftover_length = sheet_length - used_length

    blanks = _grid_blanks(0.0, 0.0, across, along, eff_w, eff_l, 0, True, rotation)
    next_index = len(blanks)

    strips = []
    if leftover_width > 0:
        strips.append((WIDTH_STRIP, used_width, 0.0, leftover_width, sheet_length))
    if leftover_length > 0:
        strips.append((LENGTH_STRIP, 0.0, used_length, used_width, leftover_length))

    extra_blanks = []
    for strip_type, origin_x, origin_y, strip_w, strip_h in strips:
        rotated, cols, rows = _best_strip_fit(strip_w, strip_h, eff_w, eff_l)
        if cols * rows == 0:
            continue
        if rotated:
            w, h, strip_rotation = eff_l, eff_w, rotated_rotation
        else:
            w, h, strip_rotation = eff_w, eff_l, rotation
        placed = _grid_blanks(origin_x, origin_y, cols, rows, w, h, next_index, False, strip_rotation, strip_type)
        extra_blanks.extend(placed)
        next_index += len(placed)

    stats = _build_stats(
        sheet_width, sheet_length, blank_width, blank_length,
        across, along, len(extra_blanks), leftover_width, leftover_length,
    )
    return SheetLayout(
        direction=Orientation.SMART_MIXED,
        sheet_width=sheet_width,
        sheet_length=sheet_length,
        blank_width=blank_width,
        blank_length=blank_length,
        actual_blank_width=eff_w,
        actual_blank_length=eff_l,
        stats=stats,
        blanks=tuple(blanks),
        leftover_areas=tuple(_leftover_areas(sheet_length, used_width, used_length, leftover_width, leftover_length)),
        extra_blanks=tuple(extra_blanks),
    )


def compute_layout(sheet_width, sheet_length, blank_width, blank_length, orientation=Orientation.HORIZONTAL):
    """
    Lay out identical rectangular blanks on one sheet.

    HORIZONTAL places blanks as given, VERTICAL swaps width and length, and
    SMART_MIXED keeps the better primary grid while letting each leftover
    strip choose its own rotation. The corner left by both strips is reported
    but never filled.

    A blank too large for the sheet yields an empty layout; malformed input
    raises ValueError.
    """
    sheet_width, sheet_length, blank_width, blank_length = validate_dimensions(
        sheet_width, sheet_length, blank_width, blank_length
    )
    direction = coerce_orientation(orientation)

    if direction == Orientation.SMART_MIXED:
        layout = _smart_mixed_layout(sheet_width, sheet_length, blank_width, blank_length)
    else:
        layout = _single_orientation_layout(sheet_width, sheet_length, blank_width, blank_length, direction)

    logger.debug(
        "Layout %s sheet=%sx%s blank=%sx%s total=%d (primary=%d extra=%d) efficiency=%.2f%%",
        direction.value,
        sheet_width,
        sheet_length,
        blank_width,
        blank_length,
        layout.stats.total_blanks,
        layout.stats.primary_blanks,
        layout.stats.extra_blanks,
        layout.stats.efficiency,
    )
    return layout


def generate_all_layouts(sheet_width, sheet_length, blank_width, blank_length):
    """Compute every cutting mode and name the one yielding the most blanks."""
    horizontal = compute_layout(sheet_width, sheet_length, blank_width, blank_length, Orientation.HORIZONTAL)
    vertical = compute_layout(sheet_width, sheet_length, blank_width, blank_length, Orientation.VERTICAL)
    smart = compute_layout(sheet_width, sheet_length, blank_width, blank_length, Orientation.SMART_MIXED)

    best = horizontal
    for candidate in (vertical, smart):
        if candidate.stats.total_blanks > best.stats.total_blanks:
            best = candidate

    return {
        "horizontal": horizontal,
        "vertical": vertical,
        "smart": smart,
        "best_direction": best.direction,
        "smart_gain": {
            "vs_horizontal": smart.stats.total_blanks - horizontal.stats.total_blanks,
            "vs_vertical": smart.stats.total_blanks - vertical.stats.total_blanks,
        },
    }
