import math

from layout_types import CORNER
from settings import DEFAULT_REUSABLE_MIN_DIMENSION

EPS = 1e-6


def _span(a_start, a_end, b_start, b_end):
    return max(0.0, min(a_end, b_end) - max(a_start, b_start))


def _strip_fills(layout):
    """Bounding (x, y, w, h) of the extra blanks cut from each leftover strip."""
    bounds = {}
    for blank in layout.extra_blanks:
        x0, y0, x1, y1 = bounds.get(blank.leftover_type, (blank.x, blank.y, blank.x, blank.y))
        bounds[blank.leftover_type] = (
            min(x0, blank.x),
            min(y0, blank.y),
            max(x1, blank.x + blank.width),
            max(y1, blank.y + blank.height),
        )
    return {strip: (x0, y0, x1 - x0, y1 - y0) for strip, (x0, y0, x1, y1) in bounds.items()}


def _filled_blocks(layout):
    """Solid blocks covered by blanks: the primary grid plus each strip's fill."""
    blocks = list(_strip_fills(layout).values())
    stats = layout.stats
    if stats.primary_blanks:
        blocks.insert(0, (
            0.0,
            0.0,
            stats.blanks_across * layout.actual_blank_width,
            stats.blanks_along * layout.actual_blank_length,
        ))
    return blocks


def _strip_remainders(area, fill):
    """Split a leftover strip into the part right of its fill and the part below it."""
    if fill is None:
        return [(area.x, area.y, area.width, area.height)]
    fill_x_end = fill[0] + fill[2]
    fill_y_end = fill[1] + fill[3]
    pieces = [
        (fill_x_end, area.y, area.x + area.width - fill_x_end, area.height),
        (area.x, fill_y_end, fill_x_end - area.x, area.y + area.height - fill_y_end),
    ]
    return [p for p in pieces if p[2] > EPS and p[3] > EPS]


def is_leftover_reusable(leftover_width, leftover_length, min_dimension=DEFAULT_REUSABLE_MIN_DIMENSION):
    return leftover_width >= min_dimension and leftover_length >= min_dimension


def find_overlaps(layout):
    """Return index pairs of placed blanks whose interiors overlap."""
    placed = layout.all_blanks
    overlaps = []
    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            if _span(a.x, a.x + a.width, b.x, b.x + b.width) > EPS and _span(a.y, a.y + a.height, b.y, b.y + b.height) > EPS:
                overlaps.append((a.index, b.index))
    return overlaps


def blanks_within_sheet(layout):
    return all(
        b.x >= -EPS
        and b.y >= -EPS
        and b.x + b.width <= layout.sheet_width + EPS
        and b.y + b.height <= layout.sheet_length + EPS
        for b in layout.all_blanks
    )


def calculate_layout_offcuts(layout, min_width=120.0, min_height=120.0, min_area=25000.0):
    """
    Summarise the offcuts left once every blank is cut.

    Offcuts are the leftover strips minus whatever extra blanks were cut from
    them. The corner lies inside the width strip, so it is not counted twice.
    """
    fills = _strip_fills(layout)

    pieces = []
    for area in layout.leftover_areas:
        if area.type == CORNER:
            continue
        pieces.extend(_strip_remainders(area, fills.get(area.type)))

    stats = layout.stats
    reusable = [
        {
            "x": round(x, 2),
            "y": round(y, 2),
            "width": round(w, 2),
            "height": round(h, 2),
            "area": round(w * h, 2),
        }
        for x, y, w, h in pieces
        if w >= min_width and h >= min_height and (w * h) >= min_area
    ]
    reusable.sort(key=lambda r: r["area"], reverse=True)

    return {
        "interior_area": round(stats.total_sheet_area, 2),
        "used_area": round(stats.used_area, 2),
        "waste_area": round(stats.leftover_area, 2),
        "utilization_pct": round(stats.efficiency, 2),
        "reusable_offcuts": reusable,
    }


def build_layout_heatmap(layout, cell_size=100.0):
    """Grid the sheet into cells and report how much of each cell is covered by blanks."""
    size = max(10.0, float(cell_size))
    blocks = _filled_blocks(layout)
    cols = math.ceil(layout.sheet_width / size - EPS)
    rows = math.ceil(layout.sheet_length / size - EPS)

    cells = []
    for row_idx in range(rows):
        y = row_idx * size
        y2 = min(y + size, layout.sheet_length)
        for col_idx in range(cols):
            x = col_idx * size
            x2 = min(x + size, layout.sheet_width)
            cell_area = (x2 - x) * (y2 - y)
            used_area = sum(_span(x, x2, bx, bx + bw) * _span(y, y2, by, by + bh) for bx, by, bw, bh in blocks)
            usage_ratio = used_area / cell_area
            cells.append({
                "x": round(x, 2),
                "y": round(y, 2),
                "x2": round(x2, 2),
                "y2": round(y2, 2),
                "cell_col": col_idx,
                "cell_row": row_idx,
                "used_area": round(used_area, 2),
                "cell_area": round(cell_area, 2),
                "usage_ratio": round(usage_ratio, 4),
                "usage_pct": round(usage_ratio * 100.0, 2),
            })
    return cells
