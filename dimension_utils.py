import math

from layout_types import Orientation

TRUTHY_VALUES = {"1", "true", "t", "yes", "y", "on"}
FALSY_VALUES = {"0", "false", "f", "no", "n", "off", ""}

ORIENTATION_ALIASES = {
    "horizontal": Orientation.HORIZONTAL,
    "h": Orientation.HORIZONTAL,
    "vertical": Orientation.VERTICAL,
    "v": Orientation.VERTICAL,
    "smart_mixed": Orientation.SMART_MIXED,
    "smart-mixed": Orientation.SMART_MIXED,
    "smart mixed": Orientation.SMART_MIXED,
    "smart": Orientation.SMART_MIXED,
}

DIMENSION_FIELDS = ("sheet_width", "sheet_length", "blank_width", "blank_length")


def coerce_bool(value):
    """Safely coerce mixed UI/import values to bool without bool('False') bugs."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_VALUES:
            return True
        if normalized in FALSY_VALUES:
            return False
    return False


def coerce_dimension(value, name="dimension"):
    """Return ``value`` as a finite, positive float or raise ValueError."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if number <= 0:
        raise ValueError(f"{name} must be greater than zero, got {value!r}")
    return number


def coerce_orientation(value):
    if isinstance(value, Orientation):
        return value
    if isinstance(value, str):
        normalized = value.strip()
        if normalized.upper() in Orientation.__members__:
            return Orientation[normalized.upper()]
        alias = ORIENTATION_ALIASES.get(normalized.lower())
        if alias is not None:
            return alias
    raise ValueError(f"Unknown orientation {value!r}; expected one of {', '.join(Orientation.__members__)}")


def validate_dimensions(sheet_width, sheet_length, blank_width, blank_length):
    return (
        coerce_dimension(sheet_width, "sheet_width"),
        coerce_dimension(sheet_length, "sheet_length"),
        coerce_dimension(blank_width, "blank_width"),
        coerce_dimension(blank_length, "blank_length"),
    )


def normalize_layout_request(row):
    """Validate a UI/import row into the keyword arguments of compute_layout."""
    request = {name: coerce_dimension(row.get(name), name) for name in DIMENSION_FIELDS}
    request["orientation"] = coerce_orientation(row.get("orientation", Orientation.HORIZONTAL))
    return request


def swap_blank_dimensions(request):
    swapped = dict(request)
    swapped["blank_width"] = request.get("blank_length")
    swapped["blank_length"] = request.get("blank_width")
    return swapped


def apply_request_row(raw):
    """Normalize an edited UI row, honoring its "Swap L↔W" checkbox."""
    row = dict(raw)
    if coerce_bool(row.pop("Swap L↔W", False)):
        row = swap_blank_dimensions(row)
    return normalize_layout_request(row)
