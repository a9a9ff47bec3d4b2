from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Orientation(str, Enum):
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"
    SMART_MIXED = "SMART_MIXED"


WIDTH_STRIP = "width_strip"
LENGTH_STRIP = "length_strip"
CORNER = "corner"


@dataclass(frozen=True)
class PlacedBlank:
    x: float
    y: float
    width: float
    height: float
    index: int
    is_primary: bool
    rotation: int
    leftover_type: str | None = None

    def to_dict(self):
        row = {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "index": self.index,
            "is_primary": self.is_primary,
            "rotation": self.rotation,
        }
        if self.leftover_type is not None:
            row["leftover_type"] = self.leftover_type
        return row


@dataclass(frozen=True)
class LeftoverArea:
    x: float
    y: float
    width: float
    height: float
    type: str
    orientation: str

    @property
    def area(self):
        return self.width * self.height

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "type": self.type,
            "orientation": self.orientation,
        }


@dataclass(frozen=True)
class LayoutStats:
    total_blanks: int
    primary_blanks: int
    extra_blanks: int
    blanks_across: int
    blanks_along: int
    efficiency: float
    scrap_percentage: float
    used_area: float
    leftover_area: float
    total_sheet_area: float
    leftover_width: float
    leftover_length: float

    def to_dict(self):
        return {
            "total_blanks": self.total_blanks,
            "primary_blanks": self.primary_blanks,
            "extra_blanks": self.extra_blanks,
            "blanks_across": self.blanks_across,
            "blanks_along": self.blanks_along,
            "efficiency": self.efficiency,
            "scrap_percentage": self.scrap_percentage,
            "used_area": self.used_area,
            "leftover_area": self.leftover_area,
            "total_sheet_area": self.total_sheet_area,
            "leftover_width": self.leftover_width,
            "leftover_length": self.leftover_length,
        }


@dataclass(frozen=True)
class SheetLayout:
    """Result of one layout computation.

    ``blank_width``/``blank_length`` are the nominal blank size as requested;
    ``actual_blank_width``/``actual_blank_length`` are the dimensions the
    primary grid was laid out with.
    """

    direction: Orientation
    sheet_width: float
    sheet_length: float
    blank_width: float
    blank_length: float
    actual_blank_width: float
    actual_blank_length: float
    stats: LayoutStats
    blanks: tuple = field(default_factory=tuple)
    leftover_areas: tuple = field(default_factory=tuple)
    extra_blanks: tuple = field(default_factory=tuple)

    @property
    def all_blanks(self):
        return self.blanks + self.extra_blanks

    def to_dict(self):
        return {
            "direction": self.direction.value,
            "sheet_dimensions": {
                "width": self.sheet_width,
                "length": self.sheet_length,
            },
            "blank_dimensions": {
                "width": self.blank_width,
                "length": self.blank_length,
                "actual_width": self.actual_blank_width,
                "actual_length": self.actual_blank_length,
            },
            "blanks": [b.to_dict() for b in self.blanks],
            "leftover_areas": [a.to_dict() for a in self.leftover_areas],
            "extra_blanks": [b.to_dict() for b in self.extra_blanks],
            "stats": self.stats.to_dict(),
        }
