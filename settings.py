"""Defaults shared by the calculator, the optimiser and the Streamlit app."""
import logging
import os
import sys

SHEET_PRESETS = {
    "Standard (1220 x 2440)": (1220.0, 2440.0),
    "Wide (1250 x 2500)": (1250.0, 2500.0),
    "Large (1500 x 3000)": (1500.0, 3000.0),
}

DEFAULT_SHEET_WIDTH = 1220.0
DEFAULT_SHEET_LENGTH = 2440.0
DEFAULT_BLANK_WIDTH = 170.0
DEFAULT_BLANK_LENGTH = 760.0
DEFAULT_ORIENTATION = "SMART_MIXED"

# kg/m³
MATERIAL_DENSITIES = {
    "MS": 7850.0,  # mild steel
    "SS": 7850.0,  # stainless steel
    "GI": 7850.0,  # galvanized iron
    "AL": 2700.0,
    "CU": 8960.0,
    "BR": 8500.0,  # brass
}
DEFAULT_MATERIAL = "MS"
STEEL_DENSITY = MATERIAL_DENSITIES[DEFAULT_MATERIAL]

DEFAULT_REUSABLE_MIN_DIMENSION = 100.0
DEFAULT_OFFCUT_MIN_WIDTH = 120.0
DEFAULT_OFFCUT_MIN_HEIGHT = 120.0
DEFAULT_OFFCUT_MIN_AREA = 25000.0

LOG_LEVEL_ENV = "LAYOUT_LOG_LEVEL"


def configure_logging(level=None):
    """Install a single stdout handler on the root logger."""
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    root.handlers = [handler]

    # matplotlib and ezdxf are chatty at DEBUG
    for name in ["matplotlib", "ezdxf", "PIL"]:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root
