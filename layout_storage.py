import io
import json
import zipfile
from datetime import datetime, timezone

import ezdxf

from dimension_utils import normalize_layout_request
from layout_engine import compute_layout

PAYLOAD_VERSION = 1

LAYER_SHEET = "SHEET_BOUNDARY"
LAYER_PRIMARY = "PRIMARY_BLANKS"
LAYER_EXTRA = "EXTRA_BLANKS"
LAYER_LEFTOVER = "LEFTOVER"
LAYER_LABELS = "LABELS"


def build_layout_payload(layout_name, layout):
    return {
        "version": PAYLOAD_VERSION,
        "layout_name": layout_name,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "settings": {
            "sheet_width": float(layout.sheet_width),
            "sheet_length": float(layout.sheet_length),
            "blank_width": float(layout.blank_width),
            "blank_length": float(layout.blank_length),
            "orientation": layout.direction.value,
        },
        "layout": layout.to_dict(),
    }


def parse_layout_payload(payload):
    """Rebuild a layout from saved settings; the stored geometry is not trusted."""
    version = payload.get("version", PAYLOAD_VERSION)
    if version > PAYLOAD_VERSION:
        raise ValueError(f"Unsupported layout payload version {version}")
    settings = payload.get("settings")
    if not settings:
        raise ValueError("Layout payload has no settings")

    request = normalize_layout_request(settings)
    return {
        "layout_name": str(payload.get("layout_name", "Untitled")),
        "request": request,
        "layout": compute_layout(**request),
    }


def payload_to_json(payload):
    return json.dumps(payload, indent=2)


def json_to_payload(text):
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid layout JSON: {exc}") from exc


def _outline(x, y, w, h):
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]


def layout_to_dxf(layout):
    doc = ezdxf.new()
    msp = doc.modelspace()
    doc.layers.new(name=LAYER_SHEET, dxfattribs={"color": 1})
    doc.layers.new(name=LAYER_PRIMARY, dxfattribs={"color": 3})
    doc.layers.new(name=LAYER_EXTRA, dxfattribs={"color": 5})
    doc.layers.new(name=LAYER_LEFTOVER, dxfattribs={"color": 8})
    doc.layers.new(name=LAYER_LABELS, dxfattribs={"color": 7})

    msp.add_lwpolyline(_outline(0, 0, layout.sheet_width, layout.sheet_length), dxfattribs={"layer": LAYER_SHEET})

    for area in layout.leftover_areas:
        msp.add_lwpolyline(_outline(area.x, area.y, area.width, area.height), dxfattribs={"layer": LAYER_LEFTOVER})

    for blank in layout.all_blanks:
        layer = LAYER_PRIMARY if blank.is_primary else LAYER_EXTRA
        msp.add_lwpolyline(_outline(blank.x, blank.y, blank.width, blank.height), dxfattribs={"layer": layer})
        center = (blank.x + blank.width / 2, blank.y + blank.height / 2)
        label = f"{blank.index + 1}"
        msp.add_text(label, dxfattribs={"layer": LAYER_LABELS, "height": 20}).set_placement(
            center, align=ezdxf.enums.TextEntityAlignment.MIDDLE_CENTER
        )

    dxf_io = io.StringIO()
    doc.write(dxf_io)
    return dxf_io.getvalue().encode("utf-8")


def create_dxf_zip(layouts):
    """Zip one DXF per layout, keyed by the file stem to use."""
    zip_buffer = io.BytesIO()
    with zipfile.ZipFile(zip_buffer, "a", zipfile.ZIP_DEFLATED, False) as zip_file:
        for name, layout in layouts.items():
            zip_file.writestr(f"{name}.dxf", layout_to_dxf(layout))
    return zip_buffer.getvalue()


def dxf_blank_count(dxf_bytes):
    """Count blank outlines in a DXF written by layout_to_dxf."""
    doc = ezdxf.read(io.StringIO(dxf_bytes.decode("utf-8")))
    msp = doc.modelspace()
    return {
        "primary": len(msp.query(f'LWPOLYLINE[layer=="{LAYER_PRIMARY}"]')),
        "extra": len(msp.query(f'LWPOLYLINE[layer=="{LAYER_EXTRA}"]')),
        "leftover": len(msp.query(f'LWPOLYLINE[layer=="{LAYER_LEFTOVER}"]')),
    }
