"""
Travel order spreadsheet (openpyxl).

The configured template is opened for reading only; values are written to a
copy in memory. When no usable template exists the same form is laid out on
a fresh workbook so the cell map below holds either way.
"""
from io import BytesIO
from pathlib import Path
from zipfile import BadZipFile
import logging

import openpyxl
from openpyxl.drawing.image import Image as SheetImage
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils.exceptions import InvalidFileException

from datravel.core.exceptions import AssetMissingError, ExtensionUnavailableError

logger = logging.getLogger(__name__)

FORM_SHEET_TITLE = "Travel Order"
CTT_SHEET_TITLE = "Certification to Travel"

CELL_MAP = {
    "traveller_name": "B3",
    "generated_on": "E3",
    "position": "B4",
    "official_station": "E4",
    "departure_date": "B5",
    "return_date": "E5",
    "destination": "B6",
    "purpose": "B7",
    "objectives": "B8",
    "per_diems": "B9",
    "assistant_or_laborers_allowed": "B10",
    "appropriation": "B11",
    "remarks": "B12",
}

# (image anchor, name cell, position cell) per signature block
SIGNATURE_CELLS = {
    "recommending": ("B15", "B17", "B18"),
    "approving": ("E15", "E17", "E18"),
}

LABELS = {
    "A3": "Name:",
    "D3": "Date:",
    "A4": "Position/Designation:",
    "D4": "Official Station:",
    "A5": "Departure Date:",
    "D5": "Return Date:",
    "A6": "Destination:",
    "A7": "Purpose:",
    "A8": "Objectives:",
    "A9": "Per Diems Expenses Allowed:",
    "A10": "Assistant or Laborers Allowed:",
    "A11": "Appropriation to which travel should be charged:",
    "A12": "Remarks or Special Instructions:",
    "B14": "RECOMMENDING APPROVAL:",
    "E14": "APPROVED:",
}

SIGNATURE_HEIGHT_PX = 45
SIGNATURE_MAX_WIDTH_PX = 170

LABEL_FONT = Font(name="Calibri", bold=True, size=10)
BODY_FONT = Font(name="Calibri", size=10)
TITLE_FONT = Font(name="Calibri", bold=True, size=14)
WRAP = Alignment(wrap_text=True, vertical="top")
SIGNATURE_LINE = Border(bottom=Side(style="thin"))


def _load_template(template_path):
    path = Path(template_path) if template_path else None
    if path is None or not path.is_file():
        raise AssetMissingError(f"Travel order template {template_path} not found.")
    try:
        # load_workbook copies the file into memory; the template itself is never saved
        return openpyxl.load_workbook(path)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
        raise AssetMissingError(f"Travel order template {template_path} is unreadable: {e}")


def _cell(ws, ref):
    """Writable cell for ``ref``; inside a merged range that is the range's top-left cell."""
    for merged in ws.merged_cells.ranges:
        if ref in merged:
            return ws.cell(row=merged.min_row, column=merged.min_col)
    return ws[ref]


def _fresh_workbook():
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = FORM_SHEET_TITLE

    ws.merge_cells("A1:F1")
    ws["A1"] = "TRAVEL ORDER"
    ws["A1"].font = TITLE_FONT
    ws["A1"].alignment = Alignment(horizontal="center")

    for ref, label in LABELS.items():
        ws[ref] = label
        ws[ref].font = LABEL_FONT
        ws[ref].alignment = WRAP

    for row in range(6, 13):
        ws.merge_cells(f"B{row}:F{row}")

    for column, width in (("A", 28), ("B", 22), ("C", 12), ("D", 18), ("E", 22), ("F", 12)):
        ws.column_dimensions[column].width = width
    ws.row_dimensions[15].height = 40

    return wb


def _write_signature(ws, key, block, signatures):
    anchor, name_ref, position_ref = SIGNATURE_CELLS[key]
    name_cell = _cell(ws, name_ref)
    name_cell.value = block.director_name
    name_cell.font = LABEL_FONT
    if block.position:
        position_cell = _cell(ws, position_ref)
        position_cell.value = block.position
        position_cell.font = BODY_FONT

    image = signatures.load(block)
    if image is None:
        _cell(ws, anchor).border = SIGNATURE_LINE
        return

    try:
        picture = SheetImage(BytesIO(image.png_bytes))
    except ImportError:
        # openpyxl needs Pillow to embed pictures at all
        raise ExtensionUnavailableError()

    height = SIGNATURE_HEIGHT_PX
    width = min(SIGNATURE_MAX_WIDTH_PX, int(height * image.aspect_ratio))
    picture.width, picture.height = width, int(width / image.aspect_ratio)
    ws.add_image(picture, anchor)


def _add_certification(wb, form):
    ws = wb.create_sheet(CTT_SHEET_TITLE)
    ws.column_dimensions["A"].width = 100
    lines = [
        ("CERTIFICATION TO TRAVEL", TITLE_FONT),
        (
            f"This is to certify that {form.traveller_name}, {form.position}, is allowed to go on an "
            f"official travel on {form.departure_date} to {form.return_date} with the following purpose:",
            BODY_FONT,
        ),
        (form.purpose, LABEL_FONT),
        (
            "a. The official mission/task cannot be performed by / or assigned to any other "
            "regular/permanent official and/or employee of agency.",
            BODY_FONT,
        ),
        (
            "b. The tasks/activities are necessary to fulfill the obligations as contained in "
            "his/her contract of service.",
            BODY_FONT,
        ),
        ("Endorsed by: ________________________________", BODY_FONT),
        ("Certified by: ________________________________", BODY_FONT),
    ]
    for row, (text, font) in enumerate(lines, start=1):
        cell = ws.cell(row=row, column=1, value=text)
        cell.font = font
        cell.alignment = WRAP


def render_workbook(form, signatures, template_path=None, include_ctt: bool = False) -> bytes:
    try:
        wb = _load_template(template_path)
    except AssetMissingError as e:
        logger.warning(f"📊 EXPORT: {e.message} Using the built-in layout.")
        wb = _fresh_workbook()

    ws = wb.worksheets[0]
    for attr, ref in CELL_MAP.items():
        cell = _cell(ws, ref)
        cell.value = getattr(form, attr)
        cell.font = BODY_FONT
        cell.alignment = WRAP

    _write_signature(ws, "recommending", form.recommending, signatures)
    _write_signature(ws, "approving", form.approving, signatures)

    if CTT_SHEET_TITLE in wb.sheetnames:
        wb.remove(wb[CTT_SHEET_TITLE])
    if include_ctt:
        _add_certification(wb, form)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
