"""Travel order PDF layout (reportlab platypus)."""
from io import BytesIO
import logging

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable, Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

logger = logging.getLogger(__name__)

SIGNATURE_MAX_WIDTH = 1.8 * inch
SIGNATURE_MAX_HEIGHT = 0.5 * inch

CTT_CLAUSES = (
    "a. The official mission/task cannot be performed by / or assigned to any other "
    "regular/permanent official and/or employee of agency.",
    "b. The tasks/activities are necessary to fulfill the obligations as contained in "
    "his/her contract of service.",
)


def _styles():
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "TravelOrderTitle",
            parent=styles["Title"],
            fontSize=16,
            spaceAfter=12,
            alignment=TA_CENTER,
        ),
        "label": ParagraphStyle("Label", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=9),
        "value": ParagraphStyle("Value", parent=styles["Normal"], fontSize=9),
        "small": ParagraphStyle("Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey),
        "section": ParagraphStyle(
            "SectionTitle",
            parent=styles["Heading2"],
            fontSize=12,
            spaceBefore=18,
            alignment=TA_CENTER,
        ),
        "body": ParagraphStyle("Body", parent=styles["Normal"], fontSize=10, leading=14),
    }


def _labelled(label, value, styles):
    return Paragraph(f"<b>{label}</b> {_escape(value)}", styles["value"])


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _signature_cell(block, signatures, styles):
    cell = [Paragraph(f"{block.label.upper()}:", styles["small"]), Spacer(1, 4)]
    image = signatures.load(block)
    if image is not None:
        width = min(SIGNATURE_MAX_WIDTH, SIGNATURE_MAX_HEIGHT * image.aspect_ratio)
        height = width / image.aspect_ratio
        flowable = Image(BytesIO(image.png_bytes), width=width, height=height)
        flowable.hAlign = "CENTER"
        cell.append(flowable)
    else:
        cell.append(Spacer(1, SIGNATURE_MAX_HEIGHT - 2))
        cell.append(HRFlowable(width="80%", thickness=0.8, color=colors.black, spaceAfter=2))
    cell.append(Paragraph(f"<b>{_escape(block.director_name)}</b>", styles["value"]))
    if block.position:
        cell.append(Paragraph(_escape(block.position), styles["small"]))
    return cell


def _form_table(form, signatures, styles):
    rows = [
        [
            _labelled("Name:", form.traveller_name, styles), "",
            [Paragraph("<b>No:</b> __________________", styles["value"]),
             _labelled("Date:", form.generated_on, styles)],
        ],
        [
            _labelled("Position/Designation:", form.position, styles), "",
            _labelled("Official Station:", form.official_station, styles),
        ],
        [
            _labelled("Departure Date:", form.departure_date, styles), "",
            _labelled("Return Date:", form.return_date, styles),
        ],
    ]
    for label, value in (
        ("Destination:", form.destination),
        ("Purpose:", form.purpose),
        ("Objectives:", form.objectives),
        ("Per Diems Expenses Allowed:", form.per_diems),
        ("Assistant or Laborers Allowed:", form.assistant_or_laborers_allowed),
        ("Appropriation to which travel should be charged:", form.appropriation),
        ("Remarks or Special Instructions:", form.remarks),
    ):
        rows.append([Paragraph(label, styles["label"]), Paragraph(_escape(value), styles["value"]), ""])

    rows.append([
        _signature_cell(form.recommending, signatures, styles), "",
        _signature_cell(form.approving, signatures, styles),
    ])

    table = Table(rows, colWidths=[2.1 * inch, 2.6 * inch, 2.4 * inch])
    style = [
        ("GRID", (0, 0), (-1, -1), 0.8, colors.black),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("SPAN", (0, 0), (1, 0)),
        ("SPAN", (0, 1), (1, 1)),
        ("SPAN", (0, 2), (1, 2)),
        ("SPAN", (0, len(rows) - 1), (1, len(rows) - 1)),
        ("ALIGN", (0, len(rows) - 1), (-1, len(rows) - 1), "CENTER"),
    ]
    for row in range(3, len(rows) - 1):
        style.append(("SPAN", (1, row), (2, row)))
    table.setStyle(TableStyle(style))
    return table


def _certification(form, styles):
    content = [Paragraph("CERTIFICATION TO TRAVEL", styles["section"])]
    content.append(Paragraph(
        f"This is to certify that <b>{_escape(form.traveller_name)}</b>, "
        f"<b>{_escape(form.position)}</b>, is allowed to go on an official travel on "
        f"<b>{_escape(form.departure_date)}</b> to <b>{_escape(form.return_date)}</b> "
        f"with the following purpose:",
        styles["body"],
    ))
    content.append(Spacer(1, 8))
    content.append(Paragraph(f"<b>{_escape(form.purpose)}</b>", styles["body"]))
    content.append(Spacer(1, 8))
    for clause in CTT_CLAUSES:
        content.append(Paragraph(clause, styles["body"]))
    content.append(Spacer(1, 16))
    content.append(Paragraph("Endorsed by: ________________________________", styles["body"]))
    content.append(Spacer(1, 12))
    content.append(Paragraph("Certified by: ________________________________", styles["body"]))
    return content


def render_pdf(form, signatures, include_ctt: bool = False) -> bytes:
    """Render the travel order form; ``signatures`` resolves signature blocks to images."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=0.4 * inch,
        bottomMargin=0.4 * inch,
        leftMargin=0.5 * inch,
        rightMargin=0.5 * inch,
        title=f"Travel Order {form.order_id}",
    )
    styles = _styles()

    content = [Paragraph("TRAVEL ORDER", styles["title"])]
    content.append(_form_table(form, signatures, styles))

    if include_ctt:
        content.extend(_certification(form, styles))

    doc.build(content)
    buffer.seek(0)
    return buffer.getvalue()
