"""
Travel order export: PDF (reportlab) and spreadsheet (openpyxl).

Both renderers work from the same ``TravelOrderForm`` projection so the
signature rules live in one place:

* the recommending director's signature appears once step 1 is
  ``recommended`` or ``approved``;
* the approving director's signature appears once its step is ``approved``.

For a one-step chain the only approval is the approving step.

A missing or unreadable signature file never fails an export; the renderer
draws a blank signature line instead. Without an image codec every signature
is a blank line.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
import logging

from datravel.core.clock import Clock
from datravel.core.config import settings
from datravel.core.exceptions import AssetMissingError
from datravel.core.storage import LocalBlobStorage
from datravel.models.travel_order import (
    APPROVE_STEP, ApprovalStatus, GATE_OPEN_STATUSES, RECOMMEND_STEP, TravelOrder,
)
from datravel.services.travel_order_excel import render_workbook
from datravel.services.travel_order_pdf import render_pdf

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
DATE_FORMAT = "%B %d, %Y"
PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def display(value) -> str:
    if value is None:
        return NOT_AVAILABLE
    text = str(value).strip()
    return text or NOT_AVAILABLE


def format_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else NOT_AVAILABLE


def format_per_diems(order: TravelOrder) -> str:
    if order.per_diems_note and order.per_diems_note.strip():
        return order.per_diems_note.strip()
    if order.per_diems_expenses is not None:
        return f"{Decimal(order.per_diems_expenses):,.2f}"
    return NOT_AVAILABLE


@dataclass
class SignatureBlock:
    label: str
    director_name: str = NOT_AVAILABLE
    position: str = ""
    signature_path: Optional[str] = None

    @property
    def has_signature(self) -> bool:
        return self.signature_path is not None


@dataclass
class TravelOrderForm:
    """Flat, display-ready view of a travel order shared by both renderers."""
    order_id: int
    traveller_name: str
    position: str
    official_station: str
    departure_date: str
    return_date: str
    destination: str
    purpose: str
    objectives: str
    per_diems: str
    assistant_or_laborers_allowed: str
    appropriation: str
    remarks: str
    generated_on: str
    recommending: SignatureBlock = field(default_factory=lambda: SignatureBlock("Recommending Approval"))
    approving: SignatureBlock = field(default_factory=lambda: SignatureBlock("Approved"))


def _signature_block(label: str, approval, qualifying) -> SignatureBlock:
    block = SignatureBlock(label)
    if approval is None:
        return block
    director = approval.director
    if director is not None:
        block.director_name = display(director.full_name)
        block.position = director.position or ""
        if approval.status in qualifying and director.signature_path:
            block.signature_path = director.signature_path
    return block


def build_form(order: TravelOrder, generated_at: datetime) -> TravelOrderForm:
    personnel = order.personnel
    form = TravelOrderForm(
        order_id=order.id,
        traveller_name=display(personnel.full_name if personnel else None),
        position=display(personnel.position if personnel else None),
        official_station=display(order.official_station),
        departure_date=format_date(order.start_date),
        return_date=format_date(order.end_date),
        destination=display(order.destination),
        purpose=display(order.travel_purpose),
        objectives=display(order.objectives),
        per_diems=format_per_diems(order),
        assistant_or_laborers_allowed=display(order.assistant_or_laborers_allowed),
        appropriation=display(order.appropriation),
        remarks=display(order.remarks),
        generated_on=generated_at.strftime(DATE_FORMAT),
    )

    if order.approval_chain_length == 1:
        form.approving = _signature_block(
            "Approved", order.approval_for_step(RECOMMEND_STEP), (ApprovalStatus.APPROVED,)
        )
    else:
        form.recommending = _signature_block(
            "Recommending Approval", order.approval_for_step(RECOMMEND_STEP), GATE_OPEN_STATUSES
        )
        form.approving = _signature_block(
            "Approved", order.approval_for_step(APPROVE_STEP), (ApprovalStatus.APPROVED,)
        )
    return form


@dataclass
class ExportedDocument:
    filename: str
    media_type: str
    content: bytes


class SignatureLoader:
    """Resolves a signature block to decoded image data, or None for a blank line."""

    def __init__(self, storage: LocalBlobStorage, image_codec=None):
        self.storage = storage
        self.image_codec = image_codec

    def load(self, block: SignatureBlock):
        if not block.has_signature:
            return None
        if self.image_codec is None:
            logger.warning(
                f"🖋️ EXPORT: no image codec available, leaving {block.label} signature blank"
            )
            return None
        try:
            if not self.storage.exists(block.signature_path):
                raise AssetMissingError(f"Signature file {block.signature_path} does not exist.")
            try:
                data = self.storage.read(block.signature_path)
            except OSError as e:
                raise AssetMissingError(f"Signature file {block.signature_path} could not be read: {e}")
            return self.image_codec.load(data)
        except AssetMissingError as e:
            logger.warning(f"🖋️ EXPORT: {block.label} signature skipped: {e.message}")
            return None


class TravelOrderExporter:
    def __init__(
        self,
        storage: LocalBlobStorage,
        clock: Clock,
        image_codec=None,
        template_path: Optional[str] = None,
    ):
        self.clock = clock
        self.signatures = SignatureLoader(storage, image_codec)
        self.template_path = template_path if template_path is not None else settings.TRAVEL_ORDER_TEMPLATE_PATH

    def export_pdf(self, order: TravelOrder, include_ctt: bool = False) -> ExportedDocument:
        form = build_form(order, self.clock.now())
        logger.info(f"📄 EXPORT: rendering PDF for travel order {order.id} (ctt={include_ctt})")
        content = render_pdf(form, self.signatures, include_ctt=include_ctt)
        return ExportedDocument(f"TRAVEL_ORDER_{order.id}.pdf", PDF_MEDIA_TYPE, content)

    def export_excel(self, order: TravelOrder, include_ctt: bool = False) -> ExportedDocument:
        now = self.clock.now()
        form = build_form(order, now)
        logger.info(f"📊 EXPORT: rendering spreadsheet for travel order {order.id} (ctt={include_ctt})")
        content = render_workbook(form, self.signatures, self.template_path, include_ctt=include_ctt)
        filename = f"TRAVEL_ORDER_{order.id}_{now.strftime('%Y%m%d_%H%M%S')}.xlsx"
        return ExportedDocument(filename, XLSX_MEDIA_TYPE, content)
