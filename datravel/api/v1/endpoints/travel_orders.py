import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from datravel import crud
from datravel.core.clock import Clock
from datravel.core.config import settings
from datravel.core.deps import (
    CurrentUser, get_clock, get_current_user, get_image_codec, get_storage, require_personnel,
)
from datravel.core.storage import LocalBlobStorage
from datravel.crud.base import paginate
from datravel.db.database import get_db
from datravel.models.travel_order import TravelOrderStatus
from datravel.schemas.common import paged, success
from datravel.schemas.travel_order import (
    AttachmentResponse, CalendarEntry, SubmitTravelOrder, TravelOrderCreate,
    TravelOrderResponse, TravelOrderUpdate,
)
from datravel.services.access import TravelOrderAccess
from datravel.services.approval_workflow import ApprovalWorkflow
from datravel.services.attachments import AttachmentService, IncomingFile
from datravel.services.travel_order_export import TravelOrderExporter

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(order) -> dict:
    return TravelOrderResponse.model_validate(order).model_dump(mode="json")


def _attachment_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'


@router.get("")
def list_travel_orders(
    status_filter: Optional[TravelOrderStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Personnel see their own orders; ICT admins see every order."""
    query = crud.travel_order.list_scoped(db, user=current_user, status=status_filter, search=search)
    return paged(paginate(query, page=page, per_page=per_page), TravelOrderResponse)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_travel_order(
    travel_order_in: TravelOrderCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_personnel),
):
    order = crud.travel_order.create_draft(db, user=current_user, obj_in=travel_order_in)
    order = TravelOrderAccess(db).get_visible_order(current_user, order.id)
    return success(_serialize(order), "Travel order saved as draft.")


@router.get("/history")
def travel_order_history(
    status_filter: Optional[TravelOrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_personnel),
):
    query = crud.travel_order.history(db, user=current_user, status=status_filter)
    return paged(paginate(query, page=page, per_page=per_page), TravelOrderResponse)


@router.get("/calendar")
def travel_order_calendar(
    year: int = Query(..., ge=1900, le=2999),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_personnel),
):
    orders = crud.travel_order.calendar(db, user=current_user, year=year, month=month)
    return success([CalendarEntry.model_validate(o).model_dump(mode="json") for o in orders])


@router.get("/{travel_order_id}")
def get_travel_order(
    travel_order_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    order = TravelOrderAccess(db).get_visible_order(current_user, travel_order_id)
    return success(_serialize(order))


@router.put("/{travel_order_id}")
def update_travel_order(
    travel_order_id: int,
    travel_order_in: TravelOrderUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_personnel),
):
    crud.travel_order.update_draft(
        db, user=current_user, travel_order_id=travel_order_id, obj_in=travel_order_in
    )
    order = TravelOrderAccess(db).get_visible_order(current_user, travel_order_id)
    return success(_serialize(order), "Travel order updated.")


@router.delete("/{travel_order_id}")
def delete_travel_order(
    travel_order_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(require_personnel),
):
    crud.travel_order.delete_draft(db, user=current_user, travel_order_id=travel_order_id, storage=storage)
    return success(message="Travel order deleted.")


@router.post("/{travel_order_id}/submit")
def submit_travel_order(
    travel_order_id: int,
    submission: SubmitTravelOrder,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: CurrentUser = Depends(require_personnel),
):
    workflow = ApprovalWorkflow(db, clock)
    workflow.submit(
        current_user,
        travel_order_id,
        submission.recommending_director_id,
        submission.approving_director_id,
    )
    order = TravelOrderAccess(db).get_visible_order(current_user, travel_order_id)
    return success(_serialize(order), "Travel order submitted for approval.")


# ===== Attachments =====

@router.post("/{travel_order_id}/attachments", status_code=status.HTTP_201_CREATED)
async def upload_attachments(
    travel_order_id: int,
    files: List[UploadFile] = File(...),
    types: Optional[List[str]] = Form(None),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(require_personnel),
):
    incoming = [
        IncomingFile(filename=f.filename or "attachment", content=await f.read(), content_type=f.content_type)
        for f in files
    ]
    result = AttachmentService(db, storage).add(current_user, travel_order_id, incoming, types or [])
    message = f"{len(result.stored)} attachment(s) uploaded."
    if result.skipped:
        message += f" {len(result.skipped)} file(s) skipped."
    return success(
        {
            "attachments": [AttachmentResponse.model_validate(a).model_dump(mode="json") for a in result.stored],
            "skipped": result.skipped,
        },
        message,
    )


@router.delete("/{travel_order_id}/attachments/{attachment_id}")
def delete_attachment(
    travel_order_id: int,
    attachment_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(require_personnel),
):
    AttachmentService(db, storage).remove(current_user, travel_order_id, attachment_id)
    return success(message="Attachment removed.")


@router.get("/{travel_order_id}/attachments/{attachment_id}/download")
def download_attachment(
    travel_order_id: int,
    attachment_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    attachment, content = AttachmentService(db, storage).get_for_download(
        current_user, travel_order_id, attachment_id
    )
    return Response(
        content=content,
        media_type=attachment.mime_type or "application/octet-stream",
        headers={"Content-Disposition": _attachment_disposition(attachment.file_name)},
    )


# ===== Exports =====

def _exporter(storage, clock, image_codec) -> TravelOrderExporter:
    return TravelOrderExporter(storage, clock, image_codec, settings.TRAVEL_ORDER_TEMPLATE_PATH)


@router.get("/{travel_order_id}/export/pdf")
def export_travel_order_pdf(
    travel_order_id: int,
    include_ctt: str = Query("0"),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
    image_codec=Depends(get_image_codec),
    current_user: CurrentUser = Depends(get_current_user),
):
    order = TravelOrderAccess(db).get_visible_order(current_user, travel_order_id)
    document = _exporter(storage, clock, image_codec).export_pdf(order, include_ctt=include_ctt == "1")
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": _attachment_disposition(document.filename)},
    )


@router.get("/{travel_order_id}/export/excel")
def export_travel_order_excel(
    travel_order_id: int,
    include_ctt: str = Query("0"),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
    image_codec=Depends(get_image_codec),
    current_user: CurrentUser = Depends(get_current_user),
):
    order = TravelOrderAccess(db).get_visible_order(current_user, travel_order_id)
    document = _exporter(storage, clock, image_codec).export_excel(order, include_ctt=include_ctt == "1")
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": _attachment_disposition(document.filename)},
    )
