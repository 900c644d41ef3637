import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from datravel.core.clock import Clock
from datravel.core.config import settings
from datravel.core.deps import CurrentUser, get_clock, require_director
from datravel.crud.base import paginate
from datravel.db.database import get_db
from datravel.schemas.common import paged, success
from datravel.schemas.travel_order import (
    ApprovalResponse, DirectorActionRequest, DirectorReviewResponse, TravelOrderResponse,
)
from datravel.services.approval_workflow import ApprovalWorkflow, HistoryFilter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pending")
def pending_travel_orders(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: CurrentUser = Depends(require_director),
):
    """Orders waiting on the calling director; approving steps appear once recommended."""
    query = ApprovalWorkflow(db, clock).pending_for_director(current_user)
    return paged(paginate(query, page=page, per_page=per_page), TravelOrderResponse)


@router.get("/history")
def director_history(
    status_filter: Optional[HistoryFilter] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: CurrentUser = Depends(require_director),
):
    query = ApprovalWorkflow(db, clock).history_for_director(current_user, status_filter)
    return paged(paginate(query, page=page, per_page=per_page), TravelOrderResponse)


@router.get("/{travel_order_id}")
def review_travel_order(
    travel_order_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: CurrentUser = Depends(require_director),
):
    order, approval = ApprovalWorkflow(db, clock).get_pending_for_director(current_user, travel_order_id)
    review = DirectorReviewResponse(
        travel_order=TravelOrderResponse.model_validate(order),
        current_approval=ApprovalResponse.model_validate(approval),
    )
    return success(review.model_dump(mode="json"))


@router.post("/{travel_order_id}/action")
def act_on_travel_order(
    travel_order_id: int,
    action_in: DirectorActionRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: CurrentUser = Depends(require_director),
):
    order, message = ApprovalWorkflow(db, clock).act(
        current_user, travel_order_id, action_in.action, action_in.remarks
    )
    return success(TravelOrderResponse.model_validate(order).model_dump(mode="json"), message)
