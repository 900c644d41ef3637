from datetime import date
from typing import Optional
import calendar
import logging

from sqlalchemy import and_, desc, or_
from sqlalchemy.orm import Query, Session, joinedload

from datravel.core.deps import CurrentUser
from datravel.core.exceptions import InvalidTransitionError, ValidationError
from datravel.core.storage import LocalBlobStorage
from datravel.crud.base import CRUDBase
from datravel.models.account import Personnel, Role
from datravel.models.travel_order import TravelOrder, TravelOrderApproval, TravelOrderStatus
from datravel.schemas.travel_order import TravelOrderCreate, TravelOrderUpdate
from datravel.services.access import TravelOrderAccess

logger = logging.getLogger(__name__)

HISTORY_STATUSES = (TravelOrderStatus.APPROVED, TravelOrderStatus.REJECTED)


class CRUDTravelOrder(CRUDBase[TravelOrder, TravelOrderCreate, TravelOrderUpdate]):
    def with_details(self, query: Query) -> Query:
        return query.options(
            joinedload(TravelOrder.personnel),
            joinedload(TravelOrder.attachments),
            joinedload(TravelOrder.approvals).joinedload(TravelOrderApproval.director),
        )

    def create_draft(self, db: Session, *, user: CurrentUser, obj_in: TravelOrderCreate) -> TravelOrder:
        TravelOrderAccess.ensure_role(user, Role.PERSONNEL, message="Only personnel can manage travel orders.")
        order = self.create(db, obj_in=obj_in, personnel_id=user.id, status=TravelOrderStatus.DRAFT)
        logger.info(f"🆕 TRAVEL ORDER: draft {order.id} created by personnel {user.id}")
        return order

    def update_draft(
        self, db: Session, *, user: CurrentUser, travel_order_id: int, obj_in: TravelOrderUpdate
    ) -> TravelOrder:
        order = TravelOrderAccess(db).get_owned_order(user, travel_order_id)
        if order.status != TravelOrderStatus.DRAFT:
            raise InvalidTransitionError("Only draft travel orders can be updated.")

        changes = obj_in.model_dump(exclude_unset=True)
        for required in ("travel_purpose", "destination", "start_date", "end_date"):
            if required in changes and changes[required] is None:
                raise ValidationError.for_field(required, f"The {required.replace('_', ' ')} field is required.")

        start = changes.get("start_date", order.start_date)
        end = changes.get("end_date", order.end_date)
        if end < start:
            raise ValidationError.for_field(
                "end_date", "The end date must be a date after or equal to the start date."
            )
        return self.update(db, db_obj=order, obj_in=changes)

    def delete_draft(
        self, db: Session, *, user: CurrentUser, travel_order_id: int, storage: LocalBlobStorage
    ) -> None:
        order = TravelOrderAccess(db).get_owned_order(user, travel_order_id)
        if order.status != TravelOrderStatus.DRAFT:
            raise InvalidTransitionError("Only draft travel orders can be deleted.")
        paths = [attachment.file_path for attachment in order.attachments]
        self.remove(db, db_obj=order)
        for path in paths:
            storage.delete(path)
        logger.info(f"🗑️ TRAVEL ORDER: draft {travel_order_id} deleted by personnel {user.id}")

    def list_scoped(
        self,
        db: Session,
        *,
        user: CurrentUser,
        status: Optional[TravelOrderStatus] = None,
        search: Optional[str] = None,
    ) -> Query:
        """Personnel: own orders. Admin: every order. Newest activity first."""
        TravelOrderAccess.ensure_role(user, Role.PERSONNEL, Role.ADMIN)
        query = TravelOrderAccess(db).scoped_orders(user)
        if status:
            query = query.filter(TravelOrder.status == status)
        if search:
            like = f"%{search}%"
            query = query.join(Personnel, TravelOrder.personnel_id == Personnel.id).filter(
                or_(
                    TravelOrder.travel_purpose.ilike(like),
                    TravelOrder.destination.ilike(like),
                    Personnel.first_name.ilike(like),
                    Personnel.last_name.ilike(like),
                )
            )
        return self.with_details(query.order_by(desc(TravelOrder.updated_at), desc(TravelOrder.id)))

    def history(
        self, db: Session, *, user: CurrentUser, status: Optional[TravelOrderStatus] = None
    ) -> Query:
        """Personnel's own orders that reached a final decision."""
        TravelOrderAccess.ensure_role(user, Role.PERSONNEL, message="Only personnel can manage travel orders.")
        statuses = [status] if status in HISTORY_STATUSES else list(HISTORY_STATUSES)
        query = db.query(TravelOrder).filter(
            TravelOrder.personnel_id == user.id,
            TravelOrder.status.in_(statuses),
        ).order_by(desc(TravelOrder.updated_at), desc(TravelOrder.id))
        return self.with_details(query)

    def calendar(self, db: Session, *, user: CurrentUser, year: int, month: int):
        """Personnel's submitted orders whose travel dates overlap the given month."""
        TravelOrderAccess.ensure_role(user, Role.PERSONNEL, message="Only personnel can manage travel orders.")
        if not 1 <= month <= 12:
            raise ValidationError.for_field("month", "The month must be between 1 and 12.")
        first_day = date(year, month, 1)
        last_day = date(year, month, calendar.monthrange(year, month)[1])
        return db.query(TravelOrder).filter(
            TravelOrder.personnel_id == user.id,
            TravelOrder.status != TravelOrderStatus.DRAFT,
            and_(TravelOrder.start_date <= last_day, TravelOrder.end_date >= first_day),
        ).order_by(TravelOrder.start_date, TravelOrder.id).all()


travel_order = CRUDTravelOrder(TravelOrder)
