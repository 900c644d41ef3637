"""
Role-based read scoping for travel orders.

* personnel see only orders they own;
* directors see orders where they hold a step-1 approval, or a step-2
  approval whose step 1 is already recommended/approved;
* ICT admins see everything but never act on approvals.

Anything outside the caller's scope is reported as not found.
"""
from typing import Optional

from sqlalchemy import and_, exists, or_
from sqlalchemy.orm import Query, Session, aliased, joinedload

from datravel.core.deps import CurrentUser
from datravel.core.exceptions import NotVisibleError, RoleForbiddenError
from datravel.models.account import Role
from datravel.models.travel_order import (
    GATE_OPEN_STATUSES, RECOMMEND_STEP, TravelOrder, TravelOrderApproval,
)


class TravelOrderAccess:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def ensure_role(user: CurrentUser, *roles: Role, message: Optional[str] = None) -> None:
        if user.role not in roles:
            raise RoleForbiddenError(message)

    def _director_visibility(self, director_id: int):
        """Predicate on TravelOrder: the director holds a step that is not gated."""
        own = aliased(TravelOrderApproval)
        step_one = aliased(TravelOrderApproval)
        return exists().where(
            and_(
                own.travel_order_id == TravelOrder.id,
                own.director_id == director_id,
                or_(
                    own.step_order == RECOMMEND_STEP,
                    exists().where(
                        and_(
                            step_one.travel_order_id == TravelOrder.id,
                            step_one.step_order == RECOMMEND_STEP,
                            step_one.status.in_(GATE_OPEN_STATUSES),
                        )
                    ),
                ),
            )
        )

    def scoped_orders(self, user: CurrentUser) -> Query:
        """All orders the caller may read."""
        query = self.db.query(TravelOrder)
        if user.role == Role.PERSONNEL:
            return query.filter(TravelOrder.personnel_id == user.id)
        if user.role == Role.DIRECTOR:
            return query.filter(self._director_visibility(user.id))
        if user.role == Role.ADMIN:
            return query
        raise RoleForbiddenError()

    def get_visible_order(self, user: CurrentUser, travel_order_id: int) -> TravelOrder:
        order = (
            self.scoped_orders(user)
            .options(
                joinedload(TravelOrder.personnel),
                joinedload(TravelOrder.attachments),
                joinedload(TravelOrder.approvals).joinedload(TravelOrderApproval.director),
            )
            .filter(TravelOrder.id == travel_order_id)
            .first()
        )
        if order is None:
            raise NotVisibleError()
        return order

    def get_owned_order(self, user: CurrentUser, travel_order_id: int) -> TravelOrder:
        """Order owned by the calling personnel; mutations go through here."""
        self.ensure_role(user, Role.PERSONNEL, message="Only personnel can manage travel orders.")
        order = self.db.query(TravelOrder).filter(
            TravelOrder.id == travel_order_id,
            TravelOrder.personnel_id == user.id,
        ).first()
        if order is None:
            raise NotVisibleError()
        return order
