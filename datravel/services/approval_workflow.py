"""
Travel order approval workflow.

A submitted order carries one or two approval steps:

    step 1  recommending director   pending -> recommended | rejected
    step 2  approving director      pending -> approved | rejected

When the chain has a single step, step 1 is both the recommending and the
approving step. Approving (or rejecting at any step) ends the order.

Step 2 stays hidden from its director until step 1 is recommended (or
approved), both in the pending queue and for single-order reads and actions.
Each operation re-reads that gate on its own.
"""
import logging
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy import and_, exists, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, aliased, joinedload

from datravel.core.clock import Clock
from datravel.core.config import settings
from datravel.core.deps import CurrentUser
from datravel.core.exceptions import (
    InvalidStepError, InvalidTransitionError, NotVisibleError, ValidationError,
)
from datravel.models.account import Director, Role
from datravel.models.travel_order import (
    APPROVE_STEP, GATE_OPEN_STATUSES, RECOMMEND_STEP, TERMINAL_APPROVAL_STATUSES,
    ApprovalStatus, TravelOrder, TravelOrderApproval, TravelOrderStatus,
)
from datravel.services.access import TravelOrderAccess

logger = logging.getLogger(__name__)

NOT_PENDING_YOUR_ACTION = "Travel order not found or not pending your action."


class DirectorAction(str, Enum):
    RECOMMEND = "recommend"
    APPROVE = "approve"
    REJECT = "reject"


class HistoryFilter(str, Enum):
    ALL = "all"
    APPROVED = "approved"
    RECOMMENDED = "recommended"
    REJECTED = "rejected"


def recommend_step_completed(db: Session, travel_order_id: int, lock: bool = False) -> bool:
    """True once step 1 of the order is recommended or approved."""
    query = db.query(TravelOrderApproval.status).filter(
        TravelOrderApproval.travel_order_id == travel_order_id,
        TravelOrderApproval.step_order == RECOMMEND_STEP,
    )
    if lock:
        query = query.with_for_update()
    row = query.first()
    return row is not None and row.status in GATE_OPEN_STATUSES


def gate_open_clause():
    """SQL predicate: the approval's step is visible to its director (step 1, or step 2 with step 1 done)."""
    step_one = aliased(TravelOrderApproval)
    return or_(
        TravelOrderApproval.step_order == RECOMMEND_STEP,
        exists().where(
            and_(
                step_one.travel_order_id == TravelOrderApproval.travel_order_id,
                step_one.step_order == RECOMMEND_STEP,
                step_one.status.in_(GATE_OPEN_STATUSES),
            )
        ),
    )


class ApprovalWorkflow:
    """Owns every state change of a submitted travel order."""

    def __init__(self, db: Session, clock: Clock, require_recommending_director: Optional[bool] = None):
        self.db = db
        self.clock = clock
        self.access = TravelOrderAccess(db)
        if require_recommending_director is None:
            require_recommending_director = settings.REQUIRE_RECOMMENDING_DIRECTOR
        self.require_recommending_director = require_recommending_director

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _active_director(self, director_id: int, field: str, label: str) -> Director:
        director = self.db.query(Director).filter(Director.id == director_id).first()
        if director is None:
            raise ValidationError.for_field(field, f"Selected {label} director does not exist.")
        if not director.is_active:
            raise ValidationError.for_field(field, f"Selected {label} director is not active.")
        return director

    def submit(
        self,
        user: CurrentUser,
        travel_order_id: int,
        recommending_director_id: Optional[int],
        approving_director_id: Optional[int],
    ) -> TravelOrder:
        """Send a draft into the approval chain."""
        self.access.ensure_role(user, Role.PERSONNEL, message="Only personnel can submit travel orders.")
        order = self.access.get_owned_order(user, travel_order_id)

        if order.status != TravelOrderStatus.DRAFT:
            raise InvalidTransitionError("Only draft travel orders can be submitted.")

        if approving_director_id is None:
            raise ValidationError.for_field("approving_director_id", "The approving director is required.")
        if recommending_director_id is None and self.require_recommending_director:
            raise ValidationError.for_field("recommending_director_id", "The recommending director is required.")
        if recommending_director_id is not None and recommending_director_id == approving_director_id:
            raise ValidationError.for_field(
                "recommending_director_id",
                "The recommending and approving directors must be different.",
            )

        approving = self._active_director(approving_director_id, "approving_director_id", "approving")
        chain = [approving]
        if recommending_director_id is not None:
            recommending = self._active_director(recommending_director_id, "recommending_director_id", "recommending")
            chain = [recommending, approving]

        now = self.clock.now()
        try:
            for step_order, director in enumerate(chain, start=RECOMMEND_STEP):
                self.db.add(TravelOrderApproval(
                    travel_order_id=order.id,
                    director_id=director.id,
                    step_order=step_order,
                    status=ApprovalStatus.PENDING,
                ))
            # Conditional flip guards against a concurrent submit of the same draft
            result = self.db.execute(
                update(TravelOrder)
                .where(TravelOrder.id == order.id, TravelOrder.status == TravelOrderStatus.DRAFT)
                .values(
                    status=TravelOrderStatus.PENDING,
                    submitted_at=now,
                    approval_chain_length=len(chain),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidTransitionError("Only draft travel orders can be submitted.")
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"📝 SUBMIT: travel order {order.id} was submitted concurrently")
            raise InvalidTransitionError("Only draft travel orders can be submitted.")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info(
            f"📝 SUBMIT: travel order {order.id} submitted by personnel {user.id} "
            f"with {len(chain)} approval step(s): directors {[d.id for d in chain]}"
        )
        return order

    # ------------------------------------------------------------------
    # Director review
    # ------------------------------------------------------------------

    def _pending_approval(self, travel_order_id: int, director_id: int) -> TravelOrderApproval:
        approval = self.db.query(TravelOrderApproval).filter(
            TravelOrderApproval.travel_order_id == travel_order_id,
            TravelOrderApproval.director_id == director_id,
            TravelOrderApproval.status == ApprovalStatus.PENDING,
        ).first()
        if approval is None:
            raise NotVisibleError(NOT_PENDING_YOUR_ACTION)
        return approval

    def get_pending_for_director(
        self, user: CurrentUser, travel_order_id: int
    ) -> Tuple[TravelOrder, TravelOrderApproval]:
        """Order plus the caller's pending step, subject to the step-2 gate."""
        self.access.ensure_role(user, Role.DIRECTOR, message="Only directors can access this resource.")
        approval = self._pending_approval(travel_order_id, user.id)
        if approval.step_order == APPROVE_STEP and not recommend_step_completed(self.db, travel_order_id):
            raise NotVisibleError(NOT_PENDING_YOUR_ACTION)
        return approval.travel_order, approval

    def act(
        self,
        user: CurrentUser,
        travel_order_id: int,
        action: DirectorAction,
        remarks: Optional[str] = None,
    ) -> Tuple[TravelOrder, str]:
        """Recommend, approve or reject the caller's pending step."""
        self.access.ensure_role(user, Role.DIRECTOR, message="Only directors can act on travel orders.")
        action = DirectorAction(action)

        try:
            approval = self._pending_approval(travel_order_id, user.id)
            # Gate is read in the same transaction as the writes below
            if approval.step_order == APPROVE_STEP and not recommend_step_completed(
                self.db, travel_order_id, lock=True
            ):
                raise NotVisibleError(NOT_PENDING_YOUR_ACTION)

            order = approval.travel_order
            if order.status != TravelOrderStatus.PENDING:
                raise InvalidTransitionError("Only pending travel orders can be acted on.")

            chain_length = order.approval_chain_length or len(order.approvals)
            is_only_step = chain_length == 1
            is_recommend_step = approval.step_order == RECOMMEND_STEP and not is_only_step
            is_approve_step = approval.step_order == APPROVE_STEP or is_only_step

            if action == DirectorAction.RECOMMEND:
                if not is_recommend_step:
                    raise InvalidStepError("This step is not a recommending step.")
                new_status, order_status = ApprovalStatus.RECOMMENDED, None
                message = "Travel order recommended successfully."
            elif action == DirectorAction.APPROVE:
                if not is_approve_step:
                    raise InvalidStepError("Only the final approver can approve.")
                new_status, order_status = ApprovalStatus.APPROVED, TravelOrderStatus.APPROVED
                message = "Travel order approved successfully."
            else:
                new_status, order_status = ApprovalStatus.REJECTED, TravelOrderStatus.REJECTED
                message = "Travel order rejected."

            now = self.clock.now()
            result = self.db.execute(
                update(TravelOrderApproval)
                .where(
                    TravelOrderApproval.id == approval.id,
                    TravelOrderApproval.status == ApprovalStatus.PENDING,
                )
                .values(status=new_status, remarks=remarks, acted_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another request acted on this step first
                raise NotVisibleError(NOT_PENDING_YOUR_ACTION)

            if order_status is not None:
                result = self.db.execute(
                    update(TravelOrder)
                    .where(TravelOrder.id == order.id, TravelOrder.status == TravelOrderStatus.PENDING)
                    .values(status=order_status)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise InvalidTransitionError("Only pending travel orders can be acted on.")

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info(
            f"✅ ACTION: director {user.id} -> {action.value} on travel order {order.id} "
            f"(step {approval.step_order}); order status is now {order.status.value}"
        )
        return order, message

    # ------------------------------------------------------------------
    # Director queries
    # ------------------------------------------------------------------

    def _with_details(self, query: Query) -> Query:
        return query.options(
            joinedload(TravelOrder.personnel),
            joinedload(TravelOrder.attachments),
            joinedload(TravelOrder.approvals).joinedload(TravelOrderApproval.director),
        )

    def pending_for_director(self, user: CurrentUser) -> Query:
        """Orders waiting on the caller, with step-2 rows hidden until step 1 is done."""
        self.access.ensure_role(user, Role.DIRECTOR, message="Only directors can access this resource.")
        visible_ids = select(TravelOrderApproval.travel_order_id).where(
            TravelOrderApproval.director_id == user.id,
            TravelOrderApproval.status == ApprovalStatus.PENDING,
            gate_open_clause(),
        )
        query = self.db.query(TravelOrder).filter(
            TravelOrder.id.in_(visible_ids),
            TravelOrder.status == TravelOrderStatus.PENDING,
        ).order_by(TravelOrder.submitted_at.desc(), TravelOrder.id.desc())
        return self._with_details(query)

    def history_for_director(self, user: CurrentUser, status_filter: Optional[HistoryFilter] = None) -> Query:
        """
        Orders the caller has acted on.

        ``approved`` looks at the order's overall status; ``recommended`` and
        ``rejected`` look at the caller's own step.
        """
        self.access.ensure_role(user, Role.DIRECTOR, message="Only directors can access this resource.")
        status_filter = HistoryFilter(status_filter or HistoryFilter.ALL)

        acted = select(TravelOrderApproval.travel_order_id).where(
            TravelOrderApproval.director_id == user.id,
        )
        if status_filter == HistoryFilter.RECOMMENDED:
            acted = acted.where(TravelOrderApproval.status == ApprovalStatus.RECOMMENDED)
        elif status_filter == HistoryFilter.REJECTED:
            acted = acted.where(TravelOrderApproval.status == ApprovalStatus.REJECTED)
        else:
            acted = acted.where(TravelOrderApproval.status.in_(TERMINAL_APPROVAL_STATUSES))

        query = self.db.query(TravelOrder).filter(TravelOrder.id.in_(acted))
        if status_filter == HistoryFilter.APPROVED:
            query = query.filter(TravelOrder.status == TravelOrderStatus.APPROVED)
        query = query.order_by(TravelOrder.updated_at.desc(), TravelOrder.id.desc())
        return self._with_details(query)
