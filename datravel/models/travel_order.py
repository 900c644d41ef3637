"""Travel order models: the order, its approval chain and its attachments."""
from enum import Enum as PyEnum

from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Text, Integer, Date, Numeric, Enum, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from datravel.models.base import BaseModel


def _values(enum_cls):
    return [e.value for e in enum_cls]


class TravelOrderStatus(str, PyEnum):
    """Overall status of a travel order."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalStatus(str, PyEnum):
    """Status of one director's step in the approval chain."""
    PENDING = "pending"
    RECOMMENDED = "recommended"
    APPROVED = "approved"
    REJECTED = "rejected"


class AttachmentType(str, PyEnum):
    """Kinds of supporting documents."""
    ITINERARY = "itinerary"
    MEMORANDUM = "memorandum"
    INVITATION = "invitation"
    OTHER = "other"


RECOMMEND_STEP = 1
APPROVE_STEP = 2

# Step-1 statuses that open the step-2 gate.
GATE_OPEN_STATUSES = (ApprovalStatus.RECOMMENDED, ApprovalStatus.APPROVED)
TERMINAL_APPROVAL_STATUSES = (
    ApprovalStatus.RECOMMENDED, ApprovalStatus.APPROVED, ApprovalStatus.REJECTED,
)


class TravelOrder(BaseModel):
    """Travel order model."""
    __tablename__ = "travel_orders"

    personnel_id = Column(Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False, index=True)
    travel_purpose = Column(String(500), nullable=False)
    destination = Column(String(255), nullable=False)
    official_station = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    objectives = Column(Text, nullable=True)
    per_diems_expenses = Column(Numeric(12, 2), nullable=True)
    per_diems_note = Column(String(255), nullable=True)  # e.g. "800/diem"
    assistant_or_laborers_allowed = Column(String(255), nullable=True)
    appropriation = Column(String(255), nullable=True)
    remarks = Column(Text, nullable=True)
    status = Column(
        Enum(TravelOrderStatus, native_enum=False, length=50, values_callable=_values),
        default=TravelOrderStatus.DRAFT,
        nullable=False,
        index=True,
    )
    submitted_at = Column(DateTime, nullable=True)
    # 1 or 2, fixed at submit time; null while draft
    approval_chain_length = Column(Integer, nullable=True)

    # Relationships
    personnel = relationship("Personnel", backref="travel_orders")
    attachments = relationship(
        "TravelOrderAttachment", back_populates="travel_order",
        cascade="all, delete-orphan", order_by="TravelOrderAttachment.id",
    )
    approvals = relationship(
        "TravelOrderApproval", back_populates="travel_order",
        cascade="all, delete-orphan", order_by="TravelOrderApproval.step_order",
    )

    @property
    def is_draft(self) -> bool:
        return self.status == TravelOrderStatus.DRAFT

    @property
    def is_pending(self) -> bool:
        return self.status == TravelOrderStatus.PENDING

    def approval_for_step(self, step_order: int):
        return next((a for a in self.approvals if a.step_order == step_order), None)


class TravelOrderApproval(BaseModel):
    """One director's step in a travel order's approval chain."""
    __tablename__ = "travel_order_approvals"
    __table_args__ = (
        UniqueConstraint("travel_order_id", "step_order", name="uq_travel_order_approvals_order_step"),
    )

    travel_order_id = Column(Integer, ForeignKey("travel_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    director_id = Column(Integer, ForeignKey("directors.id", ondelete="CASCADE"), nullable=False, index=True)
    step_order = Column(Integer, nullable=False, default=RECOMMEND_STEP)  # 1 = recommend, 2 = approve
    status = Column(
        Enum(ApprovalStatus, native_enum=False, length=50, values_callable=_values),
        default=ApprovalStatus.PENDING,
        nullable=False,
    )
    remarks = Column(Text, nullable=True)
    acted_at = Column(DateTime, nullable=True)

    # Relationships
    travel_order = relationship("TravelOrder", back_populates="approvals")
    director = relationship("Director")

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING


class TravelOrderAttachment(BaseModel):
    """Supporting document attached to a travel order."""
    __tablename__ = "travel_order_attachments"

    travel_order_id = Column(Integer, ForeignKey("travel_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    file_path = Column(String(1024), nullable=False)
    file_name = Column(String(255), nullable=False)
    type = Column(
        Enum(AttachmentType, native_enum=False, length=100, values_callable=_values),
        default=AttachmentType.OTHER,
        nullable=False,
    )
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)

    # Relationships
    travel_order = relationship("TravelOrder", back_populates="attachments")
