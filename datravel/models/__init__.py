from .base import BaseModel
from .account import Role, Personnel, Director, IctAdmin, ACCOUNT_MODELS
from .travel_order import (
    TravelOrder, TravelOrderApproval, TravelOrderAttachment,
    TravelOrderStatus, ApprovalStatus, AttachmentType,
)
from .time_log import TimeLog

__all__ = [
    "BaseModel", "Role", "Personnel", "Director", "IctAdmin", "ACCOUNT_MODELS",
    "TravelOrder", "TravelOrderApproval", "TravelOrderAttachment",
    "TravelOrderStatus", "ApprovalStatus", "AttachmentType", "TimeLog",
]
