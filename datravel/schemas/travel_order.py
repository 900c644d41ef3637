"""Pydantic schemas for travel order API."""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from datravel.models.travel_order import ApprovalStatus, AttachmentType, TravelOrderStatus
from datravel.services.approval_workflow import DirectorAction


def _check_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError("The end date must be a date after or equal to the start date.")


# ===== Travel Order Schemas =====

class TravelOrderBase(BaseModel):
    """Fields personnel fill in on the travel order form."""
    official_station: Optional[str] = Field(None, max_length=255)
    objectives: Optional[str] = None
    per_diems_expenses: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    per_diems_note: Optional[str] = Field(None, max_length=255)
    assistant_or_laborers_allowed: Optional[str] = Field(None, max_length=255)
    appropriation: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class TravelOrderCreate(TravelOrderBase):
    """Schema for creating a draft travel order."""
    travel_purpose: str = Field(..., min_length=1, max_length=500)
    destination: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class TravelOrderUpdate(TravelOrderBase):
    """Schema for editing a draft; only the fields sent are changed."""
    travel_purpose: Optional[str] = Field(None, min_length=1, max_length=500)
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class SubmitTravelOrder(BaseModel):
    """Director selection sent with a submit."""
    recommending_director_id: Optional[int] = None
    approving_director_id: Optional[int] = None


class DirectorActionRequest(BaseModel):
    action: DirectorAction
    remarks: Optional[str] = Field(None, max_length=1000)


# ===== Nested Response Schemas =====

class PersonnelSummary(BaseModel):
    id: int
    username: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    full_name: str
    position: Optional[str] = None
    department: Optional[str] = None

    class Config:
        from_attributes = True


class DirectorSummary(BaseModel):
    id: int
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    full_name: str
    position: Optional[str] = None
    department: Optional[str] = None
    director_level: Optional[str] = None

    class Config:
        from_attributes = True


class ApprovalResponse(BaseModel):
    id: int
    travel_order_id: int
    director_id: int
    step_order: int
    status: ApprovalStatus
    remarks: Optional[str] = None
    acted_at: Optional[datetime] = None
    director: Optional[DirectorSummary] = None

    class Config:
        from_attributes = True


class AttachmentResponse(BaseModel):
    id: int
    travel_order_id: int
    file_name: str
    type: AttachmentType
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TravelOrderResponse(BaseModel):
    """Schema for travel order response."""
    id: int
    personnel_id: int
    travel_purpose: str
    destination: str
    official_station: Optional[str] = None
    start_date: date
    end_date: date
    objectives: Optional[str] = None
    per_diems_expenses: Optional[Decimal] = None
    per_diems_note: Optional[str] = None
    assistant_or_laborers_allowed: Optional[str] = None
    appropriation: Optional[str] = None
    remarks: Optional[str] = None
    status: TravelOrderStatus
    submitted_at: Optional[datetime] = None
    approval_chain_length: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    personnel: Optional[PersonnelSummary] = None
    attachments: List[AttachmentResponse] = []
    approvals: List[ApprovalResponse] = []

    class Config:
        from_attributes = True


class DirectorReviewResponse(BaseModel):
    """An order under review together with the caller's own pending step."""
    travel_order: TravelOrderResponse
    current_approval: ApprovalResponse


class CalendarEntry(BaseModel):
    id: int
    travel_purpose: str
    destination: str
    start_date: date
    end_date: date
    status: TravelOrderStatus

    class Config:
        from_attributes = True
