"""Pydantic schemas for time logs."""
from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field


class TimeLogBase(BaseModel):
    personnel_id: Optional[int] = None
    director_id: Optional[int] = None
    remarks: Optional[str] = Field(None, max_length=1000)


class TimeLogCreate(TimeLogBase):
    log_date: date
    time_in: time
    time_out: Optional[time] = None


class TimeLogUpdate(TimeLogBase):
    log_date: Optional[date] = None
    time_in: Optional[time] = None
    time_out: Optional[time] = None


class AccountName(BaseModel):
    id: int
    full_name: str
    position: Optional[str] = None
    department: Optional[str] = None

    class Config:
        from_attributes = True


class TimeLogResponse(BaseModel):
    id: int
    personnel_id: Optional[int] = None
    director_id: Optional[int] = None
    log_date: date
    time_in: time
    time_out: Optional[time] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    personnel: Optional[AccountName] = None
    director: Optional[AccountName] = None

    class Config:
        from_attributes = True
