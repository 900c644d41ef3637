"""Time log model (managed by the ICT admin)."""
from sqlalchemy import Column, Date, ForeignKey, Integer, Text, Time
from sqlalchemy.orm import relationship

from datravel.models.base import BaseModel


class TimeLog(BaseModel):
    """A daily time-in/time-out record for one personnel or one director."""
    __tablename__ = "time_logs"

    personnel_id = Column(Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=True, index=True)
    director_id = Column(Integer, ForeignKey("directors.id", ondelete="SET NULL"), nullable=True, index=True)
    log_date = Column(Date, nullable=False, index=True)
    time_in = Column(Time, nullable=False)
    time_out = Column(Time, nullable=True)
    remarks = Column(Text, nullable=True)

    personnel = relationship("Personnel")
    director = relationship("Director")
