from typing import Optional
import logging

from sqlalchemy import asc, desc, or_, select
from sqlalchemy.orm import Query, Session, joinedload

from datravel.core.exceptions import ValidationError
from datravel.crud.base import CRUDBase
from datravel.models.account import Director, Personnel
from datravel.models.time_log import TimeLog
from datravel.schemas.time_log import TimeLogCreate, TimeLogUpdate

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "log_date": TimeLog.log_date,
    "time_in": TimeLog.time_in,
    "time_out": TimeLog.time_out,
    "created_at": TimeLog.created_at,
}


class CRUDTimeLog(CRUDBase[TimeLog, TimeLogCreate, TimeLogUpdate]):
    def _check_owner(self, db: Session, personnel_id: Optional[int], director_id: Optional[int]) -> None:
        if not personnel_id and not director_id:
            raise ValidationError.for_field("personnel_id", "Personnel or director is required.")
        if personnel_id and director_id:
            raise ValidationError(
                "Only one user type can be selected per time log.",
                {"director_id": ["Choose either personnel or director."]},
            )
        if personnel_id and db.query(Personnel.id).filter(Personnel.id == personnel_id).first() is None:
            raise ValidationError.for_field("personnel_id", "The selected personnel does not exist.")
        if director_id and db.query(Director.id).filter(Director.id == director_id).first() is None:
            raise ValidationError.for_field("director_id", "The selected director does not exist.")

    @staticmethod
    def _check_times(time_in, time_out) -> None:
        if time_in is not None and time_out is not None and time_out < time_in:
            raise ValidationError.for_field("time_out", "Time out must be after time in.")

    def create_log(self, db: Session, *, obj_in: TimeLogCreate) -> TimeLog:
        self._check_owner(db, obj_in.personnel_id, obj_in.director_id)
        self._check_times(obj_in.time_in, obj_in.time_out)
        log = self.create(db, obj_in=obj_in)
        logger.info(f"⏱️ TIME LOG: created {log.id} for {log.log_date}")
        return log

    def update_log(self, db: Session, *, db_obj: TimeLog, obj_in: TimeLogUpdate) -> TimeLog:
        changes = obj_in.model_dump(exclude_unset=True)
        if "personnel_id" in changes or "director_id" in changes:
            personnel_id = changes["personnel_id"] if "personnel_id" in changes else db_obj.personnel_id
            director_id = changes["director_id"] if "director_id" in changes else db_obj.director_id
            self._check_owner(db, personnel_id, director_id)
        if "log_date" in changes and changes["log_date"] is None:
            raise ValidationError.for_field("log_date", "The log date field is required.")
        if "time_in" in changes and changes["time_in"] is None:
            raise ValidationError.for_field("time_in", "The time in field is required.")
        time_in = changes.get("time_in", db_obj.time_in)
        time_out = changes["time_out"] if "time_out" in changes else db_obj.time_out
        self._check_times(time_in, time_out)
        return self.update(db, db_obj=db_obj, obj_in=changes)

    def search(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        status: str = "all",
        sort: str = "log_date",
        direction: str = "desc",
    ) -> Query:
        query = db.query(TimeLog).options(joinedload(TimeLog.personnel), joinedload(TimeLog.director))

        if search:
            like = f"%{search}%"
            person_match = select(Personnel.id).where(or_(
                Personnel.first_name.ilike(like), Personnel.last_name.ilike(like),
                Personnel.middle_name.ilike(like), Personnel.username.ilike(like),
                Personnel.department.ilike(like), Personnel.position.ilike(like),
            ))
            director_match = select(Director.id).where(or_(
                Director.first_name.ilike(like), Director.last_name.ilike(like),
                Director.middle_name.ilike(like), Director.username.ilike(like),
                Director.department.ilike(like), Director.position.ilike(like),
            ))
            query = query.filter(or_(
                TimeLog.remarks.ilike(like),
                TimeLog.personnel_id.in_(person_match),
                TimeLog.director_id.in_(director_match),
            ))

        if status == "open":
            query = query.filter(TimeLog.time_out.is_(None))
        elif status == "closed":
            query = query.filter(TimeLog.time_out.isnot(None))

        column = SORTABLE_COLUMNS.get(sort, TimeLog.log_date)
        order = asc if direction == "asc" else desc
        return query.order_by(order(column), order(TimeLog.time_in), order(TimeLog.id))

    def stats(self, db: Session) -> dict:
        total = db.query(TimeLog).count()
        open_count = db.query(TimeLog).filter(TimeLog.time_out.is_(None)).count()
        return {"total": total, "open": open_count, "closed": total - open_count}


time_log = CRUDTimeLog(TimeLog)
