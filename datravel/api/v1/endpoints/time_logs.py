from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from datravel import crud
from datravel.core.config import settings
from datravel.core.deps import CurrentUser, require_admin
from datravel.core.exceptions import NotVisibleError
from datravel.crud.base import paginate
from datravel.db.database import get_db
from datravel.schemas.common import paged, success
from datravel.schemas.time_log import TimeLogCreate, TimeLogResponse, TimeLogUpdate

router = APIRouter()


def _get_log_or_404(db: Session, time_log_id: int):
    log = crud.time_log.get(db, time_log_id)
    if log is None:
        raise NotVisibleError("Time log not found.")
    return log


@router.get("")
def list_time_logs(
    search: Optional[str] = None,
    status_filter: str = Query("all", alias="status", pattern="^(all|open|closed)$"),
    sort: str = Query("log_date"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    query = crud.time_log.search(db, search=search, status=status_filter, sort=sort, direction=direction)
    return paged(
        paginate(query, page=page, per_page=per_page),
        TimeLogResponse,
        stats=crud.time_log.stats(db),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_time_log(
    time_log_in: TimeLogCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    log = crud.time_log.create_log(db, obj_in=time_log_in)
    return success(TimeLogResponse.model_validate(log).model_dump(mode="json"), "Time log created.")


@router.put("/{time_log_id}")
def update_time_log(
    time_log_id: int,
    time_log_in: TimeLogUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    log = _get_log_or_404(db, time_log_id)
    log = crud.time_log.update_log(db, db_obj=log, obj_in=time_log_in)
    return success(TimeLogResponse.model_validate(log).model_dump(mode="json"), "Time log updated.")


@router.delete("/{time_log_id}")
def delete_time_log(
    time_log_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    log = _get_log_or_404(db, time_log_id)
    crud.time_log.remove(db, db_obj=log)
    return success(message="Time log deleted.")
