from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from datravel import crud
from datravel.core.deps import CurrentUser, require_personnel
from datravel.db.database import get_db
from datravel.schemas.common import success
from datravel.schemas.travel_order import DirectorSummary

router = APIRouter()


@router.get("/available")
def available_directors(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_personnel),
):
    """Active directors a personnel may pick when submitting."""
    directors = crud.director.get_active(db)
    return success([DirectorSummary.model_validate(d).model_dump() for d in directors])
