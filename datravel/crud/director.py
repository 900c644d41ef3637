from typing import List

from sqlalchemy.orm import Session

from pydantic import BaseModel

from datravel.crud.base import CRUDBase
from datravel.models.account import Director


class CRUDDirector(CRUDBase[Director, BaseModel, BaseModel]):
    def get_active(self, db: Session) -> List[Director]:
        """Directors that may be picked as recommending/approving directors."""
        return db.query(Director).filter(
            Director.is_active == True
        ).order_by(Director.last_name, Director.first_name).all()


director = CRUDDirector(Director)
