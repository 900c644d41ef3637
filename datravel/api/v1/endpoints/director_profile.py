from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from datravel.core.deps import CurrentUser, get_image_codec, get_storage, require_director
from datravel.core.storage import LocalBlobStorage
from datravel.db.database import get_db
from datravel.models.account import Director
from datravel.schemas.common import success
from datravel.services.attachments import IncomingFile, SignatureService

router = APIRouter()


def _signature_payload(director: Director) -> dict:
    return {
        "director_id": director.id,
        "signature_path": director.signature_path,
        "has_signature": bool(director.signature_path),
    }


@router.get("/signature")
def get_signature(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_director),
):
    director = db.query(Director).filter(Director.id == current_user.id).first()
    return success(_signature_payload(director))


@router.post("/signature")
async def update_signature(
    signature: Optional[UploadFile] = File(None),
    remove_signature: bool = Form(False),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    image_codec=Depends(get_image_codec),
    current_user: CurrentUser = Depends(require_director),
):
    """Upload a new e-signature image, or clear it with ``remove_signature``."""
    upload = None
    if signature is not None and signature.filename:
        upload = IncomingFile(
            filename=signature.filename,
            content=await signature.read(),
            content_type=signature.content_type,
        )

    director = db.query(Director).filter(Director.id == current_user.id).first()
    director = SignatureService(db, storage, image_codec).update(director, upload=upload, remove=remove_signature)
    return success(_signature_payload(director), "Signature updated.")
