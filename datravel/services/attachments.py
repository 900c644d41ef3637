"""Attachment and director e-signature file handling."""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from datravel.core.config import settings
from datravel.core.deps import CurrentUser
from datravel.core.exceptions import (
    AssetMissingError, InvalidTransitionError, NotVisibleError, ValidationError,
)
from datravel.core.storage import LocalBlobStorage
from datravel.models.account import Director
from datravel.models.travel_order import AttachmentType, TravelOrderAttachment, TravelOrderStatus
from datravel.services.access import TravelOrderAccess

logger = logging.getLogger(__name__)

ATTACHMENT_FOLDER = "travel-order-attachments"
SIGNATURE_FOLDER = "director-signatures"
SIGNATURE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}


@dataclass
class IncomingFile:
    """An uploaded file already read into memory."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class AttachmentUploadResult:
    stored: List[TravelOrderAttachment] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class AttachmentService:
    def __init__(self, db: Session, storage: LocalBlobStorage):
        self.db = db
        self.storage = storage
        self.access = TravelOrderAccess(db)

    def _editable_order(self, user: CurrentUser, travel_order_id: int):
        order = self.access.get_owned_order(user, travel_order_id)
        if order.status != TravelOrderStatus.DRAFT:
            raise InvalidTransitionError("Attachments can only be changed while the travel order is a draft.")
        return order

    def add(
        self,
        user: CurrentUser,
        travel_order_id: int,
        files: Sequence[IncomingFile],
        types: Sequence[str] = (),
    ) -> AttachmentUploadResult:
        """Store uploaded files; oversize or empty files are skipped, unknown types become ``other``."""
        order = self._editable_order(user, travel_order_id)
        result = AttachmentUploadResult()

        for index, upload in enumerate(files):
            if not upload.content:
                result.skipped.append(upload.filename)
                continue
            if len(upload.content) > settings.max_attachment_bytes:
                logger.warning(
                    f"📎 ATTACHMENT: skipped {upload.filename} for travel order {order.id}: "
                    f"exceeds {settings.MAX_ATTACHMENT_SIZE_MB} MB"
                )
                result.skipped.append(upload.filename)
                continue

            raw_type = types[index] if index < len(types) else AttachmentType.OTHER.value
            try:
                attachment_type = AttachmentType(raw_type)
            except ValueError:
                attachment_type = AttachmentType.OTHER

            path = self.storage.store(upload.content, ATTACHMENT_FOLDER, f"to_{order.id}", upload.filename)
            attachment = TravelOrderAttachment(
                travel_order_id=order.id,
                file_path=path,
                file_name=upload.filename,
                type=attachment_type,
                mime_type=upload.content_type or self.storage.mime_type(upload.filename),
                file_size=len(upload.content),
            )
            self.db.add(attachment)
            result.stored.append(attachment)

        self.db.commit()
        for attachment in result.stored:
            self.db.refresh(attachment)
        return result

    def remove(self, user: CurrentUser, travel_order_id: int, attachment_id: int) -> None:
        order = self._editable_order(user, travel_order_id)
        attachment = self.db.query(TravelOrderAttachment).filter(
            TravelOrderAttachment.id == attachment_id,
            TravelOrderAttachment.travel_order_id == order.id,
        ).first()
        if attachment is None:
            raise NotVisibleError("Attachment not found.")
        path = attachment.file_path
        self.db.delete(attachment)
        self.db.commit()
        self.storage.delete(path)

    def get_for_download(self, user: CurrentUser, travel_order_id: int, attachment_id: int):
        """Attachment and its bytes, for anyone allowed to read the order."""
        order = self.access.get_visible_order(user, travel_order_id)
        attachment = next((a for a in order.attachments if a.id == attachment_id), None)
        if attachment is None:
            raise NotVisibleError("Attachment not found.")
        if not self.storage.exists(attachment.file_path):
            raise NotVisibleError("File not found.")
        return attachment, self.storage.read(attachment.file_path)


class SignatureService:
    """Upload or remove the calling director's e-signature image."""

    def __init__(self, db: Session, storage: LocalBlobStorage, image_codec=None):
        self.db = db
        self.storage = storage
        self.image_codec = image_codec

    def _check_image(self, upload: IncomingFile) -> None:
        """Reject uploads the export renderers could not draw."""
        if self.image_codec is None:
            logger.warning(f"✍️ SIGNATURE: no image codec available, storing {upload.filename} unchecked")
            return
        try:
            self.image_codec.load(upload.content)
        except AssetMissingError as e:
            logger.warning(f"✍️ SIGNATURE: rejected {upload.filename}: {e.message}")
            raise ValidationError.for_field("signature", "The signature must be a readable image.")

    def update(
        self, director: Director, upload: Optional[IncomingFile] = None, remove: bool = False
    ) -> Director:
        if upload is not None:
            extension = os.path.splitext(upload.filename)[1].lower()
            if extension not in SIGNATURE_EXTENSIONS:
                raise ValidationError.for_field(
                    "signature", "The signature must be a file of type: jpeg, png, jpg, gif, webp."
                )
            if len(upload.content) > settings.max_signature_bytes:
                raise ValidationError.for_field(
                    "signature", f"The signature must not be greater than {settings.MAX_SIGNATURE_SIZE_MB} MB."
                )
            self._check_image(upload)

        if (remove or upload is not None) and director.signature_path:
            self.storage.delete(director.signature_path)
            director.signature_path = None

        if upload is not None:
            director.signature_path = self.storage.store(
                upload.content, SIGNATURE_FOLDER, "director_signature", upload.filename
            )

        self.db.add(director)
        self.db.commit()
        self.db.refresh(director)
        logger.info(f"✍️ SIGNATURE: director {director.id} signature is now {director.signature_path or 'removed'}")
        return director
