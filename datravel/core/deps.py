from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional
import importlib.util
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from datravel.core.clock import Clock, SystemClock
from datravel.core.config import settings
from datravel.core.exceptions import RoleForbiddenError
from datravel.core.security import decode_token
from datravel.core.storage import LocalBlobStorage
from datravel.db.database import get_db
from datravel.models.account import ACCOUNT_MODELS, Role

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller. ``role`` comes from the token, never from the account type."""
    id: int
    role: Role
    is_active: bool
    account: Any = None

    @property
    def is_personnel(self) -> bool:
        return self.role == Role.PERSONNEL

    @property
    def is_director(self) -> bool:
        return self.role == Role.DIRECTOR

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    role_value = payload.get("role")
    if subject is None or role_value is None:
        raise credentials_exception

    try:
        role = Role(role_value)
        account_id = int(subject)
    except ValueError:
        raise credentials_exception

    account = db.query(ACCOUNT_MODELS[role]).filter(ACCOUNT_MODELS[role].id == account_id).first()
    if account is None:
        raise credentials_exception

    # Inactive accounts cannot authenticate
    if not account.is_active:
        raise credentials_exception

    return CurrentUser(id=account.id, role=role, is_active=account.is_active, account=account)


class RoleChecker:
    """Dependency that admits only the given roles (403 otherwise)."""

    def __init__(self, *roles: Role, message: Optional[str] = None):
        self.roles = roles
        self.message = message

    def __call__(self, current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in self.roles:
            raise RoleForbiddenError(self.message)
        return current_user


require_personnel = RoleChecker(Role.PERSONNEL, message="Only personnel can manage travel orders.")
require_director = RoleChecker(Role.DIRECTOR, message="Only directors can access this resource.")
require_admin = RoleChecker(Role.ADMIN, message="Only ICT Admin users are allowed to access this resource.")


def get_clock() -> Clock:
    return SystemClock()


def get_storage() -> LocalBlobStorage:
    return LocalBlobStorage(settings.STORAGE_ROOT)


@lru_cache
def _probe_image_codec():
    # Imported lazily so the codec module is only loaded once Pillow is known to be present
    if importlib.util.find_spec("PIL") is None:
        logger.warning("Pillow is not installed; director signatures will not appear in exports.")
        return None
    from datravel.services.image_codec import PillowImageCodec
    return PillowImageCodec()


def get_image_codec():
    """Image codec capability for the export renderers, or None when unavailable."""
    return _probe_image_codec()
