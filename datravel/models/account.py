"""Account models: personnel, directors and ICT administrators."""
import enum

from sqlalchemy import Column, String, Boolean, Text

from datravel.models.base import BaseModel


class Role(str, enum.Enum):
    """Role carried on the authenticated session, decided once at token decode."""
    PERSONNEL = "personnel"
    DIRECTOR = "director"
    ADMIN = "admin"


def join_name(*parts) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


class Personnel(BaseModel):
    __tablename__ = "personnel"

    username = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    middle_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    reason_for_deactivation = Column(Text, nullable=True)
    avatar_path = Column(String(500), nullable=True)

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.middle_name, self.last_name)


class Director(BaseModel):
    __tablename__ = "directors"

    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=False)
    middle_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    director_level = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    reason_for_deactivation = Column(Text, nullable=True)
    avatar_path = Column(String(500), nullable=True)
    signature_path = Column(String(500), nullable=True)

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.middle_name, self.last_name)


class IctAdmin(BaseModel):
    __tablename__ = "ict_admins"

    username = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.last_name)


ACCOUNT_MODELS = {
    Role.PERSONNEL: Personnel,
    Role.DIRECTOR: Director,
    Role.ADMIN: IctAdmin,
}
