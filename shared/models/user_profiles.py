from sqlalchemy import TIMESTAMP, Boolean, Column, String, func
from sqlalchemy.dialects.postgresql import UUID

from ..core.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # same id as the identity account in the auth database
    uid = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String(200), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    department = Column(String(20), nullable=True)  # frontend | backend | mobile | qa
    role = Column(String(16), nullable=False, default="user")  # user | admin
    is_active = Column(Boolean, default=True, nullable=False)  # soft delete flag
    password_reset = Column(Boolean, default=False, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    created_by = Column(UUID(as_uuid=True), nullable=True)
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())
    updated_by = Column(UUID(as_uuid=True), nullable=True)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)
    deleted_by = Column(UUID(as_uuid=True), nullable=True)
    password_reset_requested_at = Column(TIMESTAMP(timezone=True), nullable=True)
    password_reset_requested_by = Column(UUID(as_uuid=True), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
