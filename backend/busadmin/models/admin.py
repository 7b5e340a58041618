"""
Bus Admin Backend — Admin SQLAlchemy Model
============================================

What:  ORM model for the `admins` table (the credential store).
Who:   Read by AuthService on login; written by the bootstrap endpoint and the
       seed command. Rows are never updated or deleted by the application.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from busadmin.database import Base
from busadmin.security import hash_password, verify_password


class Admin(Base):
    """An administrator allowed to manage buses."""

    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Stored lower-cased; uniqueness is enforced by the database
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # ── Helpers ─────────────────────────────────────────────────────────────
    def set_password(self, raw: str) -> None:
        self.password_hash = hash_password(raw)

    def check_password(self, raw: str) -> bool:
        return verify_password(self.password_hash, raw)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email='{self.email}')>"
