"""
Bus Admin Backend — Bus SQLAlchemy Model
==========================================

What:  ORM model representing the `buses` table.
How:   Inherits from Base; Alembic migration 001 mirrors these columns.
Who:   Used by BusService for list/get/create/update/delete.

Table Design:
    - UUID primary key assigned on insert (Python-side default, portable
      across PostgreSQL and SQLite)
    - image_url: either the placeholder reference or /uploads/<file> of the
      single image file this bus owns
    - stops: ordered JSON array of stop names
    - created_at index: List returns newest first
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from busadmin.database import Base

BUS_STATUSES = ("active", "inactive")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bus(Base):
    """
    A bus managed through the admin panel.

    Lifecycle:
        1. Created by POST /buses (image optional, placeholder otherwise)
        2. Fields replaced in place by PUT /buses/{id}
        3. Removed by DELETE /buses/{id}, releasing its stored image
    """

    __tablename__ = "buses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    route: Mapped[str] = mapped_column(String(500), nullable=False)

    image_url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Placeholder reference or URL of the owned upload",
    )

    stops: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default=text("'active'"),
        comment="active or inactive",
    )

    schedule: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    fare: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_buses_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Bus(id={self.id}, name='{self.name}', status='{self.status}')>"
