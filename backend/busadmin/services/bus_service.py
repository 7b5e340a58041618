"""
Bus Admin Backend — Bus Service (Record Controller)
=====================================================

What:  List/get/create/update/delete of bus records, including the lifecycle
       of the image file each record owns.
How:   Composes the UploadStore with the database session handed in by the
       route. Writes are committed inside the service so a failed commit can
       be followed by compensating deletion of the just-stored file.
Who:   Called by the /buses route handlers.

Upload Lifecycle:
    create:  validate+store image → insert → commit
             commit fails → discard new image → DatabaseError (500)
    update:  load record (404 before anything is stored) → validate+store
             image → apply fields → commit
             commit fails → discard new image → DatabaseError (500)
             commit ok    → discard previous image unless placeholder
    delete:  load record → delete → commit → discard image unless placeholder

    Every discard returns a CleanupResult; failures are logged and never
    change the response.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from busadmin.exceptions import DatabaseError, NotFoundError, ValidationError
from busadmin.models.bus import Bus
from busadmin.schemas.bus import BusCreate, BusResponse, BusUpdate
from busadmin.schemas.common import MessageResponse
from busadmin.services.upload_service import (
    UPLOAD_FIELD,
    CleanupResult,
    ImageUpload,
    StoredImage,
    UploadStore,
)

logger = logging.getLogger(__name__)


def _parse_id(bus_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(bus_id))
    except ValueError:
        return None


class BusService:
    """
    Business logic for bus records.

    Args:
        uploads: Store that owns the image files
        placeholder_image_url: imageUrl for buses created without an image
        require_image_on_create: Reject Create without an image (400)
    """

    def __init__(
        self,
        uploads: UploadStore,
        placeholder_image_url: str,
        require_image_on_create: bool = False,
    ):
        self.uploads = uploads
        self.placeholder_image_url = placeholder_image_url
        self.require_image_on_create = require_image_on_create

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_buses(self, db: AsyncSession) -> List[BusResponse]:
        """All buses, newest first."""
        try:
            result = await db.execute(select(Bus).order_by(desc(Bus.created_at)))
            buses = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing buses: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve buses. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [BusResponse.model_validate(bus) for bus in buses]

    async def get_bus(self, db: AsyncSession, bus_id: str) -> BusResponse:
        bus = await self._load(db, bus_id)
        return BusResponse.model_validate(bus)

    async def _load(self, db: AsyncSession, bus_id: str) -> Bus:
        """
        Fetch a bus or raise NotFoundError.

        A malformed id cannot exist in the store and is reported as 404.
        """
        uid = _parse_id(bus_id)
        if uid is None:
            raise NotFoundError(resource="bus", resource_id=str(bus_id))

        try:
            result = await db.execute(select(Bus).where(Bus.id == uid))
            bus = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching bus %s: %s", bus_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the bus. Please try again.",
                context={"bus_id": str(bus_id)},
            )

        if bus is None:
            raise NotFoundError(resource="bus", resource_id=str(bus_id))
        return bus

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_bus(
        self,
        db: AsyncSession,
        payload: BusCreate,
        image: Optional[ImageUpload] = None,
    ) -> BusResponse:
        """
        Create a bus, storing its image first when one was uploaded.

        Raises:
            ValidationError: Bad image, or missing image when required
            FileStorageError: Image could not be written
            DatabaseError: Insert failed (the stored image is discarded)
        """
        if image is None and self.require_image_on_create:
            raise ValidationError(message="Please upload a bus image", field=UPLOAD_FIELD)

        stored: Optional[StoredImage] = None
        if image is not None:
            stored = await self.uploads.validate_and_store(image)

        bus = Bus(
            name=payload.name,
            route=payload.route,
            image_url=stored.url if stored else self.placeholder_image_url,
            stops=payload.stops,
            status=payload.status,
            schedule=payload.schedule,
            fare=payload.fare,
        )

        try:
            db.add(bus)
            await db.commit()
        except Exception as e:
            await self._rollback(db)
            if stored:
                self._observe(await self.uploads.discard(stored.path), "create", None)
            logger.error("Failed to create bus '%s': %s", payload.name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the bus. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Bus created: %s (%s)", bus.id, bus.name)
        return BusResponse.model_validate(bus)

    async def update_bus(
        self,
        db: AsyncSession,
        bus_id: str,
        payload: BusUpdate,
        image: Optional[ImageUpload] = None,
    ) -> BusResponse:
        """
        Apply the supplied fields and optionally replace the image.

        The record is loaded before the replacement image is stored, so an
        unknown id returns 404 without writing anything.
        """
        bus = await self._load(db, bus_id)

        stored: Optional[StoredImage] = None
        if image is not None:
            stored = await self.uploads.validate_and_store(image)

        previous_url = bus.image_url
        for field, value in payload.changes().items():
            setattr(bus, field, value)
        if stored:
            bus.image_url = stored.url
        bus.updated_at = datetime.now(timezone.utc)

        try:
            await db.commit()
        except Exception as e:
            await self._rollback(db)
            if stored:
                self._observe(await self.uploads.discard(stored.path), "update", bus_id)
            logger.error("Failed to update bus %s: %s", bus_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the bus. Please try again.",
                context={"bus_id": str(bus_id), "error_type": type(e).__name__},
            )

        if stored and previous_url != stored.url:
            await self._release(previous_url, "update", bus_id)

        logger.info("Bus updated: %s", bus.id)
        return BusResponse.model_validate(bus)

    async def delete_bus(self, db: AsyncSession, bus_id: str) -> MessageResponse:
        """Remove the record, then release the image it owned."""
        bus = await self._load(db, bus_id)
        image_url = bus.image_url

        try:
            await db.delete(bus)
            await db.commit()
        except Exception as e:
            await self._rollback(db)
            logger.error("Failed to delete bus %s: %s", bus_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the bus. Please try again.",
                context={"bus_id": str(bus_id), "error_type": type(e).__name__},
            )

        await self._release(image_url, "delete", bus_id)
        logger.info("Bus deleted: %s", bus_id)
        return MessageResponse(message="Bus deleted successfully")

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    async def _rollback(db: AsyncSession) -> None:
        try:
            await db.rollback()
        except Exception as e:
            logger.error("Rollback failed: %s", str(e))

    async def _release(self, url: str, operation: str, bus_id: str) -> CleanupResult:
        """Release a record's previous image. The shared placeholder is never deleted."""
        if url == self.placeholder_image_url:
            return CleanupResult(outcome="skipped", target=url)
        return self._observe(await self.uploads.discard_url(url), operation, bus_id)

    @staticmethod
    def _observe(result: CleanupResult, operation: str, bus_id: Optional[str]) -> CleanupResult:
        if not result.ok:
            logger.warning(
                "Image cleanup after %s of bus %s failed: %s (%s)",
                operation,
                bus_id or "<new>",
                result.target,
                result.error,
            )
        return result

