"""
Bus Admin Backend — Bus Service Unit Tests
============================================

What:  Record CRUD plus the image lifecycle: every failure path must leave
       no orphan file, and replaced or deleted images must be released.
How:   Happy paths run against the per-test SQLite database; commit failures
       are simulated with the mock session from conftest.
"""

import uuid
from unittest.mock import MagicMock

import pytest

from busadmin.exceptions import DatabaseError, NotFoundError, ValidationError
from busadmin.models.bus import Bus
from busadmin.schemas.bus import BusCreate, BusUpdate
from busadmin.services.bus_service import BusService
from busadmin.services.upload_service import ImageUpload

PLACEHOLDER = "/static/bus-placeholder.png"


def _payload(**overrides) -> BusCreate:
    fields = {
        "name": "Express 12",
        "route": "Central - Airport",
        "fare": "2.50",
        "schedule": "Every 15 minutes",
        "stops": "Central, Museum ,  , Airport",
    }
    fields.update(overrides)
    return BusCreate.from_form(**fields)


def _jpeg(content: bytes, filename: str = "bus.jpg") -> ImageUpload:
    return ImageUpload(filename=filename, content_type="image/jpeg", content=content)


@pytest.fixture
def service(context) -> BusService:
    return context.bus_service


class TestBusReads:

    @pytest.mark.asyncio
    async def test_list_empty(self, service, db_session):
        assert await service.list_buses(db_session) == []

    @pytest.mark.asyncio
    async def test_list_newest_first(self, service, db_session):
        first = await service.create_bus(db_session, _payload(name="First"))
        second = await service.create_bus(db_session, _payload(name="Second"))

        buses = await service.list_buses(db_session)

        assert [b.id for b in buses] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.get_bus(db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_not_found(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.get_bus(db_session, "not-a-uuid")


class TestBusCreate:

    @pytest.mark.asyncio
    async def test_create_without_image_uses_placeholder(self, service, db_session, upload_store):
        bus = await service.create_bus(db_session, _payload())

        assert bus.image_url == PLACEHOLDER
        assert bus.stops == ["Central", "Museum", "Airport"]
        assert bus.status == "active"
        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_create_with_image(self, service, db_session, upload_store, sample_image_bytes):
        bus = await service.create_bus(db_session, _payload(), _jpeg(sample_image_bytes))

        [stored] = upload_store.list_files()
        assert bus.image_url == f"/uploads/{stored}"

        fetched = await service.get_bus(db_session, str(bus.id))
        assert fetched.image_url == bus.image_url

    @pytest.mark.asyncio
    async def test_create_requires_image_when_configured(self, upload_store, db_session):
        strict = BusService(upload_store, PLACEHOLDER, require_image_on_create=True)

        with pytest.raises(ValidationError, match="Please upload a bus image"):
            await strict.create_bus(db_session, _payload())

        assert await strict.list_buses(db_session) == []

    @pytest.mark.asyncio
    async def test_create_rejected_image_creates_nothing(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        gif = ImageUpload(filename="bus.gif", content_type="image/gif", content=sample_image_bytes)

        with pytest.raises(ValidationError):
            await service.create_bus(db_session, _payload(), gif)

        assert upload_store.list_files() == []
        assert await service.list_buses(db_session) == []

    @pytest.mark.asyncio
    async def test_create_commit_failure_discards_image(
        self, service, mock_db_session, upload_store, sample_image_bytes
    ):
        mock_db_session.commit.side_effect = RuntimeError("database is locked")

        with pytest.raises(DatabaseError):
            await service.create_bus(mock_db_session, _payload(), _jpeg(sample_image_bytes))

        mock_db_session.rollback.assert_awaited_once()
        assert upload_store.list_files() == []


class TestBusUpdate:

    @pytest.mark.asyncio
    async def test_update_applies_only_sent_fields(self, service, db_session):
        bus = await service.create_bus(db_session, _payload())

        updated = await service.update_bus(
            db_session, str(bus.id), BusUpdate.from_form(fare="3.00", status="inactive")
        )

        assert updated.fare == "3.00"
        assert updated.status == "inactive"
        assert updated.name == bus.name
        assert updated.stops == bus.stops
        assert updated.updated_at >= bus.updated_at

    @pytest.mark.asyncio
    async def test_update_replaces_image_and_discards_previous(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        bus = await service.create_bus(db_session, _payload(), _jpeg(sample_image_bytes))
        [old_name] = upload_store.list_files()

        updated = await service.update_bus(
            db_session, str(bus.id), BusUpdate(), _jpeg(sample_image_bytes, "new.png")
        )

        [new_name] = upload_store.list_files()
        assert new_name != old_name
        assert new_name.endswith(".png")
        assert updated.image_url == f"/uploads/{new_name}"

    @pytest.mark.asyncio
    async def test_update_replacing_placeholder_keeps_nothing_else(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        bus = await service.create_bus(db_session, _payload())

        updated = await service.update_bus(
            db_session, str(bus.id), BusUpdate(), _jpeg(sample_image_bytes)
        )

        assert updated.image_url != PLACEHOLDER
        assert len(upload_store.list_files()) == 1

    @pytest.mark.asyncio
    async def test_update_unknown_id_stores_nothing(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        with pytest.raises(NotFoundError):
            await service.update_bus(
                db_session, str(uuid.uuid4()), BusUpdate(), _jpeg(sample_image_bytes)
            )

        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_update_commit_failure_keeps_old_image(
        self, service, mock_db_session, upload_store, sample_image_bytes
    ):
        old = upload_store.upload_dir / "1700000000000-aaaaaaaa.jpg"
        old.write_bytes(sample_image_bytes)
        existing = Bus(
            id=uuid.uuid4(),
            name="Express 12",
            route="Central - Airport",
            image_url=f"/uploads/{old.name}",
            stops=["Central"],
            status="active",
            schedule="Hourly",
            fare="2.50",
        )
        result = MagicMock()
        result.scalar_one_or_none.return_value = existing
        mock_db_session.execute.return_value = result
        mock_db_session.commit.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError):
            await service.update_bus(
                mock_db_session, str(existing.id), BusUpdate(), _jpeg(sample_image_bytes)
            )

        assert upload_store.list_files() == [old.name]


class TestBusDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_image(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        bus = await service.create_bus(db_session, _payload(), _jpeg(sample_image_bytes))

        response = await service.delete_bus(db_session, str(bus.id))

        assert response.message == "Bus deleted successfully"
        assert upload_store.list_files() == []
        with pytest.raises(NotFoundError):
            await service.get_bus(db_session, str(bus.id))

    @pytest.mark.asyncio
    async def test_delete_placeholder_bus_touches_no_files(self, service, db_session, upload_store):
        stray = upload_store.upload_dir / "1700000000000-bbbbbbbb.png"
        stray.write_bytes(b"png")
        bus = await service.create_bus(db_session, _payload())

        await service.delete_bus(db_session, str(bus.id))

        assert upload_store.list_files() == [stray.name]

    @pytest.mark.asyncio
    async def test_delete_with_image_already_gone(
        self, service, db_session, upload_store, sample_image_bytes
    ):
        bus = await service.create_bus(db_session, _payload(), _jpeg(sample_image_bytes))
        for name in upload_store.list_files():
            (upload_store.upload_dir / name).unlink()

        response = await service.delete_bus(db_session, str(bus.id))

        assert response.message == "Bus deleted successfully"

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, service, db_session):
        with pytest.raises(NotFoundError):
            await service.delete_bus(db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_placeholder_inside_upload_dir_is_never_deleted(
        self, upload_store, db_session, sample_image_bytes
    ):
        shared = upload_store.upload_dir / "default-bus.png"
        shared.write_bytes(b"png")
        service = BusService(upload_store, "/uploads/default-bus.png")

        replaced = await service.create_bus(db_session, _payload(name="Replaced"))
        deleted = await service.create_bus(db_session, _payload(name="Deleted"))
        await service.update_bus(
            db_session, str(replaced.id), BusUpdate(), _jpeg(sample_image_bytes)
        )
        await service.delete_bus(db_session, str(deleted.id))

        assert shared.exists()
        assert len(upload_store.list_files()) == 2
