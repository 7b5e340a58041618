"""
Bus Admin Backend — Bus API Integration Tests
===============================================

What:  End-to-end tests of /buses and /uploads over HTTP, including the
       bearer-token guard, multipart handling and the JSON shape.
How:   HTTPX AsyncClient + ASGITransport against an app built per test.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from busadmin.main import create_app

BUS_FORM = {
    "name": "Express 12",
    "route": "Central - Airport",
    "stops": "Central, Museum, Airport",
    "schedule": "Every 15 minutes",
    "fare": "2.50",
}


def _image(content: bytes, filename: str = "bus.jpg", content_type: str = "image/jpeg"):
    return {"busImage": (filename, content, content_type)}


class TestBusAuthGuard:

    @pytest.mark.asyncio
    async def test_create_without_token(self, test_client, upload_store, sample_image_bytes):
        response = await test_client.post(
            "/buses", data=BUS_FORM, files=_image(sample_image_bytes)
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_create_with_expired_token(self, test_client, context, admin):
        stale = datetime.now(timezone.utc) - timedelta(hours=25)
        token = context.tokens.issue(admin.id, admin.email, now=stale)

        response = await test_client.post(
            "/buses", data=BUS_FORM, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert "expired" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.delete(
            f"/buses/{uuid.uuid4()}", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_and_delete_require_token(self, test_client):
        bus_id = uuid.uuid4()
        assert (await test_client.put(f"/buses/{bus_id}", data={"fare": "1"})).status_code == 401
        assert (await test_client.delete(f"/buses/{bus_id}")).status_code == 401

    @pytest.mark.asyncio
    async def test_reads_are_public(self, test_client):
        response = await test_client.get("/buses")
        assert response.status_code == 200
        assert response.json() == []


class TestBusCrudApi:

    @pytest.mark.asyncio
    async def test_create_returns_camel_case_record(self, test_client, auth_headers):
        response = await test_client.post("/buses", data=BUS_FORM, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {
            "id", "name", "route", "imageUrl", "stops", "status",
            "schedule", "fare", "createdAt", "updatedAt",
        }
        assert body["imageUrl"] == "/static/bus-placeholder.png"
        assert body["stops"] == ["Central", "Museum", "Airport"]
        assert body["status"] == "active"

    @pytest.mark.asyncio
    async def test_create_missing_required_field(self, test_client, auth_headers):
        form = {k: v for k, v in BUS_FORM.items() if k != "fare"}

        response = await test_client.post("/buses", data=form, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_create_invalid_status(self, test_client, auth_headers):
        response = await test_client.post(
            "/buses", data={**BUS_FORM, "status": "retired"}, headers=auth_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_rejects_non_image(self, test_client, auth_headers, upload_store):
        response = await test_client.post(
            "/buses",
            data=BUS_FORM,
            files=_image(b"%PDF-1.4", "timetable.pdf", "application/pdf"),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_create_rejects_oversized_image(
        self, test_client, auth_headers, upload_store, make_image
    ):
        response = await test_client.post(
            "/buses",
            data=BUS_FORM,
            files=_image(make_image(5_000_001)),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "exceeds maximum" in response.json()["message"]
        assert upload_store.list_files() == []
        assert (await test_client.get("/buses")).json() == []

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, test_client, auth_headers):
        for name in ("Line 1", "Line 2", "Line 3"):
            await test_client.post(
                "/buses", data={**BUS_FORM, "name": name}, headers=auth_headers
            )

        names = [bus["name"] for bus in (await test_client.get("/buses")).json()]

        assert names == ["Line 3", "Line 2", "Line 1"]

    @pytest.mark.asyncio
    async def test_get_unknown_and_malformed_ids(self, test_client):
        assert (await test_client.get(f"/buses/{uuid.uuid4()}")).status_code == 404
        assert (await test_client.get("/buses/12345")).status_code == 404

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, auth_headers):
        created = (
            await test_client.post("/buses", data=BUS_FORM, headers=auth_headers)
        ).json()

        response = await test_client.put(
            f"/buses/{created['id']}",
            data={"fare": "3.00", "stops": "Central,Airport"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["fare"] == "3.00"
        assert body["stops"] == ["Central", "Airport"]
        assert body["name"] == created["name"]
        assert body["imageUrl"] == created["imageUrl"]

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client, auth_headers, upload_store, sample_image_bytes):
        response = await test_client.put(
            f"/buses/{uuid.uuid4()}",
            data={"fare": "1.00"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_update_replaces_image(
        self, test_client, auth_headers, upload_store, sample_image_bytes
    ):
        created = (
            await test_client.post(
                "/buses", data=BUS_FORM, files=_image(sample_image_bytes), headers=auth_headers
            )
        ).json()

        updated = (
            await test_client.put(
                f"/buses/{created['id']}",
                files=_image(sample_image_bytes, "fresh.png", "image/png"),
                headers=auth_headers,
            )
        ).json()

        assert updated["imageUrl"] != created["imageUrl"]
        assert upload_store.list_files() == [updated["imageUrl"].rsplit("/", 1)[1]]
        assert (await test_client.get(created["imageUrl"])).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, test_client, auth_headers):
        response = await test_client.delete(f"/buses/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404


class TestImageLifecycle:

    @pytest.mark.asyncio
    async def test_upload_serve_delete(self, test_client, auth_headers, upload_store, make_image):
        image = make_image(2_000_000)
        form = {"name": "Route 5", "route": "A-B", "stops": "X,Y,Z", "fare": "10", "schedule": "Daily"}

        created = await test_client.post(
            "/buses", data=form, files=_image(image), headers=auth_headers
        )
        assert created.status_code == 201
        bus = created.json()
        assert bus["stops"] == ["X", "Y", "Z"]
        assert bus["imageUrl"].startswith("/uploads/")
        assert bus["imageUrl"].endswith(".jpg")

        served = await test_client.get(bus["imageUrl"])
        assert served.status_code == 200
        assert served.content == image
        assert served.headers["content-type"] == "image/jpeg"

        deleted = await test_client.delete(f"/buses/{bus['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Bus deleted successfully"}

        assert (await test_client.get(f"/buses/{bus['id']}")).status_code == 404
        assert (await test_client.get(bus["imageUrl"])).status_code == 404
        assert upload_store.list_files() == []

    @pytest.mark.asyncio
    async def test_serve_unknown_file(self, test_client):
        response = await test_client.get("/uploads/1700000000000-deadbeef.jpg")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_placeholder_image_is_served(self, test_client, auth_headers):
        bus = (await test_client.post("/buses", data=BUS_FORM, headers=auth_headers)).json()

        served = await test_client.get(bus["imageUrl"])

        assert served.status_code == 200
        assert served.headers["content-type"] == "image/png"
        assert served.content.startswith(b"\x89PNG")


class TestApiPrefix:

    @pytest.mark.asyncio
    async def test_routes_mount_under_configured_prefix(self, settings):
        app = create_app(settings.model_copy(update={"api_prefix": "/api"}))
        await app.state.context.create_schema()
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                assert (await client.get("/api/buses")).status_code == 200
                assert (await client.get("/buses")).status_code == 404
                login = await client.post("/api/login", json={"email": "a@b.c", "password": "x"})
                assert login.status_code == 401
                assert (await client.get("/health")).status_code == 200
        finally:
            await app.state.context.dispose()
