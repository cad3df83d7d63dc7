"""
Salon Booking Backend — Middleware, Health & Startup Tests
=============================================================

What we test:
    ✅ Rate limit applies to POST /register and /login only, with Retry-After
    ✅ Preflights pass free and 429s carry CORS headers
    ✅ X-Request-ID generated or echoed, and carried in error bodies
    ✅ /health: 200 when the database answers, 503 when it does not
    ✅ Catalog seeding is idempotent across restarts
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from salon.database import Database
from salon.exceptions import RateLimitExceededError
from salon.services.catalog import CATALOG, ensure_catalog
from salon.services.treatment_store import TreatmentStore


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_login_limited_after_threshold(self, client_for):
        async with client_for(rate_limit_enabled=True, rate_limit_requests=2) as client:
            body = {"email": "nobody@hairmail.se", "password": "whatever-password"}
            statuses = [(await client.post("/login", json=body)).status_code for _ in range(3)]

            assert statuses == [400, 400, 429]

            limited = await client.post("/login", json=body)
            assert limited.status_code == 429
            assert int(limited.headers["Retry-After"]) >= 1
            payload = limited.json()
            assert payload["error"] == "rate_limit_exceeded"
            assert payload["details"]["retry_after"] == int(limited.headers["Retry-After"])

    @pytest.mark.asyncio
    async def test_register_and_login_share_the_window(self, client_for):
        async with client_for(rate_limit_enabled=True, rate_limit_requests=1) as client:
            await client.post("/register", json={})
            response = await client.post("/login", json={})

            assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_preflight_does_not_consume_budget(self, client_for):
        async with client_for(rate_limit_enabled=True, rate_limit_requests=1) as client:
            preflight = await client.options(
                "/login",
                headers={
                    "Origin": "http://localhost:3000",
                    "Access-Control-Request-Method": "POST",
                },
            )
            assert preflight.status_code == 200

            response = await client.post("/login", json={})
            assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_limited_response_carries_cors_headers(self, client_for):
        origin = {"Origin": "http://localhost:3000"}
        async with client_for(rate_limit_enabled=True, rate_limit_requests=1) as client:
            await client.post("/login", json={}, headers=origin)
            limited = await client.post("/login", json={}, headers=origin)

            assert limited.status_code == 429
            assert limited.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_no_app_level_429_handler(self, test_settings):
        """The middleware answers 429s itself; no exception handler is registered for them."""
        from salon.main import create_app

        assert RateLimitExceededError not in create_app(test_settings).exception_handlers

    @pytest.mark.asyncio
    async def test_other_endpoints_not_limited(self, client_for):
        async with client_for(rate_limit_enabled=True, rate_limit_requests=1) as client:
            for _ in range(5):
                assert (await client.get("/treatments")).status_code == 200

    @pytest.mark.asyncio
    async def test_disabled_limit_lets_everything_through(self, client_for):
        async with client_for(rate_limit_enabled=False, rate_limit_requests=1) as client:
            for _ in range(3):
                assert (await client.post("/login", json={})).status_code == 400


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get("/treatments")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_id_echoed_in_header_and_error_body(self, client):
        response = await client.get("/userinfo", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_unsafe_client_id_replaced(self, client):
        response = await client.get("/treatments", headers={"X-Request-ID": "bad id with spaces"})

        assert response.headers["X-Request-ID"] != "bad id with spaces"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_down(self, app, client):
        app.state.database.ping = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
        )

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"


class TestCatalogSeeding:

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self, test_settings):
        database = Database(test_settings)
        await database.create_all()
        try:
            async with database.session_factory() as session:
                assert await ensure_catalog(TreatmentStore(session)) == len(CATALOG)
            async with database.session_factory() as session:
                assert await ensure_catalog(TreatmentStore(session)) == 0
                assert await TreatmentStore(session).count() == len(CATALOG)
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_restart_keeps_single_catalog(self, client_for):
        async with client_for() as client:
            first = (await client.get("/treatments")).json()
        async with client_for() as client:
            second = (await client.get("/treatments")).json()

        assert second == first
        assert second["count"] == len(CATALOG)

    @pytest.mark.asyncio
    async def test_startup_aborts_when_database_unreachable(self, test_settings):
        from salon.main import create_app

        settings = test_settings.model_copy(
            update={"database_url": "sqlite+aiosqlite:////nonexistent-dir/salon.db"}
        )
        application = create_app(settings)

        with pytest.raises(OperationalError):
            async with application.router.lifespan_context(application):
                pass
