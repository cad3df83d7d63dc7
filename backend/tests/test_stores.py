"""
Salon Booking Backend — Store Unit Tests
==========================================

What:  UserStore and TreatmentStore against a mocked AsyncSession.
How:   No database; each test scripts the session's execute/flush results.

What we test:
    ✅ Duplicate email / phone detected before insert, with the field named
    ✅ Unique-constraint race reported as DuplicateUserError (no field)
    ✅ Other SQLAlchemy failures wrapped as DatabaseError
    ✅ Token lookup: digest query + exact comparison
    ✅ Non-UUID treatment ids never reach the database
"""

import uuid
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from salon.exceptions import DatabaseError, DuplicateUserError
from salon.models.treatment import Treatment
from salon.services.credentials import token_digest
from salon.services.treatment_store import TreatmentStore
from salon.services.user_store import UserStore

NEW_USER = dict(
    first_name="Anna",
    last_name="Lindqvist",
    email="Anna@HairMail.se",
    mobile_phone="0701234567",
    password_hash="$2b$04$abcdefghijklmnopqrstuv",
    access_token="a" * 64,
)


class TestUserStoreCreate:

    @pytest.mark.asyncio
    async def test_create_adds_and_commits(self, mock_db_session, make_result):
        mock_db_session.execute.side_effect = [make_result(None), make_result(None)]
        store = UserStore(mock_db_session)

        user = await store.create(**NEW_USER)

        assert user.email == "anna@hairmail.se"
        assert user.access_token_digest == token_digest("a" * 64)
        mock_db_session.add.assert_called_once_with(user)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_email_reported(self, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(MagicMock())
        store = UserStore(mock_db_session)

        with pytest.raises(DuplicateUserError) as exc_info:
            await store.create(**NEW_USER)

        assert exc_info.value.field == "email"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_phone_reported(self, mock_db_session, make_result):
        mock_db_session.execute.side_effect = [make_result(None), make_result(MagicMock())]
        store = UserStore(mock_db_session)

        with pytest.raises(DuplicateUserError) as exc_info:
            await store.create(**NEW_USER)

        assert exc_info.value.field == "mobilePhone"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_constraint_race_is_duplicate(self, mock_db_session, make_result):
        """A concurrent insert that slipped past the pre-checks still yields 400."""
        mock_db_session.execute.side_effect = [make_result(None), make_result(None)]
        mock_db_session.flush.side_effect = IntegrityError(
            "INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email")
        )
        store = UserStore(mock_db_session)

        with pytest.raises(DuplicateUserError) as exc_info:
            await store.create(**NEW_USER)

        assert exc_info.value.field is None
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_failure_is_database_error(self, mock_db_session, make_result):
        mock_db_session.execute.side_effect = [make_result(None), make_result(None)]
        mock_db_session.commit.side_effect = OperationalError(
            "COMMIT", {}, Exception("connection lost")
        )
        store = UserStore(mock_db_session)

        with pytest.raises(DatabaseError):
            await store.create(**NEW_USER)
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lookup_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        store = UserStore(mock_db_session)

        with pytest.raises(DatabaseError) as exc_info:
            await store.get_by_email("anna@hairmail.se")
        assert exc_info.value.context["operation"] == "get_by_email"


class TestUserStoreTokenLookup:

    @pytest.mark.asyncio
    async def test_matching_token_returns_user(self, mock_db_session, make_result):
        user = MagicMock(access_token="b" * 64)
        mock_db_session.execute.return_value = make_result(user)

        assert await UserStore(mock_db_session).get_by_token("b" * 64) is user

    @pytest.mark.asyncio
    async def test_digest_hit_with_different_token_rejected(self, mock_db_session, make_result):
        user = MagicMock(access_token="c" * 64)
        mock_db_session.execute.return_value = make_result(user)

        assert await UserStore(mock_db_session).get_by_token("b" * 64) is None

    @pytest.mark.asyncio
    async def test_unknown_token_returns_none(self, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(None)

        assert await UserStore(mock_db_session).get_by_token("b" * 64) is None

    @pytest.mark.asyncio
    async def test_empty_token_skips_query(self, mock_db_session):
        assert await UserStore(mock_db_session).get_by_token("") is None
        mock_db_session.execute.assert_not_awaited()


class TestUserStoreBookings:

    @pytest.mark.asyncio
    async def test_add_booking_commits(self, mock_db_session):
        user = MagicMock(id=uuid.uuid4())
        treatment = Treatment(id=uuid.uuid4(), name="Haircut", category="cut", icon="icon1.png")

        booking = await UserStore(mock_db_session).add_booking(user, treatment, date(2026, 5, 1))

        assert booking.user_id == user.id
        assert booking.treatment is treatment
        assert booking.picked_date == date(2026, 5, 1)
        mock_db_session.add.assert_called_once_with(booking)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_booking_failure_rolls_back(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT INTO bookings", {}, Exception("disk full"))
        )
        user = MagicMock(id=uuid.uuid4())
        treatment = Treatment(id=uuid.uuid4(), name="Haircut", category="cut", icon="icon1.png")

        with pytest.raises(DatabaseError):
            await UserStore(mock_db_session).add_booking(user, treatment)
        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_bookings_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await UserStore(mock_db_session).list_bookings(uuid.uuid4())


class TestTreatmentStore:

    @pytest.mark.asyncio
    async def test_non_uuid_id_returns_none_without_query(self, mock_db_session):
        store = TreatmentStore(mock_db_session)

        assert await store.get("not-a-uuid") is None
        assert await store.get("../../etc") is None
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_returns_row(self, mock_db_session, make_result):
        treatment = MagicMock()
        mock_db_session.execute.return_value = make_result(treatment)

        assert await TreatmentStore(mock_db_session).get(str(uuid.uuid4())) is treatment

    @pytest.mark.asyncio
    async def test_add_duplicate_name_returns_none(self, mock_db_session):
        mock_db_session.flush.side_effect = IntegrityError(
            "INSERT INTO treatments", {}, Exception("UNIQUE constraint failed")
        )

        result = await TreatmentStore(mock_db_session).add("Haircut", "cut", "icon1.png", 1)

        assert result is None
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await TreatmentStore(mock_db_session).list_all()
