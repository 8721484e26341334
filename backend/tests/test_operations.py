"""
Tests for the database operations against a mocked AsyncSession.

Each session records what it is asked to do, in order, so the tests can check
the statements emitted and where the transaction boundaries fall.
"""

import asyncio
import re
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from sqlalchemy.sql.dml import Delete, Update

from factories import make_user
from wip_planner.models import Attendance, OrgSetting, User
from wip_planner.services.database_manager.operations import (
    AttendanceOperations,
    UserOperations,
    WipWindowOperations,
)

FACTORY_PATH = 'wip_planner.services.database_manager.operations.get_session_factory'


def recording_session(*results):
    """Session mock whose calls land in ``session.log``; execute returns ``results`` in turn"""
    log = []
    pending = iter(results)
    session = MagicMock()
    session.log = log

    async def execute(statement):
        log.append(statement)
        return next(pending, MagicMock())

    session.execute = AsyncMock(side_effect=execute)
    session.add.side_effect = lambda obj: log.append(("add", obj))
    session.flush = AsyncMock(side_effect=lambda: log.append("flush"))
    session.commit = AsyncMock(side_effect=lambda: log.append("commit"))
    session.refresh = AsyncMock()
    transaction = session.begin.return_value
    transaction.__aenter__.side_effect = lambda *args: log.append("begin")
    transaction.__aexit__.side_effect = lambda *args: log.append("end") or False
    return session


def factory_for(session):
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return factory


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def scalars_result(values):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(values)
    return result


def set_clause(statement):
    """(table, column) written by an UPDATE"""
    match = re.match(r"UPDATE (\w+) SET (\w+)=", str(statement))
    return match.group(1), match.group(2)


class TestReassignUserId:

    @patch(FACTORY_PATH)
    def test_moves_every_reference_in_one_transaction(self, mock_factory):
        stored = make_user("old-id", "Asha", email="asha@example.com")
        session = recording_session(scalar_result(stored))
        mock_factory.return_value = factory_for(session)

        old_id = asyncio.run(UserOperations.reassign_user_id("asha@example.com", "new-id", name="Asha B"))

        assert old_id == "old-id"
        log = session.log
        assert log[0] == "begin"
        assert log[-1] == "end"
        session.begin.assert_called_once()

        kind, placeholder = log[2]
        assert kind == "add"
        assert isinstance(placeholder, User)
        assert placeholder.id == "new-id"
        assert placeholder.name == "Asha B"
        assert placeholder.email.startswith("temp_") and placeholder.email.endswith("_asha@example.com")
        assert log[3] == "flush"

        rewrites = log[4:11]
        assert all(isinstance(s, Update) for s in rewrites)
        assert {set_clause(s) for s in rewrites} == {
            ("events", "creator_id"),
            ("events", "paid_by_id"),
            ("attendances", "user_id"),
            ("attendances", "invited_by_id"),
            ("attendances", "paid_by_id"),
            ("bills", "payer_id"),
            ("attachments", "uploaded_by_id"),
        }
        for statement in rewrites:
            assert set(statement.compile().params.values()) == {"new-id", "old-id"}

        remove_old, restore_email = log[11], log[12]
        assert isinstance(remove_old, Delete)
        assert remove_old.table.name == "users"
        assert list(remove_old.compile().params.values()) == ["old-id"]
        assert set_clause(restore_email) == ("users", "email")
        assert set(restore_email.compile().params.values()) == {"asha@example.com", "new-id"}
        assert len(log) == 14

    @patch(FACTORY_PATH)
    def test_matching_id_writes_nothing(self, mock_factory):
        session = recording_session(scalar_result(make_user("same-id", email="asha@example.com")))
        mock_factory.return_value = factory_for(session)

        assert asyncio.run(UserOperations.reassign_user_id("asha@example.com", "same-id")) == "same-id"
        session.add.assert_not_called()
        assert session.execute.await_count == 1

    @patch(FACTORY_PATH)
    def test_unknown_email(self, mock_factory):
        session = recording_session(scalar_result(None))
        mock_factory.return_value = factory_for(session)

        assert asyncio.run(UserOperations.reassign_user_id("nobody@example.com", "new-id")) is None
        session.add.assert_not_called()


class TestCurrentWindow:

    def test_creates_org_setting_when_missing(self):
        window_id = uuid4()
        missing = MagicMock(rowcount=0)
        session = recording_session(MagicMock(), missing)

        asyncio.run(WipWindowOperations._make_current(session, window_id))

        deactivate, point = session.log[0], session.log[1]
        assert set_clause(deactivate) == ("wip_windows", "is_active")
        assert set_clause(point) == ("org_settings", "current_wip_window_id")
        kind, setting = session.log[2]
        assert kind == "add"
        assert isinstance(setting, OrgSetting)
        assert setting.current_wip_window_id == window_id

    def test_updates_existing_org_setting(self):
        session = recording_session(MagicMock(), MagicMock(rowcount=1))

        asyncio.run(WipWindowOperations._make_current(session, uuid4()))

        session.add.assert_not_called()
        assert len(session.log) == 2

    @patch(FACTORY_PATH)
    def test_activation_commits_after_pointer_moves(self, mock_factory):
        window = MagicMock(name="window")
        session = recording_session(MagicMock(), MagicMock(rowcount=1))
        session.get = AsyncMock(return_value=window)
        mock_factory.return_value = factory_for(session)

        updated = asyncio.run(WipWindowOperations.update_window(uuid4(), {"is_active": True}))

        assert updated is window
        assert window.is_active is True
        assert session.log[-1] == "commit"
        assert [set_clause(s) for s in session.log[:2]] == [
            ("wip_windows", "is_active"),
            ("org_settings", "current_wip_window_id"),
        ]


class TestInvitationEmails:

    @patch(FACTORY_PATH)
    def test_pending_invitations_link_regardless_of_case(self, mock_factory):
        result = MagicMock(rowcount=2)
        session = recording_session(result)
        mock_factory.return_value = factory_for(session)

        linked = asyncio.run(UserOperations.link_pending_attendances("Bob@Example.com", "bob-id"))

        assert linked == 2
        statement = session.log[0]
        assert "lower(attendances.email)" in str(statement)
        assert "bob@example.com" in statement.compile().params.values()
        assert session.log[-1] == "commit"

    @patch(FACTORY_PATH)
    def test_add_attendees_folds_case(self, mock_factory):
        asha = make_user("asha", "Asha", email="Asha@Example.com")
        session = recording_session(scalars_result([asha]), scalars_result([]))
        mock_factory.return_value = factory_for(session)

        added = asyncio.run(AttendanceOperations.add_attendees(
            uuid4(), ["asha@example.com", "ASHA@example.com", " New@Example.com "], invited_by_id="creator"
        ))

        assert added == 2
        invitations = [entry[1] for entry in session.log if isinstance(entry, tuple)]
        assert all(isinstance(a, Attendance) for a in invitations)
        assert [(a.user_id, a.email) for a in invitations] == [
            ("asha", "Asha@Example.com"),
            (None, "new@example.com"),
        ]

    @patch(FACTORY_PATH)
    def test_add_attendees_skips_existing_invitation_in_other_case(self, mock_factory):
        existing = Attendance(id=uuid4(), user_id=None, email="New@Example.com")
        session = recording_session(scalars_result([]), scalars_result([existing]))
        mock_factory.return_value = factory_for(session)

        added = asyncio.run(AttendanceOperations.add_attendees(uuid4(), ["new@example.com"], invited_by_id="creator"))

        assert added == 0
        session.add.assert_not_called()
