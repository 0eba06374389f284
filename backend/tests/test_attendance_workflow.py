"""
Tests for the attendance approval workflow.
"""
import pytest
import pytest_asyncio
from datetime import date
from decimal import Decimal

from conftest import MEETING_DATE, seoul
from clubdesk.core.exceptions import (
    DomainValidationError,
    IllegalTransitionError,
    PermissionDeniedError,
    PolicyViolationError,
)
from clubdesk.db.base import session_factory
from clubdesk.models.attendance_record import AttendanceStatus
from clubdesk.models.financial_transaction import TransactionType
from clubdesk.models.pending_attendance import PendingStatus
from clubdesk.models.vote import VoteChoice
from clubdesk.models.warning import WarningType
from clubdesk.services import attendance_workflow, ledger, votes, warning_engine

NOW = seoul(2026, 3, 15, 14, 0)


def sheet(*pairs, arrivals=None):
    arrivals = arrivals or {}
    return [
        {"member_id": m.id, "status": s.value, "arrival_time": arrivals.get(m.id)}
        for m, s in pairs
    ]


@pytest_asyncio.fixture
async def leader(make_member):
    return await make_member(username="leader", is_lead=True)


@pytest_asyncio.fixture
async def bob(make_member):
    return await make_member(username="bob")


@pytest_asyncio.fixture
async def carol(make_member):
    return await make_member(username="carol")


@pytest_asyncio.fixture
async def room(make_room, test_location, leader, bob, carol):
    return await make_room(leader, [leader, bob, carol], location=test_location)


class TestSubmission:

    @pytest.mark.asyncio
    async def test_leader_submits(self, db_session, room, leader, bob, carol):
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.ABSENT))
        )

        assert pending.status == PendingStatus.PENDING
        assert pending.meeting_date == MEETING_DATE
        assert len(pending.entries) == 3

    @pytest.mark.asyncio
    async def test_other_member_cannot_submit(self, db_session, room, leader, bob, carol):
        with pytest.raises(PermissionDeniedError):
            await attendance_workflow.create_pending(
                db_session, room.id, bob,
                sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
            )

    @pytest.mark.asyncio
    async def test_admin_may_submit(self, db_session, room, test_admin, leader, bob, carol):
        pending = await attendance_workflow.create_pending(
            db_session, room.id, test_admin,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )
        assert pending.leader_id == test_admin.id

    @pytest.mark.asyncio
    async def test_missing_member_rejected(self, db_session, room, leader, bob):
        with pytest.raises(DomainValidationError):
            await attendance_workflow.create_pending(
                db_session, room.id, leader,
                sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT))
            )

    @pytest.mark.asyncio
    async def test_stranger_rejected(self, db_session, room, leader, bob, carol, test_member):
        with pytest.raises(DomainValidationError):
            await attendance_workflow.create_pending(
                db_session, room.id, leader,
                sheet(
                    (leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT),
                    (carol, AttendanceStatus.PRESENT), (test_member, AttendanceStatus.PRESENT)
                )
            )

    @pytest.mark.asyncio
    async def test_duplicate_entry_rejected(self, db_session, room, leader, bob, carol):
        entries = sheet(
            (leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT),
            (carol, AttendanceStatus.PRESENT), (bob, AttendanceStatus.ABSENT)
        )
        with pytest.raises(DomainValidationError):
            await attendance_workflow.create_pending(db_session, room.id, leader, entries)

    @pytest.mark.asyncio
    async def test_late_needs_arrival_time(self, db_session, room, leader, bob, carol):
        with pytest.raises(DomainValidationError):
            await attendance_workflow.create_pending(
                db_session, room.id, leader,
                sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.LATE), (carol, AttendanceStatus.PRESENT))
            )

    @pytest.mark.asyncio
    async def test_bad_arrival_time(self, db_session, room, leader, bob, carol):
        with pytest.raises(DomainValidationError):
            await attendance_workflow.create_pending(
                db_session, room.id, leader,
                sheet(
                    (leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.LATE), (carol, AttendanceStatus.PRESENT),
                    arrivals={bob.id: "quarter past"}
                )
            )


class TestEditing:

    @pytest_asyncio.fixture
    async def pending(self, db_session, room, leader, bob, carol):
        return await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )

    @pytest.mark.asyncio
    async def test_leader_updates(self, db_session, pending, leader, bob, carol):
        updated = await attendance_workflow.update_pending(
            db_session, pending.id, leader.id,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.ABSENT), (carol, AttendanceStatus.PRESENT))
        )
        statuses = {e["member_id"]: e["status"] for e in updated.entries}
        assert statuses[bob.id] == "ABSENT"

    @pytest.mark.asyncio
    async def test_other_member_cannot_update(self, db_session, pending, leader, bob, carol):
        with pytest.raises(PermissionDeniedError):
            await attendance_workflow.update_pending(
                db_session, pending.id, bob.id,
                sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
            )

    @pytest.mark.asyncio
    async def test_leader_withdraws(self, db_session, pending, leader):
        await attendance_workflow.delete_pending(db_session, pending.id, leader.id)
        assert await attendance_workflow.list_pending(db_session) == []

    @pytest.mark.asyncio
    async def test_reviewed_sheet_is_frozen(self, db_session, pending, leader, test_admin):
        await attendance_workflow.reject_pending(db_session, pending.id, test_admin.id, "Wrong room", NOW)

        with pytest.raises(PolicyViolationError):
            await attendance_workflow.delete_pending(db_session, pending.id, leader.id)


class TestApproval:

    @pytest.mark.asyncio
    async def test_fees_applied(self, db_session, room, leader, bob, carol, test_admin):
        leader_id, bob_id, carol_id = leader.id, bob.id, carol.id
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet(
                (leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.LATE), (carol, AttendanceStatus.ABSENT),
                arrivals={bob_id: "10:35"}
            )
        )

        report = await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        assert report.status == PendingStatus.APPROVED
        assert report.records_created == 3
        assert report.errors == []
        # room fee for leader, room + late fee for bob, nothing for carol
        assert report.transactions_created == 3
        assert await ledger.get_balance(db_session, leader_id) == Decimal("-5000.00")
        assert await ledger.get_balance(db_session, bob_id) == Decimal("-12000.00")
        assert await ledger.get_balance(db_session, carol_id) == Decimal("0.00")

        bob_types = [t.transaction_type for t in await ledger.history(db_session, bob_id)]
        assert bob_types == [TransactionType.ROOM_FEE, TransactionType.LATE_FEE]

        stored = await attendance_workflow.get_pending(db_session, pending.id)
        assert stored.status == PendingStatus.APPROVED
        assert stored.reviewed_by_id == test_admin.id
        assert stored.approval_errors is None

    @pytest.mark.asyncio
    async def test_counters_updated(self, db_session, room, leader, bob, carol, test_admin):
        carol_id = carol.id
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.ABSENT))
        )
        await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        carol = await warning_engine._get_member(db_session, carol_id)
        assert carol.consecutive_absences == 1
        assert carol.attendance_rate == Decimal("0.00")

        bob = await warning_engine._get_member(db_session, bob.id)
        assert bob.attendance_rate == Decimal("100.00")
        assert bob.last_attendance_date == MEETING_DATE

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_going(self, db_session, room, leader, bob, carol, test_admin, monkeypatch):
        bob_id = bob.id
        original_debit = ledger.debit

        async def flaky_debit(db, member_id, *args, **kwargs):
            if member_id == bob_id:
                raise RuntimeError("ledger unavailable")
            return await original_debit(db, member_id, *args, **kwargs)

        monkeypatch.setattr(ledger, "debit", flaky_debit)

        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )
        report = await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        assert report.status == PendingStatus.APPROVED
        assert report.records_created == 3
        assert report.transactions_created == 2
        assert len(report.errors) == 1
        assert report.errors[0]["member_id"] == bob_id
        assert report.errors[0]["step"] == "room_fee"

        stored = await attendance_workflow.get_pending(db_session, pending.id)
        assert stored.status == PendingStatus.APPROVED
        assert stored.approval_errors[0]["member_id"] == bob_id
        assert await ledger.history(db_session, bob_id) == []

    @pytest.mark.asyncio
    async def test_absent_after_yes(self, db_session, room, leader, bob, carol, test_admin, test_location):
        carol_id = carol.id
        vote = await votes.create_vote(
            db_session, "Sunday", MEETING_DATE, seoul(2026, 3, 11, 19, 30), location_id=test_location.id
        )
        await votes.respond(db_session, vote.id, carol_id, VoteChoice.YES, seoul(2026, 3, 10, 9, 0))

        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.ABSENT))
        )
        await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        history = await ledger.history(db_session, carol_id)
        assert [t.transaction_type for t in history] == [TransactionType.CANCELLATION_PENALTY]
        assert history[0].amount == Decimal("-10000.00")

        types = [w.warning_type for w in await warning_engine.list_warnings(db_session, carol_id)]
        assert WarningType.CANCELLATION_PENALTY in types

    @pytest.mark.asyncio
    async def test_no_double_penalty_after_flip(self, db_session, room, leader, bob, carol, test_admin, test_location):
        carol_id = carol.id
        vote = await votes.create_vote(
            db_session, "Sunday", MEETING_DATE, seoul(2026, 3, 11, 19, 30), location_id=test_location.id
        )
        await votes.respond(db_session, vote.id, carol_id, VoteChoice.YES, seoul(2026, 3, 10, 9, 0))
        await votes.respond(db_session, vote.id, carol_id, VoteChoice.NO, seoul(2026, 3, 14, 9, 0))
        await votes.respond(db_session, vote.id, carol_id, VoteChoice.YES, seoul(2026, 3, 14, 10, 0))

        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.ABSENT))
        )
        await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        history = await ledger.history(db_session, carol_id)
        assert len(history) == 1
        assert history[0].amount == Decimal("-10000.00")

    @pytest.mark.asyncio
    async def test_no_show_is_not_penalised(self, db_session, room, leader, bob, carol, test_admin, test_location):
        carol_id = carol.id
        vote = await votes.create_vote(
            db_session, "Sunday", MEETING_DATE, seoul(2026, 3, 11, 19, 30), location_id=test_location.id
        )
        await votes.respond(db_session, vote.id, carol_id, VoteChoice.YES, seoul(2026, 3, 10, 9, 0))

        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.NO_SHOW))
        )
        await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        assert await ledger.history(db_session, carol_id) == []
        carol = await warning_engine._get_member(db_session, carol_id)
        assert carol.consecutive_absences == 1

    @pytest.mark.asyncio
    async def test_final_states(self, db_session, room, leader, bob, carol, test_admin):
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )
        await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)

        with pytest.raises(IllegalTransitionError):
            await attendance_workflow.approve_pending(db_session, pending.id, test_admin.id, NOW)
        with pytest.raises(IllegalTransitionError):
            await attendance_workflow.reject_pending(db_session, pending.id, test_admin.id, "Too late", NOW)

    @pytest.mark.asyncio
    async def test_reject_needs_reason(self, db_session, room, leader, bob, carol, test_admin):
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )
        with pytest.raises(DomainValidationError):
            await attendance_workflow.reject_pending(db_session, pending.id, test_admin.id, "  ", NOW)

        rejected = await attendance_workflow.reject_pending(db_session, pending.id, test_admin.id, "Wrong date", NOW)
        assert rejected.status == PendingStatus.REJECTED
        assert rejected.rejection_reason == "Wrong date"
        assert await attendance_workflow.list_attendance(db_session) == []


class TestDirectEntry:

    @pytest.mark.asyncio
    async def test_record_attendance(self, db_session, test_member, test_admin):
        outcome = await attendance_workflow.record_attendance(
            db_session, test_member.id, MEETING_DATE, AttendanceStatus.LATE, test_admin.id, arrival_time="10:15"
        )

        assert outcome.attendance_record_id is not None
        assert len(outcome.transaction_ids) == 2
        assert await ledger.get_balance(db_session, test_member.id) == Decimal("-10000.00")

    @pytest.mark.asyncio
    async def test_one_record_per_member_and_date(self, db_session, test_member, test_admin):
        await attendance_workflow.record_attendance(
            db_session, test_member.id, MEETING_DATE, AttendanceStatus.PRESENT, test_admin.id
        )
        with pytest.raises(PolicyViolationError):
            await attendance_workflow.record_attendance(
                db_session, test_member.id, MEETING_DATE, AttendanceStatus.ABSENT, test_admin.id
            )

    @pytest.mark.asyncio
    async def test_list_attendance(self, db_session, test_member, test_admin):
        await attendance_workflow.record_attendance(
            db_session, test_member.id, MEETING_DATE, AttendanceStatus.PRESENT, test_admin.id
        )
        await attendance_workflow.record_attendance(
            db_session, test_member.id, date(2026, 3, 22), AttendanceStatus.ABSENT, test_admin.id
        )

        records = await attendance_workflow.list_attendance(db_session, member_id=test_member.id)
        assert [r.meeting_date for r in records] == [date(2026, 3, 22), MEETING_DATE]
        assert len(await attendance_workflow.list_attendance(db_session, meeting_date=MEETING_DATE)) == 1


class TestApprovalAborts:

    @pytest.mark.asyncio
    async def test_duplicate_record_rolls_back_whole_sheet(
        self, db_engine, db_session, room, leader, bob, carol, test_admin
    ):
        pending = await attendance_workflow.create_pending(
            db_session, room.id, leader,
            sheet((leader, AttendanceStatus.PRESENT), (bob, AttendanceStatus.PRESENT), (carol, AttendanceStatus.PRESENT))
        )
        await attendance_workflow.record_attendance(
            db_session, carol.id, MEETING_DATE, AttendanceStatus.PRESENT, test_admin.id
        )
        pending_id, leader_id, bob_id, carol_id = pending.id, leader.id, bob.id, carol.id
        admin_id = test_admin.id
        await db_session.commit()

        factory = session_factory(db_engine)
        async with factory() as session:
            with pytest.raises(PolicyViolationError):
                await attendance_workflow.approve_pending(session, pending_id, admin_id, NOW)
            await session.rollback()

        async with factory() as session:
            stored = await attendance_workflow.get_pending(session, pending_id)
            assert stored.status == PendingStatus.PENDING
            assert stored.reviewed_by_id is None

            records = await attendance_workflow.list_attendance(session, meeting_date=MEETING_DATE)
            assert [r.member_id for r in records] == [carol_id]
            assert await ledger.history(session, leader_id) == []
            assert await ledger.history(session, bob_id) == []
            assert await ledger.get_balance(session, carol_id) == Decimal("-5000.00")
