"""
Tests for presenter assignments and the late-topic penalty.
"""
import pytest
import pytest_asyncio
from decimal import Decimal

from conftest import MEETING_DATE, seoul
from clubdesk.core.exceptions import DomainValidationError, IllegalTransitionError, PermissionDeniedError
from clubdesk.models.financial_transaction import TransactionType
from clubdesk.models.presenter import PresenterStatus
from clubdesk.services import ledger, presenters, sweeps

TOPIC_DEADLINE = seoul(2026, 3, 12, 23, 59)
MATERIAL_DEADLINE = seoul(2026, 3, 14, 23, 59)


@pytest_asyncio.fixture
async def assignment(db_session, test_member, test_admin):
    return await presenters.assign_presenter(
        db_session, test_member.id, MEETING_DATE, TOPIC_DEADLINE, MATERIAL_DEADLINE,
        assigned_by_id=test_admin.id
    )


class TestAssignment:

    @pytest.mark.asyncio
    async def test_assign(self, assignment, test_member):
        assert assignment.status == PresenterStatus.NOT_SUBMITTED
        assert assignment.member_id == test_member.id
        assert assignment.penalty_applied is False

    @pytest.mark.asyncio
    async def test_material_deadline_before_topic(self, db_session, test_member):
        with pytest.raises(DomainValidationError):
            await presenters.assign_presenter(
                db_session, test_member.id, MEETING_DATE, MATERIAL_DEADLINE, TOPIC_DEADLINE
            )

    @pytest.mark.asyncio
    async def test_list_by_meeting(self, db_session, assignment):
        assert [p.id for p in await presenters.list_presenters(db_session, meeting_date=MEETING_DATE)] == [assignment.id]


class TestSubmission:

    @pytest.mark.asyncio
    async def test_topic_on_time(self, db_session, assignment, test_member):
        updated = await presenters.submit_topic(
            db_session, assignment.id, test_member, "Remote work", None, seoul(2026, 3, 12, 20, 0)
        )

        assert updated.status == PresenterStatus.TOPIC_SUBMITTED
        assert updated.penalty_applied is False
        assert await ledger.history(db_session, test_member.id) == []

    @pytest.mark.asyncio
    async def test_late_topic_is_charged(self, db_session, assignment, test_member):
        member_id = test_member.id
        updated = await presenters.submit_topic(
            db_session, assignment.id, test_member, "Remote work", "Pros and cons", seoul(2026, 3, 13, 9, 0)
        )

        assert updated.status == PresenterStatus.LATE_SUBMISSION
        assert updated.penalty_applied is True
        assert updated.penalty_amount == Decimal("5000.00")
        history = await ledger.history(db_session, member_id)
        assert [t.transaction_type for t in history] == [TransactionType.PRESENTER_PENALTY]

    @pytest.mark.asyncio
    async def test_only_presenter_submits(self, db_session, assignment, make_member):
        stranger = await make_member()
        with pytest.raises(PermissionDeniedError):
            await presenters.submit_topic(
                db_session, assignment.id, stranger, "Hijack", None, seoul(2026, 3, 12, 9, 0)
            )

    @pytest.mark.asyncio
    async def test_topic_once(self, db_session, assignment, test_member):
        await presenters.submit_topic(db_session, assignment.id, test_member, "One", None, seoul(2026, 3, 12, 9, 0))
        with pytest.raises(IllegalTransitionError):
            await presenters.submit_topic(db_session, assignment.id, test_member, "Two", None, seoul(2026, 3, 12, 10, 0))

    @pytest.mark.asyncio
    async def test_material_after_topic(self, db_session, assignment, test_member):
        with pytest.raises(IllegalTransitionError):
            await presenters.submit_material(
                db_session, assignment.id, test_member, "https://slides.example/1", seoul(2026, 3, 12, 9, 0)
            )

        await presenters.submit_topic(db_session, assignment.id, test_member, "One", None, seoul(2026, 3, 12, 9, 0))
        updated = await presenters.submit_material(
            db_session, assignment.id, test_member, "https://slides.example/1", seoul(2026, 3, 13, 9, 0)
        )
        assert updated.status == PresenterStatus.MATERIAL_SUBMITTED
        assert updated.material_url == "https://slides.example/1"


class TestDeadlineSweep:

    @pytest.mark.asyncio
    async def test_sweep_charges_once(self, db_session, assignment, test_member):
        member_id = test_member.id

        assert await sweeps.run_presenter_deadline_sweep(db_session, seoul(2026, 3, 12, 23, 0)) == []

        charged = await sweeps.run_presenter_deadline_sweep(db_session, seoul(2026, 3, 13, 1, 0))
        assert charged == [assignment.id]

        assert await sweeps.run_presenter_deadline_sweep(db_session, seoul(2026, 3, 13, 2, 0)) == []
        assert await ledger.get_balance(db_session, member_id) == Decimal("-5000.00")

    @pytest.mark.asyncio
    async def test_late_topic_after_sweep_not_charged_twice(self, db_session, assignment, test_member):
        member_id = test_member.id
        await sweeps.run_presenter_deadline_sweep(db_session, seoul(2026, 3, 13, 1, 0))

        updated = await presenters.submit_topic(
            db_session, assignment.id, test_member, "Finally", None, seoul(2026, 3, 13, 9, 0)
        )

        assert updated.status == PresenterStatus.LATE_SUBMISSION
        assert len(await ledger.history(db_session, member_id)) == 1
