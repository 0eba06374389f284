"""
Presenter scheduling.

A presenter owes a topic by ``topic_deadline`` and material by
``material_deadline``. A missed topic deadline costs a flat penalty, charged
once, either when the late topic arrives or by the deadline sweep.
"""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import as_utc
from clubdesk.core.exceptions import (
    DomainValidationError,
    IllegalTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from clubdesk.models.financial_transaction import TransactionType
from clubdesk.models.member import Member
from clubdesk.models.presenter import PresenterAssignment, PresenterStatus
from clubdesk.services import fee_rules, ledger

logger = logging.getLogger(__name__)


async def get_presenter(db: AsyncSession, presenter_id: str) -> PresenterAssignment:
    result = await db.execute(
        select(PresenterAssignment)
        .where(PresenterAssignment.id == presenter_id)
        .execution_options(populate_existing=True)
    )
    presenter = result.scalar_one_or_none()
    if not presenter:
        raise NotFoundError("Presenter assignment not found")
    return presenter


async def list_presenters(
    db: AsyncSession,
    meeting_date: Optional[date] = None,
    member_id: Optional[str] = None,
) -> list[PresenterAssignment]:
    query = select(PresenterAssignment)
    if meeting_date:
        query = query.where(PresenterAssignment.meeting_date == meeting_date)
    if member_id:
        query = query.where(PresenterAssignment.member_id == member_id)
    result = await db.execute(query.order_by(PresenterAssignment.meeting_date.desc()))
    return list(result.scalars().all())


async def assign_presenter(
    db: AsyncSession,
    member_id: str,
    meeting_date: date,
    topic_deadline: datetime,
    material_deadline: Optional[datetime] = None,
    location_id: Optional[str] = None,
    assigned_by_id: Optional[str] = None,
) -> PresenterAssignment:
    member = await db.get(Member, member_id)
    if not member:
        raise NotFoundError("Member not found")
    if material_deadline and as_utc(material_deadline) < as_utc(topic_deadline):
        raise DomainValidationError("Material deadline cannot be before the topic deadline")

    presenter = PresenterAssignment(
        member_id=member_id,
        meeting_date=meeting_date,
        location_id=location_id,
        topic_deadline=as_utc(topic_deadline),
        material_deadline=as_utc(material_deadline) if material_deadline else None,
        status=PresenterStatus.NOT_SUBMITTED,
        assigned_by_id=assigned_by_id
    )
    db.add(presenter)
    await db.flush()
    logger.info("Assigned presenter %s for %s", member_id, meeting_date)
    return presenter


async def apply_late_topic_penalty(
    db: AsyncSession,
    presenter: PresenterAssignment,
    now: datetime,
) -> bool:
    """Charge the late-topic penalty unless it has been charged already."""
    if presenter.penalty_applied:
        return False
    amount = fee_rules.presenter_penalty(presenter.topic_submitted_at, presenter.topic_deadline, now)
    if not amount:
        return False

    presenter_id = presenter.id
    async with db.begin_nested():
        await ledger.debit(
            db,
            presenter.member_id,
            amount,
            TransactionType.PRESENTER_PENALTY,
            f"Presentation topic for {presenter.meeting_date.isoformat()} missed its deadline"
        )
        presenter = await get_presenter(db, presenter_id)
        presenter.penalty_applied = True
        presenter.penalty_amount = amount
        await db.flush()

    logger.info("Presenter penalty charged for assignment %s", presenter_id)
    return True


def _check_owner(presenter: PresenterAssignment, actor: Member) -> None:
    if presenter.member_id != actor.id and not actor.is_admin:
        raise PermissionDeniedError("Only the assigned presenter can submit")


async def submit_topic(
    db: AsyncSession,
    presenter_id: str,
    actor: Member,
    title: str,
    description: Optional[str],
    now: datetime,
) -> PresenterAssignment:
    presenter = await get_presenter(db, presenter_id)
    _check_owner(presenter, actor)
    if not title or not title.strip():
        raise DomainValidationError("Topic title is required")

    late = as_utc(now) > as_utc(presenter.topic_deadline)
    new_status = PresenterStatus.LATE_SUBMISSION if late else PresenterStatus.TOPIC_SUBMITTED
    if not presenter.can_transition_to(new_status):
        raise IllegalTransitionError(f"Topic already submitted ({presenter.status.value})")

    presenter.topic_title = title.strip()
    presenter.topic_description = description
    presenter.topic_submitted_at = as_utc(now)
    presenter.status = new_status
    await db.flush()

    if late:
        await apply_late_topic_penalty(db, presenter, now)
    return await get_presenter(db, presenter_id)


async def submit_material(
    db: AsyncSession,
    presenter_id: str,
    actor: Member,
    material_url: str,
    now: datetime,
) -> PresenterAssignment:
    presenter = await get_presenter(db, presenter_id)
    _check_owner(presenter, actor)
    if not material_url or not material_url.strip():
        raise DomainValidationError("Material URL is required")
    if not presenter.can_transition_to(PresenterStatus.MATERIAL_SUBMITTED):
        raise IllegalTransitionError(
            f"Cannot submit material while {presenter.status.value}"
        )

    presenter.material_url = material_url.strip()
    presenter.material_submitted_at = as_utc(now)
    presenter.status = PresenterStatus.MATERIAL_SUBMITTED
    await db.flush()
    return presenter
