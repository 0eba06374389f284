"""
Attendance approval workflow.

Room leaders submit a sheet for their room (PENDING). An admin approves it
(APPROVED) or rejects it (REJECTED); both are final. Approval turns every
entry into an AttendanceRecord and then applies fees, penalties and the
absence counter. Each of those side effects runs in its own SAVEPOINT: a
failure is logged and reported, and the rest of the batch carries on.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import as_utc, parse_clock_time
from clubdesk.core.exceptions import (
    DomainValidationError,
    IllegalTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PolicyViolationError,
)
from clubdesk.models.attendance_record import AttendanceRecord, AttendanceStatus
from clubdesk.models.financial_transaction import TransactionType
from clubdesk.models.member import Member
from clubdesk.models.pending_attendance import PendingAttendanceRecord, PendingStatus
from clubdesk.models.room_assignment import RoomAssignment
from clubdesk.models.vote import VoteChoice
from clubdesk.models.warning import WarningType
from clubdesk.services import fee_rules, ledger, members, votes, warning_engine
from clubdesk.services.locations import location_start_time

logger = logging.getLogger(__name__)


@dataclass
class EntryOutcome:
    member_id: str
    status: str
    attendance_record_id: Optional[str] = None
    transaction_ids: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)


@dataclass
class ApprovalReport:
    pending_id: Optional[str]
    status: PendingStatus = PendingStatus.PENDING
    outcomes: list[EntryOutcome] = field(default_factory=list)

    @property
    def records_created(self) -> int:
        return sum(1 for o in self.outcomes if o.attendance_record_id)

    @property
    def transactions_created(self) -> int:
        return sum(len(o.transaction_ids) for o in self.outcomes)

    @property
    def errors(self) -> list[dict]:
        return [error for o in self.outcomes for error in o.errors]


def _normalize_entries(entries: list[Any], assigned_ids: list[str]) -> list[dict]:
    """Validate a sheet against the room roster and return plain dicts."""
    normalized = []
    seen = set()
    assigned = set(assigned_ids)

    for raw in entries:
        if not isinstance(raw, dict):
            raw = raw.model_dump()
        member_id = raw.get("member_id")
        if not member_id:
            raise DomainValidationError("Every entry needs a member_id")
        if member_id not in assigned:
            raise DomainValidationError(f"Member {member_id} is not assigned to this room")
        if member_id in seen:
            raise DomainValidationError(f"Member {member_id} appears more than once")
        seen.add(member_id)

        try:
            status = AttendanceStatus(raw.get("status"))
        except ValueError as e:
            raise DomainValidationError(f"Invalid attendance status for {member_id}") from e

        arrival = (raw.get("arrival_time") or "").strip() or None
        if status == AttendanceStatus.LATE and not arrival:
            raise DomainValidationError(f"LATE entry for {member_id} needs an arrival time")
        if arrival:
            try:
                parse_clock_time(arrival)
            except ValueError as e:
                raise DomainValidationError(str(e)) from e

        normalized.append({
            "member_id": member_id,
            "status": status.value,
            "arrival_time": arrival,
            "notes": raw.get("notes"),
        })

    missing = [m for m in assigned_ids if m not in seen]
    if missing:
        raise DomainValidationError(f"Missing attendance for: {', '.join(missing)}")
    return normalized


async def get_pending(db: AsyncSession, pending_id: str) -> PendingAttendanceRecord:
    result = await db.execute(
        select(PendingAttendanceRecord)
        .where(PendingAttendanceRecord.id == pending_id)
        .execution_options(populate_existing=True)
    )
    pending = result.scalar_one_or_none()
    if not pending:
        raise NotFoundError("Pending attendance record not found")
    return pending


async def list_pending(
    db: AsyncSession,
    status: Optional[PendingStatus] = None,
    leader_id: Optional[str] = None,
) -> list[PendingAttendanceRecord]:
    query = select(PendingAttendanceRecord)
    if status:
        query = query.where(PendingAttendanceRecord.status == status)
    if leader_id:
        query = query.where(PendingAttendanceRecord.leader_id == leader_id)
    result = await db.execute(query.order_by(PendingAttendanceRecord.created.desc()))
    return list(result.scalars().all())


async def create_pending(
    db: AsyncSession,
    room_assignment_id: str,
    submitter: Member,
    entries: list[Any],
) -> PendingAttendanceRecord:
    assignment = await db.get(RoomAssignment, room_assignment_id)
    if not assignment:
        raise NotFoundError("Room assignment not found")
    if assignment.leader_id != submitter.id and not submitter.is_admin:
        raise PermissionDeniedError("Only the room leader can submit attendance for this room")

    normalized = _normalize_entries(entries, list(assignment.member_ids))

    pending = PendingAttendanceRecord(
        room_assignment_id=assignment.id,
        leader_id=submitter.id,
        meeting_date=assignment.meeting_date,
        entries=normalized,
        status=PendingStatus.PENDING
    )
    db.add(pending)
    await db.flush()
    logger.info(
        "Attendance sheet %s submitted for room %s by %s",
        pending.id, assignment.id, submitter.id
    )
    return pending


async def _get_editable(db: AsyncSession, pending_id: str, submitter_id: str) -> PendingAttendanceRecord:
    pending = await get_pending(db, pending_id)
    if pending.leader_id != submitter_id:
        raise PermissionDeniedError("Only the submitting leader can change this sheet")
    if pending.status != PendingStatus.PENDING:
        raise PolicyViolationError(f"Sheet is already {pending.status.value}")
    return pending


async def update_pending(
    db: AsyncSession,
    pending_id: str,
    submitter_id: str,
    entries: list[Any],
) -> PendingAttendanceRecord:
    pending = await _get_editable(db, pending_id, submitter_id)
    assignment = await db.get(RoomAssignment, pending.room_assignment_id)
    pending.entries = _normalize_entries(entries, list(assignment.member_ids))
    await db.flush()
    return pending


async def delete_pending(db: AsyncSession, pending_id: str, submitter_id: str) -> None:
    pending = await _get_editable(db, pending_id, submitter_id)
    await db.delete(pending)
    await db.flush()
    logger.info("Attendance sheet %s withdrawn by %s", pending_id, submitter_id)


async def _run_step(
    db: AsyncSession,
    outcome: EntryOutcome,
    step: str,
    action: Callable[[], Awaitable[list[str]]],
) -> None:
    """Run one side effect in a SAVEPOINT; record the failure and move on."""
    try:
        async with db.begin_nested():
            transaction_ids = await action()
        outcome.transaction_ids.extend(transaction_ids)
    except Exception as e:
        logger.exception("Attendance step %s failed for member %s", step, outcome.member_id)
        outcome.errors.append({
            "member_id": outcome.member_id,
            "step": step,
            "error": str(e) or e.__class__.__name__,
        })


async def _apply_entry(
    db: AsyncSession,
    entry: dict,
    meeting_date: date,
    start: time,
    admin_id: Optional[str],
    location_id: Optional[str] = None,
    pending_id: Optional[str] = None,
) -> EntryOutcome:
    member_id = entry["member_id"]
    status = AttendanceStatus(entry["status"])
    arrival = entry.get("arrival_time")
    outcome = EntryOutcome(member_id=member_id, status=status.value)

    # 1. the record itself; failures here abort the whole call
    duplicate = await db.execute(
        select(AttendanceRecord.id).where(
            AttendanceRecord.member_id == member_id,
            AttendanceRecord.meeting_date == meeting_date
        ).limit(1)
    )
    if duplicate.scalar_one_or_none():
        raise PolicyViolationError(
            f"Attendance for member {member_id} on {meeting_date.isoformat()} is already recorded"
        )

    record = AttendanceRecord(
        member_id=member_id,
        meeting_date=meeting_date,
        status=status,
        arrival_time=arrival,
        notes=entry.get("notes"),
        location_id=location_id,
        recorded_by_id=admin_id,
        pending_record_id=pending_id
    )
    db.add(record)
    await db.flush()
    record_id = record.id
    outcome.attendance_record_id = record_id
    day = meeting_date.isoformat()

    # 2. room fee
    async def charge_room_fee():
        amount = fee_rules.room_fee(status)
        if amount:
            txn = await ledger.debit(
                db, member_id, amount, TransactionType.ROOM_FEE, f"Room fee {day}",
                related_attendance_id=record_id, processed_by_id=admin_id
            )
            return [txn.id]
        return []

    # 3. late fee
    async def charge_late_fee():
        if status != AttendanceStatus.LATE:
            return []
        amount = fee_rules.late_fee(arrival, start)
        if amount:
            txn = await ledger.debit(
                db, member_id, amount, TransactionType.LATE_FEE, f"Late arrival {arrival} on {day}",
                related_attendance_id=record_id, processed_by_id=admin_id
            )
            return [txn.id]
        return []

    # 4. said YES, did not come
    async def charge_absence_penalty():
        if status != AttendanceStatus.ABSENT:
            return []
        responses = await votes.responses_for_meeting(db, member_id, meeting_date)
        voted_yes = any(r.response == VoteChoice.YES for r in responses)
        penalty = fee_rules.absence_penalty(status, voted_yes)
        if not penalty.charged:
            return []
        if any(r.cancellation_penalty > 0 for r in responses):
            logger.info(
                "Skipping absence penalty for %s on %s: cancellation already charged",
                member_id, day
            )
            return []
        txn = await ledger.debit(
            db, member_id, penalty.amount, TransactionType.CANCELLATION_PENALTY,
            f"Absent after voting YES for {day}",
            related_attendance_id=record_id, processed_by_id=admin_id
        )
        if penalty.issues_warning:
            await warning_engine.issue_warning(
                db, member_id, WarningType.CANCELLATION_PENALTY,
                f"Absent on {day} after voting YES", issued_by_id=admin_id
            )
        return [txn.id]

    # 5. absence streak and attendance rate
    async def update_counters():
        is_present = status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
        await warning_engine.update_consecutive_absences(db, member_id, is_present, meeting_date)
        await members.recalculate_attendance_rate(db, member_id)
        return []

    await _run_step(db, outcome, "room_fee", charge_room_fee)
    await _run_step(db, outcome, "late_fee", charge_late_fee)
    await _run_step(db, outcome, "absence_penalty", charge_absence_penalty)
    await _run_step(db, outcome, "absence_counter", update_counters)
    return outcome


async def approve_pending(
    db: AsyncSession,
    pending_id: str,
    admin_id: str,
    now: datetime,
) -> ApprovalReport:
    pending = await get_pending(db, pending_id)
    if not pending.can_transition_to(PendingStatus.APPROVED):
        raise IllegalTransitionError(f"Sheet is already {pending.status.value}")

    entries = [dict(e) for e in pending.entries]
    meeting_date = pending.meeting_date
    assignment = await db.get(RoomAssignment, pending.room_assignment_id)
    location_id = assignment.location_id if assignment else None
    start = await location_start_time(db, location_id)

    report = ApprovalReport(pending_id=pending_id)
    for entry in entries:
        outcome = await _apply_entry(
            db, entry, meeting_date, start, admin_id,
            location_id=location_id, pending_id=pending_id
        )
        report.outcomes.append(outcome)

    pending = await get_pending(db, pending_id)
    pending.status = PendingStatus.APPROVED
    pending.reviewed_by_id = admin_id
    pending.reviewed_at = as_utc(now)
    pending.approval_errors = report.errors or None
    await db.flush()
    report.status = PendingStatus.APPROVED

    logger.info(
        "Approved sheet %s: %d records, %d transactions, %d errors",
        pending_id, report.records_created, report.transactions_created, len(report.errors)
    )
    return report


async def reject_pending(
    db: AsyncSession,
    pending_id: str,
    admin_id: str,
    reason: str,
    now: datetime,
) -> PendingAttendanceRecord:
    pending = await get_pending(db, pending_id)
    if not pending.can_transition_to(PendingStatus.REJECTED):
        raise IllegalTransitionError(f"Sheet is already {pending.status.value}")
    if not reason or not reason.strip():
        raise DomainValidationError("A rejection reason is required")

    pending.status = PendingStatus.REJECTED
    pending.reviewed_by_id = admin_id
    pending.reviewed_at = as_utc(now)
    pending.rejection_reason = reason.strip()
    await db.flush()
    logger.info("Rejected sheet %s: %s", pending_id, reason)
    return pending


async def record_attendance(
    db: AsyncSession,
    member_id: str,
    meeting_date: date,
    status: AttendanceStatus,
    admin_id: str,
    arrival_time: Optional[str] = None,
    notes: Optional[str] = None,
    location_id: Optional[str] = None,
) -> EntryOutcome:
    """Direct admin entry for one member, through the same pipeline as approval."""
    await members.get_member(db, member_id)
    entry = _normalize_entries(
        [{"member_id": member_id, "status": status, "arrival_time": arrival_time, "notes": notes}],
        [member_id]
    )[0]
    start = await location_start_time(db, location_id)
    return await _apply_entry(db, entry, meeting_date, start, admin_id, location_id=location_id)


async def list_attendance(
    db: AsyncSession,
    member_id: Optional[str] = None,
    meeting_date: Optional[date] = None,
) -> list[AttendanceRecord]:
    query = select(AttendanceRecord)
    if member_id:
        query = query.where(AttendanceRecord.member_id == member_id)
    if meeting_date:
        query = query.where(AttendanceRecord.meeting_date == meeting_date)
    result = await db.execute(
        query.order_by(AttendanceRecord.meeting_date.desc(), AttendanceRecord.created)
    )
    return list(result.scalars().all())
