"""
Suggestion service.

Any member may leave a suggestion; an admin marks it REVIEWED once read.
Marking an already reviewed suggestion REVIEWED again changes nothing.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.exceptions import DomainValidationError, IllegalTransitionError, NotFoundError
from clubdesk.models.suggestion import Suggestion, SuggestionStatus

logger = logging.getLogger(__name__)


async def get_suggestion(db: AsyncSession, suggestion_id: str) -> Suggestion:
    suggestion = await db.get(Suggestion, suggestion_id)
    if not suggestion:
        raise NotFoundError("Suggestion not found")
    return suggestion


async def create_suggestion(
    db: AsyncSession,
    member_id: str,
    title: str,
    content: str,
    image_url: Optional[str] = None,
) -> Suggestion:
    if not title or not title.strip():
        raise DomainValidationError("Suggestion title is required")
    if not content or not content.strip():
        raise DomainValidationError("Suggestion content is required")

    suggestion = Suggestion(
        member_id=member_id,
        title=title.strip(),
        content=content,
        image_url=image_url
    )
    db.add(suggestion)
    await db.flush()
    logger.info("Suggestion %s left by %s", suggestion.id, member_id)
    return suggestion


async def list_suggestions(
    db: AsyncSession,
    status: Optional[SuggestionStatus] = None,
) -> list[Suggestion]:
    query = select(Suggestion)
    if status is not None:
        query = query.where(Suggestion.status == status)
    result = await db.execute(query.order_by(Suggestion.created.desc()))
    return list(result.scalars().all())


async def set_status(
    db: AsyncSession,
    suggestion_id: str,
    status: SuggestionStatus,
    admin_id: str,
    now: datetime,
) -> Suggestion:
    suggestion = await get_suggestion(db, suggestion_id)
    if suggestion.status == status:
        return suggestion
    if not suggestion.can_transition_to(status):
        raise IllegalTransitionError(
            f"Cannot move suggestion from {suggestion.status.value} to {status.value}"
        )

    suggestion.status = status
    suggestion.reviewed_by_id = admin_id
    suggestion.reviewed_at = now
    await db.flush()
    logger.info("Suggestion %s marked %s by %s", suggestion_id, status.value, admin_id)
    return suggestion
