"""Payment Service — premium payment requests and their admin review.

Invariants:
    - New requests start pending
    - Only pending requests may be approved or rejected
    - Approval extends the payer's premium window in the same transaction
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.config import get_settings
from skillsharp.core.domain_types import PaymentStatus
from skillsharp.core.errors import BusinessRuleError, ResourceNotFoundError
from skillsharp.core.premium import extend_premium
from skillsharp.models.payment import PaymentRequest
from skillsharp.models.profile import Profile
from skillsharp.schemas.payment import PaymentRequestCreate

logger = logging.getLogger(__name__)


async def create_request(
    db: AsyncSession, user_id: UUID, body: PaymentRequestCreate,
) -> PaymentRequest:
    request = PaymentRequest(
        user_id=user_id,
        transaction_id=body.transaction_id,
        payment_method=body.payment_method,
        amount=body.amount if body.amount is not None else get_settings().subscription_price,
        status=PaymentStatus.PENDING.value,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info("Payment request submitted", extra={"user_id": user_id})
    return request


async def list_user_requests(db: AsyncSession, user_id: UUID) -> list[PaymentRequest]:
    result = await db.execute(
        select(PaymentRequest)
        .where(PaymentRequest.user_id == user_id)
        .order_by(PaymentRequest.created_at.desc()),
    )
    return list(result.scalars().all())


async def list_all_requests(
    db: AsyncSession, status: PaymentStatus | None = None,
) -> tuple[list[tuple[PaymentRequest, Profile]], dict[str, int]]:
    """All requests with the payer's profile, plus counts per status."""
    stmt = (
        select(PaymentRequest, Profile)
        .join(Profile, Profile.id == PaymentRequest.user_id)
        .order_by(PaymentRequest.created_at.desc())
    )
    if status is not None:
        stmt = stmt.where(PaymentRequest.status == status.value)
    rows = [(r, p) for r, p in (await db.execute(stmt)).all()]

    counts = {s.value: 0 for s in PaymentStatus}
    grouped = await db.execute(
        select(PaymentRequest.status, func.count(PaymentRequest.id))
        .group_by(PaymentRequest.status),
    )
    for value, n in grouped.all():
        counts[value] = int(n)
    return rows, counts


async def review_request(
    db: AsyncSession, request_id: UUID, approve: bool, reviewer_id: UUID,
    now: datetime | None = None,
) -> tuple[PaymentRequest, Profile]:
    now = now or datetime.now(timezone.utc)
    request = await db.get(PaymentRequest, request_id)
    if not request:
        raise ResourceNotFoundError("PaymentRequest", str(request_id))
    if request.status != PaymentStatus.PENDING.value:
        raise BusinessRuleError(
            f"Payment request is already {request.status}", "INVALID_PAYMENT_TRANSITION",
        )

    profile = await db.get(Profile, request.user_id)
    if approve:
        request.status = PaymentStatus.APPROVED.value
        profile.premium_until = extend_premium(
            profile.premium_until, now, get_settings().premium_period_days,
        )
    else:
        request.status = PaymentStatus.REJECTED.value
    request.reviewed_by = reviewer_id
    request.reviewed_at = now
    await db.commit()
    await db.refresh(request)
    await db.refresh(profile)
    logger.info(
        f"Payment request {request.status}",
        extra={"user_id": request.user_id},
    )
    return request, profile


async def count_pending(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(PaymentRequest.id))
        .where(PaymentRequest.status == PaymentStatus.PENDING.value),
    )
    return int(result.scalar_one())
