"""Payment Routes — students submit payment proofs; admins approve or reject them."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user, require_admin
from skillsharp.api.serializers import iso, payment_dict, profile_brief
from skillsharp.core.domain_types import PaymentStatus
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.payment import PaymentRequestCreate, PaymentReview
from skillsharp.services import payments

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_payment(
    body: PaymentRequestCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return payment_dict(await payments.create_request(db, user.id, body))


@router.get("/mine")
async def my_payments(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    rows = await payments.list_user_requests(db, user.id)
    return {"payments": [payment_dict(r) for r in rows]}


@router.get("")
async def list_payments(
    status_filter: PaymentStatus | None = Query(None, alias="status"),
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows, counts = await payments.list_all_requests(db, status_filter)
    return {
        "payments": [{**payment_dict(r), "user": profile_brief(p)} for r, p in rows],
        "counts": counts,
    }


@router.post("/{request_id}/review")
async def review_payment(
    request_id: UUID,
    body: PaymentReview,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    request, profile = await payments.review_request(
        db, request_id, body.action == "approve", admin.id,
    )
    return {**payment_dict(request), "premium_until": iso(profile.premium_until)}
