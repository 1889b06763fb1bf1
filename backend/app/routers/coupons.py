"""Coupon API endpoints."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin, get_current_user
from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.errors import coupon_http_error
from app.models.coupon import Coupon, CouponState
from app.models.shared import to_money
from app.models.user import User
from app.repositories.coupon_repository import CouponRepository
from app.repositories.user_repository import UserRepository
from app.schemas.coupon import (
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponCreate,
    CouponResponse,
    CouponStatsOverview,
    CouponStatsResponse,
    CouponSummary,
    CouponTierStats,
    CouponValidationResponse,
    DiscountResultResponse,
    MyCouponsResponse,
    UseCouponResponse,
)
from app.services.coupon_errors import CodeGenerationExhaustedError, CouponError
from app.services.coupon_lifecycle import CouponLifecycleService, coupon_state, is_coupon_valid
from app.services.coupon_service import CouponRewardService
from app.services.discount_calculator import calculate_discount

router = APIRouter()

_STATE_MESSAGES = {
    CouponState.USED: "Coupon already used",
    CouponState.EXPIRED: "Coupon expired",
    CouponState.DEACTIVATED: "Coupon deactivated",
}


def _get_coupon_for_user(db: Session, code: str, user: User, allow_admin: bool) -> Coupon:
    coupon = CouponRepository(db).get_by_code(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    if coupon.created_for != user.id and not (allow_admin and user.is_admin):
        raise HTTPException(status_code=403, detail="This coupon does not belong to you")
    return coupon


@router.get(
    "/",
    response_model=list[CouponResponse],
    summary="List coupons",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
    },
)
async def list_coupons(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    is_used: bool | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    tier: str | None = Query(default=None),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[Coupon]:
    """List all coupons with optional filters."""
    repo = CouponRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(is_used=is_used, is_active=is_active, tier=tier)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        order_by=order_by or "created_at:desc",
        is_used=is_used,
        is_active=is_active,
        tier=tier,
    )


@router.post(
    "/",
    response_model=CouponResponse,
    status_code=201,
    summary="Create coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "User not found"},
        409: {"description": "Coupon with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_coupon(
    data: CouponCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
    clock: Clock = Depends(get_clock),
) -> Coupon:
    """Issue a coupon by hand to a user."""
    if not UserRepository(db).get_by_id(data.created_for):
        raise HTTPException(status_code=404, detail="User not found")

    try:
        return CouponRewardService(db, clock).create_manual_coupon(data)
    except (CouponError, CodeGenerationExhaustedError) as exc:
        raise coupon_http_error(exc) from exc


@router.get(
    "/mine",
    response_model=MyCouponsResponse,
    summary="List my coupons",
    responses={401: {"description": "Unauthorized"}},
)
async def list_my_coupons(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> MyCouponsResponse:
    """List the requester's coupons, split into redeemable and not."""
    coupons = CouponRepository(db).get_by_owner(user.id)  # type: ignore[arg-type]
    now = clock.now()
    valid = [CouponResponse.model_validate(c) for c in coupons if is_coupon_valid(c, now)]
    expired = [CouponResponse.model_validate(c) for c in coupons if not is_coupon_valid(c, now)]
    return MyCouponsResponse(
        valid=valid,
        expired=expired,
        total=len(coupons),
        valid_count=len(valid),
    )


@router.get(
    "/stats",
    response_model=CouponStatsResponse,
    summary="Coupon statistics",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
    },
)
async def coupon_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
    clock: Clock = Depends(get_clock),
) -> CouponStatsResponse:
    """Issued, used, active and lapsed counts, overall and per reward tier."""
    repo = CouponRepository(db)
    now = clock.now()
    total = repo.count()
    used = repo.count(is_used=True)
    usage_rate = to_money(Decimal(used) * 100 / Decimal(total)) if total else Decimal("0.00")

    return CouponStatsResponse(
        overview=CouponStatsOverview(
            total=total,
            used=used,
            active=repo.count_active(now),
            expired=repo.count_expired_unused(now),
            usage_rate=usage_rate,
        ),
        by_tier=[
            CouponTierStats(
                tier=row.tier,
                count=row.count,
                used=row.used,
                avg_trigger_amount=(
                    to_money(row.avg_trigger_amount)
                    if row.avg_trigger_amount is not None
                    else None
                ),
            )
            for row in repo.tier_stats()
        ],
    )


@router.get(
    "/validate/{code}",
    response_model=CouponValidationResponse,
    summary="Validate coupon",
    responses={
        400: {"description": "Coupon is used, expired or deactivated"},
        401: {"description": "Unauthorized"},
        403: {"description": "Coupon does not belong to the requester"},
        404: {"description": "Coupon not found"},
    },
)
async def validate_coupon(
    code: str,
    order_total: Decimal | None = Query(default=None, gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> CouponValidationResponse | JSONResponse:
    """Check whether a coupon can be redeemed, previewing its discount.

    Administrators may validate any coupon; other users only their own.
    """
    coupon = _get_coupon_for_user(db, code, user, allow_admin=True)
    now = clock.now()
    summary = CouponSummary.model_validate(coupon)

    state = coupon_state(coupon, now)
    if state != CouponState.ACTIVE:
        body = CouponValidationResponse(
            message=_STATE_MESSAGES[state], valid=False, coupon=summary
        )
        return JSONResponse(status_code=400, content=body.model_dump(mode="json"))

    discount = None
    if order_total is not None:
        discount = DiscountResultResponse.model_validate(
            calculate_discount(coupon, order_total, now)
        )
    return CouponValidationResponse(
        message="Coupon is valid", valid=True, coupon=summary, discount=discount
    )


@router.post(
    "/apply",
    response_model=ApplyCouponResponse,
    summary="Preview coupon discount",
    responses={
        400: {"description": "Coupon cannot be applied to this total"},
        401: {"description": "Unauthorized"},
        403: {"description": "Coupon does not belong to the requester"},
        404: {"description": "Coupon not found"},
        422: {"description": "Validation error"},
    },
)
async def apply_coupon(
    data: ApplyCouponRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> ApplyCouponResponse:
    """Price a coupon against an order total without redeeming it."""
    coupon = _get_coupon_for_user(db, data.code, user, allow_admin=False)
    result = calculate_discount(coupon, data.order_total, clock.now())
    if not result.is_valid:
        raise HTTPException(status_code=400, detail=result.reason)

    return ApplyCouponResponse(
        message="Coupon applied successfully",
        code=str(coupon.code),
        description=str(coupon.description),
        original_total=data.order_total,
        discount=result.discount,
        final_total=result.final_total,  # type: ignore[arg-type]
        discount_value=result.discount_value,  # type: ignore[arg-type]
    )


@router.put(
    "/{coupon_id}/use",
    response_model=UseCouponResponse,
    summary="Mark coupon used",
    responses={
        400: {"description": "Coupon is expired or deactivated"},
        401: {"description": "Unauthorized"},
        403: {"description": "Coupon does not belong to the requester"},
        404: {"description": "Coupon not found"},
        409: {"description": "Coupon already used"},
    },
)
async def use_coupon(
    coupon_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> UseCouponResponse:
    """Redeem a coupon. A coupon can be used exactly once."""
    try:
        coupon = CouponLifecycleService(db, clock).mark_used(coupon_id, user.id)  # type: ignore[arg-type]
    except CouponError as exc:
        raise coupon_http_error(exc) from exc
    return UseCouponResponse(
        message="Coupon marked as used", coupon=CouponResponse.model_validate(coupon)
    )


@router.put(
    "/{code}/deactivate",
    response_model=CouponResponse,
    summary="Deactivate coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Coupon not found"},
    },
)
async def deactivate_coupon(
    code: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
    clock: Clock = Depends(get_clock),
) -> Coupon:
    """Switch a coupon off so it can no longer be redeemed."""
    try:
        return CouponLifecycleService(db, clock).deactivate(code)
    except CouponError as exc:
        raise coupon_http_error(exc) from exc
