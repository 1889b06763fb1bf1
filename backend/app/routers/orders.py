"""Order API endpoints."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin, get_current_user
from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.errors import coupon_http_error
from app.models.order import Order
from app.models.user import User
from app.repositories.applied_coupon_repository import AppliedCouponRepository
from app.repositories.order_repository import OrderRepository
from app.schemas.order import (
    AppliedCouponResponse,
    GeneratedCouponResponse,
    OrderCreate,
    OrderItemResponse,
    OrderPayRequest,
    OrderResponse,
)
from app.services.coupon_errors import CodeGenerationExhaustedError, CouponError
from app.services.coupon_service import CouponRewardService
from app.services.order_service import OrderService
from app.tasks import enqueue_coupon_email

router = APIRouter()


def _order_response(db: Session, order: Order) -> OrderResponse:
    response = OrderResponse.model_validate(order)
    response.items = [
        OrderItemResponse.model_validate(item)
        for item in OrderRepository(db).get_items(order.id)  # type: ignore[arg-type]
    ]
    applied = AppliedCouponRepository(db).get_by_order_id(order.id)  # type: ignore[arg-type]
    if applied:
        response.applied_coupon = AppliedCouponResponse.model_validate(applied)
    return response


def _get_visible_order(db: Session, order_id: UUID, user: User) -> Order:
    order = OrderRepository(db).get_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to access this order")
    return order


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=201,
    summary="Create order",
    responses={
        400: {"description": "Coupon is expired, deactivated or below its minimum"},
        401: {"description": "Unauthorized"},
        403: {"description": "Coupon does not belong to the requester"},
        404: {"description": "Coupon not found"},
        409: {"description": "Coupon already used"},
        422: {"description": "Validation error"},
    },
)
async def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> OrderResponse:
    """Place an order, optionally redeeming one coupon."""
    service = OrderService(db, clock)
    try:
        order = service.create_order(user.id, data)  # type: ignore[arg-type]
    except CouponError as exc:
        raise coupon_http_error(exc) from exc
    return _order_response(db, order)


@router.get(
    "/",
    response_model=list[OrderResponse],
    summary="List orders",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
    },
)
async def list_orders(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    status: str | None = Query(default=None),
    is_paid: bool | None = Query(default=None),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[OrderResponse]:
    """List every order with optional filters."""
    repo = OrderRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(status=status, is_paid=is_paid))
    orders = repo.get_all(
        skip=skip,
        limit=limit,
        order_by=order_by or "created_at:desc",
        status=status,
        is_paid=is_paid,
    )
    return [_order_response(db, order) for order in orders]


@router.get(
    "/mine",
    response_model=list[OrderResponse],
    summary="List my orders",
    responses={401: {"description": "Unauthorized"}},
)
async def list_my_orders(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[OrderResponse]:
    """List the requester's orders, newest first."""
    orders = OrderRepository(db).get_by_user_id(user.id, skip=skip, limit=limit)  # type: ignore[arg-type]
    return [_order_response(db, order) for order in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Not authorized to access this order"},
        404: {"description": "Order not found"},
    },
)
async def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    """Get an order owned by the requester (admins see all orders)."""
    return _order_response(db, _get_visible_order(db, order_id, user))


@router.put(
    "/{order_id}/pay",
    response_model=OrderResponse,
    summary="Mark order paid",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Not authorized to access this order"},
        404: {"description": "Order not found"},
    },
)
async def pay_order(
    order_id: UUID,
    data: OrderPayRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> OrderResponse:
    """Confirm payment and issue the reward coupon the order earned, if any.

    The coupon email is queued after the response is sent.
    """
    order = _get_visible_order(db, order_id, user)
    order, coupon = OrderService(db, clock).mark_paid(order, data.to_payment_result())
    if coupon:
        background_tasks.add_task(enqueue_coupon_email, coupon.id, str(coupon.trigger_amount))
    return _order_response(db, order)


@router.put(
    "/{order_id}/deliver",
    response_model=OrderResponse,
    summary="Mark order delivered",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Order not found"},
    },
)
async def deliver_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
    clock: Clock = Depends(get_clock),
) -> OrderResponse:
    """Mark an order delivered."""
    order = _get_visible_order(db, order_id, admin)
    return _order_response(db, OrderService(db, clock).mark_delivered(order))


@router.post(
    "/{order_id}/generate-coupon",
    response_model=GeneratedCouponResponse,
    summary="Generate reward coupon",
    responses={
        400: {"description": "Order is unpaid or below the reward minimum"},
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Order not found"},
        409: {"description": "Order already generated its coupon"},
        503: {"description": "Could not generate a unique coupon code"},
    },
)
async def generate_coupon(
    order_id: UUID,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
    clock: Clock = Depends(get_clock),
) -> GeneratedCouponResponse:
    """Issue the reward coupon for a paid order that did not receive one."""
    order = _get_visible_order(db, order_id, admin)
    try:
        coupon = CouponRewardService(db, clock).force_generate_for_order(order)
    except (CouponError, CodeGenerationExhaustedError) as exc:
        raise coupon_http_error(exc) from exc

    background_tasks.add_task(enqueue_coupon_email, coupon.id, str(coupon.trigger_amount))
    return GeneratedCouponResponse(
        message="Coupon generated successfully",
        code=str(coupon.code),
        discount_value=coupon.discount_value,  # type: ignore[arg-type]
        expires_at=coupon.expires_at,  # type: ignore[arg-type]
    )
