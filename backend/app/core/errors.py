"""HTTP translation of coupon engine failures."""

from fastapi import HTTPException

from app.services.coupon_errors import (
    CodeGenerationExhaustedError,
    CouponAlreadyGeneratedError,
    CouponAlreadyUsedError,
    CouponCodeTakenError,
    CouponError,
    CouponNotFoundError,
    CouponNotOwnedError,
)

_STATUS_CODES: dict[type[CouponError], int] = {
    CouponNotFoundError: 404,
    CouponNotOwnedError: 403,
    CouponAlreadyUsedError: 409,
    CouponAlreadyGeneratedError: 409,
    CouponCodeTakenError: 409,
}


def coupon_http_error(exc: CouponError | CodeGenerationExhaustedError) -> HTTPException:
    """Map a coupon failure to the response the client should see.

    Anything not listed is a validation failure (400).
    """
    if isinstance(exc, CodeGenerationExhaustedError):
        return HTTPException(status_code=503, detail="Could not generate a unique coupon code")
    return HTTPException(status_code=_STATUS_CODES.get(type(exc), 400), detail=str(exc))
