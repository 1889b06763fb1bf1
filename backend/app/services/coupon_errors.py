"""Coupon business-rule failures.

Services raise these; routers translate them into HTTP responses.
"""


class CouponError(ValueError):
    """Base class for expected coupon outcomes reported back to the caller."""


class CouponNotFoundError(CouponError):
    pass


class CouponNotOwnedError(CouponError):
    pass


class CouponAlreadyUsedError(CouponError):
    pass


class CouponInvalidError(CouponError):
    """Coupon is expired or deactivated, or the order has nothing to discount."""


class CouponMinimumNotMetError(CouponError):
    pass


class CouponAlreadyGeneratedError(CouponError):
    """The order has already produced its reward coupon."""


class CouponNotEarnedError(CouponError):
    """The order does not qualify for a reward coupon."""


class CouponCodeTakenError(CouponError):
    pass


class CodeGenerationExhaustedError(RuntimeError):
    """No unused coupon code was found within the allowed attempts."""
