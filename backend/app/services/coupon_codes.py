"""Human-shareable coupon code generation."""

import logging
import random
import string
from collections.abc import Callable

from app.core.clock import Clock, system_clock
from app.models.coupon import CODE_MAX_LENGTH
from app.services.coupon_errors import CodeGenerationExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "SAVE"
MAX_CODE_ATTEMPTS = 10
RANDOM_PART_LENGTH = 4
TIME_SUFFIX_LENGTH = 3

_ALPHABET = string.ascii_uppercase + string.digits
_MAX_PREFIX_LENGTH = CODE_MAX_LENGTH - RANDOM_PART_LENGTH - TIME_SUFFIX_LENGTH


def tier_prefix(discount_value: object) -> str:
    """Prefix used for tiered rewards, e.g. ``SAVE15``."""
    return f"{DEFAULT_PREFIX}{discount_value}"


class CouponCodeGenerator:
    """Builds codes of the form PREFIX + 4 random characters + 3 time digits.

    Uniqueness is checked through ``exists`` before a code is returned. The
    check is an optimisation only; the unique index on ``coupons.code``
    remains the guarantee under concurrent issuance.
    """

    def __init__(
        self,
        exists: Callable[[str], bool],
        clock: Clock = system_clock,
        rng: random.Random | None = None,
        max_attempts: int = MAX_CODE_ATTEMPTS,
    ):
        self.exists = exists
        self.clock = clock
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def _normalize_prefix(self, prefix: str | None) -> str:
        normalized = (prefix or DEFAULT_PREFIX).strip().upper()
        if not normalized.isascii() or not normalized.isalnum():
            raise ValueError("Coupon code prefix may only contain letters and digits")
        if len(normalized) > _MAX_PREFIX_LENGTH:
            raise ValueError(f"Coupon code prefix cannot exceed {_MAX_PREFIX_LENGTH} characters")
        return normalized

    def build_code(self, prefix: str | None = None) -> str:
        """Build one candidate code without checking uniqueness."""
        normalized = self._normalize_prefix(prefix)
        random_part = "".join(self.rng.choice(_ALPHABET) for _ in range(RANDOM_PART_LENGTH))
        now = self.clock.now()
        millis = int(now.timestamp()) * 1000 + now.microsecond // 1000
        time_suffix = f"{millis % 10**TIME_SUFFIX_LENGTH:0{TIME_SUFFIX_LENGTH}d}"
        return f"{normalized}{random_part}{time_suffix}"

    def generate_unique_code(self, prefix: str | None = None) -> str:
        """Return a code not yet used by any coupon.

        Raises:
            CodeGenerationExhaustedError: If every attempt collided.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.build_code(prefix)
            if not self.exists(code):
                return code
            logger.debug("Coupon code %s already taken (attempt %d)", code, attempt)

        raise CodeGenerationExhaustedError(
            f"Could not generate a unique coupon code after {self.max_attempts} attempts"
        )
