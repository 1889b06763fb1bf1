"""Tests for coupon code generation."""

import random
import re
from datetime import UTC, datetime

import pytest

from app.core.clock import FixedClock
from app.services.coupon_codes import (
    DEFAULT_PREFIX,
    MAX_CODE_ATTEMPTS,
    CouponCodeGenerator,
    tier_prefix,
)
from app.services.coupon_errors import CodeGenerationExhaustedError

# 1_768_471_200_123 ms since the epoch
CLOCK = FixedClock(datetime(2026, 1, 15, 10, 0, 0, 123000, tzinfo=UTC))


def _generator(exists=None, **kwargs):  # type: ignore[no-untyped-def]
    return CouponCodeGenerator(
        exists or (lambda code: False), CLOCK, random.Random(42), **kwargs
    )


class TestBuildCode:
    def test_default_prefix_format(self):
        code = _generator().build_code()
        assert re.fullmatch(r"SAVE[A-Z0-9]{4}\d{3}", code)
        assert code.endswith("123")

    def test_tier_prefix(self):
        assert tier_prefix(15) == "SAVE15"
        code = _generator().build_code(tier_prefix(15))
        assert code.startswith("SAVE15")
        assert len(code) == len("SAVE15") + 7

    def test_prefix_is_uppercased(self):
        assert _generator().build_code("promo").startswith("PROMO")

    def test_time_suffix_is_zero_padded(self):
        clock = FixedClock(datetime(2026, 1, 15, 10, 0, 0, 7000, tzinfo=UTC))
        generator = CouponCodeGenerator(lambda code: False, clock, random.Random(1))
        assert generator.build_code().endswith("007")

    def test_longest_prefix_fits(self):
        code = _generator().build_code("A" * 13)
        assert len(code) == 20

    def test_prefix_too_long_raises(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            _generator().build_code("A" * 14)

    def test_non_alphanumeric_prefix_raises(self):
        with pytest.raises(ValueError, match="letters and digits"):
            _generator().build_code("SAVE-")

    def test_same_seed_same_code(self):
        assert _generator().build_code() == _generator().build_code()


class TestGenerateUniqueCode:
    def test_returns_first_free_code(self):
        code = _generator().generate_unique_code()
        assert code.startswith(DEFAULT_PREFIX)

    def test_retries_on_collision(self):
        seen: list[str] = []

        def exists(code: str) -> bool:
            seen.append(code)
            return len(seen) < 3

        code = _generator(exists).generate_unique_code()
        assert len(seen) == 3
        assert code == seen[-1]

    def test_exhaustion_raises_after_max_attempts(self):
        calls: list[str] = []

        def exists(code: str) -> bool:
            calls.append(code)
            return True

        with pytest.raises(CodeGenerationExhaustedError):
            _generator(exists).generate_unique_code()
        assert len(calls) == MAX_CODE_ATTEMPTS

    def test_custom_attempt_limit(self):
        calls: list[str] = []

        def exists(code: str) -> bool:
            calls.append(code)
            return True

        with pytest.raises(CodeGenerationExhaustedError):
            _generator(exists, max_attempts=3).generate_unique_code()
        assert len(calls) == 3

    def test_exhaustion_is_not_a_value_error(self):
        assert not issubclass(CodeGenerationExhaustedError, ValueError)
