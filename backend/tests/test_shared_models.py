"""Tests for shared model utilities, coupon code normalisation and the clock."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from app.core.clock import FixedClock, SystemClock, ensure_aware, get_clock
from app.models.coupon import normalize_code
from app.models.shared import UUIDType, generate_uuid, to_money


class TestGenerateUuid:
    def test_returns_uuid4(self):
        result = generate_uuid()
        assert isinstance(result, uuid.UUID)
        assert result.version == 4

    def test_returns_unique_values(self):
        results = {generate_uuid() for _ in range(10)}
        assert len(results) == 10


class TestUUIDType:
    def test_cache_ok(self):
        assert UUIDType.cache_ok is True

    def test_process_bind_param_none(self):
        t = UUIDType()
        assert t.process_bind_param(None, None) is None

    def test_process_bind_param_uuid(self):
        t = UUIDType()
        val = uuid.uuid4()
        assert t.process_bind_param(val, None) == str(val)

    def test_process_bind_param_string(self):
        t = UUIDType()
        val = "12345678-1234-5678-1234-567812345678"
        assert t.process_bind_param(val, None) == val

    def test_process_result_value_string(self):
        t = UUIDType()
        val = "12345678-1234-5678-1234-567812345678"
        result = t.process_result_value(val, None)
        assert isinstance(result, uuid.UUID)
        assert str(result) == val


class TestToMoney:
    def test_rounds_half_up(self):
        assert to_money(Decimal("0.125")) == Decimal("0.13")
        assert to_money(Decimal("0.124")) == Decimal("0.12")

    def test_float_uses_decimal_representation(self):
        assert to_money(2.675) == Decimal("2.68")

    def test_none_is_zero(self):
        assert to_money(None) == Decimal("0.00")

    def test_int(self):
        assert str(to_money(5)) == "5.00"


class TestNormalizeCode:
    def test_strips_and_uppercases(self):
        assert normalize_code("  save10abc123 ") == "SAVE10ABC123"

    @pytest.mark.parametrize("code", ["ABC12", "A" * 21, "SAVE-1234", "SAVE 1234", "SAVÉ12345"])
    def test_rejects_invalid_codes(self, code):
        with pytest.raises(ValueError):
            normalize_code(code)

    def test_length_bounds_are_inclusive(self):
        assert normalize_code("ABC123") == "ABC123"
        assert normalize_code("A" * 20) == "A" * 20


class TestClock:
    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None
        assert isinstance(get_clock(), SystemClock)

    def test_fixed_clock_advances(self):
        clock = FixedClock(datetime(2026, 1, 1, tzinfo=UTC))
        clock.advance(days=10, hours=1)
        assert clock.now() == datetime(2026, 1, 11, 1, tzinfo=UTC)

    def test_fixed_clock_treats_naive_as_utc(self):
        clock = FixedClock(datetime(2026, 1, 1))
        assert clock.now().tzinfo == UTC

    def test_ensure_aware_keeps_offset(self):
        value = datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=1)
        assert ensure_aware(value) is value
