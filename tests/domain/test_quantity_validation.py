"""
Pure-layer tests for quantity validation and yield arithmetic.
"""

from decimal import Decimal

import pytest

from plywood_kernel.domain.validation import (
    YieldPolicy,
    clean_note,
    per_unit,
    require_note,
    to_quantity,
    validate_stage_quantities,
    yield_percentage,
)
from plywood_kernel.exceptions import ValidationError
from plywood_kernel.models.stage_log import StageKind


class TestToQuantity:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (10, Decimal("10")),
            ("2.5", Decimal("2.5")),
            (0.1, Decimal("0.1")),
            (Decimal("3.25"), Decimal("3.25")),
            (0, Decimal("0")),
        ],
    )
    def test_accepts_numbers(self, value, expected):
        assert to_quantity(value, "quantity") == expected

    @pytest.mark.parametrize("value", [None, True, "abc", -1, "-0.5", float("inf"), float("nan"), [1]])
    def test_rejects_bad_values(self, value):
        with pytest.raises(ValidationError) as exc_info:
            to_quantity(value, "quantity")

        assert exc_info.value.field == "quantity"

    @pytest.mark.parametrize("value", [Decimal("1e-10"), "0.1234567891", 2.0000000001])
    def test_rejects_more_than_nine_places(self, value):
        with pytest.raises(ValidationError, match="decimal places"):
            to_quantity(value, "quantity")

    def test_nine_places_and_trailing_zeros_accepted(self):
        assert to_quantity("0.000000001", "quantity") == Decimal("0.000000001")
        assert to_quantity("1.50000000000", "quantity") == Decimal("1.5")


class TestValidateStageQuantities:
    def test_returns_decimals(self):
        result = validate_stage_quantities(StageKind.PRESS_DRY, 100, "90", 10.0, YieldPolicy.STRICT)

        assert result == (Decimal("100"), Decimal("90"), Decimal("10.0"))

    def test_zero_input_refused(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_stage_quantities(StageKind.REPAIR, 0, 0, 0, YieldPolicy.STRICT)

        assert exc_info.value.field == "input_quantity"

    def test_over_yield_message(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_stage_quantities(StageKind.PRESS_DRY, 100, 60, 50, YieldPolicy.STRICT)

        assert "must not exceed input quantity 100" in str(exc_info.value)

    @pytest.mark.parametrize("stage", [StageKind.REPAIR, StageKind.CORE_BUILD, StageKind.SCARF_JOIN, StageKind.HOT_PRESS])
    def test_legacy_skips_bound_outside_press_dry(self, stage):
        result = validate_stage_quantities(stage, 10, 10, 5, YieldPolicy.LEGACY)

        assert result[1] + result[2] == Decimal("15")

    def test_policy_from_string(self):
        assert YieldPolicy("legacy") is YieldPolicy.LEGACY


class TestNotes:
    def test_require_note_strips(self):
        assert require_note("  warped ") == "warped"

    @pytest.mark.parametrize("note", [None, "", "  "])
    def test_require_note_refuses_blank(self, note):
        with pytest.raises(ValidationError):
            require_note(note)

    def test_clean_note(self):
        assert clean_note("  ") is None
        assert clean_note(None) is None
        assert clean_note(" ok ") == "ok"


class TestYieldArithmetic:
    @pytest.mark.parametrize(
        "accepted,rejected,expected",
        [
            (Decimal("90"), Decimal("10"), Decimal("90.00")),
            (Decimal("2"), Decimal("1"), Decimal("66.67")),
            (Decimal("0"), Decimal("5"), Decimal("0.00")),
            (Decimal("0"), Decimal("0"), Decimal("0.00")),
            (None, None, Decimal("0.00")),
        ],
    )
    def test_yield_percentage(self, accepted, rejected, expected):
        assert yield_percentage(accepted, rejected) == expected

    def test_per_unit(self):
        assert per_unit(Decimal("20"), Decimal("10")) == Decimal("2.00")
        assert per_unit(Decimal("20"), Decimal("0")) == Decimal("0.00")
        assert per_unit(None, None) == Decimal("0.00")
