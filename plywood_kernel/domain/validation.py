"""
Quantity validation and yield arithmetic.

Responsibility:
    Pure checks run before any unit of work is opened: quantities are
    finite, non-negative Decimals; stage input is positive; and, depending
    on the yield policy, accepted + rejected does not exceed input.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    V1 -- No float ever reaches the ledger: every quantity is normalized to
          Decimal here.
    V2 -- Yield bound.  Under YieldPolicy.STRICT every stage enforces
          accepted + rejected <= input.  Under YieldPolicy.LEGACY only
          press-dry does, matching the behaviour of the first plant
          deployment.

Failure modes:
    - ValidationError for negative, non-finite, non-numeric or missing
      quantities, for more than nine decimal places, for zero stage
      input, and for a yield bound breach.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from plywood_kernel.db.base import QUANTITY_DECIMAL_PLACES
from plywood_kernel.exceptions import ValidationError
from plywood_kernel.models.stage_log import StageKind

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class YieldPolicy(str, Enum):
    """Which stages enforce accepted + rejected <= input."""

    STRICT = "strict"
    LEGACY = "legacy"

    def enforces(self, stage: StageKind) -> bool:
        if self is YieldPolicy.STRICT:
            return True
        return stage == StageKind.PRESS_DRY


def to_quantity(value: Any, field: str) -> Decimal:
    """
    Normalize an incoming quantity to a finite, non-negative Decimal with at
    most nine decimal places.

    Floats go through ``str()`` so 0.1 stays 0.1 rather than its binary
    expansion.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required and must be a number", field=field)
    try:
        if isinstance(value, float):
            quantity = Decimal(str(value))
        else:
            quantity = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} is not a valid number: {value!r}", field=field)

    if not quantity.is_finite():
        raise ValidationError(f"{field} must be finite", field=field)
    if quantity < ZERO:
        raise ValidationError(f"{field} must not be negative (got {quantity})", field=field)
    scaled = quantity.scaleb(QUANTITY_DECIMAL_PLACES)
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"{field} has more than {QUANTITY_DECIMAL_PLACES} decimal places (got {quantity})",
            field=field,
        )
    return quantity


def validate_stage_quantities(
    stage: StageKind,
    input_quantity: Any,
    accepted_quantity: Any,
    rejected_quantity: Any,
    policy: YieldPolicy,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Validate the request shape shared by every material-moving stage.

    Returns:
        (input, accepted, rejected) as Decimals.

    Raises:
        ValidationError: on any shape or range violation.
    """
    quantity_in = to_quantity(input_quantity, "input_quantity")
    accepted = to_quantity(accepted_quantity, "accepted_quantity")
    rejected = to_quantity(rejected_quantity, "rejected_quantity")

    if quantity_in <= ZERO:
        raise ValidationError("input_quantity must be greater than zero", field="input_quantity")

    if policy.enforces(stage) and accepted + rejected > quantity_in:
        raise ValidationError(
            f"Total output (accepted {accepted} + rejected {rejected}) must not "
            f"exceed input quantity {quantity_in}",
            field="accepted_quantity",
        )
    return quantity_in, accepted, rejected


def require_note(note: str | None, field: str = "note") -> str:
    """Reject a missing or blank note; return it stripped."""
    if note is None or not note.strip():
        raise ValidationError(f"{field} is required", field=field)
    return note.strip()


def clean_note(note: str | None) -> str | None:
    """Strip an optional note; blank becomes None."""
    if note is None:
        return None
    stripped = note.strip()
    return stripped or None


def yield_percentage(accepted: Decimal | None, rejected: Decimal | None) -> Decimal:
    """
    accepted / (accepted + rejected) x 100, rounded to 2 places.

    An empty divisor is zero yield, not an error.
    """
    accepted = accepted or ZERO
    rejected = rejected or ZERO
    total = accepted + rejected
    if total == ZERO:
        return ZERO.quantize(Decimal("0.01"))
    return (accepted / total * HUNDRED).quantize(Decimal("0.01"))


def per_unit(amount: Decimal | None, units: Decimal | None) -> Decimal:
    """amount / units rounded to 2 places; zero when nothing was produced."""
    amount = amount or ZERO
    units = units or ZERO
    if units == ZERO:
        return ZERO.quantize(Decimal("0.01"))
    return (amount / units).quantize(Decimal("0.01"))
