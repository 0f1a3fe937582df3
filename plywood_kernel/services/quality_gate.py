"""
QualityGate -- approve / reject decision point for received lots.

Responsibility:
    Moves lots waiting at Receiving from AWAITING_INSPECTION to APPROVED or
    REJECTED, one at a time or in a best-effort batch, and exposes the FIFO
    inspection queue.

Architecture position:
    Kernel > Services -- top-level component.  Owns its unit of work through
    the injected ``LedgerStore``; delegates the locked status change to
    LotService.

Invariants enforced:
    Q1 -- Only AWAITING_INSPECTION lots can be decided.  A lot already
          decided raises LotAlreadyInspectedError (single) or is skipped
          (batch); it is never flipped a second time.
    Q2 -- Inspection never changes a lot's quantity or warehouse.
    Q3 -- A rejection always carries a note.

Failure modes:
    - LotNotFoundError: unknown lot id.
    - LotAlreadyInspectedError: lot exists but was already decided.
    - ValidationError: rejection without a note, or (batch) an unknown
      disposition.

Non-goals:
    - Does NOT move approved material anywhere; approved lots stay at
      Receiving until a press-dry consumes them.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID, uuid4

from plywood_kernel.db.engine import LedgerStore
from plywood_kernel.domain.clock import Clock, SystemClock
from plywood_kernel.domain.dtos import (
    BatchInspectionResult,
    Disposition,
    InspectionItem,
    InspectionItemResult,
    InspectionOutcome,
    LotInfo,
)
from plywood_kernel.domain.topology import WarehouseTopology
from plywood_kernel.domain.validation import clean_note, require_note
from plywood_kernel.exceptions import NotFoundError, ValidationError
from plywood_kernel.logging_config import LogContext, get_logger
from plywood_kernel.models.lot import LotStatus
from plywood_kernel.selectors.lot_selector import LotSelector
from plywood_kernel.services.lot_service import LotService

logger = get_logger("services.quality_gate")

_STATUS_FOR = {
    Disposition.APPROVE: LotStatus.APPROVED,
    Disposition.REJECT: LotStatus.REJECTED,
}


def _parse_disposition(value) -> Disposition:
    try:
        return Disposition(value)
    except ValueError:
        raise ValidationError(
            f"Unknown disposition: {value!r}; expected APPROVE or REJECT",
            field="disposition",
        )


class QualityGate:
    """
    Quality control for received lots.

    Contract:
        Each public mutating call is one transaction.  ``batch()`` applies
        every item whose preconditions hold and skips the rest; the call
        itself succeeds as long as the store commits.
    """

    def __init__(
        self,
        store: LedgerStore,
        topology: WarehouseTopology,
        clock: Clock | None = None,
    ):
        self._store = store
        self._topology = topology
        self._clock = clock or SystemClock()

    def approve(self, lot_id: UUID, actor_id: UUID, note: str | None = None) -> LotInfo:
        """
        Approve a lot awaiting inspection.

        The lot's existing note is kept when ``note`` is omitted.
        """
        with LogContext.bind(
            correlation_id=str(uuid4()), actor_id=str(actor_id), lot_id=str(lot_id)
        ):
            with self._store.session_scope() as session:
                lot = LotService(session, self._clock).set_inspection_status(
                    lot_id, LotStatus.APPROVED, actor_id, clean_note(note)
                )
                info = LotInfo.from_model(lot)
            logger.info("lot_approved", extra={"quantity": str(info.quantity)})
            return info

    def reject(self, lot_id: UUID, actor_id: UUID, note: str | None) -> LotInfo:
        """
        Reject a lot awaiting inspection.

        Raises:
            ValidationError: if ``note`` is missing or blank.
        """
        reason = require_note(note)
        with LogContext.bind(
            correlation_id=str(uuid4()), actor_id=str(actor_id), lot_id=str(lot_id)
        ):
            with self._store.session_scope() as session:
                lot = LotService(session, self._clock).set_inspection_status(
                    lot_id, LotStatus.REJECTED, actor_id, reason
                )
                info = LotInfo.from_model(lot)
            logger.info("lot_rejected", extra={"reason": reason})
            return info

    def batch(
        self,
        items: Iterable[InspectionItem],
        actor_id: UUID,
    ) -> BatchInspectionResult:
        """
        Decide many lots in one transaction, best-effort.

        Items that fail a precondition (unknown lot, already decided,
        unknown disposition, rejection without note) are skipped and reported with the error
        code; the remaining items are applied.

        Returns:
            BatchInspectionResult with one entry per item, in input order.
        """
        results: list[InspectionItemResult] = []
        with LogContext.bind(correlation_id=str(uuid4()), actor_id=str(actor_id)):
            with self._store.session_scope() as session:
                lots = LotService(session, self._clock)
                for item in items:
                    disposition = item.disposition
                    try:
                        disposition = _parse_disposition(item.disposition)
                        if disposition == Disposition.REJECT:
                            note = require_note(item.note)
                        else:
                            note = clean_note(item.note)
                        lot = lots.set_inspection_status(
                            item.lot_id, _STATUS_FOR[disposition], actor_id, note
                        )
                    except (NotFoundError, ValidationError) as exc:
                        logger.info(
                            "inspection_item_skipped",
                            extra={
                                "lot_id": str(item.lot_id),
                                "disposition": str(getattr(disposition, "value", disposition)),
                                "reason_code": exc.code,
                            },
                        )
                        results.append(
                            InspectionItemResult(
                                lot_id=item.lot_id,
                                disposition=disposition,
                                outcome=InspectionOutcome.SKIPPED,
                                reason_code=exc.code,
                            )
                        )
                        continue

                    results.append(
                        InspectionItemResult(
                            lot_id=item.lot_id,
                            disposition=disposition,
                            outcome=InspectionOutcome.APPLIED,
                            lot=LotInfo.from_model(lot),
                        )
                    )

            result = BatchInspectionResult(items=tuple(results))
            logger.info(
                "inspection_batch_applied",
                extra={
                    "item_count": len(result.items),
                    "applied_count": result.applied_count,
                    "skipped_count": len(result.skipped),
                },
            )
            return result

    def pending(self) -> list[LotInfo]:
        """Lots awaiting inspection at Receiving, oldest first."""
        with self._store.session_scope() as session:
            return LotSelector(session, self._topology).pending_inspection()
