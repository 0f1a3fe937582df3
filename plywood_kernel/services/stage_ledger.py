"""
StageLedgerWriter -- append-only writer for the per-stage ledgers.

Responsibility:
    Inserts exactly one ledger row per successful stage execution, in the
    caller's transaction, stamped by the injected clock.

Architecture position:
    Kernel > Services.  Called by TransformationEngine between the debit
    and the credit.  The only code path that creates stage log rows.

Invariants enforced:
    S1 -- Rows are inserted, never updated (db/immutability.py refuses
          UPDATE / DELETE).
    S2 -- The row is flushed inside the engine's unit of work, so a later
          failure in the same execution rolls it back with the debit.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.stage_log import STAGE_LOG_MODELS, StageKind, StageLogBase
from plywood_kernel.services.base import BaseService

logger = get_logger("services.stage_ledger")


class StageLedgerWriter(BaseService[StageLogBase]):
    """Writes stage ledger rows."""

    def append(
        self,
        stage: StageKind,
        input_quantity: Decimal,
        accepted_quantity: Decimal,
        rejected_quantity: Decimal,
        operator_id: UUID,
        note: str | None = None,
        **references: Any,
    ) -> StageLogBase:
        """
        Insert one ledger row for ``stage``.

        ``references`` carries the stage-specific columns: ``source_lot_id``
        and ``machine_id`` for press-dry, ``setting_id`` for hot-press,
        ``grain_direction`` for scarf-join.
        """
        model = STAGE_LOG_MODELS[stage]
        entry = model(
            input_quantity=input_quantity,
            accepted_quantity=accepted_quantity,
            rejected_quantity=rejected_quantity,
            operator_id=operator_id,
            note=note,
            created_at=self.clock.now(),
            **references,
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "stage_recorded",
            extra={
                "stage": stage.value,
                "entry_id": str(entry.id),
                "input_quantity": str(input_quantity),
                "accepted_quantity": str(accepted_quantity),
                "rejected_quantity": str(rejected_quantity),
            },
        )
        return entry
