"""
TransformationEngine -- atomic debit / ledger / credit for production stages.

Responsibility:
    Executes press-dry, repair, core-build, scarf-join and hot-press.  Each
    execution consumes input (a lot, or for hot-press a setting record),
    appends one stage ledger row and credits the accepted output at the
    stage's destination warehouse.

Architecture position:
    Kernel > Services -- top-level component.  Owns the unit of work
    through the injected ``LedgerStore``; composes LotService and
    StageLedgerWriter inside it.  Routes come from domain/topology.py.

Protocol (one transaction per call):
    1. Validate the request shape (no store access).
    2. Open the unit of work.
    3. Lock the source lot and check the stage predicate: kind, APPROVED
       status, stage source warehouse, quantity >= input.
    4. Debit the source with a guarded UPDATE.
    5. Append the ledger row.
    6. If accepted > 0, credit a new APPROVED lot (or, for hot-press, a
       finished good) at the destination.
    7. Commit.  Any exception rolls back everything.

Invariants enforced:
    E1 -- Conservation: quantity leaves a lot only through step 4 and is
          created only in step 6; accepted output never exceeds input under
          the strict yield policy.
    E2 -- Atomicity: a failed predicate leaves no ledger row and no balance
          change anywhere.
    E3 -- Concurrency: step 3 runs on a locked row and step 4 re-checks the
          balance in the database, so two debits that together exceed a
          lot cannot both succeed.

Failure modes:
    - ValidationError: malformed or out-of-range quantities.
    - InsufficientStockError: source lot absent from the source warehouse,
      wrong kind or status, or short of the requested input.
    - MachineNotFoundError / SettingNotFoundError: unknown reference.

Non-goals:
    - No internal retries.  The caller decides after correcting input.
    - The plywood setting stage is recorded by SettingRecorder, not here;
      it debits nothing.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from plywood_kernel.db.engine import LedgerStore
from plywood_kernel.domain.clock import Clock, SystemClock
from plywood_kernel.domain.dtos import (
    FinishedGoodInfo,
    LotInfo,
    StageEntryInfo,
    StageResult,
)
from plywood_kernel.domain.topology import WarehouseTopology, route
from plywood_kernel.domain.validation import (
    ZERO,
    YieldPolicy,
    clean_note,
    validate_stage_quantities,
)
from plywood_kernel.exceptions import (
    InsufficientStockError,
    MachineNotFoundError,
    SettingNotFoundError,
    ValidationError,
)
from plywood_kernel.logging_config import LogContext, get_logger
from plywood_kernel.models.finished_good import FinishedGood, FinishedGoodStatus
from plywood_kernel.models.lot import Lot, LotStatus
from plywood_kernel.models.machine import PressDryerMachine
from plywood_kernel.models.setting import PlywoodSetting
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.services.lot_service import LotService
from plywood_kernel.services.stage_ledger import StageLedgerWriter

logger = get_logger("services.transformation_engine")


class TransformationEngine:
    """
    Stage-transition engine.

    Contract:
        Every public stage method validates its input, runs steps 2-7 of
        the protocol in one ``session_scope()`` and returns a StageResult,
        or raises a typed PlywoodKernelError with nothing persisted.

    Guarantees:
        - At most one debit, one ledger row and one credit per call.
        - The produced lot inherits thickness, unit and supplier from the
          source lot.
    """

    def __init__(
        self,
        store: LedgerStore,
        topology: WarehouseTopology,
        clock: Clock | None = None,
        yield_policy: YieldPolicy = YieldPolicy.STRICT,
        default_grade: str = "A",
    ):
        self._store = store
        self._topology = topology
        self._clock = clock or SystemClock()
        self._yield_policy = YieldPolicy(yield_policy)
        self._default_grade = default_grade

    @property
    def yield_policy(self) -> YieldPolicy:
        return self._yield_policy

    # ------------------------------------------------------------------
    # Lot-consuming stages
    # ------------------------------------------------------------------

    def press_dry(
        self,
        lot_id: UUID,
        machine_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None = None,
    ) -> StageResult:
        """
        Dry a received CORE lot on a press-dryer.

        Source: APPROVED CORE at Receiving.  Output: CORE at
        Intermediate-1, annotated with the machine number.

        Raises:
            MachineNotFoundError: if ``machine_id`` is unknown.
        """

        def resolve(session: Session) -> tuple[dict[str, Any], str]:
            machine = session.get(PressDryerMachine, machine_id)
            if machine is None:
                raise MachineNotFoundError(str(machine_id))
            annotation = f"{route(StageKind.PRESS_DRY).annotation}, machine #{machine.number}"
            return {"machine_id": machine.id}, annotation

        return self._run_lot_stage(
            StageKind.PRESS_DRY,
            lot_id,
            input_quantity,
            accepted_quantity,
            rejected_quantity,
            actor_id,
            note,
            resolve,
        )

    def repair(
        self,
        lot_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None = None,
    ) -> StageResult:
        """Repair any approved material at Intermediate-1 into Intermediate-2."""
        return self._run_lot_stage(
            StageKind.REPAIR,
            lot_id,
            input_quantity,
            accepted_quantity,
            rejected_quantity,
            actor_id,
            note,
        )

    def core_build(
        self,
        lot_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None = None,
    ) -> StageResult:
        """Build 4x4 cores from CORE at Intermediate-1 into Intermediate-2."""
        return self._run_lot_stage(
            StageKind.CORE_BUILD,
            lot_id,
            input_quantity,
            accepted_quantity,
            rejected_quantity,
            actor_id,
            note,
        )

    def scarf_join(
        self,
        lot_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None = None,
        grain_direction: str | None = None,
    ) -> StageResult:
        """Scarf-join CORE at Intermediate-1 into Intermediate-2 with the grain reversed."""
        direction = clean_note(grain_direction)

        def resolve(session: Session) -> tuple[dict[str, Any], str]:
            return {"grain_direction": direction}, route(StageKind.SCARF_JOIN).annotation

        return self._run_lot_stage(
            StageKind.SCARF_JOIN,
            lot_id,
            input_quantity,
            accepted_quantity,
            rejected_quantity,
            actor_id,
            note,
            resolve,
        )

    # ------------------------------------------------------------------
    # Hot press
    # ------------------------------------------------------------------

    def hot_press(
        self,
        setting_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None = None,
        grade: str | None = None,
    ) -> StageResult:
        """
        Press a recorded plywood setting into finished goods.

        No lot is debited; the setting record describes what is pressed.
        Accepted output is shelved as one AVAILABLE finished good at the
        Finished warehouse.

        Raises:
            SettingNotFoundError: if ``setting_id`` is unknown.
        """
        stage = StageKind.HOT_PRESS
        quantity_in, accepted, rejected = validate_stage_quantities(
            stage, input_quantity, accepted_quantity, rejected_quantity, self._yield_policy
        )
        finished_grade = (grade or self._default_grade).strip()
        if not finished_grade:
            raise ValidationError("grade must not be blank", field="grade")

        with LogContext.bind(
            correlation_id=str(uuid4()), actor_id=str(actor_id), stage=stage.value
        ):
            with self._store.session_scope() as session:
                setting = session.get(PlywoodSetting, setting_id)
                if setting is None:
                    raise SettingNotFoundError(str(setting_id))

                entry = StageLedgerWriter(session, self._clock).append(
                    stage,
                    quantity_in,
                    accepted,
                    rejected,
                    operator_id=actor_id,
                    note=clean_note(note),
                    setting_id=setting.id,
                )

                good = None
                if accepted > ZERO:
                    good = self._shelve_finished_good(
                        session, setting, entry.id, accepted, finished_grade, actor_id
                    )

                result = StageResult(
                    entry=StageEntryInfo.from_model(entry),
                    finished_good=FinishedGoodInfo.from_model(good) if good else None,
                )
            return result

    def _shelve_finished_good(
        self,
        session: Session,
        setting: PlywoodSetting,
        entry_id: UUID,
        quantity: Decimal,
        grade: str,
        actor_id: UUID,
    ) -> FinishedGood:
        good = FinishedGood(
            plywood_type=setting.plywood_type,
            quantity=quantity,
            grade=grade,
            hot_press_entry_id=entry_id,
            warehouse_id=self._topology.destination_id(StageKind.HOT_PRESS),
            status=FinishedGoodStatus.AVAILABLE.value,
            created_by_id=actor_id,
            created_at=self._clock.now(),
        )
        session.add(good)
        session.flush()
        logger.info(
            "finished_good_shelved",
            extra={
                "finished_good_id": str(good.id),
                "plywood_type": good.plywood_type,
                "grade": grade,
                "quantity": str(quantity),
            },
        )
        return good

    # ------------------------------------------------------------------
    # Shared protocol
    # ------------------------------------------------------------------

    def _run_lot_stage(
        self,
        stage: StageKind,
        lot_id: UUID,
        input_quantity: Any,
        accepted_quantity: Any,
        rejected_quantity: Any,
        actor_id: UUID,
        note: str | None,
        resolve=None,
    ) -> StageResult:
        """
        Steps 1-7 for stages that consume a lot.

        ``resolve(session)`` returns the stage-specific ledger columns and
        the annotation for the produced lot; it may raise NotFound before
        the source lot is touched.
        """
        stage_route = route(stage)
        quantity_in, accepted, rejected = validate_stage_quantities(
            stage, input_quantity, accepted_quantity, rejected_quantity, self._yield_policy
        )

        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor_id),
            lot_id=str(lot_id),
            stage=stage.value,
        ):
            with self._store.session_scope() as session:
                references: dict[str, Any] = {}
                annotation = stage_route.annotation
                if resolve is not None:
                    references, annotation = resolve(session)

                lots = LotService(session, self._clock)
                source = lots.find_for_update(lot_id)
                self._check_stage_predicate(stage, lot_id, source, quantity_in)

                lots.debit(source, quantity_in, stage, actor_id)

                entry = StageLedgerWriter(session, self._clock).append(
                    stage,
                    quantity_in,
                    accepted,
                    rejected,
                    operator_id=actor_id,
                    note=clean_note(note),
                    source_lot_id=source.id,
                    **references,
                )

                produced = None
                if accepted > ZERO:
                    produced = lots.credit(
                        source,
                        accepted,
                        self._topology.destination_id(stage),
                        stage,
                        actor_id,
                        note=annotation,
                        kind=stage_route.output_kind,
                    )

                result = StageResult(
                    entry=StageEntryInfo.from_model(entry),
                    source_lot=LotInfo.from_model(source),
                    produced_lot=LotInfo.from_model(produced) if produced else None,
                )
            return result

    def _check_stage_predicate(
        self,
        stage: StageKind,
        lot_id: UUID,
        lot: Lot | None,
        quantity_in: Decimal,
    ) -> None:
        """
        Raise InsufficientStockError unless ``lot`` may feed ``stage``.

        An absent lot fails the same way as a short one: the operator is
        told the material is not in the source warehouse or not enough.
        """
        stage_route = route(stage)
        reason = None
        if lot is None:
            reason = "not_found"
        elif lot.status != LotStatus.APPROVED.value:
            reason = "not_approved"
        elif lot.warehouse_id != self._topology.source_id(stage):
            reason = "wrong_warehouse"
        elif stage_route.required_kind and lot.kind != stage_route.required_kind.value:
            reason = "wrong_kind"
        elif lot.quantity < quantity_in:
            reason = "short"

        if reason is None:
            return

        logger.info(
            "stage_rejected_insufficient_stock",
            extra={
                "reason": reason,
                "requested": str(quantity_in),
                "available": str(lot.quantity) if lot is not None else None,
            },
        )
        raise InsufficientStockError(
            lot_id=str(lot_id),
            stage=stage.value,
            requested=str(quantity_in),
            warehouse=self._topology.name_of(stage_route.source),
            kind=stage_route.required_kind.value if stage_route.required_kind else None,
        )
