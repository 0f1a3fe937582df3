"""
SettingRecorder -- records composite plywood assembly (setting) events.

Responsibility:
    Persists one immutable PlywoodSetting per assembly: the plywood type,
    the component quantities (short core, long core, face, back), the glue
    used and, optionally, the yield.  Hot-press later references the record
    by id as the description of what is being pressed.

Architecture position:
    Kernel > Services -- top-level component with its own unit of work.

Invariants enforced:
    P2 -- Deliberate non-conservation point.  Component quantities are
          informational and no lot is debited.  This exception is confined
          to this recorder; every other stage debits its source.
    P4 -- plywood_type is one of the configured types.

Failure modes:
    - ValidationError: unknown plywood type or a negative / non-numeric
      quantity.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID, uuid4

from plywood_kernel.db.engine import LedgerStore
from plywood_kernel.domain.clock import Clock, SystemClock
from plywood_kernel.domain.dtos import SettingInfo
from plywood_kernel.domain.validation import clean_note, to_quantity
from plywood_kernel.exceptions import ValidationError
from plywood_kernel.logging_config import LogContext, get_logger
from plywood_kernel.models.setting import PlywoodSetting
from plywood_kernel.models.stage_log import StageKind

logger = get_logger("services.setting_recorder")


class SettingRecorder:
    """Records plywood setting events without touching lots."""

    def __init__(
        self,
        store: LedgerStore,
        plywood_types: Iterable[str],
        clock: Clock | None = None,
    ):
        self._store = store
        self._plywood_types = frozenset(t.strip().upper() for t in plywood_types)
        self._clock = clock or SystemClock()

    @property
    def plywood_types(self) -> frozenset[str]:
        return self._plywood_types

    def record(
        self,
        plywood_type: str,
        short_core_quantity: Any,
        face_quantity: Any,
        back_quantity: Any,
        glue_quantity: Any,
        actor_id: UUID,
        long_core_quantity: Any = 0,
        accepted_quantity: Any = 0,
        rejected_quantity: Any = 0,
        note: str | None = None,
    ) -> SettingInfo:
        """
        Record one setting event.

        Args:
            plywood_type: Thickness class, e.g. "9MM".
            short_core_quantity: Short cores laid up.
            face_quantity: Face veneers used.
            back_quantity: Back veneers used.
            glue_quantity: Glue used.
            actor_id: Operator recording the setting.
            long_core_quantity: Long cores laid up.
            accepted_quantity: Layups passed on to the hot press.
            rejected_quantity: Layups scrapped at setting.
            note: Free-text remark.

        Returns:
            SettingInfo for the persisted record.
        """
        normalized_type = (plywood_type or "").strip().upper()
        if normalized_type not in self._plywood_types:
            raise ValidationError(
                f"Unknown plywood type {plywood_type!r}; expected one of "
                f"{', '.join(sorted(self._plywood_types))}",
                field="plywood_type",
            )

        quantities = {
            "short_core_quantity": to_quantity(short_core_quantity, "short_core_quantity"),
            "long_core_quantity": to_quantity(long_core_quantity, "long_core_quantity"),
            "face_quantity": to_quantity(face_quantity, "face_quantity"),
            "back_quantity": to_quantity(back_quantity, "back_quantity"),
            "glue_quantity": to_quantity(glue_quantity, "glue_quantity"),
            "accepted_quantity": to_quantity(accepted_quantity, "accepted_quantity"),
            "rejected_quantity": to_quantity(rejected_quantity, "rejected_quantity"),
        }

        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor_id),
            stage=StageKind.PLYWOOD_SETTING.value,
        ):
            with self._store.session_scope() as session:
                setting = PlywoodSetting(
                    plywood_type=normalized_type,
                    note=clean_note(note),
                    operator_id=actor_id,
                    created_at=self._clock.now(),
                    **quantities,
                )
                session.add(setting)
                session.flush()
                info = SettingInfo.from_model(setting)

            logger.info(
                "stage_recorded",
                extra={
                    "entry_id": str(info.id),
                    "plywood_type": info.plywood_type,
                    "glue_quantity": str(info.glue_quantity),
                    "accepted_quantity": str(info.accepted_quantity),
                },
            )
            return info
