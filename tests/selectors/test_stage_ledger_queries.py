"""
Tests for StageLedgerSelector and SettingSelector.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from plywood_kernel.exceptions import SettingNotFoundError, ValidationError
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.selectors.setting_selector import SettingSelector
from plywood_kernel.selectors.stage_ledger_selector import StageLedgerSelector

ONE_DAY = 24 * 60 * 60


@pytest.fixture
def ledger(store):
    def _query(method, *args, **kwargs):
        with store.session_scope() as s:
            return getattr(StageLedgerSelector(s), method)(*args, **kwargs)

    return _query


class TestEntries:
    def test_entries_newest_first_with_machine_filter(
        self, ledger, approved_lot, engine, machines, clock, actor_id
    ):
        first = approved_lot(quantity=Decimal("10"))
        second = approved_lot(quantity=Decimal("10"))
        engine.press_dry(first.id, machines[0].id, 10, 10, 0, actor_id)
        clock.advance(60)
        engine.press_dry(second.id, machines[1].id, 10, 8, 2, actor_id)

        all_entries = ledger("entries", StageKind.PRESS_DRY)
        machine_two = ledger("entries", "press_dry", machine_id=machines[1].id)

        assert [e.source_lot_id for e in all_entries] == [second.id, first.id]
        assert [e.source_lot_id for e in machine_two] == [second.id]

    def test_machine_filter_only_for_press_dry(self, ledger, topology):
        with pytest.raises(ValidationError) as exc_info:
            ledger("entries", StageKind.REPAIR, machine_id=uuid4())

        assert exc_info.value.field == "machine_id"

    def test_plywood_setting_has_no_stage_ledger(self, ledger, topology):
        with pytest.raises(ValidationError):
            ledger("entries", StageKind.PLYWOOD_SETTING)

    def test_hot_press_entries_reference_setting(self, ledger, recorded_setting, engine, actor_id):
        setting = recorded_setting()
        engine.hot_press(setting.id, 5, 5, 0, actor_id)

        entries = ledger("entries", StageKind.HOT_PRESS)

        assert entries[0].setting_id == setting.id
        assert entries[0].source_lot_id is None


class TestDailyYield:
    def test_press_dry_per_machine_per_day(
        self, ledger, approved_lot, engine, machines, clock, actor_id
    ):
        for quantity, accepted, machine in [(100, 90, 0), (50, 45, 0), (10, 8, 1)]:
            lot = approved_lot(quantity=Decimal(quantity))
            engine.press_dry(lot.id, machines[machine].id, quantity, accepted, quantity - accepted, actor_id)
        clock.advance(ONE_DAY)
        lot = approved_lot(quantity=Decimal("20"))
        engine.press_dry(lot.id, machines[0].id, 20, 20, 0, actor_id)

        rows = ledger("daily_yield", StageKind.PRESS_DRY)

        summary = [
            (r.day, r.machine_number, r.entry_count, r.accepted_total, r.rejected_total, r.yield_percentage)
            for r in rows
        ]
        assert summary == [
            (date(2024, 1, 2), 1, 1, Decimal("20"), Decimal("0"), Decimal("100.00")),
            (date(2024, 1, 1), 1, 2, Decimal("135"), Decimal("15"), Decimal("90.00")),
            (date(2024, 1, 1), 2, 1, Decimal("8"), Decimal("2"), Decimal("80.00")),
        ]

    def test_other_stages_one_row_per_day(self, ledger, dried_lot, engine, actor_id):
        lot = dried_lot(quantity=Decimal("30"))
        engine.repair(lot.id, 10, 7, 3, actor_id)
        engine.repair(lot.id, 20, 20, 0, actor_id)

        rows = ledger("daily_yield", "repair")

        assert len(rows) == 1
        assert rows[0].machine_id is None
        assert rows[0].input_total == Decimal("30")
        assert rows[0].yield_percentage == Decimal("90.00")

    def test_all_rejected_reports_zero_yield(self, ledger, dried_lot, engine, actor_id):
        lot = dried_lot(quantity=Decimal("5"))
        engine.core_build(lot.id, 5, 0, 5, actor_id)

        rows = ledger("daily_yield", StageKind.CORE_BUILD)

        assert rows[0].yield_percentage == Decimal("0.00")

    def test_empty_ledger(self, ledger, topology):
        assert ledger("daily_yield", StageKind.SCARF_JOIN) == []

    def test_date_range_excludes_other_days(self, ledger, dried_lot, engine, clock, actor_id):
        lot = dried_lot(quantity=Decimal("10"))
        engine.scarf_join(lot.id, 5, 5, 0, actor_id)
        clock.advance(ONE_DAY)
        engine.scarf_join(lot.id, 5, 4, 1, actor_id)

        rows = ledger("daily_yield", StageKind.SCARF_JOIN, start_date=date(2024, 1, 2))

        assert [r.day for r in rows] == [date(2024, 1, 2)]


class TestMachines:
    def test_machines_by_number(self, machines):
        assert [m.number for m in machines] == [1, 2, 3, 4]
        assert machines[0].name == "Pressdryer 1"


class TestSettingSelector:
    def test_get_and_recent(self, store, recorded_setting, clock):
        first = recorded_setting(plywood_type="3MM")
        clock.advance(5)
        second = recorded_setting(plywood_type="29MM")

        with store.session_scope() as s:
            selector = SettingSelector(s)
            fetched = selector.get(first.id)
            recent = selector.recent(limit=1)

        assert fetched.plywood_type == "3MM"
        assert [r.id for r in recent] == [second.id]

    def test_get_unknown(self, store):
        with store.session_scope() as s:
            with pytest.raises(SettingNotFoundError):
                SettingSelector(s).get(uuid4())
