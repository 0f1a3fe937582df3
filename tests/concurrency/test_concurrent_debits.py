"""
Concurrent debits against the same lot.

Threads start together behind a Barrier and each runs its own unit of
work.  On SQLite writers are serialized by BEGIN IMMEDIATE; on PostgreSQL
(DATABASE_URL set) by SELECT ... FOR UPDATE on the lot row.  Either way
the sum of successful debits never exceeds the lot's balance.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from threading import Barrier

from plywood_kernel.exceptions import InsufficientStockError
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.selectors.lot_selector import LotSelector
from plywood_kernel.selectors.stage_ledger_selector import StageLedgerSelector


def run_concurrently(count, fn):
    """Run ``fn`` in ``count`` threads released together; return outcomes."""
    barrier = Barrier(count)

    def worker(index):
        barrier.wait()
        try:
            return fn(index)
        except InsufficientStockError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


class TestConcurrentDebits:
    def test_two_full_debits_one_wins(self, store, topology, approved_lot, engine, machines, actor_id):
        """Two press-dry runs of 10 on a lot of 10: exactly one succeeds."""
        lot = approved_lot(quantity=Decimal("10"))

        outcomes = run_concurrently(
            2,
            lambda i: engine.press_dry(lot.id, machines[i].id, 10, 10, 0, actor_id),
        )

        failures = [o for o in outcomes if isinstance(o, InsufficientStockError)]
        successes = [o for o in outcomes if not isinstance(o, InsufficientStockError)]
        assert len(successes) == 1
        assert len(failures) == 1

        with store.session_scope() as s:
            assert LotSelector(s, topology).get(lot.id).quantity == Decimal("0")
            assert len(StageLedgerSelector(s).entries(StageKind.PRESS_DRY)) == 1

    def test_partial_debits_never_overdraw(self, store, topology, dried_lot, engine, actor_id):
        """Five repairs of 3 on a lot of 10: three succeed, 1 remains."""
        lot = dried_lot(quantity=Decimal("10"))

        outcomes = run_concurrently(5, lambda i: engine.repair(lot.id, 3, 3, 0, actor_id))

        successes = [o for o in outcomes if not isinstance(o, InsufficientStockError)]
        assert len(successes) == 3

        with store.session_scope() as s:
            assert LotSelector(s, topology).get(lot.id).quantity == Decimal("1")
            entries = StageLedgerSelector(s).entries(StageKind.REPAIR)
            produced = LotSelector(s, topology).list_lots(
                warehouse_id=topology.destination_id(StageKind.REPAIR)
            )
        assert len(entries) == 3
        assert sum(p.quantity for p in produced) == Decimal("9")
