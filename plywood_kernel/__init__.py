"""
Plywood Kernel - lot ledger and stage-transition engine.

A transactional bookkeeping core for plywood production with:
- Lot store with non-negative balances
- Append-only stage ledgers (press-dry, repair, core-build, scarf-join, hot-press)
- Quality gate for received lots
- Atomic debit / ledger / credit per stage execution
- Static warehouse topology resolved at startup
"""

__version__ = "0.1.0"
