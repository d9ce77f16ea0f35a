# accounting/__init__.py
"""
Accounting app - double-entry ledger for CareLedger.

This app provides:
- Account: Chart of accounts with hierarchy and signed running balance
- Transaction / TransactionEntry: Double-entry transactions (PENDING/POSTED/VOIDED)
- Invoice: Outstanding documents read by the aged reports
- Reconciliation: Bank reconciliation records

Commands (accounting.commands) handle all mutations and emit audit events.
Queries (accounting.queries) serve the read side.
"""
