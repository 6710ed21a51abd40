"""
Utility functions module.

Date handling shared across the store, the engine and reporting.

Date Semantics:
- Transaction dates are date-only (no time of day)
- dateInitiated is stamped once by the store at draft creation
- dateCompleted is stamped only on the transition to completed
"""
