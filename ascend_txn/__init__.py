"""
Ascend Transactions - Retirement Plan Transaction Application Engine

Drives participant transactions (loans, withdrawals, distributions, rollovers,
transfers, rebalances) through validated multi-step applications, tracks their
draft/active/completed lifecycle and classifies their retirement impact.
"""

__version__ = "0.1.0"
__author__ = "Ascend Team"
