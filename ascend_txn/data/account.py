"""
Participant account snapshot provider.

Balances are supplied by an external data source; the engine only reads
them (withdrawal caps and loan limits are derived from the vested balance).
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class AccountSnapshot:
    """Point-in-time balances for a participant's plan account."""
    vested_balance: float
    total_balance: float = 0.0
    ytd_contribution: float = 0.0
    plan_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.vested_balance < 0:
            raise ValueError("vested_balance must be non-negative")
        if self.total_balance and self.total_balance < self.vested_balance:
            raise ValueError("total_balance cannot be less than vested_balance")


class AccountProvider(Protocol):
    """Anything that can hand out an account snapshot for a plan."""

    def snapshot(self, plan_id: Optional[str] = None) -> AccountSnapshot:
        ...


class StaticAccountProvider:
    """Serves fixed snapshots, keyed by plan id with a default fallback."""

    def __init__(self, default: AccountSnapshot,
                 per_plan: Optional[dict[str, AccountSnapshot]] = None):
        self.default = default
        self.per_plan = dict(per_plan or {})

    def snapshot(self, plan_id: Optional[str] = None) -> AccountSnapshot:
        if plan_id is not None and plan_id in self.per_plan:
            return self.per_plan[plan_id]
        return self.default
