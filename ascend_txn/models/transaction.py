"""
Transaction data models for the participant transaction lifecycle.

This module defines the immutable transaction record kept by the store,
the closed enumerations for type, status and impact level, and the
field whitelists the application engine writes through.

ENGINE_MUTABLE_FIELDS covers more than the draft inputs (amount, status,
impact, completion date): it also admits the submission-time breakdown
(gross, net, fees, tax withholding), the irreversibility flag and the
recorded legal confirmations. The session writes that second group once,
when the final step is submitted, and never touches it afterwards.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Any, Optional

from ..utils.time import format_date


class TransactionType(str, Enum):
    """Supported participant transaction types."""
    LOAN = "loan"
    WITHDRAWAL = "withdrawal"
    DISTRIBUTION = "distribution"
    ROLLOVER = "rollover"
    TRANSFER = "transfer"
    REBALANCE = "rebalance"

    @classmethod
    def parse(cls, value: Any) -> Optional["TransactionType"]:
        """Return the matching member, or None for unsupported values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class TransactionStatus(str, Enum):
    """Transaction lifecycle statuses."""
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ImpactLevel(str, Enum):
    """Coarse retirement impact classification."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal for low < medium < high comparisons."""
        return _IMPACT_RANKS[self]


_IMPACT_RANKS = {ImpactLevel.LOW: 0, ImpactLevel.MEDIUM: 1, ImpactLevel.HIGH: 2}

# Types whose submission moves money out of the plan for good
IRREVERSIBLE_TYPES = frozenset({TransactionType.WITHDRAWAL, TransactionType.DISTRIBUTION})

# Types that carry a gross/net/fees/withholding breakdown
BREAKDOWN_TYPES = frozenset({
    TransactionType.LOAN,
    TransactionType.WITHDRAWAL,
    TransactionType.DISTRIBUTION,
})

# Fixed at creation; the store refuses to rewrite them
IMMUTABLE_FIELDS = frozenset({"id", "type", "date_initiated"})

# Fields the application engine may write after creation
ENGINE_MUTABLE_FIELDS = frozenset({
    "amount",
    "status",
    "retirement_impact",
    "date_completed",
    # written once, at submission
    "gross_amount",
    "net_amount",
    "fees",
    "tax_withholding",
    "is_irreversible",
    "legal_confirmations",
})

DRAFT_IMPACT_RATIONALE = "Draft transaction - impact will be calculated upon completion."


@dataclass(frozen=True)
class RetirementImpact:
    """Impact level plus a human-readable rationale."""
    level: ImpactLevel
    rationale: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "rationale": self.rationale}


@dataclass(frozen=True)
class Transaction:
    """A participant transaction as held by the store."""

    # Identity (fixed at creation)
    id: str
    type: TransactionType
    date_initiated: date

    # Lifecycle
    status: TransactionStatus = TransactionStatus.DRAFT
    date_completed: Optional[date] = None

    # Money (authoritative once submitted)
    amount: float = 0.0
    gross_amount: Optional[float] = None
    net_amount: Optional[float] = None
    fees: Optional[float] = None
    tax_withholding: Optional[float] = None

    # Submission outcome
    retirement_impact: RetirementImpact = field(
        default_factory=lambda: RetirementImpact(ImpactLevel.LOW, DRAFT_IMPACT_RATIONALE)
    )
    is_irreversible: bool = False
    legal_confirmations: tuple[str, ...] = ()

    # Display / filtering
    plan_id: Optional[str] = None
    display_name: Optional[str] = None
    account_type: Optional[str] = None

    @property
    def is_draft(self) -> bool:
        return self.status == TransactionStatus.DRAFT

    @property
    def has_breakdown(self) -> bool:
        """Whether this transaction type carries a gross/net breakdown."""
        return self.type in BREAKDOWN_TYPES

    def with_updates(self, **updates: Any) -> "Transaction":
        """Create a copy with ``updates`` applied."""
        return replace(self, **updates)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the portal's camelCase record layout."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "status": self.status.value,
            "amount": self.amount,
            "dateInitiated": format_date(self.date_initiated),
            "retirementImpact": self.retirement_impact.to_dict(),
            "isIrreversible": self.is_irreversible,
            "legalConfirmations": list(self.legal_confirmations),
        }
        optional = {
            "grossAmount": self.gross_amount,
            "netAmount": self.net_amount,
            "fees": self.fees,
            "taxWithholding": self.tax_withholding,
            "dateCompleted": format_date(self.date_completed),
            "planId": self.plan_id,
            "displayName": self.display_name,
            "accountType": self.account_type,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


TRANSACTION_FIELDS = frozenset(f.name for f in fields(Transaction))
