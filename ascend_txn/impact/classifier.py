"""
Retirement impact classifier.

Classification is a pure function of (type, amount): each type has a band
of inclusive upper bounds for the low and medium levels, anything above is
high. Because bands are checked in ascending order the level can only grow
with the amount.
"""

from typing import Any, Optional

from ..config.defaults import ImpactBand, ImpactBands
from ..models.transaction import ImpactLevel, RetirementImpact, TransactionType

RATIONALE_TEMPLATES: dict[TransactionType, dict[ImpactLevel, str]] = {
    TransactionType.LOAN: {
        ImpactLevel.LOW: "Borrowing {amount} is modest. Repayments return principal and interest to your account.",
        ImpactLevel.MEDIUM: "Borrowing {amount} keeps part of your balance out of the market until it is repaid.",
        ImpactLevel.HIGH: "Borrowing {amount} removes a large share of your invested balance. Missed repayments may be treated as a taxable distribution.",
    },
    TransactionType.WITHDRAWAL: {
        ImpactLevel.LOW: "This withdrawal of {amount} has limited impact on your projected balance. Consider resuming or increasing contributions when possible.",
        ImpactLevel.MEDIUM: "This withdrawal of {amount} reduces your invested balance. Tax and penalty may apply; review withholding and consider timing.",
        ImpactLevel.HIGH: "This is a significant withdrawal of {amount}. Ensure you understand tax, penalty, and long-term impact on retirement goals.",
    },
    TransactionType.DISTRIBUTION: {
        ImpactLevel.LOW: "A distribution of {amount} has limited impact on your projected balance.",
        ImpactLevel.MEDIUM: "A distribution of {amount} reduces your invested balance and is subject to tax withholding.",
        ImpactLevel.HIGH: "A distribution of {amount} significantly reduces your retirement savings. Review tax treatment before submitting.",
    },
    TransactionType.ROLLOVER: {
        ImpactLevel.LOW: "Consolidating {amount} can simplify management. Funds will be invested per your allocation.",
        ImpactLevel.MEDIUM: "This rollover of {amount} will meaningfully increase your balance here. Direct rollover avoids tax and penalty.",
        ImpactLevel.HIGH: "This is a substantial rollover of {amount}. Once received, funds will be invested according to your current allocation.",
    },
    TransactionType.TRANSFER: {
        ImpactLevel.LOW: "Moving {amount} between investments changes a small part of your allocation.",
        ImpactLevel.MEDIUM: "Moving {amount} shifts your allocation noticeably. Review your risk profile.",
        ImpactLevel.HIGH: "Moving {amount} substantially changes your investment mix and risk exposure.",
    },
    TransactionType.REBALANCE: {
        ImpactLevel.LOW: "Rebalancing {amount} keeps your portfolio close to its target allocation.",
        ImpactLevel.MEDIUM: "Rebalancing {amount} realigns a meaningful portion of your portfolio.",
        ImpactLevel.HIGH: "Rebalancing {amount} significantly reshapes your portfolio allocation.",
    },
}

GENERIC_TEMPLATES = {
    ImpactLevel.LOW: "This transaction of {amount} has limited impact on your retirement savings.",
    ImpactLevel.MEDIUM: "This transaction of {amount} has a moderate impact on your retirement savings.",
    ImpactLevel.HIGH: "This transaction of {amount} has a significant impact on your retirement savings.",
}


def level_rank(level: Any) -> int:
    """Ordinal of an impact level (low=0, medium=1, high=2)."""
    return ImpactLevel(level).rank


def format_currency(amount: float) -> str:
    """Whole-dollar USD formatting used in rationales."""
    return f"${amount:,.0f}"


class ImpactClassifier:
    """Deterministic (type, amount) -> RetirementImpact classifier."""

    def __init__(self, bands: Optional[ImpactBands] = None):
        self.bands = bands or ImpactBands()

    def band_for(self, transaction_type: Any) -> ImpactBand:
        parsed = TransactionType.parse(transaction_type)
        key = parsed.value if parsed else str(transaction_type)
        return self.bands.for_type(key)

    def level(self, transaction_type: Any, amount: float) -> ImpactLevel:
        """
        Impact level for an amount.

        Raises:
            ValueError: if amount is negative
        """
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")

        band = self.band_for(transaction_type)
        if amount <= band.low_max:
            return ImpactLevel.LOW
        if amount <= band.medium_max:
            return ImpactLevel.MEDIUM
        return ImpactLevel.HIGH

    def classify(self, transaction_type: Any, amount: float) -> RetirementImpact:
        """Impact level plus a rationale filled from the type's template."""
        level = self.level(transaction_type, amount)
        parsed = TransactionType.parse(transaction_type)
        templates = RATIONALE_TEMPLATES.get(parsed, GENERIC_TEMPLATES) if parsed else GENERIC_TEMPLATES
        rationale = templates[level].format(amount=format_currency(amount))
        return RetirementImpact(level=level, rationale=rationale)
