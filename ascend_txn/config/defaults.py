"""Default plan rules for the transaction application engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoanRules:
    """401(k) participant loan limits."""
    min_amount: float = 1_000.0                      # Plan minimum loan
    max_absolute: float = 50_000.0                   # IRS cap regardless of balance
    max_pct_of_vested: float = 0.5                   # Cap as fraction of vested balance
    term_years_min: int = 1
    term_years_max: int = 5
    origination_fee_pct: float = 0.01                # Deducted from the disbursement


@dataclass(frozen=True)
class WithholdingRules:
    """Amount limits and default tax withholding for money leaving the plan."""
    min_amount: float = 100.0
    max_pct_of_vested: float = 0.25
    default_federal_rate: float = 20.0               # Percent
    default_state_rate: float = 5.0                  # Percent


@dataclass(frozen=True)
class ComplianceRules:
    """Acknowledgements required before a loan can be reviewed."""
    require_spousal_consent: bool = True


@dataclass(frozen=True)
class ImpactBand:
    """Inclusive upper bounds for the low and medium impact levels."""
    low_max: float
    medium_max: float


@dataclass(frozen=True)
class ImpactBands:
    """Impact bands per transaction type."""
    loan: ImpactBand = ImpactBand(low_max=5_000.0, medium_max=25_000.0)
    withdrawal: ImpactBand = ImpactBand(low_max=5_000.0, medium_max=15_000.0)
    distribution: ImpactBand = ImpactBand(low_max=5_000.0, medium_max=15_000.0)
    rollover: ImpactBand = ImpactBand(low_max=10_000.0, medium_max=50_000.0)
    transfer: ImpactBand = ImpactBand(low_max=25_000.0, medium_max=100_000.0)
    rebalance: ImpactBand = ImpactBand(low_max=25_000.0, medium_max=100_000.0)

    def for_type(self, transaction_type: str) -> ImpactBand:
        """Band for a type value; unknown types use the withdrawal band."""
        return getattr(self, transaction_type, self.withdrawal)


@dataclass(frozen=True)
class PlanRules:
    """Complete rule set for one plan."""
    loan: LoanRules
    withdrawal: WithholdingRules
    distribution: WithholdingRules
    compliance: ComplianceRules
    impact: ImpactBands


def get_default_rules() -> PlanRules:
    """Get the default plan rules instance."""
    return PlanRules(
        loan=LoanRules(),
        withdrawal=WithholdingRules(),
        distribution=WithholdingRules(max_pct_of_vested=1.0),
        compliance=ComplianceRules(),
        impact=ImpactBands(),
    )
