"""Tests for pure step validators."""

import pytest

from ascend_txn.models.payloads import payload_for
from ascend_txn.steps import validators as v


def loan(**data):
    return payload_for("loan", data)


class TestLoanValidators:
    """Test loan step validators."""

    def validate_basics(self, payload):
        return v.validate_loan_basics(payload, min_amount=1000, max_amount=50000,
                                      term_years_min=1, term_years_max=5)

    def test_basics_accepts_amount_in_range(self):
        """Test an amount within limits passes."""
        assert self.validate_basics(loan(loanAmount=10000, termYears=3)) == []

    def test_basics_accepts_numeric_strings(self):
        """Test formatted currency strings are understood."""
        assert self.validate_basics(loan(loanAmount="$10,000")) == []

    @pytest.mark.parametrize("amount", [None, "", "abc", 999, 50001, "nan", "inf", float("nan")])
    def test_basics_rejects_bad_amounts(self, amount):
        """Test missing, non-numeric and out-of-range amounts fail."""
        issues = self.validate_basics(loan(loanAmount=amount))

        assert [issue.field for issue in issues] == ["loan_amount"]

    @pytest.mark.parametrize("term", [0, 6, 2.5, "x"])
    def test_basics_rejects_bad_terms(self, term):
        """Test terms outside whole years 1-5 fail."""
        issues = self.validate_basics(loan(loanAmount=5000, termYears=term))

        assert [issue.field for issue in issues] == ["term_years"]

    def test_basics_reports_low_balance(self):
        """Test a limit below the minimum produces a balance message."""
        issues = v.validate_loan_basics(loan(loanAmount=500), min_amount=1000, max_amount=800,
                                        term_years_min=1, term_years_max=5)

        assert "Balance too low" in issues[0].message

    def test_payment_setup_eft(self):
        """Test EFT with valid bank details passes."""
        payload = loan(paymentMethod="EFT", routingNumber="123456789", accountNumber="12345")

        assert v.validate_payment_setup(payload) == []

    def test_payment_setup_check_needs_no_bank(self):
        """Test checks do not require bank details."""
        assert v.validate_payment_setup(loan(paymentMethod="check")) == []

    def test_payment_setup_bad_bank_details(self):
        """Test malformed routing and account numbers are both reported."""
        payload = loan(paymentMethod="ACH", routingNumber="12345", accountNumber="12")

        fields = [issue.field for issue in v.validate_payment_setup(payload)]

        assert fields == ["routing_number", "account_number"]

    def test_payment_setup_requires_method(self):
        """Test an unknown method fails."""
        assert [i.field for i in v.validate_payment_setup(loan(paymentMethod="wire"))] == ["payment_method"]

    def test_compliance_requires_true_flags(self):
        """Test truthy non-boolean acknowledgements are not accepted."""
        payload = loan(agreedToTerms="yes", agreedToDisclosures=True, spousalConsent=True)

        issues = v.validate_loan_compliance(payload, require_spousal_consent=True)

        assert [issue.field for issue in issues] == ["agreed_to_terms"]


class TestAmountValidators:
    """Test withdrawal and rollover amount validators."""

    def test_withdrawal_within_cap(self):
        """Test the cap itself is allowed."""
        payload = payload_for("withdrawal", {"amount": 25000})

        assert v.validate_withdrawal_amount(payload, min_amount=100, max_amount=25000) == []

    def test_withdrawal_over_cap(self):
        """Test amounts over the cap fail."""
        payload = payload_for("withdrawal", {"amount": 30000})

        issues = v.validate_withdrawal_amount(payload, min_amount=100, max_amount=25000)

        assert issues[0].field == "amount"
        assert issues[0].value == 30000

    @pytest.mark.parametrize("amount", ["nan", "NaN", "inf", "-inf", float("nan"), float("inf")])
    def test_withdrawal_rejects_non_finite(self, amount):
        """Test NaN and infinite amounts fail instead of slipping past the range check."""
        payload = payload_for("withdrawal", {"amount": amount})

        issues = v.validate_withdrawal_amount(payload, min_amount=100, max_amount=25000)

        assert [issue.field for issue in issues] == ["amount"]

    def test_tax_rates_optional(self):
        """Test omitted rates pass and out-of-range rates fail."""
        assert v.validate_tax_withholding(payload_for("withdrawal")) == []

        issues = v.validate_tax_withholding(payload_for("withdrawal", {"federalTaxRate": 120}))

        assert [issue.field for issue in issues] == ["federal_tax_rate"]

    def test_rollover_amount_zero_allowed(self):
        """Test a zero estimated balance is a valid non-negative amount."""
        assert v.validate_rollover_amount(payload_for("rollover", {"estimatedBalance": 0})) == []

    def test_rollover_amount_falls_back_to_amount(self):
        """Test amount is accepted when no estimated balance is given."""
        assert v.validate_rollover_amount(payload_for("rollover", {"amount": 100})) == []

    def test_rollover_amount_negative(self):
        """Test negative balances fail."""
        assert v.validate_rollover_amount(payload_for("rollover", {"estimatedBalance": -1}))

    @pytest.mark.parametrize("balance", ["nan", "inf", float("nan"), float("inf")])
    def test_rollover_amount_rejects_non_finite(self, balance):
        """Test NaN and infinite balances fail."""
        issues = v.validate_rollover_amount(payload_for("rollover", {"estimatedBalance": balance}))

        assert [issue.field for issue in issues] == ["estimated_balance"]

    @pytest.mark.parametrize("name,passes", [("Fidelity", True), ("AB", True), (" A ", False), ("", False)])
    def test_rollover_destination(self, name, passes):
        """Test the provider name must be at least two characters."""
        issues = v.validate_rollover_destination(payload_for("rollover", {"providerName": name}))

        assert (issues == []) is passes


class TestAllocationValidators:
    """Test transfer and rebalance validators."""

    def test_transfer_intent_required(self):
        """Test a transfer needs an intent."""
        assert v.validate_transfer_details(payload_for("transfer"))
        assert v.validate_transfer_details(payload_for("transfer", {"intent": "rebalance"})) == []

    def test_allocations_sum_to_100(self):
        """Test allocations must total 100 percent."""
        good = payload_for("rebalance", {"targetAllocations": {"bond": 40, "equity": 60}})
        bad = payload_for("rebalance", {"targetAllocations": {"bond": 40, "equity": 50}})

        assert v.validate_allocations(good, field="target_allocations", required=True) == []
        assert v.validate_allocations(bad, field="target_allocations", required=True)

    def test_optional_allocations_may_be_missing(self):
        """Test missing optional allocations pass but required ones fail."""
        payload = payload_for("rebalance")

        assert v.validate_allocations(payload, field="current_allocations", required=False) == []
        assert v.validate_allocations(payload, field="target_allocations", required=True)

    def test_allocation_values_are_percentages(self):
        """Test individual funds outside 0-100 are reported per fund."""
        payload = payload_for("transfer", {"allocations": {"bond": 150, "equity": -50}})

        fields = [i.field for i in v.validate_allocations(payload, field="allocations", required=False)]

        assert fields == ["allocations.bond", "allocations.equity"]


class TestConfirmation:
    """Test the final review confirmation."""

    @pytest.mark.parametrize("value,passes", [(True, True), (False, False), (None, False), ("true", False)])
    def test_confirmation(self, value, passes):
        """Test only a literal True confirms."""
        payload = payload_for("loan", {"confirmationAccepted": value})

        assert (v.validate_confirmation(payload) == []) is passes

    def test_validators_do_not_mutate_payload(self):
        """Test validation leaves the payload untouched."""
        payload = loan(loanAmount=10, paymentMethod="EFT")
        before = payload.as_dict()

        v.validate_payment_setup(payload)
        v.validate_confirmation(payload)

        assert payload.as_dict() == before
