"""Unit tests for plan rules configuration."""

import importlib.util
import pytest
from pathlib import Path
from unittest.mock import patch

from ascend_txn.config.defaults import get_default_rules
from ascend_txn.config.loader import ConfigLoader
from ascend_txn.config.validation import ConfigValidator


class TestDefaultRules:
    """Test suite for default plan rules."""

    def test_default_rules(self) -> None:
        """Test the built-in limits."""
        rules = get_default_rules()

        assert rules.loan.min_amount == 1000.0
        assert rules.loan.max_absolute == 50000.0
        assert rules.withdrawal.max_pct_of_vested == 0.25
        assert rules.distribution.max_pct_of_vested == 1.0
        assert rules.compliance.require_spousal_consent is True
        assert rules.impact.for_type("rollover").medium_max == 50000.0

    def test_unknown_band_falls_back(self) -> None:
        """Test unknown types use the withdrawal band."""
        bands = get_default_rules().impact

        assert bands.for_type("unknown") == bands.withdrawal


class TestConfigLoader:
    """Test suite for the plan rules loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader points at the repository config directory."""
        loader = ConfigLoader.create()

        assert isinstance(loader.config_dir, Path)
        assert (loader.config_dir / "plans.yaml").exists()

    def test_merge_defaults_only(self) -> None:
        """Test a plan without an entry gets the defaults."""
        config = ConfigLoader.create().merge_config("UNKNOWN-PLAN")

        assert config["loan"]["max_absolute"] == 50000.0
        assert config["impact"]["loan"]["low_max"] == 5000.0

    def test_merge_plan_entry(self) -> None:
        """Test plans.yaml entries override defaults and keep siblings."""
        config = ConfigLoader.create().merge_config("previous")

        assert config["loan"]["max_absolute"] == 25000.0
        assert config["loan"]["min_amount"] == 1000.0
        assert config["compliance"]["require_spousal_consent"] is False

    def test_overrides_win(self) -> None:
        """Test explicit overrides beat the plan entry."""
        config = ConfigLoader.create().merge_config("previous", {"loan": {"max_absolute": 10000.0}})

        assert config["loan"]["max_absolute"] == 10000.0

    def test_rules_for(self) -> None:
        """Test rules_for builds typed rules."""
        rules = ConfigLoader.create().rules_for("ira")

        assert rules.distribution.default_federal_rate == 10.0
        assert rules.distribution.default_state_rate == 0.0
        assert rules.withdrawal.default_federal_rate == 20.0

    def test_rules_for_invalid_override(self) -> None:
        """Test invalid merged values raise ValueError."""
        with pytest.raises(ValueError, match="loan.max_pct_of_vested"):
            ConfigLoader.create().rules_for(None, {"loan": {"max_pct_of_vested": 1.5}})

    def test_rules_for_unknown_key(self) -> None:
        """Test unknown keys raise ValueError rather than TypeError."""
        with pytest.raises(ValueError):
            ConfigLoader.create().rules_for(None, {"loan": {"interest_rate": 0.05}})

    def test_missing_plans_file(self, tmp_path) -> None:
        """Test a directory without plans.yaml yields defaults."""
        loader = ConfigLoader.create(tmp_path)

        assert loader.configured_plan_ids() == []
        assert loader.rules_for("current") == get_default_rules()

    def test_custom_plans_file(self, tmp_path) -> None:
        """Test a custom plans file is read."""
        (tmp_path / "plans.yaml").write_text(
            "plans:\n  acme:\n    withdrawal:\n      max_pct_of_vested: 0.5\n"
        )
        loader = ConfigLoader.create(tmp_path)

        assert loader.configured_plan_ids() == ["acme"]
        assert loader.rules_for("acme").withdrawal.max_pct_of_vested == 0.5

    def test_repository_plans_are_valid(self) -> None:
        """Test every configured plan in the repository validates."""
        loader = ConfigLoader.create()

        for plan_id in loader.configured_plan_ids():
            assert ConfigValidator.validate_config(loader.merge_config(plan_id)) == []


class TestConfigValidator:
    """Test suite for plan rules validation."""

    def test_valid_defaults(self) -> None:
        """Test the defaults validate cleanly."""
        config = ConfigLoader.create().merge_config(None)

        assert ConfigValidator.validate_config(config) == []

    @pytest.mark.parametrize("params,field", [
        ({"min_amount": 0}, "loan.min_amount"),
        ({"max_absolute": -5}, "loan.max_absolute"),
        ({"origination_fee_pct": 1.0}, "loan.origination_fee_pct"),
        ({"term_years_min": 0}, "loan.term_years_min"),
        ({"term_years_min": 6, "term_years_max": 5}, "loan.term_years_min"),
        ({"min_amount": 60000, "max_absolute": 50000}, "loan.min_amount"),
    ])
    def test_invalid_loan_rules(self, params, field) -> None:
        """Test invalid loan parameters are reported by field."""
        errors = ConfigValidator.validate_loan_rules(params)

        assert field in [err.field for err in errors]

    def test_invalid_withholding(self) -> None:
        """Test withholding rates must be percentages."""
        errors = ConfigValidator.validate_withholding_rules("distribution", {"default_state_rate": 101})

        assert errors[0].field == "distribution.default_state_rate"
        assert errors[0].value == 101

    def test_invalid_compliance(self) -> None:
        """Test the spousal consent flag must be boolean."""
        errors = ConfigValidator.validate_compliance_rules({"require_spousal_consent": "yes"})

        assert len(errors) == 1

    def test_bands_must_be_ordered(self) -> None:
        """Test low_max above medium_max is rejected."""
        errors = ConfigValidator.validate_impact_bands({"loan": {"low_max": 10, "medium_max": 5}})

        assert [err.field for err in errors] == ["impact.loan"]


class TestValidateConfigScript:
    """Test suite for the plan rules validation script."""

    @pytest.fixture
    def script(self):
        path = Path(__file__).resolve().parents[2] / "scripts" / "validate_config.py"
        spec = importlib.util.spec_from_file_location("validate_config_script", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_main_configures_logging_and_passes(self, script, capsys) -> None:
        """Test the script sets up logging and exits cleanly on repository rules."""
        with patch.object(script, "configure_logging") as configure:
            with pytest.raises(SystemExit) as exit_info:
                script.main()

        configure.assert_called_once_with(level="WARNING")
        assert exit_info.value.code == 0
        assert "All plan rules validation passed" in capsys.readouterr().out
