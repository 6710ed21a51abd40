"""Plan rules validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates plan rule parameters."""

    @staticmethod
    def validate_loan_rules(params: dict[str, Any]) -> list[ValidationError]:
        """Validate loan rules."""
        errors = []

        for name in ("min_amount", "max_absolute"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=f"loan.{name}",
                        message="Must be a positive number",
                        value=value
                    ))

        if "max_pct_of_vested" in params:
            value = params["max_pct_of_vested"]
            if not _is_number(value) or value <= 0 or value > 1:
                errors.append(ValidationError(
                    field="loan.max_pct_of_vested",
                    message="Must be a positive number between 0 and 1",
                    value=value
                ))

        if "origination_fee_pct" in params:
            value = params["origination_fee_pct"]
            if not _is_number(value) or value < 0 or value >= 1:
                errors.append(ValidationError(
                    field="loan.origination_fee_pct",
                    message="Must be a number in [0, 1)",
                    value=value
                ))

        term_min = params.get("term_years_min")
        term_max = params.get("term_years_max")
        for name, value in (("term_years_min", term_min), ("term_years_max", term_max)):
            if name in params and (not isinstance(value, int) or isinstance(value, bool) or value <= 0):
                errors.append(ValidationError(
                    field=f"loan.{name}",
                    message="Must be a positive integer",
                    value=value
                ))
        if isinstance(term_min, int) and isinstance(term_max, int) and term_min > term_max:
            errors.append(ValidationError(
                field="loan.term_years_min",
                message="Must not exceed term_years_max",
                value=term_min
            ))

        min_amount = params.get("min_amount")
        max_absolute = params.get("max_absolute")
        if _is_number(min_amount) and _is_number(max_absolute) and min_amount > max_absolute:
            errors.append(ValidationError(
                field="loan.min_amount",
                message="Must not exceed max_absolute",
                value=min_amount
            ))

        return errors

    @staticmethod
    def validate_withholding_rules(section: str, params: dict[str, Any]) -> list[ValidationError]:
        """Validate withdrawal or distribution rules."""
        errors = []

        if "min_amount" in params:
            value = params["min_amount"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field=f"{section}.min_amount",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "max_pct_of_vested" in params:
            value = params["max_pct_of_vested"]
            if not _is_number(value) or value <= 0 or value > 1:
                errors.append(ValidationError(
                    field=f"{section}.max_pct_of_vested",
                    message="Must be a positive number between 0 and 1",
                    value=value
                ))

        for name in ("default_federal_rate", "default_state_rate"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 100:
                    errors.append(ValidationError(
                        field=f"{section}.{name}",
                        message="Must be a percentage between 0 and 100",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_compliance_rules(params: dict[str, Any]) -> list[ValidationError]:
        """Validate compliance rules."""
        errors = []

        if "require_spousal_consent" in params:
            value = params["require_spousal_consent"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="compliance.require_spousal_consent",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_impact_bands(params: dict[str, Any]) -> list[ValidationError]:
        """Validate impact bands; each band must be non-negative and ordered."""
        errors = []

        for name, band in params.items():
            if not isinstance(band, dict):
                errors.append(ValidationError(
                    field=f"impact.{name}",
                    message="Must be a mapping with low_max and medium_max",
                    value=band
                ))
                continue

            low_max = band.get("low_max")
            medium_max = band.get("medium_max")
            if not _is_number(low_max) or low_max < 0:
                errors.append(ValidationError(
                    field=f"impact.{name}.low_max",
                    message="Must be a non-negative number",
                    value=low_max
                ))
            if not _is_number(medium_max) or medium_max < 0:
                errors.append(ValidationError(
                    field=f"impact.{name}.medium_max",
                    message="Must be a non-negative number",
                    value=medium_max
                ))
            if _is_number(low_max) and _is_number(medium_max) and low_max > medium_max:
                errors.append(ValidationError(
                    field=f"impact.{name}",
                    message="low_max must not exceed medium_max",
                    value=band
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete plan rules configuration."""
        errors = []

        if "loan" in config:
            errors.extend(ConfigValidator.validate_loan_rules(config["loan"]))

        for section in ("withdrawal", "distribution"):
            if section in config:
                errors.extend(ConfigValidator.validate_withholding_rules(section, config[section]))

        if "compliance" in config:
            errors.extend(ConfigValidator.validate_compliance_rules(config["compliance"]))

        if "impact" in config:
            errors.extend(ConfigValidator.validate_impact_bands(config["impact"]))

        return errors
