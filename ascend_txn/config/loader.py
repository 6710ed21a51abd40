"""Plan rules loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..logging.config import get_logger
from .defaults import (
    ComplianceRules,
    ImpactBand,
    ImpactBands,
    LoanRules,
    PlanRules,
    WithholdingRules,
    get_default_rules,
)
from .validation import ConfigValidator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConfigLoader:
    """Manages plan rule loading with 3-tier precedence."""

    config_dir: Path
    defaults: PlanRules

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_rules(),
        )

    def _load_plans_file(self) -> dict[str, Any]:
        plans_file = self.config_dir / "plans.yaml"

        if not plans_file.exists():
            return {}

        with open(plans_file) as f:
            plans_config = yaml.safe_load(f) or {}

        return plans_config.get("plans", {}) or {}

    def configured_plan_ids(self) -> list[str]:
        """Plan ids that have an entry in plans.yaml."""
        return sorted(self._load_plans_file())

    def load_plan_config(self, plan_id: Optional[str]) -> dict[str, Any]:
        """Load plan-specific rule overrides."""
        if plan_id is None:
            return {}
        return self._load_plans_file().get(plan_id, {}) or {}

    def merge_config(
        self,
        plan_id: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge plan rules with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Plan-specific entries from plans.yaml
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        plan_config = self.load_plan_config(plan_id)
        config = self._deep_merge(config, plan_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def rules_for(
        self,
        plan_id: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> PlanRules:
        """
        Build validated PlanRules for a plan.

        Raises:
            ValueError: if the merged configuration fails validation
        """
        config = self.merge_config(plan_id, overrides)
        errors = ConfigValidator.validate_config(config)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.error("Plan rules validation failed", plan_id=plan_id, errors=error_msgs)
            raise ValueError(f"Invalid plan rules for {plan_id or 'default'}: " + "; ".join(error_msgs))

        try:
            return self._dict_to_rules(config)
        except (KeyError, TypeError) as e:
            logger.error("Plan rules contain unknown or missing keys", plan_id=plan_id, error=str(e))
            raise ValueError(f"Invalid plan rules for {plan_id or 'default'}: {e}") from e

    def _dict_to_rules(self, config: dict[str, Any]) -> PlanRules:
        impact = config["impact"]
        return PlanRules(
            loan=LoanRules(**config["loan"]),
            withdrawal=WithholdingRules(**config["withdrawal"]),
            distribution=WithholdingRules(**config["distribution"]),
            compliance=ComplianceRules(**config["compliance"]),
            impact=ImpactBands(**{name: ImpactBand(**band) for name, band in impact.items()}),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
