#!/usr/bin/env python3
"""Plan rules validation script."""

import sys
from pathlib import Path
from typing import List, Optional

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ascend_txn.config.loader import ConfigLoader
from ascend_txn.config.validation import ConfigValidator, ValidationError
from ascend_txn.logging.config import configure_logging


def validate_plan_config(loader: ConfigLoader, plan_id: Optional[str]) -> List[ValidationError]:
    """Validate the merged rules for a single plan."""
    config = loader.merge_config(plan_id)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    # Loader failures are reported through structlog
    configure_logging(level="WARNING")
    print("🔍 Validating plan rules...")

    loader = ConfigLoader.create()

    # None covers the built-in defaults used by plans without an entry
    plan_ids = [None] + loader.configured_plan_ids()

    all_valid = True

    for plan_id in plan_ids:
        label = plan_id or "defaults"
        print(f"\n📋 Validating {label}...")

        try:
            errors = validate_plan_config(loader, plan_id)

            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                loader.rules_for(plan_id)
                print(f"✅ {label} rules are valid")

        except (ValueError, OSError, yaml.YAMLError) as e:
            print(f"❌ Error validating {label}: {e}")
            all_valid = False

    if all_valid:
        print("\n🎉 All plan rules validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Plan rules validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
