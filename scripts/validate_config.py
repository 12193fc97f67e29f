#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import Any, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from chartpilot.config.loader import ConfigLoader
from chartpilot.config.validation import ConfigValidator, ValidationError


def validate_merged_config(overrides: Optional[dict[str, Any]] = None) -> list[ValidationError]:
    """Validate defaults merged with the YAML file and optional overrides."""
    loader = ConfigLoader.create()
    config = loader.merge_config(overrides)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating chartpilot configuration...")

    loader = ConfigLoader.create()
    print(f"Config directory: {loader.config_dir}")

    all_valid = True

    try:
        errors = validate_merged_config()
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print("✅ File configuration is valid")
    except Exception as e:
        print(f"❌ Error validating configuration: {e}")
        all_valid = False

    # Call-site overrides go through the same checks
    print("\n📋 Testing call-site overrides...")
    test_overrides = {
        "orchestrator": {"sequence_step_delay_ms": 0},
        "complexity": {"advanced_target_r": [1.0, 2.0, 3.0]},
    }

    try:
        errors = validate_merged_config(test_overrides)
        if errors:
            print("❌ Override validation failed:")
            for error in errors:
                print(f"  • {error.field}: {error.message}")
            all_valid = False
        else:
            loader.load_config(test_overrides)
            print("✅ Override validation passed")
    except Exception as e:
        print(f"❌ Error testing overrides: {e}")
        all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
