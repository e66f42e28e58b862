#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sonifier_app.config.loader import ConfigLoader
from sonifier_app.config.validation import ConfigValidator, ValidationError


def validate_asset_config(loader: ConfigLoader, asset_id: str) -> List[ValidationError]:
    """Validate configuration for a specific asset."""
    config = loader.merge_config(asset_id)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("Validating price sonifier configuration...")

    loader = ConfigLoader.create()

    # Every configured asset plus one that must fall back to defaults
    asset_ids = [asset.asset_id for asset in loader.list_assets()] + ["unknown-asset"]

    all_valid = True

    for asset_id in asset_ids:
        print(f"\n{asset_id}...")

        try:
            errors = validate_asset_config(loader, asset_id)

            if errors:
                print(f"  Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  - {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                print(f"  {asset_id} configuration is valid")

        except Exception as e:
            print(f"  Error validating {asset_id}: {e}")
            all_valid = False

    print("\nTesting session-level overrides...")
    test_overrides = {
        "playback": {"tick_interval_ms": 500, "overlap_policy": "queue"},
        "tone": {"pitch_span": 1.5},
    }

    try:
        config = loader.merge_config("bitcoin", test_overrides)
        errors = ConfigValidator.validate_config(config)

        if errors:
            print("  Session override validation failed:")
            for error in errors:
                print(f"  - {error.field}: {error.message}")
            all_valid = False
        else:
            print("  Session override validation passed")

    except Exception as e:
        print(f"  Error testing session overrides: {e}")
        all_valid = False

    if all_valid:
        print("\nAll configuration validation passed!")
        sys.exit(0)
    else:
        print("\nConfiguration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
