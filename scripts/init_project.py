#!/usr/bin/env python3
"""
Initialize the freight ledger.

This script sets up the project by:
- Checking the Python version
- Checking the .env file and FREIGHT_LEDGER_* overrides
- Validating the business configuration
- Creating the audit outbox directory
- Checking that required packages import
"""

import os
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv

OPTIONAL_ENV_VARS = [
    "FREIGHT_LEDGER_TENANT_ID",
    "FREIGHT_LEDGER_AUDIT_OUTBOX_PATH",
    "FREIGHT_LEDGER_LOG_LEVEL",
    "FREIGHT_LEDGER_LOG_JSON",
]

REQUIRED_CONFIG_SECTIONS = ["tenant", "factoring_companies", "audit"]


def check_python_version() -> bool:
    """Verify Python version is 3.12 or higher."""
    if sys.version_info < (3, 12):
        print(f"❌ Python 3.12+ required. Current version: {sys.version}")
        return False
    print(f"✅ Python version: {sys.version_info.major}.{sys.version_info.minor}")
    return True


def check_env_file() -> bool:
    """Load .env if present and report which overrides are set."""
    env_path = Path(".env")
    if not env_path.exists():
        print("⚠️  .env file not found, using config/config.yaml only")
        print("   To override settings: cp .env.example .env")
        return True

    load_dotenv(env_path)
    set_vars = [var for var in OPTIONAL_ENV_VARS if os.getenv(var)]
    print(f"✅ .env file loaded ({len(set_vars)} override(s) set)")
    for var in set_vars:
        print(f"   {var}={os.getenv(var)}")
    return True


def check_config_files() -> bool:
    """Validate config/config.yaml exists and has the required sections."""
    config_path = Path("config/config.yaml")
    if not config_path.exists():
        print(f"❌ Main configuration not found: {config_path}")
        return False

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"❌ Error parsing config.yaml: {e}")
        return False

    if not config:
        print("❌ config.yaml is empty")
        return False

    missing = [section for section in REQUIRED_CONFIG_SECTIONS if section not in config]
    if missing:
        print(f"❌ config.yaml is missing sections: {', '.join(missing)}")
        return False

    default_company = config["tenant"].get("default_factoring_company_id")
    company_ids = {str(company.get("id")) for company in config["factoring_companies"]}
    if default_company and default_company not in company_ids:
        print(f"❌ Default factoring company '{default_company}' is not configured")
        return False

    print(f"✅ config.yaml is valid ({len(company_ids)} factoring companies)")
    return True


def create_data_directories() -> bool:
    """Create the audit outbox directory."""
    outbox_path = os.getenv("FREIGHT_LEDGER_AUDIT_OUTBOX_PATH")
    if not outbox_path:
        with open("config/config.yaml") as f:
            config = yaml.safe_load(f) or {}
        outbox_path = config.get("audit", {}).get("outbox_path", "data/audit_outbox.jsonl")

    directory = Path(outbox_path).parent
    directory.mkdir(parents=True, exist_ok=True)
    print(f"✅ Audit outbox directory ready: {directory}")
    return True


def test_imports() -> bool:
    """Test that critical packages can be imported."""
    required_packages = [
        "pydantic",
        "pydantic_settings",
        "structlog",
        "yaml",
        "dotenv",
        "freight_ledger",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print(f"❌ Missing packages: {', '.join(missing)}")
        print("   Run: pip install -e '.[test]'")
        return False

    print("✅ All required packages installed")
    return True


def display_next_steps():
    """Show user what to do next."""
    print("\n" + "=" * 60)
    print("🎉 Project initialization complete!")
    print("=" * 60)
    print("\nNext steps:")
    print("\n1. Review config/config.yaml (tenant, factoring companies, deductions)")
    print("2. Run the test suite:")
    print("   pytest")
    print("3. Migrate legacy driver pay percentages, if any:")
    print("   python scripts/migrate_pay_percentages.py drivers.yaml")
    print("\n" + "=" * 60)


def main():
    """Run all initialization checks."""
    print("=" * 60)
    print("Freight Ledger - Initialization")
    print("=" * 60)
    print()

    checks = [
        ("Python version", check_python_version),
        (".env file", check_env_file),
        ("Configuration files", check_config_files),
        ("Data directories", create_data_directories),
        ("Package imports", test_imports),
    ]

    passed = 0
    failed = 0

    for name, check_func in checks:
        print(f"\nChecking {name}...")
        if check_func():
            passed += 1
        else:
            failed += 1
            if name == "Configuration files":
                # The directory check reads the same file.
                break

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    if failed == 0:
        display_next_steps()
        return 0
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
