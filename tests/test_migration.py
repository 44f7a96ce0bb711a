"""
Tests for the driver pay percentage migration.
"""

from decimal import Decimal

import yaml

from freight_ledger.data.models import DriverProfile, DriverType, PaymentProfile, PayType
from freight_ledger.services import migrate_driver_percentages
from freight_ledger.services.migration import default_pay_percentage


def _driver(driver_id, driver_type=DriverType.COMPANY, pay_percentage=None, payment=None):
    return DriverProfile(
        id=driver_id,
        name=f"Driver {driver_id}",
        driver_type=driver_type,
        pay_percentage=pay_percentage,
        payment=payment or PaymentProfile(),
    )


class TestMigrateDriverPercentages:

    def test_report_counts(self):
        drivers = [
            _driver("d1", DriverType.OWNER_OPERATOR, pay_percentage=Decimal("88")),
            _driver("d2", DriverType.OWNER_OPERATOR),
            _driver("d3", DriverType.COMPANY),
            _driver("d4", DriverType.COMPANY, pay_percentage=Decimal("0.75")),
            _driver(
                "d5",
                DriverType.COMPANY,
                payment=PaymentProfile(type=PayType.PERCENTAGE, percentage=Decimal("85")),
            ),
        ]
        report = migrate_driver_percentages(drivers)

        assert report.total == 5
        assert report.fixed == 2
        assert report.migrated == 2
        assert report.updated_ids == ["d1", "d2", "d3", "d5"]

        by_id = {driver.id: driver for driver in report.drivers}
        assert by_id["d1"].pay_percentage == Decimal("0.88")
        assert by_id["d2"].pay_percentage == Decimal("0.88")
        assert by_id["d3"].pay_percentage == Decimal("0")
        assert by_id["d4"] is drivers[3]
        assert by_id["d5"].pay_percentage == Decimal("0.85")
        assert by_id["d5"].payment.percentage == Decimal("0.85")

    def test_migration_is_idempotent(self):
        first = migrate_driver_percentages([_driver("d1", DriverType.OWNER_OPERATOR, pay_percentage=Decimal("90"))])
        second = migrate_driver_percentages(first.drivers)
        assert second.fixed == 0
        assert second.updated_ids == []
        assert second.drivers[0].pay_percentage == Decimal("0.9")

    def test_defaults_by_driver_type(self):
        assert default_pay_percentage(DriverType.OWNER_OPERATOR) == Decimal("0.88")
        assert default_pay_percentage(DriverType.OWNER) == Decimal("0")


class TestMigrationScript:

    def test_script_rewrites_export(self, tmp_path):
        from scripts.migrate_pay_percentages import main

        export = tmp_path / "drivers.yaml"
        export.write_text(
            yaml.safe_dump(
                {
                    "drivers": [
                        {"id": "d1", "name": "Olivia", "driver_type": "owner_operator", "pay_percentage": 88},
                        {"id": "d2", "name": "Carl", "driver_type": "company", "pay_percentage": 0.7},
                    ]
                }
            )
        )
        assert main([str(export)]) == 0

        migrated = yaml.safe_load(export.read_text())["drivers"]
        assert Decimal(migrated[0]["pay_percentage"]) == Decimal("0.88")
        assert Decimal(str(migrated[1]["pay_percentage"])) == Decimal("0.7")
