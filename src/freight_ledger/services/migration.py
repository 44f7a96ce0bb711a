"""
Driver pay percentage migration.

Older driver records store pay percentages as whole numbers (88 for 88%).
This converts them to 0-1 fractions and fills in missing percentages so
every driver resolves to a usable percentage pay basis.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, Field

from freight_ledger.data.models.reference import DriverProfile, DriverType
from freight_ledger.engine.common import ZERO
from freight_ledger.engine.driver_pay import normalize_pay_percentage

logger = structlog.get_logger(__name__)

OWNER_OPERATOR_DEFAULT_PERCENTAGE = Decimal("0.88")


class MigrationReport(BaseModel):
    """Outcome of a pay percentage migration run."""

    migrated: int = 0  # drivers given a default percentage
    fixed: int = 0  # drivers converted from whole numbers
    total: int = 0
    drivers: list[DriverProfile] = Field(default_factory=list)
    updated_ids: list[str] = Field(default_factory=list)


def default_pay_percentage(driver_type: DriverType) -> Decimal:
    """Percentage assigned to a driver with none on record."""
    if driver_type == DriverType.OWNER_OPERATOR:
        return OWNER_OPERATOR_DEFAULT_PERCENTAGE
    # Company drivers and owners must be set individually.
    return ZERO


def _current_percentage(driver: DriverProfile) -> Optional[Decimal]:
    if driver.pay_percentage is not None:
        return driver.pay_percentage
    return driver.payment.percentage


def migrate_driver(driver: DriverProfile) -> tuple[DriverProfile, bool, bool]:
    """
    Migrate a single driver.

    Args:
        driver: Driver record as exported

    Returns:
        Tuple of (updated driver, was converted, was defaulted)
    """
    current = _current_percentage(driver)
    fixed = current is not None and current > 1
    defaulted = not current

    if defaulted:
        percentage = default_pay_percentage(driver.driver_type)
    else:
        percentage = normalize_pay_percentage(current)

    payment = driver.payment
    if payment.percentage is not None and payment.percentage > 1:
        payment = payment.model_copy(update={"percentage": normalize_pay_percentage(payment.percentage)})

    if not (fixed or defaulted) and payment is driver.payment:
        return driver, False, False

    updated = driver.model_copy(update={"pay_percentage": percentage, "payment": payment})
    return updated, fixed, defaulted


def migrate_driver_percentages(drivers: Iterable[DriverProfile]) -> MigrationReport:
    """
    Convert every driver's pay percentage to a 0-1 fraction.

    Args:
        drivers: Driver records to migrate

    Returns:
        MigrationReport with counts and the updated driver records
    """
    report = MigrationReport()
    for driver in drivers:
        updated, fixed, defaulted = migrate_driver(driver)
        report.total += 1
        report.drivers.append(updated)
        if updated is driver:
            continue

        report.updated_ids.append(driver.id)
        if fixed:
            report.fixed += 1
            logger.info(
                "driver_percentage_converted",
                driver_id=driver.id,
                old=str(_current_percentage(driver)),
                new=str(updated.pay_percentage),
            )
        if defaulted:
            report.migrated += 1
            logger.info(
                "driver_percentage_defaulted",
                driver_id=driver.id,
                driver_type=driver.driver_type.value,
                percentage=str(updated.pay_percentage),
            )

    logger.info(
        "driver_percentage_migration_complete",
        migrated=report.migrated,
        fixed=report.fixed,
        total=report.total,
    )
    return report
