"""
Reference directory - looks up the profiles a load points at.
"""

from typing import Iterable, Optional

from freight_ledger.data.models.load import Load
from freight_ledger.data.models.reference import (
    DispatcherProfile,
    DriverProfile,
    FactoringCompany,
    TenantConfig,
)
from freight_ledger.engine.cascade import CalculationContext


class ReferenceDirectory:
    """In-process registry of drivers, dispatchers and factoring companies for one tenant."""

    def __init__(
        self,
        tenant_config: Optional[TenantConfig] = None,
        drivers: Iterable[DriverProfile] = (),
        dispatchers: Iterable[DispatcherProfile] = (),
    ) -> None:
        self.tenant_config = tenant_config or TenantConfig()
        self.drivers = {driver.id: driver for driver in drivers}
        self.dispatchers = {dispatcher.id: dispatcher for dispatcher in dispatchers}

    def add_driver(self, driver: DriverProfile) -> None:
        self.drivers[driver.id] = driver

    def add_dispatcher(self, dispatcher: DispatcherProfile) -> None:
        self.dispatchers[dispatcher.id] = dispatcher

    def get_driver(self, driver_id: Optional[str]) -> Optional[DriverProfile]:
        return self.drivers.get(driver_id) if driver_id else None

    def get_dispatcher(self, dispatcher_id: Optional[str]) -> Optional[DispatcherProfile]:
        return self.dispatchers.get(dispatcher_id) if dispatcher_id else None

    def get_factoring_company(self, company_id: Optional[str]) -> Optional[FactoringCompany]:
        return self.tenant_config.get_factoring_company(company_id)

    def context_for(self, load: Load) -> CalculationContext:
        """Build the calculation context for a load."""
        return CalculationContext(
            driver=self.get_driver(load.driver_id),
            driver2=self.get_driver(load.driver2_id) if load.is_team_load else None,
            dispatcher=self.get_dispatcher(load.dispatcher_id),
            factoring_company=self.get_factoring_company(load.factoring_company_id),
            tenant_config=self.tenant_config,
        )
