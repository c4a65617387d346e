"""In-memory collaborators for topology tests.

The fakes expose the same async methods as the HTTP clients and record every
call as ``(operation, argument)`` so tests can assert on lookup counts.
"""

from typing import Any

from app.schemas.topology import (
    AssetAssignmentDetails,
    AssetRecord,
    CoreSwitchRecord,
    CustomerAssignment,
    FdhRecord,
    HeadendRecord,
    SplitterRecord,
)
from app.services.topology.errors import NotFoundError


class _FakeCollaborator:
    def __init__(self):
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[tuple[str, Any], Exception] = {}

    def fail(self, operation: str, argument: Any, exc: Exception) -> None:
        self.failures[(operation, argument)] = exc

    def _record(self, operation: str, argument: Any) -> None:
        self.calls.append((operation, argument))
        exc = self.failures.get((operation, argument))
        if exc is not None:
            raise exc

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def count(self, operation: str) -> int:
        return self.operations().count(operation)


def _lookup(store: dict, key, label: str):
    try:
        return store[key]
    except KeyError:
        raise NotFoundError(f"{label} {key} not found") from None


class FakeInventoryClient(_FakeCollaborator):
    def __init__(self):
        super().__init__()
        self.assets: dict[str, AssetRecord] = {}
        self.assignments: dict[str, AssetAssignmentDetails] = {}
        self.headends: dict[int, HeadendRecord] = {}
        self.core_switches: dict[int, CoreSwitchRecord] = {}
        self.fdhs: dict[int, FdhRecord] = {}
        self.splitters: dict[int, SplitterRecord] = {}

    async def get_asset_by_serial(self, serial_number):
        self._record("get_asset_by_serial", serial_number)
        return _lookup(self.assets, serial_number, "Device")

    async def get_asset_assignment(self, serial_number):
        self._record("get_asset_assignment", serial_number)
        return _lookup(self.assignments, serial_number, "Device")

    async def get_headend(self, headend_id):
        self._record("get_headend", headend_id)
        return _lookup(self.headends, headend_id, "Headend")

    async def get_core_switch(self, core_switch_id):
        self._record("get_core_switch", core_switch_id)
        return _lookup(self.core_switches, core_switch_id, "Core switch")

    async def get_fdh(self, fdh_id):
        self._record("get_fdh", fdh_id)
        return _lookup(self.fdhs, fdh_id, "FDH")

    async def get_splitter(self, splitter_id):
        self._record("get_splitter", splitter_id)
        return _lookup(self.splitters, splitter_id, "Splitter")

    async def get_splitters_by_fdh(self, fdh_id):
        self._record("get_splitters_by_fdh", fdh_id)
        return [s for s in self.splitters.values() if s.fdh_id == fdh_id]

    async def get_core_switches_by_headend(self, headend_id):
        self._record("get_core_switches_by_headend", headend_id)
        return [cs for cs in self.core_switches.values() if cs.headend_id == headend_id]

    async def get_fdhs_by_core_switches(self, core_switch_ids):
        if not core_switch_ids:
            return []
        self._record("get_fdhs_by_core_switches", tuple(core_switch_ids))
        wanted = set(core_switch_ids)
        return [fdh for fdh in self.fdhs.values() if fdh.core_switch_id in wanted]

    async def get_splitters_by_fdhs(self, fdh_ids):
        if not fdh_ids:
            return []
        self._record("get_splitters_by_fdhs", tuple(fdh_ids))
        wanted = set(fdh_ids)
        return [s for s in self.splitters.values() if s.fdh_id in wanted]


class FakeCustomerClient(_FakeCollaborator):
    def __init__(self):
        super().__init__()
        self.customers: dict[int, CustomerAssignment] = {}

    async def get_customer_assignment(self, customer_id):
        self._record("get_customer_assignment", customer_id)
        return _lookup(self.customers, customer_id, "Customer")

    async def get_customers_by_splitter(self, splitter_id):
        self._record("get_customers_by_splitter", splitter_id)
        return [c for c in self.customers.values() if c.splitter_id == splitter_id]


INFRASTRUCTURE_LOOKUPS = {"get_splitter", "get_fdh", "get_core_switch", "get_headend"}


def build_scenario() -> tuple[FakeInventoryClient, FakeCustomerClient]:
    """Customer 1 -> splitter 10 -> FDH-01 (20) -> CS-01 (30) -> Main Headend (40)."""
    inventory = FakeInventoryClient()
    customers = FakeCustomerClient()

    inventory.headends[40] = HeadendRecord(
        id=40, name="Main Headend", location="Downtown", serial_number="HE-SN", model="HE-9000"
    )
    inventory.core_switches[30] = CoreSwitchRecord(
        id=30, name="CS-01", location="North POP", headend_id=40, serial_number="CS-SN"
    )
    inventory.fdhs[20] = FdhRecord(
        id=20, name="FDH-01", region="North", core_switch_id=30, serial_number="FDH-SN"
    )
    inventory.splitters[10] = SplitterRecord(
        id=10,
        fdh_id=20,
        port_capacity=32,
        used_ports=1,
        serial_number="SPLITTER-SN",
        neighborhood="Maple Grove",
        model="1x32",
    )
    customers.customers[1] = CustomerAssignment(
        customer_id=1,
        name="Test Customer",
        splitter_id=10,
        assigned_port=4,
        status="ACTIVE",
        assigned_assets=[
            {"assetType": "ONT", "serialNumber": "ONT-SN", "model": "HG8245"},
            {"assetType": "ROUTER", "serialNumber": "RTR-SN", "model": "AX3000"},
        ],
    )

    inventory.assignments["ONT-SN"] = AssetAssignmentDetails(
        asset_id=100, customer_id=1, asset_serial_number="ONT-SN", asset_type="ONT"
    )
    inventory.assignments["SPLITTER-SN"] = AssetAssignmentDetails(
        asset_id=10, asset_serial_number="SPLITTER-SN", asset_type="SPLITTER"
    )
    inventory.assignments["FDH-SN"] = AssetAssignmentDetails(
        asset_id=20, asset_serial_number="FDH-SN", asset_type="FDH"
    )
    inventory.assignments["CS-SN"] = AssetAssignmentDetails(
        asset_id=30, asset_serial_number="CS-SN", asset_type="CORE_SWITCH"
    )
    inventory.assignments["HE-SN"] = AssetAssignmentDetails(
        asset_id=40, asset_serial_number="HE-SN", asset_type="HEADEND"
    )
    inventory.assignments["SPARE-ONT"] = AssetAssignmentDetails(
        asset_id=101, asset_serial_number="SPARE-ONT", asset_type="ONT"
    )
    inventory.assignments["ROLL-SN"] = AssetAssignmentDetails(
        asset_id=102, asset_serial_number="ROLL-SN", asset_type="FIBER_ROLL"
    )
    return inventory, customers
