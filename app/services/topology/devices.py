"""Serial-number dispatch for device traces."""

from __future__ import annotations

import enum
import logging

from app.schemas.topology import (
    CUSTOMER_FACING_TYPES,
    AssetAssignmentDetails,
    CustomerPathResponse,
    InfrastructurePathResponse,
)
from app.services.topology.clients import InventoryClient
from app.services.topology.errors import DeviceNotAssignedError
from app.services.topology.paths import PathComposer

logger = logging.getLogger(__name__)


class DeviceClass(enum.Enum):
    customer_assigned = "customer_assigned"
    infrastructure = "infrastructure"
    unassigned = "unassigned"


def classify(assignment: AssetAssignmentDetails) -> DeviceClass:
    if assignment.customer_id is not None:
        return DeviceClass.customer_assigned
    if assignment.asset_type not in CUSTOMER_FACING_TYPES:
        return DeviceClass.infrastructure
    return DeviceClass.unassigned


class DeviceResolver:
    def __init__(self, inventory: InventoryClient, paths: PathComposer):
        self.inventory = inventory
        self.paths = paths

    async def trace_device_path(
        self, serial_number: str
    ) -> CustomerPathResponse | InfrastructurePathResponse:
        assignment = await self.inventory.get_asset_assignment(serial_number)
        device_class = classify(assignment)
        logger.info("Device %s classified as %s", serial_number, device_class.value)
        if device_class is DeviceClass.customer_assigned:
            return await self.paths.trace_customer_path(assignment.customer_id)
        if device_class is DeviceClass.infrastructure:
            return await self.paths.trace_from_assignment(assignment, serial_number)
        raise DeviceNotAssignedError(
            f"Device with serial number '{serial_number}' is not assigned to any customer."
        )
