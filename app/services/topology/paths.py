"""Single-branch path tracing: customer to headend and device to headend."""

from __future__ import annotations

import logging

from app.schemas.topology import (
    INFRASTRUCTURE_TYPES,
    AssetAssignmentDetails,
    AssetType,
    CustomerPathResponse,
    CustomerStatus,
    HierarchicalNode,
    InfrastructurePathResponse,
)
from app.services.topology._common import (
    core_switch_node,
    customer_node,
    fdh_node,
    headend_node,
    link_path,
    require_parent,
    splitter_node,
)
from app.services.topology.clients import CustomerClient, InventoryClient
from app.services.topology.errors import (
    BrokenHierarchyError,
    CustomerInactiveError,
    UnsupportedAssetTypeError,
)

logger = logging.getLogger(__name__)


class PathComposer:
    """Builds one linked Headend-first chain per trace.

    Each hop needs the previous record's parent id, so hops are awaited one
    after another; nothing here is shared between traces.
    """

    def __init__(self, inventory: InventoryClient, customers: CustomerClient):
        self.inventory = inventory
        self.customers = customers

    async def trace_customer_path(self, customer_id: int) -> CustomerPathResponse:
        logger.info("Tracing network path for customer %s", customer_id)
        customer = await self.customers.get_customer_assignment(customer_id)
        if customer.status is not CustomerStatus.active:
            raise CustomerInactiveError(
                f"Customer with ID {customer_id} is not active and has no assigned network path."
            )
        splitter_id = require_parent(
            customer.splitter_id, f"Customer {customer_id} is not connected to a splitter"
        )

        splitter = await self.inventory.get_splitter(splitter_id)
        fdh = await self.inventory.get_fdh(
            require_parent(splitter.fdh_id, f"Splitter {splitter.id} has no FDH")
        )
        core_switch = await self.inventory.get_core_switch(
            require_parent(fdh.core_switch_id, f"FDH {fdh.id} has no core switch")
        )
        headend = await self.inventory.get_headend(
            require_parent(core_switch.headend_id, f"Core switch {core_switch.id} has no headend")
        )

        path = link_path(
            [
                headend_node(headend),
                core_switch_node(core_switch),
                fdh_node(fdh),
                splitter_node(splitter),
                customer_node(customer),
            ]
        )
        return CustomerPathResponse(
            customer_id=customer.customer_id,
            customer_name=customer.name,
            path=path,
        )

    async def trace_infrastructure_path(self, serial_number: str) -> InfrastructurePathResponse:
        assignment = await self.inventory.get_asset_assignment(serial_number)
        return await self.trace_from_assignment(assignment, serial_number)

    async def trace_from_assignment(
        self, assignment: AssetAssignmentDetails, serial_number: str | None = None
    ) -> InfrastructurePathResponse:
        serial_number = serial_number or assignment.asset_serial_number
        logger.info(
            "Tracing infrastructure path for %s %s", assignment.asset_type.value, serial_number
        )
        if assignment.asset_type not in INFRASTRUCTURE_TYPES:
            raise UnsupportedAssetTypeError(
                f"Unsupported infrastructure asset type: {assignment.asset_type.value}"
            )
        if assignment.asset_id is None:
            raise BrokenHierarchyError(
                f"Device with serial number '{serial_number}' has no asset id"
            )

        path: tuple[HierarchicalNode, ...] = ()
        asset_type: AssetType | None = assignment.asset_type
        asset_id: int | None = assignment.asset_id
        while asset_type is not None:
            node, asset_type, asset_id = await self._ascend(asset_type, asset_id)
            path = (node, *path)

        return InfrastructurePathResponse(
            start_device_serial_number=serial_number,
            start_device_type=assignment.asset_type,
            path=link_path(path),
        )

    async def _ascend(
        self, asset_type: AssetType, asset_id: int
    ) -> tuple[HierarchicalNode, AssetType | None, int | None]:
        """Fetch one record and return its node plus the parent to visit next."""
        if asset_type is AssetType.splitter:
            splitter = await self.inventory.get_splitter(asset_id)
            parent_id = require_parent(splitter.fdh_id, f"Splitter {splitter.id} has no FDH")
            return splitter_node(splitter), AssetType.fdh, parent_id
        if asset_type is AssetType.fdh:
            fdh = await self.inventory.get_fdh(asset_id)
            parent_id = require_parent(fdh.core_switch_id, f"FDH {fdh.id} has no core switch")
            return fdh_node(fdh), AssetType.core_switch, parent_id
        if asset_type is AssetType.core_switch:
            core_switch = await self.inventory.get_core_switch(asset_id)
            parent_id = require_parent(
                core_switch.headend_id, f"Core switch {core_switch.id} has no headend"
            )
            return core_switch_node(core_switch), AssetType.headend, parent_id
        if asset_type is AssetType.headend:
            headend = await self.inventory.get_headend(asset_id)
            return headend_node(headend), None, None
        raise UnsupportedAssetTypeError(
            f"Unsupported infrastructure asset type: {asset_type.value}"
        )
