"""Topology tracing services.

This package reconstructs views of the fiber distribution plant from the
customer and inventory collaborators:
- Customer and device paths (Headend -> Core Switch -> FDH -> Splitter -> Customer)
- Infrastructure paths from any splitter, FDH or core switch up to its headend
- Headend and FDH subtrees with connected customers

A TopologyService is built per request so the caller's bearer token is
forwarded to both collaborators.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable
from typing import TypeVar

import httpx

from app.config import settings
from app.metrics import observe_trace
from app.schemas.topology import (
    CustomerPathResponse,
    FdhTopologyResponse,
    InfrastructurePathResponse,
    TopologyNode,
)
from app.services.topology.clients import CustomerClient, InventoryClient
from app.services.topology.devices import DeviceClass, DeviceResolver, classify
from app.services.topology.errors import (
    BrokenHierarchyError,
    CollaboratorRejectedError,
    CollaboratorUnavailableError,
    CustomerInactiveError,
    DeviceNotAssignedError,
    NotFoundError,
    TopologyError,
    UnsupportedAssetTypeError,
)
from app.services.topology.paths import PathComposer
from app.services.topology.trees import TreeComposer, flatten

T = TypeVar("T")


async def _observed(operation: str, pending: Awaitable[T]) -> T:
    started = time.monotonic()
    status = "ok"
    try:
        return await pending
    except TopologyError as exc:
        status = exc.code
        raise
    except Exception:
        status = "error"
        raise
    finally:
        observe_trace(operation, status, time.monotonic() - started)


class TopologyService:
    def __init__(
        self,
        inventory: InventoryClient,
        customers: CustomerClient,
        fanout_limit: int = 8,
    ):
        self.paths = PathComposer(inventory, customers)
        self.trees = TreeComposer(inventory, customers, fanout_limit=fanout_limit)
        self.devices = DeviceResolver(inventory, self.paths)

    async def trace_customer_path(self, customer_id: int) -> CustomerPathResponse:
        return await _observed(
            "trace_customer_path", self.paths.trace_customer_path(customer_id)
        )

    async def trace_device_path(
        self, serial_number: str
    ) -> CustomerPathResponse | InfrastructurePathResponse:
        return await _observed(
            "trace_device_path", self.devices.trace_device_path(serial_number)
        )

    async def trace_infrastructure_path(self, serial_number: str) -> InfrastructurePathResponse:
        return await _observed(
            "trace_infrastructure_path", self.paths.trace_infrastructure_path(serial_number)
        )

    async def get_headend_topology(self, headend_id: int) -> TopologyNode:
        return await _observed(
            "get_headend_topology", self.trees.get_headend_topology(headend_id)
        )

    async def get_fdh_topology(self, fdh_id: int) -> FdhTopologyResponse:
        return await _observed("get_fdh_topology", self.trees.get_fdh_topology(fdh_id))


def build_topology_service(
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TopologyService:
    return TopologyService(
        InventoryClient.from_settings(token=token, transport=transport),
        CustomerClient.from_settings(token=token, transport=transport),
        fanout_limit=settings.topology_fanout_limit,
    )


__all__ = [
    "BrokenHierarchyError",
    "CollaboratorRejectedError",
    "CollaboratorUnavailableError",
    "CustomerClient",
    "CustomerInactiveError",
    "DeviceClass",
    "DeviceNotAssignedError",
    "DeviceResolver",
    "InventoryClient",
    "NotFoundError",
    "PathComposer",
    "TopologyError",
    "TopologyService",
    "TreeComposer",
    "UnsupportedAssetTypeError",
    "build_topology_service",
    "classify",
    "flatten",
]
