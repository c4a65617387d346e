"""Topology tracing API."""

from fastapi import APIRouter, Depends

from app.api.deps import get_topology_service, require_role
from app.schemas.topology import (
    CustomerPathResponse,
    FdhTopologyResponse,
    InfrastructurePathResponse,
    TopologyNode,
)
from app.services.topology import TopologyService

router = APIRouter(prefix="/topology", tags=["topology"])


@router.get(
    "/customer/{customer_id}",
    response_model=CustomerPathResponse,
    response_model_exclude_none=True,
)
async def trace_customer_path(
    customer_id: int,
    service: TopologyService = Depends(get_topology_service),
):
    return await service.trace_customer_path(customer_id)


@router.get(
    "/device/{serial_number}",
    response_model=CustomerPathResponse | InfrastructurePathResponse,
    response_model_exclude_none=True,
)
async def trace_device_path(
    serial_number: str,
    service: TopologyService = Depends(get_topology_service),
):
    return await service.trace_device_path(serial_number)


@router.get(
    "/infrastructure/{serial_number}",
    response_model=InfrastructurePathResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_role("ADMIN", "PLANNER", "SUPPORT_AGENT"))],
)
async def trace_infrastructure_path(
    serial_number: str,
    service: TopologyService = Depends(get_topology_service),
):
    return await service.trace_infrastructure_path(serial_number)


@router.get(
    "/fdh/{fdh_id}",
    response_model=FdhTopologyResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_role("ADMIN", "PLANNER"))],
)
async def get_fdh_topology(
    fdh_id: int,
    service: TopologyService = Depends(get_topology_service),
):
    return await service.get_fdh_topology(fdh_id)


@router.get(
    "/headend/{headend_id}",
    response_model=TopologyNode,
    response_model_exclude_none=True,
    dependencies=[Depends(require_role("ADMIN", "PLANNER"))],
)
async def get_headend_topology(
    headend_id: int,
    service: TopologyService = Depends(get_topology_service),
):
    return await service.get_headend_topology(headend_id)
