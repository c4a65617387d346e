from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AssetType(enum.Enum):
    ont = "ONT"
    router = "ROUTER"
    splitter = "SPLITTER"
    fdh = "FDH"
    core_switch = "CORE_SWITCH"
    headend = "HEADEND"
    fiber_roll = "FIBER_ROLL"


CUSTOMER_FACING_TYPES = frozenset({AssetType.ont, AssetType.router})
INFRASTRUCTURE_TYPES = frozenset(
    {AssetType.splitter, AssetType.fdh, AssetType.core_switch, AssetType.headend}
)


class CustomerStatus(enum.Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    pending = "PENDING"


class NodeType(enum.Enum):
    headend = "HEADEND"
    core_switch = "CORE_SWITCH"
    fdh = "FDH"
    splitter = "SPLITTER"
    customer = "CUSTOMER"


class TopologyModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# -----------------------------------------------------------------------------
# Collaborator records
# -----------------------------------------------------------------------------


class AssetDetail(TopologyModel):
    asset_type: str | None = None
    serial_number: str | None = None
    model: str | None = None


class AssetRecord(TopologyModel):
    id: int
    serial_number: str
    asset_type: AssetType
    model: str | None = None
    asset_status: str | None = None
    location: str | None = None
    assigned_to_customer_id: int | None = None
    created_at: datetime | None = None


class AssetAssignmentDetails(TopologyModel):
    asset_id: int | None = None
    customer_id: int | None = None
    asset_serial_number: str | None = None
    asset_type: AssetType
    next_device_id: int | None = None
    next_device_serial_number: str | None = None


class CustomerAssignment(TopologyModel):
    customer_id: int
    name: str | None = None
    splitter_id: int | None = None
    assigned_port: int | None = None
    status: CustomerStatus
    assigned_assets: list[AssetDetail] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("assigned_assets", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class HeadendRecord(TopologyModel):
    id: int
    name: str | None = None
    location: str | None = None
    serial_number: str | None = None
    model: str | None = None


class CoreSwitchRecord(TopologyModel):
    id: int
    name: str | None = None
    location: str | None = None
    headend_id: int | None = None
    serial_number: str | None = None
    model: str | None = None


class FdhRecord(TopologyModel):
    id: int
    name: str | None = None
    region: str | None = None
    core_switch_id: int | None = None
    serial_number: str | None = None
    model: str | None = None


class SplitterRecord(TopologyModel):
    id: int
    fdh_id: int | None = None
    port_capacity: int = 0
    used_ports: int = 0
    serial_number: str | None = None
    neighborhood: str | None = None
    model: str | None = None


# -----------------------------------------------------------------------------
# Trace results
# -----------------------------------------------------------------------------


class HierarchicalNode(TopologyModel):
    type: NodeType
    identifier: str | None = None
    detail: str | None = None
    serial_number: str | None = None
    model: str | None = None
    assets: list[AssetDetail] | None = None
    child: HierarchicalNode | None = None

    def walk(self):
        """Yield this node and every descendant, root first."""
        node: HierarchicalNode | None = self
        while node is not None:
            yield node
            node = node.child


class CustomerPathResponse(TopologyModel):
    customer_id: int
    customer_name: str | None = None
    path: HierarchicalNode


class InfrastructurePathResponse(TopologyModel):
    start_device_serial_number: str
    start_device_type: AssetType
    path: HierarchicalNode


class TopologyNode(TopologyModel):
    type: NodeType
    id: int
    identifier: str | None = None
    detail: str | None = None
    serial_number: str | None = None
    model: str | None = None
    capacity: int | None = None
    used: int | None = None
    customers: list[CustomerAssignment] | None = None
    children: list[TopologyNode] = Field(default_factory=list)


class SplitterView(TopologyModel):
    splitter_id: int
    capacity: int
    used: int
    connected_customers: list[CustomerAssignment] = Field(default_factory=list)


class FdhTopologyResponse(TopologyModel):
    fdh_id: int
    fdh_name: str | None = None
    region: str | None = None
    splitters: list[SplitterView] = Field(default_factory=list)


HierarchicalNode.model_rebuild()
TopologyNode.model_rebuild()
