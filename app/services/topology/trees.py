"""Subtree views for a headend or an FDH.

Each hierarchy level under a headend is loaded with a single bulk lookup and
grouped by parent id before assembly, so assembly itself never calls out.
Connected customers are the one per-node lookup: one call per splitter,
issued concurrently under the fan-out limit.
"""

from __future__ import annotations

import logging

from app.schemas.topology import (
    CoreSwitchRecord,
    CustomerAssignment,
    FdhRecord,
    FdhTopologyResponse,
    HeadendRecord,
    NodeType,
    SplitterRecord,
    SplitterView,
    TopologyNode,
)
from app.services.topology._common import (
    gather_all,
    gather_bounded,
    group_by_parent,
    splitter_detail,
    splitter_label,
)
from app.services.topology.clients import CustomerClient, InventoryClient

logger = logging.getLogger(__name__)


class TreeComposer:
    def __init__(
        self,
        inventory: InventoryClient,
        customers: CustomerClient,
        fanout_limit: int = 8,
    ):
        self.inventory = inventory
        self.customers = customers
        self.fanout_limit = fanout_limit

    async def get_headend_topology(self, headend_id: int) -> TopologyNode:
        logger.info("Building topology for headend %s", headend_id)
        headend, core_switches = await gather_all(
            self.inventory.get_headend(headend_id),
            self.inventory.get_core_switches_by_headend(headend_id),
        )
        fdhs = await self.inventory.get_fdhs_by_core_switches([cs.id for cs in core_switches])
        splitters = await self.inventory.get_splitters_by_fdhs([fdh.id for fdh in fdhs])

        fdhs_by_core_switch = group_by_parent(fdhs, lambda fdh: fdh.core_switch_id)
        splitters_by_fdh = group_by_parent(splitters, lambda splitter: splitter.fdh_id)
        customers_by_splitter = await self._customers_by_splitter(splitters)

        tree = _headend_tree(
            headend,
            [
                _core_switch_tree(
                    core_switch,
                    [
                        _fdh_tree(
                            fdh,
                            [
                                _splitter_tree(splitter, customers_by_splitter[splitter.id])
                                for splitter in splitters_by_fdh.get(fdh.id, [])
                            ],
                        )
                        for fdh in fdhs_by_core_switch.get(core_switch.id, [])
                    ],
                )
                for core_switch in core_switches
            ],
        )
        logger.info(
            "Headend %s topology: %d core switches, %d FDHs, %d splitters",
            headend_id,
            len(core_switches),
            len(fdhs),
            len(splitters),
        )
        return tree

    async def get_fdh_topology(self, fdh_id: int) -> FdhTopologyResponse:
        logger.info("Building topology for FDH %s", fdh_id)
        fdh, splitters = await gather_all(
            self.inventory.get_fdh(fdh_id),
            self.inventory.get_splitters_by_fdh(fdh_id),
        )
        customers_by_splitter = await self._customers_by_splitter(splitters)
        return FdhTopologyResponse(
            fdh_id=fdh.id,
            fdh_name=fdh.name,
            region=fdh.region,
            splitters=[
                SplitterView(
                    splitter_id=splitter.id,
                    capacity=splitter.port_capacity,
                    used=splitter.used_ports,
                    connected_customers=customers_by_splitter[splitter.id],
                )
                for splitter in splitters
            ],
        )

    async def _customers_by_splitter(
        self, splitters: list[SplitterRecord]
    ) -> dict[int, list[CustomerAssignment]]:
        results = await gather_bounded(
            self.customers.get_customers_by_splitter,
            [splitter.id for splitter in splitters],
            self.fanout_limit,
        )
        return {splitter.id: customers for splitter, customers in zip(splitters, results)}


def flatten(tree: TopologyNode) -> list[tuple[int | None, NodeType, int]]:
    """Return ``(parent_id, type, id)`` for every node, depth first."""
    edges: list[tuple[int | None, NodeType, int]] = []
    stack: list[tuple[int | None, TopologyNode]] = [(None, tree)]
    while stack:
        parent_id, node = stack.pop()
        edges.append((parent_id, node.type, node.id))
        stack.extend((node.id, child) for child in reversed(node.children))
    return edges


def _headend_tree(headend: HeadendRecord, children: list[TopologyNode]) -> TopologyNode:
    return TopologyNode(
        type=NodeType.headend,
        id=headend.id,
        identifier=headend.name,
        detail=headend.location,
        serial_number=headend.serial_number,
        model=headend.model,
        children=children,
    )


def _core_switch_tree(core_switch: CoreSwitchRecord, children: list[TopologyNode]) -> TopologyNode:
    return TopologyNode(
        type=NodeType.core_switch,
        id=core_switch.id,
        identifier=core_switch.name,
        detail=core_switch.location,
        serial_number=core_switch.serial_number,
        model=core_switch.model,
        children=children,
    )


def _fdh_tree(fdh: FdhRecord, children: list[TopologyNode]) -> TopologyNode:
    return TopologyNode(
        type=NodeType.fdh,
        id=fdh.id,
        identifier=fdh.name,
        detail=fdh.region,
        serial_number=fdh.serial_number,
        model=fdh.model,
        children=children,
    )


def _splitter_tree(
    splitter: SplitterRecord, customers: list[CustomerAssignment]
) -> TopologyNode:
    return TopologyNode(
        type=NodeType.splitter,
        id=splitter.id,
        identifier=splitter_label(splitter),
        detail=splitter_detail(splitter),
        serial_number=splitter.serial_number,
        model=splitter.model,
        capacity=splitter.port_capacity,
        used=splitter.used_ports,
        customers=customers,
    )
