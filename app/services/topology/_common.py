"""Shared helpers for topology composers: node builders and bounded fan-out."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TypeVar

from app.schemas.topology import (
    CoreSwitchRecord,
    CustomerAssignment,
    FdhRecord,
    HeadendRecord,
    HierarchicalNode,
    NodeType,
    SplitterRecord,
)
from app.services.topology.errors import BrokenHierarchyError

T = TypeVar("T")
R = TypeVar("R")


def splitter_label(splitter: SplitterRecord) -> str:
    return f"Splitter-{splitter.id}"


def splitter_detail(splitter: SplitterRecord) -> str:
    detail = f"{splitter.port_capacity} Ports"
    if splitter.neighborhood:
        detail += f", {splitter.neighborhood}"
    return detail


def headend_node(headend: HeadendRecord) -> HierarchicalNode:
    return HierarchicalNode(
        type=NodeType.headend,
        identifier=headend.name,
        detail=headend.location,
        serial_number=headend.serial_number,
        model=headend.model,
    )


def core_switch_node(core_switch: CoreSwitchRecord) -> HierarchicalNode:
    return HierarchicalNode(
        type=NodeType.core_switch,
        identifier=core_switch.name,
        detail=core_switch.location,
        serial_number=core_switch.serial_number,
        model=core_switch.model,
    )


def fdh_node(fdh: FdhRecord) -> HierarchicalNode:
    return HierarchicalNode(
        type=NodeType.fdh,
        identifier=fdh.name,
        detail=fdh.region,
        serial_number=fdh.serial_number,
        model=fdh.model,
    )


def splitter_node(splitter: SplitterRecord) -> HierarchicalNode:
    return HierarchicalNode(
        type=NodeType.splitter,
        identifier=splitter_label(splitter),
        detail=splitter_detail(splitter),
        serial_number=splitter.serial_number,
        model=splitter.model,
    )


def customer_node(customer: CustomerAssignment) -> HierarchicalNode:
    port = customer.assigned_port if customer.assigned_port is not None else "-"
    return HierarchicalNode(
        type=NodeType.customer,
        identifier=customer.name,
        detail=f"Port: {port}",
        assets=list(customer.assigned_assets),
    )


def link_path(nodes: Sequence[HierarchicalNode]) -> HierarchicalNode:
    """Chain nodes root-first so each node's ``child`` is the next one."""
    if not nodes:
        raise ValueError("Cannot link an empty path")
    child: HierarchicalNode | None = None
    for node in reversed(nodes):
        child = node.model_copy(update={"child": child})
    return child


def require_parent(parent_id: int | None, message: str) -> int:
    if parent_id is None:
        raise BrokenHierarchyError(message)
    return parent_id


def group_by_parent(
    records: Iterable[T], parent_of: Callable[[T], int | None]
) -> dict[int | None, list[T]]:
    """Group records by parent id, keeping the order they arrived in."""
    grouped: dict[int | None, list[T]] = {}
    for record in records:
        grouped.setdefault(parent_of(record), []).append(record)
    return grouped


async def gather_all(*awaitables: Awaitable[R]) -> list[R]:
    """Await ``awaitables`` concurrently, in order.

    The first failure cancels every awaitable still pending and is re-raised.
    """
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def gather_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    limit: int,
) -> list[R]:
    """Run ``func`` over ``items`` with at most ``limit`` calls in flight.

    Results keep the order of ``items``. The first failure cancels every
    call still pending and is re-raised.
    """
    if not items:
        return []
    semaphore = asyncio.Semaphore(max(limit, 1))

    async def _run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return await gather_all(*(_run(item) for item in items))
