"""HTTP clients for the customer and inventory collaborators.

Both clients are read-only. Failures are mapped at this boundary into the
three collaborator error kinds so the composers never see httpx exceptions:

- 404                      -> NotFoundError
- other 4xx                -> CollaboratorRejectedError
- 5xx, timeouts, transport -> CollaboratorUnavailableError (retried)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from app.config import settings
from app.metrics import observe_collaborator_call
from app.schemas.topology import (
    AssetAssignmentDetails,
    AssetRecord,
    CoreSwitchRecord,
    CustomerAssignment,
    FdhRecord,
    HeadendRecord,
    SplitterRecord,
)
from app.services.topology.errors import (
    CollaboratorRejectedError,
    CollaboratorUnavailableError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(item) for item in ids)


class ServiceClient:
    """Async JSON client for one collaborator service."""

    service_name = "collaborator"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: str | None = None,
        retries: int = 0,
        retry_backoff: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Collaborator base URL (e.g., http://inventory-service)
            timeout: Per-request timeout in seconds
            token: Caller's bearer token, forwarded on every request
            retries: Extra attempts after a CollaboratorUnavailableError
            retry_backoff: Linear backoff step between attempts, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = max(retries, 0)
        self.retry_backoff = retry_backoff
        self.transport = transport
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(
        cls,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        return cls(
            base_url,
            timeout=settings.collaborator_timeout,
            token=token,
            retries=settings.collaborator_retries,
            retry_backoff=settings.collaborator_retry_backoff,
            transport=transport,
        )

    async def _send(
        self,
        operation: str,
        path: str,
        params: dict | None,
        not_found: str,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug("Outgoing %s request: GET %s params=%s", self.service_name, url, params)
        started = time.monotonic()
        outcome = "ok"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, headers=self.headers, transport=self.transport
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            body = e.response.text
            if status == 404:
                outcome = "not_found"
                raise NotFoundError(not_found) from e
            if status < 500:
                outcome = "rejected"
                logger.error(
                    "%s rejected %s: %s - %s", self.service_name, operation, status, body
                )
                raise CollaboratorRejectedError(
                    f"{self.service_name} rejected {operation} with status {status}",
                    upstream_status=status,
                    details=body or None,
                ) from e
            outcome = "server_error"
            logger.error("%s error on %s: %s - %s", self.service_name, operation, status, body)
            raise CollaboratorUnavailableError(
                f"Error communicating with {self.service_name}: {operation} returned {status}"
            ) from e
        except httpx.TimeoutException as e:
            outcome = "timeout"
            logger.error("%s timed out on %s: %s", self.service_name, operation, e)
            raise CollaboratorUnavailableError(
                f"Error communicating with {self.service_name}: {operation} timed out"
            ) from e
        except httpx.RequestError as e:
            outcome = "transport_error"
            logger.exception("%s request error on %s", self.service_name, operation)
            raise CollaboratorUnavailableError(
                f"Error communicating with {self.service_name}: {e}"
            ) from e
        finally:
            observe_collaborator_call(
                self.service_name, operation, outcome, time.monotonic() - started
            )

    async def _request(
        self,
        operation: str,
        path: str,
        params: dict | None = None,
        not_found: str = "Record not found",
    ) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return await self._send(operation, path, params, not_found)
            except CollaboratorUnavailableError:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning(
                    "Retrying %s %s (attempt %d of %d)",
                    self.service_name,
                    operation,
                    attempt + 1,
                    self.retries + 1,
                )
                await asyncio.sleep(self.retry_backoff * attempt)

    def _parse(self, operation: str, response: httpx.Response, adapter: TypeAdapter):
        try:
            return adapter.validate_python(response.json())
        except (ValidationError, ValueError) as e:
            logger.error("Invalid %s response for %s: %s", self.service_name, operation, e)
            raise CollaboratorUnavailableError(
                f"Invalid response from {self.service_name} for {operation}"
            ) from e

    async def _get_one(
        self, operation: str, path: str, model: type[M], not_found: str
    ) -> M:
        response = await self._request(operation, path, not_found=not_found)
        return self._parse(operation, response, TypeAdapter(model))

    async def _get_many(
        self,
        operation: str,
        path: str,
        model: type[M],
        params: dict | None = None,
        not_found: str = "Record not found",
    ) -> list[M]:
        response = await self._request(operation, path, params=params, not_found=not_found)
        if not response.content:
            return []
        return self._parse(operation, response, TypeAdapter(list[model]))


class CustomerClient(ServiceClient):
    """Customer collaborator: assignments and customers per splitter."""

    service_name = "customer-service"

    @classmethod
    def from_settings(cls, token=None, transport=None):
        return super().from_settings(settings.customer_service_url, token, transport)

    async def get_customer_assignment(self, customer_id: int) -> CustomerAssignment:
        return await self._get_one(
            "get_customer_assignment",
            f"/api/customers/{customer_id}/assignment",
            CustomerAssignment,
            not_found=f"Customer {customer_id} not found",
        )

    async def get_customers_by_splitter(self, splitter_id: int) -> list[CustomerAssignment]:
        return await self._get_many(
            "get_customers_by_splitter",
            f"/api/customers/splitter/{splitter_id}",
            CustomerAssignment,
            not_found=f"Splitter {splitter_id} not found",
        )


class InventoryClient(ServiceClient):
    """Inventory collaborator: assets and the distribution hierarchy."""

    service_name = "inventory-service"

    @classmethod
    def from_settings(cls, token=None, transport=None):
        return super().from_settings(settings.inventory_service_url, token, transport)

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    async def get_asset_by_serial(self, serial_number: str) -> AssetRecord:
        return await self._get_one(
            "get_asset_by_serial",
            f"/api/inventory/assets/{quote(serial_number, safe='')}",
            AssetRecord,
            not_found=f"Device with serial number '{serial_number}' not found",
        )

    async def get_asset_assignment(self, serial_number: str) -> AssetAssignmentDetails:
        return await self._get_one(
            "get_asset_assignment",
            f"/api/inventory/assets/assignment/{quote(serial_number, safe='')}",
            AssetAssignmentDetails,
            not_found=f"Device with serial number '{serial_number}' not found",
        )

    # -------------------------------------------------------------------------
    # Hierarchy records by id
    # -------------------------------------------------------------------------

    async def get_headend(self, headend_id: int) -> HeadendRecord:
        return await self._get_one(
            "get_headend",
            f"/api/inventory/headends/{headend_id}",
            HeadendRecord,
            not_found=f"Headend {headend_id} not found",
        )

    async def get_core_switch(self, core_switch_id: int) -> CoreSwitchRecord:
        return await self._get_one(
            "get_core_switch",
            f"/api/inventory/core-switches/{core_switch_id}",
            CoreSwitchRecord,
            not_found=f"Core switch {core_switch_id} not found",
        )

    async def get_fdh(self, fdh_id: int) -> FdhRecord:
        return await self._get_one(
            "get_fdh",
            f"/api/inventory/fdhs/{fdh_id}",
            FdhRecord,
            not_found=f"FDH {fdh_id} not found",
        )

    async def get_splitter(self, splitter_id: int) -> SplitterRecord:
        return await self._get_one(
            "get_splitter",
            f"/api/inventory/splitters/{splitter_id}",
            SplitterRecord,
            not_found=f"Splitter {splitter_id} not found",
        )

    # -------------------------------------------------------------------------
    # Bulk lookups
    # -------------------------------------------------------------------------

    async def get_splitters_by_fdh(self, fdh_id: int) -> list[SplitterRecord]:
        return await self._get_many(
            "get_splitters_by_fdh",
            f"/api/inventory/fdhs/{fdh_id}/splitters",
            SplitterRecord,
            not_found=f"FDH {fdh_id} not found",
        )

    async def get_core_switches_by_headend(self, headend_id: int) -> list[CoreSwitchRecord]:
        return await self._get_many(
            "get_core_switches_by_headend",
            f"/api/inventory/headends/{headend_id}/core-switches",
            CoreSwitchRecord,
            not_found=f"Headend {headend_id} not found",
        )

    async def get_fdhs_by_core_switches(self, core_switch_ids: list[int]) -> list[FdhRecord]:
        if not core_switch_ids:
            return []
        return await self._get_many(
            "get_fdhs_by_core_switches",
            "/api/inventory/fdhs",
            FdhRecord,
            params={"coreSwitchIds": _join_ids(core_switch_ids)},
        )

    async def get_splitters_by_fdhs(self, fdh_ids: list[int]) -> list[SplitterRecord]:
        if not fdh_ids:
            return []
        return await self._get_many(
            "get_splitters_by_fdhs",
            "/api/inventory/splitters",
            SplitterRecord,
            params={"fdhIds": _join_ids(fdh_ids)},
        )
