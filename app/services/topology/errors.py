"""Error taxonomy for topology traces.

Every error carries the HTTP status and machine-readable code it is rendered
with by ``app.errors``. Collaborator failures are split by kind so callers
can tell a missing record from an unreachable service.
"""

from __future__ import annotations


class TopologyError(Exception):
    """Base exception for topology tracing failures."""

    status_code = 500
    code = "topology_error"

    def __init__(self, message: str, details: object | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(TopologyError):
    """A customer, asset or hierarchy record does not exist."""

    status_code = 404
    code = "not_found"


class BrokenHierarchyError(NotFoundError):
    """A record exists but its parent reference is missing."""

    code = "broken_hierarchy"


class CollaboratorUnavailableError(TopologyError):
    """Network failure, timeout, 5xx or unreadable body from a collaborator."""

    status_code = 503
    code = "service_communication_error"


class CollaboratorRejectedError(TopologyError):
    """A collaborator refused the request with a 4xx other than 404."""

    status_code = 502
    code = "collaborator_rejected"

    def __init__(self, message: str, upstream_status: int, details: object | None = None):
        super().__init__(message, details)
        self.upstream_status = upstream_status


class CustomerInactiveError(TopologyError):
    status_code = 409
    code = "customer_inactive"


class DeviceNotAssignedError(TopologyError):
    status_code = 400
    code = "device_not_assigned"


class UnsupportedAssetTypeError(TopologyError):
    status_code = 400
    code = "unsupported_asset_type"
