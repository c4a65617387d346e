from fastapi import Depends

from app.services.auth_dependencies import require_role, require_user_auth
from app.services.topology import TopologyService, build_topology_service


def get_topology_service(auth=Depends(require_user_auth)) -> TopologyService:
    """Topology service that forwards the caller's token to collaborators."""
    return build_topology_service(token=auth["token"])


__all__ = [
    "get_topology_service",
    "require_role",
    "require_user_auth",
]
