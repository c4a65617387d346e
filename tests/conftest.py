import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time; pin them before any app module loads.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("COLLABORATOR_RETRIES", "0")

import pytest
from jose import jwt

from app.services.topology import TopologyService
from tests.mocks import build_scenario


@pytest.fixture
def scenario():
    """Fake inventory and customer collaborators seeded with one full branch."""
    return build_scenario()


@pytest.fixture
def inventory(scenario):
    return scenario[0]


@pytest.fixture
def customers(scenario):
    return scenario[1]


@pytest.fixture
def topology_service(inventory, customers):
    return TopologyService(inventory, customers, fanout_limit=4)


@pytest.fixture
def make_token():
    def _make(
        roles: list[str] | None = None,
        subject: str = "planner@example.com",
        expires_in: timedelta = timedelta(minutes=15),
        secret: str | None = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "roles": roles or [],
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
        }
        return jwt.encode(
            payload,
            secret or os.environ["JWT_SECRET"],
            algorithm=os.environ["JWT_ALGORITHM"],
        )

    return _make
