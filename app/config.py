import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class Settings(BaseModel):
    # Collaborator endpoints
    customer_service_url: str = Field(
        default=os.getenv("CUSTOMER_SERVICE_URL", "http://customer-service")
    )
    inventory_service_url: str = Field(
        default=os.getenv("INVENTORY_SERVICE_URL", "http://inventory-service")
    )
    collaborator_timeout: float = Field(
        default=float(os.getenv("COLLABORATOR_TIMEOUT", "10.0"))
    )
    collaborator_retries: int = Field(default=int(os.getenv("COLLABORATOR_RETRIES", "1")))
    collaborator_retry_backoff: float = Field(
        default=float(os.getenv("COLLABORATOR_RETRY_BACKOFF", "0.2"))
    )

    # Upper bound on concurrent lookups issued by one topology view
    topology_fanout_limit: int = Field(
        default=int(os.getenv("TOPOLOGY_FANOUT_LIMIT", "8"))
    )

    # JWT verification (tokens are issued by the auth service)
    jwt_secret: Optional[str] = Field(default=os.getenv("JWT_SECRET"))
    jwt_algorithm: str = Field(default=os.getenv("JWT_ALGORITHM", "HS256"))

    # Logging
    log_level: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    log_json: bool = Field(
        default=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes")
    )

    @field_validator("customer_service_url", "inventory_service_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("collaborator_retries", mode="after")
    @classmethod
    def non_negative_retries(cls, v: int) -> int:
        return max(v, 0)

    @field_validator("topology_fanout_limit", mode="after")
    @classmethod
    def positive_fanout(cls, v: int) -> int:
        return max(v, 1)

    def validate_jwt_config(self) -> None:
        """Validate JWT configuration when a request actually needs it."""
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET must be configured")

    class Config:
        frozen = True


settings = Settings()
