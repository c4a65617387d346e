from typing import Any, cast

from fastapi import Depends, Header, HTTPException
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None


def _normalize_role(role: str) -> str:
    role = role.strip().upper()
    if role.startswith("ROLE_"):
        return role[len("ROLE_"):]
    return role


def _claim_roles(payload: dict) -> list[str]:
    roles: list[str] = []
    role_value = payload.get("role")
    roles_value = payload.get("roles")
    if isinstance(role_value, str):
        roles.append(role_value)
    if isinstance(roles_value, list):
        roles.extend(str(item) for item in roles_value)
    elif isinstance(roles_value, str):
        roles.extend(roles_value.split(","))
    return [_normalize_role(role) for role in roles if role.strip()]


def decode_access_token(token: str) -> dict:
    try:
        settings.validate_jwt_config()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail="JWT secret not configured") from exc
    try:
        payload = cast(
            dict[Any, Any],
            jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]),
        )
    except ExpiredSignatureError as exc:
        raise HTTPException(status_code=401, detail="Token expired") from exc
    except JWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload


def require_user_auth(authorization: str | None = Header(default=None)):
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    payload = decode_access_token(token)
    return {
        "subject": str(payload["sub"]),
        "roles": _claim_roles(payload),
        "token": token,
    }


def require_role(*role_names: str):
    """Allow the request when the token carries any of ``role_names``."""
    allowed = {_normalize_role(name) for name in role_names}

    def _require_role(auth=Depends(require_user_auth)):
        if allowed & set(auth.get("roles") or []):
            return auth
        raise HTTPException(status_code=403, detail="Forbidden")

    return _require_role
