"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from kasa_gateway.config import settings
from kasa_gateway.domain.models import Actor, Role
from kasa_gateway.domain.pricing import DEFAULT_PRICING, PricingConfig

security = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_pricing() -> PricingConfig:
    """Provide the unit price tables; override in tests to change prices"""
    return DEFAULT_PRICING


def get_current_actor(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Actor:
    """Verify the bearer token and resolve the caller"""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    uid = payload.get("uid") or payload.get("sub")
    if not uid:
        raise HTTPException(status_code=401, detail="Token has no subject")

    role = str(payload.get("role") or settings.default_role).lower()
    return Actor(uid=str(uid), email=payload.get("email") or "", role=role)


def require_roles(*roles: Role):
    """Allow the endpoint only for callers holding one of ``roles``"""

    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.has_role(*roles):
            raise HTTPException(status_code=403, detail="Access denied for your role")
        return actor

    return checker
