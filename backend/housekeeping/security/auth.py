"""
Authentication context

Tokens are issued by the external auth service; this module only decodes
them into an Actor. create_access_token exists for that service and tests.
"""
import logging
from datetime import datetime, timedelta, UTC
from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from housekeeping.config import settings
from housekeeping.models.domain import Actor, ActorRole

logger = logging.getLogger(__name__)

security = HTTPBearer()


def create_access_token(actor_id: str, name: str, role: ActorRole) -> str:
    """Create a JWT carrying sub / name / role"""
    expire = datetime.now(UTC) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "sub": actor_id,
        "name": name,
        "role": role.value if isinstance(role, ActorRole) else str(role),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    payload = decode_token(credentials.credentials)

    actor_id = payload.get("sub")
    role = payload.get("role")
    if not actor_id or role not in {r.value for r in ActorRole}:
        logger.warning(f"Rejected token with sub={actor_id!r} role={role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing actor id or role"
        )

    return Actor(id=str(actor_id), name=payload.get("name") or str(actor_id), role=ActorRole(role))


def require_role(allowed_roles: List[ActorRole]):
    """Dependency factory: 403 unless the actor has one of allowed_roles"""
    async def role_checker(actor: Actor = Depends(get_current_actor)):
        if actor.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return actor
    return role_checker


require_manager = require_role([ActorRole.MANAGER])
require_housekeeper = require_role([ActorRole.HOUSEKEEPER])
require_any_role = require_role([ActorRole.MANAGER, ActorRole.HOUSEKEEPER])
