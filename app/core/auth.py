from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import verify_token
from app.domains.identity.entities import Identity

security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Зависимость для получения текущего пользователя и организации"""
    if credentials is None:
        raise UnauthorizedError()

    payload = verify_token(credentials.credentials)
    identity = Identity.from_claims(payload) if payload else None

    if identity is None:
        raise UnauthorizedError("Could not validate credentials")

    return identity


async def get_tenant_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Зависимость для операций, требующих организацию"""
    if not identity.tenant_id:
        raise ForbiddenError("An organization is required for this operation")
    return identity
