"""FastAPI dependencies for authentication and tenant resolution."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from imprint.core.errors import ErrorKind
from imprint.core.permissions import parse_roles
from imprint.core.security import decode_session_token
from imprint.models.user import UserRole
from imprint.services import resolver

bearer_scheme = HTTPBearer()

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AuthContext:
    """Identity decoded from the caller's session token."""

    __slots__ = ("user_id", "external_org_id", "roles")

    def __init__(self, user_id: str, external_org_id: str, roles: list[UserRole]) -> None:
        self.user_id = user_id
        self.external_org_id = external_org_id
        self.roles = roles


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> AuthContext:
    try:
        payload = decode_session_token(credentials.credentials)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session token",
        ) from exc

    user_id = payload.get("sub")
    org_id = payload.get("org_id")
    if not user_id or not org_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session token has no active organization",
        )

    try:
        roles = parse_roles(payload.get("roles"))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    return AuthContext(user_id=user_id, external_org_id=org_id, roles=roles)


async def get_tenant_id(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> uuid.UUID:
    tenant_id = await resolver.resolve_tenant_id(auth.external_org_id)
    if tenant_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=resolver.NOT_PROVISIONED_MESSAGE,
        )
    return tenant_id


def raise_for_error(kind: ErrorKind | None, message: str | None) -> None:
    """Translate a failed ``ActionResult`` into an HTTP error."""
    raise HTTPException(
        status_code=ERROR_STATUS.get(kind or ErrorKind.INTERNAL, 500),
        detail=message or "Request failed",
    )


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
TenantId = Annotated[uuid.UUID, Depends(get_tenant_id)]
