"""
Route-level authorization dependencies

Usage:
    @router.get("/")
    async def list_items(principal: Principal = Depends(require_authenticated)):
        ...

    @router.post("/", dependencies=[Depends(require_role("ADMIN"))])
    async def create_item(...):
        ...
"""

from fastapi import Depends, HTTPException, Request, status

from clinic.core.logger import logger
from clinic.security.principal import Principal, SecurityContext


def get_security_context(request: Request) -> SecurityContext:
    """Security context attached by AuthenticationMiddleware (anonymous if it did not run)"""
    context = getattr(request.state, "security_context", None)
    return context if context is not None else SecurityContext.anonymous()


def require_authenticated(
    context: SecurityContext = Depends(get_security_context),
) -> Principal:
    """Raises 401 unless the request carries a valid token for a known account"""
    if not context.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context.principal


def require_role(role: str):
    """Dependency factory: authenticated principal holding ``role``, else 403"""

    def dependency(principal: Principal = Depends(require_authenticated)) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                f"{role} access denied for {principal.email}",
                metadata={"event": "access_denied", "required_role": role}
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.capitalize()} privileges required",
            )
        return principal

    return dependency
