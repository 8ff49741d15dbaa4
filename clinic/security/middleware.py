"""
Authentication filter run once per inbound request.

Resolves a bearer token into a principal and stores the result on
``request.state.security_context``. The filter never rejects a request;
route dependencies decide whether anonymous access is allowed.
"""

from typing import Awaitable, Callable, Optional

from fastapi import Request
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware

from clinic.core.errors import ErrorResponse
from clinic.core.logger import logger
from clinic.security.principal import Principal, SecurityContext
from clinic.security.tokens import TokenService

BEARER_PREFIX = "Bearer "

PrincipalLoader = Callable[[Request, str], Awaitable[Optional[Principal]]]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential after 'Bearer ', or None when absent or malformed"""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Stateless authentication filter

    - Reads the Authorization header
    - Validates the token with the shared TokenService
    - Looks the subject up in the owning service's account store
    - Always forwards the request
    """

    def __init__(self, app, token_service: TokenService, principal_loader: PrincipalLoader):
        super().__init__(app)
        self.token_service = token_service
        self.principal_loader = principal_loader

    async def authenticate(self, request: Request) -> SecurityContext:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is None:
            return SecurityContext.anonymous()

        email = self.token_service.validate(token)
        if not email:
            return SecurityContext.anonymous()

        try:
            principal = await self.principal_loader(request, email)
        except (ErrorResponse, PyMongoError) as e:
            logger.warning(
                "Account lookup failed, continuing unauthenticated",
                metadata={"event": "principal_lookup_failed", "path": request.url.path, "error": str(e)}
            )
            return SecurityContext.anonymous()

        if principal is None:
            logger.warning(
                "Token subject has no account in this service",
                metadata={"event": "principal_not_found", "path": request.url.path}
            )
            return SecurityContext.anonymous()

        logger.debug(f"Authenticated request for {principal.email}")
        return SecurityContext(principal=principal)

    async def dispatch(self, request: Request, call_next):
        # request.state is scoped to this request only
        request.state.security_context = SecurityContext.anonymous()
        request.state.security_context = await self.authenticate(request)
        return await call_next(request)
