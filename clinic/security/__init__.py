"""
Shared stateless authentication: tokens, request filter and route guards
"""

from .principal import Principal, Role, SecurityContext
from .tokens import TokenService, INVALID_TOKEN
from .middleware import AuthenticationMiddleware, extract_bearer_token
from .dependencies import get_security_context, require_authenticated, require_role

__all__ = [
    "Principal",
    "Role",
    "SecurityContext",
    "TokenService",
    "INVALID_TOKEN",
    "AuthenticationMiddleware",
    "extract_bearer_token",
    "get_security_context",
    "require_authenticated",
    "require_role",
]
