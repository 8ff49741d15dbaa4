"""
FastAPI dependencies resolving per-service collaborators from app.state
"""

from typing import Optional

from fastapi import Request

from clinic.messaging.publisher import ScheduleEventPublisher
from clinic.repositories.accounts import AccountRepository
from clinic.repositories.patients import PatientRepository
from clinic.security.principal import Principal
from clinic.security.tokens import TokenService


def get_accounts(request: Request) -> AccountRepository:
    return request.app.state.accounts


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_patients(request: Request) -> PatientRepository:
    return request.app.state.patients


def get_publisher(request: Request) -> ScheduleEventPublisher:
    return request.app.state.publisher


async def load_principal(request: Request, email: str) -> Optional[Principal]:
    """Principal loader for AuthenticationMiddleware backed by the service's account store"""
    accounts: Optional[AccountRepository] = getattr(request.app.state, "accounts", None)
    if accounts is None:
        return None
    return await accounts.load_principal(email)
