"""
Login and registration endpoints shared by the doctor and patient services
"""

from fastapi import APIRouter, Depends, Response, status

from clinic.core.errors import ErrorResponse, ErrorResponseModel
from clinic.core.logger import logger
from clinic.dependencies import get_accounts, get_token_service
from clinic.repositories.accounts import AccountRepository
from clinic.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from clinic.security.passwords import hash_password, verify_password
from clinic.security.principal import Role
from clinic.security.tokens import TokenService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponseModel}},
)
async def login(
    credentials: LoginRequest,
    accounts: AccountRepository = Depends(get_accounts),
    token_service: TokenService = Depends(get_token_service),
):
    """Exchange email and password for a bearer token valid for two hours"""
    email = str(credentials.email)
    account = await accounts.find_by_email(email)
    if account is None or not verify_password(credentials.password, account.get("password")):
        logger.warning("Login failed", metadata={"event": "login_failure"})
        raise ErrorResponse("Invalid credentials", status_code=status.HTTP_401_UNAUTHORIZED)

    token = token_service.issue(email)
    logger.info("Login succeeded", metadata={"event": "login_success", "accountId": account["_id"]})
    return TokenResponse(token=token)


@router.post(
    "/register",
    responses={400: {"model": ErrorResponseModel}},
)
async def register(
    data: RegisterRequest,
    accounts: AccountRepository = Depends(get_accounts),
):
    """Create an account with a hashed password; 400 if the email is taken"""
    email = str(data.email)
    if await accounts.find_by_email(email) is not None:
        raise ErrorResponse("Email already registered", status_code=status.HTTP_400_BAD_REQUEST)

    await accounts.create(email, hash_password(data.password), Role.parse(data.role))
    return Response(status_code=status.HTTP_200_OK)
