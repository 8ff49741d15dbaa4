"""
Error types and FastAPI exception handlers shared by the services
"""

import traceback
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from clinic.core.config import config
from clinic.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: Optional[dict] = None


class TokenCreationError(Exception):
    """Signing a token failed; unexpected and never retried"""


class EventPublishError(Exception):
    """The broker did not accept a published event"""


class BrokerUnavailableError(Exception):
    """No usable broker connection, or the broker refused an operation"""


class MessageDecodeError(Exception):
    """A delivered message body can never be converted into an event"""


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = {
        "event": "error_response",
        "status_code": exc.status_code,
        "url": str(request.url),
        "method": request.method,
        **exc.details,
    }
    logger.error(f"Error: {exc.message}", metadata=metadata)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.warning(
        f"HTTPException: {exc.detail}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def token_creation_error_handler(request: Request, exc: TokenCreationError):
    """Signing failures surface as a hard error on the login path"""
    metadata = {"event": "token_creation_failed", "url": str(request.url)}
    if config.environment == "development":
        metadata["traceback"] = traceback.format_exc()

    logger.error("Error while generating token", error=exc, metadata=metadata)

    return JSONResponse(status_code=500, content={"error": "Error while generating token"})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": exc.errors()}
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the shared exception handlers to a service app"""
    app.add_exception_handler(ErrorResponse, error_response_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(TokenCreationError, token_creation_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
