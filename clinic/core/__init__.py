"""
Core module initialization
"""

from .config import config, Config
from .errors import (
    ErrorResponse,
    ErrorResponseModel,
    TokenCreationError,
    EventPublishError,
    BrokerUnavailableError,
    MessageDecodeError,
)
from .logger import logger

__all__ = [
    "config",
    "Config",
    "ErrorResponse",
    "ErrorResponseModel",
    "TokenCreationError",
    "EventPublishError",
    "BrokerUnavailableError",
    "MessageDecodeError",
    "logger",
]
