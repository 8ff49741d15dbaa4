"""
Correlation ID context shared by HTTP requests and broker deliveries
"""

from contextvars import ContextVar
from typing import Optional

# Context variable to store correlation ID for the current request or delivery
correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID from the current context"""
    return correlation_id_ctx.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set the correlation ID in the current context"""
    correlation_id_ctx.set(correlation_id)
