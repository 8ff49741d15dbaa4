"""
Message Broker Interface
Defines the contract every broker client implements: topology declaration,
publishing to an exchange, and consuming from a queue with explicit acknowledgement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional


@dataclass(frozen=True)
class Delivery:
    """A message handed to a consumer handler"""

    queue: str
    body: bytes
    message_id: Optional[str] = None
    correlation_id: Optional[str] = None
    redelivered: bool = False


DeliveryHandler = Callable[[Delivery], Awaitable[None]]


class IMessageBroker(ABC):
    """
    Abstract base class for message broker implementations

    Acknowledgement contract for ``consume`` handlers:
    - handler returns normally: the delivery is acknowledged
    - handler raises MessageDecodeError: the delivery is rejected without requeue
    - handler raises anything else: the delivery is requeued for redelivery
    """

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the message broker"""

    @abstractmethod
    async def declare_exchange(self, exchange_name: str, durable: bool = True) -> None:
        """Declare a fanout exchange (idempotent)"""

    @abstractmethod
    async def declare_queue(self, queue_name: str, durable: bool = True) -> None:
        """Declare a queue (idempotent)"""

    @abstractmethod
    async def bind_queue(self, queue_name: str, exchange_name: str, routing_key: str = "") -> None:
        """Bind a queue to an exchange (idempotent)"""

    @abstractmethod
    async def publish(
        self,
        exchange_name: str,
        routing_key: str,
        body: bytes,
        message_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        content_type: str = "application/json",
    ) -> None:
        """
        Publish a persistent message; returns once the broker has accepted it

        Raises:
            BrokerUnavailableError: If the broker is unreachable or refuses the message
        """

    @abstractmethod
    async def consume(self, queue_name: str, handler: DeliveryHandler) -> None:
        """
        Attach ``handler`` to a queue; deliveries run on the broker client's own tasks
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the message broker"""

    @abstractmethod
    def is_healthy(self) -> bool:
        """True if connected and ready"""

    @abstractmethod
    async def get_stats(self, queue_name: str) -> Dict[str, Any]:
        """Queue statistics for monitoring"""
