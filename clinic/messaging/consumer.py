"""
Base listener for schedule events delivered from a service's own queue.

Delivery is at-least-once: a message whose handler fails is requeued and
delivered again, and without deduplication its side effect is applied again.
Deduplication by message_id is opt-in.
"""

from abc import ABC, abstractmethod
from typing import Optional

from clinic.core.correlation import correlation_id_ctx
from clinic.core.logger import logger
from clinic.events.schedule_event import ScheduleEvent
from clinic.repositories.processed_events import ProcessedEventRepository
from .i_message_broker import Delivery, IMessageBroker


class ScheduleEventListener(ABC):
    """Decodes deliveries into ScheduleEvent values and applies a local side effect"""

    queue_name: str

    def __init__(self, processed_events: Optional[ProcessedEventRepository] = None):
        self.processed_events = processed_events

    async def start(self, broker: IMessageBroker) -> None:
        await broker.consume(self.queue_name, self.handle_delivery)

    async def handle_delivery(self, delivery: Delivery) -> None:
        """
        Broker callback. Raises MessageDecodeError for payloads that can never be
        converted; any other exception makes the broker redeliver.
        """
        token = correlation_id_ctx.set(delivery.correlation_id)
        try:
            event = ScheduleEvent.from_message_body(delivery.body)

            if self.processed_events is not None and delivery.message_id:
                if await self.processed_events.is_processed(delivery.message_id, self.queue_name):
                    logger.info(
                        "Skipping already processed schedule event",
                        metadata={"messageId": delivery.message_id, "queue": self.queue_name},
                    )
                    return

            await self.on_message(event)

            if self.processed_events is not None and delivery.message_id:
                await self.processed_events.mark_processed(delivery.message_id, self.queue_name)
        finally:
            correlation_id_ctx.reset(token)

    @abstractmethod
    async def on_message(self, event: ScheduleEvent) -> None:
        """Apply this service's side effect for one event"""
