"""
Schedule event publisher
Broadcasts committed schedule events to the fanout exchange
"""

import uuid

from clinic.core.correlation import get_correlation_id
from clinic.core.errors import BrokerUnavailableError, EventPublishError
from clinic.core.logger import logger
from clinic.events.schedule_event import ScheduleEvent
from .i_message_broker import IMessageBroker
from .topology import SCHEDULES_CREATED_EXCHANGE


class ScheduleEventPublisher:
    """Fire-and-forget publisher: success means the broker accepted the message"""

    def __init__(self, broker: IMessageBroker):
        self.broker = broker

    async def publish(self, exchange_name: str, routing_key: str, event: ScheduleEvent) -> str:
        """
        Publish an event to a fanout exchange

        Args:
            exchange_name: Target exchange
            routing_key: Passed through; fanout exchanges ignore it
            event: Event to serialize

        Returns:
            The message_id assigned to the message

        Raises:
            EventPublishError: If the broker did not accept the message
        """
        message_id = str(uuid.uuid4())
        correlation_id = get_correlation_id()

        try:
            await self.broker.publish(
                exchange_name,
                routing_key,
                event.to_message_body(),
                message_id=message_id,
                correlation_id=correlation_id,
            )
        except BrokerUnavailableError as e:
            logger.error(
                f"Failed to publish event to {exchange_name}",
                error=e,
                metadata={"exchange": exchange_name, "messageId": message_id},
            )
            raise EventPublishError(str(e)) from e

        logger.info(
            f"Published event to {exchange_name}",
            metadata={"exchange": exchange_name, "messageId": message_id, "email": event.email},
        )
        return message_id

    async def publish_schedule_created(self, event: ScheduleEvent) -> str:
        return await self.publish(SCHEDULES_CREATED_EXCHANGE, "", event)
