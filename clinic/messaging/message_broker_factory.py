"""
Message Broker Factory
Creates the appropriate message broker instance based on configuration
"""

import logging

from clinic.core.config import Config
from .i_message_broker import IMessageBroker
from .rabbitmq_broker import RabbitMQBroker

logger = logging.getLogger(__name__)


class MessageBrokerFactory:
    """Factory for creating message broker instances"""

    @staticmethod
    def create(config: Config) -> IMessageBroker:
        """
        Create a message broker instance based on MESSAGE_BROKER_TYPE

        Returns:
            IMessageBroker implementation
        """
        broker_type = config.message_broker_type.lower()

        logger.info(f"Creating message broker: {broker_type}")

        if broker_type == "rabbitmq":
            return RabbitMQBroker(config.rabbitmq_url, prefetch_count=config.rabbitmq_prefetch_count)

        raise ValueError(
            f"Unsupported message broker type: {broker_type}. "
            f"Supported types: rabbitmq"
        )
