"""
Messaging: broker clients, topology, publisher and listener base
"""

from .i_message_broker import IMessageBroker, Delivery, DeliveryHandler
from .rabbitmq_broker import RabbitMQBroker
from .message_broker_factory import MessageBrokerFactory
from .topology import (
    SCHEDULES_CREATED_EXCHANGE,
    DOCTOR_QUEUE,
    SCHEDULES_QUEUE,
    DOCTOR_BINDING,
    SCHEDULES_BINDING,
    QueueBinding,
    TopologyBootstrap,
)
from .publisher import ScheduleEventPublisher
from .consumer import ScheduleEventListener

__all__ = [
    "IMessageBroker",
    "Delivery",
    "DeliveryHandler",
    "RabbitMQBroker",
    "MessageBrokerFactory",
    "SCHEDULES_CREATED_EXCHANGE",
    "DOCTOR_QUEUE",
    "SCHEDULES_QUEUE",
    "DOCTOR_BINDING",
    "SCHEDULES_BINDING",
    "QueueBinding",
    "TopologyBootstrap",
    "ScheduleEventPublisher",
    "ScheduleEventListener",
]
