"""
Broker topology for the patient-schedules-created broadcast.

One fanout exchange; each consumer service owns one durable queue bound to it
with an empty routing key. Every service declares what it uses once the broker
connection is up; AMQP declarations are idempotent, so restarts are harmless.
"""

import asyncio
from dataclasses import dataclass
from typing import Sequence

from clinic.core.logger import logger
from .i_message_broker import IMessageBroker

SCHEDULES_CREATED_EXCHANGE = "schedules.v1.patients-schedules-created"
DOCTOR_QUEUE = "schedules.v1.patients-schedules-created-queue-doctor"
SCHEDULES_QUEUE = "schedules.v1.patients-schedules-created-queue-schedules"


@dataclass(frozen=True)
class QueueBinding:
    exchange: str
    queue: str
    routing_key: str = ""


DOCTOR_BINDING = QueueBinding(SCHEDULES_CREATED_EXCHANGE, DOCTOR_QUEUE)
SCHEDULES_BINDING = QueueBinding(SCHEDULES_CREATED_EXCHANGE, SCHEDULES_QUEUE)


class TopologyBootstrap:
    """Declares exchanges, queues and bindings exactly once per process"""

    def __init__(
        self,
        broker: IMessageBroker,
        exchanges: Sequence[str] = (),
        bindings: Sequence[QueueBinding] = (),
    ):
        self.broker = broker
        self.exchanges = tuple(dict.fromkeys([*exchanges, *(b.exchange for b in bindings)]))
        self.bindings = tuple(bindings)
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def on_application_ready(self) -> None:
        """Run after the broker connection is established; later calls are no-ops"""
        async with self._lock:
            if self._initialized:
                return

            for exchange in self.exchanges:
                await self.broker.declare_exchange(exchange, durable=True)

            for binding in self.bindings:
                await self.broker.declare_queue(binding.queue, durable=True)
                await self.broker.bind_queue(binding.queue, binding.exchange, binding.routing_key)

            self._initialized = True

        logger.info(
            "Broker topology declared",
            metadata={
                "exchanges": list(self.exchanges),
                "queues": [b.queue for b in self.bindings],
            }
        )
