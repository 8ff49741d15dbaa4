"""
RabbitMQ Broker Implementation
Implements the IMessageBroker interface for RabbitMQ using aio-pika
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aio_pika
from aio_pika.abc import (
    AbstractChannel,
    AbstractExchange,
    AbstractIncomingMessage,
    AbstractQueue,
    AbstractRobustConnection,
)
from aio_pika.exceptions import AMQPException, ChannelInvalidStateError

from clinic.core.errors import BrokerUnavailableError, MessageDecodeError
from .i_message_broker import Delivery, DeliveryHandler, IMessageBroker

logger = logging.getLogger(__name__)

# ChannelInvalidStateError is a RuntimeError raised when the channel closes mid-operation
BROKER_ERRORS = (AMQPException, ChannelInvalidStateError, ConnectionError, asyncio.TimeoutError)


class RabbitMQBroker(IMessageBroker):
    """RabbitMQ implementation of IMessageBroker with a single robust connection per process"""

    def __init__(self, rabbitmq_url: str, prefetch_count: int = 10, publish_timeout: float = 5.0):
        """
        Initialize RabbitMQ broker

        Args:
            rabbitmq_url: RabbitMQ connection URL
            prefetch_count: Unacknowledged deliveries allowed per consumer
            publish_timeout: Seconds to wait for the broker's publisher confirm
        """
        self.rabbitmq_url = rabbitmq_url
        self.prefetch_count = prefetch_count
        self.publish_timeout = publish_timeout
        self.connection: Optional[AbstractRobustConnection] = None
        self.channel: Optional[AbstractChannel] = None
        self._exchanges: Dict[str, AbstractExchange] = {}
        self._queues: Dict[str, AbstractQueue] = {}
        self._consumer_tags: Dict[str, str] = {}
        self._is_connected = False

    async def connect(self) -> None:
        """Connect to RabbitMQ"""
        try:
            logger.info("Connecting to RabbitMQ...")

            self.connection = await aio_pika.connect_robust(self.rabbitmq_url, heartbeat=600)
            self.channel = await self.connection.channel(publisher_confirms=True)
            await self.channel.set_qos(prefetch_count=self.prefetch_count)

            self._is_connected = True
            logger.info("✅ RabbitMQ connected successfully")

        except BROKER_ERRORS as e:
            logger.error(f"❌ Failed to connect to RabbitMQ: {e}")
            self._is_connected = False
            raise BrokerUnavailableError(f"Failed to connect to RabbitMQ: {e}") from e

    def _require_channel(self) -> AbstractChannel:
        if not self.channel or self.channel.is_closed:
            raise BrokerUnavailableError("Channel not initialized. Call connect() first.")
        return self.channel

    async def declare_exchange(self, exchange_name: str, durable: bool = True) -> None:
        channel = self._require_channel()
        try:
            self._exchanges[exchange_name] = await channel.declare_exchange(
                exchange_name, aio_pika.ExchangeType.FANOUT, durable=durable
            )
        except BROKER_ERRORS as e:
            raise BrokerUnavailableError(f"Failed to declare exchange {exchange_name}: {e}") from e
        logger.info(f"📣 Exchange declared: {exchange_name}")

    async def declare_queue(self, queue_name: str, durable: bool = True) -> None:
        channel = self._require_channel()
        try:
            self._queues[queue_name] = await channel.declare_queue(queue_name, durable=durable)
        except BROKER_ERRORS as e:
            raise BrokerUnavailableError(f"Failed to declare queue {queue_name}: {e}") from e
        logger.info(f"📥 Queue declared: {queue_name}")

    async def bind_queue(self, queue_name: str, exchange_name: str, routing_key: str = "") -> None:
        queue = self._queues.get(queue_name)
        exchange = self._exchanges.get(exchange_name)
        if queue is None or exchange is None:
            raise BrokerUnavailableError(
                f"Declare {queue_name} and {exchange_name} before binding them"
            )
        try:
            await queue.bind(exchange, routing_key=routing_key)
        except BROKER_ERRORS as e:
            raise BrokerUnavailableError(f"Failed to bind {queue_name}: {e}") from e
        logger.info(f"🔗 Queue {queue_name} bound to {exchange_name}")

    async def _get_exchange(self, exchange_name: str) -> AbstractExchange:
        exchange = self._exchanges.get(exchange_name)
        if exchange is None:
            # Passive lookup; fails if nobody declared the exchange yet
            exchange = await self._require_channel().get_exchange(exchange_name, ensure=True)
            self._exchanges[exchange_name] = exchange
        return exchange

    async def publish(
        self,
        exchange_name: str,
        routing_key: str,
        body: bytes,
        message_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        content_type: str = "application/json",
    ) -> None:
        if not self.is_healthy():
            raise BrokerUnavailableError("RabbitMQ connection is not open")

        message = aio_pika.Message(
            body=body,
            content_type=content_type,
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            message_id=message_id,
            correlation_id=correlation_id,
        )
        try:
            exchange = await self._get_exchange(exchange_name)
            await exchange.publish(message, routing_key=routing_key, timeout=self.publish_timeout)
        except BROKER_ERRORS as e:
            raise BrokerUnavailableError(f"Failed to publish to {exchange_name}: {e}") from e

        logger.debug(f"📤 Published message {message_id} to {exchange_name}")

    def _make_callback(self, queue_name: str, handler: DeliveryHandler):
        async def on_message(message: AbstractIncomingMessage) -> None:
            delivery = Delivery(
                queue=queue_name,
                body=message.body,
                message_id=message.message_id,
                correlation_id=message.correlation_id,
                redelivered=bool(message.redelivered),
            )
            try:
                await handler(delivery)
            except MessageDecodeError as e:
                logger.error(f"❌ Dropping undecodable message {delivery.message_id} from {queue_name}: {e}")
                await message.reject(requeue=False)
                return
            except Exception as e:
                logger.error(f"❌ Error processing message {delivery.message_id} from {queue_name}, requeueing: {e}")
                await message.nack(requeue=True)
                return

            await message.ack()
            logger.debug(f"✅ Message processed successfully (messageId: {delivery.message_id})")

        return on_message

    async def consume(self, queue_name: str, handler: DeliveryHandler) -> None:
        queue = self._queues.get(queue_name)
        if queue is None:
            raise RuntimeError(f"Queue {queue_name} not declared. Declare the topology first.")

        self._consumer_tags[queue_name] = await queue.consume(self._make_callback(queue_name, handler))
        logger.info(f"🎯 Message consumer started - listening for events on queue: {queue_name}")

    async def disconnect(self) -> None:
        """Close RabbitMQ connection"""
        logger.info("🛑 Stopping RabbitMQ broker...")
        try:
            for queue_name, tag in list(self._consumer_tags.items()):
                queue = self._queues.get(queue_name)
                if queue is not None and self.channel and not self.channel.is_closed:
                    await queue.cancel(tag)
            self._consumer_tags.clear()

            if self.channel and not self.channel.is_closed:
                await self.channel.close()
                logger.info("📦 Channel closed")

            if self.connection and not self.connection.is_closed:
                await self.connection.close()
                logger.info("🔌 RabbitMQ connection closed")
        finally:
            self._exchanges.clear()
            self._queues.clear()
            self._is_connected = False

    def is_healthy(self) -> bool:
        """Check if broker connection is healthy"""
        return (
            self._is_connected
            and self.connection is not None
            and not self.connection.is_closed
            and self.channel is not None
            and not self.channel.is_closed
        )

    async def get_stats(self, queue_name: str) -> Dict[str, Any]:
        """Get RabbitMQ queue statistics using a passive declare"""
        try:
            queue = await self._require_channel().declare_queue(queue_name, passive=True)
            result = queue.declaration_result
            return {
                "queue": queue_name,
                "message_count": result.message_count,
                "consumer_count": result.consumer_count,
                "connected": self._is_connected,
            }
        except (BrokerUnavailableError, *BROKER_ERRORS) as e:
            logger.error(f"❌ Error getting queue stats: {e}")
            return {
                "queue": queue_name,
                "error": str(e),
                "connected": self._is_connected,
            }
