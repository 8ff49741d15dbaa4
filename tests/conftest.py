"""Shared test fixtures"""
import asyncio
import uuid
from collections import defaultdict, deque
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, Dict, List, Optional

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from clinic.core.config import Config
from clinic.core.errors import BrokerUnavailableError, MessageDecodeError
from clinic.events.schedule_event import ScheduleEvent
from clinic.messaging.i_message_broker import Delivery, DeliveryHandler, IMessageBroker
from clinic.security.tokens import TokenService

TEST_SECRET = "test-secret"


class InMemoryBrokerServer:
    """
    Fanout broker shared by several InMemoryBroker clients.

    Queues keep messages while no consumer is attached; handler outcomes follow
    the IMessageBroker acknowledgement contract.
    """

    def __init__(self):
        self.exchanges = set()
        self.bindings: Dict[str, List[str]] = defaultdict(list)
        self.queues: Dict[str, deque] = {}
        self.consumers: Dict[str, DeliveryHandler] = {}
        self.acked: Dict[str, List[Delivery]] = defaultdict(list)
        self.rejected: Dict[str, List[Delivery]] = defaultdict(list)
        self.requeued: Dict[str, List[Delivery]] = defaultdict(list)
        self._draining = set()
        self._tasks = set()

    def route(self, exchange_name: str, delivery_fields: Dict[str, Any]) -> None:
        if exchange_name not in self.exchanges:
            raise BrokerUnavailableError(f"no exchange '{exchange_name}'")
        for queue_name in self.bindings[exchange_name]:
            self.queues[queue_name].append(Delivery(queue=queue_name, **delivery_fields))
            self.schedule_drain(queue_name)

    def schedule_drain(self, queue_name: str) -> None:
        if queue_name in self._draining or queue_name not in self.consumers:
            return
        self._draining.add(queue_name)
        task = asyncio.get_running_loop().create_task(self._drain(queue_name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _drain(self, queue_name: str) -> None:
        try:
            pending = self.queues[queue_name]
            while pending and queue_name in self.consumers:
                delivery = pending.popleft()
                try:
                    await self.consumers[queue_name](delivery)
                except MessageDecodeError:
                    self.rejected[queue_name].append(delivery)
                except Exception:
                    self.requeued[queue_name].append(delivery)
                    pending.append(replace(delivery, redelivered=True))
                else:
                    self.acked[queue_name].append(delivery)
        finally:
            self._draining.discard(queue_name)

    async def join(self, timeout: float = 5.0) -> None:
        """Wait until every queued delivery has been handled"""
        async def settle():
            while self._tasks:
                await asyncio.gather(*list(self._tasks))
        await asyncio.wait_for(settle(), timeout)

    def pending(self, queue_name: str) -> int:
        return len(self.queues.get(queue_name, ()))


class InMemoryBroker(IMessageBroker):
    """Per-service client of an InMemoryBrokerServer"""

    def __init__(self, server: InMemoryBrokerServer):
        self.server = server
        self.connected = False
        self.fail_publish = False
        self.published: List[Dict[str, Any]] = []
        self._consuming: List[str] = []

    async def connect(self) -> None:
        self.connected = True

    async def declare_exchange(self, exchange_name: str, durable: bool = True) -> None:
        self.server.exchanges.add(exchange_name)

    async def declare_queue(self, queue_name: str, durable: bool = True) -> None:
        self.server.queues.setdefault(queue_name, deque())

    async def bind_queue(self, queue_name: str, exchange_name: str, routing_key: str = "") -> None:
        if queue_name not in self.server.bindings[exchange_name]:
            self.server.bindings[exchange_name].append(queue_name)

    async def publish(
        self,
        exchange_name: str,
        routing_key: str,
        body: bytes,
        message_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        content_type: str = "application/json",
    ) -> None:
        if not self.connected or self.fail_publish:
            raise BrokerUnavailableError("broker unavailable")
        self.server.route(exchange_name, {"body": body, "message_id": message_id, "correlation_id": correlation_id})
        self.published.append({"exchange": exchange_name, "routing_key": routing_key, "body": body})

    async def consume(self, queue_name: str, handler: DeliveryHandler) -> None:
        self.server.consumers[queue_name] = handler
        self._consuming.append(queue_name)
        self.server.schedule_drain(queue_name)

    async def disconnect(self) -> None:
        for queue_name in self._consuming:
            self.server.consumers.pop(queue_name, None)
        self._consuming.clear()
        self.connected = False

    def is_healthy(self) -> bool:
        return self.connected

    async def get_stats(self, queue_name: str) -> Dict[str, Any]:
        return {
            "queue": queue_name,
            "message_count": self.server.pending(queue_name),
            "consumer_count": int(queue_name in self.server.consumers),
            "connected": self.connected,
        }


@pytest.fixture
def broker_server():
    return InMemoryBrokerServer()


@pytest.fixture
def make_broker(broker_server):
    """Factory for broker clients attached to the shared test server"""
    def factory() -> InMemoryBroker:
        return InMemoryBroker(broker_server)
    return factory


@pytest.fixture
def mongo_client():
    return AsyncMongoMockClient()


@pytest.fixture
def make_database(mongo_client):
    """Factory for isolated databases, one per service"""
    def factory(name: Optional[str] = None):
        return mongo_client[name or f"test_{uuid.uuid4().hex}"]
    return factory


@pytest.fixture
def make_settings():
    def factory(service_name: str, **overrides) -> Config:
        return Config(**{"service_name": service_name, "api_security_token_secret": TEST_SECRET, **overrides})
    return factory


@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def sample_event():
    """Sample schedule event for testing"""
    return ScheduleEvent(name="Jane Roe", phone="555-0100", address="1 Main St", email="jane@example.com")


@pytest.fixture
def serve():
    """Run an app's lifespan and yield an HTTP client bound to it"""
    @asynccontextmanager
    async def runner(app):
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                yield client
    return runner
