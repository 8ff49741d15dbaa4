"""
Schedules Service
Consumes schedule broadcasts into its own store; exposes health endpoints only
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorDatabase

from clinic.api import health
from clinic.core.config import Config, config as default_config
from clinic.core.errors import register_error_handlers
from clinic.core.logger import logger
from clinic.db.mongodb import Database
from clinic.messaging.i_message_broker import IMessageBroker
from clinic.messaging.message_broker_factory import MessageBrokerFactory
from clinic.messaging.topology import SCHEDULES_BINDING, TopologyBootstrap
from clinic.middleware.correlation_id import CorrelationIdMiddleware
from clinic.repositories.processed_events import ProcessedEventRepository
from clinic.repositories.schedules import ScheduleRepository
from clinic.schedules.listener import SchedulesProjectionListener

SERVICE_NAME = "schedules-service"


def create_app(
    settings: Optional[Config] = None,
    broker: Optional[IMessageBroker] = None,
    database: Optional[AsyncIOMotorDatabase] = None,
) -> FastAPI:
    settings = settings or default_config.model_copy(update={"service_name": SERVICE_NAME})
    broker = broker or MessageBrokerFactory.create(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.bind_service(settings.service_name)
        logger.info("Starting Schedules Service...")
        db = await app.state.database.connect(settings)

        app.state.schedules = ScheduleRepository(db["schedules"])

        processed_events = None
        if settings.consumer_dedup_enabled:
            processed_events = ProcessedEventRepository(db["processed_events"])
            await processed_events.ensure_indexes()

        await broker.connect()
        await app.state.topology.on_application_ready()

        app.state.listener = SchedulesProjectionListener(app.state.schedules, processed_events)
        await app.state.listener.start(broker)

        logger.info(
            "Schedules Service started successfully",
            metadata={"version": settings.service_version, "environment": settings.environment, "port": settings.port}
        )

        yield

        logger.info("Shutting down Schedules Service...")
        await broker.disconnect()
        app.state.database.close()

    app = FastAPI(
        title="Schedules Service",
        description="Projection of patient schedules",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(database)
    app.state.broker = broker
    app.state.topology = TopologyBootstrap(broker, bindings=[SCHEDULES_BINDING])

    register_error_handlers(app)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()
