"""
Doctor Service
Doctor accounts and listings; observes every patient schedule broadcast
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorDatabase

from clinic.api import auth, health
from clinic.core.config import Config, config as default_config
from clinic.core.errors import register_error_handlers
from clinic.core.logger import logger
from clinic.db.mongodb import Database
from clinic.dependencies import load_principal
from clinic.doctor import api
from clinic.doctor.listener import DoctorScheduleListener
from clinic.messaging.i_message_broker import IMessageBroker
from clinic.messaging.message_broker_factory import MessageBrokerFactory
from clinic.messaging.topology import DOCTOR_BINDING, TopologyBootstrap
from clinic.middleware.correlation_id import CorrelationIdMiddleware
from clinic.repositories.accounts import AccountRepository
from clinic.repositories.processed_events import ProcessedEventRepository
from clinic.security.middleware import AuthenticationMiddleware
from clinic.security.tokens import TokenService

SERVICE_NAME = "doctor-service"


def create_app(
    settings: Optional[Config] = None,
    broker: Optional[IMessageBroker] = None,
    database: Optional[AsyncIOMotorDatabase] = None,
) -> FastAPI:
    settings = settings or default_config.model_copy(update={"service_name": SERVICE_NAME})
    broker = broker or MessageBrokerFactory.create(settings)
    token_service = TokenService.from_config(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.bind_service(settings.service_name)
        logger.info("Starting Doctor Service...")
        db = await app.state.database.connect(settings)

        app.state.accounts = AccountRepository(db["doctors"])
        await app.state.accounts.ensure_indexes()

        processed_events = None
        if settings.consumer_dedup_enabled:
            processed_events = ProcessedEventRepository(db["processed_events"])
            await processed_events.ensure_indexes()

        await broker.connect()
        await app.state.topology.on_application_ready()

        app.state.listener = DoctorScheduleListener(processed_events)
        await app.state.listener.start(broker)

        logger.info(
            "Doctor Service started successfully",
            metadata={"version": settings.service_version, "environment": settings.environment, "port": settings.port}
        )

        yield

        logger.info("Shutting down Doctor Service...")
        await broker.disconnect()
        app.state.database.close()

    app = FastAPI(
        title="Doctor Service",
        description="Doctor accounts and patient schedule notifications",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(database)
    app.state.broker = broker
    app.state.token_service = token_service
    app.state.topology = TopologyBootstrap(broker, bindings=[DOCTOR_BINDING])

    register_error_handlers(app)

    app.add_middleware(AuthenticationMiddleware, token_service=token_service, principal_loader=load_principal)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(api.router, prefix="/doctor-service", tags=["doctors"])

    return app


app = create_app()
