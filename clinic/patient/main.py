"""
Patient Service
Patient accounts and scheduling; publishes every schedule to the broadcast exchange
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
from clinic.messaging.i_message_broker import IMessageBroker
from clinic.messaging.message_broker_factory import MessageBrokerFactory
from clinic.messaging.publisher import ScheduleEventPublisher
from clinic.messaging.topology import SCHEDULES_CREATED_EXCHANGE, TopologyBootstrap
from clinic.middleware.correlation_id import CorrelationIdMiddleware
from clinic.patient import api
from clinic.repositories.accounts import AccountRepository
from clinic.repositories.patients import PatientRepository
from clinic.security.middleware import AuthenticationMiddleware
from clinic.security.tokens import TokenService

SERVICE_NAME = "patient-service"


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
        logger.info("Starting Patient Service...")
        db = await app.state.database.connect(settings)

        app.state.accounts = AccountRepository(db["accounts"])
        await app.state.accounts.ensure_indexes()
        app.state.patients = PatientRepository(db["patients"])

        await broker.connect()
        await app.state.topology.on_application_ready()

        logger.info(
            "Patient Service started successfully",
            metadata={"version": settings.service_version, "environment": settings.environment, "port": settings.port}
        )

        yield

        logger.info("Shutting down Patient Service...")
        await broker.disconnect()
        app.state.database.close()

    app = FastAPI(
        title="Patient Service",
        description="Patient accounts and schedule creation",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(database)
    app.state.broker = broker
    app.state.token_service = token_service
    app.state.publisher = ScheduleEventPublisher(broker)
    # the publisher only needs the exchange; consumer queues belong to their services
    app.state.topology = TopologyBootstrap(broker, exchanges=[SCHEDULES_CREATED_EXCHANGE])

    register_error_handlers(app)

    app.add_middleware(AuthenticationMiddleware, token_service=token_service, principal_loader=load_principal)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, prefix="/patient-service/auth", tags=["auth"])
    app.include_router(api.router, prefix="/patient-service", tags=["patients"])

    return app


app = create_app()
