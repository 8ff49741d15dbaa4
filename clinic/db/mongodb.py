"""
MongoDB connection management; each service process owns one database
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from clinic.core.config import Config
from clinic.core.errors import ErrorResponse
from clinic.core.logger import logger


class Database:
    """Database connection manager"""

    def __init__(self, database: Optional[AsyncIOMotorDatabase] = None):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = database

    async def connect(self, config: Config) -> AsyncIOMotorDatabase:
        """Create the client unless a database was injected"""
        if self.database is not None:
            return self.database

        logger.info("Connecting to MongoDB...")
        try:
            self.client = AsyncIOMotorClient(config.mongodb_url)
            self.database = self.client[config.database_name]
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.error(
                f"Could not connect to MongoDB: {e}",
                metadata={"event": "mongodb_connection_error", "error": str(e)}
            )
            raise ErrorResponse(f"Could not connect to MongoDB: {e}", status_code=503)

        logger.info(
            f"Successfully connected to MongoDB database '{config.database_name}'",
            metadata={
                "event": "mongodb_connected",
                "database": config.database_name,
                "host": config.mongodb_host,
                "port": config.mongodb_port,
            }
        )
        return self.database

    async def ping(self) -> bool:
        if self.database is None:
            return False
        try:
            await self.database.command("ping")
            return True
        except PyMongoError:
            return False

    def close(self) -> None:
        """Close database connection"""
        if self.client is not None:
            logger.info("Closing connection to MongoDB...")
            self.client.close()
            self.client = None
