"""
Account repository: the user store each authenticating service keeps for itself
"""

import uuid
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from clinic.core.errors import ErrorResponse
from clinic.core.logger import logger
from clinic.security.principal import Principal, Role


class AccountRepository:
    """Repository for account data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one({"email": email})
        except PyMongoError as e:
            logger.error(f"MongoDB error loading account: {e}")
            raise ErrorResponse("Database error while loading account", status_code=503)

    async def find_by_id(self, account_id: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"_id": account_id})

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self.collection.find({}).to_list(length=None)

    async def create(self, email: str, password_hash: str, role: Role, **profile: Any) -> Dict[str, Any]:
        """
        Insert a new account.

        Raises:
            ErrorResponse: 400 if the email is already registered, 503 on database errors
        """
        doc = {
            "_id": str(uuid.uuid4()),
            "email": email,
            "password": password_hash,
            "role": role.value,
            **profile,
        }
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ErrorResponse("Email already registered", status_code=400)
        except PyMongoError as e:
            logger.error(f"MongoDB error creating account: {e}")
            raise ErrorResponse("Database error during registration", status_code=503)

        logger.info("Account created", metadata={"event": "account_created", "accountId": doc["_id"], "role": role.value})
        return doc

    async def load_principal(self, email: str) -> Optional[Principal]:
        """Principal for a token subject, or None if no account has this email"""
        doc = await self.find_by_email(email)
        if doc is None:
            return None
        return Principal(id=doc["_id"], email=doc["email"], role=Role.parse(doc.get("role")))
