import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from jobboard.database import as_object_id, as_object_ids
from jobboard.models.user import User
from jobboard.repositories.base import UserRepository
from jobboard.utils.errors import ConflictError


class MongoUserRepository(UserRepository):
    """Users collection."""

    def __init__(self, db):
        self.collection = db.users

    async def get(self, user_id: str) -> Optional[User]:
        oid = as_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return User(**doc) if doc else None

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        docs = await self.collection.find({"_id": {"$in": as_object_ids(set(user_ids))}}).to_list(None)
        return {str(doc["_id"]): User(**doc) for doc in docs}

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await self.collection.find_one({"email": email.lower()})
        return User(**doc) if doc else None

    async def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[User]:
        doc = await self.collection.find_one({
            "password_reset_token": token_hash,
            "password_reset_expires": {"$gt": now},
        })
        return User(**doc) if doc else None

    async def create(self, user: User) -> User:
        document = user.to_document()
        document["email"] = document["email"].lower()
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("User already exists with this email")
        return User(**{**document, "_id": result.inserted_id})

    async def update(self, user_id: str, fields: dict) -> Optional[User]:
        oid = as_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return User(**doc) if doc else None

    async def search_by_name(self, name: str) -> List[User]:
        docs = await self.collection.find(
            {"name": {"$regex": re.escape(name), "$options": "i"}}
        ).to_list(100)
        return [User(**doc) for doc in docs]
