from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from jobboard.database import as_object_id
from jobboard.models.application import Application
from jobboard.repositories.base import ApplicationRepository
from jobboard.utils.errors import ConflictError

# _id breaks ties between documents created in the same millisecond
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class MongoApplicationRepository(ApplicationRepository):
    """Applications collection, unique on (job_id, applicant_id)."""

    def __init__(self, db):
        self.collection = db.applications

    async def get(self, application_id: str) -> Optional[Application]:
        oid = as_object_id(application_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return Application(**doc) if doc else None

    async def find_for_pair(self, job_id: str, applicant_id: str) -> Optional[Application]:
        doc = await self.collection.find_one({"job_id": str(job_id), "applicant_id": str(applicant_id)})
        return Application(**doc) if doc else None

    async def create(self, application: Application) -> Application:
        document = application.to_document()
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("You have already applied for this job")
        return Application(**{**document, "_id": result.inserted_id})

    async def transition(self, application_id: str, allowed_from: Iterable[str], fields: dict) -> Optional[Application]:
        oid = as_object_id(application_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "status": {"$in": [str(s) for s in allowed_from]}},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return Application(**doc) if doc else None

    async def page(
        self,
        skip: int,
        limit: int,
        applicant_id: Optional[str] = None,
        job_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Application], int]:
        query = {}
        if applicant_id:
            query["applicant_id"] = str(applicant_id)
        if job_id:
            query["job_id"] = str(job_id)
        if status:
            query["status"] = status

        docs = await (
            self.collection.find(query)
            .sort(NEWEST_FIRST)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.collection.count_documents(query)
        return [Application(**doc) for doc in docs], total

    async def count_by_status(self, job_ids: List[str]) -> List[dict]:
        pipeline = [
            {"$match": {"job_id": {"$in": job_ids}}},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ]
        rows = await self.collection.aggregate(pipeline).to_list(None)
        return [{"status": row["_id"], "count": row["count"]} for row in rows]

    async def count_for_jobs(self, job_ids: List[str]) -> int:
        return await self.collection.count_documents({"job_id": {"$in": job_ids}})

    async def recent_for_jobs(self, job_ids: List[str], limit: int = 5) -> List[Application]:
        docs = await (
            self.collection.find({"job_id": {"$in": job_ids}})
            .sort(NEWEST_FIRST)
            .limit(limit)
            .to_list(limit)
        )
        return [Application(**doc) for doc in docs]

    async def list_all(self) -> List[Application]:
        docs = await self.collection.find().sort(NEWEST_FIRST).to_list(None)
        return [Application(**doc) for doc in docs]
