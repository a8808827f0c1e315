import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from jobboard.database import as_object_id, as_object_ids
from jobboard.models.job import Job
from jobboard.repositories.base import JobRepository, JobSearch

logger = logging.getLogger("jobboard.repositories.jobs")


def build_job_query(criteria: JobSearch) -> dict:
    """Translate search criteria into a MongoDB filter."""
    query = {}

    if criteria.is_active is not None:
        query["is_active"] = criteria.is_active

    if criteria.posted_by:
        query["posted_by"] = criteria.posted_by

    # Search in title, company and description
    if criteria.search:
        pattern = re.escape(criteria.search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"company": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]

    if criteria.location:
        query["location"] = {"$regex": re.escape(criteria.location), "$options": "i"}

    if criteria.job_type:
        query["job_type"] = criteria.job_type

    if criteria.experience_level:
        query["experience_level"] = criteria.experience_level

    if criteria.company:
        query["company"] = {"$regex": re.escape(criteria.company), "$options": "i"}

    if criteria.min_salary is not None:
        query["salary.min"] = {"$gte": criteria.min_salary}

    if criteria.max_salary is not None:
        query["salary.max"] = {"$lte": criteria.max_salary}

    return query


class MongoJobRepository(JobRepository):
    """Jobs collection. ``applications_count`` is only touched through attach/detach."""

    def __init__(self, db):
        self.collection = db.jobs

    async def get(self, job_id: str) -> Optional[Job]:
        oid = as_object_id(job_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return Job(**doc) if doc else None

    async def get_many(self, job_ids: Iterable[str]) -> Dict[str, Job]:
        docs = await self.collection.find({"_id": {"$in": as_object_ids(set(job_ids))}}).to_list(None)
        return {str(doc["_id"]): Job(**doc) for doc in docs}

    async def create(self, job: Job) -> Job:
        document = job.to_document()
        result = await self.collection.insert_one(document)
        return Job(**{**document, "_id": result.inserted_id})

    async def update(self, job_id: str, fields: dict) -> Optional[Job]:
        oid = as_object_id(job_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return Job(**doc) if doc else None

    async def delete(self, job_id: str) -> bool:
        oid = as_object_id(job_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1

    async def search(self, criteria: JobSearch, skip: int, limit: int) -> Tuple[List[Job], int]:
        query = build_job_query(criteria)
        direction = ASCENDING if criteria.sort_order == "asc" else DESCENDING

        docs = await (
            self.collection.find(query)
            .sort(criteria.sort_by, direction)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.collection.count_documents(query)
        return [Job(**doc) for doc in docs], total

    async def ids_owned_by(self, user_id: str) -> List[str]:
        docs = await self.collection.find({"posted_by": str(user_id)}, {"_id": 1}).to_list(None)
        return [str(doc["_id"]) for doc in docs]

    async def increment_views(self, job_ids: Iterable[str]) -> None:
        ids = as_object_ids(job_ids)
        if ids:
            await self.collection.update_many({"_id": {"$in": ids}}, {"$inc": {"views_count": 1}})

    async def attach_application(self, job_id: str) -> None:
        await self.collection.update_one(
            {"_id": as_object_id(job_id)},
            {"$inc": {"applications_count": 1}},
        )

    async def detach_application(self, job_id: str) -> bool:
        result = await self.collection.update_one(
            {"_id": as_object_id(job_id), "applications_count": {"$gt": 0}},
            {"$inc": {"applications_count": -1}},
        )
        if result.modified_count == 0:
            logger.warning("applications_count for job %s already at zero, not decremented", job_id)
            return False
        return True
