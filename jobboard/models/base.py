from typing import Annotated, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, Field


def _stringify_object_id(value):
    if isinstance(value, ObjectId):
        return str(value)
    return value


# ObjectIds are kept as strings everywhere outside the repositories
PyObjectId = Annotated[str, BeforeValidator(_stringify_object_id)]


class MongoBaseModel(BaseModel):
    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    class Config:
        populate_by_name = True
        use_enum_values = True
        validate_default = True

    def to_document(self) -> dict:
        """Fields to persist, without the primary key."""
        return self.model_dump(exclude={"id"})
