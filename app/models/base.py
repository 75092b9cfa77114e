from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PyObjectId(ObjectId):
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls.validate)

    @classmethod
    def validate(cls, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError("Invalid ObjectId")


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a path/body id; ``None`` when it is not a valid ObjectId."""
    try:
        return PyObjectId.validate(value)
    except ValueError:
        return None
