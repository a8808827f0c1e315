from bson import ObjectId

from jobboard.utils.errors import ValidationError


def validate_object_id(value: str, label: str = "ID") -> str:
    """Reject malformed ids with a 400 before they reach the store."""
    if not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label}: {value}")
    return value
