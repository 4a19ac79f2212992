from typing import Generic, List, Optional, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def check_email_format(value: Optional[str]) -> Optional[str]:
    """Reject malformed addresses; valid ones are returned exactly as given."""
    if value is None:
        return value
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


class BaseSchema(BaseModel):
    """Base schema for all models.

    Fields are declared in snake_case and exchanged over the wire in
    camelCase; both spellings are accepted on input.
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class PaginationMeta(BaseSchema):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedResponse(BaseSchema, Generic[T]):
    """Envelope returned by every list endpoint."""
    data: List[T]
    pagination: PaginationMeta
