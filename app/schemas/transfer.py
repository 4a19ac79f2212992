from typing import List

from pydantic import field_validator

from app.schemas.base import BaseSchema, check_email_format
from app.schemas.category import PostCategoryResponse
from app.schemas.post import PostResponse
from app.schemas.user import UserResponse


class PostTransferRequest(BaseSchema):
    new_author_email: str

    @field_validator("new_author_email")
    @classmethod
    def check_new_author_email(cls, v: str) -> str:
        return check_email_format(v)


class TransferredPost(PostResponse):
    author: UserResponse
    categories: List[PostCategoryResponse] = []


class PostTransferResponse(BaseSchema):
    post: TransferredPost
    previous_author: UserResponse
