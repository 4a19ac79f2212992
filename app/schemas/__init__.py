"""Pydantic schemas for request and response validation."""

from .base import BaseSchema, PaginatedResponse, PaginationMeta
from .profile import ProfileBase, ProfileCreate, ProfileUpdate, ProfileResponse
from .category import CategoryResponse, PostCategoryResponse
from .comment import AuthorSummary, PostSummary, CommentResponse, CommentWithAuthor, CommentWithPost
from .post import PostResponse, PostWithRelations, PostCount, PostSearchItem, PostDetailResponse
from .user import UserCreate, UserUpdate, UserResponse, UserWithProfileResponse, UserDetailResponse
from .transfer import PostTransferRequest, TransferredPost, PostTransferResponse
from .analytics import CategoryAnalytics, AuthorCounts, TopAuthor, PostAnalyticsResponse

__all__ = [
    "BaseSchema",
    "PaginatedResponse",
    "PaginationMeta",
    # Profile schemas
    "ProfileBase",
    "ProfileCreate",
    "ProfileUpdate",
    "ProfileResponse",
    # Category schemas
    "CategoryResponse",
    "PostCategoryResponse",
    # Comment schemas
    "AuthorSummary",
    "PostSummary",
    "CommentResponse",
    "CommentWithAuthor",
    "CommentWithPost",
    # Post schemas
    "PostResponse",
    "PostWithRelations",
    "PostCount",
    "PostSearchItem",
    "PostDetailResponse",
    # User schemas
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserWithProfileResponse",
    "UserDetailResponse",
    # Transfer schemas
    "PostTransferRequest",
    "TransferredPost",
    "PostTransferResponse",
    # Analytics schemas
    "CategoryAnalytics",
    "AuthorCounts",
    "TopAuthor",
    "PostAnalyticsResponse",
]
