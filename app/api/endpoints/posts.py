from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.async_session import get_async_db
from app.schemas.base import PaginatedResponse, PaginationMeta
from app.schemas.post import PostCount, PostDetailResponse, PostSearchItem
from app.schemas.transfer import PostTransferRequest, PostTransferResponse, TransferredPost
from app.schemas.user import UserResponse
from app.services.async_post import AsyncPostService
from app.services.async_user import page_count

router = APIRouter()


async def _search_page(db: AsyncSession, page: int, limit: int, **criteria) -> PaginatedResponse[PostSearchItem]:
    posts, total, comment_counts = await AsyncPostService.search_posts(
        db=db, page=page, limit=limit, **criteria
    )

    items = [
        PostSearchItem.model_validate(post).model_copy(
            update={"count": PostCount(comments=comment_counts.get(post.id, 0))}
        )
        for post in posts
    ]
    return PaginatedResponse[PostSearchItem](
        data=items,
        pagination=PaginationMeta(page=page, limit=limit, total=total, total_pages=page_count(total, limit)),
    )


@router.get("/search", response_model=PaginatedResponse[PostSearchItem])
async def search_posts(
    q: Optional[str] = Query(None, description="Case-insensitive match on title or content"),
    category: Optional[str] = Query(None, description="Category name, case-insensitive"),
    author: Optional[str] = Query(None, description="Substring of the author's name"),
    published: Optional[str] = Query(None, description="'true' for published posts, anything else for drafts"),
    min_views: Optional[int] = Query(None, ge=0, description="Minimum view count"),
    date_from: Optional[datetime] = Query(None, description="Created at or after"),
    date_to: Optional[datetime] = Query(None, description="Created at or before"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    db: AsyncSession = Depends(get_async_db),
):
    """Search posts with any combination of filters."""
    return await _search_page(
        db,
        page,
        limit,
        q=q,
        category=category,
        author=author,
        published=published,
        min_views=min_views,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("", response_model=PaginatedResponse[PostSearchItem])
async def list_posts(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    db: AsyncSession = Depends(get_async_db),
):
    """List posts, newest first."""
    return await _search_page(db, page, limit)


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(post_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get a post with author, categories and comments."""
    return await AsyncPostService.get_post_detail(db=db, post_id=post_id)


@router.post("/{post_id}/transfer", response_model=PostTransferResponse)
async def transfer_post(
    post_id: int,
    transfer: PostTransferRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Move a post to another author inside a single transaction."""
    post, previous_author = await AsyncPostService.transfer_post(
        db=db, post_id=post_id, new_author_email=transfer.new_author_email
    )
    return PostTransferResponse(
        post=TransferredPost.model_validate(post),
        previous_author=UserResponse.model_validate(previous_author),
    )
