from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Post(Base):
    __tablename__ = "posts"

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_posts_views_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text)
    published = Column(Boolean, nullable=False, default=False)
    views = Column(Integer, nullable=False, default=0)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    author = relationship("User", back_populates="posts")
    categories = relationship(
        "PostCategory", back_populates="post", cascade="all, delete"
    )
    comments = relationship(
        "Comment", back_populates="post", cascade="all, delete", order_by="Comment.id"
    )
