"""
Unit tests for the model metadata.
"""

from app.db.base_class import Base
from app.models import Category, Comment, Post, PostCategory, Profile, User


def test_tables_are_registered():
    assert set(Base.metadata.tables) == {
        "users", "profiles", "posts", "categories", "post_categories", "comments",
    }
    assert User.__table__.name == "users"
    assert PostCategory.__table__.primary_key.columns.keys() == ["post_id", "category_id"]
    for model in (Category, Comment, Post, Profile):
        assert model.__table__ is Base.metadata.tables[model.__tablename__]
