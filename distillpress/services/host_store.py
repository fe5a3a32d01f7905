from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from distillpress import db
from distillpress.models.content import Category, Post, PostMeta

SUMMARY_META_KEY = '_distillpress_summary'
TEASER_META_KEY = '_distillpress_teaser'
PLUGIN_META_KEYS = (SUMMARY_META_KEY, TEASER_META_KEY)


class HostStore:
    """Access to the host's posts, post metadata and category taxonomy."""

    def __init__(self, *, post_types: Optional[Iterable[str]] = None) -> None:
        self.post_types = set(post_types) if post_types else {'post', 'page'}

    def list_categories(self) -> List[Category]:
        return Category.query.order_by(Category.name.asc(), Category.id.asc()).all()

    def get_category(self, category_id: Optional[int]) -> Optional[Category]:
        if not category_id:
            return None
        return db.session.get(Category, category_id)

    def get_post(self, post_id: Optional[int]) -> Optional[Post]:
        if not post_id:
            return None
        post = db.session.get(Post, post_id)
        if post is None or post.post_type not in self.post_types:
            return None
        return post

    def get_post_meta(self, post: Post, key: str) -> str:
        return post.get_meta(key) or ''

    def update_post_meta(self, post: Post, key: str, value: str) -> None:
        row = PostMeta.query.filter_by(post_id=post.id, meta_key=key).first()
        if row is None:
            db.session.add(PostMeta(post_id=post.id, meta_key=key, meta_value=value))
        else:
            row.meta_value = value
        db.session.commit()

    def set_post_categories(self, post: Post, category_ids: Sequence[int]) -> None:
        """Replace the post's category assignments with ``category_ids``."""
        categories = Category.query.filter(Category.id.in_(list(category_ids))).all() if category_ids else []
        post.categories = categories
        db.session.commit()

    def delete_plugin_meta(self) -> int:
        deleted = PostMeta.query.filter(PostMeta.meta_key.in_(PLUGIN_META_KEYS)).delete(synchronize_session=False)
        db.session.commit()
        return int(deleted or 0)
