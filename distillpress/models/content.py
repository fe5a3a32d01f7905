from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from distillpress import db


post_categories = db.Table(
    'post_categories',
    db.Column('post_id', db.Integer, db.ForeignKey('post.id', ondelete='CASCADE'), primary_key=True),
    db.Column('category_id', db.Integer, db.ForeignKey('category.id', ondelete='CASCADE'), primary_key=True),
)


class Category(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    slug = db.Column(db.String(200), index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'slug': self.slug}


class Post(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, default='')
    content = db.Column(db.Text, nullable=False, default='')
    post_type = db.Column(db.String(20), nullable=False, default='post', index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    categories = db.relationship('Category', secondary=post_categories, lazy='selectin', order_by='Category.id')
    meta = db.relationship('PostMeta', back_populates='post', cascade='all, delete-orphan', lazy='dynamic')

    def get_meta(self, key: str) -> Optional[str]:
        row = self.meta.filter_by(meta_key=key).first()
        return row.meta_value if row is not None else None


class PostMeta(db.Model):
    __tablename__ = 'post_meta'
    __table_args__ = (db.UniqueConstraint('post_id', 'meta_key', name='uq_post_meta_key'),)

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('post.id', ondelete='CASCADE'), nullable=False, index=True)
    meta_key = db.Column(db.String(255), nullable=False, index=True)
    meta_value = db.Column(db.Text)

    post = db.relationship('Post', back_populates='meta')
