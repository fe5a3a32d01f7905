from __future__ import annotations

from datetime import datetime

from distillpress import db


class Option(db.Model):
    """Global key/value setting owned by the host application."""

    __tablename__ = 'option'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(191), unique=True, nullable=False, index=True)
    value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Transient(db.Model):
    """Time-boxed cache entry; rows past ``expires_at`` are treated as absent."""

    __tablename__ = 'transient'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(191), unique=True, nullable=False, index=True)
    value = db.Column(db.JSON, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
