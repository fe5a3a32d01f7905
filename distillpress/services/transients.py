from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from flask import current_app

from distillpress import db
from distillpress.models.options import Transient


def _logger() -> logging.Logger:
    try:
        return current_app.logger
    except Exception:  # pragma: no cover - fallback outside app context
        return logging.getLogger(__name__)


class TransientStore:
    """Time-boxed key/value cache persisted in the host ``transient`` table.

    Expiry is TTL only: an expired row reads as absent and is removed
    lazily on the next read of the same key.
    """

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.utcnow

    def get(self, key: str) -> Optional[Any]:
        row = Transient.query.filter_by(key=key).first()
        if row is None:
            return None
        if row.expires_at <= self._clock():
            db.session.delete(row)
            db.session.commit()
            return None
        return row.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = self._clock() + timedelta(seconds=max(0, int(ttl_seconds)))
        row = Transient.query.filter_by(key=key).first()
        if row is None:
            row = Transient(key=key, value=value, expires_at=expires_at)
            db.session.add(row)
        else:
            row.value = value
            row.expires_at = expires_at
        db.session.commit()

    def delete(self, key: str) -> None:
        deleted = Transient.query.filter_by(key=key).delete(synchronize_session=False)
        db.session.commit()
        if deleted:
            _logger().debug("Transient deleted", extra={"event": "transient_deleted", "key": key})

    def delete_prefix(self, prefix: str) -> int:
        deleted = Transient.query.filter(Transient.key.startswith(prefix, autoescape=True)).delete(synchronize_session=False)
        db.session.commit()
        return int(deleted or 0)
