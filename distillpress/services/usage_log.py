from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from distillpress import db
from distillpress.models.api_log import UsageLogEntry

from .ai_providers.types import TokenUsage


class UsageLog:
    """Bounded request log, newest first, truncated on every insert."""

    DEFAULT_LIMIT = 10

    def __init__(self, *, limit: int = DEFAULT_LIMIT, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.limit = max(1, int(limit))
        self._clock = clock or datetime.utcnow

    def _ordered(self):
        return UsageLogEntry.query.order_by(UsageLogEntry.created_at.desc(), UsageLogEntry.id.desc())

    def record(
        self,
        action_type: str,
        model: str,
        usage: Optional[TokenUsage] = None,
        cost_points: Optional[int] = None,
    ) -> UsageLogEntry:
        usage = usage or TokenUsage()
        entry = UsageLogEntry(
            created_at=self._clock(),
            action_type=action_type,
            model=model or '',
            cost_points=cost_points,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        )
        db.session.add(entry)
        db.session.flush()

        keep_ids = [row.id for row in self._ordered().with_entities(UsageLogEntry.id).limit(self.limit).all()]
        UsageLogEntry.query.filter(UsageLogEntry.id.notin_(keep_ids)).delete(synchronize_session=False)
        db.session.commit()
        return entry

    def entries(self) -> List[Dict[str, Any]]:
        return [row.to_dict() for row in self._ordered().limit(self.limit).all()]

    def clear(self) -> int:
        deleted = UsageLogEntry.query.delete(synchronize_session=False)
        db.session.commit()
        return int(deleted or 0)
