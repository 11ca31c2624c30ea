"""
Stress History Repository (SQL)

Keeps at most max_entries_per_user rows per user; older rows are
pruned on append.
"""

from datetime import datetime

from sqlalchemy import delete, select

from serene.domain.enums import MoodType
from serene.domain.models import StressHistoryEntry
from serene.infrastructure.database.connection import DatabaseManager
from serene.infrastructure.database.models import StressHistoryModel
from serene.infrastructure.database.repositories.base import BaseSQLRepository
from serene.infrastructure.storage.repositories import HistoryRepository


def _to_domain(row: StressHistoryModel) -> StressHistoryEntry:
    return StressHistoryEntry(
        request_id=row.request_id,
        user_id=row.user_id,
        stress_level=row.stress_level,
        mood_type=MoodType.parse(row.mood_type),
        emotions=list(row.emotions or []),
        crisis_indicators=row.crisis_indicators,
        timestamp=row.created_at,
    )


class SQLHistoryRepository(BaseSQLRepository[StressHistoryModel], HistoryRepository):
    model = StressHistoryModel

    def __init__(self, db: DatabaseManager, max_entries_per_user: int = 100) -> None:
        super().__init__(db)
        self._max_entries = max_entries_per_user

    async def append(self, entry: StressHistoryEntry) -> None:
        async with self._session("append") as session:
            session.add(
                StressHistoryModel(
                    request_id=entry.request_id,
                    user_id=entry.user_id,
                    stress_level=entry.stress_level,
                    mood_type=entry.mood_type.value,
                    emotions=list(entry.emotions),
                    crisis_indicators=entry.crisis_indicators,
                    created_at=entry.timestamp,
                )
            )
            await session.flush()

            stale = await session.execute(
                select(StressHistoryModel.id)
                .where(StressHistoryModel.user_id == entry.user_id)
                .order_by(StressHistoryModel.created_at.desc(), StressHistoryModel.id.desc())
                .offset(self._max_entries)
            )
            stale_ids = list(stale.scalars().all())
            if stale_ids:
                await session.execute(
                    delete(StressHistoryModel).where(StressHistoryModel.id.in_(stale_ids))
                )

    async def list_recent(self, user_id: str, limit: int) -> list[StressHistoryEntry]:
        if limit <= 0:
            return []
        async with self._session("list_recent") as session:
            result = await session.execute(
                select(StressHistoryModel)
                .where(StressHistoryModel.user_id == user_id)
                .order_by(StressHistoryModel.created_at.desc(), StressHistoryModel.id.desc())
                .limit(limit)
            )
            rows = list(result.scalars().all())
        return [_to_domain(row) for row in reversed(rows)]

    async def list_since(self, user_id: str, since: datetime) -> list[StressHistoryEntry]:
        async with self._session("list_since") as session:
            result = await session.execute(
                select(StressHistoryModel)
                .where(StressHistoryModel.user_id == user_id, StressHistoryModel.created_at >= since)
                .order_by(StressHistoryModel.created_at.asc(), StressHistoryModel.id.asc())
            )
            return [_to_domain(row) for row in result.scalars().all()]
