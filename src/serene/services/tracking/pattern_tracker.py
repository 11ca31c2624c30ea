"""
Pattern / Trend Tracker

Keeps a bounded per-user window of combined stress levels and decides:
- Pattern alert: at least 2 of the last 3 values at or above 7,
  edge-triggered so an alert fires once per transition into the
  alert state, not on every message while the state holds.
- Trend: improving / stable / concerning from the first-half vs
  second-half mean over a time-bounded window (default 7 days).

Per-user history read-modify-write is serialized with a per-user
asyncio.Lock.

CLINICAL_VALIDATION_REQUIRED: Thresholds are configuration values and
empirically chosen.
"""

import asyncio
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Optional, Sequence

from serene.config.logging_config import get_logger
from serene.config.settings import TrackingSettings
from serene.domain.enums import TrendDirection
from serene.domain.models import (
    AnalysisRequest,
    DailyStress,
    HybridAnalysis,
    PatternReport,
    StressHistoryEntry,
    StressTrendSummary,
)
from serene.infrastructure.metrics import PATTERN_ALERTS_TOTAL
from serene.infrastructure.storage import HistoryRepository

logger = get_logger(__name__)


class PatternTracker:
    """
    Per-user stress window, pattern alert and trend.

    Alert state lives in memory. On the first record for a user since
    startup it is initialized from stored history, so a restart does
    not re-fire an alert for a window that was already alerting.

    Usage:
        tracker = PatternTracker(history_repo, settings.tracking)
        report = await tracker.record(request, analysis)
        if report.pattern_alert:
            ...
    """

    MIN_TREND_POINTS = 4
    TOP_EMOTIONS = 5

    def __init__(
        self,
        history: HistoryRepository,
        settings: Optional[TrackingSettings] = None,
    ) -> None:
        self._history = history
        self._settings = settings or TrackingSettings()
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._alert_active: dict[str, bool] = {}

    def _evaluate(self, levels: Sequence[float]) -> tuple[bool, int]:
        """Whether a window is in the alert state, and the hit count."""
        lookback = list(levels)[-self._settings.pattern_lookback:]
        hits = sum(1 for level in lookback if level >= self._settings.pattern_threshold)
        return hits >= self._settings.pattern_min_hits, hits

    def trend_of(self, levels: Sequence[float]) -> TrendDirection:
        """Direction from first-half vs second-half mean."""
        if len(levels) < self.MIN_TREND_POINTS:
            return TrendDirection.STABLE

        middle = len(levels) // 2
        first = list(levels[:middle])
        second = list(levels[middle:])
        delta = sum(second) / len(second) - sum(first) / len(first)

        if delta > self._settings.trend_delta:
            return TrendDirection.CONCERNING
        if delta < -self._settings.trend_delta:
            return TrendDirection.IMPROVING
        return TrendDirection.STABLE

    async def recent_levels(self, user_id: str) -> list[float]:
        """Stress levels in the user's window, oldest first."""
        entries = await self._history.list_recent(user_id, self._settings.window_size)
        return [e.stress_level for e in entries]

    async def _levels_since(self, user_id: str, days: int) -> list[StressHistoryEntry]:
        since = datetime.utcnow() - timedelta(days=days)
        return await self._history.list_since(user_id, since)

    async def record(self, request: AnalysisRequest, analysis: HybridAnalysis) -> PatternReport:
        """
        Append an analysis to the user's history and evaluate the window.

        Raises:
            StorageError: If history cannot be read or written
        """
        user_id = analysis.user_id

        async with self._locks[user_id]:
            if user_id not in self._alert_active:
                prior = await self.recent_levels(user_id)
                self._alert_active[user_id], _ = self._evaluate(prior)

            await self._history.append(
                StressHistoryEntry(
                    request_id=analysis.request_id,
                    user_id=user_id,
                    stress_level=analysis.stress_level,
                    mood_type=analysis.mood_type,
                    emotions=list(analysis.emotions),
                    crisis_indicators=analysis.crisis_indicators,
                    timestamp=request.timestamp,
                )
            )

            window = tuple(await self.recent_levels(user_id))
            active, hits = self._evaluate(window)
            was_active = self._alert_active[user_id]
            self._alert_active[user_id] = active

            entries = await self._levels_since(user_id, self._settings.trend_window_days)
            trend = self.trend_of([e.stress_level for e in entries])

        alert = active and not was_active
        if alert:
            PATTERN_ALERTS_TOTAL.inc()
            logger.warning(
                "Stress pattern alert",
                user_id=user_id,
                high_count=hits,
                lookback=self._settings.pattern_lookback,
            )
        elif was_active and not active:
            logger.info("Stress pattern cleared", user_id=user_id)

        return PatternReport(
            user_id=user_id,
            window=window,
            pattern_active=active,
            pattern_alert=alert,
            trend=trend,
            high_count=hits,
        )

    async def summarize_trends(self, user_id: str, days: Optional[int] = None) -> StressTrendSummary:
        """
        Aggregate a user's stress over the last N days.

        Args:
            user_id: Tracked user
            days: Window length, defaults to the trend window

        Returns:
            StressTrendSummary (empty counts when there is no history)
        """
        days = days or self._settings.trend_window_days
        entries = await self._levels_since(user_id, days)
        levels = [e.stress_level for e in entries]

        by_day: dict = defaultdict(list)
        for entry in entries:
            by_day[entry.timestamp.date()].append(entry.stress_level)

        daily = tuple(
            DailyStress(
                day=day,
                average_stress=round(sum(values) / len(values), 1),
                message_count=len(values),
            )
            for day, values in sorted(by_day.items())
        )

        emotions = Counter(emotion for e in entries for emotion in e.emotions)

        return StressTrendSummary(
            user_id=user_id,
            days=days,
            total_messages=len(entries),
            average_stress=round(sum(levels) / len(levels), 1) if levels else 0.0,
            high_stress_count=sum(1 for level in levels if level >= self._settings.pattern_threshold),
            top_emotions=tuple(e for e, _ in emotions.most_common(self.TOP_EMOTIONS)),
            daily=daily,
            trend=self.trend_of(levels),
        )
