"""Dashboard statistics service."""

from datetime import datetime, timedelta, UTC
from typing import Optional

from condogest.database.base import Database
from condogest.domain.entities import (
    AccessLog,
    AccessType,
    ActivityBucket,
    DashboardStats,
    PackageStatus,
    SpotType,
)

BUCKET_HOURS = 6
RECENT_LOG_LIMIT = 5


def activity_buckets(
    logs: list[AccessLog], now: datetime, tz=UTC
) -> list[ActivityBucket]:
    """Count entries and exits of the last 24 hours per 6-hour slot of the day.

    Slots are labelled by hour of day (``00-06h`` ... ``18-24h``) in ``tz``.
    """
    since = now - timedelta(hours=24)
    counts = [[0, 0] for _ in range(24 // BUCKET_HOURS)]
    for log in logs:
        if not since < log.timestamp <= now:
            continue
        slot = log.timestamp.astimezone(tz).hour // BUCKET_HOURS
        counts[slot][0 if log.type is AccessType.ENTRY else 1] += 1

    return [
        ActivityBucket(
            label=f"{i * BUCKET_HOURS:02d}-{(i + 1) * BUCKET_HOURS:02d}h",
            entries=entries,
            exits=exits,
        )
        for i, (entries, exits) in enumerate(counts)
    ]


class DashboardService:
    """Service computing the overview figures."""

    def __init__(self, db: Database):
        """Initialize dashboard service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Collect spot, package, resident and gate activity figures."""
        now = now or datetime.now(UTC)
        spots = self.db.list_parking_spots()
        logs = self.db.list_access_logs()

        return DashboardStats(
            total_spots=len(spots),
            occupied_spots=sum(1 for s in spots if s.is_occupied),
            pending_packages=sum(
                1 for p in self.db.list_packages() if p.status is PackageStatus.WAITING_PICKUP
            ),
            total_residents=sum(1 for p in self.db.list_people() if p.is_resident),
            active_visitors=sum(
                1 for s in spots if s.is_occupied and s.type is SpotType.VISITOR
            ),
            activity=activity_buckets(logs, now),
            recent_logs=logs[:RECENT_LOG_LIMIT],
        )
