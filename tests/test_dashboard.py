"""Tests for dashboard statistics."""

from datetime import timedelta

from condogest.domain.entities import AccessLog, AccessType, DashboardStats, EntryType
from condogest.domain.dashboard import activity_buckets
from condogest.domain.gate import GateService

from conftest import FIXED_NOW


def _log(hours_ago, kind):
    return AccessLog(
        id=f"{kind.value}-{hours_ago}",
        timestamp=FIXED_NOW - timedelta(hours=hours_ago),
        type=kind,
        vehicle_plate="ABC-1234",
        is_registered=True,
    )


def test_fixture_stats(dashboard_service):
    stats = dashboard_service.get_stats(now=FIXED_NOW)

    assert stats.total_spots == 20
    assert stats.occupied_spots == 5
    assert stats.free_spots == 15
    assert stats.occupancy_rate == 25
    assert stats.pending_packages == 1
    assert stats.total_residents == 2
    assert stats.active_visitors == 0
    assert [log.id for log in stats.recent_logs] == ["l1", "l2"]


def test_visitors_counted(db, dashboard_service):
    GateService(db).register_entry("VIS-0001", "u1", EntryType.VISITOR, now=FIXED_NOW)
    stats = dashboard_service.get_stats(now=FIXED_NOW)
    assert stats.active_visitors == 1
    assert stats.occupied_spots == 6


def test_occupancy_rate_without_spots():
    stats = DashboardStats(
        total_spots=0,
        occupied_spots=0,
        pending_packages=0,
        total_residents=0,
        active_visitors=0,
        activity=[],
        recent_logs=[],
    )
    assert stats.occupancy_rate == 0


def test_activity_buckets():
    # FIXED_NOW is 15:30 UTC
    logs = [
        _log(1, AccessType.ENTRY),  # 14:30
        _log(2, AccessType.EXIT),  # 13:30
        _log(10, AccessType.ENTRY),  # 05:30
        _log(20, AccessType.EXIT),  # 19:30 the day before
        _log(30, AccessType.ENTRY),  # outside the window
    ]
    buckets = activity_buckets(logs, FIXED_NOW)

    assert [b.label for b in buckets] == ["00-06h", "06-12h", "12-18h", "18-24h"]
    assert [(b.entries, b.exits) for b in buckets] == [(1, 0), (0, 0), (1, 1), (0, 1)]


def test_future_logs_ignored():
    buckets = activity_buckets([_log(-1, AccessType.ENTRY)], FIXED_NOW)
    assert sum(b.entries for b in buckets) == 0
