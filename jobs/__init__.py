# Background jobs

from jobs.stats_sync import (
    AccountStats,
    SyncSummary,
    StatsProvider,
    MockStatsProvider,
    StatsSyncJob,
    calculate_popularity_trend,
    schedule_stats_sync,
)

__all__ = [
    "AccountStats",
    "SyncSummary",
    "StatsProvider",
    "MockStatsProvider",
    "StatsSyncJob",
    "calculate_popularity_trend",
    "schedule_stats_sync",
]
