"""Social stats sync job tests."""
import random

import pytest

from database.config import SessionLocal
from database.marketplace_models import InfluencerProfile, InfluencerStatusDB, PopularityTrendDB
from jobs.stats_sync import (
    STATS_SYNC_JOB_ID,
    AccountStats,
    MockStatsProvider,
    StatsProvider,
    StatsSyncJob,
    calculate_popularity_trend,
    schedule_stats_sync,
)
from tests.fixtures import make_influencer


class FixedGrowthProvider(StatsProvider):
    """Multiplies every account's followers by a fixed factor."""

    def __init__(self, factor: float, engagement: float = 3.0, fail_for=()):
        self.factor = factor
        self.engagement = engagement
        self.fail_for = set(fail_for)

    def fetch(self, account):
        if account.influencer_id in self.fail_for:
            raise RuntimeError("platform API down")
        return AccountStats(
            follower_count=int(account.follower_count * self.factor),
            engagement_rate=self.engagement,
        )


class TestPopularityTrend:
    @pytest.mark.parametrize("current,previous,expected", [
        (1100, 1000, PopularityTrendDB.RISING),
        (1050, 1000, PopularityTrendDB.STABLE),
        (950, 1000, PopularityTrendDB.STABLE),
        (900, 1000, PopularityTrendDB.DECLINING),
        (500, 0, PopularityTrendDB.STABLE),
    ])
    def test_thresholds(self, current, previous, expected):
        assert calculate_popularity_trend(current, previous) == expected


class TestMockProvider:
    def test_jitter_stays_small(self):
        provider = MockStatsProvider(random.Random(42))
        account = type("Account", (), {"follower_count": 1000, "engagement_rate": 3.0})()
        for _ in range(20):
            stats = provider.fetch(account)
            assert 950 <= stats.follower_count < 1050
            assert 2.0 <= stats.engagement_rate <= 4.0


class TestStatsSyncJob:
    def test_updates_approved_influencers_only(self, db):
        rising = make_influencer(db, followers=(1000, 1000))
        pending = make_influencer(db, followers=(1000,), status=InfluencerStatusDB.PENDING_VERIFICATION)

        summary = StatsSyncJob(SessionLocal, FixedGrowthProvider(1.2, engagement=4.5)).sync_all()

        assert summary.to_dict() == {"processed": 1, "updated": 1, "failed": 0}
        db.expire_all()
        rising = db.get(InfluencerProfile, rising.id)
        assert rising.total_followers == 2400
        assert rising.average_engagement == 4.5
        assert rising.popularity_trend == PopularityTrendDB.RISING
        assert db.get(InfluencerProfile, pending.id).total_followers == 1000

    def test_declining_trend(self, db):
        profile = make_influencer(db, followers=(1000,))
        StatsSyncJob(SessionLocal, FixedGrowthProvider(0.8)).sync_all()

        db.expire_all()
        assert db.get(InfluencerProfile, profile.id).popularity_trend == PopularityTrendDB.DECLINING

    def test_values_are_clamped(self, db):
        profile = make_influencer(db, followers=(10,))
        StatsSyncJob(SessionLocal, FixedGrowthProvider(-5, engagement=250.0)).sync_all()

        db.expire_all()
        account = db.get(InfluencerProfile, profile.id).social_accounts[0]
        assert account.follower_count == 0
        assert account.engagement_rate == 100.0

    def test_failure_is_counted_and_does_not_stop_the_cycle(self, db):
        broken = make_influencer(db, followers=(1000,))
        healthy = make_influencer(db, followers=(1000,))

        summary = StatsSyncJob(SessionLocal, FixedGrowthProvider(1.1, fail_for={broken.id})).sync_all()

        assert summary.processed == 2
        assert summary.updated == 1
        assert summary.failed == 1
        db.expire_all()
        assert db.get(InfluencerProfile, healthy.id).total_followers == 1100


class TestScheduling:
    def test_registers_daily_cron_job(self):
        from apscheduler.schedulers.background import BackgroundScheduler

        scheduler = BackgroundScheduler(timezone="UTC")
        schedule_stats_sync(scheduler, StatsSyncJob(SessionLocal))

        job = scheduler.get_job(STATS_SYNC_JOB_ID)
        assert job is not None
        assert "hour='2'" in str(job.trigger)
        assert "minute='0'" in str(job.trigger)
