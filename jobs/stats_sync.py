# Social Media Stats Sync
# Refreshes follower counts and engagement for approved influencers.
#
# Real platform APIs are not integrated yet; MockStatsProvider jitters the
# stored numbers so the rest of the pipeline (totals, popularity trend) runs
# end to end.

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from config.app_config import STATS_SYNC_HOUR, STATS_SYNC_MINUTE
from database.marketplace_models import (
    InfluencerProfile,
    InfluencerStatusDB,
    PopularityTrendDB,
    SocialAccount,
)

logger = logging.getLogger(__name__)

STATS_SYNC_JOB_ID = "social_media_stats_sync"


@dataclass
class AccountStats:
    follower_count: int
    engagement_rate: float


@dataclass
class SyncSummary:
    processed: int = 0
    updated: int = 0
    failed: int = 0

    def to_dict(self):
        return {"processed": self.processed, "updated": self.updated, "failed": self.failed}


class StatsProvider:
    """Fetches fresh stats for one social account. Returns None when unavailable."""

    def fetch(self, account: SocialAccount) -> Optional[AccountStats]:
        raise NotImplementedError


class MockStatsProvider(StatsProvider):
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def fetch(self, account: SocialAccount) -> Optional[AccountStats]:
        return AccountStats(
            follower_count=(account.follower_count or 0) + self.rng.randint(-50, 49),
            engagement_rate=(account.engagement_rate or 0.0) + (self.rng.random() - 0.5) * 2,
        )


def calculate_popularity_trend(current_followers: int, previous_followers: int) -> PopularityTrendDB:
    """Rising above +5% growth, declining below -5%, stable otherwise."""
    if not previous_followers:
        return PopularityTrendDB.STABLE

    growth_rate = (current_followers - previous_followers) / previous_followers * 100
    if growth_rate > 5:
        return PopularityTrendDB.RISING
    if growth_rate < -5:
        return PopularityTrendDB.DECLINING
    return PopularityTrendDB.STABLE


class StatsSyncJob:
    """
    One sync cycle over every approved influencer.

    Each influencer is updated and committed in its own session so a failure
    is counted and logged without stopping the rest of the cycle.
    """

    def __init__(self, session_factory: Callable[[], Session], provider: Optional[StatsProvider] = None):
        self.session_factory = session_factory
        self.provider = provider or MockStatsProvider()

    def sync_all(self) -> SyncSummary:
        logger.info("Starting social media stats update...")
        summary = SyncSummary()

        db = self.session_factory()
        try:
            influencer_ids = [
                row.id for row in
                db.query(InfluencerProfile.id).filter(InfluencerProfile.status == InfluencerStatusDB.APPROVED).all()
            ]
        finally:
            db.close()

        for influencer_id in influencer_ids:
            summary.processed += 1
            try:
                if self.sync_influencer(influencer_id):
                    summary.updated += 1
            except Exception:
                summary.failed += 1
                logger.exception(f"Error updating influencer {influencer_id}")

        logger.info(
            f"Social media stats update completed. Updated {summary.updated} of "
            f"{summary.processed} influencers ({summary.failed} failed)."
        )
        return summary

    def sync_influencer(self, influencer_id: str) -> bool:
        db = self.session_factory()
        try:
            influencer = db.query(InfluencerProfile).filter(InfluencerProfile.id == influencer_id).first()
            if influencer is None:
                return False

            previous_followers = influencer.total_followers or 0
            has_updates = False
            for account in influencer.social_accounts:
                stats = self.provider.fetch(account)
                if stats is None:
                    continue
                account.follower_count = max(0, int(stats.follower_count))
                account.engagement_rate = max(0.0, min(100.0, float(stats.engagement_rate)))
                has_updates = True

            if not has_updates:
                return False

            influencer.recalculate_reach()
            influencer.popularity_trend = calculate_popularity_trend(influencer.total_followers, previous_followers)
            db.commit()
            logger.info(f"Updated stats for influencer {influencer.id}")
            return True
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def schedule_stats_sync(scheduler, job: StatsSyncJob):
    """Register the daily sync (02:00 UTC by default) on an APScheduler scheduler."""
    scheduler.add_job(
        job.sync_all,
        CronTrigger(hour=STATS_SYNC_HOUR, minute=STATS_SYNC_MINUTE, timezone="UTC"),
        id=STATS_SYNC_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        f"Social media sync job scheduled to run daily at {STATS_SYNC_HOUR:02d}:{STATS_SYNC_MINUTE:02d} UTC"
    )
