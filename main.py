import argparse
import time
import schedule
import logging
import sys
from config.app_config import STATS_SYNC_HOUR, STATS_SYNC_MINUTE
from database.config import SessionLocal, init_db
from jobs.stats_sync import StatsSyncJob

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("stats_sync_worker.log")
    ]
)

def run_sync_cycle():
    logging.info("Starting social stats sync cycle...")
    try:
        summary = StatsSyncJob(SessionLocal).sync_all()
        logging.info(f"Cycle Complete. {summary.updated}/{summary.processed} influencers updated, {summary.failed} failed.")
    except Exception as e:
        logging.error(f"Error in stats sync cycle: {e}")

def start_scheduler():
    # schedule uses local time; run the worker with TZ=UTC
    at = f"{STATS_SYNC_HOUR:02d}:{STATS_SYNC_MINUTE:02d}"
    logging.info(f"Starting Stats Sync Scheduler (daily at {at})...")

    schedule.every().day.at(at).do(run_sync_cycle)

    while True:
        schedule.run_pending()
        time.sleep(60)

def main():
    parser = argparse.ArgumentParser(description="Influencer Marketplace Stats Sync Worker")
    parser.add_argument("--mode", choices=["once", "schedule"], default="schedule", help="Run once or schedule")
    args = parser.parse_args()

    init_db()
    if args.mode == "schedule":
        start_scheduler()
    else:
        run_sync_cycle()

if __name__ == "__main__":
    main()
