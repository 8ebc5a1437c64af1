import time
from threading import Thread

import requests
import schedule
import uvicorn
from fastapi import FastAPI
from tenacity import retry, stop_after_attempt, wait_fixed

from shared.app_logging.logger import setup_logging
from shared.config.settings import get_settings

# Setup logging
logger = setup_logging("scheduler")

settings = get_settings()


@retry(stop=stop_after_attempt(3), wait=wait_fixed(5), reraise=True)
def trigger_digest(payload=None):
    """Ask the composer to build yesterday's digests for every user."""
    url = f"{settings.scheduler.composer_url.rstrip('/')}/digest"
    logger.info(f"Triggering digest run at {url}")
    response = requests.post(url, json=payload or {}, timeout=settings.scheduler.http_timeout)
    response.raise_for_status()
    data = response.json()
    logger.info(f"Digest run finished for {len(data.get('results', []))} users.")
    return data


def daily_job():
    """The job to be run daily."""
    logger.info("Starting daily digest job...")
    try:
        trigger_digest()
    except Exception:
        logger.exception("Failed to trigger digest run")
        return False
    logger.info("Daily job completed successfully.")
    return True


def register_jobs(scheduler=schedule):
    return scheduler.every().day.at(settings.scheduler.digest_time).do(daily_job)


def run_schedule():
    """Run the scheduler."""
    register_jobs()

    while True:
        schedule.run_pending()
        time.sleep(1)


# FastAPI app for health checks
app = FastAPI()


@app.get("/health")
def health_check():
    return {"status": "ok", "digest_time": settings.scheduler.digest_time}


def run_fastapi():
    """Run the FastAPI app."""
    uvicorn.run(app, host="0.0.0.0", port=8005)


if __name__ == "__main__":
    # Run the scheduler in a separate thread
    scheduler_thread = Thread(target=run_schedule, daemon=True)
    scheduler_thread.start()

    # Run the FastAPI app in the main thread
    run_fastapi()
