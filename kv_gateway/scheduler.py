"""
Scheduled Task Module

Uses APScheduler to sweep expired entries from the database KV backend.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from kv_gateway.config import get_settings
from kv_gateway.db.session import get_db
from kv_gateway.repositories.kv_store_repo import KVStoreError
from kv_gateway.repositories.sqlalchemy.kv_store_repo import SQLAlchemyKVStoreRepository

logger = logging.getLogger(__name__)

# Global Scheduler Instance
_scheduler: Optional[AsyncIOScheduler] = None


async def cleanup_expired_kv_task():
    """
    Scheduled KV Store Cleanup Task

    Deletes expired key-value pairs.
    """
    logger.info("Starting scheduled KV store cleanup task")

    try:
        async for db in get_db():
            kv_repo = SQLAlchemyKVStoreRepository(db)
            deleted_count = await kv_repo.cleanup_expired()
            logger.info(
                f"KV store cleanup task completed: {deleted_count} expired keys deleted"
            )
            break

    except KVStoreError as e:
        # Next interval runs again
        logger.error(f"KV store cleanup task failed: {str(e)}", exc_info=True)


def start_scheduler():
    """
    Start Scheduled Task Scheduler

    Only the database backend needs a sweep; memory and Redis expire on read or natively.
    """
    global _scheduler

    if _scheduler is not None:
        logger.warning("Scheduler already started")
        return

    settings = get_settings()

    _scheduler = AsyncIOScheduler()
    _scheduler.add_job(
        cleanup_expired_kv_task,
        trigger=IntervalTrigger(minutes=settings.KV_CLEANUP_INTERVAL_MINUTES),
        id="cleanup_expired_kv",
        name="Clean up expired KV pairs",
        replace_existing=True,
    )
    _scheduler.start()

    logger.info(
        "Scheduler started: KV store cleanup scheduled every "
        f"{settings.KV_CLEANUP_INTERVAL_MINUTES} minutes"
    )


def shutdown_scheduler():
    """
    Shutdown Scheduled Task Scheduler

    Gracefully stops all scheduled tasks.
    """
    global _scheduler

    if _scheduler is None:
        return

    _scheduler.shutdown(wait=True)
    _scheduler = None
    logger.info("Scheduler shutdown completed")


def get_scheduler() -> Optional[AsyncIOScheduler]:
    """
    Get Scheduler Instance

    Returns:
        Optional[AsyncIOScheduler]: Scheduler instance or None
    """
    return _scheduler
