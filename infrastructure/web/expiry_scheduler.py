# infrastructure/web/expiry_scheduler.py
# Periodic purge of both stores, run in the background by APScheduler.

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from shortener.stores import LinkStore, ResourceStore

logger = logging.getLogger("shortener.scheduler")

JOB_ID: str = "expire_tokens"


def run_expiry_cycle(link_store: LinkStore, resource_store: ResourceStore) -> None:
    """One scheduled tick: purge links, resize link tokens, purge files.

    A failing step is logged and does not stop the steps after it."""
    steps = (
        ("link purge", link_store.purge),
        ("link length", link_store.recalculate_length),
        ("file purge", resource_store.purge),
    )
    for name, step in steps:
        try:
            step()
        except Exception:
            logger.exception("expiry step failed: %s", name)


def start_expiry_scheduler(
    link_store: LinkStore,
    resource_store: ResourceStore,
    minutes: int = 5,
) -> BackgroundScheduler:
    """Start a daemon scheduler running run_expiry_cycle every *minutes*."""
    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        func=run_expiry_cycle,
        args=(link_store, resource_store),
        trigger="interval",
        minutes=max(1, minutes),
        id=JOB_ID,
        name="Purge expired tokens",
        replace_existing=True,
    )
    scheduler.start()
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    logger.info("expiry scheduler started interval=%dmin", max(1, minutes))
    return scheduler
