"""
Job Auto-Completion Worker
Moves ASSIGNED jobs to COMPLETED once their time slot has elapsed
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import SWEEPER_INTERVAL_SECONDS
from ..database import SessionLocal
from ..domain.scheduling.completion import SweepSummary, complete_elapsed_jobs
from ..shared.time_window import local_now

logger = logging.getLogger(__name__)


def sweep_once(
    session_factory=SessionLocal, clock: Callable[[], datetime] = local_now
) -> Optional[SweepSummary]:
    """
    Run one sweep in its own session.

    Errors are logged and swallowed; the next tick simply tries again.
    Returns None when the sweep failed.
    """
    db = session_factory()
    try:
        return complete_elapsed_jobs(db, clock())
    except SQLAlchemyError as e:
        logger.error(f"❌ Database error during auto-completion sweep: {e}")
        db.rollback()
        return None
    except Exception as e:
        logger.error(f"❌ Error during auto-completion sweep: {e}")
        db.rollback()
        return None
    finally:
        db.close()


async def run_completion_worker(
    interval_seconds: float = SWEEPER_INTERVAL_SECONDS,
    session_factory=SessionLocal,
    clock: Callable[[], datetime] = local_now,
):
    """
    Main worker loop - sweeps every ``interval_seconds`` until cancelled
    """
    logger.info(f"🚀 Starting job auto-completion worker (every {interval_seconds}s)...")

    while True:
        # Sweep runs off the event loop
        await asyncio.to_thread(sweep_once, session_factory, clock)
        await asyncio.sleep(interval_seconds)


if __name__ == "__main__":
    asyncio.run(run_completion_worker())
