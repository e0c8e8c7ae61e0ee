"""
Script to run one planning import pass outside the scheduler
"""

import argparse
import asyncio
import signal
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.logging import setup_logging
from core.metrics import ImportMetrics
from ingestion.publishers import build_publisher
from ingestion.runner import PlanningImportRunner
from ingestion.sources.directory_source import DirectoryFileSource

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import train formation planning files once")
    parser.add_argument(
        "--directory",
        default=settings.PLANNING_FILE_DIR,
        help="Directory holding the planning export files"
    )
    parser.add_argument(
        "--max-age-days",
        type=int,
        default=settings.PLANNING_FILE_MAX_AGE_DAYS,
        help="Ignore files older than this many days"
    )
    return parser.parse_args(argv)


async def run_import(directory: str, max_age_days: int):
    """Run one import pass for the configured directory"""
    
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    
    cancellation = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancellation.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass
    
    try:
        async with AsyncSessionLocal() as session:
            runner = PlanningImportRunner(
                session,
                file_source=DirectoryFileSource(directory, max_age_days=max_age_days),
                publisher=build_publisher(),
                metrics=ImportMetrics()
            )
            await runner.run(cancellation)
            
            logger.info("Planning import pass completed")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    args = parse_args()
    asyncio.run(run_import(args.directory, args.max_age_days))
