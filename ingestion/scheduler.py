import logging
import asyncio
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from core.config import settings
from core.metrics import ImportMetrics, start_metrics_server
from ingestion.runner import PlanningImportRunner
from ingestion.sources.base import PlanningFileSource
from ingestion.sources.directory_source import DirectoryFileSource
from ingestion.publishers import EventPublisher, build_publisher

logger = logging.getLogger(__name__)


class PlanningImportScheduler:
    def __init__(
        self,
        metrics: Optional[ImportMetrics] = None,
        file_source: Optional[PlanningFileSource] = None,
        publisher: Optional[EventPublisher] = None
    ):
        self.scheduler = AsyncIOScheduler()
        self.engine = create_async_engine(settings.DATABASE_URL, echo=False)
        self.SessionLocal = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.metrics = metrics or ImportMetrics()
        self.file_source = file_source or DirectoryFileSource()
        self.publisher = publisher or build_publisher()
        self.cancellation = asyncio.Event()

    async def run_import_job(self):
        """Job to run one planning import pass"""
        logger.info("Scheduler: Starting planning import job")
        async with self.SessionLocal() as session:
            try:
                runner = PlanningImportRunner(
                    session,
                    file_source=self.file_source,
                    publisher=self.publisher,
                    metrics=self.metrics
                )
                await runner.run(self.cancellation)
            except Exception as e:
                logger.error(f"Scheduler: Planning import job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.cancellation.clear()
        self.scheduler.add_job(
            self.run_import_job,
            trigger=IntervalTrigger(minutes=settings.IMPORT_INTERVAL_MINUTES),
            id="planning_import_job",
            replace_existing=True,
            max_instances=1,  # Runs of the same worker must never overlap
            coalesce=True
        )
        if settings.METRICS_PORT:
            start_metrics_server(settings.METRICS_PORT, self.metrics.registry)
        self.scheduler.start()
        logger.info("Planning import scheduler started")

    def stop(self):
        # Lets a running pass finish its current file, then stop
        self.cancellation.set()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Planning import scheduler stopped")
