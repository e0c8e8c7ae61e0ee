"""
Logging configuration for the planning import worker and its status API
"""

import logging
import sys
from core.config import settings

# Libraries that are chatty at INFO during every import pass
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "asyncpg",
    "apscheduler.scheduler",
    "apscheduler.executors.default",
    "httpx",
    "httpcore",
    "uvicorn.access",
)


def setup_logging():
    """Configure application logging"""
    
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    
    # Job start/finish and per-request lines are already logged by the runner and middleware
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    
    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured at {settings.LOG_LEVEL} level "
        f"({settings.ENVIRONMENT}, import every {settings.IMPORT_INTERVAL_MINUTES} min)"
    )
