from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from typing import Optional
import logging

from wordflow.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across threads"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=echo,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Base class for all models
Base = declarative_base()


def init_db(bind: Optional[Engine] = None):
    """Initialize database - create all tables"""
    try:
        # Import all models so they register on Base.metadata
        from wordflow.models import (
            VocabularyEntryRecord, ReviewSessionRecord, DailyLearningStatsRecord
        )

        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Database tables created successfully")
    except Exception as e:
        logger.error(f"❌ Error creating database tables: {e}")
        raise


def check_db_connection(bind: Optional[Engine] = None) -> bool:
    """Check if database connection is alive"""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
