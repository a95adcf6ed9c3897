"""Initialize database tables"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine

from research_partner.db.base import Base
from research_partner.db.session import engine as default_engine
from research_partner.models.user import User  # noqa: F401  (registers the table)

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all database tables"""
    try:
        Base.metadata.create_all(bind=bind or default_engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise
