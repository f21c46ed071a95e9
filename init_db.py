"""
Database initialization script
Creates all tables for the configured DATABASE_URL
"""
from app.core.config import Settings
from app.database import Base, build_engine
import app.models  # noqa: F401
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_db(settings: Settings = None):
    """Initialize database with all tables"""
    settings = settings or Settings.from_env()
    engine = build_engine(settings.database_url)
    try:
        logger.info("Creating all database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("✓ Database tables created successfully!")
        logger.info("You can now start the FastAPI server.")

    except Exception as e:
        logger.error(f"✗ Error initializing database: {str(e)}")
        raise
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
