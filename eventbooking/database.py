from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from eventbooking.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.is_sqlite else {},
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """Yield one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """Create all tables"""
    # Register models on Base.metadata
    from eventbooking import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
