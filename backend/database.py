"""
Aether Intel - Database Module (SQLAlchemy 2.0)

Sync engine and session factory, ORM models, and the owner-scoped store
operations used by the scrape pipeline and the API routers.

USAGE:
------
    from database import get_db, get_competitor
    @router.get("/items/{id}")
    def get_item(id: int, db: Session = Depends(get_db)):
        return get_competitor(db, id, owner_id)

Every competitor read goes through an owner filter; nothing in this module
returns a row belonging to another user.
"""

from sqlalchemy import (
    create_engine, Column, Integer, String, DateTime, Text, Boolean, ForeignKey,
    JSON, Index, event, select, desc,
)
from sqlalchemy.orm import sessionmaker, relationship, declarative_base, Session
from datetime import datetime
from typing import List, Optional
import os
import logging

logger = logging.getLogger(__name__)

# =============================================================================
# DATABASE URL CONFIGURATION
# =============================================================================

def _get_database_url() -> str:
    """Get sync database URL, normalizing async driver prefixes."""
    url = os.getenv("DATABASE_URL")
    if url:
        if url.startswith("postgresql+asyncpg://"):
            return url.replace("postgresql+asyncpg://", "postgresql://")
        if url.startswith("sqlite+aiosqlite:///"):
            return url.replace("sqlite+aiosqlite:///", "sqlite:///")
        return url
    return "sqlite:///./aether_intel.db"


DATABASE_URL = _get_database_url()

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        pool_pre_ping=True,
        echo=os.getenv("DB_ECHO", "false").lower() == "true"
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "20")),
        pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        pool_pre_ping=True,
        echo=os.getenv("DB_ECHO", "false").lower() == "true"
    )


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this pragma is set per connection
    if DATABASE_URL.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    Sync database session dependency (FastAPI).

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============== Database Models ==============

class User(Base):
    """Dashboard user. Rows are provisioned by the external auth service."""
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    competitors = relationship(
        "Competitor", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )


class Competitor(Base):
    __tablename__ = "competitors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    website_url = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")  # active / paused
    monitoring_frequency = Column(String, nullable=False, default="daily")  # realtime / daily / weekly
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="competitors")
    social_accounts = relationship(
        "SocialAccount",
        back_populates="competitor",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SocialAccount.id",
    )
    insights = relationship(
        "Insight", back_populates="competitor", cascade="all, delete-orphan", passive_deletes=True
    )


class SocialAccount(Base):
    __tablename__ = "social_accounts"

    id = Column(Integer, primary_key=True, index=True)
    competitor_id = Column(
        Integer, ForeignKey("competitors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform = Column(String, nullable=False)  # normalized, see sources.normalize_platform
    handle = Column(String, nullable=False)
    url = Column(String, nullable=True)  # explicit profile URL override
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    competitor = relationship("Competitor", back_populates="social_accounts")

    @property
    def profile_url(self):
        """Explicit override, else the canonical profile URL for platform + handle."""
        from sources import build_profile_url
        return self.url or build_profile_url(self.platform, self.handle)


class Insight(Base):
    """AI-derived record describing one detected competitive event."""
    __tablename__ = "insights"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    competitor_id = Column(
        Integer, ForeignKey("competitors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform = Column(String, nullable=True)
    content = Column(Text, nullable=True)  # raw excerpt, <= 1000 chars
    summary = Column(Text, nullable=True)
    insight_type = Column(String, nullable=False)
    sentiment = Column(String, nullable=False)
    priority = Column(String, nullable=False, default="medium")
    key_points = Column(JSON, nullable=True)
    recommendations = Column(JSON, nullable=True)
    impact = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    labels = Column(JSON, nullable=True)
    public_opinion = Column(JSON, nullable=True)
    public_opinion_positive = Column(Integer, default=0)
    public_opinion_negative = Column(Integer, default=0)
    source_url = Column(String, nullable=True)
    detected_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    competitor = relationship("Competitor", back_populates="insights")

    @property
    def competitor_name(self):
        return self.competitor.name if self.competitor is not None else None

    __table_args__ = (
        Index("ix_insights_user_detected", "user_id", "detected_at"),
    )


class UserSentimentData(Base):
    """One brand-sentiment scan of the user's own social handles."""
    __tablename__ = "user_sentiment_data"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    scraped_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    positive_percentage = Column(Integer, nullable=False)
    neutral_percentage = Column(Integer, nullable=False)
    negative_percentage = Column(Integer, nullable=False)
    positive_summary = Column(JSON, nullable=True)
    neutral_summary = Column(JSON, nullable=True)
    negative_summary = Column(JSON, nullable=True)
    raw_comments = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


def init_db():
    """Create all tables (idempotent)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


# =============================================================================
# OWNER-SCOPED STORE OPERATIONS
# =============================================================================

def get_competitor(db: Session, competitor_id: int, owner_id: str) -> Optional[Competitor]:
    """Return the competitor only when it belongs to *owner_id*."""
    return db.execute(
        select(Competitor).where(
            Competitor.id == competitor_id,
            Competitor.user_id == owner_id,
        )
    ).scalar_one_or_none()


def list_active_social_accounts(db: Session, competitor_id: int) -> List[SocialAccount]:
    """Active social accounts of a competitor, in creation order."""
    return list(db.execute(
        select(SocialAccount)
        .where(
            SocialAccount.competitor_id == competitor_id,
            SocialAccount.is_active.is_(True),
        )
        .order_by(SocialAccount.id)
    ).scalars().all())


def insert_insight(db: Session, record: dict) -> Insight:
    """Insert and commit a single insight row."""
    insight = Insight(**record)
    db.add(insight)
    db.commit()
    db.refresh(insight)
    return insight


def insert_user_sentiment(db: Session, record: dict) -> UserSentimentData:
    """Insert and commit one brand-sentiment row."""
    row = UserSentimentData(**record)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_latest_user_sentiment(db: Session, user_id: str) -> Optional[UserSentimentData]:
    """Most recent brand-sentiment row for *user_id* by scrape time."""
    return db.execute(
        select(UserSentimentData)
        .where(UserSentimentData.user_id == user_id)
        .order_by(desc(UserSentimentData.scraped_at), desc(UserSentimentData.id))
        .limit(1)
    ).scalar_one_or_none()


def ensure_user(db: Session, user_id: str, email: Optional[str] = None) -> User:
    """Return the local user row, creating it on first sight of a token subject."""
    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=email)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Provisioned local user record for {user_id}")
    return user
