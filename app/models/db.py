"""
SQLAlchemy models — four tables.

`users`          — account + subscription record (tier, status, expiry)
`skin_analyses`  — immutable analysis results, one row per upload
`skin_journal`   — daily journal entries (mood, sleep, stress, notes)
`treatment_tracking` — premium treatment plans started for an analysis
"""

from sqlalchemy import Column, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.schemas import SubscriptionStatus, SubscriptionTier, TreatmentStatus


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    subscription_tier = Column(SQLEnum(SubscriptionTier), default=SubscriptionTier.FREE, nullable=False)
    subscription_status = Column(SQLEnum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False)
    subscription_expires_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    analyses = relationship("SkinAnalysisRecord", back_populates="user", cascade="all, delete-orphan")
    journal_entries = relationship("JournalEntryRecord", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class SkinAnalysisRecord(Base):
    __tablename__ = "skin_analyses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String(500))
    ai_analysis_results = Column(JSON, default=dict)
    detected_issues = Column(JSON, default=list)
    severity_scores = Column(JSON, default=dict)
    recommendations = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="analyses")
    treatments = relationship("TreatmentTrackingRecord", back_populates="analysis", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SkinAnalysisRecord(id={self.id}, user_id={self.user_id})>"


class JournalEntryRecord(Base):
    __tablename__ = "skin_journal"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, server_default=func.current_date(), nullable=False)
    mood = Column(String(20))
    notes = Column(Text, default="")
    diet_notes = Column(Text, default="")
    sleep_quality = Column(Integer)
    stress_level = Column(Integer)
    image_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="journal_entries")

    def __repr__(self):
        return f"<JournalEntryRecord(id={self.id}, date={self.date})>"


class TreatmentTrackingRecord(Base):
    __tablename__ = "treatment_tracking"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    analysis_id = Column(Integer, ForeignKey("skin_analyses.id", ondelete="CASCADE"), nullable=False, index=True)
    solution_index = Column(Integer, nullable=False)
    start_date = Column(Date, server_default=func.current_date(), nullable=False)
    status = Column(SQLEnum(TreatmentStatus), default=TreatmentStatus.ACTIVE, nullable=False)
    progress = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    analysis = relationship("SkinAnalysisRecord", back_populates="treatments")

    def __repr__(self):
        return f"<TreatmentTrackingRecord(id={self.id}, analysis_id={self.analysis_id}, status={self.status})>"
