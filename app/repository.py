"""
Skin repository — all DB access in one place.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.db import JournalEntryRecord, SkinAnalysisRecord, TreatmentTrackingRecord, User
from app.schemas import (
    AnalysisCreate,
    JournalEntryCreate,
    SubscriptionUpdate,
    TreatmentProgress,
    TreatmentStart,
    TreatmentStatus,
    UserCreate,
)

logger = logging.getLogger(__name__)


class SkinRepository:
    """Single repository for all DB operations."""

    # ── Users ──

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        user = User(**data.model_dump())
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"Created new user: {user.email}")
        return user

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def update_subscription(
        self, db: AsyncSession, user: User, data: SubscriptionUpdate
    ) -> User:
        user.subscription_tier = data.tier
        user.subscription_status = data.status
        user.subscription_expires_at = data.expires_at
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(
            f"Subscription updated | User: {user.id} | Tier: {data.tier.value} | Status: {data.status.value}"
        )
        return user

    # ── Analyses ──

    async def create_analysis(
        self, db: AsyncSession, user_id: int, data: AnalysisCreate
    ) -> SkinAnalysisRecord:
        record = SkinAnalysisRecord(user_id=user_id, **data.model_dump(mode="json"))
        db.add(record)
        await db.commit()
        await db.refresh(record)
        return record

    async def get_analysis(
        self, db: AsyncSession, user_id: int, analysis_id: int
    ) -> Optional[SkinAnalysisRecord]:
        """Only returns the analysis if it belongs to `user_id`."""
        result = await db.execute(
            select(SkinAnalysisRecord).where(
                SkinAnalysisRecord.id == analysis_id,
                SkinAnalysisRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_latest_analysis(
        self, db: AsyncSession, user_id: int
    ) -> Optional[SkinAnalysisRecord]:
        result = await db.execute(
            select(SkinAnalysisRecord)
            .where(SkinAnalysisRecord.user_id == user_id)
            .order_by(SkinAnalysisRecord.created_at.desc(), SkinAnalysisRecord.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_analyses(self, db: AsyncSession, user_id: int) -> list[SkinAnalysisRecord]:
        result = await db.execute(
            select(SkinAnalysisRecord)
            .where(SkinAnalysisRecord.user_id == user_id)
            .order_by(SkinAnalysisRecord.created_at.desc(), SkinAnalysisRecord.id.desc())
        )
        return list(result.scalars().all())

    # ── Journal ──

    async def create_journal_entry(
        self, db: AsyncSession, user_id: int, data: JournalEntryCreate
    ) -> JournalEntryRecord:
        values = data.model_dump(exclude_none=True)
        values["mood"] = data.mood.value
        entry = JournalEntryRecord(user_id=user_id, **values)
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return entry

    async def list_journal_entries(self, db: AsyncSession, user_id: int) -> list[JournalEntryRecord]:
        result = await db.execute(
            select(JournalEntryRecord)
            .where(JournalEntryRecord.user_id == user_id)
            .order_by(JournalEntryRecord.date.desc(), JournalEntryRecord.id.desc())
        )
        return list(result.scalars().all())

    # ── Treatment plans ──

    async def create_treatment(
        self, db: AsyncSession, analysis_id: int, data: TreatmentStart
    ) -> TreatmentTrackingRecord:
        record = TreatmentTrackingRecord(
            analysis_id=analysis_id,
            solution_index=data.solution_index,
            status=TreatmentStatus.ACTIVE,
            progress=TreatmentProgress().model_dump(),
        )
        if data.start_date is not None:
            record.start_date = data.start_date
        db.add(record)
        await db.commit()
        await db.refresh(record)
        logger.info(f"Started treatment {record.id} | Analysis: {analysis_id} | Option: {data.solution_index}")
        return record

    async def get_treatment(
        self, db: AsyncSession, user_id: int, treatment_id: int
    ) -> Optional[TreatmentTrackingRecord]:
        """Only returns the plan if its analysis belongs to `user_id`."""
        result = await db.execute(
            select(TreatmentTrackingRecord)
            .join(SkinAnalysisRecord, TreatmentTrackingRecord.analysis_id == SkinAnalysisRecord.id)
            .where(
                TreatmentTrackingRecord.id == treatment_id,
                SkinAnalysisRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_open_treatment(
        self, db: AsyncSession, analysis_id: int
    ) -> Optional[TreatmentTrackingRecord]:
        result = await db.execute(
            select(TreatmentTrackingRecord)
            .where(
                TreatmentTrackingRecord.analysis_id == analysis_id,
                TreatmentTrackingRecord.status.in_([TreatmentStatus.ACTIVE, TreatmentStatus.PAUSED]),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_treatments(self, db: AsyncSession, analysis_id: int) -> list[TreatmentTrackingRecord]:
        result = await db.execute(
            select(TreatmentTrackingRecord)
            .where(TreatmentTrackingRecord.analysis_id == analysis_id)
            .order_by(TreatmentTrackingRecord.created_at.desc(), TreatmentTrackingRecord.id.desc())
        )
        return list(result.scalars().all())

    async def update_treatment(
        self,
        db: AsyncSession,
        record: TreatmentTrackingRecord,
        progress: TreatmentProgress,
        status: TreatmentStatus,
    ) -> TreatmentTrackingRecord:
        record.progress = progress.model_dump()
        record.status = status
        db.add(record)
        await db.commit()
        await db.refresh(record)
        return record
