"""Shared fixtures — an in-memory stand-in for SkinRepository."""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.repository import SkinRepository
from app.schemas import SubscriptionStatus, SubscriptionTier, TreatmentProgress, TreatmentStatus


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeRepository(SkinRepository):
    """Keeps users, analyses, journal entries and treatment plans in dicts; `db` is ignored."""

    def __init__(self):
        self.users: dict[int, SimpleNamespace] = {}
        self.analyses: dict[int, SimpleNamespace] = {}
        self.journal: dict[int, SimpleNamespace] = {}
        self.treatments: dict[int, SimpleNamespace] = {}
        self.fail_lookups = False

    def add_user(
        self,
        email="demo@example.com",
        tier=SubscriptionTier.FREE,
        status=SubscriptionStatus.ACTIVE,
        expires_at=None,
    ) -> SimpleNamespace:
        user = SimpleNamespace(
            id=len(self.users) + 1,
            email=email,
            first_name=None,
            last_name=None,
            subscription_tier=tier,
            subscription_status=status,
            subscription_expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        self.users[user.id] = user
        return user

    def add_analysis(self, user_id, detected_issues=(), skin_type="combination", severity_scores=None):
        record = SimpleNamespace(
            id=len(self.analyses) + 1,
            user_id=user_id,
            image_url=None,
            ai_analysis_results={"skinType": skin_type} if skin_type else {},
            detected_issues=list(detected_issues),
            severity_scores=severity_scores or {},
            recommendations={},
            # later analyses are newer
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=len(self.analyses)),
        )
        self.analyses[record.id] = record
        return record

    async def create_user(self, db, data):
        user = self.add_user(email=data.email)
        user.first_name = data.first_name
        user.last_name = data.last_name
        return user

    async def get_user(self, db, user_id):
        if self.fail_lookups:
            raise ConnectionError("database unavailable")
        return self.users.get(user_id)

    async def get_user_by_email(self, db, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def update_subscription(self, db, user, data):
        user.subscription_tier = data.tier
        user.subscription_status = data.status
        user.subscription_expires_at = data.expires_at
        return user

    async def create_analysis(self, db, user_id, data):
        record = self.add_analysis(user_id, data.detected_issues, skin_type=None)
        values = data.model_dump(mode="json")
        record.image_url = values["image_url"]
        record.ai_analysis_results = values["ai_analysis_results"]
        record.severity_scores = values["severity_scores"]
        record.recommendations = values["recommendations"]
        return record

    async def get_analysis(self, db, user_id, analysis_id):
        if self.fail_lookups:
            raise ConnectionError("database unavailable")
        record = self.analyses.get(analysis_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    async def get_latest_analysis(self, db, user_id):
        if self.fail_lookups:
            raise ConnectionError("database unavailable")
        owned = [a for a in self.analyses.values() if a.user_id == user_id]
        return max(owned, key=lambda a: a.created_at) if owned else None

    async def list_analyses(self, db, user_id):
        owned = [a for a in self.analyses.values() if a.user_id == user_id]
        return sorted(owned, key=lambda a: a.created_at, reverse=True)

    async def create_journal_entry(self, db, user_id, data):
        entry = SimpleNamespace(id=len(self.journal) + 1, user_id=user_id, **data.model_dump())
        entry.date = entry.date or date.today()
        self.journal[entry.id] = entry
        return entry

    async def list_journal_entries(self, db, user_id):
        owned = [e for e in self.journal.values() if e.user_id == user_id]
        return sorted(owned, key=lambda e: (e.date, e.id), reverse=True)

    def add_treatment(
        self,
        analysis_id,
        solution_index=0,
        start_date=date(2026, 10, 1),
        status=TreatmentStatus.ACTIVE,
        days_completed=0,
    ) -> SimpleNamespace:
        record = SimpleNamespace(
            id=len(self.treatments) + 1,
            analysis_id=analysis_id,
            solution_index=solution_index,
            start_date=start_date,
            status=status,
            progress=TreatmentProgress(days_completed=days_completed).model_dump(),
            created_at=datetime(2026, 10, 1, tzinfo=timezone.utc) + timedelta(hours=len(self.treatments)),
        )
        self.treatments[record.id] = record
        return record

    async def create_treatment(self, db, analysis_id, data):
        return self.add_treatment(
            analysis_id, data.solution_index, start_date=data.start_date or date.today()
        )

    async def get_treatment(self, db, user_id, treatment_id):
        record = self.treatments.get(treatment_id)
        if record is None or self.analyses[record.analysis_id].user_id != user_id:
            return None
        return record

    async def get_open_treatment(self, db, analysis_id):
        return next(
            (
                t for t in self.treatments.values()
                if t.analysis_id == analysis_id and t.status in (TreatmentStatus.ACTIVE, TreatmentStatus.PAUSED)
            ),
            None,
        )

    async def list_treatments(self, db, analysis_id):
        owned = [t for t in self.treatments.values() if t.analysis_id == analysis_id]
        return sorted(owned, key=lambda t: t.created_at, reverse=True)

    async def update_treatment(self, db, record, progress, status):
        record.progress = progress.model_dump()
        record.status = status
        return record


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()
