"""
Pydantic schemas — the single source of truth for all data contracts.

SkinAnalysis is what the analysis store hands to the routine deriver;
RoutineSet is what the deriver hands back. Both are plain values and are
never shared between requests.
"""

from __future__ import annotations

import enum
from datetime import date as date_type, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class SkinType(str, enum.Enum):
    NORMAL = "normal"
    DRY = "dry"
    OILY = "oily"
    COMBINATION = "combination"
    SENSITIVE = "sensitive"


class IssueTag(str, enum.Enum):
    """Well-known issue tags produced from an analysis' detected issues."""

    ACNE = "acne"
    DRYNESS = "dryness"
    HYPERPIGMENTATION = "hyperpigmentation"
    TEXTURE = "texture"
    WRINKLES = "wrinkles"
    AGING = "aging"
    SENSITIVITY = "sensitivity"


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PREMIUM = "premium"
    PROFESSIONAL = "professional"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    INACTIVE = "inactive"
    CANCELED = "canceled"


class Mood(str, enum.Enum):
    HAPPY = "Happy"
    NEUTRAL = "Neutral"
    STRESSED = "Stressed"
    TIRED = "Tired"
    ENERGETIC = "Energetic"


class TreatmentStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELED = "canceled"


# ── Users & subscriptions ───────────────────────────────────────────────────


class UserCreate(BaseModel):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SubscriptionUpdate(BaseModel):
    tier: SubscriptionTier
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    expires_at: Optional[datetime] = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    subscription_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PremiumStatus(BaseModel):
    user_id: int
    is_premium: bool


# ── Skin analyses ───────────────────────────────────────────────────────────


class Recommendations(BaseModel):
    products: list[str] = Field(default_factory=list)
    routines: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


class AnalysisCreate(BaseModel):
    """Result of the (external) image analysis step, as submitted for storage."""

    image_url: Optional[str] = None
    ai_analysis_results: dict[str, Any] = Field(default_factory=dict)
    detected_issues: list[str] = Field(default_factory=list)
    severity_scores: dict[str, float] = Field(default_factory=dict)
    recommendations: Recommendations = Field(default_factory=Recommendations)


class SkinAnalysis(AnalysisCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    created_at: Optional[datetime] = None


class ConcernScore(BaseModel):
    name: str
    score: int = Field(description="Health percentage, 100 = no concern")


class AnalysisDetail(SkinAnalysis):
    overall_score: int
    concerns: list[ConcernScore] = Field(default_factory=list)


# ── Routines ────────────────────────────────────────────────────────────────


class RoutineSet(BaseModel):
    """Morning, evening and weekly steps, each list in application order."""

    morning: list[str] = Field(default_factory=list)
    evening: list[str] = Field(default_factory=list)
    weekly: list[str] = Field(default_factory=list)


# ── Journal ─────────────────────────────────────────────────────────────────


class JournalEntryCreate(BaseModel):
    date: Optional[date_type] = None
    mood: Mood = Mood.NEUTRAL
    notes: str = ""
    diet_notes: str = ""
    sleep_quality: int = Field(default=5, ge=1, le=10)
    stress_level: int = Field(default=5, ge=1, le=10)
    image_url: Optional[str] = None


class JournalEntry(JournalEntryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int


# ── AI doctor ───────────────────────────────────────────────────────────────


class DoctorQuestion(BaseModel):
    question: str = Field(min_length=1)
    analysis_id: Optional[int] = None


class DoctorAnswer(BaseModel):
    """Returned by the AI doctor agent."""

    answer: str = Field(description="Plain-language answer to the user's question")
    product_recommendations: list[str] = Field(
        default_factory=list,
        description="Ingredient categories or product types, never brand names",
    )


# ── Premium recommendations & treatment plans ───────────────────────────────


class ProductPick(BaseModel):
    name: str
    category: str
    description: str
    key_ingredients: list[str] = Field(default_factory=list)


class TreatmentOption(BaseModel):
    name: str
    description: str
    duration: str
    total_days: int
    suitability: str
    steps: list[str]


class PremiumRecommendations(BaseModel):
    """Premium extras for one analysis: product picks, full routine, treatment plans."""

    analysis_id: int
    products: list[ProductPick] = Field(default_factory=list)
    custom_routine: RoutineSet
    treatment_options: list[TreatmentOption] = Field(default_factory=list)


class TreatmentStart(BaseModel):
    solution_index: int = Field(ge=0)
    start_date: Optional[date_type] = None


class TreatmentProgress(BaseModel):
    days_completed: int = 0
    improvements: list[str] = Field(default_factory=list)


class TreatmentProgressUpdate(BaseModel):
    days_completed: Optional[int] = Field(default=None, ge=0)
    improvements: list[str] = Field(default_factory=list)
    status: Optional[TreatmentStatus] = None


class TreatmentPlan(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    analysis_id: int
    solution_index: int
    start_date: date_type
    status: TreatmentStatus
    progress: TreatmentProgress = Field(default_factory=TreatmentProgress)
    created_at: Optional[datetime] = None


class TreatmentPlanDetail(TreatmentPlan):
    option: TreatmentOption
    percent_complete: int
    next_checkup: Optional[date_type] = None
