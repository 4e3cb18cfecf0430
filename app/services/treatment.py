"""
Premium recommendations and treatment-plan tracking.

A premium user can open the premium view of an analysis (product picks, the
full premium routine, three treatment plans), start one plan for it and log
progress against it. Product picks are ingredient-led product types, never
brands.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from app.schemas import (
    IssueTag,
    PremiumRecommendations,
    ProductPick,
    SkinAnalysis,
    SkinType,
    TreatmentOption,
    TreatmentPlan,
    TreatmentPlanDetail,
    TreatmentProgress,
    TreatmentProgressUpdate,
    TreatmentStatus,
)
from app.services.routine_rules import derive_routine, normalize_issues, parse_skin_type

logger = logging.getLogger(__name__)

CHECKUP_INTERVAL_DAYS = 7
OPEN_STATUSES = {TreatmentStatus.ACTIVE, TreatmentStatus.PAUSED}

TREATMENT_OPTIONS: tuple[TreatmentOption, ...] = (
    TreatmentOption(
        name="Gentle Hydration Routine",
        description="A mild routine focused on rebuilding the moisture barrier and improving overall hydration.",
        duration="4-6 weeks",
        total_days=42,
        suitability="Sensitive, dry skin with minimal active breakouts",
        steps=[
            "Morning: Gentle cleanser → Hydrating toner → Niacinamide serum → Light moisturizer → SPF 50",
            "Evening: Oil cleanser → Water-based cleanser → Hyaluronic acid serum → Ceramide moisturizer",
            "Weekly: Gentle enzyme exfoliation and hydrating mask",
        ],
    ),
    TreatmentOption(
        name="Active Treatment Plan",
        description="A more intensive plan targeting active breakouts, congestion and uneven texture.",
        duration="6-8 weeks",
        total_days=56,
        suitability="Oily or combination skin with moderate acne",
        steps=[
            "Morning: Salicylic acid cleanser → Niacinamide toner → Vitamin C serum → Oil-free moisturizer → SPF 50",
            "Evening: Double cleanse → BHA treatment (2-3x/week) → Retinol (alternate nights) → Oil-control moisturizer",
            "Weekly: Clay mask for T-zone, hydrating mask for cheeks",
        ],
    ),
    TreatmentOption(
        name="Anti-Aging Restoration",
        description="Improves texture and firmness and addresses early signs of aging.",
        duration="8-12 weeks",
        total_days=84,
        suitability="Mature skin with fine lines and uneven texture",
        steps=[
            "Morning: Gentle cleanser → Antioxidant serum → Peptide moisturizer → SPF 50+",
            "Evening: Double cleanse → Retinol serum → Rich moisturizer with ceramides",
            "Weekly: AHA treatment and firming mask",
        ],
    ),
)

# Everyone gets these
BASE_PICKS: tuple[ProductPick, ...] = (
    ProductPick(
        name="Broad-spectrum mineral sunscreen SPF 50",
        category="sunscreen",
        description="Daily UV protection; the single most effective step for every skin concern.",
        key_ingredients=["zinc oxide", "titanium dioxide"],
    ),
    ProductPick(
        name="Ceramide barrier moisturizer",
        category="moisturizer",
        description="Fragrance-free moisturizer that supports the skin barrier.",
        key_ingredients=["ceramides", "cholesterol", "fatty acids"],
    ),
)

PICKS_BY_ISSUE: dict[IssueTag, tuple[ProductPick, ...]] = {
    IssueTag.ACNE: (
        ProductPick(
            name="Salicylic acid cleanser",
            category="cleanser",
            description="Oil-soluble BHA that clears congested pores.",
            key_ingredients=["salicylic acid 2%"],
        ),
        ProductPick(
            name="Niacinamide serum",
            category="serum",
            description="Calms breakouts and regulates oil.",
            key_ingredients=["niacinamide 10%", "zinc"],
        ),
    ),
    IssueTag.DRYNESS: (
        ProductPick(
            name="Multi-weight hyaluronic serum",
            category="serum",
            description="Layers hydration at several depths; apply on damp skin.",
            key_ingredients=["hyaluronic acid", "glycerin"],
        ),
    ),
    IssueTag.HYPERPIGMENTATION: (
        ProductPick(
            name="Vitamin C serum",
            category="serum",
            description="Antioxidant morning serum that fades dark spots.",
            key_ingredients=["L-ascorbic acid", "ferulic acid"],
        ),
        ProductPick(
            name="Tranexamic acid treatment",
            category="treatment",
            description="Evening spot treatment for stubborn discoloration.",
            key_ingredients=["tranexamic acid", "alpha arbutin"],
        ),
    ),
    IssueTag.TEXTURE: (
        ProductPick(
            name="AHA resurfacing toner",
            category="exfoliant",
            description="Smooths rough texture; start 2-3 evenings a week.",
            key_ingredients=["glycolic acid", "lactic acid"],
        ),
    ),
    IssueTag.WRINKLES: (
        ProductPick(
            name="Retinol night serum",
            category="serum",
            description="Boosts cell turnover for fine lines; start twice weekly.",
            key_ingredients=["retinol 0.3%"],
        ),
    ),
    IssueTag.AGING: (
        ProductPick(
            name="Peptide firming cream",
            category="moisturizer",
            description="Supports firmness alongside a retinoid.",
            key_ingredients=["peptides", "ceramides"],
        ),
    ),
    IssueTag.SENSITIVITY: (
        ProductPick(
            name="Centella soothing serum",
            category="serum",
            description="Reduces redness and supports barrier repair.",
            key_ingredients=["centella asiatica", "panthenol"],
        ),
    ),
}

OILY_SKIN_PICK = ProductPick(
    name="Oil-control gel moisturizer",
    category="moisturizer",
    description="Lightweight hydration that keeps shine down.",
    key_ingredients=["niacinamide", "witch hazel"],
)


class TreatmentClosedError(Exception):
    """Raised when progress is logged against a completed or canceled plan."""


def get_option(solution_index: int) -> Optional[TreatmentOption]:
    if 0 <= solution_index < len(TREATMENT_OPTIONS):
        return TREATMENT_OPTIONS[solution_index]
    return None


def premium_products(detected_issues, skin_type: SkinType | str | None) -> list[ProductPick]:
    """Base picks, then picks per detected issue in tag order."""
    tags = normalize_issues(detected_issues)
    picks = list(BASE_PICKS)
    for tag in IssueTag:
        if tag in tags:
            picks.extend(PICKS_BY_ISSUE.get(tag, ()))
    if parse_skin_type(skin_type) in (SkinType.OILY, SkinType.COMBINATION):
        picks.append(OILY_SKIN_PICK)
    return picks


def premium_recommendations(analysis: SkinAnalysis) -> PremiumRecommendations:
    skin_type = (analysis.ai_analysis_results or {}).get("skinType")
    return PremiumRecommendations(
        analysis_id=analysis.id,
        products=premium_products(analysis.detected_issues, skin_type),
        custom_routine=derive_routine(analysis.detected_issues, skin_type, is_premium=True),
        treatment_options=list(TREATMENT_OPTIONS),
    )


def apply_progress(
    plan: TreatmentPlan, update: TreatmentProgressUpdate
) -> tuple[TreatmentProgress, TreatmentStatus]:
    """
    Fold a progress update into a plan.

    Days never go backwards and are capped at the plan length; reaching the
    end completes the plan. Improvements are appended without repeats.
    """
    if plan.status not in OPEN_STATUSES:
        raise TreatmentClosedError(f"Treatment {plan.id} is {plan.status.value}")

    total_days = TREATMENT_OPTIONS[plan.solution_index].total_days
    days = plan.progress.days_completed
    if update.days_completed is not None:
        days = min(max(days, update.days_completed), total_days)

    improvements = list(plan.progress.improvements)
    for note in update.improvements:
        note = note.strip()
        if note and note not in improvements:
            improvements.append(note)

    status = update.status or plan.status
    if days >= total_days:
        status = TreatmentStatus.COMPLETED
        logger.info(f"Treatment {plan.id} completed after {days} days")

    return TreatmentProgress(days_completed=days, improvements=improvements), status


def next_checkup(plan: TreatmentPlan, today: Optional[date] = None) -> Optional[date]:
    """Weekly checkups counted from the start date; none for paused or closed plans."""
    if plan.status != TreatmentStatus.ACTIVE:
        return None
    today = today or date.today()
    elapsed = max((today - plan.start_date).days, 0)
    weeks = elapsed // CHECKUP_INTERVAL_DAYS + 1
    return plan.start_date + timedelta(days=weeks * CHECKUP_INTERVAL_DAYS)


def plan_detail(record, today: Optional[date] = None) -> TreatmentPlanDetail:
    plan = TreatmentPlan.model_validate(record)
    option = TREATMENT_OPTIONS[plan.solution_index]
    percent = min(100, round(plan.progress.days_completed / option.total_days * 100))
    return TreatmentPlanDetail(
        **plan.model_dump(),
        option=option,
        percent_complete=percent,
        next_checkup=next_checkup(plan, today),
    )
