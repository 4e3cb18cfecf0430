"""
AI Doctor Agent — answers skincare questions for premium users.

Takes the user's question plus their latest SkinAnalysis (if any), returns a
structured DoctorAnswer. Recommends ingredient categories, NOT brand products.
"""

import os
from dataclasses import dataclass
from typing import Optional

from pydantic_ai import Agent, RunContext

from app.config import get_settings
from app.schemas import DoctorAnswer, SkinAnalysis
from app.services.routine_rules import default_routine, derive_routine
from app.services.scoring import overall_health_score

settings = get_settings()
if not os.environ.get("ANTHROPIC_API_KEY") and settings.claude_api_key:
    os.environ["ANTHROPIC_API_KEY"] = settings.claude_api_key


@dataclass
class DoctorDeps:
    analysis: Optional[SkinAnalysis] = None


doctor_agent = Agent(
    settings.doctor_model,
    deps_type=DoctorDeps,
    output_type=DoctorAnswer,
    defer_model_check=True,
)


def _format_analysis(analysis: Optional[SkinAnalysis]) -> str:
    if analysis is None:
        return "  - No skin analysis on file yet."

    results = analysis.ai_analysis_results or {}
    lines = [
        f"Skin type: {results.get('skinType', 'unknown')}",
        f"Detected issues: {', '.join(analysis.detected_issues) if analysis.detected_issues else 'none'}",
        f"Overall skin health: {overall_health_score(analysis.severity_scores)}%",
    ]
    severities = {k: v for k, v in analysis.severity_scores.items() if k != "overallHealth"}
    if severities:
        scored = ", ".join(f"{k} {v:g}/10" for k, v in severities.items())
        lines.append(f"Severity (0 = none, 10 = severe): {scored}")
    if analysis.recommendations.products:
        lines.append(f"Previously recommended: {', '.join(analysis.recommendations.products)}")
    return "\n".join(f"  - {line}" for line in lines)


@doctor_agent.system_prompt
async def build_system_prompt(ctx: RunContext[DoctorDeps]) -> str:
    return f"""You are the SkinInsight AI doctor, a skincare expert answering a premium user's question.

LATEST SKIN ANALYSIS:
{_format_analysis(ctx.deps.analysis)}

IMPORTANT RULES:
1. Ground the answer in the analysis above when it is relevant to the question
2. Recommend INGREDIENT CATEGORIES and product types, NOT brand names
   - Good: "fragrance-free ceramide moisturizer"
   - Bad: "CeraVe Moisturizing Cream"
3. Never diagnose. If the question describes a severe, painful, bleeding or
   rapidly changing condition, tell the user to see a dermatologist
4. Keep the answer short and in plain language
5. Put any ingredient or product-type suggestions in product_recommendations"""


@doctor_agent.tool
async def get_personalized_routine(ctx: RunContext[DoctorDeps]) -> str:
    """Get the user's personalized morning, evening and weekly routine steps."""
    analysis = ctx.deps.analysis
    if analysis is None:
        routine = default_routine()
    else:
        routine = derive_routine(
            analysis.detected_issues,
            (analysis.ai_analysis_results or {}).get("skinType"),
            is_premium=True,
        )
    return "\n".join(
        f"{slot.title()}: {' → '.join(steps)}"
        for slot, steps in routine.model_dump().items()
    )
