"""
RoutineService — derives a user's routines from their stored analysis.

Upstream failures never reach the caller: a missing or unreadable analysis
gives the default routine, a failed premium lookup counts as not premium.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.repository import SkinRepository
from app.schemas import RoutineSet
from app.services.premium import check_user_premium_status
from app.services.routine_rules import default_routine, derive_routine, parse_skin_type

logger = logging.getLogger(__name__)


class RoutineService:
    def __init__(self, repository: Optional[SkinRepository] = None):
        self.repo = repository or SkinRepository()

    async def _load_analysis(self, db: AsyncSession, user_id: int, analysis_id: Optional[int]):
        try:
            if analysis_id is not None:
                return await self.repo.get_analysis(db, user_id, analysis_id)
            return await self.repo.get_latest_analysis(db, user_id)
        except Exception as e:
            logger.warning(f"Analysis lookup failed for user {user_id}: {e}")
            return None

    async def derive_routines(
        self,
        db: AsyncSession,
        user_id: int,
        analysis_id: Optional[int] = None,
    ) -> RoutineSet:
        analysis = await self._load_analysis(db, user_id, analysis_id)
        if analysis is None:
            logger.info(f"No analysis for user {user_id} — returning default routine")
            return default_routine()

        results = analysis.ai_analysis_results or {}
        skin_type = parse_skin_type(results.get("skinType"))
        is_premium = await check_user_premium_status(db, user_id, self.repo)

        routine = derive_routine(analysis.detected_issues or [], skin_type, is_premium)
        logger.info(
            f"Derived routines | User: {user_id} | Analysis: {analysis.id} | "
            f"Skin: {skin_type.value} | Premium: {is_premium} | "
            f"Steps: {len(routine.morning)}/{len(routine.evening)}/{len(routine.weekly)}"
        )
        return routine
