import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from app.agents.doctor import DoctorDeps, doctor_agent
from app.config import get_settings
from app.database import get_db
from app.repository import SkinRepository
from app.schemas import (
    AnalysisCreate,
    AnalysisDetail,
    DoctorAnswer,
    DoctorQuestion,
    JournalEntry,
    JournalEntryCreate,
    PremiumRecommendations,
    PremiumStatus,
    RoutineSet,
    SkinAnalysis,
    SubscriptionUpdate,
    TreatmentPlan,
    TreatmentPlanDetail,
    TreatmentProgressUpdate,
    TreatmentStart,
    UserCreate,
    UserRead,
)
from app.services.premium import check_user_premium_status
from app.services.routines import RoutineService
from app.services.scoring import concern_scores, overall_health_score
from app.services.treatment import (
    TreatmentClosedError,
    apply_progress,
    get_option,
    plan_detail,
    premium_recommendations,
)

settings = get_settings()

# Set up logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="SkinInsight")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependencies
def get_repository() -> SkinRepository:
    return SkinRepository()


def get_routine_service(repo: SkinRepository = Depends(get_repository)) -> RoutineService:
    return RoutineService(repo)


async def _require_user(db: AsyncSession, repo: SkinRepository, user_id: int):
    user = await repo.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _require_premium(db: AsyncSession, repo: SkinRepository, user_id: int):
    await _require_user(db, repo, user_id)
    if not await check_user_premium_status(db, user_id, repo):
        raise HTTPException(status_code=403, detail="This feature is available only for premium users")


async def _require_analysis(db: AsyncSession, repo: SkinRepository, user_id: int, analysis_id: int):
    record = await repo.get_analysis(db, user_id, analysis_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return record


@app.get("/")
async def health_check():
    return {"status": "healthy", "service": "SkinInsight"}


# ── Users & subscriptions ──


@app.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    if await repo.get_user_by_email(db, data.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    return await repo.create_user(db, data)


@app.get("/users/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    return await _require_user(db, repo, user_id)


@app.put("/users/{user_id}/subscription", response_model=UserRead)
async def update_subscription(
    user_id: int,
    data: SubscriptionUpdate,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    user = await _require_user(db, repo, user_id)
    return await repo.update_subscription(db, user, data)


@app.get("/users/{user_id}/premium", response_model=PremiumStatus)
async def premium_status(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_user(db, repo, user_id)
    is_premium = await check_user_premium_status(db, user_id, repo)
    return PremiumStatus(user_id=user_id, is_premium=is_premium)


# ── Analyses ──


@app.post("/users/{user_id}/analyses", response_model=SkinAnalysis, status_code=201)
async def create_analysis(
    user_id: int,
    data: AnalysisCreate,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_user(db, repo, user_id)
    record = await repo.create_analysis(db, user_id, data)
    logger.info(f"Stored analysis {record.id} for user {user_id} | Issues: {data.detected_issues}")
    return record


@app.get("/users/{user_id}/analyses", response_model=list[SkinAnalysis])
async def list_analyses(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_user(db, repo, user_id)
    return await repo.list_analyses(db, user_id)


@app.get("/users/{user_id}/analyses/{analysis_id}", response_model=AnalysisDetail)
async def get_analysis(
    user_id: int,
    analysis_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    record = await _require_analysis(db, repo, user_id, analysis_id)
    analysis = SkinAnalysis.model_validate(record)
    return AnalysisDetail(
        **analysis.model_dump(),
        overall_score=overall_health_score(analysis.severity_scores),
        concerns=concern_scores(analysis.severity_scores),
    )


# ── Premium recommendations & treatment plans ──


@app.get("/users/{user_id}/analyses/{analysis_id}/premium", response_model=PremiumRecommendations)
async def get_premium_recommendations(
    user_id: int,
    analysis_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_premium(db, repo, user_id)
    record = await _require_analysis(db, repo, user_id, analysis_id)
    return premium_recommendations(SkinAnalysis.model_validate(record))


@app.post(
    "/users/{user_id}/analyses/{analysis_id}/treatments",
    response_model=TreatmentPlanDetail,
    status_code=201,
)
async def start_treatment(
    user_id: int,
    analysis_id: int,
    data: TreatmentStart,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_premium(db, repo, user_id)
    await _require_analysis(db, repo, user_id, analysis_id)
    if get_option(data.solution_index) is None:
        raise HTTPException(status_code=422, detail="Unknown treatment option")
    if await repo.get_open_treatment(db, analysis_id):
        raise HTTPException(status_code=409, detail="A treatment plan is already running for this analysis")

    record = await repo.create_treatment(db, analysis_id, data)
    return plan_detail(record)


@app.get(
    "/users/{user_id}/analyses/{analysis_id}/treatments",
    response_model=list[TreatmentPlanDetail],
)
async def list_treatments(
    user_id: int,
    analysis_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_premium(db, repo, user_id)
    await _require_analysis(db, repo, user_id, analysis_id)
    return [plan_detail(record) for record in await repo.list_treatments(db, analysis_id)]


@app.patch("/users/{user_id}/treatments/{treatment_id}", response_model=TreatmentPlanDetail)
async def update_treatment_progress(
    user_id: int,
    treatment_id: int,
    data: TreatmentProgressUpdate,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_premium(db, repo, user_id)
    record = await repo.get_treatment(db, user_id, treatment_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Treatment plan not found")

    try:
        progress, status = apply_progress(TreatmentPlan.model_validate(record), data)
    except TreatmentClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    record = await repo.update_treatment(db, record, progress, status)
    return plan_detail(record)


# ── Routines ──


@app.get("/users/{user_id}/routines", response_model=RoutineSet)
async def get_routines(
    user_id: int,
    analysis_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
    service: RoutineService = Depends(get_routine_service),
):
    await _require_user(db, repo, user_id)
    return await service.derive_routines(db, user_id, analysis_id)


# ── Journal ──


@app.post("/users/{user_id}/journal", response_model=JournalEntry, status_code=201)
async def create_journal_entry(
    user_id: int,
    data: JournalEntryCreate,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_user(db, repo, user_id)
    return await repo.create_journal_entry(db, user_id, data)


@app.get("/users/{user_id}/journal", response_model=list[JournalEntry])
async def list_journal_entries(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_user(db, repo, user_id)
    return await repo.list_journal_entries(db, user_id)


# ── AI doctor ──


@app.post("/users/{user_id}/doctor", response_model=DoctorAnswer)
async def ask_doctor(
    user_id: int,
    data: DoctorQuestion,
    db: AsyncSession = Depends(get_db),
    repo: SkinRepository = Depends(get_repository),
):
    await _require_premium(db, repo, user_id)

    if data.analysis_id is not None:
        record = await _require_analysis(db, repo, user_id, data.analysis_id)
    else:
        record = await repo.get_latest_analysis(db, user_id)
    analysis = SkinAnalysis.model_validate(record) if record is not None else None

    try:
        result = await doctor_agent.run(data.question, deps=DoctorDeps(analysis=analysis))
    except Exception as e:
        logger.error(f"Error in AI doctor: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Could not get an answer, please try again later")
    return result.output
