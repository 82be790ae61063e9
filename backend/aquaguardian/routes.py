from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .achievements import badges, newly_unlocked, next_locked
from .assessors import QualityAssessor
from .chat import ChatResponder
from .database import get_db
from .repository import MonitorRepository
from .schemas import (
    AchievementsOut, AnalyzeOut, AnalyzeRequest, AssessmentOut,
    ChatOut, ChatRequest, ReadingIn, ReadingOut, SimStatusOut,
)
from .scoring import SensorReading, indicator_status, parameter_levels, score_label
from .simulator import ReadingSimulator, now_ms

router = APIRouter(prefix="/api/v1")


def get_repo(db: Session = Depends(get_db)) -> MonitorRepository:
    return MonitorRepository(db)


def get_assessor(request: Request) -> QualityAssessor:
    return request.app.state.assessor


def get_chat(request: Request) -> ChatResponder:
    return request.app.state.chat


def get_simulator(request: Request) -> ReadingSimulator:
    return request.app.state.simulator


def _to_reading(payload: ReadingIn) -> SensorReading:
    return SensorReading(
        ph=payload.pH,
        tds=payload.tds,
        turbidity=payload.turbidity,
        temperature=payload.temperature,
        timestamp=payload.timestamp if payload.timestamp is not None else now_ms(),
    )


def _reading_out(r: SensorReading) -> ReadingOut:
    return ReadingOut(pH=r.ph, tds=r.tds, turbidity=r.turbidity, temperature=r.temperature, timestamp=r.timestamp)


def _latest_or_404(repo: MonitorRepository) -> SensorReading:
    latest = repo.latest()
    if latest is None:
        raise HTTPException(status_code=404, detail="No readings yet")
    return latest


# -----------------------------
# Readings
# -----------------------------
@router.post("/readings", response_model=ReadingOut, status_code=201)
def ingest_reading(payload: ReadingIn, repo: MonitorRepository = Depends(get_repo)):
    reading = repo.add_reading(_to_reading(payload))
    return _reading_out(reading)


@router.get("/readings/latest", response_model=ReadingOut)
def latest_reading(repo: MonitorRepository = Depends(get_repo)):
    return _reading_out(_latest_or_404(repo))


@router.get("/readings", response_model=list[ReadingOut])
def reading_history(repo: MonitorRepository = Depends(get_repo)):
    return [_reading_out(r) for r in repo.history()]


@router.delete("/readings")
def clear_history(repo: MonitorRepository = Depends(get_repo)):
    return {"ok": True, "deleted": repo.clear_history()}


# -----------------------------
# Analysis
# -----------------------------
@router.post("/analyze", response_model=AnalyzeOut)
def analyze(
    payload: Optional[AnalyzeRequest] = None,
    repo: MonitorRepository = Depends(get_repo),
    assessor: QualityAssessor = Depends(get_assessor),
):
    if payload is not None and payload.reading is not None:
        reading = _to_reading(payload.reading)
    else:
        reading = _latest_or_404(repo)

    result, source = assessor.assess_with_source(reading)
    before, after = repo.increment_test_count()

    return AnalyzeOut(
        reading=_reading_out(reading),
        assessment=AssessmentOut(
            quality_score=result.quality_score,
            status=result.status,
            is_healthy=result.is_healthy,
            pros=result.pros,
            cons=result.cons,
            recommendations=result.recommendations,
            health_implications=result.health_implications,
            source=source,
        ),
        indicator_status=indicator_status(reading),
        score_label=score_label(result.quality_score),
        parameter_levels=parameter_levels(reading),
        test_count=after,
        new_badges=newly_unlocked(before, after),
    )


@router.get("/achievements", response_model=AchievementsOut)
def achievements(repo: MonitorRepository = Depends(get_repo)):
    count = repo.test_count()
    return AchievementsOut(test_count=count, badges=badges(count), next_locked=next_locked(count))


@router.post("/chat", response_model=ChatOut)
def chat(
    payload: ChatRequest,
    repo: MonitorRepository = Depends(get_repo),
    responder: ChatResponder = Depends(get_chat),
):
    if not payload.question.strip():
        raise HTTPException(status_code=422, detail="Question must not be blank")

    reading = _to_reading(payload.reading) if payload.reading is not None else repo.latest()
    ans = responder.answer(reading, payload.question)
    return ChatOut(answer=ans.answer, source=ans.source)


# -----------------------------
# Simulation (frontend toggle)
# -----------------------------
@router.get("/sim/status", response_model=SimStatusOut)
def sim_status(sim: ReadingSimulator = Depends(get_simulator)):
    return SimStatusOut(running=sim.is_running())


@router.post("/sim/start", response_model=SimStatusOut)
def sim_start(sim: ReadingSimulator = Depends(get_simulator)):
    started = sim.start()
    return SimStatusOut(running=sim.is_running(), changed=started)


@router.post("/sim/stop", response_model=SimStatusOut)
def sim_stop(sim: ReadingSimulator = Depends(get_simulator)):
    stopped = sim.stop()
    return SimStatusOut(running=sim.is_running(), changed=stopped)
