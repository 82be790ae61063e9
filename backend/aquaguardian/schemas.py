from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional

Status = Literal["good", "moderate", "poor"]
Level = Literal["optimal", "warning", "critical"]


class ReadingIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    pH: float
    tds: float = Field(..., ge=0)
    turbidity: float = Field(..., ge=0)
    temperature: float
    timestamp: Optional[int] = Field(None, ge=0)


class ReadingOut(BaseModel):
    pH: float
    tds: float
    turbidity: float
    temperature: float
    timestamp: int


class AssessmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quality_score: int = Field(..., alias="qualityScore", ge=0, le=100)
    status: Status
    is_healthy: bool = Field(..., alias="isHealthy")
    pros: List[str]
    cons: List[str]
    recommendations: List[str]
    health_implications: List[str] = Field(..., alias="healthImplications")
    source: Literal["local", "remote"]


class AnalyzeRequest(BaseModel):
    reading: Optional[ReadingIn] = None


class AnalyzeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reading: ReadingOut
    assessment: AssessmentOut
    indicator_status: Status = Field(..., alias="indicatorStatus")
    score_label: str = Field(..., alias="scoreLabel")
    parameter_levels: Dict[str, Level] = Field(..., alias="parameterLevels")
    test_count: int = Field(..., alias="testCount")
    new_badges: List[str] = Field(..., alias="newBadges")


class AchievementsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_count: int = Field(..., alias="testCount")
    badges: List[str]
    next_locked: List[str] = Field(..., alias="nextLocked")


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)
    reading: Optional[ReadingIn] = None


class ChatOut(BaseModel):
    answer: str
    source: Literal["local", "remote"]


class SimStatusOut(BaseModel):
    running: bool
    changed: Optional[bool] = None
