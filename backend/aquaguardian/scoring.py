from dataclasses import dataclass, field
from typing import Literal, Optional

Status = Literal["good", "moderate", "poor"]
Level = Literal["optimal", "warning", "critical"]

HEALTHY_SCORE = 70
GOOD_SCORE = 80
MODERATE_SCORE = 50

GENERIC_HEALTH_RISK = "Water quality parameters indicate potential health risks"


@dataclass(frozen=True)
class SensorReading:
    ph: float
    tds: float
    turbidity: float
    temperature: float
    timestamp: int = 0  # ms since epoch, ordering only


@dataclass
class QualityAssessment:
    quality_score: int
    status: Status
    is_healthy: bool
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    health_implications: list[str] = field(default_factory=list)


@dataclass
class _Band:
    score: int
    pro: Optional[str] = None
    con: Optional[str] = None
    recommendation: Optional[str] = None
    health: Optional[str] = None


def _ph_band(ph: float) -> _Band:
    if 6.5 <= ph <= 8.5:
        return _Band(25, pro="pH level is in the optimal range")
    if ph < 6.5:
        return _Band(
            10,
            con="Water is too acidic",
            recommendation="Consider adding pH increaser",
            health="Acidic water can cause digestive issues and may contain harmful metals",
        )
    return _Band(
        10,
        con="Water is too alkaline",
        recommendation="Consider adding pH reducer",
        health="Alkaline water can taste bitter and may cause skin irritation",
    )


def _tds_band(tds: float) -> _Band:
    if tds < 300:
        return _Band(25, pro="TDS levels are within safe range")
    if tds < 600:
        return _Band(
            15,
            con="TDS levels are slightly elevated",
            recommendation="Consider partial water change",
            health="Slightly elevated TDS may affect taste but is generally safe",
        )
    return _Band(
        5,
        con="TDS levels are too high",
        recommendation="Immediate water change recommended",
        health="High TDS can indicate contamination and may cause gastrointestinal issues",
    )


def _turbidity_band(turbidity: float) -> _Band:
    if turbidity < 5:
        return _Band(25, pro="Water clarity is excellent")
    if turbidity < 10:
        return _Band(
            15,
            con="Water clarity is reduced",
            recommendation="Check filtration system",
            health="Reduced clarity may indicate presence of pathogens",
        )
    return _Band(
        5,
        con="Water is too cloudy",
        recommendation="Clean or replace filter, consider water change",
        health="Cloudy water may contain harmful microorganisms and should not be consumed",
    )


def _temperature_band(temp: float) -> _Band:
    if 20 <= temp <= 25:
        return _Band(25, pro="Temperature is in optimal range")
    # the two mild bands carry no health note
    if 15 <= temp < 20:
        return _Band(15, con="Water temperature is slightly low", recommendation="Consider heating the water")
    if 25 < temp <= 30:
        return _Band(15, con="Water temperature is slightly high", recommendation="Consider cooling the water")
    return _Band(
        5,
        con="Water temperature is outside of safe range",
        recommendation="Urgent action needed to adjust temperature",
        health="Extreme temperatures can support harmful bacterial growth",
    )


def status_from_score(score: int) -> Status:
    if score >= GOOD_SCORE:
        return "good"
    if score >= MODERATE_SCORE:
        return "moderate"
    return "poor"


def assess(reading: SensorReading) -> QualityAssessment:
    """
    Deterministic weighted-threshold classifier.
    - each parameter contributes a 0-25 sub-score from fixed bands
    - order of pros/cons/recommendations follows pH, TDS, turbidity, temperature
    - is_healthy (>= 70) and status (80/50) are derived independently
    """
    bands = [
        _ph_band(reading.ph),
        _tds_band(reading.tds),
        _turbidity_band(reading.turbidity),
        _temperature_band(reading.temperature),
    ]

    pros: list[str] = []
    cons: list[str] = []
    recommendations: list[str] = []
    health: list[str] = []
    score = 0

    for band in bands:
        score += band.score
        if band.pro:
            pros.append(band.pro)
        else:
            cons.append(band.con)
            recommendations.append(band.recommendation)
        if band.health:
            health.append(band.health)

    is_healthy = score >= HEALTHY_SCORE
    if not is_healthy and not health:
        health.append(GENERIC_HEALTH_RISK)

    return QualityAssessment(
        quality_score=score,
        status=status_from_score(score),
        is_healthy=is_healthy,
        pros=pros,
        cons=cons,
        recommendations=recommendations,
        health_implications=health,
    )


# -----------------------------
# Dashboard indicators
# -----------------------------
_LEVEL_POINTS = {"optimal": 3, "warning": 1, "critical": 0}


def _level(optimal: bool, marginal: bool) -> Level:
    if optimal:
        return "optimal"
    if marginal:
        return "warning"
    return "critical"


def parameter_levels(reading: SensorReading) -> dict[str, Level]:
    ph, tds, turb, t = reading.ph, reading.tds, reading.turbidity, reading.temperature
    return {
        "ph": _level(6.5 <= ph <= 8.5, 6.0 <= ph < 6.5 or 8.5 < ph <= 9.0),
        "tds": _level(tds < 300, 300 <= tds < 600),
        "turbidity": _level(turb < 5, 5 <= turb < 10),
        "temperature": _level(20 <= t <= 25, 15 <= t < 20 or 25 < t <= 30),
    }


def indicator_status(reading: SensorReading) -> Status:
    """Coarse status for the tank visualization (3/1/0 points per parameter)."""
    points = sum(_LEVEL_POINTS[lvl] for lvl in parameter_levels(reading).values())
    if points >= 10:
        return "good"
    if points >= 6:
        return "moderate"
    return "poor"


def score_label(score: float) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Poor"
