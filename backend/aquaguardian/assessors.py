import logging
import math
import textwrap
from typing import Any, Optional, Protocol

from .config import Settings
from .llm_client import LLMClient, LLMError, extract_json
from .scoring import QualityAssessment, SensorReading, assess

logger = logging.getLogger(__name__)

_STATUSES = ("good", "moderate", "poor")
_LIST_FIELDS = {
    "pros": "pros",
    "cons": "cons",
    "recommendations": "recommendations",
    "healthImplications": "health_implications",
}


class QualityAssessor(Protocol):
    name: str

    def assess(self, reading: SensorReading) -> QualityAssessment:
        ...

    def assess_with_source(self, reading: SensorReading) -> tuple[QualityAssessment, str]:
        """The assessment plus the name of the assessor that actually produced it."""
        ...


class LocalAssessor:
    name = "local"

    def assess(self, reading: SensorReading) -> QualityAssessment:
        return assess(reading)

    def assess_with_source(self, reading: SensorReading) -> tuple[QualityAssessment, str]:
        return assess(reading), self.name


def build_assessment_prompt(reading: SensorReading) -> str:
    return textwrap.dedent(f"""
    Analyze the following water quality parameters and provide a detailed assessment:
    - pH: {reading.ph}
    - Total Dissolved Solids (TDS): {reading.tds} ppm
    - Turbidity: {reading.turbidity} NTU
    - Temperature: {reading.temperature}°C

    Please provide:
    1. An overall water quality score from 0-100
    2. Water quality status (good, moderate, or poor)
    3. A list of positive aspects of the water quality
    4. A list of concerning aspects of the water quality
    5. Specific recommendations for improvement
    6. Is this water healthy for human consumption? (true/false)
    7. What are the health implications of consuming this water?

    Format your response as a JSON object with the following structure:
    {{
      "qualityScore": number,
      "status": "good" | "moderate" | "poor",
      "pros": string[],
      "cons": string[],
      "recommendations": string[],
      "isHealthy": boolean,
      "healthImplications": string[]
    }}
    """).strip()


def _str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key} must be a list of strings")
    return list(value)


def parse_assessment(data: Any) -> QualityAssessment:
    """Coerce model JSON into a QualityAssessment, ValueError on anything off-contract."""
    if not isinstance(data, dict):
        raise ValueError("assessment must be a JSON object")

    score = data.get("qualityScore")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("qualityScore must be a number")
    if math.isnan(score) or not 0 <= score <= 100:
        raise ValueError(f"qualityScore out of range: {score}")

    status = data.get("status")
    if status not in _STATUSES:
        raise ValueError(f"invalid status: {status!r}")

    healthy = data.get("isHealthy")
    if not isinstance(healthy, bool):
        raise ValueError("isHealthy must be a boolean")

    lists = {attr: _str_list(data.get(key, []), key) for key, attr in _LIST_FIELDS.items()}

    return QualityAssessment(
        quality_score=int(round(score)),
        status=status,
        is_healthy=healthy,
        **lists,
    )


class RemoteAssessor:
    """
    Asks a remote model for the assessment.
    - one attempt per call, bounded by the client timeout
    - any failure resolves to the fallback assessor's result
    """

    name = "remote"

    def __init__(self, client: LLMClient, fallback: Optional[QualityAssessor] = None):
        self.client = client
        self.fallback = fallback or LocalAssessor()

    def assess(self, reading: SensorReading) -> QualityAssessment:
        result, _ = self.assess_with_source(reading)
        return result

    def assess_with_source(self, reading: SensorReading) -> tuple[QualityAssessment, str]:
        try:
            text = self.client.generate(build_assessment_prompt(reading))
            return parse_assessment(extract_json(text)), self.name
        except (LLMError, ValueError) as e:
            logger.warning("Remote assessment failed, using %s fallback: %s", self.fallback.name, e)
            return self.fallback.assess_with_source(reading)


def build_assessor(settings: Settings) -> QualityAssessor:
    if settings.remote_enabled:
        logger.info("Using remote assessor (%s)", settings.llm_model)
        return RemoteAssessor(LLMClient.from_settings(settings))
    if settings.assessor_mode == "remote":
        logger.warning("ASSESSOR_MODE=remote but no LLM_API_KEY set; using local assessor")
    return LocalAssessor()
