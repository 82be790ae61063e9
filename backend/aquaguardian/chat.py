import logging
import textwrap
from dataclasses import dataclass
from typing import Optional

from .llm_client import LLMClient, LLMError
from .scoring import SensorReading, assess, parameter_levels

logger = logging.getLogger(__name__)

NO_READING_ANSWER = "I don't have any sensor data to analyze at the moment. Please take a reading first."


@dataclass
class ChatAnswer:
    answer: str
    source: str  # remote | local


def build_chat_context(reading: SensorReading) -> str:
    return textwrap.dedent(f"""
    You are AquaGuardian, a helpful assistant specialized in analyzing water quality data.

    Current water quality readings:
    - pH: {reading.ph:.2f}
    - TDS (Total Dissolved Solids): {reading.tds:.0f} ppm
    - Turbidity: {reading.turbidity:.1f} NTU
    - Temperature: {reading.temperature:.1f}°C

    Based on this data, please respond to the user's question. Be helpful, accurate, and concise.
    If the user asks about general water quality, explain the meaning of the readings.
    """).strip()


# -----------------------------
# Keyword fallback
# -----------------------------
def _ph_sentence(r: SensorReading) -> str:
    if parameter_levels(r)["ph"] == "optimal":
        return f"Your pH is {r.ph:.2f}, which is in the optimal 6.5-8.5 range."
    side = "acidic" if r.ph < 6.5 else "alkaline"
    return f"Your pH is {r.ph:.2f}, which is too {side}; the optimal range is 6.5-8.5."


def _tds_sentence(r: SensorReading) -> str:
    if r.tds < 300:
        return f"TDS is {r.tds:.0f} ppm, within the safe range (below 300 ppm)."
    if r.tds < 600:
        return f"TDS is {r.tds:.0f} ppm, slightly elevated (safe is below 300 ppm)."
    return f"TDS is {r.tds:.0f} ppm, which is too high (600 ppm or more)."


def _turbidity_sentence(r: SensorReading) -> str:
    if r.turbidity < 5:
        return f"Turbidity is {r.turbidity:.1f} NTU, so the water is clear."
    if r.turbidity < 10:
        return f"Turbidity is {r.turbidity:.1f} NTU, so clarity is reduced."
    return f"Turbidity is {r.turbidity:.1f} NTU, so the water is too cloudy."


def _temperature_sentence(r: SensorReading) -> str:
    level = parameter_levels(r)["temperature"]
    if level == "optimal":
        return f"Temperature is {r.temperature:.1f}°C, in the optimal 20-25°C range."
    if level == "warning":
        return f"Temperature is {r.temperature:.1f}°C, slightly outside the optimal 20-25°C range."
    return f"Temperature is {r.temperature:.1f}°C, outside the safe range."


def _safety_sentence(r: SensorReading) -> str:
    result = assess(r)
    if result.is_healthy:
        return f"With a quality score of {result.quality_score}/100 the water is considered safe for consumption."
    return (
        f"With a quality score of {result.quality_score}/100 the water is not recommended "
        f"for consumption without further treatment."
    )


def _improve_sentence(r: SensorReading) -> str:
    recs = assess(r).recommendations
    if not recs:
        return "All parameters are in their optimal ranges, no changes are needed."
    return "To improve your water: " + "; ".join(recs) + "."


KEYWORD_TOPICS = [
    ("ph", _ph_sentence),
    ("tds", _tds_sentence),
    ("turbid", _turbidity_sentence),
    ("temp", _temperature_sentence),
    ("safe", _safety_sentence),
    ("improve", _improve_sentence),
]


def keyword_answer(reading: SensorReading, question: str) -> str:
    q = question.lower()
    sentences = [fn(reading) for keyword, fn in KEYWORD_TOPICS if keyword in q]
    if sentences:
        return " ".join(sentences)

    r = reading
    return (
        "Here's what I know from your sensor readings: "
        f"Your pH is {r.ph:.2f} ({'normal' if 6.5 <= r.ph <= 8.5 else 'abnormal'}), "
        f"TDS is {r.tds:.0f} ppm ({'good' if r.tds < 300 else 'elevated'}), "
        f"Turbidity is {r.turbidity:.1f} NTU ({'clear' if r.turbidity < 5 else 'cloudy'}), "
        f"and Temperature is {r.temperature:.1f}°C."
    )


class ChatResponder:
    def __init__(self, client: Optional[LLMClient] = None):
        self.client = client

    def answer(self, reading: Optional[SensorReading], question: str) -> ChatAnswer:
        if reading is None:
            return ChatAnswer(NO_READING_ANSWER, "local")

        if self.client is not None:
            try:
                text = self.client.generate(
                    build_chat_context(reading),
                    f"User question: {question.strip()}",
                    temperature=0.2,
                    max_tokens=800,
                )
                if text and text.strip():
                    return ChatAnswer(text.strip(), "remote")
                logger.warning("Remote chat returned empty text, using keyword answer")
            except LLMError as e:
                logger.warning("Remote chat failed, using keyword answer: %s", e)

        return ChatAnswer(keyword_answer(reading, question), "local")
