import logging

from aquaguardian.chat import NO_READING_ANSWER, ChatResponder, build_chat_context, keyword_answer
from aquaguardian.llm_client import LLMError
from aquaguardian.scoring import SensorReading


def test_no_reading():
    ans = ChatResponder().answer(None, "Is my water safe?")
    assert ans.answer == NO_READING_ANSWER
    assert ans.source == "local"


def test_remote_answer_is_used(fake_llm, optimal_reading):
    client = fake_llm(text="  Your water looks great.  ")
    ans = ChatResponder(client).answer(optimal_reading, "How is my water?")

    assert ans.answer == "Your water looks great."
    assert ans.source == "remote"
    parts, kwargs = client.calls[0]
    assert parts[1] == "User question: How is my water?"
    assert "pH: 7.00" in parts[0]
    assert kwargs == {"temperature": 0.2, "max_tokens": 800}


def test_remote_failure_falls_back_to_keywords(fake_llm, poor_reading, caplog):
    client = fake_llm(error=LLMError("HTTP 429"))
    with caplog.at_level(logging.WARNING):
        ans = ChatResponder(client).answer(poor_reading, "What about TDS?")

    assert ans.source == "local"
    assert "700 ppm" in ans.answer
    assert "too high" in ans.answer
    assert "Remote chat failed" in caplog.text


def test_blank_remote_answer_falls_back(fake_llm, optimal_reading):
    ans = ChatResponder(fake_llm(text="   ")).answer(optimal_reading, "temp?")
    assert ans.source == "local"
    assert "22.0°C" in ans.answer


def test_keywords_are_case_insensitive(optimal_reading):
    assert "optimal 6.5-8.5 range" in keyword_answer(optimal_reading, "What is my PH?")


def test_multiple_keywords_in_order(poor_reading):
    answer = keyword_answer(poor_reading, "Temperature and turbidity?")
    # topics are answered in ph, tds, turbid, temp, safe, improve order
    assert answer.index("Turbidity is") < answer.index("Temperature is")
    assert "too cloudy" in answer
    assert "outside the safe range" in answer


def test_safe_keyword_uses_health_verdict(optimal_reading, poor_reading):
    assert "considered safe" in keyword_answer(optimal_reading, "is it safe to drink")
    assert "not recommended" in keyword_answer(poor_reading, "Is it SAFE?")


def test_improve_keyword_lists_recommendations(optimal_reading, poor_reading):
    assert "no changes are needed" in keyword_answer(optimal_reading, "how can I improve it")
    answer = keyword_answer(poor_reading, "How do I improve this?")
    assert "Consider adding pH increaser" in answer
    assert "Urgent action needed to adjust temperature" in answer


def test_acidic_and_alkaline_ph_sentences():
    acidic = SensorReading(ph=5.9, tds=100, turbidity=1, temperature=22)
    alkaline = SensorReading(ph=9.3, tds=100, turbidity=1, temperature=22)
    assert "too acidic" in keyword_answer(acidic, "ph")
    assert "too alkaline" in keyword_answer(alkaline, "ph")


def test_unmatched_question_gets_summary(poor_reading):
    answer = keyword_answer(poor_reading, "Hello there")
    assert answer.startswith("Here's what I know from your sensor readings")
    assert "(abnormal)" in answer
    assert "(elevated)" in answer
    assert "(cloudy)" in answer


def test_chat_context_formats_readings(poor_reading):
    ctx = build_chat_context(poor_reading)
    assert "pH: 5.00" in ctx
    assert "700 ppm" in ctx
    assert "15.0 NTU" in ctx
    assert "35.0°C" in ctx
