import json
import logging

import pytest

from aquaguardian.assessors import (
    LocalAssessor,
    RemoteAssessor,
    build_assessment_prompt,
    build_assessor,
    parse_assessment,
)
from aquaguardian.llm_client import LLMError, extract_json
from aquaguardian.scoring import assess

REMOTE_BODY = {
    "qualityScore": 88,
    "status": "good",
    "pros": ["pH balanced"],
    "cons": ["Slight cloudiness"],
    "recommendations": ["Rinse the filter"],
    "isHealthy": True,
    "healthImplications": [],
}


def test_local_assessor_matches_engine(optimal_reading):
    assert LocalAssessor().assess(optimal_reading) == assess(optimal_reading)


def test_prompt_mentions_every_parameter(poor_reading):
    prompt = build_assessment_prompt(poor_reading)
    assert "pH: 5.0" in prompt
    assert "700 ppm" in prompt
    assert "15 NTU" in prompt
    assert "35°C" in prompt
    assert '"healthImplications"' in prompt


# ==================== JSON extraction ====================

def test_extract_plain_json():
    assert extract_json(json.dumps(REMOTE_BODY)) == REMOTE_BODY


def test_extract_fenced_json():
    text = "Here you go:\n```json\n" + json.dumps(REMOTE_BODY) + "\n```\nStay hydrated!"
    assert extract_json(text) == REMOTE_BODY


def test_extract_embedded_json():
    text = "Assessment follows " + json.dumps(REMOTE_BODY) + " end."
    assert extract_json(text)["qualityScore"] == 88


@pytest.mark.parametrize("text", ["no json here", "{not: valid", ""])
def test_extract_json_rejects_garbage(text):
    with pytest.raises(ValueError):
        extract_json(text)


# ==================== Coercion ====================

def test_parse_assessment():
    result = parse_assessment(REMOTE_BODY)
    assert result.quality_score == 88
    assert result.status == "good"
    assert result.is_healthy is True
    assert result.cons == ["Slight cloudiness"]
    assert result.health_implications == []


def test_parse_assessment_defaults_missing_lists():
    body = {"qualityScore": 60.4, "status": "moderate", "isHealthy": False}
    result = parse_assessment(body)
    assert result.quality_score == 60
    assert result.pros == []
    assert result.health_implications == []


@pytest.mark.parametrize("override", [
    {"qualityScore": 140},
    {"qualityScore": -1},
    {"qualityScore": "90"},
    {"qualityScore": True},
    {"status": "excellent"},
    {"isHealthy": "yes"},
    {"pros": "pH balanced"},
    {"cons": [1, 2]},
])
def test_parse_assessment_rejects_off_contract(override):
    with pytest.raises(ValueError):
        parse_assessment({**REMOTE_BODY, **override})


def test_parse_assessment_rejects_non_object():
    with pytest.raises(ValueError):
        parse_assessment([REMOTE_BODY])


# ==================== Remote with fallback ====================

def test_remote_assessor_uses_model_answer(fake_llm, optimal_reading):
    client = fake_llm(text="```json\n" + json.dumps(REMOTE_BODY) + "\n```")
    result, source = RemoteAssessor(client).assess_with_source(optimal_reading)

    assert source == "remote"
    assert result.quality_score == 88
    assert result.pros == ["pH balanced"]
    assert len(client.calls) == 1


@pytest.mark.parametrize("client_kwargs", [
    {"error": LLMError("HTTP 503: unavailable")},
    {"error": LLMError("request failed: timed out")},
    {"text": "Sorry, I can't help with that."},
    {"text": json.dumps({**REMOTE_BODY, "status": "unknown"})},
])
def test_remote_assessor_falls_back(fake_llm, poor_reading, client_kwargs, caplog):
    client = fake_llm(**client_kwargs)
    with caplog.at_level(logging.WARNING):
        result, source = RemoteAssessor(client).assess_with_source(poor_reading)

    assert source == "local"
    assert result == assess(poor_reading)
    assert len(client.calls) == 1
    assert "Remote assessment failed" in caplog.text


def test_remote_assess_returns_plain_assessment(fake_llm, optimal_reading):
    assessor = RemoteAssessor(fake_llm(error=LLMError("down")))
    assert assessor.assess(optimal_reading) == assess(optimal_reading)


def test_local_assessor_reports_its_source(optimal_reading):
    result, source = LocalAssessor().assess_with_source(optimal_reading)
    assert source == "local"
    assert result.quality_score == 100


def test_chained_fallback_reports_final_source(fake_llm, optimal_reading):
    body = json.dumps({**REMOTE_BODY, "qualityScore": 64, "status": "moderate"})
    secondary = RemoteAssessor(fake_llm(text=body))
    primary = RemoteAssessor(fake_llm(error=LLMError("HTTP 500")), fallback=secondary)

    result, source = primary.assess_with_source(optimal_reading)
    assert source == "remote"
    assert result.quality_score == 64

    broken = RemoteAssessor(fake_llm(error=LLMError("down")))
    result, source = RemoteAssessor(fake_llm(text="no json"), fallback=broken).assess_with_source(optimal_reading)
    assert source == "local"
    assert result == assess(optimal_reading)


# ==================== Selection by configuration ====================

def test_build_assessor_defaults_to_local(settings):
    assert isinstance(build_assessor(settings), LocalAssessor)


def test_build_assessor_remote_needs_key(settings):
    from dataclasses import replace

    assert isinstance(build_assessor(replace(settings, assessor_mode="remote")), LocalAssessor)
    remote = build_assessor(replace(settings, assessor_mode="remote", llm_api_key="k"))
    assert isinstance(remote, RemoteAssessor)
    assert isinstance(remote.fallback, LocalAssessor)
