"""
Test suite for the AI Analyzer

This module tests the completion request and response contract to ensure:
- The request carries the system instruction, the resume text and bounded settings
- Fenced and bare JSON replies are parsed and coerced into the schema
- Malformed replies raise AIResponseInvalidError instead of being replaced
- Transport failures and timeouts raise AIRequestFailedError
- A missing client raises AIUnavailableError

Run tests with: pytest backend/tests/test_ai_analyzer.py -v
"""

import json

import httpx
import openai
import pytest

from jobboard.analysis.ai_analyzer import AIAnalyzer, strip_code_fence
from jobboard.core.exceptions import (
    AIEngineError,
    AIRequestFailedError,
    AIResponseInvalidError,
    AIUnavailableError,
)

COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


@pytest.fixture
def analyzer():
    return AIAnalyzer(client=None, model="test-model")


class TestRequest:

    def test_request_contract(self, stub_ai_client, ai_payload, sample_resume_text):
        client = stub_ai_client(content=json.dumps(ai_payload))
        analyzer = AIAnalyzer(client, model="test-model", temperature=0.1, max_tokens=2000)

        analyzer.analyze(sample_resume_text)

        assert len(client.calls) == 1
        call = client.calls[0]
        assert call["model"] == "test-model"
        assert call["temperature"] == 0.1
        assert call["max_tokens"] == 2000
        system, user = call["messages"]
        assert system["role"] == "system"
        assert "expert resume analyst" in system["content"]
        assert "valid JSON" in system["content"]
        assert user["role"] == "user"
        assert sample_resume_text in user["content"]
        for field in ("contact_info", "skills", "experience_level", "ats_optimization", "career_path", "analysis_score"):
            assert field in user["content"]

    def test_long_text_is_truncated(self, stub_ai_client, ai_payload):
        client = stub_ai_client(content=json.dumps(ai_payload))
        analyzer = AIAnalyzer(client, model="test-model", max_input_chars=100)

        analyzer.analyze("a" * 100 + "TAIL")

        assert "TAIL" not in client.calls[0]["messages"][1]["content"]

    def test_success_is_tagged_ai(self, stub_ai_client, ai_payload):
        analyzer = AIAnalyzer(stub_ai_client(content=json.dumps(ai_payload)), model="test-model")

        analysis = analyzer.analyze("resume text")

        assert analysis.analyzed_by == "ai"
        assert analysis.analysis_notice is None
        assert analysis.contact_info.email == "jane.doe@example.com"
        assert analysis.skills.technical == ["Python", "FastAPI"]
        assert analysis.analysis_score == pytest.approx(0.92)


class TestFailures:

    def test_missing_client(self, analyzer):
        with pytest.raises(AIUnavailableError):
            analyzer.analyze("resume text")

    def test_timeout(self, stub_ai_client):
        error = openai.APITimeoutError(request=httpx.Request("POST", COMPLETIONS_URL))
        analyzer = AIAnalyzer(stub_ai_client(error=error), model="test-model")

        with pytest.raises(AIRequestFailedError):
            analyzer.analyze("resume text")

    def test_non_2xx(self, stub_ai_client):
        request = httpx.Request("POST", COMPLETIONS_URL)
        error = openai.APIStatusError(
            "Internal server error",
            response=httpx.Response(500, request=request),
            body=None,
        )
        analyzer = AIAnalyzer(stub_ai_client(error=error), model="test-model")

        with pytest.raises(AIRequestFailedError):
            analyzer.analyze("resume text")

    def test_no_choices(self, stub_ai_client):
        client = stub_ai_client(content="{}")
        client.chat.completions.create = lambda **kwargs: type("Response", (), {"choices": []})()
        analyzer = AIAnalyzer(client, model="test-model")

        with pytest.raises(AIResponseInvalidError):
            analyzer.analyze("resume text")

    def test_all_failures_share_a_root(self):
        for error_class in (AIUnavailableError, AIRequestFailedError, AIResponseInvalidError):
            assert issubclass(error_class, AIEngineError)


class TestResponseParsing:

    @pytest.mark.parametrize(
        "wrapped",
        [
            '```json\n{"summary": "Fenced"}\n```',
            '```\n{"summary": "Fenced"}\n```',
            '  ```JSON\n{"summary": "Fenced"}```  ',
            '{"summary": "Fenced"}',
        ],
    )
    def test_code_fences_are_stripped(self, analyzer, wrapped):
        assert analyzer.parse_response(wrapped).summary == "Fenced"

    def test_strip_code_fence_leaves_plain_text(self):
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'

    @pytest.mark.parametrize("content", ["", "   ", None, "not json at all", "```json\n{broken\n```", "[1, 2]", '"text"'])
    def test_invalid_replies(self, analyzer, content):
        with pytest.raises(AIResponseInvalidError):
            analyzer.parse_response(content)

    def test_missing_fields_get_defaults(self, analyzer):
        analysis = analyzer.parse_response('{"summary": "Only a summary"}')

        assert analysis.summary == "Only a summary"
        assert analysis.experience == []
        assert analysis.skills.technical == []
        assert analysis.career_path.next_steps == []
        assert analysis.ats_optimization.missing_keywords == []
        assert analysis.experience_level == "mid"
        assert analysis.analysis_score == 0.5

    def test_wrong_types_are_coerced(self, analyzer):
        payload = {
            "skills": "Python, Docker",
            "experience": {"title": "not a list"},
            "education": [{"degree": "BSc"}, "garbage", None],
            "keywords": ["python", None, "", 42],
            "contact_info": ["unexpected"],
            "strengths": "single string",
            "career_path": {"current_level": "N/A", "next_steps": "Lead"},
        }

        analysis = analyzer.parse_response(json.dumps(payload))

        assert analysis.skills.technical == []
        assert analysis.experience == []
        assert [e.degree for e in analysis.education] == ["BSc"]
        assert analysis.keywords == ["python", "42"]
        assert analysis.contact_info.email is None
        assert analysis.strengths == []
        assert analysis.career_path.current_level is None
        assert analysis.career_path.next_steps == []

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Senior", "senior"),
            ("  LEAD ", "lead"),
            ("Senior Engineer", "senior"),
            ("mid-level", "mid"),
            ("Intermediate", "mid"),
            ("Principal", "lead"),
            ("Director", "executive"),
            ("intern", "entry"),
            ("wizard", "mid"),
            (None, "mid"),
            (3, "mid"),
        ],
    )
    def test_experience_level_is_clamped(self, analyzer, raw, expected):
        analysis = analyzer.parse_response(json.dumps({"experience_level": raw}))

        assert analysis.experience_level == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [(0.8, 0.8), ("0.75", 0.75), ("high", 0.5), (7, 1.0), (-1, 0.0), (None, 0.5), (True, 0.5)],
    )
    def test_analysis_score_parsing(self, analyzer, raw, expected):
        analysis = analyzer.parse_response(json.dumps({"analysis_score": raw}))

        assert analysis.analysis_score == pytest.approx(expected)

    def test_category_scores_are_clamped(self, analyzer):
        payload = {
            "ats_optimization": {"score": "88%"},
            "overall_score": {"score": 250, "breakdown": {"content": "n/a", "format": 70}},
        }

        analysis = analyzer.parse_response(json.dumps(payload))

        assert analysis.ats_optimization.score == 88
        assert analysis.overall_score.score == 100
        assert analysis.overall_score.breakdown == {"content": 50.0, "format": 70.0}

    def test_model_cannot_claim_heuristic_provenance(self, analyzer):
        analysis = analyzer.parse_response('{"analyzed_by": "heuristic", "analysis_notice": "x"}')

        assert analysis.analyzed_by == "ai"
        assert analysis.analysis_notice is None
