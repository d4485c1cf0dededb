"""
LLM-backed resume analysis

Sends one chat completion request to an OpenAI-compatible endpoint and
coerces the JSON reply into a ResumeAnalysis. Every failure is raised as an
AIEngineError subclass; choosing a fallback is the caller's business.
"""
import json
import re
from typing import Any, Dict, Optional
import openai
import structlog

from jobboard.analysis.schemas import PROVENANCE_AI, ResumeAnalysis
from jobboard.core.exceptions import (
    AIRequestFailedError,
    AIResponseInvalidError,
    AIUnavailableError,
)

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are an expert resume analyst and career coach. Analyze resumes thoroughly "
    "and provide detailed, actionable insights. Return only valid JSON, "
    "no markdown, no explanations."
)

PROMPT_TEMPLATE = """Analyze this resume and provide detailed insights. Return ONLY a JSON object with this exact structure (use empty arrays when nothing is found, null for unknown text):

{{
  "summary": "2-3 sentence professional summary highlighting key strengths and experience",
  "contact_info": {{
    "name": "full name", "email": "email", "phone": "phone", "location": "city, country",
    "linkedin": "url", "github": "url", "website": "url"
  }},
  "skills": {{
    "technical": ["programming languages and frameworks"],
    "tools": ["software and platforms"],
    "soft": ["interpersonal skills"],
    "languages": ["programming or spoken languages"],
    "certifications": ["certifications and licenses"]
  }},
  "experience": [
    {{"title": "job title", "company": "company", "dates": "start - end", "location": "location",
      "description": "responsibilities", "achievements": ["quantified achievement"]}}
  ],
  "education": [
    {{"degree": "degree", "institution": "institution", "graduation_year": "YYYY", "gpa": "gpa or null"}}
  ],
  "keywords": ["important keywords for ATS systems"],
  "industry_tags": ["industries this person fits"],
  "experience_level": "one of: entry, junior, mid, senior, lead, executive",
  "analysis_score": 0.0,
  "ats_optimization": {{"score": 0, "missing_keywords": ["keyword"], "suggestions": ["suggestion"]}},
  "overall_score": {{"score": 0, "breakdown": {{"content": 0, "format": 0, "keywords": 0, "experience": 0}}, "feedback": "overall feedback"}},
  "strengths": ["key strength"],
  "improvements": ["specific improvement"],
  "recommendations": ["actionable recommendation"],
  "career_path": {{"current_level": "assessment of current level", "next_steps": ["next role"], "skill_gaps": ["skill to develop"]}}
}}

Scores: "analysis_score" is your confidence from 0 to 1; "ats_optimization.score", "overall_score.score" and every breakdown value are 0 to 100.

Resume text:
{text}"""

_FENCE_PATTERN = re.compile(r"^```[A-Za-z0-9_-]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(content: str) -> str:
    """Remove a wrapping ``` or ```json fence"""
    content = content.strip()
    match = _FENCE_PATTERN.match(content)
    if match:
        return match.group(1).strip()
    return content


class AIAnalyzer:
    """Structured resume analysis through a chat completion endpoint"""

    def __init__(
        self,
        client: Any,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        max_input_chars: int = 12000,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_input_chars = max_input_chars

    def analyze(self, text: str) -> ResumeAnalysis:
        """Request an analysis of the text and validate the reply"""
        if self.client is None:
            raise AIUnavailableError("AI analysis is not configured")

        prompt = PROMPT_TEMPLATE.format(text=text[:self.max_input_chars])
        logger.info("ai_analysis_requested", model=self.model, characters=len(text))

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            logger.warning("ai_request_failed", model=self.model, error_type=type(e).__name__, error=str(e))
            raise AIRequestFailedError(f"AI request failed: {e}") from e

        analysis = self.parse_response(self._message_content(response))
        logger.info(
            "ai_analysis_complete",
            model=self.model,
            skills_count=len(analysis.skills.all_skills()),
            experience_level=analysis.experience_level,
        )
        return analysis

    def parse_response(self, content: Optional[str]) -> ResumeAnalysis:
        """Parse a raw completion into a validated payload"""
        if not content or not content.strip():
            raise AIResponseInvalidError("AI response was empty")

        body = strip_code_fence(content)
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            logger.warning("ai_response_not_json", error=str(e), content=body[:200])
            raise AIResponseInvalidError(f"AI response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise AIResponseInvalidError("AI response is not a JSON object")

        return ResumeAnalysis.model_validate(self._without_provenance(data))

    def _message_content(self, response: Any) -> Optional[str]:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise AIResponseInvalidError("AI response contained no choices")
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None)

    def _without_provenance(self, data: Dict[str, Any]) -> Dict[str, Any]:
        # Provenance is assigned here, never taken from the model
        cleaned = {key: value for key, value in data.items() if key not in ("analyzed_by", "analysis_notice")}
        cleaned["analyzed_by"] = PROVENANCE_AI
        return cleaned
