"""
Structured resume analysis payload

Both analyzers produce a ResumeAnalysis. Validators coerce loosely shaped
input (LLM output) into the schema: collections default to empty lists,
scores are parsed and clamped, the experience level snaps to a known member.
"""
import re
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


EXPERIENCE_LEVELS = ("entry", "junior", "mid", "senior", "lead", "executive")
DEFAULT_EXPERIENCE_LEVEL = "mid"

# Variants language models tend to return instead of the enumeration
_LEVEL_SYNONYMS = {
    "intern": "entry",
    "internship": "entry",
    "graduate": "entry",
    "student": "entry",
    "beginner": "entry",
    "associate": "junior",
    "intermediate": "mid",
    "middle": "mid",
    "experienced": "mid",
    "staff": "lead",
    "principal": "lead",
    "manager": "lead",
    "director": "executive",
    "vp": "executive",
    "cto": "executive",
    "ceo": "executive",
    "c-level": "executive",
}

PROVENANCE_AI = "ai"
PROVENANCE_HEURISTIC = "heuristic"

DEFAULT_ANALYSIS_SCORE = 0.5
DEFAULT_CATEGORY_SCORE = 50.0


def coerce_str_list(value: Any) -> List[str]:
    """Keep the non-empty string items of a list, anything else becomes []"""
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def coerce_optional_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    if not text or text.lower() in ("null", "none", "n/a", "not specified"):
        return None
    return text


def coerce_score(value: Any, default: float, upper: float) -> float:
    """Parse a score as float, fall back to default, clamp into [0, upper]"""
    if isinstance(value, bool):
        return default
    try:
        score = float(str(value).strip().rstrip("%")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if score != score:  # NaN
        return default
    return max(0.0, min(score, upper))


def normalize_experience_level(value: Any) -> str:
    """Snap free-form level text onto the enumeration"""
    if not isinstance(value, str):
        return DEFAULT_EXPERIENCE_LEVEL
    cleaned = value.strip().lower()
    if cleaned in EXPERIENCE_LEVELS:
        return cleaned

    for token in re.split(r"[\s_/|,-]+", cleaned):
        if token in EXPERIENCE_LEVELS:
            return token
        if token in _LEVEL_SYNONYMS:
            return _LEVEL_SYNONYMS[token]
    if cleaned in _LEVEL_SYNONYMS:
        return _LEVEL_SYNONYMS[cleaned]
    return DEFAULT_EXPERIENCE_LEVEL


class _LenientModel(BaseModel):
    """Object fields that arrive as something other than a mapping become empty"""

    @classmethod
    def coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        return cls.model_validate(value if isinstance(value, dict) else {})


class ContactInfo(_LenientModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _strings(cls, v):
        return coerce_optional_str(v)


class SkillSet(_LenientModel):
    technical: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)

    def all_skills(self) -> List[str]:
        """Technical skills and tools, de-duplicated in order"""
        seen = []
        for skill in self.technical + self.tools:
            if skill not in seen:
                seen.append(skill)
        return seen


class ExperienceEntry(_LenientModel):
    title: Optional[str] = None
    company: Optional[str] = None
    dates: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)

    @field_validator("title", "company", "dates", "location", "description", mode="before")
    @classmethod
    def _strings(cls, v):
        return coerce_optional_str(v)

    @field_validator("achievements", mode="before")
    @classmethod
    def _achievements(cls, v):
        return coerce_str_list(v)


class EducationEntry(_LenientModel):
    degree: Optional[str] = None
    institution: Optional[str] = None
    graduation_year: Optional[str] = None
    gpa: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _strings(cls, v):
        return coerce_optional_str(v)


class ATSOptimization(_LenientModel):
    score: float = DEFAULT_CATEGORY_SCORE  # 0-100
    missing_keywords: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _score(cls, v):
        return coerce_score(v, DEFAULT_CATEGORY_SCORE, 100.0)

    @field_validator("missing_keywords", "suggestions", mode="before")
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)


class OverallScore(_LenientModel):
    score: float = DEFAULT_CATEGORY_SCORE  # 0-100
    breakdown: Dict[str, float] = Field(default_factory=dict)
    feedback: Optional[str] = None

    @field_validator("score", mode="before")
    @classmethod
    def _score(cls, v):
        return coerce_score(v, DEFAULT_CATEGORY_SCORE, 100.0)

    @field_validator("breakdown", mode="before")
    @classmethod
    def _breakdown(cls, v):
        if not isinstance(v, dict):
            return {}
        return {
            str(category): coerce_score(score, DEFAULT_CATEGORY_SCORE, 100.0)
            for category, score in v.items()
        }

    @field_validator("feedback", mode="before")
    @classmethod
    def _feedback(cls, v):
        return coerce_optional_str(v)


class CareerPath(_LenientModel):
    current_level: Optional[str] = None
    next_steps: List[str] = Field(default_factory=list)
    skill_gaps: List[str] = Field(default_factory=list)

    @field_validator("current_level", mode="before")
    @classmethod
    def _current_level(cls, v):
        return coerce_optional_str(v)

    @field_validator("next_steps", "skill_gaps", mode="before")
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)


class ResumeAnalysis(BaseModel):
    """Complete analysis payload; every collection is always present"""

    summary: str = "Professional summary not available"
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    skills: SkillSet = Field(default_factory=SkillSet)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    industry_tags: List[str] = Field(default_factory=list)
    experience_level: str = DEFAULT_EXPERIENCE_LEVEL
    analysis_score: float = DEFAULT_ANALYSIS_SCORE  # 0-1
    ats_optimization: ATSOptimization = Field(default_factory=ATSOptimization)
    overall_score: OverallScore = Field(default_factory=OverallScore)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    career_path: CareerPath = Field(default_factory=CareerPath)
    analyzed_by: Literal["ai", "heuristic"] = PROVENANCE_AI
    analysis_notice: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, v):
        return coerce_optional_str(v) or "Professional summary not available"

    @field_validator("contact_info", mode="before")
    @classmethod
    def _contact_info(cls, v):
        return ContactInfo.coerce(v)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, v):
        return SkillSet.coerce(v)

    @field_validator("ats_optimization", mode="before")
    @classmethod
    def _ats(cls, v):
        return ATSOptimization.coerce(v)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _overall(cls, v):
        return OverallScore.coerce(v)

    @field_validator("career_path", mode="before")
    @classmethod
    def _career_path(cls, v):
        return CareerPath.coerce(v)

    @field_validator("experience", mode="before")
    @classmethod
    def _experience(cls, v):
        if not isinstance(v, list):
            return []
        return [ExperienceEntry.coerce(item) for item in v if isinstance(item, (dict, ExperienceEntry))]

    @field_validator("education", mode="before")
    @classmethod
    def _education(cls, v):
        if not isinstance(v, list):
            return []
        return [EducationEntry.coerce(item) for item in v if isinstance(item, (dict, EducationEntry))]

    @field_validator("keywords", "industry_tags", "strengths", "improvements", "recommendations", mode="before")
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _level(cls, v):
        return normalize_experience_level(v)

    @field_validator("analysis_score", mode="before")
    @classmethod
    def _analysis_score(cls, v):
        return coerce_score(v, DEFAULT_ANALYSIS_SCORE, 1.0)
