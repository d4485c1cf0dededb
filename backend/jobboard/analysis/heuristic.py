"""
Rule-based resume analysis

Deterministic keyword and pattern matching over extracted text. Always
returns a complete ResumeAnalysis; used when the AI analyzer is not
configured or fails.
"""
import re
from typing import Dict, List, Optional, Any
import structlog

from jobboard.analysis.schemas import (
    ATSOptimization,
    CareerPath,
    ContactInfo,
    EducationEntry,
    ExperienceEntry,
    OverallScore,
    PROVENANCE_HEURISTIC,
    ResumeAnalysis,
    SkillSet,
)

logger = structlog.get_logger()

# Heuristic scores stay below what the AI path can report
MAX_OVERALL_SCORE = 85
MAX_ANALYSIS_SCORE = 0.7

PROGRAMMING_LANGUAGES = [
    "javascript", "typescript", "python", "java", "php", "c++", "c#", "swift",
    "kotlin", "go", "rust", "ruby", "scala", "sql", "html", "css",
]
FRAMEWORKS = [
    "react", "vue", "angular", "node", "django", "flask", "fastapi", "spring",
    "express", "next.js", ".net",
]
TOOLS = [
    "git", "docker", "aws", "azure", "gcp", "mongodb", "postgresql", "mysql",
    "redis", "jenkins", "kubernetes", "terraform", "jira", "figma",
    "photoshop", "illustrator", "excel", "tableau",
]
SOFT_SKILLS = [
    "leadership", "communication", "teamwork", "problem solving", "analytical",
    "creative", "management", "planning", "mentoring", "collaboration",
]
SPOKEN_LANGUAGES = [
    "english", "spanish", "french", "german", "italian", "portuguese",
    "mandarin", "chinese", "japanese", "hindi", "arabic", "russian",
]

INDUSTRY_KEYWORDS = {
    "technology": ["software", "developer", "engineer", "programmer", "tech"],
    "design": ["designer", "ui", "ux", "graphic", "creative"],
    "marketing": ["marketing", "seo", "social media", "advertising"],
    "finance": ["finance", "accounting", "banking", "investment"],
    "healthcare": ["healthcare", "medical", "nurse", "doctor"],
    "education": ["teaching", "education", "training", "academic"],
}

INDUSTRY_MISSING_KEYWORDS = {
    "technology": ["agile", "scrum", "ci/cd", "api", "database"],
    "design": ["user experience", "wireframing", "prototyping", "brand"],
    "marketing": ["analytics", "conversion", "campaign", "roi"],
    "finance": ["financial analysis", "budgeting", "forecasting", "risk"],
}

INDUSTRY_SKILL_GAPS = {
    "technology": ["cloud computing", "microservices", "devops", "ai/ml"],
    "design": ["user research", "accessibility", "design systems", "animation"],
    "marketing": ["data analytics", "automation", "social media", "content strategy"],
    "finance": ["financial modeling", "risk assessment", "compliance", "fintech"],
}

LEVEL_SUMMARIES = {
    "entry": "They are building foundational skills and eager to contribute to dynamic teams.",
    "junior": "They are developing specialized expertise and taking on increasing responsibilities.",
    "mid": "They bring proven problem-solving abilities and project delivery experience.",
    "senior": "They offer leadership capabilities and deep technical expertise.",
    "lead": "They provide strategic thinking and mentorship to drive team success.",
}

LEVEL_ASSESSMENTS = {
    "entry": "Beginning career with foundational skills",
    "junior": "Early career professional building experience",
    "mid": "Experienced professional with proven track record",
    "senior": "Senior professional with leadership experience",
    "lead": "Leadership role with strategic responsibilities",
}

LEVEL_NEXT_STEPS = {
    "entry": ["Gain specialized skills", "Seek mentorship opportunities", "Build portfolio projects"],
    "junior": ["Take on larger projects", "Develop leadership skills", "Pursue certifications"],
    "mid": ["Lead team initiatives", "Mentor junior staff", "Consider management track"],
    "senior": ["Strategic planning roles", "Cross-functional leadership", "Industry expertise"],
    "lead": ["Executive positions", "Board opportunities", "Thought leadership"],
}

ACTION_VERBS = ["managed", "led", "developed", "created", "implemented", "improved", "achieved"]

SECTION_HEADINGS = {
    "experience": ["experience", "work experience", "professional experience", "employment",
                   "employment history", "work history", "career history"],
    "education": ["education", "academic background", "academics", "qualifications"],
    "certifications": ["certifications", "certificates", "licenses", "licenses & certifications"],
    "languages": ["languages", "spoken languages"],
    "skills": ["skills", "technical skills", "core competencies", "technologies"],
    "summary": ["summary", "profile", "professional summary", "objective", "about me"],
    "projects": ["projects", "personal projects", "portfolio"],
}

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?:\+|\()?\d[\d \t().-]{7,}\d")
LINKEDIN_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+/?", re.IGNORECASE)
GITHUB_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[\w-]+/?", re.IGNORECASE)
URL_PATTERN = re.compile(r"https?://[^\s,;)]+", re.IGNORECASE)
NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z'.-]*(?:\s+[A-Z][A-Za-z'.-]*){1,3}$")
_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
_DATE = rf"(?:{_MONTH}[ \t]+)?\d{{4}}|\d{{1,2}}/\d{{4}}"
DATE_RANGE_PATTERN = re.compile(
    rf"\b({_DATE})[ \t]*(?:-|–|—|to)[ \t]*({_DATE}|present|current|now)\b",
    re.IGNORECASE,
)
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")
GPA_PATTERN = re.compile(r"gpa[:\s]*([0-4]\.\d{1,2})", re.IGNORECASE)
DEGREE_PATTERN = re.compile(
    r"\b(?:b\.?sc?|m\.?sc?|b\.?a|m\.?a|mba|ph\.?d|bachelor|master|associate|diploma|degree)\b",
    re.IGNORECASE,
)
QUANTIFIED_PATTERN = re.compile(r"\d+%|\d+\+|\$\d+|\d+ years?|\d+ months?", re.IGNORECASE)
BULLET_PATTERN = re.compile(r"^\s*(?:[-•*▪●◦]|\d+\.)\s+")


def _keyword_pattern(keyword: str) -> re.Pattern:
    """Match a keyword as a whole token so 'go' does not match 'good'"""
    return re.compile(r"(?<![A-Za-z0-9])" + re.escape(keyword) + r"(?![A-Za-z0-9+#])", re.IGNORECASE)


class HeuristicAnalyzer:
    """Pattern analysis of resume text; never fails"""

    def __init__(self):
        self._patterns: Dict[str, re.Pattern] = {}

    def analyze(self, text: str) -> ResumeAnalysis:
        """Build a complete analysis from plain text"""
        text = text or ""
        sections = self._split_sections(text)
        skills = self._extract_skills(text, sections)
        industries = self._detect_industries(text)
        experience_level = self._detect_experience_level(text)
        contact_info = self._extract_contact_info(text)
        matched = skills.all_skills()

        analysis = ResumeAnalysis(
            summary=self._generate_summary(text, contact_info.name, skills, industries, experience_level),
            contact_info=contact_info,
            skills=skills,
            experience=self._extract_experience(sections.get("experience", [])),
            education=self._extract_education(sections.get("education", [])),
            strengths=self._generate_strengths(text, skills),
            improvements=self._generate_improvements(text, skills),
            ats_optimization=ATSOptimization(
                score=70 if len(matched) > 5 else 50,
                missing_keywords=self._suggest_missing_keywords(industries, matched),
                suggestions=[
                    "Add more quantified achievements with numbers",
                    "Include industry-specific keywords",
                    "Use action verbs to start bullet points",
                ],
            ),
            overall_score=OverallScore(
                score=self._calculate_overall_score(text, skills),
                breakdown={
                    "content": 75 if len(matched) > 3 else 60,
                    "format": 70,
                    "keywords": 80 if len(matched) > 5 else 50,
                    "experience": 75 if len(text) > 1000 else 60,
                },
                feedback=(
                    "Resume analyzed using text patterns. "
                    "AI analysis provides more detailed insights when available."
                ),
            ),
            recommendations=[
                "Add specific achievements with measurable results",
                "Include more industry-relevant keywords",
                "Tailor your resume summary to each role you apply for",
            ],
            keywords=matched,
            industry_tags=industries,
            experience_level=experience_level,
            career_path=CareerPath(
                current_level=LEVEL_ASSESSMENTS.get(experience_level, "Professional with industry experience"),
                next_steps=LEVEL_NEXT_STEPS.get(
                    experience_level,
                    ["Continue professional development", "Expand network", "Seek new challenges"],
                ),
                skill_gaps=self._identify_skill_gaps(industries, matched),
            ),
            analysis_score=self._calculate_analysis_score(text, matched),
            analyzed_by=PROVENANCE_HEURISTIC,
        )

        logger.info(
            "heuristic_analysis_complete",
            skills_count=len(matched),
            experience_level=experience_level,
            industries=industries,
        )
        return analysis

    # Matching helpers

    def _matches(self, keyword: str, text: str) -> bool:
        pattern = self._patterns.get(keyword)
        if pattern is None:
            pattern = self._patterns[keyword] = _keyword_pattern(keyword)
        return pattern.search(text) is not None

    def _find(self, vocabulary: List[str], text: str) -> List[str]:
        return [keyword for keyword in vocabulary if self._matches(keyword, text)]

    # Sections

    def _split_sections(self, text: str) -> Dict[str, List[str]]:
        """Group lines under the recognised heading that precedes them"""
        heading_lookup = {
            heading: section
            for section, headings in SECTION_HEADINGS.items()
            for heading in headings
        }
        sections: Dict[str, List[str]] = {}
        current = None
        for raw_line in text.splitlines():
            line = raw_line.strip()
            key = line.rstrip(":").strip().lower()
            if key in heading_lookup and len(line) < 40:
                current = heading_lookup[key]
                sections.setdefault(current, [])
                continue
            if current is not None:
                sections[current].append(line)
        return sections

    def _split_entries(self, lines: List[str]) -> List[List[str]]:
        """Blank lines separate entries"""
        entries, current = [], []
        for line in lines:
            if not line:
                if current:
                    entries.append(current)
                    current = []
                continue
            current.append(line)
        if current:
            entries.append(current)
        return entries

    # Skills

    def _extract_skills(self, text: str, sections: Dict[str, List[str]]) -> SkillSet:
        """Extract categorized skills from resume text"""
        languages = self._find(PROGRAMMING_LANGUAGES, text)
        language_lines = "\n".join(sections.get("languages", []))
        spoken = self._find(SPOKEN_LANGUAGES, language_lines or text)

        certifications = []
        for line in sections.get("certifications", []):
            cert = BULLET_PATTERN.sub("", line).strip()
            if cert and len(cert) > 2:
                certifications.append(cert)

        return SkillSet(
            technical=languages + self._find(FRAMEWORKS, text),
            tools=self._find(TOOLS, text),
            soft=self._find(SOFT_SKILLS, text),
            languages=languages + [language.title() for language in spoken],
            certifications=certifications[:10],
        )

    # Contact info

    def _extract_contact_info(self, text: str) -> ContactInfo:
        email_match = EMAIL_PATTERN.search(text)
        linkedin_match = LINKEDIN_PATTERN.search(text)
        github_match = GITHUB_PATTERN.search(text)

        website = None
        for url in URL_PATTERN.findall(text):
            if "linkedin.com" not in url.lower() and "github.com" not in url.lower():
                website = url.rstrip(".")
                break

        return ContactInfo(
            name=self._extract_name(text),
            email=email_match.group(0) if email_match else None,
            phone=self._extract_phone(text),
            linkedin=self._as_url(linkedin_match.group(0)) if linkedin_match else None,
            github=self._as_url(github_match.group(0)) if github_match else None,
            website=website,
        )

    def _extract_phone(self, text: str) -> Optional[str]:
        """First run of 10-15 digits written with common phone separators"""
        for match in PHONE_PATTERN.finditer(text):
            candidate = match.group(0).strip()
            digits = re.sub(r"\D", "", candidate)
            if 10 <= len(digits) <= 15:
                return candidate
        return None

    def _extract_name(self, text: str) -> Optional[str]:
        """First short name-like line near the top of the resume"""
        lines = [line.strip() for line in text.splitlines() if line.strip()][:5]
        for line in lines:
            if 3 < len(line) < 50 and NAME_PATTERN.match(line):
                if line.rstrip(":").lower() in {h for hs in SECTION_HEADINGS.values() for h in hs}:
                    continue
                return line
        return None

    def _as_url(self, link: str) -> str:
        link = link.rstrip("/")
        return link if link.lower().startswith("http") else f"https://{link}"

    # Experience and education

    def _extract_experience(self, lines: List[str]) -> List[ExperienceEntry]:
        """Parse experience entries from the experience section"""
        entries = []
        for block in self._split_entries(lines)[:10]:
            entry = self._parse_experience_entry(block)
            if entry:
                entries.append(entry)
        return entries

    def _parse_experience_entry(self, lines: List[str]) -> Optional[ExperienceEntry]:
        """Parse a single experience entry"""
        if not lines:
            return None

        header = DATE_RANGE_PATTERN.sub("", lines[0]).strip(" ,|-–—")
        title_match = re.match(r"^(.+?)(?:\s+at\s+|\s+-\s+|\s+@\s+|\s*,\s+|\s+\|\s+)(.+)$", header, re.IGNORECASE)
        if title_match:
            title, company = title_match.group(1).strip(), title_match.group(2).strip()
        else:
            title, company = header, None

        block = "\n".join(lines)
        date_match = DATE_RANGE_PATTERN.search(block)
        dates = f"{date_match.group(1)} - {date_match.group(2)}" if date_match else None

        achievements, description_lines = [], []
        for line in lines[1:]:
            if DATE_RANGE_PATTERN.fullmatch(line.strip()):
                continue
            if BULLET_PATTERN.match(line):
                achievements.append(BULLET_PATTERN.sub("", line).strip())
            else:
                description_lines.append(line)

        if not title and not company:
            return None
        return ExperienceEntry(
            title=title or None,
            company=company,
            dates=dates,
            description="\n".join(description_lines) or None,
            achievements=achievements,
        )

    def _extract_education(self, lines: List[str]) -> List[EducationEntry]:
        """Parse education entries from the education section"""
        education = []
        for block in self._split_entries(lines)[:5]:
            entry = self._parse_education_entry(block)
            if entry:
                education.append(entry)
        return education

    def _parse_education_entry(self, lines: List[str]) -> Optional[EducationEntry]:
        """Parse a single education entry"""
        if not lines:
            return None

        degree_line = next((line for line in lines if DEGREE_PATTERN.search(line)), lines[0])
        institution = next((line for line in lines if line is not degree_line), None)
        block = "\n".join(lines)
        years = YEAR_PATTERN.findall(block)
        gpa_match = GPA_PATTERN.search(block)

        return EducationEntry(
            degree=degree_line,
            institution=institution,
            graduation_year=years[-1] if years else None,
            gpa=gpa_match.group(1) if gpa_match else None,
        )

    # Classification

    def _detect_industries(self, text: str) -> List[str]:
        """Detect industry tags from keywords"""
        return [
            industry
            for industry, keywords in INDUSTRY_KEYWORDS.items()
            if any(self._matches(keyword, text) for keyword in keywords)
        ]

    def _detect_experience_level(self, text: str) -> str:
        """Detect experience level from literal level words"""
        if self._matches("senior", text) or self._matches("lead", text):
            return "senior"
        if self._matches("junior", text) or self._matches("entry", text):
            return "junior"
        if self._matches("intern", text) or self._matches("student", text):
            return "entry"
        if self._matches("manager", text) or self._matches("director", text):
            return "lead"
        return "mid"

    # Generated feedback

    def _generate_summary(
        self,
        text: str,
        name: Optional[str],
        skills: SkillSet,
        industries: List[str],
        experience_level: str,
    ) -> str:
        """Generate a summary based on text analysis"""
        matched = skills.all_skills()
        primary_industry = industries[0] if industries else "technology"

        summary = f"{name or 'This professional'} is a {experience_level}-level professional with expertise in {primary_industry}. "
        if len(matched) > 5:
            summary += f"They demonstrate proficiency across {len(matched)} technical areas, including {', '.join(matched[:3])}. "
        elif matched:
            summary += f"They have experience with {', '.join(matched)}. "

        if skills.tools:
            summary += f"Their toolkit includes {' and '.join(skills.tools[:2])}. "
        if len(text) > 1500:
            summary += "Their comprehensive background shows substantial hands-on experience. "

        summary += LEVEL_SUMMARIES.get(experience_level, "They bring valuable experience and skills to any organization.")
        return summary

    def _generate_improvements(self, text: str, skills: SkillSet) -> List[str]:
        suggestions = []
        if not QUANTIFIED_PATTERN.search(text):
            suggestions.append("Add quantified achievements with specific numbers (e.g., 'Increased sales by 25%')")
        if not any(self._matches(verb, text) for verb in ACTION_VERBS):
            suggestions.append("Start bullet points with strong action verbs (managed, led, developed, implemented)")
        if len(skills.all_skills()) < 5:
            suggestions.append("Include more relevant technical skills and tools")
        if not suggestions:
            suggestions.append("Tailor keywords to each job description you apply for")
        return suggestions[:3]

    def _generate_strengths(self, text: str, skills: SkillSet) -> List[str]:
        strengths = []
        if len(skills.technical) > 3:
            strengths.append("Strong technical skill set with diverse technologies")
        if len(text) > 1500:
            strengths.append("Comprehensive work experience and detailed background")
        if len(skills.tools) > 2:
            strengths.append("Proficient with multiple industry-standard tools")
        if not strengths:
            strengths.append("Resume successfully processed and analyzed")
            strengths.append("Clear presentation of professional information")
        return strengths[:3]

    def _suggest_missing_keywords(self, industries: List[str], matched: List[str]) -> List[str]:
        suggestions = []
        for industry in industries:
            for keyword in INDUSTRY_MISSING_KEYWORDS.get(industry, []):
                if keyword not in matched and keyword not in suggestions:
                    suggestions.append(keyword)
        return suggestions[:4] if suggestions else ["leadership", "teamwork", "communication"]

    def _identify_skill_gaps(self, industries: List[str], matched: List[str]) -> List[str]:
        gaps = []
        for industry in industries:
            for skill in INDUSTRY_SKILL_GAPS.get(industry, []):
                if not any(skill.lower() in existing.lower() for existing in matched) and skill not in gaps:
                    gaps.append(skill)
        return gaps[:3] if gaps else ["Communication skills", "Project management", "Data analysis"]

    # Scoring

    def _calculate_overall_score(self, text: str, skills: SkillSet) -> int:
        """Base 50 plus length, skill and contact bonuses, capped for text analysis"""
        score = 50
        if len(text) > 1000:
            score += 10
        if len(text) > 2000:
            score += 5
        score += min(len(skills.all_skills()) * 2, 20)
        if "@" in text:
            score += 5
        if "linkedin" in text.lower():
            score += 5
        return min(score, MAX_OVERALL_SCORE)

    def _calculate_analysis_score(self, text: str, matched: List[Any]) -> float:
        """Confidence grows with text length and matched skills, capped below AI results"""
        score = 0.3 + min(len(matched) * 0.03, 0.3)
        if len(text) > 1000:
            score += 0.1
        return round(min(score, MAX_ANALYSIS_SCORE), 2)
