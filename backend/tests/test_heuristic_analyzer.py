"""
Test suite for the Heuristic Analyzer

This module tests rule-based analysis to ensure:
- Contact details, skills, sections and level are extracted from plain text
- Keywords match whole tokens only
- Scores stay below the ceiling reserved for AI results
- Every collection is present even for empty input
- Text produced by the extractor round-trips contact details exactly

Run tests with: pytest backend/tests/test_heuristic_analyzer.py -v
"""

import io

import pytest

from jobboard.analysis.extractor import MIME_DOCX, TextExtractor
from jobboard.analysis.heuristic import MAX_ANALYSIS_SCORE, MAX_OVERALL_SCORE, HeuristicAnalyzer
from jobboard.analysis.schemas import EXPERIENCE_LEVELS


@pytest.fixture
def analyzer():
    return HeuristicAnalyzer()


@pytest.fixture
def analysis(analyzer, sample_resume_text):
    return analyzer.analyze(sample_resume_text)


class TestContactInfo:

    def test_contact_fields(self, analysis):
        contact = analysis.contact_info
        assert contact.name == "Jane Doe"
        assert contact.email == "jane.doe@example.com"
        assert contact.phone == "+1 (555) 123-4567"
        assert contact.linkedin == "https://linkedin.com/in/janedoe"
        assert contact.github == "https://github.com/janedoe"

    def test_short_digit_runs_are_not_phones(self, analyzer):
        result = analyzer.analyze("Worked 2015 - 2018 on 3 projects")

        assert result.contact_info.phone is None

    def test_website_excludes_profile_links(self, analyzer):
        result = analyzer.analyze("https://linkedin.com/in/x https://janedoe.dev")

        assert result.contact_info.website == "https://janedoe.dev"

    def test_name_not_taken_from_section_heading(self, analyzer):
        result = analyzer.analyze("Work Experience\nsoftware engineer at acme")

        assert result.contact_info.name is None


class TestSkills:

    def test_categorized_skills(self, analysis):
        skills = analysis.skills
        assert {"python", "javascript", "react", "django", "fastapi"} <= set(skills.technical)
        assert {"git", "docker", "aws", "postgresql", "jenkins", "kubernetes"} <= set(skills.tools)
        assert {"leadership", "communication", "teamwork"} <= set(skills.soft)
        assert "English" in skills.languages
        assert "Spanish" in skills.languages

    def test_keywords_are_technical_skills_and_tools(self, analysis):
        assert analysis.keywords == analysis.skills.all_skills()

    def test_matching_uses_word_boundaries(self, analyzer):
        result = analyzer.analyze("A good team player who enjoys javascript")

        assert "go" not in result.skills.technical
        assert "java" not in result.skills.technical
        assert "javascript" in result.skills.technical

    def test_symbol_keywords(self, analyzer):
        result = analyzer.analyze("Built services in C++ and C# with Go")

        assert {"c++", "c#", "go"} <= set(result.skills.technical)

    def test_certifications_section(self, analyzer):
        text = "Certifications\n- AWS Certified Solutions Architect\n- CKA"

        result = analyzer.analyze(text)

        assert result.skills.certifications == ["AWS Certified Solutions Architect", "CKA"]


class TestSections:

    def test_experience_entries(self, analysis):
        assert len(analysis.experience) == 2

        first = analysis.experience[0]
        assert first.title == "Senior Software Engineer"
        assert first.company == "Acme Corp"
        assert first.dates == "Jan 2019 - Present"
        assert first.description == "Built data platform services"
        assert first.achievements == [
            "Led migration to Kubernetes, cutting costs by 30%",
            "Developed FastAPI services used by 2M users",
        ]

        second = analysis.experience[1]
        assert second.title == "Software Engineer"
        assert second.company == "Globex"
        assert second.dates == "2015 - 2018"

    def test_education_entry(self, analysis):
        assert len(analysis.education) == 1
        education = analysis.education[0]
        assert education.degree == "B.Sc. Computer Science"
        assert education.institution == "State University"
        assert education.graduation_year == "2015"
        assert education.gpa == "3.8"

    def test_no_sections_means_no_entries(self, analyzer):
        result = analyzer.analyze("Python developer with Docker experience")

        assert result.experience == []
        assert result.education == []


class TestClassification:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Senior Backend Engineer", "senior"),
            ("Team Lead for payments", "senior"),
            ("Junior developer", "junior"),
            ("Entry level analyst", "junior"),
            ("Summer intern at Acme", "entry"),
            ("Computer science student", "entry"),
            ("Engineering Manager", "lead"),
            ("Director of Engineering", "lead"),
            ("Software engineer", "mid"),
        ],
    )
    def test_experience_level(self, analyzer, text, expected):
        assert analyzer.analyze(text).experience_level == expected

    def test_level_is_always_known(self, analysis):
        assert analysis.experience_level in EXPERIENCE_LEVELS

    def test_industry_tags(self, analysis):
        assert "technology" in analysis.industry_tags

    def test_design_industry(self, analyzer):
        result = analyzer.analyze("UX designer crafting graphic identities")

        assert "design" in result.industry_tags


class TestScoring:

    def test_scores_for_sample(self, analysis):
        # 11 skills, contact bonuses, short text
        assert analysis.overall_score.score == 80
        assert analysis.ats_optimization.score == 70
        assert analysis.analysis_score == pytest.approx(0.6)

    def test_scores_are_capped(self, analyzer):
        vocabulary = "python java react django docker aws git kubernetes redis mysql terraform jira "
        text = "me@example.com linkedin.com/in/me\n" + vocabulary * 60

        result = analyzer.analyze(text)

        assert result.overall_score.score == MAX_OVERALL_SCORE
        assert result.analysis_score == MAX_ANALYSIS_SCORE

    def test_scores_are_deterministic(self, analyzer, sample_resume_text):
        first = analyzer.analyze(sample_resume_text)
        second = analyzer.analyze(sample_resume_text)

        assert first.model_dump() == second.model_dump()

    def test_few_skills_lower_ats_score(self, analyzer):
        assert analyzer.analyze("Python and Docker").ats_optimization.score == 50


class TestCompleteness:

    @pytest.mark.parametrize("text", ["", "   ", "x" * 60])
    def test_every_collection_present(self, analyzer, text):
        result = analyzer.analyze(text)

        assert result.analyzed_by == "heuristic"
        assert result.summary
        for field in ("experience", "education", "keywords", "industry_tags", "strengths", "improvements", "recommendations"):
            assert isinstance(getattr(result, field), list)
        for field in ("technical", "tools", "soft", "languages", "certifications"):
            assert isinstance(getattr(result.skills, field), list)
        assert isinstance(result.ats_optimization.missing_keywords, list)
        assert isinstance(result.career_path.next_steps, list)
        assert isinstance(result.career_path.skill_gaps, list)
        assert result.strengths
        assert result.improvements

    def test_career_path_follows_level(self, analysis):
        assert analysis.career_path.current_level == "Senior professional with leadership experience"
        assert "Strategic planning roles" in analysis.career_path.next_steps

    def test_summary_mentions_name_and_level(self, analysis):
        assert analysis.summary.startswith("Jane Doe is a senior-level professional")


class TestExtractorRoundTrip:

    def test_docx_contact_details_survive_extraction(self, analyzer, docx_factory):
        data = docx_factory([
            "Alex Morgan",
            "alex.morgan@example.org",
            "+44 20 7946 0958",
            "Experienced data analyst working with SQL and Tableau dashboards.",
        ])

        text = TextExtractor().extract(io.BytesIO(data), MIME_DOCX)
        result = analyzer.analyze(text)

        assert result.contact_info.email == "alex.morgan@example.org"
        assert result.contact_info.phone == "+44 20 7946 0958"
