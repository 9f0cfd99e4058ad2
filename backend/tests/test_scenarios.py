"""End-to-end scoring scenarios from raw job / resume text (heuristic extractor, offline encoder)."""

import pytest

from conftest import FakeEncoder, similarity_scores
from models.responses import MatchResult
from services.feature_extractor import HeuristicFeatureExtractor
from services.matching import MatchingOrchestrator
from services.similarity import SimilarityEngine

FULLSTACK_JD = """
Senior Full Stack Engineer

Requirements:
- 5+ years of experience with React, Node.js, TypeScript and AWS
- Bachelor's degree in Computer Science
- Must be authorized to work in the US

Responsibilities:
- Build customer-facing web applications
- Own backend APIs end to end
"""

FULLSTACK_RESUME = """
Jane Smith
Senior Full Stack Engineer. Authorized to work in the US.

Experience
Senior Engineer, Shopify
Jan 2017 - Dec 2023
- 7 years of experience building React and TypeScript frontends and backend services with Node.js on AWS

Education
Bachelor of Science in Computer Science

Skills
React, Node.js, TypeScript, JavaScript, AWS
"""

FRONTEND_JD = """
Frontend Developer

Requirements:
- 3+ years of experience with React, TypeScript and CSS
- Strong eye for user interface details

Responsibilities:
- Implement responsive pages from design mockups
"""

BACKEND_RESUME = """
Backend developer

Experience
Python Developer, Acme Corp
- 4 years of experience building APIs with Django and PostgreSQL

Skills
Python, Django, PostgreSQL
"""

MANAGER_JD = """
Engineering Manager

Requirements:
- 10+ years of experience in software engineering, including people management
- Experience leading teams that ship Python services

Responsibilities:
- Manage a team of 8 engineers
"""

CONTRIBUTOR_RESUME = """
Software Engineer

Experience
Software Engineer, Acme
- 3 years of experience writing Python services as an individual contributor

Skills
Python
"""

LANGUAGES_JD = """
Software Developer

Requirements:
- Python, Go, Rust, Java and Scala
- Bachelor's degree in Computer Science

Responsibilities:
- Write and review code for our platform
"""

BACKEND_PLATFORM_JD = """
Backend Engineer

Requirements:
- Python, Django, PostgreSQL, Docker and Kubernetes
- Bachelor's degree in Computer Science

Responsibilities:
- Build and operate services for the platform team
"""

TWO_LINE_RESUME = "Jane Doe, developer looking for a new role in web products\nJavaScript, React"


class PinnedSimilarityEngine(SimilarityEngine):
    """Returns fixed semantic scores so that final scores can be computed by hand."""

    def __init__(self, scores):
        super().__init__(encoder=FakeEncoder())
        self.scores = scores

    async def calculate_similarity(self, job_sections, resume_sections):
        return self.scores


def _orchestrator(similarity_engine=None) -> MatchingOrchestrator:
    extractor = HeuristicFeatureExtractor()
    return MatchingOrchestrator(
        similarity_engine=similarity_engine or SimilarityEngine(encoder=FakeEncoder()),
        job_extractor=extractor,
        resume_extractor=extractor,
        batch_delay_seconds=0,
        resume_batch_delay_seconds=0,
    )


async def _match(job: str, resume: str, similarity_engine=None) -> MatchResult:
    result = await _orchestrator(similarity_engine).analyze_match(job, resume)
    assert isinstance(result, MatchResult), result
    return result


class TestNearPerfectMatch:
    @pytest.mark.asyncio
    async def test_features_from_text(self):
        result = await _match(FULLSTACK_JD, FULLSTACK_RESUME)

        assert result.skills_match.coverage == 1.0
        assert result.skills_match.matched_skills == ["react", "node.js", "typescript", "aws"]
        assert result.experience_match.candidate_years == 7
        assert result.level_match.level_gap == 0
        assert result.education_match.meets_requirement is True
        assert result.location_match.meets_requirement is True
        assert result.gate_results.overall_gates_passed is True
        assert result.quality_indicators.data_completeness == 1.0

    @pytest.mark.asyncio
    async def test_score_with_moderate_similarity(self):
        engine = PinnedSimilarityEngine(similarity_scores(0.6))
        result = await _match(FULLSTACK_JD, FULLSTACK_RESUME, engine)

        # 24 + 30 + 15 + 10 + 3 + 2 = 84, +2 experience, +3 coverage
        assert result.final_score == 89
        assert 75 <= result.final_score <= 95
        assert result.confidence in ("medium", "high")


class TestSkillsGap:
    @pytest.mark.asyncio
    async def test_backend_resume_for_frontend_job(self):
        result = await _match(FRONTEND_JD, BACKEND_RESUME)

        assert result.skills_match.missing_required == ["react", "typescript", "css"]
        assert result.gate_results.skills_gate.passed is False
        # Short posting: semantic confidence cannot be high, so the +5 bonus never applies
        assert result.final_score < 40
        assert result.confidence == "low"


class TestExperienceGap:
    @pytest.mark.asyncio
    async def test_contributor_resume_for_manager_job(self):
        result = await _match(MANAGER_JD, CONTRIBUTOR_RESUME)

        assert result.experience_match.required_years == 10
        assert result.experience_match.candidate_years == 3
        assert result.gate_results.experience_gate.passed is False
        assert result.gate_results.experience_gate.value == 7
        assert result.level_match.required_level == "Manager"
        assert result.level_match.candidate_level == "Mid"
        assert result.level_match.level_gap > 2
        assert result.level_match.is_promotable is False


class TestSparseResume:
    @pytest.mark.asyncio
    async def test_two_line_resume(self):
        result = await _match(LANGUAGES_JD, TWO_LINE_RESUME)

        assert result.quality_indicators.data_completeness == pytest.approx(0.4)
        assert result.quality_indicators.data_completeness < 0.5
        assert result.confidence == "low"

    @pytest.mark.asyncio
    async def test_domains_inferred_from_skills_count_as_data(self):
        # Job: skills, domains (Backend, DevOps), education. Resume: skills, domain (Frontend).
        result = await _match(BACKEND_PLATFORM_JD, TWO_LINE_RESUME)

        assert result.quality_indicators.data_completeness == pytest.approx(0.5)
        assert result.confidence == "low"
