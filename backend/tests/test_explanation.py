"""Tests for the template-based match explanation."""

from conftest import (
    make_job_features,
    make_resume_features,
    similarity_scores,
    skills_mismatch_pair,
    strong_fullstack_pair,
)
from models.schemas.features import JobSkills
from services.explanation import (
    MAX_CONCERNS,
    MAX_RECOMMENDATIONS,
    MAX_STRENGTHS,
    ExplanationContext,
    ExplanationEngine,
    extract_gap_type,
    simplify_gap,
    simplify_reason,
)
from services.feature_match import analyze_feature_match
from services.scoring_engine import HybridScoringEngine


def _context(job, resume, similarity) -> ExplanationContext:
    features = analyze_feature_match(job, resume)
    scoring = HybridScoringEngine().calculate_score(similarity, features, job, resume)
    return ExplanationContext(
        similarity=similarity, features=features, job=job, resume=resume, scoring=scoring
    )


def strong_context() -> ExplanationContext:
    return _context(*strong_fullstack_pair(), similarity_scores(0.6))


def weak_context() -> ExplanationContext:
    return _context(*skills_mismatch_pair(), similarity_scores(0.35))


class TestStrongMatch:
    def test_strengths_capped_and_ordered(self):
        explanation = ExplanationEngine().generate_explanation(strong_context())
        assert len(explanation.strengths) == MAX_STRENGTHS
        assert explanation.strengths[0].startswith("Excellent technical skills coverage (4/4")
        assert explanation.strengths[1] == "Exceeds experience requirements (7 years vs 5 required)"
        assert explanation.strengths[2].startswith("Strong domain expertise alignment")

    def test_no_concerns(self):
        explanation = ExplanationEngine().generate_explanation(strong_context())
        assert explanation.concerns == []
        assert explanation.key_insights.biggest_gap == "Minor alignment areas for optimization"

    def test_summary(self):
        explanation = ExplanationEngine().generate_explanation(strong_context())
        assert explanation.summary.startswith("Excellent match")
        assert "moderate confidence" in explanation.summary

    def test_recommendations(self):
        explanation = ExplanationEngine().generate_explanation(strong_context())
        assert explanation.recommendations == ["Strong candidate - recommend moving to next stage"]

    def test_key_insights(self):
        insights = ExplanationEngine().generate_explanation(strong_context()).key_insights
        assert insights.strongest_match == "Technical skills coverage"
        assert insights.improvement_potential == "High potential for success with proper onboarding"


class TestWeakMatch:
    def test_concerns_ranked_by_severity(self):
        explanation = ExplanationEngine().generate_explanation(weak_context())
        assert len(explanation.concerns) == MAX_CONCERNS
        assert explanation.concerns[0] == (
            "Critical skills gap: only 0% of required skills covered (need 30% more)"
        )
        assert explanation.concerns[1] == "Missing key technical skills: react, typescript, css"
        assert explanation.concerns[2].startswith("Limited domain expertise match")

    def test_summary_and_insights(self):
        explanation = ExplanationEngine().generate_explanation(weak_context())
        assert explanation.summary.startswith("Poor match")
        assert "low confidence" in explanation.summary
        assert explanation.key_insights.biggest_gap == "Technical skills gaps"
        assert explanation.key_insights.improvement_potential == "Limited growth potential in current role"

    def test_recommendations_capped(self):
        explanation = ExplanationEngine().generate_explanation(weak_context())
        assert len(explanation.recommendations) <= MAX_RECOMMENDATIONS
        assert explanation.recommendations[0] == (
            "Consider candidates with experience in: react, typescript, css"
        )
        assert any(r.startswith("Critical skills deficiency") for r in explanation.recommendations)

    def test_education_strength_requires_candidate_education(self):
        explanation = ExplanationEngine().generate_explanation(weak_context())
        assert not any("education" in s for s in explanation.strengths)


class TestSkillsCoverageStrength:
    def test_counts_only_required_skills(self):
        job = make_job_features(
            skills=JobSkills(
                required=["python", "django", "postgresql"],
                preferred=["aws", "docker"],
                all=["python", "django", "postgresql", "aws", "docker"],
            ),
        )
        resume = make_resume_features(skills=["python", "django", "postgresql", "aws", "docker"])
        strengths = ExplanationEngine().generate_explanation(
            _context(job, resume, similarity_scores(0.6))
        ).strengths

        assert "Excellent technical skills coverage (3/3 required skills: python, django, postgresql)" in strengths

    def test_no_required_skills_gives_no_coverage_strength(self):
        job = make_job_features(skills=JobSkills(preferred=["aws"], all=["aws"]))
        resume = make_resume_features(skills=["aws"])
        strengths = ExplanationEngine().generate_explanation(
            _context(job, resume, similarity_scores(0.6))
        ).strengths

        assert not any("technical skills" in s for s in strengths)


class TestQuickSummary:
    def test_strong(self):
        summary = ExplanationEngine().generate_quick_summary(strong_context())
        assert summary.score == 89
        assert summary.one_line_reason == "Strong technical skills match"
        assert summary.top_gap == "Minor gaps in requirements"
        assert summary.confidence == "medium"

    def test_weak(self):
        summary = ExplanationEngine().generate_quick_summary(weak_context())
        assert summary.score == 20
        assert summary.one_line_reason == "Experience exceeds requirements"
        assert summary.top_gap == "Missing key skills"
        assert summary.confidence == "low"


class TestBatch:
    def test_preserves_order(self):
        explanations = ExplanationEngine().generate_batch_explanations([strong_context(), weak_context()])
        assert explanations[0].summary.startswith("Excellent")
        assert explanations[1].summary.startswith("Poor")


class TestPhraseHelpers:
    def test_simplify_reason_fallback_strips_detail(self):
        assert simplify_reason("Work authorization requirements met") == "Work authorization requirements met"
        assert simplify_reason("Meets education requirements (Bachelors)") == "Meets education requirements"

    def test_simplify_gap(self):
        assert simplify_gap("Experience below requirement: 2 years less") == "Insufficient experience"
        assert simplify_gap("Work authorization requirement not met") == "Work auth required"
        assert simplify_gap("Something else: detail") == "Something else"

    def test_extract_gap_type(self):
        assert extract_gap_type("Experience gap: candidate falls short") == "Experience level concerns"
        assert extract_gap_type("Work authorization requirement not met") == "Work authorization requirements"
        assert extract_gap_type("Low semantic similarity (10%)") == "Job context alignment"
        assert extract_gap_type("Something odd") == "Requirement alignment concerns"
