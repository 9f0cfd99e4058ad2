"""Hybrid scoring: weighted fusion of semantic and structured match signals.

final = sum(weight_i * component_i) + bonuses - penalties, followed by
extra penalties for failed hard gates, clamped to an integer in [0, 100].
"""

import logging
import math

from models.schemas.feature_match import FeatureMatchAnalysis
from models.schemas.features import ExtractedJobFeatures, ExtractedResumeFeatures
from models.schemas.scoring import (
    EducationGate,
    GateResults,
    HardGates,
    LocationGate,
    QualityIndicators,
    ScoreBreakdown,
    ScoringConfig,
    ScoringResult,
    ScoringWeights,
    ThresholdGate,
)
from models.schemas.similarity import SimilarityScores
from services.feature_match import education_rank

logger = logging.getLogger(__name__)

WEIGHT_FIELDS = ("semantic", "skills_coverage", "experience", "domain", "education", "location")


def normalize_weights(weights: ScoringWeights) -> ScoringWeights:
    """Scale weights to sum to 1.0. All-zero weights fall back to the defaults."""
    total = sum(getattr(weights, f) for f in WEIGHT_FIELDS)
    if total <= 0 or math.isnan(total):
        logger.warning("Scoring weights sum to %s, using defaults", total)
        return ScoringWeights()
    return ScoringWeights(**{f: getattr(weights, f) / total for f in WEIGHT_FIELDS})


def consistency_score(similarity: SimilarityScores, features: FeatureMatchAnalysis) -> float:
    """1 - |semantic - mean(skills coverage, experience, domain)|, floored at 0."""
    structural = (
        features.skills_match.coverage
        + features.experience_match.score
        + features.domain_match.score
    ) / 3
    return max(0.0, 1 - abs(similarity.overall_semantic - structural))


def data_completeness(job: ExtractedJobFeatures, resume: ExtractedResumeFeatures) -> float:
    """Mean presence ratio of five key fields on each side."""
    job_fields = [
        len(job.skills.all) > 0,
        len(job.domains) > 0,
        job.years_required is not None,
        job.level_required is not None,
        job.education is not None,
    ]
    resume_fields = [
        len(resume.skills) > 0,
        len(resume.domains) > 0,
        resume.years_of_experience is not None,
        resume.current_level is not None,
        resume.education is not None,
    ]
    return (sum(job_fields) / len(job_fields) + sum(resume_fields) / len(resume_fields)) / 2


class HybridScoringEngine:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        config = config or ScoringConfig()
        self.config = config.model_copy(update={"weights": normalize_weights(config.weights)})

    def calculate_score(
        self,
        similarity: SimilarityScores,
        features: FeatureMatchAnalysis,
        job: ExtractedJobFeatures,
        resume: ExtractedResumeFeatures,
    ) -> ScoringResult:
        contributions = self._weighted_contributions(similarity, features)
        base_score = sum(contributions.values())

        gates = self._check_gates(features, job, resume)
        bonuses, penalties = self._adjustments(similarity, features, resume, job, base_score)

        score = base_score + bonuses - penalties
        if not gates.overall_gates_passed:
            score = self._apply_gate_penalties(score, gates)

        final_score = 0 if math.isnan(score) else max(0, min(100, round(score)))

        quality = QualityIndicators(
            semantic_confidence=similarity.confidence,
            data_completeness=data_completeness(job, resume),
            consistency_score=consistency_score(similarity, features),
        )

        return ScoringResult(
            final_score=final_score,
            confidence=self._assess_confidence(similarity, features, gates, quality),
            breakdown=ScoreBreakdown(
                **{k: _round2(v) for k, v in contributions.items()},
                bonuses=_round2(bonuses),
                penalties=_round2(penalties),
            ),
            gate_results=gates,
            quality_indicators=quality,
        )

    def calculate_batch_scores(
        self,
        matches: list[tuple[SimilarityScores, FeatureMatchAnalysis, ExtractedJobFeatures, ExtractedResumeFeatures]],
    ) -> list[ScoringResult]:
        return [self.calculate_score(*match) for match in matches]

    def update_config(
        self,
        weights: dict | None = None,
        gates: dict | None = None,
        enable_bonuses: bool | None = None,
        enable_penalties: bool | None = None,
        strict_mode: bool | None = None,
    ) -> None:
        """Merge partial overrides into the active config and re-normalize weights."""
        current = self.config
        merged_weights = ScoringWeights.model_validate({**current.weights.model_dump(), **(weights or {})})
        merged_gates = HardGates.model_validate({**current.gates.model_dump(), **(gates or {})})
        self.config = ScoringConfig(
            weights=normalize_weights(merged_weights),
            gates=merged_gates,
            enable_bonuses=current.enable_bonuses if enable_bonuses is None else enable_bonuses,
            enable_penalties=current.enable_penalties if enable_penalties is None else enable_penalties,
            strict_mode=current.strict_mode if strict_mode is None else strict_mode,
        )

    def get_config(self) -> ScoringConfig:
        return self.config.model_copy(deep=True)

    # -----------------------------------------------------------------------

    def _weighted_contributions(
        self, similarity: SimilarityScores, features: FeatureMatchAnalysis
    ) -> dict[str, float]:
        w = self.config.weights
        return {
            "semantic": similarity.overall_semantic * 100 * w.semantic,
            "skills_coverage": features.skills_match.coverage * 100 * w.skills_coverage,
            "experience": features.experience_match.score * 100 * w.experience,
            "domain": features.domain_match.score * 100 * w.domain,
            "education": features.education_match.score * 100 * w.education,
            "location": features.location_match.score * 100 * w.location,
        }

    def _check_gates(
        self,
        features: FeatureMatchAnalysis,
        job: ExtractedJobFeatures,
        resume: ExtractedResumeFeatures,
    ) -> GateResults:
        g = self.config.gates

        coverage = features.skills_match.coverage
        skills_gate = ThresholdGate(
            passed=coverage >= g.min_skills_coverage,
            value=coverage,
            threshold=g.min_skills_coverage,
        )

        years_gap = features.experience_match.years_gap
        if math.isnan(years_gap):
            years_gap = 0.0
        experience_gate = ThresholdGate(
            passed=years_gap <= g.max_years_gap,
            value=years_gap,
            threshold=g.max_years_gap,
        )

        location_required = g.require_work_auth and bool(job.work_auth_required)
        location_gate = LocationGate(
            passed=not location_required or features.location_match.meets_requirement,
            value=features.location_match.meets_requirement,
            required=location_required,
        )

        education_required = g.require_education and bool(job.education)
        education_gate = EducationGate(
            passed=not education_required or features.education_match.meets_requirement,
            value=resume.education,
            required=job.education,
        )

        return GateResults(
            skills_gate=skills_gate,
            experience_gate=experience_gate,
            location_gate=location_gate,
            education_gate=education_gate,
            overall_gates_passed=(
                skills_gate.passed
                and experience_gate.passed
                and location_gate.passed
                and education_gate.passed
            ),
        )

    def _adjustments(
        self,
        similarity: SimilarityScores,
        features: FeatureMatchAnalysis,
        resume: ExtractedResumeFeatures,
        job: ExtractedJobFeatures,
        base_score: float,
    ) -> tuple[float, float]:
        bonuses = 0.0
        penalties = 0.0

        if self.config.enable_bonuses:
            if similarity.overall_semantic > 0.8 and similarity.confidence == "high":
                bonuses += 5

            exp = features.experience_match
            if exp.candidate_years and exp.required_years and exp.candidate_years > exp.required_years:
                bonuses += min(3, exp.candidate_years - exp.required_years)

            if features.skills_match.coverage >= 0.95:
                bonuses += 3

            required_rank = education_rank(job.education)
            candidate_rank = education_rank(resume.education)
            if required_rank >= 0 and candidate_rank > required_rank:
                bonuses += 2

        if self.config.enable_penalties:
            if similarity.overall_semantic < 0.3 and base_score > 70:
                penalties += 10

            n_additional = len(features.skills_match.additional_skills)
            if n_additional > 20:
                penalties += min(5, n_additional - 20)

            if consistency_score(similarity, features) < 0.5:
                penalties += 8

        return bonuses, penalties

    def _apply_gate_penalties(self, score: float, gates: GateResults) -> float:
        # Work-authorization gate is reported but not penalized: most resumes
        # do not state authorization at all.
        penalized = score

        if not gates.skills_gate.passed:
            deficit = gates.skills_gate.threshold - gates.skills_gate.value
            penalized = max(10, score - deficit * 50)

        if not gates.experience_gate.passed:
            over = gates.experience_gate.value - gates.experience_gate.threshold
            penalized -= min(20, over * 3)

        return max(0, penalized)

    def _assess_confidence(
        self,
        similarity: SimilarityScores,
        features: FeatureMatchAnalysis,
        gates: GateResults,
        quality: QualityIndicators,
    ) -> str:
        if (
            similarity.confidence == "high"
            and gates.overall_gates_passed
            and features.skills_match.coverage > 0.7
            and quality.data_completeness > 0.8
        ):
            return "high"
        if (
            similarity.confidence == "low"
            or not gates.overall_gates_passed
            or quality.data_completeness < 0.4
        ):
            return "low"
        return "medium"


def _round2(value: float) -> float:
    return 0.0 if math.isnan(value) else round(value, 2)
