"""Hybrid scoring configuration and result."""

from pydantic import BaseModel, Field

from models.schemas.similarity import Confidence


class ScoringWeights(BaseModel):
    semantic: float = Field(0.40, ge=0)
    skills_coverage: float = Field(0.30, ge=0)
    experience: float = Field(0.15, ge=0)
    domain: float = Field(0.10, ge=0)
    education: float = Field(0.03, ge=0)
    location: float = Field(0.02, ge=0)


class HardGates(BaseModel):
    min_skills_coverage: float = Field(0.3, ge=0, le=1)
    max_years_gap: float = Field(5, ge=0)
    require_work_auth: bool = True
    require_education: bool = False


class ScoringConfig(BaseModel):
    weights: ScoringWeights = ScoringWeights()
    gates: HardGates = HardGates()
    enable_bonuses: bool = True
    enable_penalties: bool = True
    strict_mode: bool = False


class ScoreBreakdown(BaseModel):
    """Weighted contribution of each signal, in final-score points."""
    semantic: float = 0.0
    skills_coverage: float = 0.0
    experience: float = 0.0
    domain: float = 0.0
    education: float = 0.0
    location: float = 0.0
    bonuses: float = 0.0
    penalties: float = 0.0


class ThresholdGate(BaseModel):
    passed: bool = True
    value: float = 0.0
    threshold: float = 0.0


class LocationGate(BaseModel):
    passed: bool = True
    value: bool = False
    required: bool = False


class EducationGate(BaseModel):
    passed: bool = True
    value: str | None = None  # candidate education
    required: str | None = None  # job education


class GateResults(BaseModel):
    skills_gate: ThresholdGate = ThresholdGate()
    experience_gate: ThresholdGate = ThresholdGate()
    location_gate: LocationGate = LocationGate()
    education_gate: EducationGate = EducationGate()
    overall_gates_passed: bool = True


class QualityIndicators(BaseModel):
    semantic_confidence: Confidence = "low"
    data_completeness: float = 0.0
    consistency_score: float = 0.0


class ScoringResult(BaseModel):
    final_score: int = 0
    confidence: Confidence = "low"
    breakdown: ScoreBreakdown = ScoreBreakdown()
    gate_results: GateResults = GateResults()
    quality_indicators: QualityIndicators = QualityIndicators()
