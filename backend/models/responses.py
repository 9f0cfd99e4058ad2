from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.explanation import MatchExplanation
from models.schemas.feature_match import (
    DomainMatch,
    EducationMatch,
    ExperienceMatch,
    LevelMatch,
    LocationMatch,
    SkillsMatch,
)
from models.schemas.features import PreExtractedResumeFeatures
from models.schemas.scoring import GateResults, QualityIndicators, ScoreBreakdown
from models.schemas.similarity import CacheStats, Confidence, SimilarityScores

ErrorType = Literal["validation", "processing", "timeout", "model", "unknown"]


class DataQuality(BaseModel):
    job_text_length: int = 0
    resume_text_length: int = 0
    sections_extracted: int = 0
    used_pre_extracted_features: bool = False


class MatchMetadata(BaseModel):
    processing_time_ms: int = 0
    model_versions: dict[str, str] = {}
    data_quality: DataQuality = DataQuality()


class MatchResult(BaseModel):
    final_score: int = 0
    confidence: Confidence = "low"
    semantic_analysis: SimilarityScores = SimilarityScores()
    skills_match: SkillsMatch = SkillsMatch()
    domain_match: DomainMatch = DomainMatch()
    experience_match: ExperienceMatch = ExperienceMatch()
    level_match: LevelMatch = LevelMatch()
    education_match: EducationMatch = EducationMatch()
    location_match: LocationMatch = LocationMatch()
    scoring_breakdown: ScoreBreakdown = ScoreBreakdown()
    gate_results: GateResults = GateResults()
    quality_indicators: QualityIndicators = QualityIndicators()
    explanation: MatchExplanation = MatchExplanation()
    metadata: MatchMetadata = MatchMetadata()


class MatchError(BaseModel):
    error: str
    error_type: ErrorType = "unknown"
    details: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    fallback_score: int = 10


class QuickScore(BaseModel):
    score: int = 0
    confidence: str = "low"
    reason: str = ""
    gap: str = ""


class ResumeFeaturesResult(BaseModel):
    id: str
    features: PreExtractedResumeFeatures


class PerformanceStats(BaseModel):
    total_matches: int = 0
    failed_matches: int = 0
    average_processing_time_ms: float = 0.0


class MatcherStats(BaseModel):
    cache: CacheStats
    performance: PerformanceStats = PerformanceStats()


class HealthResponse(BaseModel):
    status: str = "ok"
    gemini_configured: bool = False
    extractor_mode: str = "heuristic"
    embedding_model: str = ""
