"""Inter-component Pydantic contracts for the matching engine."""

from models.schemas.sections import JobSections, ResumeSections
from models.schemas.features import (
    ExtractedJobFeatures,
    ExtractedResumeFeatures,
    JobSkills,
    PreExtractedResumeFeatures,
)
from models.schemas.similarity import CacheStats, SectionMatch, SimilarityScores
from models.schemas.feature_match import FeatureMatchAnalysis
from models.schemas.scoring import ScoringConfig, ScoringResult
from models.schemas.explanation import MatchExplanation, QuickSummary

__all__ = [
    "JobSections",
    "ResumeSections",
    "JobSkills",
    "ExtractedJobFeatures",
    "ExtractedResumeFeatures",
    "PreExtractedResumeFeatures",
    "SimilarityScores",
    "SectionMatch",
    "CacheStats",
    "FeatureMatchAnalysis",
    "ScoringConfig",
    "ScoringResult",
    "MatchExplanation",
    "QuickSummary",
]
