"""Semantic similarity output."""

from typing import Literal

from pydantic import BaseModel

Confidence = Literal["low", "medium", "high"]


class SimilarityScores(BaseModel):
    """Cosine similarities (0.0-1.0) between the resume and each job section."""
    requirements_match: float = 0.0
    responsibilities_match: float = 0.0
    qualifications_match: float = 0.0
    overall_semantic: float = 0.0
    confidence: Confidence = "low"


class SectionMatch(BaseModel):
    """One job-section / resume-section pairing ranked by similarity."""
    job_section: str
    resume_section: str
    similarity: float = 0.0


class CacheStats(BaseModel):
    size: int = 0
    max_size: int = 0
    ttl_seconds: float = 0.0
    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0
    oldest_entry_age_seconds: float | None = None
