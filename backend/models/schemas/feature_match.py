"""Per-dimension comparison of job features against resume features."""

from typing import Literal

from pydantic import BaseModel

GapSeverity = Literal["none", "minor", "moderate", "major"]


class SkillsMatch(BaseModel):
    coverage: float = 0.0  # fraction of required skills covered
    matched_skills: list[str] = []
    missing_required: list[str] = []
    missing_preferred: list[str] = []
    additional_skills: list[str] = []  # resume skills not asked for
    overlap_score: float = 0.0  # Jaccard over all skills


class DomainMatch(BaseModel):
    score: float = 0.0
    matched_domains: list[str] = []
    job_domains: list[str] = []
    candidate_domains: list[str] = []


class ExperienceMatch(BaseModel):
    score: float = 0.0
    required_years: float | None = None
    candidate_years: float | None = None
    years_gap: float = 0.0  # positive when the candidate has less
    gap_severity: GapSeverity = "none"


class LevelMatch(BaseModel):
    score: float = 0.0
    required_level: str | None = None
    candidate_level: str | None = None
    level_gap: int = 0  # positive when the candidate is more junior
    is_promotable: bool = False


class EducationMatch(BaseModel):
    score: float = 0.0
    required: str | None = None
    candidate: str | None = None
    meets_requirement: bool = False


class LocationMatch(BaseModel):
    score: float = 0.0
    work_auth_required: bool | None = None
    candidate_status: bool | None = None
    meets_requirement: bool = False


class FeatureMatchAnalysis(BaseModel):
    """All six structured comparisons for one job/resume pair."""
    skills_match: SkillsMatch = SkillsMatch()
    domain_match: DomainMatch = DomainMatch()
    experience_match: ExperienceMatch = ExperienceMatch()
    level_match: LevelMatch = LevelMatch()
    education_match: EducationMatch = EducationMatch()
    location_match: LocationMatch = LocationMatch()
