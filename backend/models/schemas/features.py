"""Structured features extracted from a job posting or a resume."""

from pydantic import BaseModel

from models.schemas.sections import ResumeSections


class JobSkills(BaseModel):
    required: list[str] = []
    preferred: list[str] = []
    all: list[str] = []


class ExtractedJobFeatures(BaseModel):
    """Output contract of a job feature extractor.

    Any field may be empty/None when the extractor could not determine it;
    the matcher treats missing values as unknown, never as an error.
    """
    skills: JobSkills = JobSkills()
    domains: list[str] = []
    years_required: float | None = None
    level_required: str | None = None
    education: str | None = None
    work_auth_required: bool | None = None
    location: str | None = None


class ExtractedResumeFeatures(BaseModel):
    """Output contract of a resume feature extractor."""
    skills: list[str] = []
    domains: list[str] = []
    years_of_experience: float | None = None
    current_level: str | None = None
    education: str | None = None
    work_auth_status: bool | None = None
    location: str | None = None


class PreExtractedResumeFeatures(ExtractedResumeFeatures):
    """Resume features extracted ahead of time for reuse across many jobs.

    raw_sections, when present, feeds the semantic similarity step; without
    it the semantic signal is computed from an empty resume.
    """
    raw_sections: ResumeSections | None = None
