"""Segmented job / resume text produced by the section parser."""

from pydantic import BaseModel


class JobSections(BaseModel):
    """Named sections of a job posting (noise-stripped, normalized)."""
    requirements: str = ""
    responsibilities: str = ""
    qualifications: str = ""
    summary: str = ""
    raw_text: str = ""

    model_config = {"frozen": True}

    def count_extracted(self) -> int:
        return sum(1 for s in (self.requirements, self.responsibilities, self.qualifications, self.summary) if s)


class ResumeSections(BaseModel):
    """Named sections of a resume (normalized)."""
    experience: str = ""
    skills: str = ""
    education: str = ""
    summary: str = ""
    raw_text: str = ""

    model_config = {"frozen": True}

    def count_extracted(self) -> int:
        return sum(1 for s in (self.experience, self.skills, self.education, self.summary) if s)
