from pydantic import BaseModel, Field, model_validator

from config import settings
from models.schemas.features import PreExtractedResumeFeatures


class WeightOverrides(BaseModel):
    """Partial scoring-weight overrides; unset fields keep their current value."""
    semantic: float | None = Field(None, ge=0, le=1)
    skills_coverage: float | None = Field(None, ge=0, le=1)
    experience: float | None = Field(None, ge=0, le=1)
    domain: float | None = Field(None, ge=0, le=1)
    education: float | None = Field(None, ge=0, le=1)
    location: float | None = Field(None, ge=0, le=1)


class GateOverrides(BaseModel):
    min_skills_coverage: float | None = Field(None, ge=0, le=1)
    max_years_gap: float | None = Field(None, ge=0, le=20)
    require_work_auth: bool | None = None
    require_education: bool | None = None


class MatchOptions(BaseModel):
    include_explanation: bool = True
    strict_mode: bool = False
    custom_weights: WeightOverrides | None = None
    custom_gates: GateOverrides | None = None


class MatchInput(BaseModel):
    """Validated input of a single match.

    Either resume_content (raw text) or resume_features (pre-extracted)
    must be provided.
    """
    job_description: str
    resume_content: str | None = None
    resume_features: PreExtractedResumeFeatures | None = None
    options: MatchOptions = MatchOptions()

    @model_validator(mode="after")
    def _check_lengths(self) -> "MatchInput":
        if len(self.job_description.strip()) < settings.min_job_description_length:
            raise ValueError(
                f"job description must be at least "
                f"{settings.min_job_description_length} characters"
            )
        if self.resume_features is None:
            if not self.resume_content or len(self.resume_content.strip()) < settings.min_resume_length:
                raise ValueError(
                    f"resume content must be at least "
                    f"{settings.min_resume_length} characters"
                )
        return self


class MatchRequest(BaseModel):
    job_description: str = Field(..., max_length=20000, description="Job posting text")
    resume_text: str | None = Field(None, max_length=50000, description="Plain text resume content")
    resume_features: PreExtractedResumeFeatures | None = None
    options: MatchOptions = MatchOptions()


class MatchPair(BaseModel):
    job_description: str = Field(..., max_length=20000)
    resume_text: str | None = Field(None, max_length=50000)
    resume_features: PreExtractedResumeFeatures | None = None
    options: MatchOptions | None = None


class BatchMatchRequest(BaseModel):
    pairs: list[MatchPair] = Field(..., max_length=50)


class QuickScoreRequest(BaseModel):
    pairs: list[MatchPair] = Field(..., max_length=50)


class ResumeFeaturesRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000)
    include_raw_sections: bool = True


class ResumeItem(BaseModel):
    id: str
    resume_text: str = Field(..., max_length=50000)


class BatchResumeFeaturesRequest(BaseModel):
    resumes: list[ResumeItem] = Field(..., max_length=50)
    include_raw_sections: bool = True
