"""Rule-based comparison of structured job features against resume features.

Six independent, pure functions (skills, domain, experience, level,
education, location/work authorization), each returning one dimension of
FeatureMatchAnalysis with a 0.0-1.0 score plus evidence.
"""

from models.schemas.feature_match import (
    DomainMatch,
    EducationMatch,
    ExperienceMatch,
    FeatureMatchAnalysis,
    LevelMatch,
    LocationMatch,
    SkillsMatch,
)
from models.schemas.features import ExtractedJobFeatures, ExtractedResumeFeatures, JobSkills
from models.schemas.sections import JobSections

# Permissive aliases: a job skill also matches any of these resume spellings
SKILL_SYNONYMS: dict[str, list[str]] = {
    "javascript": ["js", "node.js", "nodejs"],
    "node.js": ["nodejs", "node", "javascript"],
    "react": ["reactjs", "react.js"],
    "python": ["py"],
    "typescript": ["ts"],
    "postgresql": ["postgres", "psql"],
    "mongodb": ["mongo"],
    "aws": ["amazon web services"],
    "gcp": ["google cloud", "google cloud platform"],
    "docker": ["containerization"],
    "kubernetes": ["k8s"],
}

LEVEL_LADDER = [
    "Intern", "Entry", "Junior", "Mid", "Senior", "Lead",
    "Principal", "Manager", "Director", "VP", "Executive",
]
EDUCATION_LADDER = ["High School", "Associates", "Bachelors", "Masters", "PhD"]

_PREFERRED_MARKERS = ("preferred", "plus", "bonus")


def _rank(ladder: list[str], label: str) -> int:
    """Case-insensitive position of label in ladder, -1 if unknown."""
    lowered = [step.lower() for step in ladder]
    try:
        return lowered.index(label.strip().lower())
    except ValueError:
        return -1


def level_rank(label: str | None) -> int:
    return _rank(LEVEL_LADDER, label) if label else -1


def education_rank(label: str | None) -> int:
    return _rank(EDUCATION_LADDER, label) if label else -1


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def split_job_skills(skills: list[str], job_sections: JobSections) -> JobSkills:
    """Separate required from preferred skills using section context.

    A skill mentioned in the requirements section (or any skill, when that
    section uses "required" language) is required. Otherwise a skill
    mentioned in the qualifications section (or any skill, when that section
    uses preferred/plus/bonus language) is preferred. Unclear skills default
    to required.
    """
    requirements_text = job_sections.requirements.lower()
    qualifications_text = job_sections.qualifications.lower()

    required: list[str] = []
    preferred: list[str] = []
    for skill in skills:
        skill_lower = skill.lower()
        if skill_lower in requirements_text or "required" in requirements_text:
            required.append(skill)
        elif skill_lower in qualifications_text or any(
            marker in qualifications_text for marker in _PREFERRED_MARKERS
        ):
            preferred.append(skill)
        else:
            required.append(skill)

    return JobSkills(required=required, preferred=preferred, all=list(skills))


def skill_matches(job_skill: str, resume_skills: list[str]) -> bool:
    """Exact lowercase match or a match through SKILL_SYNONYMS.

    resume_skills must already be lowercased.
    """
    skill = job_skill.lower()
    if skill in resume_skills:
        return True
    return any(synonym in resume_skills for synonym in SKILL_SYNONYMS.get(skill, []))


def analyze_skills_match(job_skills: JobSkills, resume_skills: list[str]) -> SkillsMatch:
    resume_lower = [s.lower() for s in resume_skills]

    matched: list[str] = []
    missing_required: list[str] = []
    missing_preferred: list[str] = []

    for skill in job_skills.required:
        if skill_matches(skill, resume_lower):
            matched.append(skill)
        else:
            missing_required.append(skill)

    for skill in job_skills.preferred:
        if skill_matches(skill, resume_lower):
            if skill not in matched:
                matched.append(skill)
        else:
            missing_preferred.append(skill)

    n_required = len(job_skills.required)
    coverage = (n_required - len(missing_required)) / n_required if n_required else 1.0

    # Jaccard over the full skill sets
    job_set = {s.lower() for s in job_skills.all}
    resume_set = set(resume_lower)
    union = job_set | resume_set
    overlap = len(job_set & resume_set) / len(union) if union else 0.0

    job_all_lower = [s.lower() for s in job_skills.all]
    additional = [s for s in resume_skills if not skill_matches(s, job_all_lower)]

    return SkillsMatch(
        coverage=coverage,
        matched_skills=matched,
        missing_required=missing_required,
        missing_preferred=missing_preferred,
        additional_skills=additional,
        overlap_score=overlap,
    )


# ---------------------------------------------------------------------------
# Domain, experience, level, education, location
# ---------------------------------------------------------------------------

def analyze_domain_match(job_domains: list[str], resume_domains: list[str]) -> DomainMatch:
    if not job_domains:
        return DomainMatch(score=1.0, job_domains=[], candidate_domains=list(resume_domains))

    resume_lower = {d.lower() for d in resume_domains}
    matched = [d for d in job_domains if d.lower() in resume_lower]
    return DomainMatch(
        score=len(matched) / len(job_domains),
        matched_domains=matched,
        job_domains=list(job_domains),
        candidate_domains=list(resume_domains),
    )


def analyze_experience_match(
    required_years: float | None, candidate_years: float | None
) -> ExperienceMatch:
    if required_years is None:
        return ExperienceMatch(
            score=1.0,
            required_years=None,
            candidate_years=candidate_years,
            years_gap=0,
            gap_severity="none",
        )

    if candidate_years is None:
        # Unverifiable experience counts as a full gap
        return ExperienceMatch(
            score=0.0,
            required_years=required_years,
            candidate_years=None,
            years_gap=required_years,
            gap_severity="major",
        )

    gap = max(0.0, required_years - candidate_years)
    if gap == 0:
        score, severity = 1.0, "none"
    elif gap <= 1:
        score, severity = 0.9, "minor"
    elif gap <= 3:
        score, severity = 0.7, "moderate"
    else:
        score, severity = 0.4, "major"

    if candidate_years > required_years:
        score = min(1.0, score + 0.1)

    return ExperienceMatch(
        score=score,
        required_years=required_years,
        candidate_years=candidate_years,
        years_gap=gap,
        gap_severity=severity,
    )


def analyze_level_match(required_level: str | None, candidate_level: str | None) -> LevelMatch:
    if not required_level:
        return LevelMatch(
            score=1.0,
            required_level=required_level,
            candidate_level=candidate_level,
            level_gap=0,
            is_promotable=True,
        )

    if not candidate_level:
        return LevelMatch(
            score=0.0,
            required_level=required_level,
            candidate_level=None,
            level_gap=3,
            is_promotable=False,
        )

    required_index = level_rank(required_level)
    candidate_index = level_rank(candidate_level)
    if required_index == -1 or candidate_index == -1:
        return LevelMatch(
            score=0.5,
            required_level=required_level,
            candidate_level=candidate_level,
            level_gap=0,
            is_promotable=True,
        )

    gap = required_index - candidate_index
    if gap <= 0:
        score, promotable = 1.0, True
    elif gap == 1:
        score, promotable = 0.8, True
    elif gap == 2:
        score, promotable = 0.6, True
    else:
        score, promotable = 0.3, False

    return LevelMatch(
        score=score,
        required_level=required_level,
        candidate_level=candidate_level,
        level_gap=max(0, gap),
        is_promotable=promotable,
    )


def analyze_education_match(required: str | None, candidate: str | None) -> EducationMatch:
    if not required:
        return EducationMatch(score=1.0, required=required, candidate=candidate, meets_requirement=True)

    if not candidate:
        # Soft signal: missing education is a concern, not a disqualifier
        return EducationMatch(score=0.3, required=required, candidate=None, meets_requirement=False)

    required_index = education_rank(required)
    candidate_index = education_rank(candidate)
    if required_index == -1 or candidate_index == -1:
        return EducationMatch(score=0.5, required=required, candidate=candidate, meets_requirement=True)

    meets = candidate_index >= required_index
    return EducationMatch(
        score=1.0 if meets else 0.3,
        required=required,
        candidate=candidate,
        meets_requirement=meets,
    )


def analyze_location_match(
    work_auth_required: bool | None, candidate_status: bool | None
) -> LocationMatch:
    if not work_auth_required:
        return LocationMatch(
            score=1.0,
            work_auth_required=work_auth_required,
            candidate_status=candidate_status,
            meets_requirement=True,
        )

    if candidate_status is None:
        return LocationMatch(
            score=0.5,
            work_auth_required=True,
            candidate_status=None,
            meets_requirement=False,
        )

    return LocationMatch(
        score=1.0 if candidate_status else 0.1,
        work_auth_required=True,
        candidate_status=candidate_status,
        meets_requirement=candidate_status,
    )


def analyze_feature_match(
    job: ExtractedJobFeatures, resume: ExtractedResumeFeatures
) -> FeatureMatchAnalysis:
    """Run all six comparisons for one job/resume pair."""
    return FeatureMatchAnalysis(
        skills_match=analyze_skills_match(job.skills, resume.skills),
        domain_match=analyze_domain_match(job.domains, resume.domains),
        experience_match=analyze_experience_match(job.years_required, resume.years_of_experience),
        level_match=analyze_level_match(job.level_required, resume.current_level),
        education_match=analyze_education_match(job.education, resume.education),
        location_match=analyze_location_match(job.work_auth_required, resume.work_auth_status),
    )


def empty_feature_match() -> FeatureMatchAnalysis:
    """All-zero analysis used when a pair could not be analyzed."""
    return FeatureMatchAnalysis()
