"""Feature extractors: turn segmented job / resume text into structured features.

Two implementations share the BaseFeatureExtractor contract:
    - HeuristicFeatureExtractor: dictionary + regex, offline and deterministic
    - LLMFeatureExtractor: four Gemini prompts per document, retried and
      schema-validated

The matcher treats any field an extractor leaves empty as unknown.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from models.schemas.features import ExtractedJobFeatures, ExtractedResumeFeatures, JobSkills
from models.schemas.sections import JobSections, ResumeSections
from services import section_parser, skill_extractor
from services.errors import LLMParseError
from services.feature_match import split_job_skills
from services.llm_output import (
    DomainOutput,
    LevelOutput,
    ParseFailure,
    SkillsOutput,
    YearsOutput,
    parse_llm_output,
)
from services.prompt_builder import (
    build_domain_prompt,
    build_level_prompt,
    build_skills_prompt,
    build_years_prompt,
)
from services.resilience import with_retry

logger = logging.getLogger(__name__)


class BaseFeatureExtractor(ABC):
    """Base class for job / resume feature extractors.

    Subclasses must implement:
        - name: identifier reported in match metadata
        - extract_job_features(sections): JobSections -> ExtractedJobFeatures
        - extract_resume_features(sections): ResumeSections -> ExtractedResumeFeatures
    """

    name: str = ""

    @abstractmethod
    async def extract_job_features(self, sections: JobSections) -> ExtractedJobFeatures:
        """Extract structured requirements from a segmented job posting."""

    @abstractmethod
    async def extract_resume_features(self, sections: ResumeSections) -> ExtractedResumeFeatures:
        """Extract structured candidate features from a segmented resume."""


def _job_skills_text(sections: JobSections) -> str:
    focused = " ".join(s for s in (sections.requirements, sections.qualifications) if s)
    return focused or sections.raw_text


def _job_primary_text(sections: JobSections) -> str:
    return sections.raw_text or " ".join(
        s for s in (sections.summary, sections.requirements, sections.responsibilities, sections.qualifications) if s
    )


def _resume_primary_text(sections: ResumeSections) -> str:
    return sections.raw_text or " ".join(
        s for s in (sections.summary, sections.experience, sections.skills, sections.education) if s
    )


# ---------------------------------------------------------------------------
# Heuristic
# ---------------------------------------------------------------------------

class HeuristicFeatureExtractor(BaseFeatureExtractor):
    name = "heuristic"

    async def extract_job_features(self, sections: JobSections) -> ExtractedJobFeatures:
        text = _job_primary_text(sections)
        skills = skill_extractor.extract_skills(text)
        years = section_parser.extract_years_of_experience(text)
        level = skill_extractor.infer_level(text) or skill_extractor.level_from_years(years)
        work_auth_text = sections.requirements or text

        return ExtractedJobFeatures(
            skills=split_job_skills(skills, sections),
            domains=skill_extractor.detect_domains(text),
            years_required=years,
            level_required=level,
            education=section_parser.extract_education_level(text),
            work_auth_required=section_parser.check_work_authorization(work_auth_text),
            location=section_parser.extract_location(text),
        )

    async def extract_resume_features(self, sections: ResumeSections) -> ExtractedResumeFeatures:
        text = _resume_primary_text(sections)
        years = section_parser.extract_years_of_experience(text)
        if years is None:
            years = section_parser.estimate_years_from_dates(sections.experience or text)
        level = skill_extractor.infer_level(sections.experience or text) or skill_extractor.level_from_years(years)

        return ExtractedResumeFeatures(
            skills=skill_extractor.extract_skills(text),
            domains=skill_extractor.detect_domains(text),
            years_of_experience=years,
            current_level=level,
            education=section_parser.extract_education_level(sections.education or text),
            work_auth_status=section_parser.check_work_authorization(text),
            location=section_parser.extract_location(text),
        )


# ---------------------------------------------------------------------------
# LLM
# ---------------------------------------------------------------------------

GenerateFn = Callable[[str], Awaitable[str]]


class LLMFeatureExtractor(BaseFeatureExtractor):
    """Gemini-backed extractor.

    Skills, domains, years and level each come from their own prompt; the
    four calls run concurrently and a failed call leaves only its own
    dimension empty. Education, work authorization and location use the
    regex extractors, which are reliable for those signals.
    """

    name = "llm"

    def __init__(
        self,
        generate: GenerateFn | None = None,
        retries: int = 3,
        timeout: float = 30.0,
        base_delay: float = 1.0,
        exponential: bool = True,
    ) -> None:
        if generate is None:
            from services.gemini_client import generate_text
            generate = generate_text
        self._generate = generate
        self._call = with_retry(
            operation_name="llm_feature_extraction",
            retries=retries,
            timeout=timeout,
            base_delay=base_delay,
            exponential=exponential,
        )(self._call_model)

    async def _call_model(self, prompt: str, schema):
        raw = await self._generate(prompt)
        result = parse_llm_output(raw, schema)
        if isinstance(result, ParseFailure):
            raise LLMParseError(result.error, raw=result.raw)
        return result.value

    async def _extract_signals(self, skills_text: str, text: str):
        results = await asyncio.gather(
            self._call(build_skills_prompt(skills_text), SkillsOutput),
            self._call(build_domain_prompt(text), DomainOutput),
            self._call(build_years_prompt(text), YearsOutput),
            self._call(build_level_prompt(text), LevelOutput),
            return_exceptions=True,
        )
        labels = ("skills", "domains", "years", "level")
        signals = []
        for label, result in zip(labels, results):
            if isinstance(result, Exception):
                logger.warning("LLM %s extraction failed: %s", label, result)
                signals.append(None)
            else:
                signals.append(result)
        skills, domains, years, level = signals
        return (
            skills.skills if skills else [],
            domains.domains if domains else [],
            (years.min_years or None) if years else None,
            level.level if level else None,
        )

    async def extract_job_features(self, sections: JobSections) -> ExtractedJobFeatures:
        text = _job_primary_text(sections)
        skills, domains, years, level = await self._extract_signals(_job_skills_text(sections), text)

        return ExtractedJobFeatures(
            skills=split_job_skills(skills, sections) if skills else JobSkills(),
            domains=domains,
            years_required=years,
            level_required=level,
            education=section_parser.extract_education_level(text),
            work_auth_required=section_parser.check_work_authorization(sections.requirements or text),
            location=section_parser.extract_location(text),
        )

    async def extract_resume_features(self, sections: ResumeSections) -> ExtractedResumeFeatures:
        text = _resume_primary_text(sections)
        skills, domains, years, level = await self._extract_signals(text, text)

        return ExtractedResumeFeatures(
            skills=skills,
            domains=domains,
            years_of_experience=years,
            current_level=level,
            education=section_parser.extract_education_level(sections.education or text),
            work_auth_status=section_parser.check_work_authorization(text),
            location=section_parser.extract_location(text),
        )


def build_feature_extractor(settings) -> BaseFeatureExtractor:
    """Create the extractor selected by settings.extractor_mode.

    "auto" uses Gemini when an API key is configured, the heuristic
    extractor otherwise.
    """
    mode = (settings.extractor_mode or "auto").lower()
    if mode not in ("auto", "llm", "heuristic"):
        raise ValueError(f"Unknown extractor mode: {settings.extractor_mode}")

    if mode == "llm" or (mode == "auto" and settings.gemini_api_key):
        logger.info("Using LLM feature extractor (%s)", settings.gemini_model)
        return LLMFeatureExtractor(
            retries=settings.extractor_retries,
            timeout=settings.extractor_timeout_seconds,
            base_delay=settings.extractor_base_delay_seconds,
            exponential=settings.extractor_exponential_backoff,
        )

    logger.info("Using heuristic feature extractor")
    return HeuristicFeatureExtractor()
