"""Job-resume matching orchestrator: wires all components together.

Flow:
    job_description + resume (text or pre-extracted features)
      ├─ MatchInput validation
      ├─ section_parser            → JobSections / ResumeSections
      ├─ in parallel:
      │     SimilarityEngine       → SimilarityScores
      │     job extractor          → ExtractedJobFeatures
      │     resume extractor       → ExtractedResumeFeatures (skipped when pre-extracted)
      ├─ feature_match             → FeatureMatchAnalysis
      ├─ HybridScoringEngine       → ScoringResult
      └─ ExplanationEngine         → MatchExplanation
                ↓
         MatchResult (or MatchError, never an exception)
"""

import asyncio
import logging
import time

from pydantic import ValidationError

from models.requests import MatchInput, MatchOptions, MatchPair, ResumeItem
from models.responses import (
    DataQuality,
    MatchError,
    MatchMetadata,
    MatchResult,
    MatcherStats,
    PerformanceStats,
    QuickScore,
    ResumeFeaturesResult,
)
from models.schemas.explanation import KeyInsights, MatchExplanation
from models.schemas.features import (
    ExtractedJobFeatures,
    ExtractedResumeFeatures,
    PreExtractedResumeFeatures,
)
from models.schemas.feature_match import FeatureMatchAnalysis
from models.schemas.scoring import ScoringConfig, ScoringResult
from models.schemas.sections import JobSections, ResumeSections
from models.schemas.similarity import SimilarityScores
from services.errors import InputValidationError, MatchingError, ScoringError
from services.explanation import ExplanationContext, ExplanationEngine
from services.feature_extractor import BaseFeatureExtractor
from services.feature_match import analyze_feature_match
from services.scoring_engine import HybridScoringEngine
from services.section_parser import parse_job_sections, parse_resume_sections
from services.similarity import SimilarityEngine

logger = logging.getLogger(__name__)

MATCH_FALLBACK_SCORE = 10
BATCH_FALLBACK_SCORE = 5
RESUME_BATCH_DELAY_SECONDS = 0.5

ResumeInput = str | PreExtractedResumeFeatures


def categorize_error(error: BaseException) -> str:
    """Classify a failure: matching errors carry their type, anything else
    is classified by keywords in its message."""
    if isinstance(error, MatchingError) and error.error_type != "unknown":
        return error.error_type
    message = str(error).lower()
    if "validation" in message or "schema" in message:
        return "validation"
    if "timeout" in message or "time" in message:
        return "timeout"
    if "model" in message or "embedding" in message or "llm" in message:
        return "model"
    if "processing" in message or "calculation" in message:
        return "processing"
    return "unknown"


def _skipped_explanation() -> MatchExplanation:
    return MatchExplanation(
        summary="Explanation generation skipped",
        key_insights=KeyInsights(
            strongest_match="N/A",
            biggest_gap="N/A",
            improvement_potential="N/A",
        ),
    )


def _resume_length(resume: ResumeInput | None) -> int:
    if isinstance(resume, PreExtractedResumeFeatures):
        return len(resume.raw_sections.raw_text) if resume.raw_sections else 0
    return len(resume or "")


def _validate_input(
    job_description: str,
    resume: ResumeInput,
    options: MatchOptions | dict | None = None,
) -> MatchInput:
    try:
        return MatchInput(
            job_description=job_description,
            resume_content=resume if isinstance(resume, str) else None,
            resume_features=resume if isinstance(resume, PreExtractedResumeFeatures) else None,
            options=options if options is not None else MatchOptions(),
        )
    except ValidationError as e:
        first = e.errors()[0]
        raise InputValidationError(first["msg"].removeprefix("Value error, ")) from e


class MatchingOrchestrator:
    def __init__(
        self,
        similarity_engine: SimilarityEngine,
        job_extractor: BaseFeatureExtractor,
        resume_extractor: BaseFeatureExtractor,
        scoring_engine: HybridScoringEngine | None = None,
        explanation_engine: ExplanationEngine | None = None,
        batch_size: int = 3,
        batch_delay_seconds: float = 1.0,
        resume_batch_delay_seconds: float = RESUME_BATCH_DELAY_SECONDS,
    ) -> None:
        self.similarity_engine = similarity_engine
        self.job_extractor = job_extractor
        self.resume_extractor = resume_extractor
        self.scoring_engine = scoring_engine or HybridScoringEngine()
        self.explanation_engine = explanation_engine or ExplanationEngine()
        self.batch_size = max(1, batch_size)
        self.batch_delay_seconds = batch_delay_seconds
        self.resume_batch_delay_seconds = resume_batch_delay_seconds

        self._total_matches = 0
        self._failed_matches = 0
        self._total_processing_ms = 0

    # -----------------------------------------------------------------------
    # Single match
    # -----------------------------------------------------------------------

    async def analyze_match(
        self,
        job_description: str,
        resume: ResumeInput,
        options: MatchOptions | dict | None = None,
    ) -> MatchResult | MatchError:
        """Score one job/resume pair. Never raises: failures become MatchError."""
        start = time.perf_counter()
        try:
            validated = _validate_input(job_description, resume, options)
            opts = validated.options

            logger.info(
                "Matching job (%d chars) against resume (%s)",
                len(validated.job_description),
                "pre-extracted" if validated.resume_features else f"{len(validated.resume_content)} chars",
            )

            job_sections, resume_sections, job_features, resume_features, similarity = await self._analyze_inputs(
                validated.job_description,
                validated.resume_features or validated.resume_content,
            )
            features = analyze_feature_match(job_features, resume_features)

            self._apply_options(opts)
            scoring = self._score(similarity, features, job_features, resume_features)

            if opts.include_explanation:
                explanation = self.explanation_engine.generate_explanation(ExplanationContext(
                    similarity=similarity,
                    features=features,
                    job=job_features,
                    resume=resume_features,
                    scoring=scoring,
                ))
            else:
                explanation = _skipped_explanation()

            processing_ms = int((time.perf_counter() - start) * 1000)
            result = MatchResult(
                final_score=scoring.final_score,
                confidence=scoring.confidence,
                semantic_analysis=similarity,
                skills_match=features.skills_match,
                domain_match=features.domain_match,
                experience_match=features.experience_match,
                level_match=features.level_match,
                education_match=features.education_match,
                location_match=features.location_match,
                scoring_breakdown=scoring.breakdown,
                gate_results=scoring.gate_results,
                quality_indicators=scoring.quality_indicators,
                explanation=explanation,
                metadata=MatchMetadata(
                    processing_time_ms=processing_ms,
                    model_versions=self._model_versions(),
                    data_quality=DataQuality(
                        job_text_length=len(validated.job_description),
                        resume_text_length=_resume_length(validated.resume_features or validated.resume_content),
                        sections_extracted=job_sections.count_extracted() + resume_sections.count_extracted(),
                        used_pre_extracted_features=validated.resume_features is not None,
                    ),
                ),
            )
            self._record(processing_ms, failed=False)
            logger.info("Match completed in %dms with score %d", processing_ms, result.final_score)
            return result

        except Exception as e:
            processing_ms = int((time.perf_counter() - start) * 1000)
            self._record(processing_ms, failed=True)
            logger.error("Job-resume matching failed: %s", e, exc_info=True)
            return MatchError(
                error=str(e) or type(e).__name__,
                error_type=categorize_error(e),
                details=(
                    f"processing_time_ms={processing_ms} "
                    f"job_length={len(job_description or '')} "
                    f"resume_length={_resume_length(resume)}"
                ),
                fallback_score=MATCH_FALLBACK_SCORE,
            )

    async def _analyze_inputs(
        self, job_description: str, resume: ResumeInput
    ) -> tuple[JobSections, ResumeSections, ExtractedJobFeatures, ExtractedResumeFeatures, SimilarityScores]:
        """Segment both documents, then run similarity and extraction concurrently."""
        job_sections = parse_job_sections(job_description)

        if isinstance(resume, PreExtractedResumeFeatures):
            resume_sections = resume.raw_sections or ResumeSections()
            resume_features = ExtractedResumeFeatures.model_validate(
                resume.model_dump(exclude={"raw_sections"})
            )
            similarity, job_features = await asyncio.gather(
                self.similarity_engine.calculate_similarity(job_sections, resume_sections),
                self._extract_job(job_sections),
            )
        else:
            resume_sections = parse_resume_sections(resume)
            similarity, job_features, resume_features = await asyncio.gather(
                self.similarity_engine.calculate_similarity(job_sections, resume_sections),
                self._extract_job(job_sections),
                self._extract_resume(resume_sections),
            )

        return job_sections, resume_sections, job_features, resume_features, similarity

    def _apply_options(self, opts: MatchOptions) -> None:
        """Merge per-request weights / gates / strict_mode into the scoring config (retained)."""
        if opts.custom_weights or opts.custom_gates or opts.strict_mode:
            self.scoring_engine.update_config(
                weights=opts.custom_weights.model_dump(exclude_none=True) if opts.custom_weights else None,
                gates=opts.custom_gates.model_dump(exclude_none=True) if opts.custom_gates else None,
                strict_mode=opts.strict_mode,
            )

    def _score(
        self,
        similarity: SimilarityScores,
        features: FeatureMatchAnalysis,
        job_features: ExtractedJobFeatures,
        resume_features: ExtractedResumeFeatures,
    ) -> ScoringResult:
        try:
            return self.scoring_engine.calculate_score(similarity, features, job_features, resume_features)
        except Exception as e:
            raise ScoringError(str(e)) from e

    async def _extract_job(self, sections: JobSections) -> ExtractedJobFeatures:
        try:
            return await self.job_extractor.extract_job_features(sections)
        except Exception as e:
            logger.warning("Job feature extraction failed, using empty features: %s", e)
            return ExtractedJobFeatures()

    async def _extract_resume(self, sections: ResumeSections) -> ExtractedResumeFeatures:
        try:
            return await self.resume_extractor.extract_resume_features(sections)
        except Exception as e:
            logger.warning("Resume feature extraction failed, using empty features: %s", e)
            return ExtractedResumeFeatures()

    # -----------------------------------------------------------------------
    # Batch / quick
    # -----------------------------------------------------------------------

    async def analyze_batch_matches(self, pairs: list[MatchPair]) -> list[MatchResult | MatchError]:
        """Analyze pairs in groups of batch_size, pausing between groups.

        Output has the same length and order as the input; one failing pair
        never affects the others.
        """
        results: list[MatchResult | MatchError] = []
        total_groups = (len(pairs) + self.batch_size - 1) // self.batch_size
        logger.info("Starting batch analysis of %d pairs", len(pairs))

        for i in range(0, len(pairs), self.batch_size):
            group = pairs[i:i + self.batch_size]
            logger.info("Processing batch %d/%d", i // self.batch_size + 1, total_groups)

            outcomes = await asyncio.gather(
                *(self.analyze_match(p.job_description, self._pair_resume(p), p.options) for p in group),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    results.append(MatchError(
                        error=str(outcome) or "Batch processing failed",
                        error_type="processing",
                        fallback_score=BATCH_FALLBACK_SCORE,
                    ))
                else:
                    results.append(outcome)

            if i + self.batch_size < len(pairs) and self.batch_delay_seconds > 0:
                await asyncio.sleep(self.batch_delay_seconds)

        logger.info("Batch analysis completed: %d results", len(results))
        return results

    async def get_quick_scores(self, pairs: list[MatchPair]) -> list[QuickScore]:
        """Score and one-line-summarize each pair without a full explanation."""
        results: list[QuickScore] = []
        for pair in pairs:
            try:
                results.append(await self._quick_score(pair))
            except Exception as e:
                logger.error("Quick score calculation failed: %s", e)
                results.append(QuickScore(
                    score=BATCH_FALLBACK_SCORE,
                    confidence="low",
                    reason="Analysis failed",
                    gap="Unable to process",
                ))
        return results

    async def _quick_score(self, pair: MatchPair) -> QuickScore:
        resume = self._pair_resume(pair)
        validated = _validate_input(pair.job_description, resume, pair.options)
        _, _, job_features, resume_features, similarity = await self._analyze_inputs(
            validated.job_description,
            validated.resume_features or validated.resume_content,
        )
        features = analyze_feature_match(job_features, resume_features)
        self._apply_options(validated.options)
        scoring = self._score(similarity, features, job_features, resume_features)
        summary = self.explanation_engine.generate_quick_summary(ExplanationContext(
            similarity=similarity,
            features=features,
            job=job_features,
            resume=resume_features,
            scoring=scoring,
        ))
        return QuickScore(
            score=summary.score,
            confidence=summary.confidence,
            reason=summary.one_line_reason,
            gap=summary.top_gap,
        )

    @staticmethod
    def _pair_resume(pair: MatchPair) -> ResumeInput:
        if pair.resume_features is not None:
            return pair.resume_features
        return pair.resume_text or ""

    # -----------------------------------------------------------------------
    # Resume pre-extraction
    # -----------------------------------------------------------------------

    async def extract_resume_features(
        self, resume_text: str, include_raw_sections: bool = True
    ) -> PreExtractedResumeFeatures:
        """Extract resume features once for reuse against many job postings."""
        sections = parse_resume_sections(resume_text)
        extracted = await self.resume_extractor.extract_resume_features(sections)
        features = PreExtractedResumeFeatures(
            **extracted.model_dump(),
            raw_sections=sections if include_raw_sections else None,
        )
        logger.info(
            "Resume features extracted: %d skills, %d domains, years=%s, level=%s",
            len(features.skills), len(features.domains),
            features.years_of_experience, features.current_level,
        )
        return features

    async def extract_batch_resume_features(
        self, resumes: list[ResumeItem], include_raw_sections: bool = True
    ) -> list[ResumeFeaturesResult]:
        """Extract many resumes sequentially; a failed resume gets empty features."""
        results: list[ResumeFeaturesResult] = []
        for index, item in enumerate(resumes):
            try:
                features = await self.extract_resume_features(item.resume_text, include_raw_sections)
            except Exception as e:
                logger.warning("Failed to extract features for resume %s: %s", item.id, e)
                features = PreExtractedResumeFeatures()
            results.append(ResumeFeaturesResult(id=item.id, features=features))

            if index < len(resumes) - 1 and self.resume_batch_delay_seconds > 0:
                await asyncio.sleep(self.resume_batch_delay_seconds)
        return results

    # -----------------------------------------------------------------------
    # Config / cache / stats
    # -----------------------------------------------------------------------

    def update_scoring_config(self, **overrides) -> None:
        self.scoring_engine.update_config(**overrides)

    def get_scoring_config(self) -> ScoringConfig:
        return self.scoring_engine.get_config()

    def clear_cache(self) -> None:
        self.similarity_engine.clear_cache()

    def get_stats(self) -> MatcherStats:
        average = self._total_processing_ms / self._total_matches if self._total_matches else 0.0
        return MatcherStats(
            cache=self.similarity_engine.get_cache_stats(),
            performance=PerformanceStats(
                total_matches=self._total_matches,
                failed_matches=self._failed_matches,
                average_processing_time_ms=round(average, 1),
            ),
        )

    def _record(self, processing_ms: int, failed: bool) -> None:
        self._total_matches += 1
        self._total_processing_ms += processing_ms
        if failed:
            self._failed_matches += 1

    def _model_versions(self) -> dict[str, str]:
        return {
            "embedding": self.similarity_engine.model_name,
            "job_extraction": self.job_extractor.name,
            "resume_extraction": self.resume_extractor.name,
        }
