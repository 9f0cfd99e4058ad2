"""Template-based explanation of a match score.

Rules engine only: every statement is derived from the similarity, feature
match and scoring outputs, nothing new is looked up.
"""

from pydantic import BaseModel

from models.schemas.explanation import KeyInsights, MatchExplanation, QuickSummary
from models.schemas.feature_match import FeatureMatchAnalysis
from models.schemas.features import ExtractedJobFeatures, ExtractedResumeFeatures
from models.schemas.scoring import ScoringResult
from models.schemas.similarity import SimilarityScores

MAX_STRENGTHS = 3
MAX_CONCERNS = 3
MAX_RECOMMENDATIONS = 4


class ExplanationContext(BaseModel):
    similarity: SimilarityScores
    features: FeatureMatchAnalysis
    job: ExtractedJobFeatures
    resume: ExtractedResumeFeatures
    scoring: ScoringResult


def _num(value: float | None) -> str:
    """Render 7.0 as "7" and 2.5 as "2.5"."""
    if value is None:
        return "unknown"
    return f"{value:g}"


def _pct(value: float) -> int:
    return round(value * 100)


def _plural(value: float) -> str:
    return "s" if value > 1 else ""


class ExplanationEngine:
    def generate_explanation(self, context: ExplanationContext) -> MatchExplanation:
        strengths = self._identify_strengths(context)
        concerns = self._identify_concerns(context)
        return MatchExplanation(
            strengths=strengths[:MAX_STRENGTHS],
            concerns=concerns[:MAX_CONCERNS],
            summary=self._build_summary(context),
            recommendations=self._build_recommendations(context)[:MAX_RECOMMENDATIONS],
            key_insights=self._build_key_insights(context, concerns),
        )

    def generate_batch_explanations(self, contexts: list[ExplanationContext]) -> list[MatchExplanation]:
        return [self.generate_explanation(c) for c in contexts]

    def generate_quick_summary(self, context: ExplanationContext) -> QuickSummary:
        """One-line view for list/dashboard display."""
        strengths = self._identify_strengths(context)
        concerns = self._identify_concerns(context)
        primary_strength = strengths[0] if strengths else "Basic qualification alignment"
        primary_concern = concerns[0] if concerns else "Minor gaps in requirements"
        return QuickSummary(
            score=context.scoring.final_score,
            one_line_reason=simplify_reason(primary_strength),
            top_gap=simplify_gap(primary_concern),
            confidence=context.scoring.confidence,
        )

    # -----------------------------------------------------------------------
    # Strength / concern catalogs
    # -----------------------------------------------------------------------

    def _identify_strengths(self, context: ExplanationContext) -> list[str]:
        """Strength statements ordered by magnitude of the supporting signal."""
        sem = context.similarity
        skills = context.features.skills_match
        exp = context.features.experience_match
        domain = context.features.domain_match
        level = context.features.level_match
        edu = context.features.education_match
        loc = context.features.location_match

        strengths: list[tuple[float, str]] = []

        if sem.overall_semantic > 0.7:
            strengths.append((sem.overall_semantic, (
                f"Strong alignment between resume content and job requirements "
                f"({_pct(sem.overall_semantic)}% semantic similarity)"
            )))
        if sem.requirements_match > 0.8:
            strengths.append((sem.requirements_match, (
                f"Excellent match with core job requirements "
                f"({_pct(sem.requirements_match)}% similarity)"
            )))

        required = context.job.skills.required
        matched_lower = {s.lower() for s in skills.matched_skills}
        matched_required = [s for s in required if s.lower() in matched_lower]
        if required and skills.coverage > 0.8:
            more = "..." if len(matched_required) > 3 else ""
            strengths.append((skills.coverage, (
                f"Excellent technical skills coverage ({len(matched_required)}/{len(required)} "
                f"required skills: {', '.join(matched_required[:3])}{more})"
            )))
        elif required and skills.coverage > 0.6:
            strengths.append((skills.coverage, (
                f"Good technical skills match ({_pct(skills.coverage)}% coverage with key skills: "
                f"{', '.join(matched_required[:2])})"
            )))

        if exp.score > 0.9:
            if exp.candidate_years and exp.required_years:
                if exp.candidate_years > exp.required_years:
                    strengths.append((exp.score, (
                        f"Exceeds experience requirements ({_num(exp.candidate_years)} years "
                        f"vs {_num(exp.required_years)} required)"
                    )))
                else:
                    strengths.append((exp.score, (
                        f"Perfect experience match ({_num(exp.candidate_years)} years meets "
                        f"{_num(exp.required_years)} year requirement)"
                    )))
        elif exp.score > 0.7 and exp.gap_severity == "minor":
            strengths.append((exp.score, (
                "Experience level is very close to requirements (small gap is manageable)"
            )))

        if domain.score > 0.8 and domain.matched_domains:
            strengths.append((domain.score, (
                f"Strong domain expertise alignment ({', '.join(domain.matched_domains)})"
            )))

        if level.score > 0.8 and level.required_level and level.candidate_level:
            if level.level_gap == 0:
                strengths.append((level.score, (
                    f"Perfect level match ({level.candidate_level} matches "
                    f"{level.required_level} requirement)"
                )))
            elif level.is_promotable:
                strengths.append((level.score, (
                    f"Good growth opportunity ({level.candidate_level} to "
                    f"{level.required_level} is a reasonable step up)"
                )))

        if edu.score > 0.9 and edu.meets_requirement and edu.candidate:
            requirement = f" for {edu.required} requirement" if edu.required else ""
            strengths.append((edu.score, f"Meets education requirements ({edu.candidate}{requirement})"))

        if loc.score == 1.0 and loc.meets_requirement:
            strengths.append((1.0, "Work authorization requirements met"))

        if sem.confidence == "high" and sem.overall_semantic > 0.5:
            strengths.append((sem.overall_semantic + 0.1, (
                "High-confidence semantic analysis indicates strong qualitative fit"
            )))

        n_additional = len(skills.additional_skills)
        if 5 < n_additional < 15:
            strengths.append((0.7, (
                f"Brings additional valuable skills beyond requirements "
                f"({', '.join(skills.additional_skills[:3])}...)"
            )))

        strengths.sort(key=lambda s: s[0], reverse=True)
        return [reason for _, reason in strengths]

    def _identify_concerns(self, context: ExplanationContext) -> list[str]:
        """Concern statements ordered by severity; gate failures rank highest."""
        sem = context.similarity
        skills = context.features.skills_match
        exp = context.features.experience_match
        domain = context.features.domain_match
        level = context.features.level_match
        gates = context.scoring.gate_results
        quality = context.scoring.quality_indicators

        concerns: list[tuple[int, str]] = []

        if not gates.overall_gates_passed:
            if not gates.skills_gate.passed:
                deficit = _pct(gates.skills_gate.threshold - gates.skills_gate.value)
                concerns.append((10, (
                    f"Critical skills gap: only {_pct(gates.skills_gate.value)}% of required "
                    f"skills covered (need {deficit}% more)"
                )))
            if not gates.location_gate.passed and gates.location_gate.required:
                concerns.append((10, "Work authorization requirement not met"))
            if not gates.experience_gate.passed:
                over = gates.experience_gate.value - gates.experience_gate.threshold
                concerns.append((9, (
                    f"Experience gap: candidate falls {_num(over)} year{_plural(over)} short "
                    f"of maximum acceptable range"
                )))
            if not gates.education_gate.passed and gates.education_gate.required:
                candidate = (
                    f", candidate has {gates.education_gate.value}"
                    if gates.education_gate.value else ", candidate education unclear"
                )
                concerns.append((8, (
                    f"Education requirement not met: {gates.education_gate.required} required{candidate}"
                )))

        if skills.missing_required:
            n_missing = len(skills.missing_required)
            more = f" and {n_missing - 4} more" if n_missing > 4 else ""
            concerns.append((8 if n_missing > 2 else 6, (
                f"Missing key technical skills: {', '.join(skills.missing_required[:4])}{more}"
            )))

        if exp.years_gap > 0:
            gap = exp.years_gap
            severity = 9 if gap > 5 else 7 if gap > 3 else 5
            concerns.append((severity, (
                f"Experience below requirement: {_num(gap)} year{_plural(gap)} less than "
                f"{_num(exp.required_years)} years required"
            )))

        if sem.overall_semantic < 0.3:
            concerns.append((7, (
                f"Low semantic similarity ({_pct(sem.overall_semantic)}%) suggests limited "
                f"alignment with job context"
            )))
        elif sem.overall_semantic < 0.5:
            concerns.append((5, (
                f"Moderate semantic alignment ({_pct(sem.overall_semantic)}%) - some job "
                f"context mismatch"
            )))

        if domain.score < 0.5 and context.job.domains:
            concerns.append((6, (
                f"Limited domain expertise match (candidate: {', '.join(domain.candidate_domains)} "
                f"vs required: {', '.join(domain.job_domains)})"
            )))

        if level.score < 0.5 and not level.is_promotable:
            concerns.append((7, (
                f"Significant level gap: {level.candidate_level or 'Unknown'} to "
                f"{level.required_level} may be too large a jump"
            )))

        if sem.confidence == "low":
            concerns.append((4, (
                "Analysis confidence is low due to limited or unclear resume/job information"
            )))

        if quality.data_completeness < 0.5:
            concerns.append((3, (
                "Incomplete profile data limits match accuracy - consider requesting more information"
            )))

        if quality.consistency_score < 0.5:
            concerns.append((5, (
                "Inconsistent signals between semantic analysis and structured data - review manually"
            )))

        if len(skills.additional_skills) > 25:
            concerns.append((4, (
                f"Resume may contain keyword stuffing ({len(skills.additional_skills)} additional "
                f"skills listed) - verify actual proficiency"
            )))

        concerns.sort(key=lambda c: c[0], reverse=True)
        return [reason for _, reason in concerns]

    # -----------------------------------------------------------------------
    # Summary, recommendations, insights
    # -----------------------------------------------------------------------

    def _build_summary(self, context: ExplanationContext) -> str:
        score = context.scoring.final_score

        if score >= 85:
            assessment = "Excellent match with strong alignment across technical skills and requirements."
        elif score >= 70:
            assessment = "Good match with solid technical foundation and manageable gaps."
        elif score >= 50:
            assessment = "Fair match with some alignment but notable gaps that need consideration."
        elif score >= 30:
            assessment = "Limited match with significant gaps in key requirements."
        else:
            assessment = "Poor match with major misalignment in core requirements."

        confidence = context.scoring.confidence
        if confidence == "high":
            note = "Analysis has high confidence based on complete data."
        elif confidence == "medium":
            note = "Analysis has moderate confidence - some data limitations."
        else:
            note = "Analysis has low confidence due to incomplete information."

        return f"{assessment} {note}"

    def _build_recommendations(self, context: ExplanationContext) -> list[str]:
        skills = context.features.skills_match
        exp = context.features.experience_match
        level = context.features.level_match
        domain = context.features.domain_match
        scoring = context.scoring
        gates = scoring.gate_results

        recs: list[str] = []

        if skills.missing_required:
            top_missing = skills.missing_required[:3]
            recs.append(f"Consider candidates with experience in: {', '.join(top_missing)}")
            if skills.coverage > 0.6:
                recs.append(f"Skills gap may be bridgeable with training in {top_missing[0]}")

        if 0 < exp.years_gap <= 2:
            recs.append("Consider if related experience or strong fundamentals could compensate for years gap")
        elif exp.years_gap > 2:
            recs.append("Significant experience gap - consider for more junior role or extensive training program")

        if level.is_promotable and level.level_gap > 0:
            recs.append(
                f"Good growth candidate: {level.candidate_level} with potential to grow into "
                f"{level.required_level} role"
            )

        if domain.score < 0.5 and context.job.domains:
            recs.append("Consider domain expertise gap - may need extended onboarding or mentoring")

        if scoring.quality_indicators.data_completeness < 0.7:
            recs.append("Request additional information to improve match accuracy")

        if not gates.overall_gates_passed:
            if not gates.skills_gate.passed:
                recs.append("Critical skills deficiency - not recommended without significant training investment")
            if not gates.location_gate.passed:
                recs.append("Work authorization must be resolved before proceeding")

        if scoring.final_score > 75:
            recs.append("Strong candidate - recommend moving to next stage")
            if len(skills.additional_skills) > 3:
                recs.append(f"Brings valuable additional skills: {', '.join(skills.additional_skills[:3])}")

        if 50 < scoring.final_score < 85:
            focus: list[str] = []
            if skills.missing_required:
                focus.append("technical skills depth")
            if exp.years_gap > 0:
                focus.append("relevant experience quality")
            if focus:
                recs.append(f"Interview should focus on: {' and '.join(focus)}")

        return recs

    def _build_key_insights(self, context: ExplanationContext, concerns: list[str]) -> KeyInsights:
        features = context.features
        areas = [
            ("Technical skills coverage", features.skills_match.coverage),
            ("Experience level match", features.experience_match.score),
            ("Domain expertise alignment", features.domain_match.score),
            ("Semantic content similarity", context.similarity.overall_semantic),
            ("Education requirements", features.education_match.score),
        ]
        strongest, best = "Overall qualification alignment", 0.0
        for name, score in areas:
            if score > best:
                strongest, best = name, score

        biggest_gap = extract_gap_type(concerns[0]) if concerns else "Minor alignment areas for optimization"

        score = context.scoring.final_score
        if score > 70:
            potential = "High potential for success with proper onboarding"
        elif score > 50 and features.experience_match.gap_severity != "major":
            potential = "Moderate potential with targeted skill development"
        elif features.skills_match.coverage > 0.4:
            potential = "Some potential if willing to invest in training and development"
        else:
            potential = "Limited growth potential in current role"

        return KeyInsights(
            strongest_match=strongest,
            biggest_gap=biggest_gap,
            improvement_potential=potential,
        )


# ---------------------------------------------------------------------------
# Phrase simplification
# ---------------------------------------------------------------------------

def simplify_reason(reason: str) -> str:
    """Short label for a strength statement."""
    lowered = reason.lower()
    if "technical skills" in lowered:
        return "Strong technical skills match"
    if "experience" in lowered and "exceeds" in lowered:
        return "Experience exceeds requirements"
    if "semantic" in lowered:
        return "Content aligns well with job"
    if "domain" in lowered:
        return "Relevant domain expertise"
    if "perfect" in lowered:
        return "Perfect requirement match"
    return reason.split("(")[0].strip()


def simplify_gap(gap: str) -> str:
    """Short label for a concern statement."""
    if "skills gap" in gap or "Missing key" in gap:
        return "Missing key skills"
    if "Experience below" in gap:
        return "Insufficient experience"
    if "Work authorization" in gap:
        return "Work auth required"
    if "Education requirement" in gap:
        return "Education requirement not met"
    if "semantic similarity" in gap:
        return "Limited job context alignment"
    return gap.split(":")[0]


def extract_gap_type(concern: str) -> str:
    """Category of a concern statement."""
    if "skills" in concern:
        return "Technical skills gaps"
    if "experience" in concern or "Experience" in concern:
        return "Experience level concerns"
    if "authorization" in concern:
        return "Work authorization requirements"
    if "education" in concern or "Education" in concern:
        return "Education requirements"
    if "semantic" in concern:
        return "Job context alignment"
    if "domain" in concern:
        return "Domain expertise gaps"
    return "Requirement alignment concerns"
